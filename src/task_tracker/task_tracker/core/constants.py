"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TOKEN_TTL_MINUTES = 60
DEFAULT_RETENTION_DAYS = 7
DEFAULT_CLEANUP_INTERVAL_SECONDS = 60 * 60
DEFAULT_PRIORITY = "medium"

DEFAULT_POOL_SIZE = 20
DEFAULT_POOL_TIMEOUT_SECONDS = 5
DEFAULT_CONNECT_TIMEOUT_SECONDS = 5

DEFAULT_SSE_KEEPALIVE_SECONDS = 15
DEFAULT_SSE_QUEUE_SIZE = 100

import os

SECRET_KEY = "test-secret-key-for-signing-tokens-0123456789"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", "root"),
    "database": os.getenv("DB_NAME", "taskmanager_test"),
}

DB_POOL_SIZE = 2
DB_POOL_TIMEOUT = 1
DB_CONNECT_TIMEOUT = 2

TOKEN_TTL_MINUTES = 60

TASK_RETENTION_DAYS = 7
CLEANUP_INTERVAL_SECONDS = 3600
CLEANUP_ENABLED = False

SSE_KEEPALIVE_SECONDS = 0.05
SSE_QUEUE_SIZE = 10

LOG_LEVEL = "DEBUG"
DEBUG = False
TESTING = True

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

SEED_ADMIN_NAME = "Admin"
SEED_ADMIN_EMAIL = "admin@example.com"
SEED_ADMIN_PASSWORD = "admin123"

import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key-change-me-0123456789")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", "root"),
    "database": os.getenv("DB_NAME", "taskmanager"),
}

DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "20"))
DB_POOL_TIMEOUT = float(os.getenv("DB_POOL_TIMEOUT", "5"))
DB_CONNECT_TIMEOUT = int(os.getenv("DB_CONNECT_TIMEOUT", "5"))

TOKEN_TTL_MINUTES = int(os.getenv("TOKEN_TTL_MINUTES", "60"))

TASK_RETENTION_DAYS = int(os.getenv("TASK_RETENTION_DAYS", "7"))
CLEANUP_INTERVAL_SECONDS = int(os.getenv("CLEANUP_INTERVAL_SECONDS", "3600"))
CLEANUP_ENABLED = bool(int(os.getenv("CLEANUP_ENABLED", "1")))

SSE_KEEPALIVE_SECONDS = float(os.getenv("SSE_KEEPALIVE_SECONDS", "15"))
SSE_QUEUE_SIZE = int(os.getenv("SSE_QUEUE_SIZE", "100"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also upsert the seed admin on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "1")))

SEED_ADMIN_NAME = os.getenv("SEED_ADMIN_NAME", "Admin")
SEED_ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@example.com")
SEED_ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "admin123")

import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timekeeper_db"),
    "connection_timeout": int(os.getenv("DB_CONNECT_TIMEOUT", "10")),
    "lock_wait_timeout": int(os.getenv("DB_LOCK_WAIT_TIMEOUT", "10")),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Fixed offset used to bucket instants into civil days
UTC_OFFSET = os.getenv("UTC_OFFSET", "+08:00")

# Empty key -> notifications are only logged
NOVU_API_KEY = os.getenv("NOVU_API_KEY", "")
NOVU_BASE_URL = os.getenv("NOVU_BASE_URL", "https://api.novu.co")
NOTIFY_TIMEOUT = float(os.getenv("NOTIFY_TIMEOUT", "10"))

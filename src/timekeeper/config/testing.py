import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timekeeper_test"),
    "connection_timeout": 5,
    "lock_wait_timeout": 5,
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

UTC_OFFSET = "+08:00"

NOVU_API_KEY = ""
NOVU_BASE_URL = "https://api.novu.co"
NOTIFY_TIMEOUT = 1.0

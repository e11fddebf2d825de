import os

SECRET_KEY = "test-secret"

DATA_DIR = os.getenv("DATA_DIR", "data/test")

STORAGE_BACKEND = "json"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "presence_ledger_test"),
}

LOG_LEVEL = "WARNING"
LOG_FILE = None

ADMIN_DEFAULT_PASSWORD = "admin123"

CUTOFF_HOUR = 17
EOD_HOUR = 23
EOD_MINUTE = 59
AFTER_CUTOFF_MINUTES = 60

PENDING_DEADLINE_HOUR = 17

DEBUG = False
TESTING = True

AUTO_INIT_DB = False

import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DATA_DIR = os.getenv("DATA_DIR", "data")

# json | mysql
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "json")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "presence_ledger"),
}

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_FILE = os.getenv("LOG_FILE", "data/logs/app.log")

ADMIN_DEFAULT_PASSWORD = os.getenv("ADMIN_DEFAULT_PASSWORD", "admin123")

# Auto-close defaults (hybrid policy)
CUTOFF_HOUR = int(os.getenv("CUTOFF_HOUR", "17"))
EOD_HOUR = int(os.getenv("EOD_HOUR", "23"))
EOD_MINUTE = int(os.getenv("EOD_MINUTE", "59"))
AFTER_CUTOFF_MINUTES = int(os.getenv("AFTER_CUTOFF_MINUTES", "60"))

PENDING_DEADLINE_HOUR = int(os.getenv("PENDING_DEADLINE_HOUR", "17"))

DEBUG = True

# If enabled with the mysql backend, tables are created on startup (CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

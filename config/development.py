import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "fieldops_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

# Empty SMTP_HOST: notifications are only written to the log
SMTP_HOST = os.getenv("SMTP_HOST", "")
SMTP_PORT = int(os.getenv("SMTP_PORT", "465"))
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
SMTP_USE_SSL = bool(int(os.getenv("SMTP_USE_SSL", "1")))
MAIL_FROM = os.getenv("MAIL_FROM", "")
NOTIFICATION_INBOX = os.getenv("NOTIFICATION_INBOX", "")
APP_BASE_URL = os.getenv("APP_BASE_URL", "http://localhost:5000")

# "project": driver days count over the whole project; "range": same window as workers
DRIVER_DAYS_SCOPE = os.getenv("DRIVER_DAYS_SCOPE", "project")

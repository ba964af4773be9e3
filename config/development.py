import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "campus_attendance"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# Day boundaries for "today's record" are computed in this zone
TIMEZONE = os.getenv("TIMEZONE", "Asia/Colombo")
DEFAULT_SCAN_LOCATION = os.getenv("DEFAULT_SCAN_LOCATION", "Main Entrance")
MAX_WRITE_RETRIES = int(os.getenv("MAX_WRITE_RETRIES", "3"))
AUTO_CHECKOUT_TIME = os.getenv("AUTO_CHECKOUT_TIME", "18:30")

# Secret mixed into the QR secure hash
QR_SECRET = os.getenv("QR_SECRET", "qrattend-secret")

# console | whatsapp | none
NOTIFIER = os.getenv("NOTIFIER", "console")
WHATSAPP_API_URL = os.getenv("WHATSAPP_API_URL", "")
WHATSAPP_API_TOKEN = os.getenv("WHATSAPP_API_TOKEN", "")
WHATSAPP_TIMEOUT = float(os.getenv("WHATSAPP_TIMEOUT", "10"))

import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "campus_attendance"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

TIMEZONE = os.getenv("TIMEZONE", "Asia/Colombo")
DEFAULT_SCAN_LOCATION = os.getenv("DEFAULT_SCAN_LOCATION", "Main Entrance")
MAX_WRITE_RETRIES = int(os.getenv("MAX_WRITE_RETRIES", "3"))
AUTO_CHECKOUT_TIME = os.getenv("AUTO_CHECKOUT_TIME", "18:30")

QR_SECRET = os.getenv("QR_SECRET", "please-set-QR_SECRET")

NOTIFIER = os.getenv("NOTIFIER", "whatsapp")
WHATSAPP_API_URL = os.getenv("WHATSAPP_API_URL", "")
WHATSAPP_API_TOKEN = os.getenv("WHATSAPP_API_TOKEN", "")
WHATSAPP_TIMEOUT = float(os.getenv("WHATSAPP_TIMEOUT", "10"))

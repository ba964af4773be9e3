import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "campus_attendance_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

TIMEZONE = "Asia/Colombo"
DEFAULT_SCAN_LOCATION = "Main Entrance"
MAX_WRITE_RETRIES = 3
AUTO_CHECKOUT_TIME = "18:30"

QR_SECRET = "test-qr-secret"

NOTIFIER = "none"
WHATSAPP_API_URL = ""
WHATSAPP_API_TOKEN = ""
WHATSAPP_TIMEOUT = 1.0

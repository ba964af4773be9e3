"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TIMEZONE = "Asia/Colombo"
DEFAULT_SCAN_LOCATION = "Main Entrance"
DEFAULT_MAX_WRITE_RETRIES = 3
DEFAULT_AUTO_CHECKOUT_TIME = "18:30"
DEFAULT_TREND_DAYS = 7
DEFAULT_TOP_ATTENDERS = 5

ADMIN_DEVICE_INFO = "Manual entry by admin"
ADMIN_SCAN_LOCATION = "Admin Portal"
AUTO_CHECKOUT_DEVICE_INFO = "Auto checkout system"
AUTO_CHECKOUT_SCAN_LOCATION = "Auto Checkout"
UNKNOWN_DEVICE = "Unknown Device"

QR_HASH_LENGTH = 16

# Column widths in attendance_records
MAX_SCAN_LOCATION_LENGTH = 255
MAX_DEVICE_INFO_LENGTH = 512

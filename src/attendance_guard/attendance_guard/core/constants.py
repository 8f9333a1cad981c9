"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_DEVICE_ID_HEADER = "X-Device-Id"
DEFAULT_ALLOWLIST_REFRESH_SECONDS = 30
DEFAULT_APPROVED_DEVICE_LABEL = "approved device"
DEFAULT_ADMIN_DEVICE_LABEL = "admin device"
COMPANY_ALLOWLIST_SETTING_KEY = "company_allowed_ips"
MAX_DEVICE_ID_LENGTH = 255
MAX_LABEL_LENGTH = 120

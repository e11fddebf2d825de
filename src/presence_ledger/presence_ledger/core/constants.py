"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_CUTOFF_HOUR = 17
DEFAULT_EOD_HOUR = 23
DEFAULT_EOD_MINUTE = 59
DEFAULT_AFTER_CUTOFF_MINUTES = 60

DEFAULT_PENDING_DEADLINE_HOUR = 17

IDENTITY_ID_LENGTH = 8

IDENTITY_SENSITIVE_FIELDS = ("display_name", "email")
EVENT_SENSITIVE_FIELDS = ("display_name",)
PENDING_SENSITIVE_FIELDS = ("display_name", "email")

ENCRYPTED_MARKER_SUFFIX = "_encrypted"
KEY_DERIVATION_SALT = b"presence-ledger-field-cipher"
KEY_DERIVATION_ITERATIONS = 100_000

DEFAULT_ADMIN_PASSWORD = "admin123"

LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5

UNKNOWN_DISPLAY_NAME = "Unknown"

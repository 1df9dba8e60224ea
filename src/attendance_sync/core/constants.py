"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

BREAK_SLOTS = 3
REMOTE_SLOTS = 4

DEFAULT_OVERLAP_SECONDS = 10
DEFAULT_CURSOR_LOOKBACK_MINUTES = 2

DEVICE_PAGE_SIZE = 1000
CLOCKIFY_PAGE_SIZE = 100

PUNCH_KEY_SEPARATOR = "_"

TIME_OF_DAY_FORMAT = "%I:%M %p"
LEDGER_DATE_FORMAT = "%B %d, %Y"
DEVICE_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

DEFAULT_SHEET_NAME = "Attendance"
REMOTE_LABEL_PREFIX = "\U0001F3E0 "

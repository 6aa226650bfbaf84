"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_ACCESS_TOKEN_MINUTES = 24 * 60
DEFAULT_REFRESH_TOKEN_DAYS = 7
DEFAULT_RESET_TOKEN_MINUTES = 60

MIN_PASSWORD_LENGTH = 8
MIN_FULL_NAME_LENGTH = 2
MAX_FULL_NAME_LENGTH = 255

TEAM_CODE_LENGTH = 6
TEAM_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"

DEFAULT_ACTIVITY_LIMIT = 50
DEFAULT_NOTIFICATION_PAGE_SIZE = 20
DASHBOARD_SESSION_LIMIT = 5

# Clock events older than this are treated as backfill and do not notify leaders.
CLOCK_NOTIFY_WINDOW_MINUTES = 10

SLOW_REQUEST_MS = 50

# Events this far before the window start are replayed so open sessions are counted.
DASHBOARD_LOOKBACK_DAYS = 1
DASHBOARD_ACTIVITY_DAYS = 30

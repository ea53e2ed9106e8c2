"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TOKEN_DAYS = 7
MAX_LOGIN_ATTEMPTS = 5
LOCK_HOURS = 2

RED_FLAG_DISABLE_THRESHOLD = 3
FLAGGED_MANAGER_MIN_FLAGS = 2

MIN_SERVICE_YEARS = 19
OVERDUE_DAYS = 3
MAX_ESCALATION_LEVEL = 3
RECENT_COMPLAINTS_LIMIT = 5

DEFAULT_SELF_PING_SECONDS = 5 * 60

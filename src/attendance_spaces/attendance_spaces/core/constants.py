"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

SPACE_CODE_PREFIX = "TEND-"
SPACE_CODE_LENGTH = 5
SPACE_CODE_MAX_ATTEMPTS = 5

USER_CODE_PREFIX = "USER-"

FIXED_FIELD_NAME = "name"
FIXED_FIELD_EMAIL = "email"

DEFAULT_DB_TIMEOUT_SECONDS = 10
DEFAULT_RECORDS_LIMIT = 500

COMMUNITY_CODE_PREFIX = "COMM-"
COMMUNITY_CODE_DIGITS = 5
DEFAULT_NOTIFICATIONS_LIMIT = 100

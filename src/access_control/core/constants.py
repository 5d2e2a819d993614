"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_DUPLICATE_THRESHOLD = 80.0
DEFAULT_KEEPALIVE_SECONDS = 30
DEFAULT_PAGE_LIMIT = 100
DEFAULT_PROFILE_PAGE_LIMIT = 50
TOP_DENIED_LIMIT = 10
UNKNOWN_VALUE = "UNKNOWN"

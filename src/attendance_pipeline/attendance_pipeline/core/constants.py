"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_CONFIDENCE_THRESHOLD = 0.93
DEFAULT_LIVENESS_THRESHOLD = 0.80
DEFAULT_QUALITY_THRESHOLD = 0.75

LEADERBOARD_LIMIT = 50
CONSISTENCY_WINDOW = 10

TIMEFRAME_DAYS = {
    "week": 7,
    "month": 30,
    "semester": 120,
}

DEFAULT_LIST_LIMIT = 50

EMAIL_CHANNEL = "email"

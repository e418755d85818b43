"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

DEFAULT_CLASS_START_TIME = time(16, 0)
DEFAULT_LATE_GRACE_MINUTES = 15
DEFAULT_FANOUT_WORKERS = 1
DEFAULT_INBOX_LIMIT = 100

# Checked top to bottom against the rounded percentage.
GRADE_BOUNDARIES = (
    (90, "A+"),
    (80, "A"),
    (70, "B+"),
    (60, "B"),
    (50, "C+"),
    (40, "C"),
)
FAILING_GRADE = "F"

TREND_MIN_SAMPLES = 3
TREND_BAND_POINTS = 5
RECENT_GRADES_WINDOW = 5

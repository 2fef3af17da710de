"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

DEFAULT_LATE_CUTOFF = time(9, 0)
DEFAULT_HALF_DAY_THRESHOLD_HOURS = 4
DEFAULT_STANDARD_WORK_HOURS = 8
MAX_WORK_HOURS = 24
DEFAULT_DIRECTORY_TIMEOUT_SECONDS = 5.0

KPI_EXCELLENT_MIN = 90
KPI_GOOD_MIN = 80
KPI_AVERAGE_MIN = 70
KPI_BELOW_AVERAGE_MIN = 60

MS_PER_DAY = 86_400_000

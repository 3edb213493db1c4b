"""Shared application constants.

Centralizes values used across the goal, stats and sync logic so we can
document and adjust them in one place.
"""

# Key (and file stem) of the local state cache blob
STORAGE_KEY = "habit_tracker_v1"

# Goal periods, in the order they are checked when deriving a yearly goal
GOAL_PERIODS = ("daily", "weekly", "monthly", "yearly")

# Approximate multipliers for turning a single-period goal into a yearly one.
# Pacing only needs to be directionally right, so these are not calendar exact.
DAYS_PER_YEAR = 365
WEEKS_PER_YEAR = 52
MONTHS_PER_YEAR = 12

# Highest number of decimals a number habit will display
MAX_DECIMALS = 6

# Unit used for number habits created without one
DEFAULT_UNIT = "value"

# Window for the "average over the last N days" stat
LAST_N_DAYS = 7

# How many logged dates the public view lists
PUBLIC_RECENT_DATES = 30

# Bytes of randomness in a share token (hex encoded -> 32 chars)
SHARE_TOKEN_BYTES = 16

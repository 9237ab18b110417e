"""
Central configuration for the flowlens engine.

Data path resolution lives in flowlens.workspace.Workspace. Everything here is a
plain constant so the engine stays deterministic; callers that need a different
week start pass it explicitly to the functions that take `week_starts_on`.
"""

import calendar

# Weeks start on Monday (datetime.weekday() numbering)
WEEK_STARTS_ON = calendar.MONDAY

# "All time" ranges start at the beginning of this year
ALL_TIME_EPOCH_YEAR = 2000

# Sane bounds for user-entered years in by-month / by-year pickers
MIN_YEAR = 1970
MAX_YEAR = 2100

# Title given to transactions saved without one
UNTITLED_PLACEHOLDER = "Untitled Transaction"

# Upper bound on occurrences materialized in a single projection
DEFAULT_MAX_OCCURRENCES = 500

DEFAULT_CURRENCY = "USD"

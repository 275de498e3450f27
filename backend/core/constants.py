"""
Core constants — **Single Source of Truth** for project-wide magic numbers.

Any business rule that references a numeric constant should import it
from here instead of hardcoding.  This avoids drift between apps that
use the same value.
"""

# ── Reporter quotas ─────────────────────────────────────────────────
# Maximum number of active reporters in one (designation, level,
# location) bucket when the tenant has no limits configured, or when
# no rule and no ``defaultMax`` apply.
DEFAULT_REPORTER_MAX: int = 1

# ── Identity ────────────────────────────────────────────────────────
# Minimum number of digits accepted for a mobile number.
MIN_MOBILE_DIGITS: int = 10

# Longest mobile number the identity store can hold (the width of
# ``User.mobile_number``).
MAX_MOBILE_DIGITS: int = 15

# A newly provisioned user's initial MPIN is the last N digits of the
# mobile number.
INITIAL_MPIN_LENGTH: int = 4

# ── Reporter onboarding ─────────────────────────────────────────────
# Upper bound for a manual-login window, in days.
MAX_MANUAL_LOGIN_DAYS: int = 3650

"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_MAX_OVERTIME_HOURS = 5.0
DEFAULT_MAX_OVERTIME_HOURS_24 = 20.0

DEFAULT_MEAL_ALLOWANCE = 1500.0
DEFAULT_BASIC_BONUS = 2000.0
DEFAULT_BONUS_PERCENTAGE = 50.0
DEFAULT_MEAL_DEDUCTION_PER_DAY = 50.0

DAYS_IN_PAYROLL_MONTH = 30
ALLOWED_OVERTIME_MULTIPLIERS = (1.0, 1.5, 2.0)

# Day shifts: a punch up to this many hours after the shift start is a check-in.
CHECKIN_WINDOW_HOURS = 2
# Deducted-hours values at or above this are treated as bad data in reports.
IMPLAUSIBLE_DEDUCTED_HOURS = 100

# Weekday numbering used by shifts: 0 = Sunday ... 6 = Saturday.
FRIDAY = 5

LEAVE_ALLOWANCE_OVERTIME_FACTOR = 2
MIN_PASSWORD_LENGTH = 6

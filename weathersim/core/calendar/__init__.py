from weathersim.core.calendar.dates import (
    DayType,
    WeekDay,
    day_of_week,
    day_of_year,
    is_leap_year,
    to_gregorian,
    to_julian,
    valid_month_day,
)
from weathersim.core.calendar.resolver import (
    RolloverPolicy,
    reset_weekdays_by_month,
    resolve_dst,
    resolve_special_days,
    weekdays_by_month,
)

__all__ = [
    "DayType",
    "WeekDay",
    "day_of_week",
    "day_of_year",
    "is_leap_year",
    "to_gregorian",
    "to_julian",
    "valid_month_day",
    "RolloverPolicy",
    "reset_weekdays_by_month",
    "resolve_dst",
    "resolve_special_days",
    "weekdays_by_month",
]

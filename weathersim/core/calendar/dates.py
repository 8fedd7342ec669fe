"""Pure date arithmetic: Julian day numbers, weekdays and day-of-year tables."""

from enum import IntEnum
from typing import Tuple

MIN_GREGORIAN_YEAR = 1583

# Cumulative day count at the end of each month, non-leap year.
END_DAY_OF_MONTH = (31, 59, 90, 120, 151, 181, 212, 243, 273, 304, 334, 365)
DAYS_IN_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)

MONTH_NAMES = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)


class WeekDay(IntEnum):
    SUNDAY = 1
    MONDAY = 2
    TUESDAY = 3
    WEDNESDAY = 4
    THURSDAY = 5
    FRIDAY = 6
    SATURDAY = 7

    @classmethod
    def from_name(cls, name: str) -> "WeekDay":
        key = name.strip().upper()
        for member in cls:
            if member.name == key or member.name[:3] == key[:3] and len(key) >= 3:
                return member
        raise ValueError(f"Unknown weekday: {name!r}")


class DayType(IntEnum):
    """Day types beyond the seven weekdays; values continue WeekDay."""

    HOLIDAY = 8
    SUMMER_DESIGN_DAY = 9
    WINTER_DESIGN_DAY = 10
    CUSTOM_DAY_1 = 11
    CUSTOM_DAY_2 = 12

    @classmethod
    def from_name(cls, name: str) -> "DayType":
        key = name.strip().upper().replace(" ", "_").replace("-", "_")
        aliases = {"CUSTOMDAY1": "CUSTOM_DAY_1", "CUSTOMDAY2": "CUSTOM_DAY_2",
                   "SUMMERDESIGNDAY": "SUMMER_DESIGN_DAY",
                   "WINTERDESIGNDAY": "WINTER_DESIGN_DAY"}
        key = aliases.get(key.replace("_", ""), key)
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"Unknown day type: {name!r}") from None


def _trunc_div(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and not (year % 100 == 0 and year % 400 != 0)


def leap_add_for(year: int) -> int:
    return 1 if is_leap_year(year) else 0


def days_in_month(month: int, leap_add: int = 0) -> int:
    if not 1 <= month <= 12:
        raise ValueError(f"Month out of range: {month}")
    if month == 2:
        return 28 + leap_add
    return DAYS_IN_MONTH[month - 1]


def days_in_year(leap_add: int = 0) -> int:
    return 365 + leap_add


def valid_month_day(month: int, day: int, leap_add: int = 1) -> bool:
    """Check a month/day combination; Feb 29 only when ``leap_add`` is 1."""
    if not 1 <= month <= 12:
        return False
    return 1 <= day <= days_in_month(month, leap_add)


def day_of_year(month: int, day: int, leap_add: int = 0) -> int:
    if not valid_month_day(month, day, leap_add):
        raise ValueError(f"Invalid month/day: {month}/{day} (leap_add={leap_add})")
    if month == 1:
        return day
    ordinal = END_DAY_OF_MONTH[month - 2] + day
    if month > 2:
        ordinal += leap_add
    return ordinal


def month_day_from_day_of_year(ordinal: int, leap_add: int = 0) -> Tuple[int, int]:
    if not 1 <= ordinal <= days_in_year(leap_add):
        raise ValueError(f"Day of year out of range: {ordinal}")
    remaining = ordinal
    for month in range(1, 13):
        length = days_in_month(month, leap_add)
        if remaining <= length:
            return month, remaining
        remaining -= length
    raise AssertionError("unreachable")


def to_julian(year: int, month: int, day: int) -> int:
    """Gregorian date to Julian day number (Fliegel & Van Flandern)."""
    if year < MIN_GREGORIAN_YEAR:
        raise ValueError(f"Year {year} precedes the Gregorian calendar")
    if not valid_month_day(month, day, leap_add_for(year)):
        raise ValueError(f"Invalid date: {year}-{month}-{day}")
    a = _trunc_div(month - 14, 12)
    return (
        day
        - 32075
        + _trunc_div(1461 * (year + 4800 + a), 4)
        + _trunc_div(367 * (month - 2 - a * 12), 12)
        - _trunc_div(3 * _trunc_div(year + 4900 + a, 100), 4)
    )


def to_gregorian(julian_day: int) -> Tuple[int, int, int]:
    """Inverse of :func:`to_julian`."""
    t = julian_day + 68569
    n = 4 * t // 146097
    t = t - (146097 * n + 3) // 4
    i = 4000 * (t + 1) // 1461001
    t = t - 1461 * i // 4 + 31
    j = 80 * t // 2447
    day = t - 2447 * j // 80
    t = j // 11
    month = j + 2 - 12 * t
    year = 100 * (n - 49) + i + t
    if year < MIN_GREGORIAN_YEAR:
        raise ValueError(f"Julian day {julian_day} precedes the Gregorian calendar")
    return year, month, day


def day_of_week(year: int, month: int, day: int) -> WeekDay:
    """Zeller's congruence."""
    if month < 3:
        month += 12
        year -= 1
    k = year % 100
    j = year // 100
    h = (day + (13 * (month + 1)) // 5 + k + k // 4 + j // 4 + 5 * j) % 7
    # h: 0 = Saturday, 1 = Sunday, ...
    return WeekDay((h + 6) % 7 + 1)


def day_of_week_from_julian(julian_day: int) -> WeekDay:
    # Julian day number 0 (mod 7) is a Monday.
    return WeekDay((julian_day + 1) % 7 + 1)


def add_days(date: Tuple[int, int, int], days: int) -> Tuple[int, int, int]:
    return to_gregorian(to_julian(*date) + days)


def weekday_after(weekday: int, days: int) -> WeekDay:
    return WeekDay((int(weekday) - 1 + days) % 7 + 1)


def find_year_for_weekday(month: int, day: int, weekday: int, leap: bool = False) -> int:
    """First year from 2017 on in which month/day falls on ``weekday``.

    With ``leap`` the search is limited to leap years, otherwise to common
    years, so the chosen calendar matches the file's leap-day convention.
    """
    for year in range(2017, 2017 + 400):
        if is_leap_year(year) != leap:
            continue
        if not valid_month_day(month, day, leap_add_for(year)):
            continue
        if day_of_week(year, month, day) == weekday:
            return year
    raise ValueError(f"No year found for {month}/{day} on weekday {weekday}")


def month_from_name(text: str) -> int:
    key = text.strip().lower()
    if len(key) >= 3:
        for index, name in enumerate(MONTH_NAMES, start=1):
            if name.startswith(key):
                return index
    raise ValueError(f"Unknown month: {text!r}")

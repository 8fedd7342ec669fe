"""Date specifications used for daylight saving and special days."""

import re
from dataclasses import dataclass
from typing import Literal, Optional, Union

from weathersim.core.calendar.dates import (
    DayType,
    WeekDay,
    month_from_name,
    valid_month_day,
)


@dataclass(frozen=True, slots=True, kw_only=True)
class MonthDaySpec:
    """A fixed calendar date, e.g. July 4."""

    month: int
    day: int
    year: Optional[int] = None

    type: Literal["month_day"] = "month_day"

    def __post_init__(self):
        if not valid_month_day(self.month, self.day, leap_add=1):
            raise ValueError(f"Invalid month/day: {self.month}/{self.day}")


@dataclass(frozen=True, slots=True, kw_only=True)
class NthWeekdaySpec:
    """The n-th occurrence of a weekday in a month, e.g. 2nd Sunday in March."""

    nth: int
    weekday: WeekDay
    month: int

    type: Literal["nth_weekday"] = "nth_weekday"

    def __post_init__(self):
        if not 1 <= self.nth <= 5:
            raise ValueError("nth must be between 1 and 5.")
        if not 1 <= self.month <= 12:
            raise ValueError(f"Month out of range: {self.month}")


@dataclass(frozen=True, slots=True, kw_only=True)
class LastWeekdaySpec:
    """The last occurrence of a weekday in a month, e.g. last Sunday in October."""

    weekday: WeekDay
    month: int

    type: Literal["last_weekday"] = "last_weekday"

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValueError(f"Month out of range: {self.month}")


DateSpec = Union[MonthDaySpec, NthWeekdaySpec, LastWeekdaySpec]


@dataclass(frozen=True, slots=True, kw_only=True)
class DaylightSavingConfig:
    start: DateSpec
    end: DateSpec


@dataclass(frozen=True, slots=True, kw_only=True)
class SpecialDayConfig:
    name: str
    start: DateSpec
    duration: int = 1
    day_type: DayType = DayType.HOLIDAY

    def __post_init__(self):
        if not 1 <= self.duration <= 366:
            raise ValueError("Special day duration must be between 1 and 366.")


_ORDINALS = {"1st": 1, "first": 1, "2nd": 2, "second": 2, "3rd": 3, "third": 3,
             "4th": 4, "fourth": 4, "5th": 5, "fifth": 5}
_NUMERIC = re.compile(r"^(\d{1,2})/(\d{1,2})(?:/(\d{4}))?$")
_NTH = re.compile(r"^(\w+)\s+(\w+)\s+in\s+(\w+)$", re.IGNORECASE)


def parse_date_string(text: str) -> Optional[DateSpec]:
    """Parse the textual date forms found in weather-file headers.

    Accepted: ``4/1``, ``4/1/2010``, ``Apr 1``, ``1 Apr``,
    ``2nd Sunday in March``, ``Last Sunday in October``. A blank string or
    ``0`` means "not specified" and returns None.
    """
    value = text.strip()
    if value in ("", "0"):
        return None

    match = _NUMERIC.match(value.replace(" ", "") if "/" in value else value)
    if match:
        year = int(match.group(3)) if match.group(3) else None
        return MonthDaySpec(month=int(match.group(1)), day=int(match.group(2)), year=year)

    match = _NTH.match(value)
    if match:
        which, weekday, month = match.groups()
        weekday_value = WeekDay.from_name(weekday)
        month_value = month_from_name(month)
        if which.lower() == "last":
            return LastWeekdaySpec(weekday=weekday_value, month=month_value)
        if which.lower() not in _ORDINALS:
            raise ValueError(f"Unrecognized ordinal in date: {text!r}")
        return NthWeekdaySpec(nth=_ORDINALS[which.lower()], weekday=weekday_value,
                              month=month_value)

    parts = value.replace(",", " ").split()
    if len(parts) == 2:
        first, second = parts
        if first.isdigit():
            return MonthDaySpec(month=month_from_name(second), day=int(first))
        if second.isdigit():
            return MonthDaySpec(month=month_from_name(first), day=int(second))

    raise ValueError(f"Unrecognized date string: {text!r}")

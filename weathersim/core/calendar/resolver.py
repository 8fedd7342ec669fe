"""Resolve weekday tables, daylight saving windows and special days.

All day-of-year indexed tables have 366 entries (index 0 is day 1) so the
same table layout serves leap and common years.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

import numpy as np

from weathersim.core.calendar.config import (
    DateSpec,
    DaylightSavingConfig,
    LastWeekdaySpec,
    MonthDaySpec,
    NthWeekdaySpec,
    SpecialDayConfig,
)
from weathersim.core.calendar.dates import (
    WeekDay,
    day_of_year,
    days_in_month,
    days_in_year,
    month_day_from_day_of_year,
    valid_month_day,
    weekday_after,
)
from weathersim.core.errors import CalendarError, Diagnostics

logger = logging.getLogger(__name__)

TABLE_SIZE = 366

WeekdayTable = Tuple[WeekDay, ...]


class RolloverPolicy(Enum):
    SAME_WEEKDAY = "same_weekday"
    ROLL_FORWARD = "roll_forward"
    YEAR_BOUNDARY = "year_boundary"


@dataclass(frozen=True)
class DstResolution:
    active: np.ndarray
    start_month: int = 0
    start_day: int = 0
    end_month: int = 0
    end_day: int = 0


def weekday_of(table: Sequence[int], month: int, day: int) -> WeekDay:
    """Weekday of ``month/day`` given the weekday of the 1st of each month."""
    return weekday_after(table[month - 1], day - 1)


def weekdays_by_month(
    start_month: int, start_day: int, start_weekday: int, leap_add: int = 0
) -> WeekdayTable:
    """Weekday of the 1st of every month, anchored at one known date."""
    if not valid_month_day(start_month, start_day, leap_add):
        raise CalendarError(f"Invalid anchor date {start_month}/{start_day}")

    table = [WeekDay.SUNDAY] * 12
    table[start_month - 1] = weekday_after(start_weekday, -(start_day - 1))

    for month in range(start_month + 1, 13):
        table[month - 1] = weekday_after(
            table[month - 2], days_in_month(month - 1, leap_add)
        )
    for month in range(start_month - 1, 0, -1):
        table[month - 1] = weekday_after(table[month], -days_in_month(month, leap_add))

    return tuple(table)


def reset_weekdays_by_month(
    table: Sequence[int],
    leap_add: int,
    start_month: int,
    start_day: int,
    end_month: int,
    end_day: int,
    policy: RolloverPolicy,
    previous_leap_add: Optional[int] = None,
) -> WeekdayTable:
    """Re-anchor the weekday table for a new cycle or a new calendar year.

    ``leap_add`` applies to the year being entered; ``previous_leap_add`` to
    the year the old table describes (defaults to ``leap_add``).
    """
    if previous_leap_add is None:
        previous_leap_add = leap_add

    if policy is RolloverPolicy.YEAR_BOUNDARY:
        dec_31 = weekday_of(table, 12, 31)
        return weekdays_by_month(1, 1, weekday_after(dec_31, 1), leap_add)

    if policy is RolloverPolicy.ROLL_FORWARD:
        end_day = min(end_day, days_in_month(end_month, previous_leap_add))
        start_weekday = weekday_after(weekday_of(table, end_month, end_day), 1)
    else:
        start_weekday = weekday_of(table, start_month, start_day)

    start_day = min(start_day, days_in_month(start_month, leap_add))
    return weekdays_by_month(start_month, start_day, start_weekday, leap_add)


def resolve_date(spec: DateSpec, table: Sequence[int], leap_add: int) -> Tuple[int, int]:
    """Resolve a date specification to a concrete (month, day)."""
    if isinstance(spec, MonthDaySpec):
        if not valid_month_day(spec.month, spec.day, leap_add):
            raise CalendarError(f"Invalid date {spec.month}/{spec.day} for this year")
        return spec.month, spec.day

    first = int(spec.weekday) - int(table[spec.month - 1]) + 1
    while first <= 0:
        first += 7
    length = days_in_month(spec.month, leap_add)

    if isinstance(spec, NthWeekdaySpec):
        day = first + 7 * (spec.nth - 1)
        if day > length:
            raise CalendarError(
                f"There is no {spec.nth}th {spec.weekday.name.title()} "
                f"in month {spec.month}"
            )
        return spec.month, day

    if isinstance(spec, LastWeekdaySpec):
        day = first
        while day + 7 <= length:
            day += 7
        return spec.month, day

    raise CalendarError(f"Unsupported date specification: {spec!r}")


def weekday_by_day_of_year(table: Sequence[int], leap_add: int) -> np.ndarray:
    """Weekday for every day of the year (entry 366 unused in common years)."""
    result = np.zeros(TABLE_SIZE, dtype=np.int8)
    current = int(table[0])
    for index in range(days_in_year(leap_add)):
        result[index] = current
        current = current % 7 + 1
    return result


def resolve_dst(
    table: Sequence[int], dst: Optional[DaylightSavingConfig], leap_add: int
) -> DstResolution:
    """Mark the active daylight saving days; wraps when end precedes start."""
    active = np.zeros(TABLE_SIZE, dtype=bool)
    if dst is None:
        return DstResolution(active=active)

    start_month, start_day = resolve_date(dst.start, table, leap_add)
    end_month, end_day = resolve_date(dst.end, table, leap_add)
    start = day_of_year(start_month, start_day, leap_add)
    end = day_of_year(end_month, end_day, leap_add)

    if start <= end:
        active[start - 1:end] = True
    else:
        active[start - 1:] = True
        active[:end] = True

    logger.debug(
        "Daylight saving resolved to %d/%d - %d/%d", start_month, start_day,
        end_month, end_day,
    )
    return DstResolution(
        active=active,
        start_month=start_month,
        start_day=start_day,
        end_month=end_month,
        end_day=end_day,
    )


def resolve_special_days(
    table: Sequence[int],
    specs: Sequence[SpecialDayConfig],
    leap_add: int,
    apply_weekend_rule: bool = False,
    diagnostics: Optional[Diagnostics] = None,
) -> np.ndarray:
    """Day type per day of year (0 where no special day applies)."""
    day_types = np.zeros(TABLE_SIZE, dtype=np.int8)
    year_length = days_in_year(leap_add)

    for spec in specs:
        month, day = resolve_date(spec.start, table, leap_add)
        ordinal = day_of_year(month, day, leap_add)

        if spec.duration == 1 and apply_weekend_rule:
            weekday = weekday_of(table, month, day)
            if weekday == WeekDay.SUNDAY:
                ordinal += 1
            elif weekday == WeekDay.SATURDAY:
                ordinal += 2
            if ordinal > year_length:
                ordinal -= year_length

        for _ in range(spec.duration):
            if day_types[ordinal - 1] != 0:
                if diagnostics is not None:
                    m, d = month_day_from_day_of_year(ordinal, leap_add)
                    diagnostics.warning(
                        f"Special day '{spec.name}' on {m}/{d} overlaps a "
                        "previously defined special day; the first definition is kept."
                    )
            else:
                day_types[ordinal - 1] = int(spec.day_type)
            ordinal += 1
            if ordinal > year_length:
                ordinal = 1

    return day_types

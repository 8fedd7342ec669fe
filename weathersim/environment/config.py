"""Configuration of run periods and the environments built from them."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from weathersim.core.calendar.dates import WeekDay, valid_month_day
from weathersim.core.calendar.resolver import RolloverPolicy


class EnvironmentKind(Enum):
    DESIGN_DAY = "design_day"
    RUN_PERIOD_WEATHER = "run_period_weather"
    RUN_PERIOD_DESIGN = "run_period_design"


class RepeatPolicy(Enum):
    """Weekday of the first day when a run period cycle restarts."""

    SAME_WEEKDAY = "same_weekday"
    ROLL_FORWARD = "roll_forward"

    @property
    def rollover(self) -> RolloverPolicy:
        return RolloverPolicy(self.value)


def _check_date(label: str, month: int, day: int) -> None:
    if not valid_month_day(month, day, leap_add=1):
        raise ValueError(f"{label}: invalid date {month}/{day}.")


@dataclass(frozen=True, slots=True, kw_only=True)
class RunPeriodConfig:
    name: str
    begin_month: int
    begin_day: int
    end_month: int
    end_day: int
    begin_year: Optional[int] = None
    end_year: Optional[int] = None
    start_weekday: Optional[WeekDay] = None
    """None takes the weekday from the calendar year or the weather file."""
    use_dst: bool = True
    use_holidays: bool = True
    use_rain: bool = True
    use_snow: bool = True
    apply_weekend_rule: bool = False
    treat_weather_as_actual: bool = False
    num_repeats: int = 1
    repeat_policy: RepeatPolicy = RepeatPolicy.SAME_WEEKDAY

    def __post_init__(self):
        _check_date(f"Run period '{self.name}' begin", self.begin_month, self.begin_day)
        _check_date(f"Run period '{self.name}' end", self.end_month, self.end_day)
        if self.num_repeats < 1:
            raise ValueError(f"Run period '{self.name}': num_repeats must be at least 1.")
        if (self.begin_year is None) != (self.end_year is None):
            raise ValueError(
                f"Run period '{self.name}': give both begin and end year or neither."
            )
        if self.begin_year is not None:
            if self.end_year < self.begin_year or (
                self.end_year == self.begin_year
                and (self.end_month, self.end_day) < (self.begin_month, self.begin_day)
            ):
                raise ValueError(f"Run period '{self.name}': end date precedes begin date.")
        if self.treat_weather_as_actual and self.begin_year is None:
            raise ValueError(
                f"Run period '{self.name}': actual weather needs begin and end years."
            )


@dataclass(frozen=True, slots=True, kw_only=True)
class WeatherFileDaysConfig:
    """A design period read from the weather file.

    Either ``period`` names one of the file's typical/extreme periods or
    the begin and end dates are given explicitly.
    """

    name: str
    period: Optional[str] = None
    begin_month: Optional[int] = None
    begin_day: Optional[int] = None
    end_month: Optional[int] = None
    end_day: Optional[int] = None
    start_weekday: Optional[WeekDay] = None
    use_dst: bool = True
    use_rain: bool = True
    use_snow: bool = True

    def __post_init__(self):
        dates = (self.begin_month, self.begin_day, self.end_month, self.end_day)
        if self.period is None:
            if any(value is None for value in dates):
                raise ValueError(
                    f"Weather file days '{self.name}': give a period name or begin and end dates."
                )
            _check_date(f"Weather file days '{self.name}' begin", self.begin_month, self.begin_day)
            _check_date(f"Weather file days '{self.name}' end", self.end_month, self.end_day)
        elif any(value is not None for value in dates):
            raise ValueError(
                f"Weather file days '{self.name}': period name and explicit dates are exclusive."
            )


@dataclass
class Environment:
    """One simulated episode, resolved from configuration at load time."""

    kind: EnvironmentKind
    title: str
    begin_month: int
    begin_day: int
    end_month: int
    end_day: int
    begin_year: Optional[int] = None
    end_year: Optional[int] = None
    start_weekday: Optional[WeekDay] = None
    total_days: int = 1
    """Days in one cycle of the environment."""
    num_repeats: int = 1
    repeat_policy: RepeatPolicy = RepeatPolicy.SAME_WEEKDAY
    use_dst: bool = False
    use_holidays: bool = False
    use_rain: bool = True
    use_snow: bool = True
    apply_weekend_rule: bool = False
    actual_weather: bool = False
    design_day_index: Optional[int] = None
    weekdays_by_month: Tuple[WeekDay, ...] = field(default=())

    @property
    def is_design_day(self) -> bool:
        return self.kind is EnvironmentKind.DESIGN_DAY

    @property
    def uses_weather_file(self) -> bool:
        return self.kind is not EnvironmentKind.DESIGN_DAY

    @property
    def simulated_days(self) -> int:
        return self.total_days * self.num_repeats


@dataclass(frozen=True)
class EnvironmentSummary:
    title: str
    kind: EnvironmentKind
    days_simulated: int
    year_rollovers: int
    cycles: int
    missing: dict
    out_of_range: dict

    @property
    def total_missing(self) -> int:
        return sum(self.missing.values())

    @property
    def total_out_of_range(self) -> int:
        return sum(self.out_of_range.values())

"""Base abstractions for daily weather record sources."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from weathersim.core.calendar.dates import WeekDay
from weathersim.core.state import DailyWeatherRecord


@dataclass(frozen=True)
class DayRequest:
    """The simulated date a source must produce a record for."""

    year: int
    month: int
    day: int
    day_of_year: int
    weekday: WeekDay
    leap_add: int = 0
    first_day: bool = False
    """True for the first record of an environment; the source repositions."""
    use_rain: bool = True
    use_snow: bool = True
    actual_weather: bool = False

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValueError("Month must be between 1 and 12.")
        if not 1 <= self.day_of_year <= 366:
            raise ValueError("Day of year must be between 1 and 366.")


class RecordSource(ABC):
    """Abstract base class for producers of daily weather records."""

    def __init__(self, timesteps_per_hour: int) -> None:
        self._timesteps_per_hour = timesteps_per_hour

    @property
    def timesteps_per_hour(self) -> int:
        return self._timesteps_per_hour

    @abstractmethod
    def read_day(self, request: DayRequest) -> DailyWeatherRecord:
        """
        Produce the record for the requested day.

        Returns:
            A fully populated DailyWeatherRecord on the timestep grid.
        """
        pass

    def close(self) -> None:
        """Release any resources held by the source."""

    @property
    def description(self) -> Optional[str]:
        return None

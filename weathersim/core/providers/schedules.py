"""Schedule values for humidity, solar and sky temperature playback."""

import logging
from typing import Dict, Mapping, Protocol, Sequence

import numpy as np

logger = logging.getLogger(__name__)


class ScheduleProvider(Protocol):
    def index(self, name: str) -> int:
        """Handle for a named schedule; 0 when the schedule does not exist."""
        ...

    def current_value(self, handle: int) -> float: ...

    def day_values(self, handle: int, day_of_year: int, weekday: int) -> np.ndarray:
        """A ``(24, timesteps_per_hour)`` array of the day's values."""
        ...


class InMemorySchedules:
    """Day schedules given as 24 hourly values or ``24 * n`` sub-hourly values.

    Every day of the year uses the same profile; hourly profiles are held
    constant over the timesteps of each hour.
    """

    def __init__(self, schedules: Mapping[str, Sequence[float]], timesteps_per_hour: int = 1):
        self.timesteps_per_hour = timesteps_per_hour
        self._names: Dict[str, int] = {}
        self._values: Dict[int, np.ndarray] = {}
        self._current: Dict[int, float] = {}
        for name, values in schedules.items():
            self.add(name, values)

    def add(self, name: str, values: Sequence[float]) -> int:
        n = self.timesteps_per_hour
        array = np.asarray(values, dtype=float)
        if array.size == 24:
            grid = np.repeat(array[:, None], n, axis=1)
        elif array.size == 24 * n:
            grid = array.reshape(24, n)
        else:
            raise ValueError(
                f"Schedule '{name}' needs 24 or {24 * n} values, got {array.size}."
            )
        handle = len(self._names) + 1
        self._names[name.upper()] = handle
        self._values[handle] = grid
        self._current[handle] = float(grid[0, 0])
        logger.debug("Registered schedule '%s' as handle %d", name, handle)
        return handle

    def index(self, name: str) -> int:
        return self._names.get(name.upper(), 0)

    def current_value(self, handle: int) -> float:
        return self._current[handle]

    def set_time(self, hour: int, timestep: int) -> None:
        """Update the current value of every schedule (hour and timestep are 1-based)."""
        for handle, grid in self._values.items():
            self._current[handle] = float(grid[hour - 1, timestep - 1])

    def day_values(self, handle: int, day_of_year: int, weekday: int) -> np.ndarray:
        if handle not in self._values:
            raise KeyError(f"Unknown schedule handle {handle}")
        return self._values[handle].copy()

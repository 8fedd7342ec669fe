"""Expansion of hourly samples onto the sub-hourly timestep grid.

Instantaneous quantities (temperatures, humidity, wind, pressure) are
sampled at the end of each hour and blend linearly from the previous hour.
Solar quantities are hour-integrated totals centred on the half hour, so
they use a centred weighting that borrows from the previous hour before the
centre and from the next hour after it.
"""

from typing import Tuple

import numpy as np

HOURS_PER_DAY = 24


def interpolation_weights(n: int) -> np.ndarray:
    """Weight of the current hour for timesteps 1..n (``t / n``)."""
    if n < 1:
        raise ValueError("Number of timesteps per hour must be positive.")
    return np.arange(1, n + 1, dtype=float) / n


def solar_weights(n: int) -> Tuple[np.ndarray, np.ndarray]:
    """Centred weights and the neighbouring hour each timestep blends with.

    Returns ``(weights, neighbour)``; ``neighbour`` is -1 for the previous
    hour, +1 for the next hour and 0 where the raw hourly value is used.
    """
    if n < 1:
        raise ValueError("Number of timesteps per hour must be positive.")
    steps = np.arange(1, n + 1, dtype=float)
    centre = n / 2 if n % 2 == 0 else (n + 1) / 2
    offset = steps - centre
    weights = 1.0 - np.abs(offset) / n
    neighbour = np.sign(offset).astype(int)
    return weights, neighbour


def interpolate_linear(previous: float, current: float, weight: float) -> float:
    return previous * (1.0 - weight) + current * weight


def interpolate_wind_direction(previous, current, weight):
    """Interpolate compass directions along the shorter arc.

    Works on scalars and numpy arrays; the result lies in [0, 360).
    """
    prev = np.asarray(previous, dtype=float)
    cur = np.asarray(current, dtype=float)
    wrap = np.abs(cur - prev) > 180.0
    rising = cur > prev
    prev = np.where(wrap & rising, prev + 360.0, prev)
    cur = np.where(wrap & ~rising, cur + 360.0, cur)
    result = np.mod(prev * (1.0 - weight) + cur * weight, 360.0)
    if result.ndim == 0:
        return float(result)
    return result


def _previous_hours(hourly: np.ndarray, last_hour: float) -> np.ndarray:
    return np.concatenate(([last_hour], hourly[:-1]))


def expand_hourly(hourly: np.ndarray, last_hour: float, n: int) -> np.ndarray:
    """Expand 24 hourly samples to a ``(24, n)`` grid by linear blending.

    ``last_hour`` is the final hourly sample of the preceding day.
    """
    hourly = np.asarray(hourly, dtype=float)
    weights = interpolation_weights(n)
    previous = _previous_hours(hourly, last_hour)
    return previous[:, None] * (1.0 - weights) + hourly[:, None] * weights


def expand_wind_direction(hourly: np.ndarray, last_hour: float, n: int) -> np.ndarray:
    hourly = np.asarray(hourly, dtype=float)
    weights = interpolation_weights(n)
    previous = _previous_hours(hourly, last_hour)
    return interpolate_wind_direction(previous[:, None], hourly[:, None], weights[None, :])


def expand_solar(
    hourly: np.ndarray, previous_hour: float, next_hour: float, n: int
) -> np.ndarray:
    """Expand hour-integrated solar values with centred weighting.

    ``previous_hour`` is the last value of the preceding day and
    ``next_hour`` the first value of the following day.
    """
    hourly = np.asarray(hourly, dtype=float)
    weights, neighbour = solar_weights(n)
    previous = _previous_hours(hourly, previous_hour)
    following = np.concatenate((hourly[1:], [next_hour]))

    other = np.where(neighbour[None, :] < 0, previous[:, None], following[:, None])
    blended = hourly[:, None] * weights + other * (1.0 - weights)
    return np.where(neighbour[None, :] == 0, hourly[:, None], blended)


def repeat_hourly(hourly: np.ndarray, n: int) -> np.ndarray:
    """Hold each hourly value constant over its timesteps."""
    return np.repeat(np.asarray(hourly, dtype=float)[:, None], n, axis=1)


def hourly_means(values: np.ndarray) -> np.ndarray:
    """Average the timesteps of each hour of a ``(24, n)`` array."""
    return np.asarray(values, dtype=float).mean(axis=1)

"""Tests for the hourly to sub-hourly interpolation engine."""

import numpy as np
import pytest

from weathersim.core.interpolation import (
    expand_hourly,
    expand_solar,
    expand_wind_direction,
    hourly_means,
    interpolate_wind_direction,
    interpolation_weights,
    repeat_hourly,
    solar_weights,
)


def test_interpolation_weights():
    np.testing.assert_allclose(interpolation_weights(4), [0.25, 0.5, 0.75, 1.0])
    np.testing.assert_allclose(interpolation_weights(1), [1.0])
    with pytest.raises(ValueError):
        interpolation_weights(0)


def test_expand_hourly_ends_each_hour_on_the_hourly_value():
    # Arrange
    hourly = np.arange(1.0, 25.0)

    # Act
    grid = expand_hourly(hourly, last_hour=0.0, n=4)

    # Assert
    assert grid.shape == (24, 4)
    np.testing.assert_allclose(grid[:, -1], hourly)
    np.testing.assert_allclose(grid[0], [0.25, 0.5, 0.75, 1.0])


def test_expand_hourly_stays_between_adjacent_hours():
    # Arrange
    rng = np.random.default_rng(7)
    hourly = rng.uniform(-20, 40, size=24)
    last = 12.0

    # Act
    grid = expand_hourly(hourly, last, 6)

    # Assert
    previous = np.concatenate(([last], hourly[:-1]))
    low = np.minimum(previous, hourly)[:, None]
    high = np.maximum(previous, hourly)[:, None]
    assert np.all(grid >= low - 1e-12)
    assert np.all(grid <= high + 1e-12)


def test_wind_direction_takes_the_shorter_arc():
    assert interpolate_wind_direction(350.0, 10.0, 0.5) == pytest.approx(0.0)
    assert interpolate_wind_direction(10.0, 350.0, 0.5) == pytest.approx(0.0)
    assert interpolate_wind_direction(90.0, 180.0, 0.5) == pytest.approx(135.0)
    assert interpolate_wind_direction(340.0, 20.0, 0.25) == pytest.approx(350.0)


def test_expand_wind_direction_never_travels_more_than_180_degrees():
    # Arrange
    hourly = np.array([350.0, 10.0, 200.0, 20.0] * 6)

    # Act
    grid = expand_wind_direction(hourly, 340.0, 4)

    # Assert
    assert np.all((grid >= 0.0) & (grid < 360.0))
    steps = np.diff(np.concatenate(([340.0], grid.reshape(-1))))
    travel = np.abs((steps + 180.0) % 360.0 - 180.0)
    assert np.all(travel <= 180.0)


def test_solar_weights_even_and_odd():
    # Even: timestep n/2 keeps the raw hourly value
    weights, neighbour = solar_weights(4)
    np.testing.assert_allclose(weights, [0.75, 1.0, 0.75, 0.5])
    np.testing.assert_array_equal(neighbour, [-1, 0, 1, 1])

    # Odd: the centre timestep is the raw hourly value, the rest symmetric
    weights, neighbour = solar_weights(3)
    np.testing.assert_allclose(weights, [2 / 3, 1.0, 2 / 3])
    np.testing.assert_array_equal(neighbour, [-1, 0, 1])


def test_solar_with_one_timestep_is_the_raw_hourly_value():
    hourly = np.linspace(0, 500, 24)

    grid = expand_solar(hourly, 999.0, 999.0, 1)

    np.testing.assert_allclose(grid[:, 0], hourly)


def test_expand_solar_blends_with_neighbouring_hours():
    # Arrange
    hourly = np.zeros(24)
    hourly[12] = 400.0

    # Act
    grid = expand_solar(hourly, 0.0, 0.0, 4)

    # Assert
    np.testing.assert_allclose(grid[12], [300.0, 400.0, 300.0, 200.0])
    np.testing.assert_allclose(grid[11], [0.0, 0.0, 100.0, 200.0])
    np.testing.assert_allclose(grid[13], [100.0, 0.0, 0.0, 0.0])


def test_repeat_and_hourly_means():
    hourly = np.arange(24.0)

    grid = repeat_hourly(hourly, 3)

    assert grid.shape == (24, 3)
    np.testing.assert_allclose(hourly_means(grid), hourly)

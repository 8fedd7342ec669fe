"""Tests for sky emissivity, sky temperature and horizontal IR."""

from unittest.mock import Mock

import numpy as np
import pytest

from weathersim.core.errors import ConfigurationError
from weathersim.core.providers.schedules import InMemorySchedules
from weathersim.core.sky import (
    KELVIN,
    STEFAN_BOLTZMANN,
    EmissivitySkyConfig,
    ScheduleSkyConfig,
    SkyModel,
    cloud_factor,
    horizontal_ir_from_sky_temperature,
    sky_emissivity,
    sky_temperature_from_horizontal_ir,
)


def test_cloud_factor_is_one_for_clear_sky():
    assert cloud_factor(0.0) == pytest.approx(1.0)
    assert cloud_factor(10.0) == pytest.approx(1.0 + 0.224 - 0.35 + 0.28)


def test_clark_allen_emissivity_at_freezing_dew_point():
    assert sky_emissivity(20.0, 0.0, 0.0) == pytest.approx(0.787)


def test_berdahl_martin_caps_dew_point_at_dry_bulb():
    capped = sky_emissivity(10.0, 15.0, 0.0, "berdahl_martin")
    expected = sky_emissivity(10.0, 10.0, 0.0, "berdahl_martin")
    assert capped == pytest.approx(expected)


@pytest.mark.parametrize("model", ["brunt", "idso"])
def test_vapor_pressure_models_need_psychrometrics(model):
    with pytest.raises(ConfigurationError):
        sky_emissivity(20.0, 10.0, 0.0, model)


def test_brunt_uses_saturation_pressure_at_dew_point():
    # Arrange
    psychrometrics = Mock()
    psychrometrics.sat_vapor_pressure.return_value = 1000.0  # Pa

    # Act
    emissivity = sky_emissivity(20.0, 7.0, 0.0, "brunt", psychrometrics)

    # Assert
    psychrometrics.sat_vapor_pressure.assert_called_once_with(7.0)
    assert emissivity == pytest.approx(0.618 + 0.056 * np.sqrt(10.0))


def test_unknown_model_is_rejected():
    with pytest.raises(ConfigurationError):
        sky_emissivity(20.0, 10.0, 0.0, "swinbank")


def test_sky_temperature_and_ir_are_inverse():
    sky_temp = np.array([-40.0, -5.0, 0.0, 12.5])

    ir = horizontal_ir_from_sky_temperature(sky_temp)

    np.testing.assert_allclose(sky_temperature_from_horizontal_ir(ir), sky_temp, atol=1e-9)
    assert horizontal_ir_from_sky_temperature(0.0) == pytest.approx(STEFAN_BOLTZMANN * KELVIN ** 4)


def test_emissivity_model_computes_consistent_sky_temperature():
    # Arrange
    model = SkyModel(EmissivitySkyConfig())
    dry_bulb = np.full((24, 2), 20.0)
    dew_point = np.full((24, 2), 10.0)
    opaque = np.full((24, 2), 5.0)

    # Act
    sky_temp, horiz_ir = model.compute(dry_bulb, dew_point, opaque)

    # Assert
    assert sky_temp.shape == (24, 2)
    assert np.all(sky_temp < dry_bulb)
    np.testing.assert_allclose(sky_temperature_from_horizontal_ir(horiz_ir), sky_temp)


@pytest.mark.parametrize(
    "mode, scheduled, expected",
    [
        ("absolute", -10.0, -10.0),
        ("dry_bulb_difference", 10.0, 15.0),
        ("dew_point_difference", 10.0, 0.0),
    ],
)
def test_schedule_model_modes(mode, scheduled, expected):
    # Arrange
    schedules = InMemorySchedules({"sky": [scheduled] * 24})
    model = SkyModel(ScheduleSkyConfig(schedule="sky", mode=mode), schedules=schedules)

    # Act
    sky_temp, horiz_ir = model.compute(
        np.full((24, 1), 25.0), np.full((24, 1), 10.0), np.zeros((24, 1))
    )

    # Assert
    assert model.uses_schedule
    np.testing.assert_allclose(sky_temp, expected)
    np.testing.assert_allclose(horiz_ir, horizontal_ir_from_sky_temperature(expected))


def test_schedule_model_requires_existing_schedule():
    with pytest.raises(ConfigurationError):
        SkyModel(ScheduleSkyConfig(schedule="sky"))
    with pytest.raises(ConfigurationError):
        SkyModel(ScheduleSkyConfig(schedule="sky"), schedules=InMemorySchedules({}))

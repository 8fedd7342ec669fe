"""Tests for sun position and the design-day solar models."""

import numpy as np
import pytest

from weathersim.core.errors import ConfigurationError
from weathersim.core.providers.schedules import InMemorySchedules
from weathersim.core.solar import (
    AshraeClearSkyConfig,
    AshraeTau2017Config,
    AshraeTauConfig,
    ScheduleSolarConfig,
    SiteGeometry,
    SolarContext,
    ZhangHuangConfig,
    build_solar_model,
    cos_zenith_grid,
    daily_solar_coefficients,
    sun_direction_cosines,
)
from weathersim.core.solar.geometry import SOLAR_CONSTANT, air_mass, timestep_midpoints
from weathersim.core.solar.models import (
    AshraeClearSkyModel,
    AshraeTau2017Model,
    AshraeTauModel,
    ScheduleSolarModel,
    ZhangHuangModel,
    _AshraeTauBase,
)

BOULDER = SiteGeometry(latitude=40.02, longitude=-105.25, time_zone=-7.0)
SUMMER_SOLSTICE = 172


@pytest.fixture
def schedules():
    return InMemorySchedules({"beam": [500.0] * 24, "diffuse": [100.0] * 24}, 2)


def make_context(n=2, day_of_year=SUMMER_SOLSTICE, schedules=None):
    coefficients = daily_solar_coefficients(day_of_year)
    shape = (24, n)
    return SolarContext(
        cos_zenith=cos_zenith_grid(coefficients, BOULDER, n),
        coefficients=coefficients,
        dry_bulb=np.full(shape, 30.0),
        rel_hum=np.full(shape, 50.0),
        wind_speed=np.full(shape, 3.0),
        day_of_year=day_of_year,
        weekday=1,
        schedules=schedules,
    )


ALL_MODELS = [
    AshraeClearSkyConfig(),
    AshraeTauConfig(tau_b=0.4, tau_d=2.3),
    AshraeTau2017Config(tau_b=0.4, tau_d=2.3),
    ZhangHuangConfig(sky_cover=5.0),
    ScheduleSolarConfig(beam_schedule="beam", diffuse_schedule="diffuse"),
]


def test_registry_builds_the_matching_model():
    expected = [
        AshraeClearSkyModel, AshraeTauModel, AshraeTau2017Model,
        ZhangHuangModel, ScheduleSolarModel,
    ]
    for config, model_cls in zip(ALL_MODELS, expected):
        assert isinstance(build_solar_model(config), model_cls)


def test_declination_peaks_near_the_solstices():
    summer = daily_solar_coefficients(SUMMER_SOLSTICE)
    winter = daily_solar_coefficients(355)

    assert np.degrees(np.arcsin(summer.sin_declination)) == pytest.approx(23.45, abs=0.3)
    assert np.degrees(np.arcsin(winter.sin_declination)) == pytest.approx(-23.45, abs=0.3)
    assert summer.a < winter.a


def test_sun_direction_is_a_unit_vector_and_highest_near_noon():
    # Arrange
    coefficients = daily_solar_coefficients(SUMMER_SOLSTICE)

    # Act
    noon = sun_direction_cosines(12.5, coefficients, BOULDER)
    midnight = sun_direction_cosines(0.5, coefficients, BOULDER)

    # Assert
    assert sum(c * c for c in noon) == pytest.approx(1.0)
    assert noon[2] > 0.9
    assert midnight[2] < 0.0


def test_timestep_midpoints():
    times = timestep_midpoints(4)

    assert times.shape == (24, 4)
    np.testing.assert_allclose(times[0], [0.125, 0.375, 0.625, 0.875])
    assert times[23, 3] == pytest.approx(23.875)


def test_air_mass():
    assert air_mass(1.0) == pytest.approx(1.0, abs=1e-3)
    assert air_mass(0.0) == 37.92
    assert air_mass(-0.3) == 37.92
    assert air_mass(0.5) == pytest.approx(2.0, abs=0.02)


@pytest.mark.parametrize("config", ALL_MODELS, ids=lambda c: c.type)
def test_irradiance_is_exactly_zero_while_the_sun_is_down(config, schedules):
    # Arrange
    context = make_context(schedules=schedules)
    model = build_solar_model(config)

    # Act
    beam, diffuse = model.irradiance(context)

    # Assert
    night = context.cos_zenith < context.sun_is_up
    assert night.any()
    assert np.all(beam[night] == 0.0)
    assert np.all(diffuse[night] == 0.0)
    assert np.all(beam >= 0.0) and np.all(diffuse >= 0.0)
    assert beam.max() > 0.0


def test_clear_sky_noon_beam_is_plausible():
    beam, diffuse = build_solar_model(AshraeClearSkyConfig()).irradiance(make_context())

    assert 700.0 < beam.max() < 1000.0
    np.testing.assert_allclose(diffuse, daily_solar_coefficients(SUMMER_SOLSTICE).c * beam)


def test_clear_sky_above_the_split_clearness_keeps_the_ashrae_diffuse_ratio():
    context = make_context()

    clear, _ = build_solar_model(AshraeClearSkyConfig(sky_clearness=1.0)).irradiance(context)
    hazy, diffuse = build_solar_model(AshraeClearSkyConfig(sky_clearness=0.8)).irradiance(context)

    np.testing.assert_allclose(hazy, 0.8 * clear)
    np.testing.assert_allclose(diffuse, context.coefficients.c * hazy)


def test_low_clearness_splits_diffuse_with_the_clearness_index():
    # Arrange
    context = make_context()
    coef = context.coefficients
    up = context.cos_zenith >= context.sun_is_up
    cos_z = context.cos_zenith[up]
    total = 0.5 * coef.a * (coef.c + cos_z) * np.exp(-coef.b / cos_z)
    kt = np.minimum(total / (SOLAR_CONSTANT * coef.annual_variation * cos_z), 0.75)
    expected_diffuse = total * (1.0045 + kt * (0.04349 + kt * (-3.5227 + 2.6313 * kt)))
    expected_beam = (total - expected_diffuse) / cos_z

    # Act
    beam, diffuse = build_solar_model(AshraeClearSkyConfig(sky_clearness=0.5)).irradiance(context)

    # Assert
    np.testing.assert_allclose(diffuse[up], np.maximum(expected_diffuse, 0.0))
    np.testing.assert_allclose(beam[up], np.maximum(expected_beam, 0.0))
    noon = np.argmax(context.cos_zenith)
    assert diffuse.flat[noon] > coef.c * beam.flat[noon]


@pytest.mark.parametrize("config_cls", [AshraeTauConfig, AshraeTau2017Config])
def test_tau_models_stay_below_extraterrestrial(config_cls):
    # Arrange
    context = make_context()
    etr = SOLAR_CONSTANT * context.coefficients.annual_variation

    # Act
    beam, diffuse = build_solar_model(config_cls(tau_b=0.4, tau_d=2.3)).irradiance(context)

    # Assert
    assert beam.max() < etr
    assert 0.0 < diffuse.max() < beam.max()


def test_tau_base_needs_air_mass_exponents():
    with pytest.raises(TypeError):
        _AshraeTauBase(AshraeTauConfig(tau_b=0.4, tau_d=2.3))


def test_zhang_huang_splits_global_into_beam_and_diffuse():
    beam, diffuse = build_solar_model(ZhangHuangConfig(sky_cover=5.0)).irradiance(make_context())

    assert beam.max() > 0.0
    assert diffuse.max() > 0.0


def test_schedule_model_requires_its_schedules():
    model = build_solar_model(
        ScheduleSolarConfig(beam_schedule="beam", diffuse_schedule="missing")
    )

    with pytest.raises(ConfigurationError):
        model.irradiance(make_context(schedules=InMemorySchedules({"beam": [1.0] * 24}, 2)))
    with pytest.raises(ConfigurationError):
        model.irradiance(make_context())


def test_tau_config_validation():
    with pytest.raises(ValueError):
        AshraeTauConfig(tau_b=0.0, tau_d=2.0)
    with pytest.raises(ValueError):
        ZhangHuangConfig(sky_cover=11.0)

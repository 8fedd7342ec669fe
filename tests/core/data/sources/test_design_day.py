"""Tests for the design-day synthesizer."""

import numpy as np
import pytest

from weathersim.core.calendar.dates import day_of_week, day_of_year
from weathersim.core.data.sources.base import DayRequest
from weathersim.core.data.sources.design_day.config import (
    DEFAULT_TEMPERATURE_MULTIPLIERS,
    DesignDayConfig,
    DewPoint,
    DifferenceSchedule,
    HumidityRatio,
    MultiplierSchedule,
    RelativeHumiditySchedule,
    TemperatureProfileSchedule,
    WetBulb,
    WetBulbProfileDefault,
)
from weathersim.core.data.sources.design_day.synthesizer import (
    DesignDaySynthesizer,
    design_day_type,
)
from weathersim.core.errors import ConfigurationError
from weathersim.core.providers.psychrometrics import PsychrolibPsychrometrics
from weathersim.core.providers.schedules import InMemorySchedules
from weathersim.core.solar import AshraeTauConfig, SiteGeometry, ZhangHuangConfig

SITE = SiteGeometry(latitude=40.02, longitude=-105.25, time_zone=-7.0)
MULTIPLIERS = np.asarray(DEFAULT_TEMPERATURE_MULTIPLIERS)


@pytest.fixture
def psychrometrics():
    return PsychrolibPsychrometrics()


@pytest.fixture
def request_july():
    return DayRequest(
        year=2013, month=7, day=21,
        day_of_year=day_of_year(7, 21),
        weekday=day_of_week(2013, 7, 21),
    )


def summer_day(**overrides):
    options = dict(
        name="Summer 0.4%",
        month=7,
        day=21,
        max_dry_bulb=33.0,
        daily_range=11.0,
        humidity=WetBulb(wet_bulb=23.0),
        wind_speed=4.0,
        wind_dir=230.0,
        pressure=101325.0,
    )
    options.update(overrides)
    return DesignDayConfig(**options)


def test_default_multipliers_shape_the_dry_bulb(request_july):
    # Arrange
    source = DesignDaySynthesizer(summer_day(), SITE)

    # Act
    record = source.read_day(request_july)

    # Assert
    np.testing.assert_allclose(record.dry_bulb[:, 0], 33.0 - 11.0 * MULTIPLIERS)
    assert record.dry_bulb.max() == pytest.approx(33.0)
    assert record.dry_bulb.min() == pytest.approx(22.0)


def test_sub_hourly_profile_blends_from_the_last_hour(request_july):
    source = DesignDaySynthesizer(summer_day(), SITE, timesteps_per_hour=4)

    record = source.read_day(request_july)

    hourly = 33.0 - 11.0 * MULTIPLIERS
    np.testing.assert_allclose(record.dry_bulb[:, -1], hourly)
    np.testing.assert_allclose(record.dry_bulb[0, 1], 0.5 * (hourly[-1] + hourly[0]))


def test_wet_bulb_sets_a_constant_humidity_ratio(request_july, psychrometrics):
    # Arrange
    source = DesignDaySynthesizer(summer_day(), SITE, psychrometrics=psychrometrics)

    # Act
    record = source.read_day(request_july)

    # Assert
    expected = psychrometrics.hum_ratio_from_wet_bulb(33.0, 23.0, 101325.0)
    np.testing.assert_allclose(record.hum_ratio, expected)
    assert np.all(record.dew_point <= record.dry_bulb + 1e-9)
    assert np.all((record.rel_hum > 0.0) & (record.rel_hum <= 100.0))
    np.testing.assert_allclose(record.pressure, 101325.0)
    np.testing.assert_allclose(record.wind_speed, 4.0)
    np.testing.assert_allclose(record.wind_dir, 230.0)


def test_indicator_above_maximum_dry_bulb_is_clamped(request_july, diagnostics):
    # Arrange
    config = summer_day(humidity=DewPoint(dew_point=40.0))
    source = DesignDaySynthesizer(config, SITE, diagnostics=diagnostics)

    # Act
    record = source.read_day(request_july)

    # Assert
    assert diagnostics.warning_count == 1
    peak = np.argmax(record.dry_bulb)
    assert record.rel_hum.flat[peak] == pytest.approx(100.0, abs=0.5)


def test_humidity_ratio_is_capped_at_saturation(request_july, psychrometrics):
    # Arrange
    config = summer_day(max_dry_bulb=10.0, daily_range=5.0, humidity=HumidityRatio(humidity_ratio=0.03))
    source = DesignDaySynthesizer(config, SITE, psychrometrics=psychrometrics)

    # Act
    record = source.read_day(request_july)

    # Assert
    saturation = np.vectorize(psychrometrics.sat_hum_ratio)(record.dry_bulb, 101325.0)
    assert np.all(record.hum_ratio <= saturation + 1e-12)


@pytest.mark.parametrize(
    "modifier, values, expected",
    [
        (MultiplierSchedule(schedule="shape"), 0.5, 33.0 - 5.5),
        (DifferenceSchedule(schedule="shape"), 4.0, 29.0),
        (TemperatureProfileSchedule(schedule="shape"), 18.0, 18.0),
    ],
)
def test_scheduled_range_modifiers(request_july, modifier, values, expected):
    # Arrange
    schedules = InMemorySchedules({"shape": [values] * 24}, 2)
    source = DesignDaySynthesizer(
        summer_day(range_modifier=modifier, humidity=HumidityRatio(humidity_ratio=0.005)),
        SITE, timesteps_per_hour=2, schedules=schedules,
    )

    # Act
    record = source.read_day(request_july)

    # Assert
    np.testing.assert_allclose(record.dry_bulb, expected)


def test_hourly_multiplier_schedule_is_blended_onto_timesteps(request_july):
    # Arrange
    shape = np.linspace(0.0, 1.0, 24)
    schedules = InMemorySchedules({"shape": shape}, 4)
    source = DesignDaySynthesizer(
        summer_day(
            range_modifier=MultiplierSchedule(schedule="shape"),
            humidity=HumidityRatio(humidity_ratio=0.005),
        ),
        SITE, timesteps_per_hour=4, schedules=schedules,
    )

    # Act
    record = source.read_day(request_july)

    # Assert
    weights = np.array([0.25, 0.5, 0.75, 1.0])
    np.testing.assert_allclose(record.dry_bulb[1], 33.0 - 11.0 * shape[1] * weights)
    np.testing.assert_allclose(record.dry_bulb[:, -1], 33.0 - 11.0 * shape)
    # Hour 1 blends with hour 24 of the same day
    np.testing.assert_allclose(record.dry_bulb[0], 22.0 + 11.0 * weights)


def test_sub_hourly_profile_schedule_is_used_as_given(request_july):
    # Arrange
    profile = np.tile([20.0, 21.0], 24)
    schedules = InMemorySchedules({"profile": profile}, 2)
    source = DesignDaySynthesizer(
        summer_day(
            range_modifier=TemperatureProfileSchedule(schedule="profile"),
            humidity=HumidityRatio(humidity_ratio=0.005),
        ),
        SITE, timesteps_per_hour=2, schedules=schedules,
    )

    # Act
    record = source.read_day(request_july)

    # Assert
    np.testing.assert_allclose(record.dry_bulb, profile.reshape(24, 2))


def test_relative_humidity_schedule(request_july):
    schedules = InMemorySchedules({"rh": [50.0] * 24})
    source = DesignDaySynthesizer(
        summer_day(humidity=RelativeHumiditySchedule(schedule="rh")), SITE, schedules=schedules
    )

    record = source.read_day(request_july)

    np.testing.assert_allclose(record.rel_hum, 50.0, atol=0.1)


def test_wet_bulb_profile_follows_the_multipliers(request_july):
    source = DesignDaySynthesizer(
        summer_day(humidity=WetBulbProfileDefault(wet_bulb=23.0, wet_bulb_range=4.0)), SITE
    )

    record = source.read_day(request_july)

    assert record.hum_ratio.max() > record.hum_ratio.min()


def test_missing_schedules_are_reported_on_construction():
    config = summer_day(range_modifier=MultiplierSchedule(schedule="shape"))

    with pytest.raises(ConfigurationError):
        DesignDaySynthesizer(config, SITE)
    with pytest.raises(ConfigurationError):
        DesignDaySynthesizer(config, SITE, schedules=InMemorySchedules({"other": [0.0] * 24}))


def test_pressure_defaults_to_standard_pressure_at_elevation(psychrometrics):
    source = DesignDaySynthesizer(
        summer_day(pressure=None), SITE, elevation=1634.0, psychrometrics=psychrometrics
    )

    assert source.pressure == pytest.approx(psychrometrics.standard_pressure(1634.0))
    assert source.pressure < 85000.0


def test_solar_is_zero_at_night_and_sky_is_clear(request_july):
    source = DesignDaySynthesizer(
        summer_day(solar_model=AshraeTauConfig(tau_b=0.4, tau_d=2.3)), SITE, timesteps_per_hour=2
    )

    record = source.read_day(request_july)

    assert np.all(record.beam_solar[:3] == 0.0)
    assert record.beam_solar.max() > 500.0
    np.testing.assert_allclose(record.beam_solar_hourly, record.beam_solar.mean(axis=1))
    np.testing.assert_allclose(record.opaque_sky_cover, 0.0)
    assert np.all(record.sky_temp < record.dry_bulb)


def test_zhang_huang_sky_cover_drives_opaque_cover(request_july):
    source = DesignDaySynthesizer(summer_day(solar_model=ZhangHuangConfig(sky_cover=6.0)), SITE)

    record = source.read_day(request_july)

    np.testing.assert_allclose(record.opaque_sky_cover, 6.0)


def test_flags_and_day_type(request_july):
    # Arrange
    config = summer_day(rain=True, snow=True, dst=True, day_type="Monday")
    source = DesignDaySynthesizer(config, SITE)
    no_rain = DayRequest(
        year=2013, month=7, day=21, day_of_year=202, weekday=request_july.weekday,
        use_rain=False,
    )

    # Act
    wet = source.read_day(request_july)
    dry = source.read_day(no_rain)

    # Assert
    assert wet.is_rain.all() and wet.is_snow.all()
    assert not dry.is_rain.any()
    assert wet.dst_active
    assert wet.day_type == 2
    assert source.description == "Summer 0.4%"


def test_reading_twice_gives_the_same_day(request_july):
    source = DesignDaySynthesizer(summer_day(), SITE, timesteps_per_hour=3)

    first = source.read_day(request_july)
    second = source.read_day(request_july)

    np.testing.assert_array_equal(first.dry_bulb, second.dry_bulb)
    np.testing.assert_array_equal(first.beam_solar, second.beam_solar)


def test_design_day_type_names():
    assert design_day_type("monday") == 2
    assert design_day_type("Holiday") == 8
    assert design_day_type("winter_design_day") == 10
    with pytest.raises(ValueError):
        summer_day(day_type="funday")

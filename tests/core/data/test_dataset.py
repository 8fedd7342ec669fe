"""Tests for running a whole configuration through WeatherDataset."""

import pytest

from weathersim import WeatherDataset, build_dataset
from weathersim.config import LocationConfig, WeatherEngineConfig
from weathersim.core.data.sources.design_day.config import DesignDayConfig, DewPoint, WetBulb
from weathersim.environment.config import RunPeriodConfig
from weathersim.environment.scheduler import EnvironmentScheduler

LOCATION = LocationConfig(name="Boulder", latitude=40.02, longitude=-105.25, time_zone=-7.0)


@pytest.fixture
def design_day_config():
    return WeatherEngineConfig(
        location=LOCATION,
        timesteps_per_hour=2,
        design_days=[
            DesignDayConfig(
                name="Summer", month=7, day=21, max_dry_bulb=33.0, daily_range=11.0,
                humidity=WetBulb(wet_bulb=23.0),
            ),
            DesignDayConfig(
                name="Winter", month=1, day=21, day_type="winter_design_day",
                max_dry_bulb=-12.0, humidity=DewPoint(dew_point=-15.0),
            ),
        ],
    )


def test_iterating_yields_every_timestep(design_day_config, diagnostics):
    # Arrange
    dataset = build_dataset(design_day_config, diagnostics=diagnostics)

    # Act
    conditions = list(dataset)

    # Assert
    assert len(conditions) == 2 * 24 * 2
    assert conditions[0].environment == "Summer"
    assert (conditions[0].hour, conditions[0].timestep) == (1, 1)
    assert (conditions[47].hour, conditions[47].timestep) == (24, 2)
    assert conditions[-1].environment == "Winter"
    assert [s.title for s in dataset.summaries] == ["Summer", "Winter"]


def test_to_frame(design_day_config, diagnostics):
    # Arrange
    dataset = build_dataset(design_day_config, diagnostics=diagnostics)

    # Act
    frame = dataset.to_frame(environment="Winter")

    # Assert
    assert len(frame) == 48
    assert set(frame["environment"]) == {"Winter"}
    assert {"sun_east", "sun_north", "sun_up"} <= set(frame.columns)
    assert "sun_direction" not in frame.columns
    assert frame["dry_bulb"].max() == pytest.approx(-12.0)
    assert frame["beam_solar"].min() == 0.0
    assert frame["weekday"].dtype.kind == "i"


def test_warmup_days_do_not_produce_rows(epw_factory, diagnostics):
    # Arrange
    config = WeatherEngineConfig(
        weather_file=str(epw_factory()),
        run_periods=[RunPeriodConfig(name="Week", begin_month=1, begin_day=1, end_month=1, end_day=7)],
    )
    dataset = WeatherDataset(EnvironmentScheduler(config, diagnostics), warmup_days=3)

    # Act
    frame = dataset.to_frame()

    # Assert
    assert len(frame) == 7 * 24
    assert frame["day"].tolist()[::24] == [1, 2, 3, 4, 5, 6, 7]
    assert dataset.summaries[0].days_simulated == 7


def test_a_scheduler_runs_once(design_day_config, diagnostics):
    dataset = build_dataset(design_day_config, diagnostics=diagnostics)

    assert len(list(dataset)) == 96
    assert list(dataset) == []

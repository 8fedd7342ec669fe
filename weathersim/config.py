"""Root configuration of the weather engine and its YAML loader."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import dacite
import yaml

from weathersim.core.calendar.config import DaylightSavingConfig, SpecialDayConfig
from weathersim.core.calendar.dates import DayType, WeekDay
from weathersim.core.data.sources.design_day.config import DesignDayConfig
from weathersim.core.sky import EmissivitySkyConfig, SkyTemperatureConfig
from weathersim.core.solar.models import DEFAULT_SUN_IS_UP
from weathersim.environment.config import RunPeriodConfig, WeatherFileDaysConfig


@dataclass(frozen=True, slots=True, kw_only=True)
class LocationConfig:
    name: str
    latitude: float
    longitude: float
    time_zone: float
    elevation: float = 0.0

    def __post_init__(self):
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError("Latitude must be between -90 and 90 degrees.")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError("Longitude must be between -180 and 180 degrees.")
        if not -12.0 <= self.time_zone <= 14.0:
            raise ValueError("Time zone must be between -12 and +14 hours.")
        if not -300.0 <= self.elevation <= 8900.0:
            raise ValueError("Elevation must be between -300 and 8900 m.")


@dataclass(frozen=True, slots=True, kw_only=True)
class WeatherStationConfig:
    """Height and terrain of the station that measured the weather data."""

    wind_sensor_height: float = 10.0
    wind_exponent: float = 0.14
    wind_boundary_layer_thickness: float = 270.0
    temperature_sensor_height: float = 1.5

    def __post_init__(self):
        if self.wind_sensor_height <= 0.0 or self.temperature_sensor_height < 0.0:
            raise ValueError("Sensor heights must be positive.")
        if self.wind_exponent < 0.0 or self.wind_boundary_layer_thickness < 0.0:
            raise ValueError("Wind profile parameters must not be negative.")


@dataclass(frozen=True, slots=True, kw_only=True)
class WeatherEngineConfig:
    timesteps_per_hour: int = 1
    weather_file: Optional[str] = None
    location: Optional[LocationConfig] = None
    """Overrides the weather file location; required without a weather file."""
    ground_reflectance: Tuple[float, ...] = (0.2,) * 12
    sun_is_up_threshold: float = DEFAULT_SUN_IS_UP
    run_design_days: bool = True
    run_weather_file_periods: bool = True
    design_days: List[DesignDayConfig] = field(default_factory=list)
    weather_file_days: List[WeatherFileDaysConfig] = field(default_factory=list)
    run_periods: List[RunPeriodConfig] = field(default_factory=list)
    special_days: List[SpecialDayConfig] = field(default_factory=list)
    daylight_saving: Optional[DaylightSavingConfig] = None
    """Overrides the daylight saving period of the weather file."""
    sky_temperature: SkyTemperatureConfig = field(default_factory=EmissivitySkyConfig)
    schedules: Dict[str, List[float]] = field(default_factory=dict)
    weather_station: WeatherStationConfig = field(default_factory=WeatherStationConfig)

    def __post_init__(self):
        if not 1 <= self.timesteps_per_hour <= 60 or 60 % self.timesteps_per_hour:
            raise ValueError("Timesteps per hour must divide 60 evenly.")
        if len(self.ground_reflectance) != 12:
            raise ValueError("Ground reflectance needs 12 monthly values.")
        if any(not 0.0 <= value <= 1.0 for value in self.ground_reflectance):
            raise ValueError("Ground reflectance must be between 0 and 1.")
        if self.weather_file is None and self.location is None:
            raise ValueError("A location is required when no weather file is given.")
        if self.weather_file is None and (self.run_periods or self.weather_file_days):
            raise ValueError("Run periods need a weather file.")


def _weekday(value: Any) -> WeekDay:
    if isinstance(value, str):
        return WeekDay.from_name(value)
    return WeekDay(value)


def _day_type(value: Any) -> DayType:
    if isinstance(value, str):
        return DayType.from_name(value)
    return DayType(value)


DACITE_CONFIG = dacite.Config(
    cast=[Enum, tuple, float],
    type_hooks={WeekDay: _weekday, DayType: _day_type},
    strict_unions_match=False,
)


def load_config(source: Union[str, Path, Mapping[str, Any]]) -> WeatherEngineConfig:
    """Build a WeatherEngineConfig from a mapping, a YAML string or a YAML file."""
    if isinstance(source, Mapping):
        data = dict(source)
    elif isinstance(source, Path) or str(source).endswith((".yaml", ".yml")):
        with open(source, "r") as file:
            data = yaml.safe_load(file)
    else:
        data = yaml.safe_load(source)
    if not isinstance(data, Mapping):
        raise ValueError("Weather engine configuration must be a mapping.")
    return dacite.from_dict(WeatherEngineConfig, data, config=DACITE_CONFIG)

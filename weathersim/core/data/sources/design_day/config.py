"""Configuration of design days."""

from dataclasses import dataclass, field
from typing import Literal, Optional, Union

from weathersim.core.solar.config import AshraeClearSkyConfig, SolarModelConfig

# ASHRAE fraction of the daily range below the maximum, hours 1..24.
DEFAULT_TEMPERATURE_MULTIPLIERS = (
    0.88, 0.92, 0.95, 0.98, 1.00, 0.98, 0.91, 0.74, 0.55, 0.38, 0.23, 0.13,
    0.05, 0.00, 0.00, 0.06, 0.14, 0.24, 0.39, 0.50, 0.59, 0.68, 0.75, 0.82,
)

DESIGN_DAY_TYPES = (
    "sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday",
    "holiday", "summer_design_day", "winter_design_day", "custom_day_1", "custom_day_2",
)


# Dry-bulb range modifiers


@dataclass(frozen=True, slots=True, kw_only=True)
class DefaultMultipliers:
    type: Literal["default_multipliers"] = "default_multipliers"


@dataclass(frozen=True, slots=True, kw_only=True)
class MultiplierSchedule:
    """Fraction of the daily range below the maximum, from a day schedule."""

    schedule: str

    type: Literal["multiplier_schedule"] = "multiplier_schedule"


@dataclass(frozen=True, slots=True, kw_only=True)
class DifferenceSchedule:
    """Temperature difference below the maximum, from a day schedule."""

    schedule: str

    type: Literal["difference_schedule"] = "difference_schedule"


@dataclass(frozen=True, slots=True, kw_only=True)
class TemperatureProfileSchedule:
    """Dry-bulb temperatures taken directly from a day schedule."""

    schedule: str

    type: Literal["temperature_profile_schedule"] = "temperature_profile_schedule"


RangeModifierConfig = Union[
    DefaultMultipliers, MultiplierSchedule, DifferenceSchedule, TemperatureProfileSchedule
]


# Humidity indicating conditions


@dataclass(frozen=True, slots=True, kw_only=True)
class WetBulb:
    wet_bulb: float

    type: Literal["wet_bulb"] = "wet_bulb"


@dataclass(frozen=True, slots=True, kw_only=True)
class DewPoint:
    dew_point: float

    type: Literal["dew_point"] = "dew_point"


@dataclass(frozen=True, slots=True, kw_only=True)
class HumidityRatio:
    humidity_ratio: float  # kg water / kg dry air

    type: Literal["humidity_ratio"] = "humidity_ratio"

    def __post_init__(self):
        if not 0.0 <= self.humidity_ratio <= 0.03:
            raise ValueError("Humidity ratio must be between 0 and 0.03.")


@dataclass(frozen=True, slots=True, kw_only=True)
class Enthalpy:
    enthalpy: float  # J/kg

    type: Literal["enthalpy"] = "enthalpy"


@dataclass(frozen=True, slots=True, kw_only=True)
class RelativeHumiditySchedule:
    """Relative humidity in percent, from a day schedule."""

    schedule: str

    type: Literal["relative_humidity_schedule"] = "relative_humidity_schedule"


@dataclass(frozen=True, slots=True, kw_only=True)
class WetBulbProfileDefault:
    """Wet-bulb profile shaped by the default multipliers."""

    wet_bulb: float
    wet_bulb_range: float

    type: Literal["wet_bulb_profile_default"] = "wet_bulb_profile_default"


@dataclass(frozen=True, slots=True, kw_only=True)
class WetBulbProfileDifference:
    wet_bulb: float
    schedule: str

    type: Literal["wet_bulb_profile_difference"] = "wet_bulb_profile_difference"


@dataclass(frozen=True, slots=True, kw_only=True)
class WetBulbProfileMultiplier:
    wet_bulb: float
    wet_bulb_range: float
    schedule: str

    type: Literal["wet_bulb_profile_multiplier"] = "wet_bulb_profile_multiplier"


HumidityConfig = Union[
    WetBulb,
    DewPoint,
    HumidityRatio,
    Enthalpy,
    RelativeHumiditySchedule,
    WetBulbProfileDefault,
    WetBulbProfileDifference,
    WetBulbProfileMultiplier,
]
"""Union type for all humidity indicating conditions."""


@dataclass(frozen=True, slots=True, kw_only=True)
class DesignDayConfig:
    name: str
    month: int
    day: int
    day_type: str = "summer_design_day"
    max_dry_bulb: float
    daily_range: float = 0.0
    range_modifier: RangeModifierConfig = field(default_factory=DefaultMultipliers)
    humidity: HumidityConfig
    pressure: Optional[float] = None  # Pa; standard pressure at site elevation when None
    wind_speed: float = 0.0
    wind_dir: float = 0.0
    solar_model: SolarModelConfig = field(default_factory=AshraeClearSkyConfig)
    rain: bool = False
    snow: bool = False
    dst: bool = False

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValueError(f"Design day '{self.name}': month out of range.")
        if not 1 <= self.day <= 31:
            raise ValueError(f"Design day '{self.name}': day out of range.")
        if not -90.0 <= self.max_dry_bulb <= 70.0:
            raise ValueError(f"Design day '{self.name}': maximum dry bulb out of range.")
        if self.daily_range < 0.0:
            raise ValueError(f"Design day '{self.name}': daily range must not be negative.")
        if not 0.0 <= self.wind_speed <= 40.0:
            raise ValueError(f"Design day '{self.name}': wind speed out of range.")
        if not 0.0 <= self.wind_dir <= 360.0:
            raise ValueError(f"Design day '{self.name}': wind direction out of range.")
        if self.pressure is not None and not 31000.0 <= self.pressure <= 120000.0:
            raise ValueError(f"Design day '{self.name}': pressure out of range.")
        if self.day_type.lower() not in DESIGN_DAY_TYPES:
            raise ValueError(f"Design day '{self.name}': unknown day type {self.day_type!r}.")

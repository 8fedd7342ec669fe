from dataclasses import dataclass, field, fields, replace
from typing import Optional, Tuple

import numpy as np

from weathersim.core.calendar.dates import WeekDay
from weathersim.core.calendar.resolver import TABLE_SIZE
from weathersim.core.missing import MissingValuePolicy, WeatherField

# Per-timestep arrays carried by a DailyWeatherRecord.
TIMESTEP_FIELDS = (
    "dry_bulb",
    "dew_point",
    "rel_hum",
    "hum_ratio",
    "pressure",
    "wind_speed",
    "wind_dir",
    "sky_temp",
    "horiz_ir",
    "beam_solar",
    "diffuse_solar",
    "liquid_precip",
    "albedo",
    "total_sky_cover",
    "opaque_sky_cover",
    "is_rain",
    "is_snow",
)


@dataclass
class DailyWeatherRecord:
    """
    One day of outdoor conditions on the simulation timestep grid.

    Arrays are shaped ``(24, timesteps_per_hour)``; index ``[h, t]`` holds the
    value at the end of timestep ``t + 1`` of hour ``h + 1``.
    """

    timesteps_per_hour: int
    year: int = 0
    month: int = 1
    day: int = 1
    day_of_year: int = 1
    weekday: WeekDay = WeekDay.SUNDAY
    day_type: int = int(WeekDay.SUNDAY)
    holiday_index: int = 0
    dst_active: bool = False
    sin_declination: float = 0.0
    cos_declination: float = 1.0
    equation_of_time: float = 0.0
    ashrae_a: float = 0.0
    ashrae_b: float = 0.0
    ashrae_c: float = 0.0
    annual_variation: float = 1.0

    dry_bulb: np.ndarray = None
    dew_point: np.ndarray = None
    rel_hum: np.ndarray = None
    hum_ratio: np.ndarray = None
    pressure: np.ndarray = None
    wind_speed: np.ndarray = None
    wind_dir: np.ndarray = None
    sky_temp: np.ndarray = None
    horiz_ir: np.ndarray = None
    beam_solar: np.ndarray = None
    diffuse_solar: np.ndarray = None
    liquid_precip: np.ndarray = None
    albedo: np.ndarray = None
    total_sky_cover: np.ndarray = None
    opaque_sky_cover: np.ndarray = None
    is_rain: np.ndarray = None
    is_snow: np.ndarray = None

    # Hour-averaged solar, kept alongside the authoritative sub-hourly values.
    beam_solar_hourly: np.ndarray = None
    diffuse_solar_hourly: np.ndarray = None

    def __post_init__(self):
        shape = (24, self.timesteps_per_hour)
        for name in TIMESTEP_FIELDS:
            if getattr(self, name) is None:
                dtype = bool if name in ("is_rain", "is_snow") else float
                setattr(self, name, np.zeros(shape, dtype=dtype))
        if self.beam_solar_hourly is None:
            self.beam_solar_hourly = np.zeros(24)
        if self.diffuse_solar_hourly is None:
            self.diffuse_solar_hourly = np.zeros(24)

    @property
    def date(self) -> Tuple[int, int, int]:
        return self.year, self.month, self.day

    def copy(self) -> "DailyWeatherRecord":
        """Deep copy; the result shares no arrays with this record."""
        arrays = {
            f.name: getattr(self, f.name).copy()
            for f in fields(self)
            if isinstance(getattr(self, f.name), np.ndarray)
        }
        return replace(self, **arrays)


@dataclass
class CalendarState:
    """Calendar tables of the current environment and simulated year."""

    leap_add: int = 0
    current_year: int = 0
    weekdays_by_month: Tuple[WeekDay, ...] = (WeekDay.SUNDAY,) * 12
    day_types: np.ndarray = field(default_factory=lambda: np.zeros(TABLE_SIZE, dtype=np.int8))
    dst_active: np.ndarray = field(default_factory=lambda: np.zeros(TABLE_SIZE, dtype=bool))
    weekday_by_day_of_year: np.ndarray = field(
        default_factory=lambda: np.zeros(TABLE_SIZE, dtype=np.int8)
    )
    dst_start: Tuple[int, int] = (0, 0)
    dst_end: Tuple[int, int] = (0, 0)

    def reset(self) -> None:
        self.leap_add = 0
        self.current_year = 0
        self.weekdays_by_month = (WeekDay.SUNDAY,) * 12
        self.day_types = np.zeros(TABLE_SIZE, dtype=np.int8)
        self.dst_active = np.zeros(TABLE_SIZE, dtype=bool)
        self.weekday_by_day_of_year = np.zeros(TABLE_SIZE, dtype=np.int8)
        self.dst_start = (0, 0)
        self.dst_end = (0, 0)


@dataclass
class WeatherEngineState:
    """
    Mutable state of the weather engine, owned by the EnvironmentScheduler.

    ``reset_for_environment`` is called whenever an environment opens; the
    missing-value policy keeps its identity for the whole run.
    """

    timesteps_per_hour: int
    calendar: CalendarState = field(default_factory=CalendarState)
    missing: MissingValuePolicy = field(default_factory=MissingValuePolicy)
    today: Optional[DailyWeatherRecord] = None
    tomorrow: Optional[DailyWeatherRecord] = None
    environment_index: int = 0
    day_of_sim: int = 0
    year_rollovers: int = 0
    cycle: int = 0

    def reset_for_environment(self, pressure_default: Optional[float] = None) -> None:
        self.calendar.reset()
        self.today = None
        self.tomorrow = None
        self.day_of_sim = 0
        self.year_rollovers = 0
        self.cycle = 0
        overrides = None
        if pressure_default is not None:
            overrides = {WeatherField.PRESSURE: pressure_default}
        self.missing.reset(overrides)

    def promote_tomorrow(self) -> DailyWeatherRecord:
        if self.tomorrow is None:
            raise RuntimeError("No record available for the next day.")
        self.today = self.tomorrow.copy()
        return self.today


@dataclass(frozen=True, slots=True)
class OutdoorConditions:
    """Outdoor environment at one timestep, as handed to the host solver."""

    environment: str
    day_of_sim: int
    year: int
    month: int
    day: int
    hour: int
    timestep: int
    day_of_year: int
    weekday: WeekDay
    day_type: int
    holiday_index: int
    dst_active: bool
    dry_bulb: float
    dew_point: float
    rel_hum: float
    hum_ratio: float
    pressure: float
    wind_speed: float
    wind_dir: float
    sky_temp: float
    horiz_ir: float
    beam_solar: float
    diffuse_solar: float
    liquid_precip: float
    albedo: float
    total_sky_cover: float
    opaque_sky_cover: float
    is_rain: bool
    is_snow: bool
    sun_is_up: bool
    sun_direction: Tuple[float, float, float]
    ground_reflectance: float
    wind_sensor_height: float
    temperature_sensor_height: float

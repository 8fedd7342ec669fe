"""Synthesis of design-day records from summary statistics."""

import logging
from typing import Optional

import numpy as np

from weathersim.core.calendar.dates import DayType, WeekDay
from weathersim.core.data.sources.base import DayRequest, RecordSource
from weathersim.core.data.sources.design_day.config import (
    DEFAULT_TEMPERATURE_MULTIPLIERS,
    DefaultMultipliers,
    DesignDayConfig,
    DewPoint,
    DifferenceSchedule,
    Enthalpy,
    HumidityRatio,
    MultiplierSchedule,
    RelativeHumiditySchedule,
    TemperatureProfileSchedule,
    WetBulb,
    WetBulbProfileDefault,
    WetBulbProfileDifference,
    WetBulbProfileMultiplier,
)
from weathersim.core.errors import ConfigurationError, Diagnostics, LoggingDiagnostics
from weathersim.core.interpolation import expand_hourly, hourly_means
from weathersim.core.providers.psychrometrics import Psychrometrics, PsychrolibPsychrometrics
from weathersim.core.providers.schedules import ScheduleProvider
from weathersim.core.sky import SkyModel
from weathersim.core.solar import (
    SiteGeometry,
    SolarContext,
    ZhangHuangConfig,
    build_solar_model,
    cos_zenith_grid,
    daily_solar_coefficients,
)
from weathersim.core.solar.models import DEFAULT_SUN_IS_UP
from weathersim.core.state import DailyWeatherRecord

logger = logging.getLogger(__name__)


def design_day_type(name: str) -> int:
    """Day-type index of a weekday name or one of the special day types."""
    try:
        return int(WeekDay.from_name(name))
    except ValueError:
        return int(DayType.from_name(name))


class DesignDaySynthesizer(RecordSource):
    """
    Record source producing the same synthetic day every time it is read.

    Dry-bulb follows the configured daily range profile, humidity is derived
    from the indicating condition through the psychrometric provider, and
    solar irradiance comes from the configured solar model evaluated at the
    midpoint of every timestep.
    """

    def __init__(
        self,
        config: DesignDayConfig,
        site: SiteGeometry,
        elevation: float = 0.0,
        timesteps_per_hour: int = 1,
        psychrometrics: Optional[Psychrometrics] = None,
        schedules: Optional[ScheduleProvider] = None,
        sky_model: Optional[SkyModel] = None,
        sun_is_up: float = DEFAULT_SUN_IS_UP,
        diagnostics: Optional[Diagnostics] = None,
    ):
        super().__init__(timesteps_per_hour)
        self.config = config
        self.site = site
        self.elevation = elevation
        self.psychrometrics = psychrometrics or PsychrolibPsychrometrics()
        self.schedules = schedules
        self.sky_model = sky_model or SkyModel(psychrometrics=self.psychrometrics)
        self.sun_is_up = sun_is_up
        self.diagnostics = diagnostics or LoggingDiagnostics(__name__)
        self.solar_model = build_solar_model(config.solar_model)
        self.day_type = design_day_type(config.day_type)
        for name in self.referenced_schedules():
            self._handle(name)

    def referenced_schedules(self):
        """Names of the day schedules this design day reads."""
        names = []
        for part in (self.config.range_modifier, self.config.humidity):
            name = getattr(part, "schedule", None)
            if name:
                names.append(name)
        return names

    @property
    def description(self) -> Optional[str]:
        return self.config.name

    @property
    def pressure(self) -> float:
        if self.config.pressure is not None:
            return self.config.pressure
        return self.psychrometrics.standard_pressure(self.elevation)

    def _handle(self, name: str) -> int:
        if self.schedules is None:
            raise ConfigurationError(
                f"Design day '{self.config.name}' references schedule '{name}' "
                "but no schedules were provided."
            )
        handle = self.schedules.index(name)
        if handle == 0:
            raise ConfigurationError(
                f"Design day '{self.config.name}': schedule '{name}' not found."
            )
        return handle

    def _schedule(self, name: str, request: DayRequest) -> np.ndarray:
        handle = self._handle(name)
        return np.asarray(
            self.schedules.day_values(handle, request.day_of_year, int(request.weekday)),
            dtype=float,
        )

    def _profile_schedule(self, name: str, request: DayRequest) -> np.ndarray:
        """Temperature-like schedule on the timestep grid.

        A schedule holding one value per hour is blended between adjacent
        hours like the default profile; hour 1 blends with hour 24.
        """
        values = self._schedule(name, request)
        if self.timesteps_per_hour > 1 and np.all(values == values[:, :1]):
            hourly = values[:, 0]
            return expand_hourly(hourly, hourly[-1], self.timesteps_per_hour)
        return values

    def _default_profile(self, maximum: float, daily_range: float) -> np.ndarray:
        """Hourly profile from the default multipliers, blended onto timesteps.

        Hour 1 blends with hour 24 of the same day.
        """
        hourly = maximum - daily_range * np.asarray(DEFAULT_TEMPERATURE_MULTIPLIERS)
        return expand_hourly(hourly, hourly[-1], self.timesteps_per_hour)

    def dry_bulb(self, request: DayRequest) -> np.ndarray:
        config = self.config
        modifier = config.range_modifier
        if isinstance(modifier, DefaultMultipliers):
            return self._default_profile(config.max_dry_bulb, config.daily_range)
        values = self._profile_schedule(modifier.schedule, request)
        if isinstance(modifier, MultiplierSchedule):
            return config.max_dry_bulb - config.daily_range * values
        if isinstance(modifier, DifferenceSchedule):
            return config.max_dry_bulb - values
        if isinstance(modifier, TemperatureProfileSchedule):
            return values
        raise ConfigurationError(f"Unsupported range modifier: {modifier!r}")

    def _clamp_indicator(self, value: float, label: str, maximum: float) -> float:
        if value > maximum:
            self.diagnostics.warning(
                f"Design day '{self.config.name}': {label} ({value:.2f} C) exceeds the "
                f"maximum dry-bulb ({maximum:.2f} C); using saturated conditions."
            )
            return maximum
        return value

    def humidity_ratio(self, request: DayRequest, dry_bulb: np.ndarray) -> np.ndarray:
        """Humidity ratio on the timestep grid, never above saturation."""
        config = self.config
        humidity = config.humidity
        pressure = self.pressure
        psy = self.psychrometrics
        maximum = float(np.max(dry_bulb))

        if isinstance(humidity, RelativeHumiditySchedule):
            rel_hum = np.clip(self._schedule(humidity.schedule, request), 0.0, 100.0) / 100.0
            return np.vectorize(psy.hum_ratio_from_rel_hum)(dry_bulb, rel_hum, pressure)

        if isinstance(humidity, (WetBulbProfileDefault, WetBulbProfileDifference, WetBulbProfileMultiplier)):
            wet_bulb_max = self._clamp_indicator(humidity.wet_bulb, "wet-bulb", maximum)
            if isinstance(humidity, WetBulbProfileDefault):
                wet_bulb = self._default_profile(wet_bulb_max, humidity.wet_bulb_range)
            elif isinstance(humidity, WetBulbProfileDifference):
                wet_bulb = wet_bulb_max - self._profile_schedule(humidity.schedule, request)
            else:
                wet_bulb = wet_bulb_max - humidity.wet_bulb_range * self._profile_schedule(
                    humidity.schedule, request
                )
            wet_bulb = np.minimum(wet_bulb, dry_bulb)
            return np.vectorize(psy.hum_ratio_from_wet_bulb)(dry_bulb, wet_bulb, pressure)

        if isinstance(humidity, WetBulb):
            wet_bulb = self._clamp_indicator(humidity.wet_bulb, "wet-bulb", maximum)
            value = psy.hum_ratio_from_wet_bulb(maximum, wet_bulb, pressure)
        elif isinstance(humidity, DewPoint):
            dew_point = self._clamp_indicator(humidity.dew_point, "dew-point", maximum)
            value = psy.hum_ratio_from_dew_point(dew_point, pressure)
        elif isinstance(humidity, HumidityRatio):
            value = humidity.humidity_ratio
        elif isinstance(humidity, Enthalpy):
            value = psy.hum_ratio_from_enthalpy(maximum, humidity.enthalpy)
        else:
            raise ConfigurationError(f"Unsupported humidity condition: {humidity!r}")

        saturation = np.vectorize(psy.sat_hum_ratio)(dry_bulb, pressure)
        return np.minimum(value, saturation)

    def read_day(self, request: DayRequest) -> DailyWeatherRecord:
        config = self.config
        n = self.timesteps_per_hour
        shape = (24, n)
        pressure = self.pressure
        psy = self.psychrometrics

        dry_bulb = self.dry_bulb(request)
        hum_ratio = self.humidity_ratio(request, dry_bulb)
        dew_point = np.vectorize(psy.dew_point_from_hum_ratio)(dry_bulb, hum_ratio, pressure)
        rel_hum = 100.0 * np.vectorize(psy.rel_hum_from_hum_ratio)(dry_bulb, hum_ratio, pressure)

        wind_speed = np.full(shape, config.wind_speed)
        sky_cover = (
            config.solar_model.sky_cover
            if isinstance(config.solar_model, ZhangHuangConfig)
            else 0.0
        )
        opaque = np.full(shape, sky_cover)

        coefficients = daily_solar_coefficients(request.day_of_year)
        context = SolarContext(
            cos_zenith=cos_zenith_grid(coefficients, self.site, n),
            coefficients=coefficients,
            dry_bulb=dry_bulb,
            rel_hum=rel_hum,
            wind_speed=wind_speed,
            day_of_year=request.day_of_year,
            weekday=int(request.weekday),
            sun_is_up=self.sun_is_up,
            schedules=self.schedules,
        )
        beam, diffuse = self.solar_model.irradiance(context)
        sky_temp, horiz_ir = self.sky_model.compute(
            dry_bulb, dew_point, opaque, request.day_of_year, int(request.weekday)
        )
        logger.debug(
            "Synthesized design day '%s': dry-bulb %.1f..%.1f C, peak beam %.0f W/m2",
            config.name, dry_bulb.min(), dry_bulb.max(), beam.max(),
        )

        return DailyWeatherRecord(
            timesteps_per_hour=n,
            year=request.year,
            month=request.month,
            day=request.day,
            day_of_year=request.day_of_year,
            weekday=request.weekday,
            day_type=self.day_type,
            dst_active=config.dst,
            sin_declination=coefficients.sin_declination,
            cos_declination=coefficients.cos_declination,
            equation_of_time=coefficients.equation_of_time,
            ashrae_a=coefficients.a,
            ashrae_b=coefficients.b,
            ashrae_c=coefficients.c,
            annual_variation=coefficients.annual_variation,
            dry_bulb=dry_bulb,
            dew_point=dew_point,
            rel_hum=rel_hum,
            hum_ratio=hum_ratio,
            pressure=np.full(shape, pressure),
            wind_speed=wind_speed,
            wind_dir=np.full(shape, config.wind_dir),
            sky_temp=sky_temp,
            horiz_ir=horiz_ir,
            beam_solar=beam,
            diffuse_solar=diffuse,
            liquid_precip=np.zeros(shape),
            albedo=np.zeros(shape),
            total_sky_cover=opaque.copy(),
            opaque_sky_cover=opaque,
            is_rain=np.full(shape, config.rain and request.use_rain),
            is_snow=np.full(shape, config.snow and request.use_snow),
            beam_solar_hourly=hourly_means(beam),
            diffuse_solar_hourly=hourly_means(diffuse),
        )

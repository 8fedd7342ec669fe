from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from weathersim.core.errors import ConfigurationError
from weathersim.core.providers.schedules import ScheduleProvider
from weathersim.core.solar.config import (
    AshraeClearSkyConfig,
    AshraeTau2017Config,
    AshraeTauConfig,
    ScheduleSolarConfig,
    SolarModelConfig,
    ZhangHuangConfig,
)
from weathersim.core.solar.geometry import (
    SOLAR_CONSTANT,
    DailySolarCoefficients,
    air_mass,
)
from weathersim.core.solar.registry import register, registry

DEFAULT_SUN_IS_UP = 0.00001


@dataclass(frozen=True)
class SolarContext:
    """Everything a solar model may need for one design day.

    All arrays are shaped ``(24, timesteps_per_hour)``; relative humidity is
    in percent.
    """

    cos_zenith: np.ndarray
    coefficients: DailySolarCoefficients
    dry_bulb: np.ndarray
    rel_hum: np.ndarray
    wind_speed: np.ndarray
    day_of_year: int
    weekday: int
    sun_is_up: float = DEFAULT_SUN_IS_UP
    schedules: Optional[ScheduleProvider] = None


class SolarModel(ABC):
    """
    Abstract base class for design-day solar models.

    A model returns beam normal and diffuse horizontal irradiance (W/m2)
    per timestep; both are forced to zero while the sun is below the
    sun-up threshold.
    """

    def __init__(self, config: SolarModelConfig):
        self.config = config

    @abstractmethod
    def _irradiance(self, context: SolarContext, sun_up: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        pass

    def irradiance(self, context: SolarContext) -> Tuple[np.ndarray, np.ndarray]:
        sun_up = context.cos_zenith >= context.sun_is_up
        beam, diffuse = self._irradiance(context, sun_up)
        beam = np.where(sun_up, np.maximum(beam, 0.0), 0.0)
        diffuse = np.where(sun_up, np.maximum(diffuse, 0.0), 0.0)
        return beam, diffuse


@register(AshraeClearSkyConfig)
class AshraeClearSkyModel(SolarModel):
    """ASHRAE clear sky: total horizontal from A, B and C, split with the
    clearness-index correlation below a sky clearness of 0.7."""

    DIFFUSE_SPLIT_CLEARNESS = 0.70
    MAX_CLEARNESS_INDEX = 0.75

    def _irradiance(self, context, sun_up):
        coef = context.coefficients
        clearness = self.config.sky_clearness
        cos_z = np.where(sun_up, context.cos_zenith, 1.0)
        exponent = coef.b / cos_z
        total = np.where(
            exponent > 700.0, 0.0,
            clearness * coef.a * (coef.c + cos_z) * np.exp(-np.minimum(exponent, 700.0)),
        )
        if clearness > self.DIFFUSE_SPLIT_CLEARNESS:
            diffuse = total * coef.c / (coef.c + cos_z)
        else:
            extraterrestrial = SOLAR_CONSTANT * coef.annual_variation * cos_z
            kt = np.minimum(total / extraterrestrial, self.MAX_CLEARNESS_INDEX)
            diffuse = total * (1.0045 + kt * (0.04349 + kt * (-3.5227 + 2.6313 * kt)))
        beam = (total - diffuse) / cos_z
        return beam, diffuse


class _AshraeTauBase(SolarModel):
    @abstractmethod
    def _air_mass_exponents(self, tau_b: float, tau_d: float) -> Tuple[float, float]:
        pass

    def _irradiance(self, context, sun_up):
        tau_b, tau_d = self.config.tau_b, self.config.tau_d
        ab, ad = self._air_mass_exponents(tau_b, tau_d)
        etr = SOLAR_CONSTANT * context.coefficients.annual_variation
        mass = np.vectorize(air_mass)(np.where(sun_up, context.cos_zenith, 1.0))
        beam = etr * np.exp(-tau_b * mass ** ab)
        diffuse = etr * np.exp(-tau_d * mass ** ad)
        return beam, diffuse


@register(AshraeTauConfig)
class AshraeTauModel(_AshraeTauBase):
    def _air_mass_exponents(self, tau_b, tau_d):
        ab = 1.219 - 0.043 * tau_b - 0.151 * tau_d - 0.204 * tau_b * tau_d
        ad = 0.202 + 0.852 * tau_b - 0.007 * tau_d - 0.357 * tau_b * tau_d
        return ab, ad


@register(AshraeTau2017Config)
class AshraeTau2017Model(_AshraeTauBase):
    def _air_mass_exponents(self, tau_b, tau_d):
        ab = 1.454 - 0.406 * tau_b - 0.268 * tau_d + 0.021 * tau_b * tau_d
        ad = 0.507 + 0.205 * tau_b - 0.080 * tau_d - 0.190 * tau_b * tau_d
        return ab, ad


@register(ZhangHuangConfig)
class ZhangHuangModel(SolarModel):
    """Zhang & Huang (2002) global horizontal regression, split with a
    clearness-index correlation into beam and diffuse."""

    C0, C1, C2, C3, C4, C5 = 0.5598, 0.4982, -0.6762, 0.02842, -0.00317, 0.014
    D, K = -17.853, 0.843
    SOLAR_CONSTANT = 1355.0

    def _irradiance(self, context, sun_up):
        n = context.dry_bulb.shape[1]
        cloud = self.config.sky_cover / 10.0
        series = context.dry_bulb.reshape(-1)
        # Temperature change over the previous three hours; the day repeats.
        trend = (series - np.roll(series, 3 * n)).reshape(context.dry_bulb.shape)

        sin_alt = np.where(sun_up, context.cos_zenith, 1.0)
        global_horiz = (
            self.SOLAR_CONSTANT * sin_alt * (
                self.C0 + self.C1 * cloud + self.C2 * cloud ** 2
                + self.C3 * trend + self.C4 * context.rel_hum
                + self.C5 * context.wind_speed
            ) + self.D
        ) / self.K
        global_horiz = np.maximum(global_horiz, 0.0)

        kt = np.clip(global_horiz / (self.SOLAR_CONSTANT * sin_alt), 0.0, 0.999)
        ktc = 0.4268 + 0.1934 * sin_alt
        kds = np.where(
            kt < ktc,
            (3.996 - 3.862 * sin_alt + 1.54 * sin_alt ** 2) * kt ** 3,
            kt - (1.107 + 0.03569 * sin_alt + 1.681 * sin_alt ** 2) * (1.0 - kt) ** 3,
        )
        kds = np.clip(kds, 0.0, kt)
        beam = self.SOLAR_CONSTANT * kds * (1.0 - kt) / (1.0 - kds)
        diffuse = np.maximum(global_horiz - beam * sin_alt, 0.0)
        return beam, diffuse


@register(ScheduleSolarConfig)
class ScheduleSolarModel(SolarModel):
    def _irradiance(self, context, sun_up):
        if context.schedules is None:
            raise ConfigurationError("Solar schedules requested but no schedule provider given.")
        values = []
        for name in (self.config.beam_schedule, self.config.diffuse_schedule):
            handle = context.schedules.index(name)
            if handle == 0:
                raise ConfigurationError(f"Solar schedule '{name}' not found.")
            values.append(context.schedules.day_values(handle, context.day_of_year, context.weekday))
        return values[0], values[1]


def build_solar_model(config: SolarModelConfig) -> SolarModel:
    model_cls = registry[config.__class__.__name__]
    return model_cls(config)

"""Configuration of the design-day solar models."""

from dataclasses import dataclass
from typing import Literal, Union


@dataclass(frozen=True, slots=True, kw_only=True)
class AshraeClearSkyConfig:
    """ASHRAE clear sky with a sky clearness multiplier."""

    sky_clearness: float = 1.0

    type: Literal["ashrae_clear_sky"] = "ashrae_clear_sky"

    def __post_init__(self):
        if not (0.0 <= self.sky_clearness <= 1.2):
            raise ValueError("Sky clearness must be between 0 and 1.2.")


@dataclass(frozen=True, slots=True, kw_only=True)
class AshraeTauConfig:
    """ASHRAE 2009 revised clear sky (optical depths for beam and diffuse)."""

    tau_b: float
    tau_d: float

    type: Literal["ashrae_tau"] = "ashrae_tau"

    def __post_init__(self):
        if not (0.0 < self.tau_b <= 1.2):
            raise ValueError("tau_b must be between 0 and 1.2.")
        if not (0.0 < self.tau_d <= 3.0):
            raise ValueError("tau_d must be between 0 and 3.")


@dataclass(frozen=True, slots=True, kw_only=True)
class AshraeTau2017Config:
    """ASHRAE 2017 clear sky coefficients."""

    tau_b: float
    tau_d: float

    type: Literal["ashrae_tau_2017"] = "ashrae_tau_2017"

    def __post_init__(self):
        if not (0.0 < self.tau_b <= 1.2):
            raise ValueError("tau_b must be between 0 and 1.2.")
        if not (0.0 < self.tau_d <= 3.0):
            raise ValueError("tau_d must be between 0 and 3.")


@dataclass(frozen=True, slots=True, kw_only=True)
class ZhangHuangConfig:
    """Zhang-Huang regression driven by the day's weather."""

    sky_cover: float = 0.0  # tenths

    type: Literal["zhang_huang"] = "zhang_huang"

    def __post_init__(self):
        if not (0.0 <= self.sky_cover <= 10.0):
            raise ValueError("Sky cover must be between 0 and 10 tenths.")


@dataclass(frozen=True, slots=True, kw_only=True)
class ScheduleSolarConfig:
    """Beam normal and diffuse horizontal irradiance played back from schedules."""

    beam_schedule: str
    diffuse_schedule: str

    type: Literal["schedule"] = "schedule"


SolarModelConfig = Union[
    AshraeClearSkyConfig,
    AshraeTauConfig,
    AshraeTau2017Config,
    ZhangHuangConfig,
    ScheduleSolarConfig,
]
"""Union type for all solar model configurations."""

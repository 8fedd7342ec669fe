from weathersim.core.solar.config import (
    AshraeClearSkyConfig,
    AshraeTau2017Config,
    AshraeTauConfig,
    ScheduleSolarConfig,
    SolarModelConfig,
    ZhangHuangConfig,
)
from weathersim.core.solar.geometry import (
    DailySolarCoefficients,
    SiteGeometry,
    cos_zenith_grid,
    daily_solar_coefficients,
    sun_direction_cosines,
)
from weathersim.core.solar.models import * # noqa: F403, F401 # register all models
from weathersim.core.solar.models import SolarContext, SolarModel, build_solar_model

__all__ = [
    "AshraeClearSkyConfig",
    "AshraeTau2017Config",
    "AshraeTauConfig",
    "ScheduleSolarConfig",
    "SolarModelConfig",
    "ZhangHuangConfig",
    "DailySolarCoefficients",
    "SiteGeometry",
    "cos_zenith_grid",
    "daily_solar_coefficients",
    "sun_direction_cosines",
    "SolarContext",
    "SolarModel",
    "build_solar_model",
]

from dataclasses import dataclass
from typing import Optional

from weathersim.core.data.sources.base import RecordSource
from weathersim.core.data.sources.config import RecordSourceConfig, WeatherFileSourceConfig
from weathersim.core.data.sources.design_day.config import DesignDayConfig
from weathersim.core.data.sources.design_day.synthesizer import DesignDaySynthesizer
from weathersim.core.data.sources.epw.reader import EPWWeatherFile
from weathersim.core.errors import Diagnostics
from weathersim.core.missing import MissingValuePolicy
from weathersim.core.providers.psychrometrics import Psychrometrics
from weathersim.core.providers.schedules import ScheduleProvider
from weathersim.core.sky import SkyModel
from weathersim.core.solar.geometry import SiteGeometry
from weathersim.core.solar.models import DEFAULT_SUN_IS_UP


@dataclass
class SourceContext:
    """Collaborators shared by every record source of a run."""

    timesteps_per_hour: int
    missing: MissingValuePolicy
    psychrometrics: Psychrometrics
    sky_model: SkyModel
    diagnostics: Diagnostics
    schedules: Optional[ScheduleProvider] = None
    site: Optional[SiteGeometry] = None
    elevation: float = 0.0
    sun_is_up: float = DEFAULT_SUN_IS_UP


class RecordSourceFactory:
    """Factory to create RecordSource instances based on configuration."""

    @staticmethod
    def create(config: RecordSourceConfig, context: SourceContext) -> RecordSource:
        if isinstance(config, WeatherFileSourceConfig):
            return EPWWeatherFile(
                config.path,
                timesteps_per_hour=context.timesteps_per_hour,
                missing=context.missing,
                psychrometrics=context.psychrometrics,
                sky_model=context.sky_model,
                diagnostics=context.diagnostics,
            )
        elif isinstance(config, DesignDayConfig):
            if context.site is None:
                raise ValueError("Design days need the site location.")
            return DesignDaySynthesizer(
                config,
                site=context.site,
                elevation=context.elevation,
                timesteps_per_hour=context.timesteps_per_hour,
                psychrometrics=context.psychrometrics,
                schedules=context.schedules,
                sky_model=context.sky_model,
                sun_is_up=context.sun_is_up,
                diagnostics=context.diagnostics,
            )
        else:
            raise ValueError(f"Unsupported RecordSourceConfig type: {type(config)}")

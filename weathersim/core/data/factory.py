from typing import Optional

from weathersim.config import WeatherEngineConfig
from weathersim.core.data.dataset import WeatherDataset
from weathersim.core.errors import Diagnostics
from weathersim.environment.scheduler import EnvironmentScheduler


def build_dataset(
    config: WeatherEngineConfig,
    diagnostics: Optional[Diagnostics] = None,
    warmup_days: int = 0,
) -> WeatherDataset:
    """Build a weather dataset from the given configuration."""
    scheduler = EnvironmentScheduler(config, diagnostics=diagnostics)
    return WeatherDataset(scheduler, warmup_days=warmup_days)

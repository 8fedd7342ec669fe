from weathersim.config import WeatherEngineConfig, load_config
from weathersim.core.data.dataset import WeatherDataset
from weathersim.core.data.factory import build_dataset
from weathersim.environment.scheduler import EnvironmentScheduler

__all__ = [
    "WeatherEngineConfig",
    "load_config",
    "WeatherDataset",
    "build_dataset",
    "EnvironmentScheduler",
]

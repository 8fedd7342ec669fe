from dataclasses import dataclass
from typing import Literal, Union

from weathersim.core.data.sources.design_day.config import DesignDayConfig


@dataclass(frozen=True, slots=True, kw_only=True)
class WeatherFileSourceConfig:
    path: str

    type: Literal["epw_file"] = "epw_file"


RecordSourceConfig = Union[WeatherFileSourceConfig, DesignDayConfig]
"""Union type for all record source configurations."""

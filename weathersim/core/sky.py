"""Sky emissivity, sky temperature and horizontal infrared radiation."""

from dataclasses import dataclass
from typing import Literal, Optional, Tuple, Union

import numpy as np

from weathersim.core.errors import ConfigurationError
from weathersim.core.providers.psychrometrics import Psychrometrics
from weathersim.core.providers.schedules import ScheduleProvider

STEFAN_BOLTZMANN = 5.6697e-8
KELVIN = 273.15

EmissivityModel = Literal["clark_allen", "brunt", "idso", "berdahl_martin"]


@dataclass(frozen=True, slots=True, kw_only=True)
class EmissivitySkyConfig:
    model: EmissivityModel = "clark_allen"

    type: Literal["emissivity"] = "emissivity"


@dataclass(frozen=True, slots=True, kw_only=True)
class ScheduleSkyConfig:
    """Sky temperature from a schedule, either absolute or as a depression."""

    schedule: str
    mode: Literal["absolute", "dry_bulb_difference", "dew_point_difference"] = "absolute"

    type: Literal["schedule"] = "schedule"


SkyTemperatureConfig = Union[EmissivitySkyConfig, ScheduleSkyConfig]


def cloud_factor(opaque_sky_cover):
    """Cubic opaque-cover correction applied to every clear-sky emissivity."""
    n = np.asarray(opaque_sky_cover, dtype=float)
    return 1.0 + 0.0224 * n - 0.0035 * n ** 2 + 0.00028 * n ** 3


def sky_emissivity(
    dry_bulb,
    dew_point,
    opaque_sky_cover,
    model: EmissivityModel = "clark_allen",
    psychrometrics: Optional[Psychrometrics] = None,
):
    dry_bulb = np.asarray(dry_bulb, dtype=float)
    dew_point = np.asarray(dew_point, dtype=float)

    if model == "clark_allen":
        clear = 0.787 + 0.764 * np.log((dew_point + KELVIN) / KELVIN)
    elif model == "berdahl_martin":
        tdew = np.minimum(dry_bulb, dew_point) / 100.0
        clear = 0.758 + 0.521 * tdew + 0.625 * tdew ** 2
    elif model in ("brunt", "idso"):
        if psychrometrics is None:
            raise ConfigurationError(f"Sky model '{model}' needs a psychrometrics provider.")
        vapor = np.vectorize(psychrometrics.sat_vapor_pressure)(dew_point)
        if model == "brunt":
            clear = 0.618 + 0.056 * np.sqrt(vapor * 0.01)  # mbar
        else:
            clear = 0.685 + 0.000032 * (vapor * 0.001) * np.exp(1699.0 / (dry_bulb + KELVIN))
    else:
        raise ConfigurationError(f"Unknown sky emissivity model '{model}'")

    return clear * cloud_factor(opaque_sky_cover)


def horizontal_ir_from_sky_temperature(sky_temp):
    return STEFAN_BOLTZMANN * (np.asarray(sky_temp, dtype=float) + KELVIN) ** 4


def sky_temperature_from_horizontal_ir(horiz_ir):
    return (np.asarray(horiz_ir, dtype=float) / STEFAN_BOLTZMANN) ** 0.25 - KELVIN


class SkyModel:
    """Produces sky temperature and horizontal IR for a day of conditions."""

    def __init__(
        self,
        config: Optional[SkyTemperatureConfig] = None,
        psychrometrics: Optional[Psychrometrics] = None,
        schedules: Optional[ScheduleProvider] = None,
    ):
        self.config = config or EmissivitySkyConfig()
        self.psychrometrics = psychrometrics
        self.schedules = schedules
        self._handle = 0
        if isinstance(self.config, ScheduleSkyConfig):
            if schedules is None:
                raise ConfigurationError("Sky temperature schedule given without schedules.")
            self._handle = schedules.index(self.config.schedule)
            if self._handle == 0:
                raise ConfigurationError(
                    f"Sky temperature schedule '{self.config.schedule}' not found."
                )

    @property
    def uses_schedule(self) -> bool:
        return isinstance(self.config, ScheduleSkyConfig)

    def compute(
        self,
        dry_bulb: np.ndarray,
        dew_point: np.ndarray,
        opaque_sky_cover: np.ndarray,
        day_of_year: int = 1,
        weekday: int = 1,
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Return ``(sky_temperature, horizontal_ir)``."""
        if isinstance(self.config, ScheduleSkyConfig):
            values = self.schedules.day_values(self._handle, day_of_year, weekday)
            if self.config.mode == "absolute":
                sky_temp = values
            elif self.config.mode == "dry_bulb_difference":
                sky_temp = dry_bulb - values
            else:
                sky_temp = dew_point - values
            return sky_temp, horizontal_ir_from_sky_temperature(sky_temp)

        emissivity = sky_emissivity(
            dry_bulb, dew_point, opaque_sky_cover, self.config.model, self.psychrometrics
        )
        horiz_ir = emissivity * STEFAN_BOLTZMANN * (dry_bulb + KELVIN) ** 4
        sky_temp = (dry_bulb + KELVIN) * emissivity ** 0.25 - KELVIN
        return sky_temp, horiz_ir

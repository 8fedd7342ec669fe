"""Daily solar coefficients and sun position."""

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

SOLAR_CONSTANT = 1367.0  # W/m2
DEG_TO_RAD = math.pi / 180.0

# Fourier coefficients in day angle X = 0.017167 * day_of_year, ordered
# (c0, sin X, cos X, sin 2X, cos 2X, sin 3X, cos 3X, sin 4X, cos 4X).
SINE_DECLINATION_COEF = (
    0.00561800, 0.0657911, -0.392779, 0.00064440, -0.00618495,
    -0.00010101, -0.00007951, -0.00011691, 0.00002096,
)
EQUATION_OF_TIME_COEF = (
    0.00021971, -0.122649, 0.00762856, -0.156308, -0.0530028,
    -0.00388702, -0.00123978, -0.00270502, -0.00167992,
)
ASHRAE_A_COEF = (1161.6685, 1.1554, 77.3575, -0.5359, -3.7622, 0.9875, -3.3160, -0.0022, 0.0279)
ASHRAE_B_COEF = (0.1727, -0.0015, -0.0055, -0.0001, -0.0048, 0.0009, -0.0034, 0.0001, 0.0008)
ASHRAE_C_COEF = (0.0905, -0.0011, -0.0060, 0.0015, -0.0058, 0.0006, -0.0004, 0.0001, 0.0002)


@dataclass(frozen=True, slots=True)
class DailySolarCoefficients:
    sin_declination: float
    cos_declination: float
    equation_of_time: float  # hours
    a: float  # apparent solar irradiation at air mass 0, W/m2
    b: float  # atmospheric extinction coefficient
    c: float  # diffuse ratio
    annual_variation: float  # extraterrestrial irradiance / solar constant


@dataclass(frozen=True, slots=True)
class SiteGeometry:
    latitude: float
    longitude: float  # degrees east
    time_zone: float  # hours from GMT

    @property
    def sin_latitude(self) -> float:
        return math.sin(self.latitude * DEG_TO_RAD)

    @property
    def cos_latitude(self) -> float:
        return math.cos(self.latitude * DEG_TO_RAD)

    @property
    def time_zone_meridian(self) -> float:
        return self.time_zone * 15.0


def _fourier(coef, sin_x: float, cos_x: float) -> float:
    sin_2x = 2.0 * sin_x * cos_x
    cos_2x = cos_x * cos_x - sin_x * sin_x
    sin_3x = sin_x * cos_2x + cos_x * sin_2x
    cos_3x = cos_x * cos_2x - sin_x * sin_2x
    sin_4x = 2.0 * sin_2x * cos_2x
    cos_4x = cos_2x * cos_2x - sin_2x * sin_2x
    return (
        coef[0]
        + coef[1] * sin_x + coef[2] * cos_x
        + coef[3] * sin_2x + coef[4] * cos_2x
        + coef[5] * sin_3x + coef[6] * cos_3x
        + coef[7] * sin_4x + coef[8] * cos_4x
    )


def daily_solar_coefficients(day_of_year: int) -> DailySolarCoefficients:
    x = 0.017167 * day_of_year
    sin_x, cos_x = math.sin(x), math.cos(x)
    sin_dec = _fourier(SINE_DECLINATION_COEF, sin_x, cos_x)
    return DailySolarCoefficients(
        sin_declination=sin_dec,
        cos_declination=math.sqrt(1.0 - sin_dec * sin_dec),
        equation_of_time=_fourier(EQUATION_OF_TIME_COEF, sin_x, cos_x),
        a=_fourier(ASHRAE_A_COEF, sin_x, cos_x),
        b=_fourier(ASHRAE_B_COEF, sin_x, cos_x),
        c=_fourier(ASHRAE_C_COEF, sin_x, cos_x),
        annual_variation=1.000047 + 0.000352615 * sin_x + 0.0334454 * cos_x,
    )


def sun_direction_cosines(
    time_of_day: float, coefficients: DailySolarCoefficients, site: SiteGeometry
) -> Tuple[float, float, float]:
    """Direction cosines of the sun at local standard ``time_of_day`` (hours).

    The third component is the cosine of the zenith angle, i.e. the sine of
    the solar altitude.
    """
    hour_angle = (
        15.0 * (12.0 - (time_of_day + coefficients.equation_of_time))
        + (site.time_zone_meridian - site.longitude)
    ) * DEG_TO_RAD
    cos_h = math.cos(hour_angle)
    cos_zenith = (
        coefficients.sin_declination * site.sin_latitude
        + coefficients.cos_declination * site.cos_latitude * cos_h
    )
    east = coefficients.cos_declination * math.sin(hour_angle)
    north = (
        coefficients.sin_declination * site.cos_latitude
        - coefficients.cos_declination * site.sin_latitude * cos_h
    )
    return east, north, cos_zenith


def timestep_midpoints(n: int) -> np.ndarray:
    """Local standard time (hours) at the middle of every timestep, shape (24, n)."""
    hours = np.arange(24, dtype=float)[:, None]
    fractions = (np.arange(1, n + 1, dtype=float) - 0.5) / n
    return hours + fractions[None, :]


def cos_zenith_grid(
    coefficients: DailySolarCoefficients, site: SiteGeometry, n: int
) -> np.ndarray:
    times = timestep_midpoints(n)
    result = np.empty_like(times)
    for index, value in np.ndenumerate(times):
        result[index] = sun_direction_cosines(value, coefficients, site)[2]
    return result


def air_mass(cos_zenith: float) -> float:
    """Relative optical air mass (Kasten & Young, 1989)."""
    altitude = math.degrees(math.asin(max(min(cos_zenith, 1.0), -1.0)))
    if altitude <= 0.0:
        return 37.92
    return 1.0 / (cos_zenith + 0.50572 * (6.07995 + altitude) ** -1.6364)

"""Shared fixtures: synthetic EPW files written to a temporary directory."""

from typing import Callable, Dict, Optional, Sequence, Tuple

import pytest

from weathersim.core.calendar.dates import day_of_week, to_gregorian, to_julian
from weathersim.core.errors import LoggingDiagnostics

CORE_ORDER = (
    "dry_bulb", "dew_point", "rel_hum", "pressure", "et_horizontal", "et_direct",
    "horiz_ir", "global_horizontal", "direct_normal", "diffuse_horizontal",
    "global_illuminance", "direct_illuminance", "diffuse_illuminance",
    "zenith_luminance", "wind_dir", "wind_speed", "total_sky_cover",
    "opaque_sky_cover", "visibility", "ceiling_height", "weather_observation",
)
TRAILING_ORDER = (
    "weather_codes", "precipitable_water", "aerosol_optical_depth", "snow_depth",
    "days_since_snow", "albedo", "liquid_precip_depth", "liquid_precip_rate",
)


def default_fields(hour: int) -> Dict[str, object]:
    daylight = 8 <= hour <= 16
    return {
        "dry_bulb": 10.0 + 0.5 * hour,
        "dew_point": 5.0,
        "rel_hum": 70.0,
        "pressure": 101325.0,
        "et_horizontal": 0.0,
        "et_direct": 0.0,
        "horiz_ir": 300.0,
        "global_horizontal": 150.0 if daylight else 0.0,
        "direct_normal": 100.0 if daylight else 0.0,
        "diffuse_horizontal": 50.0 if daylight else 0.0,
        "global_illuminance": 0.0,
        "direct_illuminance": 0.0,
        "diffuse_illuminance": 0.0,
        "zenith_luminance": 0.0,
        "wind_dir": 180.0,
        "wind_speed": 3.0,
        "total_sky_cover": 5.0,
        "opaque_sky_cover": 3.0,
        "visibility": 20.0,
        "ceiling_height": 77777.0,
        "weather_observation": 9,
        "weather_codes": "999999999",
        "precipitable_water": 10.0,
        "aerosol_optical_depth": 0.1,
        "snow_depth": 0.0,
        "days_since_snow": 88.0,
        "albedo": 0.2,
        "liquid_precip_depth": 0.0,
        "liquid_precip_rate": 1.0,
    }


def epw_line(year: int, month: int, day: int, hour: int, minute: int = 60, **fields) -> str:
    values = default_fields(hour)
    values.update(fields)
    parts = [str(year), str(month), str(day), str(hour), str(minute), "?9?9?9?9E0?9?9"]
    parts += [str(values[name]) for name in CORE_ORDER]
    parts += [str(values[name]) for name in TRAILING_ORDER]
    return ",".join(parts)


def epw_header(
    start: Tuple[int, int, int],
    end: Tuple[int, int, int],
    records_per_hour: int = 1,
    leap_year_observed: bool = False,
    dst: Tuple[str, str] = ("0", "0"),
    holidays: Sequence[Tuple[str, str]] = (),
    with_years: bool = False,
    periods: Optional[Sequence[Tuple[str, str, str, str]]] = None,
) -> list:
    start_weekday = day_of_week(*start).name.title()
    if with_years:
        begin_text = f"{start[1]}/{start[2]}/{start[0]}"
        end_text = f"{end[1]}/{end[2]}/{end[0]}"
    else:
        begin_text = f"{start[1]}/{start[2]}"
        end_text = f"{end[1]}/{end[2]}"
    holiday_fields = ",".join(f"{name},{date}" for name, date in holidays)
    holiday_line = (
        f"HOLIDAYS/DAYLIGHT SAVINGS,{'Yes' if leap_year_observed else 'No'},"
        f"{dst[0]},{dst[1]},{len(holidays)}"
    )
    if holidays:
        holiday_line += "," + holiday_fields
    typical = "TYPICAL/EXTREME PERIODS,1,Summer Week,Extreme,7/ 9,7/15"
    if periods is None:
        periods = [("Data", start_weekday, begin_text, end_text)]
    data_periods = f"DATA PERIODS,{len(periods)},{records_per_hour}," + ",".join(
        ",".join(period) for period in periods
    )
    return [
        "LOCATION,Test City,CO,USA,TMY3,724699,40.02,-105.25,-7.0,1634.0",
        "DESIGN CONDITIONS,0",
        typical,
        "GROUND TEMPERATURES,1,0.5,,,,1.1,0.9,2.4,5.7,11.9,16.9,20.2,20.8,18.6,14.2,8.7,3.8",
        holiday_line,
        "COMMENTS 1,Synthetic test data",
        "COMMENTS 2,",
        data_periods,
    ]


def write_epw(
    path,
    year: int = 2023,
    start: Tuple[int, int] = (1, 1),
    days: int = 365,
    records_per_hour: int = 1,
    skip_feb_29: bool = True,
    overrides: Optional[Callable[[int, int, int, int], Dict[str, object]]] = None,
    **header_options,
):
    """Write a synthetic EPW file with ``days`` consecutive days of data.

    ``overrides(year, month, day, hour)`` may return field values for one
    record.
    """
    lines = []
    julian = to_julian(year, *start)
    first = last = None
    written = 0
    while written < days:
        y, m, d = to_gregorian(julian)
        julian += 1
        if skip_feb_29 and (m, d) == (2, 29):
            continue
        first = first or (y, m, d)
        last = (y, m, d)
        written += 1
        for hour in range(1, 25):
            for sub in range(1, records_per_hour + 1):
                minute = 60 * sub // records_per_hour
                fields = overrides(y, m, d, hour) if overrides else {}
                lines.append(epw_line(y, m, d, hour, minute, **(fields or {})))

    header = epw_header(first, last, records_per_hour, **header_options)
    path.write_text("\n".join(header + lines) + "\n")
    return path


@pytest.fixture
def epw_factory(tmp_path):
    counter = {"n": 0}

    def factory(**kwargs):
        counter["n"] += 1
        return write_epw(tmp_path / f"weather_{counter['n']}.epw", **kwargs)

    return factory


@pytest.fixture
def diagnostics():
    return LoggingDiagnostics("weathersim.tests")

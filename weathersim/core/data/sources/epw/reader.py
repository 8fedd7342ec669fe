import logging
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import numpy as np

from weathersim.core.calendar.dates import day_of_year
from weathersim.core.data.sources.base import DayRequest, RecordSource
from weathersim.core.data.sources.epw.header import DataPeriod, EPWHeader, parse_header, HEADER_SECTIONS
from weathersim.core.data.sources.epw.parser import EPWRecord, ParseOutcome, parse_data_line
from weathersim.core.errors import (
    ConfigurationError,
    Diagnostics,
    LoggingDiagnostics,
    WeatherFileError,
)
from weathersim.core.interpolation import (
    expand_hourly,
    expand_solar,
    expand_wind_direction,
    hourly_means,
    repeat_hourly,
)
from weathersim.core.missing import MissingValuePolicy, WeatherField
from weathersim.core.providers.psychrometrics import Psychrometrics, PsychrolibPsychrometrics
from weathersim.core.sky import SkyModel, sky_temperature_from_horizontal_ir
from weathersim.core.solar.geometry import daily_solar_coefficients
from weathersim.core.state import DailyWeatherRecord

logger = logging.getLogger(__name__)

# Fields filtered through the missing-value policy, by record attribute.
POLICY_FIELDS = (
    ("dry_bulb", WeatherField.DRY_BULB),
    ("dew_point", WeatherField.DEW_POINT),
    ("rel_hum", WeatherField.REL_HUM),
    ("pressure", WeatherField.PRESSURE),
    ("wind_dir", WeatherField.WIND_DIR),
    ("wind_speed", WeatherField.WIND_SPEED),
    ("total_sky_cover", WeatherField.TOTAL_SKY_COVER),
    ("opaque_sky_cover", WeatherField.OPAQUE_SKY_COVER),
    ("visibility", WeatherField.VISIBILITY),
    ("ceiling_height", WeatherField.CEILING_HEIGHT),
    ("precipitable_water", WeatherField.PRECIPITABLE_WATER),
    ("aerosol_optical_depth", WeatherField.AEROSOL_OPTICAL_DEPTH),
    ("snow_depth", WeatherField.SNOW_DEPTH),
    ("days_since_snow", WeatherField.DAYS_SINCE_SNOW),
    ("albedo", WeatherField.ALBEDO),
    ("liquid_precip_depth", WeatherField.LIQUID_PRECIP),
    ("direct_normal", WeatherField.BEAM_SOLAR),
    ("diffuse_horizontal", WeatherField.DIFFUSE_SOLAR),
    ("horiz_ir", WeatherField.HORIZ_IR),
)

# Instantaneous fields carried over from the last hour of the previous day.
CARRIED_FIELDS = (
    "dry_bulb", "dew_point", "rel_hum", "pressure", "wind_speed", "wind_dir",
    "total_sky_cover", "opaque_sky_cover", "albedo", "horiz_ir",
    "direct_normal", "diffuse_horizontal",
)


class EPWWeatherFile(RecordSource):
    """
    Sequential reader of an EnergyPlus weather (EPW) file.

    Data lines are read once on ``open`` and consumed through a cursor. A day
    is read as ``24 * records_per_hour`` consecutive lines; hourly files are
    interpolated onto the simulation timestep grid, sub-hourly files must
    match it exactly.
    """

    def __init__(
        self,
        path: Union[str, Path],
        timesteps_per_hour: int = 1,
        missing: Optional[MissingValuePolicy] = None,
        psychrometrics: Optional[Psychrometrics] = None,
        sky_model: Optional[SkyModel] = None,
        diagnostics: Optional[Diagnostics] = None,
    ):
        super().__init__(timesteps_per_hour)
        self.path = Path(path)
        self.missing = missing if missing is not None else MissingValuePolicy()
        self.psychrometrics = psychrometrics or PsychrolibPsychrometrics()
        self.sky_model = sky_model or SkyModel(psychrometrics=self.psychrometrics)
        self.diagnostics = diagnostics or LoggingDiagnostics(__name__)

        self.header: Optional[EPWHeader] = None
        self._lines: List[str] = []
        self._cursor = 0
        self._last_hour: Optional[Dict[str, float]] = None
        self._is_open = False

    def __enter__(self) -> "EPWWeatherFile":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def open(self) -> EPWHeader:
        """Read the header and data lines; calling again is a no-op."""
        if self._is_open:
            return self.header
        if not self.path.is_file():
            raise WeatherFileError(f"Weather file not found: {self.path}")

        with self.path.open("r", encoding="latin-1") as handle:
            lines = handle.read().splitlines()

        n_header = len(HEADER_SECTIONS)
        self.header = parse_header(lines[:n_header])
        self._lines = [line for line in lines[n_header:] if line.strip()]
        if not self._lines:
            raise WeatherFileError(f"Weather file has no data lines: {self.path}")

        rph = self.header.records_per_hour
        if rph != 1 and rph != self.timesteps_per_hour:
            raise ConfigurationError(
                f"Weather file interval ({rph} records per hour) must be hourly "
                f"or equal to the simulation timesteps per hour ({self.timesteps_per_hour})."
            )

        self._cursor = 0
        self._last_hour = None
        self._is_open = True
        self.header.data_periods = self._period_years(self.header.data_periods)
        logger.info(
            "Opened weather file %s (%s, %d data lines)",
            self.path, self.header.location.title, len(self._lines),
        )
        return self.header

    def close(self) -> None:
        self._lines = []
        self._cursor = 0
        self._last_hour = None
        self._is_open = False

    @property
    def description(self) -> Optional[str]:
        return self.header.location.title if self.header else str(self.path)

    @property
    def records_per_hour(self) -> int:
        self._require_open()
        return self.header.records_per_hour

    @property
    def wraps_around(self) -> bool:
        """Only a single full-year data period may be read cyclically."""
        periods = self.header.data_periods if self.header else []
        return len(periods) == 1 and periods[0].is_full_year

    def _require_open(self) -> None:
        if not self._is_open:
            raise WeatherFileError("Weather file is not open.")

    # Positioning

    def _line_date(self, index: int) -> Tuple[int, int, int]:
        fields = self._lines[index].split(",", 3)
        try:
            return int(fields[0]), int(fields[1]), int(fields[2])
        except (IndexError, ValueError) as exc:
            raise WeatherFileError(
                f"Malformed date on data line {index + 1}: {self._lines[index]!r}"
            ) from exc

    def _matches(self, index: int, month: int, day: int, year: Optional[int]) -> bool:
        line_year, line_month, line_day = self._line_date(index)
        if (line_month, line_day) != (month, day):
            return False
        return year is None or line_year == year

    def locate(self, month: int, day: int, year: Optional[int] = None) -> int:
        """Move the cursor to the first line of the given date.

        Searches forward from the cursor; when the end of the file is hit
        the search rewinds once to the start and stops at the original
        position.
        """
        self._require_open()
        start = self._cursor
        for index in range(start, len(self._lines)):
            if self._matches(index, month, day, year):
                self._cursor = index
                return index
        logger.debug("Rewinding weather file to locate %02d/%02d", month, day)
        for index in range(0, start):
            if self._matches(index, month, day, year):
                self._cursor = index
                return index
        when = f"{month}/{day}" + (f"/{year}" if year is not None else "")
        raise WeatherFileError(f"Date {when} not found in weather file {self.path}")

    def _find_line(self, start: int, month: int, day: int) -> Optional[int]:
        for index in range(start, len(self._lines)):
            if self._matches(index, month, day, None):
                return index
        return None

    def _period_years(self, periods: List[DataPeriod]) -> List[DataPeriod]:
        """Fill in period years from the data lines when the header omits them.

        Periods follow each other in the file, so each search starts where
        the previous period ended.
        """
        resolved = []
        position = 0
        for period in periods:
            first = self._find_line(position, period.start_month, period.start_day)
            if first is None:
                resolved.append(period)
                continue
            last = self._find_line(first, period.end_month, period.end_day)
            if last is None:
                resolved.append(period)
                continue
            # Move to the final line of the period's last day.
            while last + 1 < len(self._lines) and self._matches(
                last + 1, period.end_month, period.end_day, None
            ):
                last += 1
            start_year = period.start_year
            end_year = period.end_year
            if start_year is None:
                start_year = self._line_date(first)[0]
            if end_year is None:
                end_year = self._line_date(last)[0]
            resolved.append(replace(period, start_year=start_year, end_year=end_year))
            position = last + 1
        return resolved

    def _next_line(self) -> str:
        if self._cursor >= len(self._lines):
            if not self.wraps_around:
                raise WeatherFileError(f"Unexpected end of weather file {self.path}")
            logger.debug("Weather file wrapped around to its first record")
            self._cursor = 0
        line = self._lines[self._cursor]
        self._cursor += 1
        return line

    def _peek_record(self, leap_add: int = 1) -> Optional[EPWRecord]:
        """The record after the cursor; Feb 29 is passed over when ``leap_add`` is 0."""
        index = self._cursor
        if index >= len(self._lines):
            if not self.wraps_around:
                return None
            index = 0
        result = parse_data_line(self._lines[index])
        if result.ok and leap_add == 0 and (result.record.month, result.record.day) == (2, 29):
            index += 24 * self.header.records_per_hour
            if index >= len(self._lines):
                if not self.wraps_around:
                    return None
                index -= len(self._lines)
            result = parse_data_line(self._lines[index])
        return result.record if result.ok else None

    def _skip_day(self) -> None:
        for _ in range(24 * self.header.records_per_hour):
            self._next_line()

    # Reading

    def _read_records(self, request: DayRequest) -> List[EPWRecord]:
        rph = self.header.records_per_hour
        records = []
        for index in range(24 * rph):
            result = parse_data_line(self._next_line())
            if result.outcome is ParseOutcome.MALFORMED_DATE:
                self.diagnostics.fatal(result.message, WeatherFileError)
            if result.outcome is ParseOutcome.MALFORMED_FIELD:
                self.diagnostics.warning(result.message)
            record = result.record
            if (record.month, record.day) != (request.month, request.day) or (
                request.actual_weather and record.year != request.year
            ):
                self.diagnostics.fatal(
                    f"Weather file date {record.year}/{record.month}/{record.day} hour "
                    f"{record.hour} does not match the simulated date "
                    f"{request.year}/{request.month}/{request.day}.",
                    WeatherFileError,
                )
            expected_hour = index // rph + 1
            if record.hour != expected_hour:
                self.diagnostics.fatal(
                    f"Weather file record {record.month}/{record.day} hour {record.hour} is "
                    f"out of sequence; expected hour {expected_hour}.",
                    WeatherFileError,
                )
            records.append(record)
        return records

    def read_day(self, request: DayRequest) -> DailyWeatherRecord:
        self._require_open()
        if request.first_day:
            self.locate(request.month, request.day, request.year if request.actual_weather else None)
            self._last_hour = None
        elif request.leap_add == 0:
            year, month, day = self._line_date(self._cursor % len(self._lines))
            if (month, day) == (2, 29):
                logger.debug("Skipping February 29 records of %d", year)
                self._skip_day()

        records = self._read_records(request)
        rph = self.header.records_per_hour
        n = self.timesteps_per_hour

        hourly = {name: np.empty((24, rph)) for name, _ in POLICY_FIELDS}
        is_rain = np.zeros((24, rph), dtype=bool)
        is_snow = np.zeros((24, rph), dtype=bool)
        ir_missing = np.zeros((24, rph), dtype=bool)
        for index, record in enumerate(records):
            hour, sub = divmod(index, rph)
            ir_missing[hour, sub] = self.missing.is_missing(WeatherField.HORIZ_IR, record.horiz_ir)
            for name, field in POLICY_FIELDS:
                hourly[name][hour, sub] = self.missing.apply(field, getattr(record, name))
            is_rain[hour, sub] = request.use_rain and record.is_rain
            is_snow[hour, sub] = request.use_snow and record.is_snow

        if ir_missing.any():
            _, computed = self.sky_model.compute(
                hourly["dry_bulb"], hourly["dew_point"], hourly["opaque_sky_cover"],
                request.day_of_year, int(request.weekday),
            )
            hourly["horiz_ir"] = np.where(ir_missing, computed, hourly["horiz_ir"])

        if rph == n:
            grid = {name: values for name, values in hourly.items()}
            liquid = hourly["liquid_precip_depth"]
            rain, snow = is_rain, is_snow
        else:
            grid = self._interpolate(hourly, n, request.leap_add)
            liquid = repeat_hourly(hourly["liquid_precip_depth"][:, 0], n) / n
            rain = np.repeat(is_rain, n, axis=1)
            snow = np.repeat(is_snow, n, axis=1)

        self._last_hour = {name: float(hourly[name][-1, -1]) for name in CARRIED_FIELDS}

        pressure = grid["pressure"]
        hum_ratio = np.vectorize(self.psychrometrics.hum_ratio_from_dew_point)(
            grid["dew_point"], pressure
        )
        if self.sky_model.uses_schedule:
            sky_temp, horiz_ir = self.sky_model.compute(
                grid["dry_bulb"], grid["dew_point"], grid["opaque_sky_cover"],
                request.day_of_year, int(request.weekday),
            )
        else:
            horiz_ir = grid["horiz_ir"]
            sky_temp = sky_temperature_from_horizontal_ir(horiz_ir)

        coefficients = daily_solar_coefficients(request.day_of_year)
        return DailyWeatherRecord(
            timesteps_per_hour=n,
            year=request.year,
            month=request.month,
            day=request.day,
            day_of_year=request.day_of_year,
            weekday=request.weekday,
            day_type=int(request.weekday),
            sin_declination=coefficients.sin_declination,
            cos_declination=coefficients.cos_declination,
            equation_of_time=coefficients.equation_of_time,
            ashrae_a=coefficients.a,
            ashrae_b=coefficients.b,
            ashrae_c=coefficients.c,
            annual_variation=coefficients.annual_variation,
            dry_bulb=grid["dry_bulb"],
            dew_point=grid["dew_point"],
            rel_hum=grid["rel_hum"],
            hum_ratio=hum_ratio,
            pressure=pressure,
            wind_speed=grid["wind_speed"],
            wind_dir=grid["wind_dir"],
            sky_temp=sky_temp,
            horiz_ir=horiz_ir,
            beam_solar=grid["direct_normal"],
            diffuse_solar=grid["diffuse_horizontal"],
            liquid_precip=liquid,
            albedo=grid["albedo"],
            total_sky_cover=grid["total_sky_cover"],
            opaque_sky_cover=grid["opaque_sky_cover"],
            is_rain=rain,
            is_snow=snow,
            beam_solar_hourly=hourly_means(grid["direct_normal"]),
            diffuse_solar_hourly=hourly_means(grid["diffuse_horizontal"]),
        )

    def _interpolate(
        self, hourly: Dict[str, np.ndarray], n: int, leap_add: int = 1
    ) -> Dict[str, np.ndarray]:
        """Expand hourly columns onto the ``(24, n)`` grid."""
        values = {name: array[:, 0] for name, array in hourly.items()}
        last = self._last_hour or {name: values[name][0] for name in CARRIED_FIELDS}

        following = self._peek_record(leap_add)
        grid = {}
        for name in CARRIED_FIELDS:
            if name == "wind_dir":
                grid[name] = expand_wind_direction(values[name], last[name], n)
            elif name in ("direct_normal", "diffuse_horizontal"):
                if following is not None:
                    field = WeatherField.BEAM_SOLAR if name == "direct_normal" else WeatherField.DIFFUSE_SOLAR
                    raw = getattr(following, name)
                    next_hour = values[name][-1] if self.missing.is_missing(field, raw) else raw
                else:
                    next_hour = values[name][-1]
                grid[name] = expand_solar(values[name], last[name], next_hour, n)
            else:
                grid[name] = expand_hourly(values[name], last[name], n)
        return grid

    # Period coverage

    def covers(
        self,
        begin: Tuple[int, int, Optional[int]],
        end: Tuple[int, int, Optional[int]],
        actual_weather: bool = False,
    ) -> bool:
        """Whether ``begin``..``end`` (month, day, year) lies inside one data period."""
        self._require_open()
        return any(_period_covers(p, begin, end, actual_weather) for p in self.header.data_periods)

    def validate_run_period(
        self,
        name: str,
        begin: Tuple[int, int, Optional[int]],
        end: Tuple[int, int, Optional[int]],
        actual_weather: bool = False,
    ) -> None:
        if not self.covers(begin, end, actual_weather):
            self.diagnostics.fatal(
                f"Run period '{name}' ({begin[0]}/{begin[1]} to {end[0]}/{end[1]}) is not "
                f"covered by the data periods of weather file {self.path}.",
                ConfigurationError,
            )


def _period_covers(
    period: DataPeriod,
    begin: Tuple[int, int, Optional[int]],
    end: Tuple[int, int, Optional[int]],
    actual_weather: bool,
) -> bool:
    if actual_weather:
        if period.start_year is None or period.end_year is None:
            return False
        if begin[2] is None or end[2] is None:
            return False
        start_key = (period.start_year, period.start_month, period.start_day)
        end_key = (period.end_year, period.end_month, period.end_day)
        return start_key <= (begin[2], begin[0], begin[1]) and (end[2], end[0], end[1]) <= end_key

    if period.is_full_year:
        return True
    first = day_of_year(period.start_month, period.start_day, leap_add=1)
    last = day_of_year(period.end_month, period.end_day, leap_add=1)
    lo = day_of_year(begin[0], begin[1], leap_add=1)
    hi = day_of_year(end[0], end[1], leap_add=1)
    if first <= last:
        return first <= lo <= last and first <= hi <= last and lo <= hi
    # Period wraps over the year end.
    return all(d >= first or d <= last for d in (lo, hi))

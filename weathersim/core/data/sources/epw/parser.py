"""Parsing of single EPW data lines."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

MISSING_WEATHER_CODES = (9,) * 9

# (attribute, sentinel used when the field is malformed or absent)
CORE_FIELDS = (
    ("dry_bulb", 99.9),
    ("dew_point", 99.9),
    ("rel_hum", 999.0),
    ("pressure", 999999.0),
    ("extraterrestrial_horizontal", 9999.0),
    ("extraterrestrial_direct", 9999.0),
    ("horiz_ir", 9999.0),
    ("global_horizontal", 9999.0),
    ("direct_normal", 9999.0),
    ("diffuse_horizontal", 9999.0),
    ("global_illuminance", 999999.0),
    ("direct_illuminance", 999999.0),
    ("diffuse_illuminance", 999999.0),
    ("zenith_luminance", 9999.0),
    ("wind_dir", 999.0),
    ("wind_speed", 999.0),
    ("total_sky_cover", 99.0),
    ("opaque_sky_cover", 99.0),
    ("visibility", 9999.0),
    ("ceiling_height", 99999.0),
    ("present_weather_observation", 9.0),
)

OPTIONAL_FIELDS = (
    ("precipitable_water", 999.0),
    ("aerosol_optical_depth", 0.999),
    ("snow_depth", 999.0),
    ("days_since_snow", 99.0),
    ("albedo", 999.0),
    ("liquid_precip_depth", 999.0),
    ("liquid_precip_rate", 99.0),
)

DATE_FIELDS = 5
FIRST_CORE_INDEX = 6  # after the data source and uncertainty flags
WEATHER_CODE_INDEX = FIRST_CORE_INDEX + len(CORE_FIELDS)
FIRST_OPTIONAL_INDEX = WEATHER_CODE_INDEX + 1


class ParseOutcome(Enum):
    OK = "ok"
    MALFORMED_DATE = "malformed_date"
    MALFORMED_FIELD = "malformed_field"


@dataclass(frozen=True, slots=True)
class EPWRecord:
    year: int
    month: int
    day: int
    hour: int
    minute: int
    dry_bulb: float
    dew_point: float
    rel_hum: float
    pressure: float
    extraterrestrial_horizontal: float
    extraterrestrial_direct: float
    horiz_ir: float
    global_horizontal: float
    direct_normal: float
    diffuse_horizontal: float
    global_illuminance: float
    direct_illuminance: float
    diffuse_illuminance: float
    zenith_luminance: float
    wind_dir: float
    wind_speed: float
    total_sky_cover: float
    opaque_sky_cover: float
    visibility: float
    ceiling_height: float
    present_weather_observation: float
    weather_codes: Tuple[int, ...]
    precipitable_water: float
    aerosol_optical_depth: float
    snow_depth: float
    days_since_snow: float
    albedo: float
    liquid_precip_depth: float
    liquid_precip_rate: float

    @property
    def is_rain(self) -> bool:
        """Thunderstorm, rain or drizzle reported, or measured liquid precipitation."""
        coded = self.present_weather_observation == 0 and any(
            code < 9 for code in self.weather_codes[:3]
        )
        measured = 0.0 < self.liquid_precip_depth < 999.0
        return coded or measured

    @property
    def is_snow(self) -> bool:
        return 0.0 < self.snow_depth < 999.0


@dataclass(frozen=True, slots=True)
class ParseResult:
    outcome: ParseOutcome
    record: Optional[EPWRecord] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome is not ParseOutcome.MALFORMED_DATE


def parse_weather_codes(text: str) -> Tuple[Tuple[int, ...], bool]:
    """Nine single-digit present weather codes; all 9 when malformed."""
    value = text.strip().strip("'\"")
    if len(value) != 9 or not value.isdigit():
        return MISSING_WEATHER_CODES, False
    return tuple(int(ch) for ch in value), True


def _parse_float(text: str) -> Optional[float]:
    try:
        return float(text)
    except ValueError:
        return None


def parse_data_line(line: str) -> ParseResult:
    """Parse one comma-separated EPW data line.

    A malformed date/time group is fatal for the caller; malformed or
    missing numeric fields are replaced by their sentinel and reported as
    MALFORMED_FIELD so missing-value handling takes over.
    """
    fields = line.rstrip("\r\n").split(",")

    if len(fields) < DATE_FIELDS:
        return ParseResult(ParseOutcome.MALFORMED_DATE, message=f"Truncated date/time in line: {line.strip()!r}")
    try:
        year, month, day, hour, minute = (int(float(f)) for f in fields[:DATE_FIELDS])
    except ValueError:
        return ParseResult(ParseOutcome.MALFORMED_DATE, message=f"Invalid date/time in line: {line.strip()!r}")
    if not (1 <= month <= 12 and 1 <= day <= 31 and 1 <= hour <= 24 and 0 <= minute <= 60):
        return ParseResult(ParseOutcome.MALFORMED_DATE,
                           message=f"Date/time out of range: {year}/{month}/{day} {hour}:{minute}")

    values = {}
    bad: List[str] = []
    for offset, (name, sentinel) in enumerate(CORE_FIELDS):
        index = FIRST_CORE_INDEX + offset
        parsed = _parse_float(fields[index]) if index < len(fields) else None
        if parsed is None:
            bad.append(name)
            parsed = sentinel
        values[name] = parsed

    codes, codes_ok = (
        parse_weather_codes(fields[WEATHER_CODE_INDEX])
        if WEATHER_CODE_INDEX < len(fields)
        else (MISSING_WEATHER_CODES, False)
    )
    if not codes_ok and values["present_weather_observation"] == 0:
        bad.append("weather_codes")

    for offset, (name, sentinel) in enumerate(OPTIONAL_FIELDS):
        index = FIRST_OPTIONAL_INDEX + offset
        parsed = None
        if index < len(fields) and fields[index].strip():
            parsed = _parse_float(fields[index])
        values[name] = sentinel if parsed is None else parsed

    record = EPWRecord(
        year=year, month=month, day=day, hour=hour, minute=minute,
        weather_codes=codes, **values,
    )
    if bad:
        return ParseResult(ParseOutcome.MALFORMED_FIELD, record,
                           message=f"Invalid field(s) {', '.join(bad)} on {month}/{day} hour {hour}")
    return ParseResult(ParseOutcome.OK, record)

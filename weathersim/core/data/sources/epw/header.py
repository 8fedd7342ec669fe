"""EPW header sections.

An EPW file opens with eight header lines in a fixed order; each is
parsed into its own dataclass.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from weathersim.core.calendar.config import (
    DateSpec,
    MonthDaySpec,
    SpecialDayConfig,
    parse_date_string,
)
from weathersim.core.calendar.dates import DayType, WeekDay, valid_month_day
from weathersim.core.errors import WeatherFileError

HEADER_SECTIONS = (
    "LOCATION",
    "DESIGN CONDITIONS",
    "TYPICAL/EXTREME PERIODS",
    "GROUND TEMPERATURES",
    "HOLIDAYS/DAYLIGHT SAVINGS",
    "COMMENTS 1",
    "COMMENTS 2",
    "DATA PERIODS",
)


@dataclass(frozen=True)
class Location:
    city: str
    state: str
    country: str
    source: str
    wmo: str
    latitude: float
    longitude: float
    time_zone: float
    elevation: float

    @property
    def title(self) -> str:
        return " ".join(part for part in (self.city, self.state, self.country) if part)


@dataclass(frozen=True)
class TypicalExtremePeriod:
    name: str
    kind: str
    start: MonthDaySpec
    end: MonthDaySpec


@dataclass(frozen=True)
class GroundTemperatureDepth:
    depth: float
    conductivity: Optional[float]
    density: Optional[float]
    specific_heat: Optional[float]
    monthly: Tuple[float, ...]


@dataclass(frozen=True)
class DataPeriod:
    name: str
    start_weekday: WeekDay
    start_month: int
    start_day: int
    end_month: int
    end_day: int
    start_year: Optional[int] = None
    end_year: Optional[int] = None

    @property
    def is_full_year(self) -> bool:
        return (self.start_month, self.start_day) == (1, 1) and (
            self.end_month, self.end_day) == (12, 31)


@dataclass
class EPWHeader:
    location: Location
    design_conditions: List[str] = field(default_factory=list)
    typical_extreme_periods: List[TypicalExtremePeriod] = field(default_factory=list)
    ground_temperatures: List[GroundTemperatureDepth] = field(default_factory=list)
    leap_year_observed: bool = False
    dst_start: Optional[DateSpec] = None
    dst_end: Optional[DateSpec] = None
    holidays: List[SpecialDayConfig] = field(default_factory=list)
    comments_1: str = ""
    comments_2: str = ""
    records_per_hour: int = 1
    data_periods: List[DataPeriod] = field(default_factory=list)

    @property
    def has_dst(self) -> bool:
        return self.dst_start is not None and self.dst_end is not None

    def find_period(self, name: str) -> Optional[TypicalExtremePeriod]:
        key = name.strip().lower()
        for period in self.typical_extreme_periods:
            if period.name.strip().lower() == key:
                return period
        return None


def _float(value: str, default: Optional[float] = None) -> Optional[float]:
    value = value.strip()
    if not value:
        return default
    return float(value)


def _month_day(text: str, section: str) -> MonthDaySpec:
    try:
        spec = parse_date_string(text)
    except ValueError as exc:
        raise WeatherFileError(f"{section}: {exc}") from exc
    if not isinstance(spec, MonthDaySpec):
        raise WeatherFileError(f"{section}: expected a month/day date, got {text!r}")
    return spec


def parse_location(fields: Sequence[str]) -> Location:
    if len(fields) < 10:
        raise WeatherFileError("LOCATION header needs 9 fields")
    try:
        return Location(
            city=fields[1].strip(),
            state=fields[2].strip(),
            country=fields[3].strip(),
            source=fields[4].strip(),
            wmo=fields[5].strip(),
            latitude=float(fields[6]),
            longitude=float(fields[7]),
            time_zone=float(fields[8]),
            elevation=float(fields[9]),
        )
    except ValueError as exc:
        raise WeatherFileError(f"LOCATION header: {exc}") from exc


def parse_typical_extreme_periods(fields: Sequence[str]) -> List[TypicalExtremePeriod]:
    count = int(_float(fields[1], 0.0)) if len(fields) > 1 else 0
    periods = []
    for index in range(count):
        base = 2 + 4 * index
        if base + 3 >= len(fields):
            raise WeatherFileError("TYPICAL/EXTREME PERIODS header is truncated")
        periods.append(
            TypicalExtremePeriod(
                name=fields[base].strip(),
                kind=fields[base + 1].strip(),
                start=_month_day(fields[base + 2], "TYPICAL/EXTREME PERIODS"),
                end=_month_day(fields[base + 3], "TYPICAL/EXTREME PERIODS"),
            )
        )
    return periods


def parse_ground_temperatures(fields: Sequence[str]) -> List[GroundTemperatureDepth]:
    count = int(_float(fields[1], 0.0)) if len(fields) > 1 else 0
    depths = []
    for index in range(count):
        base = 2 + 16 * index
        chunk = fields[base:base + 16]
        if len(chunk) < 16:
            raise WeatherFileError("GROUND TEMPERATURES header is truncated")
        depths.append(
            GroundTemperatureDepth(
                depth=_float(chunk[0], 0.0),
                conductivity=_float(chunk[1]),
                density=_float(chunk[2]),
                specific_heat=_float(chunk[3]),
                monthly=tuple(_float(v, 0.0) for v in chunk[4:16]),
            )
        )
    return depths


def parse_holidays(fields: Sequence[str], header: EPWHeader) -> None:
    padded = list(fields) + [""] * max(0, 5 - len(fields))
    header.leap_year_observed = padded[1].strip().lower().startswith("y")
    try:
        header.dst_start = parse_date_string(padded[2])
        header.dst_end = parse_date_string(padded[3])
    except ValueError as exc:
        raise WeatherFileError(f"HOLIDAYS/DAYLIGHT SAVINGS header: {exc}") from exc
    count = int(_float(padded[4], 0.0))
    for index in range(count):
        base = 5 + 2 * index
        if base + 1 >= len(fields):
            raise WeatherFileError("HOLIDAYS/DAYLIGHT SAVINGS header is truncated")
        try:
            start = parse_date_string(fields[base + 1])
        except ValueError as exc:
            raise WeatherFileError(f"Holiday '{fields[base]}': {exc}") from exc
        if start is None:
            continue
        header.holidays.append(
            SpecialDayConfig(name=fields[base].strip(), start=start, day_type=DayType.HOLIDAY)
        )


def parse_data_periods(fields: Sequence[str], header: EPWHeader) -> None:
    try:
        count = int(fields[1])
        header.records_per_hour = int(fields[2])
    except (IndexError, ValueError) as exc:
        raise WeatherFileError("DATA PERIODS header needs a period count and interval") from exc
    if not 1 <= header.records_per_hour <= 60:
        raise WeatherFileError(f"Invalid records per hour: {header.records_per_hour}")

    for index in range(count):
        base = 3 + 4 * index
        if base + 3 >= len(fields):
            raise WeatherFileError("DATA PERIODS header is truncated")
        start = _month_day(fields[base + 2], "DATA PERIODS")
        end = _month_day(fields[base + 3], "DATA PERIODS")
        try:
            weekday = WeekDay.from_name(fields[base + 1])
        except ValueError as exc:
            raise WeatherFileError(f"DATA PERIODS: {exc}") from exc
        for spec in (start, end):
            if not valid_month_day(spec.month, spec.day, leap_add=1):
                raise WeatherFileError(f"DATA PERIODS: invalid date {spec.month}/{spec.day}")
        header.data_periods.append(
            DataPeriod(
                name=fields[base].strip(),
                start_weekday=weekday,
                start_month=start.month,
                start_day=start.day,
                end_month=end.month,
                end_day=end.day,
                start_year=start.year,
                end_year=end.year,
            )
        )


def parse_header(lines: Sequence[str]) -> EPWHeader:
    """Parse the eight header lines; sections must appear in order."""
    if len(lines) < len(HEADER_SECTIONS):
        raise WeatherFileError("Weather file ends inside its header")

    sections = {}
    for expected, line in zip(HEADER_SECTIONS, lines):
        fields = line.rstrip("\r\n").split(",")
        keyword = fields[0].strip().upper()
        if keyword != expected:
            raise WeatherFileError(
                f"Expected header '{expected}' but found '{fields[0].strip()}'"
            )
        sections[expected] = fields

    header = EPWHeader(location=parse_location(sections["LOCATION"]))
    header.design_conditions = [f.strip() for f in sections["DESIGN CONDITIONS"][1:]]
    header.typical_extreme_periods = parse_typical_extreme_periods(
        sections["TYPICAL/EXTREME PERIODS"]
    )
    header.ground_temperatures = parse_ground_temperatures(sections["GROUND TEMPERATURES"])
    parse_holidays(sections["HOLIDAYS/DAYLIGHT SAVINGS"], header)
    header.comments_1 = ",".join(sections["COMMENTS 1"][1:]).strip()
    header.comments_2 = ",".join(sections["COMMENTS 2"][1:]).strip()
    parse_data_periods(sections["DATA PERIODS"], header)
    return header

"""Missing-value substitution and physical range checks for weather fields."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping, Optional

from weathersim.core.errors import Diagnostics

logger = logging.getLogger(__name__)

STANDARD_PRESSURE = 101325.0  # Pa


class WeatherField(Enum):
    DRY_BULB = "dry_bulb"
    DEW_POINT = "dew_point"
    REL_HUM = "rel_hum"
    PRESSURE = "pressure"
    WIND_DIR = "wind_dir"
    WIND_SPEED = "wind_speed"
    TOTAL_SKY_COVER = "total_sky_cover"
    OPAQUE_SKY_COVER = "opaque_sky_cover"
    VISIBILITY = "visibility"
    CEILING_HEIGHT = "ceiling_height"
    PRECIPITABLE_WATER = "precipitable_water"
    AEROSOL_OPTICAL_DEPTH = "aerosol_optical_depth"
    SNOW_DEPTH = "snow_depth"
    DAYS_SINCE_SNOW = "days_since_snow"
    ALBEDO = "albedo"
    LIQUID_PRECIP = "liquid_precip"
    BEAM_SOLAR = "beam_solar"
    DIFFUSE_SOLAR = "diffuse_solar"
    HORIZ_IR = "horiz_ir"


@dataclass(frozen=True, slots=True)
class FieldRule:
    """Sentinel, default and valid range of one weather field."""

    sentinel: float
    default: float
    lower: Optional[float] = None
    upper: Optional[float] = None
    exact_sentinel: bool = False
    substitute_out_of_range: bool = False
    substitute_missing: bool = True

    def is_missing(self, value: float) -> bool:
        if self.exact_sentinel:
            return value == self.sentinel
        return value >= self.sentinel

    def in_range(self, value: float) -> bool:
        if self.lower is not None and value < self.lower:
            return False
        if self.upper is not None and value > self.upper:
            return False
        return True


FIELD_RULES: Dict[WeatherField, FieldRule] = {
    WeatherField.DRY_BULB: FieldRule(99.9, 6.0, -90.0, 70.0),
    WeatherField.DEW_POINT: FieldRule(99.9, 3.0, -90.0, 70.0),
    WeatherField.REL_HUM: FieldRule(999.0, 50.0, 0.0, 110.0),
    WeatherField.PRESSURE: FieldRule(
        999999.0, STANDARD_PRESSURE, 31000.0, 120000.0, substitute_out_of_range=True
    ),
    WeatherField.WIND_DIR: FieldRule(999.0, 90.0, 0.0, 360.0),
    WeatherField.WIND_SPEED: FieldRule(999.0, 2.5, 0.0, 40.0),
    WeatherField.TOTAL_SKY_COVER: FieldRule(99.0, 5.0, exact_sentinel=True),
    WeatherField.OPAQUE_SKY_COVER: FieldRule(99.0, 5.0, exact_sentinel=True),
    WeatherField.VISIBILITY: FieldRule(9999.0, 777.7),
    WeatherField.CEILING_HEIGHT: FieldRule(99999.0, 77777.0),
    WeatherField.PRECIPITABLE_WATER: FieldRule(999.0, 0.0),
    WeatherField.AEROSOL_OPTICAL_DEPTH: FieldRule(0.999, 0.0),
    WeatherField.SNOW_DEPTH: FieldRule(999.0, 0.0),
    WeatherField.DAYS_SINCE_SNOW: FieldRule(99.0, 88.0),
    WeatherField.ALBEDO: FieldRule(999.0, 0.0),
    WeatherField.LIQUID_PRECIP: FieldRule(999.0, 0.0),
    WeatherField.BEAM_SOLAR: FieldRule(9999.0, 0.0),
    WeatherField.DIFFUSE_SOLAR: FieldRule(9999.0, 0.0),
    # Missing horizontal IR is recomputed from the sky model by the reader.
    WeatherField.HORIZ_IR: FieldRule(9999.0, 0.0, substitute_missing=False),
}


class MissingValuePolicy:
    """Per-field sentinel detection, last-good substitution and range tallies.

    One instance lives for the whole run; ``reset`` is called when an
    environment opens, ``report`` when it closes.
    """

    def __init__(self, rules: Mapping[WeatherField, FieldRule] = FIELD_RULES):
        self.rules = dict(rules)
        self.last_good: Dict[WeatherField, float] = {}
        self.missing: Dict[WeatherField, int] = {}
        self.out_of_range: Dict[WeatherField, int] = {}
        self.reset()

    def reset(self, overrides: Optional[Mapping[WeatherField, float]] = None) -> None:
        """Seed last-good values with defaults and clear the tallies."""
        self.last_good = {field: rule.default for field, rule in self.rules.items()}
        if overrides:
            self.last_good.update(overrides)
        self.missing = {field: 0 for field in self.rules}
        self.out_of_range = {field: 0 for field in self.rules}

    def is_missing(self, field: WeatherField, value: float) -> bool:
        return self.rules[field].is_missing(value)

    def apply(self, field: WeatherField, value: float) -> float:
        """Return the value to use for ``field``, recording any substitution."""
        rule = self.rules[field]

        if rule.is_missing(value):
            self.missing[field] += 1
            if not rule.substitute_missing:
                return value
            return self.last_good[field]

        if not rule.in_range(value):
            self.out_of_range[field] += 1
            if rule.substitute_out_of_range:
                return self.last_good[field]
            return value

        self.last_good[field] = value
        return value

    @property
    def total_missing(self) -> int:
        return sum(self.missing.values())

    @property
    def total_out_of_range(self) -> int:
        return sum(self.out_of_range.values())

    def summary(self) -> Dict[str, Dict[str, int]]:
        return {
            "missing": {f.value: n for f, n in self.missing.items() if n},
            "out_of_range": {f.value: n for f, n in self.out_of_range.items() if n},
        }

    def report(self, diagnostics: Diagnostics, title: str) -> None:
        """Summarise substitutions and range violations for one environment."""
        for field, count in self.missing.items():
            if count:
                diagnostics.warning(
                    f"Missing data for '{field.value}' in '{title}': {count} "
                    f"value(s) replaced (last good value or default "
                    f"{self.rules[field].default:g})."
                )
        for field, count in self.out_of_range.items():
            if count:
                rule = self.rules[field]
                action = "replaced" if rule.substitute_out_of_range else "kept"
                diagnostics.warning(
                    f"Out of range data for '{field.value}' in '{title}': {count} "
                    f"value(s) outside [{rule.lower:g}, {rule.upper:g}] {action}."
                )
        if self.total_missing == 0 and self.total_out_of_range == 0:
            logger.debug("No missing or out of range data in '%s'", title)

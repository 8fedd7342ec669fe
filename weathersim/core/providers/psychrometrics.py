"""Psychrometric relations consumed by the weather engine (SI units)."""

from typing import Protocol

import psychrolib


class Psychrometrics(Protocol):
    def hum_ratio_from_wet_bulb(self, dry_bulb: float, wet_bulb: float, pressure: float) -> float: ...

    def hum_ratio_from_dew_point(self, dew_point: float, pressure: float) -> float: ...

    def hum_ratio_from_rel_hum(self, dry_bulb: float, rel_hum: float, pressure: float) -> float: ...

    def hum_ratio_from_enthalpy(self, dry_bulb: float, enthalpy: float) -> float: ...

    def sat_hum_ratio(self, dry_bulb: float, pressure: float) -> float: ...

    def dew_point_from_hum_ratio(self, dry_bulb: float, hum_ratio: float, pressure: float) -> float: ...

    def rel_hum_from_hum_ratio(self, dry_bulb: float, hum_ratio: float, pressure: float) -> float: ...

    def sat_vapor_pressure(self, temperature: float) -> float: ...

    def standard_pressure(self, elevation: float) -> float: ...


class PsychrolibPsychrometrics:
    """`Psychrometrics` backed by psychrolib.

    Relative humidity is a fraction (0..1) on both sides of this interface.
    """

    MIN_HUM_RATIO = 1.0e-5

    def __init__(self):
        psychrolib.SetUnitSystem(psychrolib.SI)

    def hum_ratio_from_wet_bulb(self, dry_bulb, wet_bulb, pressure):
        wet_bulb = min(wet_bulb, dry_bulb)
        return max(psychrolib.GetHumRatioFromTWetBulb(dry_bulb, wet_bulb, pressure),
                   self.MIN_HUM_RATIO)

    def hum_ratio_from_dew_point(self, dew_point, pressure):
        return max(psychrolib.GetHumRatioFromTDewPoint(dew_point, pressure), self.MIN_HUM_RATIO)

    def hum_ratio_from_rel_hum(self, dry_bulb, rel_hum, pressure):
        rel_hum = min(max(rel_hum, 0.0), 1.0)
        return max(psychrolib.GetHumRatioFromRelHum(dry_bulb, rel_hum, pressure),
                   self.MIN_HUM_RATIO)

    def hum_ratio_from_enthalpy(self, dry_bulb, enthalpy):
        return max(psychrolib.GetHumRatioFromEnthalpyAndTDryBulb(enthalpy, dry_bulb),
                   self.MIN_HUM_RATIO)

    def sat_hum_ratio(self, dry_bulb, pressure):
        return psychrolib.GetSatHumRatio(dry_bulb, pressure)

    def dew_point_from_hum_ratio(self, dry_bulb, hum_ratio, pressure):
        hum_ratio = min(max(hum_ratio, self.MIN_HUM_RATIO), self.sat_hum_ratio(dry_bulb, pressure))
        return min(psychrolib.GetTDewPointFromHumRatio(dry_bulb, hum_ratio, pressure), dry_bulb)

    def rel_hum_from_hum_ratio(self, dry_bulb, hum_ratio, pressure):
        hum_ratio = max(hum_ratio, self.MIN_HUM_RATIO)
        return min(psychrolib.GetRelHumFromHumRatio(dry_bulb, hum_ratio, pressure), 1.0)

    def sat_vapor_pressure(self, temperature):
        return psychrolib.GetSatVapPres(temperature)

    def standard_pressure(self, elevation):
        return psychrolib.GetStandardAtmPressure(elevation)

# demihull_resistance/core/hydro.py
from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP
import math

from .particulars import Particulars

_DEFAULT = Particulars()


def round_half_up(value: float, ndigits: int = 2) -> float:
    """Round the printed value, so 2.345 -> 2.35 (not float rounding of 2.34499...)."""
    quant = Decimal(1).scaleb(-ndigits)
    return float(Decimal(repr(float(value))).quantize(quant, rounding=ROUND_HALF_UP))


def froude_number(speed: float, lwl: float, gravity: float = _DEFAULT.gravity) -> float:
    # speed is rounded first, then the ratio
    return round_half_up(round_half_up(speed, 2) / math.sqrt(gravity * lwl), 2)


def heave_and_trim(fwd_lvdt: float, aft_lvdt: float,
                   post_spacing: float = _DEFAULT.post_spacing_mm) -> tuple[float, float]:
    """Heave in mm and trim in degrees from the two LVDT readings (mm)."""
    heave = (fwd_lvdt + aft_lvdt) / 2
    trim = math.degrees(math.atan((fwd_lvdt - aft_lvdt) / post_spacing))
    return heave, trim


def reynolds_number(speed: float, lwl: float, kin_viscosity: float) -> float:
    return speed * lwl / kin_viscosity


def ittc57_cf(re: float) -> float:
    return 0.075 / (math.log10(re) - 2) ** 2


def grigson_cf(re: float, threshold: float = _DEFAULT.grigson_threshold) -> float:
    x = math.log10(math.log10(re))
    if re < threshold:
        return 10 ** (2.98651 - 10.8843 * x + 5.15283 * x ** 2)
    return 10 ** (-9.57459 + 26.6084 * x - 30.8285 * x ** 2 + 10.8914 * x ** 3)


def turbulence_stimulator_reduction(fr: float, p: Particulars = _DEFAULT) -> float:
    """Linear fit of the stud resistance (N) against Fr, from two speeds only."""
    return p.ts_slope * fr + p.ts_intercept


def total_model_resistance(drag_g: float, fr: float, condition: int,
                           p: Particulars = _DEFAULT) -> tuple[float, float]:
    """
    Return (corrected, uncorrected) model resistance in N.
    The stimulator correction is applied for ``p.ts_conditions`` only and
    never when the fit goes negative.
    """
    rtm = drag_g / 1000 * p.gravity
    corrected = rtm
    if int(condition) in p.ts_conditions:
        reduction = turbulence_stimulator_reduction(fr, p)
        if reduction > 0:
            corrected = rtm - reduction
    return corrected, rtm


def resistance_coefficient(resistance: float, density: float, wsa: float, speed: float) -> float:
    return resistance / (0.5 * density * wsa * speed ** 2)


def roughness_allowance(fs_lwl: float, res: float, p: Particulars = _DEFAULT) -> float:
    # ITTC 1978 (2011), 7.5-02-03-01.4
    return 0.044 * ((p.hull_roughness_m / fs_lwl) ** (1 / 3) - 10 * res ** (-1 / 3)) + 0.000125


def correlation_allowance(res: float) -> float:
    return (5.68 - 0.6 * math.log10(res)) * 1e-3


def air_resistance_coeff(fs_wsa: float, p: Particulars = _DEFAULT) -> float:
    return p.air_drag_coeff * (p.air_density * p.fs_projected_area) / (p.saltwater_density * fs_wsa)

# demihull_resistance/core/uncertainty.py
"""
Uncertainty of the total resistance coefficient of repeated runs
(ITTC 7.5-02-02-02). Bias comes from the wetted surface, speed, towing force
and water density; precision from the scatter of the repeats.
"""
from __future__ import annotations
from dataclasses import asdict, dataclass, fields, replace
import logging
import math
import numpy as np
import pandas as pd

from .model import HullCondition
from .particulars import Particulars
from . import hydro

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class UncertaintyInputs:
    wsa_bias_fraction: float = 0.005                 # of S, plus half that again for the lines
    speed_bias: float = 0.003                        # m/s
    mass_bias_terms: tuple[float, ...] = (0.000006847, 0.000007174, 0.0008384, 0.0)  # kg
    temperature_bias: float = 0.2                    # deg C
    density_bias: float = 1.0                        # kg/m^3
    coverage_factor: float = 2.0                     # K, 95%
    reference_temp_c: float = 15.0


@dataclass
class UncertaintyRecord:
    run_no: int                 # first run of the group
    condition: int
    froude_number: float
    repeat_count: int
    speed: float
    ct: float
    ct15: float
    ct_std: float
    rx: float                   # N
    mx: float                   # kg
    bias_s: float
    bias_v: float
    bias_mx: float
    theta_s: float
    theta_v: float
    theta_mx: float
    theta_rho: float
    theta_rho_tw: float
    bias_ct: float
    precision_ct: float
    total_ct: float
    bias_ct_pct: float          # of CT15
    precision_ct_pct: float
    total_ct_pct: float
    bias_share_pct: float       # of total squared
    precision_share_pct: float


UNCERTAINTY_COLUMNS: tuple[str, ...] = tuple(f.name for f in fields(UncertaintyRecord))


def ittc_kin_viscosity(temp_c: float) -> float:
    """Fresh water kinematic viscosity (m^2/s), ITTC 7.5-02-01-03."""
    dt = temp_c - 12
    return ((0.585e-3 * dt - 0.03361) * dt + 1.235) * 1e-6


def density_temperature_sensitivity(temp_c: float) -> float:
    return abs(0.0638 - 0.0173 * temp_c + 0.000189 * temp_c ** 2)


def group_uncertainty(group: pd.DataFrame, hull: HullCondition,
                      p: Particulars, inputs: UncertaintyInputs) -> UncertaintyRecord:
    """One set of repeated runs at the same Froude number."""
    rho, g = p.freshwater_density, p.gravity
    s = hull.ms_wsa
    v = float(group["speed"].mean())
    m = int(len(group))

    cf15 = hydro.ittc57_cf(hydro.reynolds_number(v, hull.ms_lwl, ittc_kin_viscosity(inputs.reference_temp_c)))
    cftw = hydro.ittc57_cf(hydro.reynolds_number(v, hull.ms_lwl, ittc_kin_viscosity(p.water_temp_c)))

    speeds = group["speed"].to_numpy(float)
    ct = group["rtm"].to_numpy(float) / (0.5 * rho * s * speeds ** 2)
    ct15 = ct + (cf15 - cftw) * p.form_factor
    avg_ct, avg_ct15 = float(ct.mean()), float(ct15.mean())
    std = float(np.std(ct, ddof=1)) if m > 1 else 0.0

    rx = avg_ct15 * 0.5 * rho * s * v ** 2
    mx = rx / g

    bs1 = s * inputs.wsa_bias_fraction
    bias_s = math.hypot(bs1, bs1 / 2)
    bias_v = inputs.speed_bias
    bias_mx = math.sqrt(sum(b ** 2 for b in inputs.mass_bias_terms))

    theta_s = rx / (0.5 * rho * v ** 2) * (-1 / s ** 2)
    theta_v = rx / (0.5 * rho * s) * (-2 / v ** 3)
    theta_mx = g / (0.5 * rho * v ** 2 * s)
    theta_rho = rx / (0.5 * v ** 2 * s) * (-1 / rho ** 2)
    theta_rho_tw = density_temperature_sensitivity(p.water_temp_c)

    bias_ct = math.sqrt((bias_s * theta_s) ** 2 + (bias_v * theta_v) ** 2 + (bias_mx * theta_mx) ** 2
                        + (theta_rho * (inputs.density_bias + inputs.temperature_bias * theta_rho_tw)) ** 2)
    precision_ct = inputs.coverage_factor * std / math.sqrt(m)
    total_ct = math.hypot(bias_ct, precision_ct)

    return UncertaintyRecord(
        run_no=int(group["run_no"].iloc[0]),
        condition=hull.code,
        froude_number=float(group["froude_number"].iloc[0]),
        repeat_count=m,
        speed=v,
        ct=avg_ct,
        ct15=avg_ct15,
        ct_std=std,
        rx=rx,
        mx=mx,
        bias_s=bias_s,
        bias_v=bias_v,
        bias_mx=bias_mx,
        theta_s=theta_s,
        theta_v=theta_v,
        theta_mx=theta_mx,
        theta_rho=theta_rho,
        theta_rho_tw=theta_rho_tw,
        bias_ct=bias_ct,
        precision_ct=precision_ct,
        total_ct=total_ct,
        bias_ct_pct=bias_ct / avg_ct15 * 100,
        precision_ct_pct=precision_ct / avg_ct15 * 100,
        total_ct_pct=total_ct / avg_ct15 * 100,
        bias_share_pct=bias_ct ** 2 / total_ct ** 2 * 100,
        precision_share_pct=precision_ct ** 2 / total_ct ** 2 * 100,
    )


def condition_uncertainty(rows: pd.DataFrame, hull: HullCondition,
                          p: Particulars | None = None,
                          inputs: UncertaintyInputs | None = None) -> list[UncertaintyRecord]:
    """
    Uncertainty per Froude number for the runs of one condition, in
    ascending Fr. Groups without a positive mean speed are skipped.
    """
    p = p or Particulars()
    inputs = inputs or UncertaintyInputs()
    if rows.empty:
        return []
    out: list[UncertaintyRecord] = []
    for fr, group in rows.groupby("froude_number", sort=True):
        v = group["speed"].mean()
        if not v > 0:
            _LOG.warning("condition %s Fr=%s: mean speed %s, no uncertainty", hull.code, fr, v)
            continue
        out.append(group_uncertainty(group.reset_index(drop=True), hull, p, inputs))
    return out


def uncertainty_frame(records) -> pd.DataFrame:
    return pd.DataFrame([asdict(r) for r in records], columns=list(UNCERTAINTY_COLUMNS))


# --- config-driven helper ---

def uncertainty_inputs_from_config(cfg: dict | None) -> UncertaintyInputs:
    section = (cfg or {}).get("uncertainty", {}) or {}
    known = {f.name for f in fields(UncertaintyInputs)}
    overrides = {}
    for key, value in section.items():
        if key not in known:
            continue
        if key == "mass_bias_terms":
            overrides[key] = tuple(float(v) for v in value)
        else:
            overrides[key] = float(value)
    return replace(UncertaintyInputs(), **overrides)

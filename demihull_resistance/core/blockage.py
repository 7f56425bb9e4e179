# demihull_resistance/core/blockage.py
"""
Tank blockage corrections for the averaged catamaran resistance.

Each averaged speed is corrected three ways (Tamura, Schuster, Scott). The
corrected model speed changes Re, C_Tm and the friction lines, and so the
residuary coefficient carried to full scale. The full scale speed itself is
never corrected.
"""
from __future__ import annotations
from dataclasses import asdict, dataclass, fields
from typing import Mapping, Sequence
import logging
import math
import pandas as pd

from .model import AveragedRow, HullCondition
from .particulars import Particulars
from . import hydro

_LOG = logging.getLogger(__name__)

BLOCKAGE_METHODS: tuple[str, ...] = ("uncorrected", "tamura", "schuster", "scott")
DEMIHULLS = 2


@dataclass
class BlockageRow:
    condition: int
    froude_number: float
    method: str
    speed: float                # measured model speed (m/s)
    speed_ratio: float          # dV/V
    corrected_speed: float
    rem: float
    cat_rtm: float              # catamaran model resistance (N)
    cat_ctm: float
    cfm_grigson: float
    cfm_ittc57: float
    crm_grigson: float
    crm_ittc57: float
    crm_grigson_delta: float    # (CRm uncorrected - CRm corrected) / CRm corrected
    crm_ittc57_delta: float
    fs_speed: float
    fs_speed_knots: float
    res: float
    roughness_allowance: float
    correlation_allowance: float
    air_resistance_coeff: float
    cfs_grigson: float
    cfs_ittc57: float
    cts_grigson: float
    cts_ittc57: float
    rts_grigson_kn: float
    rts_ittc57_kn: float


BLOCKAGE_COLUMNS: tuple[str, ...] = tuple(f.name for f in fields(BlockageRow))


def _require(hull: HullCondition, *names: str) -> None:
    missing = [n for n in names if getattr(hull, n) is None]
    if missing:
        raise ValueError(f"condition {hull.code} has no {', '.join(missing)}; blockage not available")


def catamaran_wsa(hull: HullCondition, fr: float, p: Particulars) -> float:
    """Both demihulls; the dry transom is taken off once the transom runs clear."""
    if fr > p.transom_wsa_froude and hull.ms_wsa_transom is not None:
        return DEMIHULLS * hull.ms_wsa_transom
    return DEMIHULLS * hull.ms_wsa


def catamaran_volume(hull: HullCondition, p: Particulars) -> float:
    _require(hull, "displacement_kg")
    return DEMIHULLS * hull.displacement_kg / p.freshwater_density


def area_ratio(hull: HullCondition, p: Particulars) -> float:
    _require(hull, "ms_max_section")
    return hull.ms_max_section / (p.tank_depth * p.tank_width)


def depth_froude_number(speed: float, p: Particulars) -> float:
    return speed / math.sqrt(p.gravity * p.tank_depth)


def tamura_ratio(speed: float, hull: HullCondition, p: Particulars) -> float:
    fh = depth_froude_number(speed, p)
    return 0.67 * area_ratio(hull, p) * (hull.ms_lwl / p.tank_width) ** 0.75 / (1 - fh ** 2)


def schuster_ratio(speed: float, cat_rtm: float, viscous_resistance: float,
                   hull: HullCondition, p: Particulars) -> float:
    """Shallow water blockage plus the wave term, weighted by the non-viscous share."""
    m = area_ratio(hull, p)
    fh = depth_froude_number(speed, p)
    return m / (1 - m - fh ** 2) + (1 - viscous_resistance / cat_rtm) * (2 / 3) * fh ** 10


def scott_k1(disp_length_ratio: float, re: float) -> float:
    """Piecewise linear in Re, one set of bands per displacement-length ratio range."""
    if disp_length_ratio < 0.09:
        bands = ((5.8e6, -1e-9, 1.9005), (1.97e7, -1e-7, 2.4732))
    elif disp_length_ratio <= 0.11:
        bands = ((5.2e6, -2e-9, 1.5965), (7.9e6, -1e-7, 2.1636), (1.88e7, -7e-8, 1.867))
    else:
        bands = ((4.81e6, -5e-10, 1.2935), (8.3e6, -1e-7, 1.8925), (1.71e7, -4e-8, 1.1928))
    *inner, (last_re, last_slope, last_icpt) = bands
    for upper, slope, icpt in inner:
        if re <= upper:
            return slope * re + icpt
    if re < last_re:
        return last_slope * re + last_icpt
    _LOG.warning("Re=%.4g is outside the Scott K1 range, no correction", re)
    return math.nan


def scott_k2(fr: float) -> float:
    if 0.22 < fr < 0.40:
        return 2.4 * (fr - 0.22) ** 2
    return 0.0


def scott_ratio(speed: float, fr: float, hull: HullCondition, p: Particulars) -> float:
    _require(hull, "block_coeff")
    volume = catamaran_volume(hull, p)
    disp_length = hull.block_coeff * volume ** (1 / 3) / hull.ms_lwl
    re = hydro.reynolds_number(speed, hull.ms_lwl, p.ms_kin_viscosity)
    section = (p.tank_depth * p.tank_width) ** -1.5
    k1 = scott_k1(disp_length, re)
    # 4.5/21.6 is part of the published fit, not the model scale
    return k1 * volume * section + (4.5 / 21.6) * hull.ms_lwl ** 2 * scott_k2(fr) * section


def _model_scale(speed, cat_rtm, cat_wsa, hull, p):
    re = hydro.reynolds_number(speed, hull.ms_lwl, p.ms_kin_viscosity)
    ctm = hydro.resistance_coefficient(cat_rtm, p.freshwater_density, cat_wsa, speed)
    cf_g = hydro.grigson_cf(re, p.grigson_threshold)
    cf_i = hydro.ittc57_cf(re)
    return re, ctm, cf_g, cf_i, ctm - p.form_factor * cf_g, ctm - p.form_factor * cf_i


def _rel_delta(uncorrected: float, corrected: float) -> float:
    if corrected == 0:
        return math.nan
    return (uncorrected - corrected) / corrected


def blockage_corrections(row: AveragedRow, hull: HullCondition,
                         p: Particulars | None = None) -> list[BlockageRow]:
    """
    One ``BlockageRow`` per method in ``BLOCKAGE_METHODS`` for an averaged
    speed. Raises ValueError when the hull lacks the blockage geometry.
    """
    p = p or Particulars()
    _require(hull, "ms_max_section", "displacement_kg", "block_coeff")
    speed, fr = row.speed, row.froude_number
    cat_rtm = DEMIHULLS * row.rtm
    cat_wsa = catamaran_wsa(hull, fr, p)
    dyn = 0.5 * p.freshwater_density * cat_wsa * speed ** 2

    base = _model_scale(speed, cat_rtm, cat_wsa, hull, p)
    ratios = {
        "uncorrected": 0.0,
        "tamura": tamura_ratio(speed, hull, p),
        # Grigson viscous share; the corrected speed serves both friction lines
        "schuster": schuster_ratio(speed, cat_rtm, base[2] * dyn, hull, p),
        "scott": scott_ratio(speed, fr, hull, p),
    }

    # full scale at the measured speed, same for every method
    fs_speed = speed * math.sqrt(p.scale_ratio)
    res = hydro.reynolds_number(fs_speed, hull.fs_lwl, p.fs_kin_viscosity)
    fs_wsa = cat_wsa * p.scale_ratio ** 2
    d_cf = hydro.roughness_allowance(hull.fs_lwl, res, p)
    ca = hydro.correlation_allowance(res)
    caa = hydro.air_resistance_coeff(fs_wsa / DEMIHULLS, p)
    cfs_g = hydro.grigson_cf(res, p.grigson_threshold)
    cfs_i = hydro.ittc57_cf(res)
    fs_dyn = 0.5 * p.saltwater_density * fs_wsa * fs_speed ** 2
    allowances = d_cf + ca + caa

    out: list[BlockageRow] = []
    for method in BLOCKAGE_METHODS:
        ratio = ratios[method]
        v_c = speed * (1 + ratio)
        re, ctm, cf_g, cf_i, cr_g, cr_i = base if method == "uncorrected" else _model_scale(
            v_c, cat_rtm, cat_wsa, hull, p)
        cts_g = p.form_factor * cfs_g + allowances + cr_g
        cts_i = p.form_factor * cfs_i + allowances + cr_i
        out.append(BlockageRow(
            condition=hull.code,
            froude_number=fr,
            method=method,
            speed=speed,
            speed_ratio=ratio,
            corrected_speed=v_c,
            rem=re,
            cat_rtm=cat_rtm,
            cat_ctm=ctm,
            cfm_grigson=cf_g,
            cfm_ittc57=cf_i,
            crm_grigson=cr_g,
            crm_ittc57=cr_i,
            crm_grigson_delta=_rel_delta(base[4], cr_g),
            crm_ittc57_delta=_rel_delta(base[5], cr_i),
            fs_speed=fs_speed,
            fs_speed_knots=fs_speed / p.knots_per_ms,
            res=res,
            roughness_allowance=d_cf,
            correlation_allowance=ca,
            air_resistance_coeff=caa,
            cfs_grigson=cfs_g,
            cfs_ittc57=cfs_i,
            cts_grigson=cts_g,
            cts_ittc57=cts_i,
            rts_grigson_kn=cts_g * fs_dyn / 1000,
            rts_ittc57_kn=cts_i * fs_dyn / 1000,
        ))
    return out


def blockage_table(rows: Sequence[AveragedRow],
                   hull_conditions: Mapping[int, HullCondition],
                   p: Particulars | None = None) -> pd.DataFrame:
    """Corrections for every averaged row whose condition has blockage geometry."""
    records = []
    skipped = set()
    for row in rows:
        hull = hull_conditions.get(int(row.condition))
        if hull is None or hull.ms_max_section is None:
            skipped.add(int(row.condition))
            continue
        records.extend(asdict(r) for r in blockage_corrections(row, hull, p))
    if skipped:
        _LOG.info("no blockage geometry for condition(s) %s", sorted(skipped))
    return pd.DataFrame(records, columns=list(BLOCKAGE_COLUMNS))

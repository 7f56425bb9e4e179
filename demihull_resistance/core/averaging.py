# demihull_resistance/core/averaging.py
from __future__ import annotations
from dataclasses import asdict
from typing import Mapping, Sequence
import logging
import math
import numpy as np
import pandas as pd

from .model import AveragedRow, AVERAGED_COLUMNS, CHANNEL_MEANS, HullCondition
from .particulars import Particulars, lookup_condition
from . import hydro

_LOG = logging.getLogger(__name__)


def select_runs(repeat_run_numbers: Sequence[int], results: pd.DataFrame) -> pd.DataFrame:
    """
    Rows of ``results`` whose run number is listed, in the order of the list.
    Run numbers without a row are skipped.
    """
    if results.empty or not len(repeat_run_numbers):
        return results.iloc[0:0]
    by_run = {}
    for pos, run in enumerate(results["run_no"].to_numpy()):
        by_run[int(run)] = pos          # a duplicated run keeps its last row

    picked, missing = [], []
    for run in repeat_run_numbers:
        pos = by_run.get(int(run))
        if pos is None:
            missing.append(int(run))
        elif pos not in picked:
            picked.append(pos)
    if missing:
        _LOG.debug("runs not in results table, skipped: %s", missing)
    return results.iloc[picked].reset_index(drop=True)


def split_by_froude(rows: pd.DataFrame) -> list[pd.DataFrame]:
    """Partition by exact Froude number, groups in order of first appearance."""
    if rows.empty:
        return []
    return [g.reset_index(drop=True) for _, g in rows.groupby("froude_number", sort=False)]


def _pstd(values) -> float:
    return float(np.std(np.asarray(values, dtype=float), ddof=0))


def _pvar(values) -> float:
    return float(np.var(np.asarray(values, dtype=float), ddof=0))


def average_speed_group(group: pd.DataFrame,
                        hull: HullCondition,
                        p: Particulars) -> AveragedRow:
    """Average one set of repeated runs at the same speed and rescale it."""
    condition = hull.code
    speed = float(group["speed"].mean())
    fwd = float(group["fwd_lvdt"].mean())
    aft = float(group["aft_lvdt"].mean())
    drag = float(group["drag_g"].mean())

    heave, trim = hydro.heave_and_trim(fwd, aft, p.post_spacing_mm)
    fr = hydro.froude_number(speed, hull.ms_lwl, p.gravity)

    # model scale
    rtm, rtm_uncorrected = hydro.total_model_resistance(drag, fr, condition, p)
    ctm = hydro.resistance_coefficient(rtm, p.freshwater_density, hull.ms_wsa, speed)
    rem = hydro.reynolds_number(speed, hull.ms_lwl, p.ms_kin_viscosity)
    cfm_ittc = hydro.ittc57_cf(rem)
    cfm_grigson = hydro.grigson_cf(rem, p.grigson_threshold)
    crm = ctm - p.form_factor * cfm_grigson
    pem = speed * rtm
    pbm = pem / p.propulsive_efficiency

    # full scale, CRs = CRm
    fs_speed = speed * math.sqrt(p.scale_ratio)
    res = hydro.reynolds_number(fs_speed, hull.fs_lwl, p.fs_kin_viscosity)
    cfs_ittc = hydro.ittc57_cf(res)
    cfs_grigson = hydro.grigson_cf(res, p.grigson_threshold)
    d_cf = hydro.roughness_allowance(hull.fs_lwl, res, p)
    ca = hydro.correlation_allowance(res)
    caa = hydro.air_resistance_coeff(hull.fs_wsa, p)
    cts = p.form_factor * cfs_grigson + d_cf + ca + crm + caa
    rts = 0.5 * p.saltwater_density * fs_speed ** 2 * hull.fs_wsa * cts
    pes = fs_speed * rts
    pbs = pes / p.propulsive_efficiency

    return AveragedRow(
        condition=condition,
        froude_number=fr,
        speed=speed,
        fwd_lvdt=fwd,
        aft_lvdt=aft,
        drag_g=drag,
        rtm=rtm,
        rtm_uncorrected=rtm_uncorrected,
        ctm=ctm,
        heave=heave,
        trim=trim,
        fs_speed=fs_speed,
        fs_speed_knots=fs_speed / p.knots_per_ms,
        rem=rem,
        cfm_ittc57=cfm_ittc,
        cfm_grigson=cfm_grigson,
        crm=crm,
        pem=pem,
        pbm=pbm,
        res=res,
        cfs_ittc57=cfs_ittc,
        cfs_grigson=cfs_grigson,
        roughness_allowance=d_cf,
        correlation_allowance=ca,
        air_resistance_coeff=caa,
        cts=cts,
        rts=rts,
        pes=pes,
        pbs=pbs,
        speed_min=float(group["speed"].min()),
        speed_max=float(group["speed"].max()),
        fwd_lvdt_min=float(group["fwd_lvdt"].min()),
        fwd_lvdt_max=float(group["fwd_lvdt"].max()),
        aft_lvdt_min=float(group["aft_lvdt"].min()),
        aft_lvdt_max=float(group["aft_lvdt"].max()),
        drag_min=float(group["drag_g"].min()),
        drag_max=float(group["drag_g"].max()),
        speed_std=_pstd(group["speed"]),
        fwd_lvdt_std=_pstd(group["fwd_lvdt"]),
        aft_lvdt_std=_pstd(group["aft_lvdt"]),
        drag_std=_pstd(group["drag_g"]),
        speed_var=_pvar(group["speed"]),
        fwd_lvdt_var=_pvar(group["fwd_lvdt"]),
        aft_lvdt_var=_pvar(group["aft_lvdt"]),
        drag_var=_pvar(group["drag_g"]),
        trim_std=_pstd(group["trim"]),
        ctm_x1000_std=_pstd(group["ctm"] * 1000),
        repeat_count=int(len(group)),
    )


def _usable(group: pd.DataFrame) -> bool:
    speed = group["speed"].mean()
    return bool(speed > 0) and not math.isnan(group["drag_g"].mean())


def average_condition_runs(repeat_run_numbers: Sequence[int],
                           results: pd.DataFrame,
                           hull_conditions: Mapping[int, HullCondition],
                           particulars: Particulars | None = None) -> list[AveragedRow]:
    """
    Average the repeated runs listed in ``repeat_run_numbers``.

    One ``AveragedRow`` per distinct Froude number, in order of first
    appearance. Returns ``[]`` when none of the runs are in ``results``.
    Raises ``UnknownConditionError`` when a speed group carries a condition
    code missing from ``hull_conditions``. Groups without a usable mean speed
    or drag are skipped with a warning.
    """
    p = particulars or Particulars()
    rows = select_runs(repeat_run_numbers, results)
    if rows.empty:
        return []

    averaged: list[AveragedRow] = []
    for group in split_by_froude(rows):
        codes = pd.unique(group["condition"])
        if len(codes) > 1:
            _LOG.warning("mixed conditions %s at Fr=%s, using %s",
                         list(codes), group["froude_number"].iloc[0], codes[0])
        hull = lookup_condition(hull_conditions, codes[0])
        if not _usable(group):
            _LOG.warning("runs %s at Fr=%s have no usable speed or drag, group skipped",
                         group["run_no"].tolist(), group["froude_number"].iloc[0])
            continue
        averaged.append(average_speed_group(group, hull, p))
    return averaged


def _channel_pct(high: float, mean: float) -> float:
    return (high - mean) / high * 100 if high else 0.0


def averaged_frame(rows: Sequence[AveragedRow]) -> pd.DataFrame:
    """
    Lay the rows out like the results table so it reads back positionally.
    Acquisition columns are zeroed; the extra averaging columns go last.
    """
    records = []
    for row in rows:
        rec = asdict(row)
        rec.update(run_no=0, sample_rate_hz=0.0, n_samples=0, record_time_s=0.0)
        for prefix, mean_field in CHANNEL_MEANS.items():
            rec[f"{prefix}_mean"] = rec[mean_field]
            rec[f"{prefix}_pct"] = _channel_pct(rec[f"{prefix}_max"], rec[mean_field])
        records.append(rec)
    return pd.DataFrame(records, columns=list(AVERAGED_COLUMNS))

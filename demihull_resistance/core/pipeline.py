# demihull_resistance/core/pipeline.py
from __future__ import annotations
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Mapping
import logging
import pandas as pd

from .averaging import average_condition_runs, averaged_frame
from .minmax import condition_minmax, split_by_condition
from .model import AVERAGED_COLUMNS, AveragedRow, HullCondition, UnknownConditionError
from .particulars import Particulars, build_hull_conditions, particulars_from_config, run_groups_from_config
from .prohaska import prohaska_fit, prohaska_points
from .blockage import blockage_table
from .reports import REPORT_FORMATS, write_table, write_csv
from .uncertainty import condition_uncertainty, uncertainty_frame, uncertainty_inputs_from_config
from .spectral import (FREQUENCY_COLUMNS, amplitude_spectrum, analyse_drag_signal, dominant_peaks,
                       prepare_signal, trim_samples)
from ..loaders.timeseries_loader import load_timeseries
from ..utils.detect import discover_timeseries

_LOG = logging.getLogger(__name__)


def run_pipeline(results: pd.DataFrame, cfg: dict, out_root: Path) -> pd.DataFrame:
    """
    Average every configured run group, then write the averaged, min-max,
    Prohaska, blockage and uncertainty tables and the plots under
    ``out_root``. Returns the averaged table.
    """
    particulars = particulars_from_config(cfg)
    hull_conditions = build_hull_conditions(particulars.scale_ratio)
    run_groups = run_groups_from_config(cfg)

    fmt = _report_format(cfg)
    mat_var = str(cfg.get("reports", {}).get("mat_variable", "resultsAveragedArray"))
    plots_cfg = cfg.get("plots", {}) or {}
    do_plots = bool(plots_cfg.get("enabled", True))
    legend_ncol = int(plots_cfg.get("legend_ncol", 3))

    out_root.mkdir(parents=True, exist_ok=True)

    # averaged repeated runs, one block per condition
    frames: list[pd.DataFrame] = []
    all_rows: list[AveragedRow] = []
    for code, runs in sorted(run_groups.items()):
        try:
            rows = average_condition_runs(runs, results, hull_conditions, particulars)
        except UnknownConditionError as e:
            print(f"[WARN] run group {code}: {e}; skipping group.")
            continue
        if not rows:
            print(f"[INFO] run group {code}: no matching runs in results table.")
            continue
        frames.append(averaged_frame(rows))
        all_rows.extend(rows)
        _LOG.debug("run group %s: %d speed(s) from %d run(s)", code, len(rows), sum(r.repeat_count for r in rows))

    if frames:
        averaged = pd.concat(frames, ignore_index=True)
    else:
        averaged = pd.DataFrame(columns=list(AVERAGED_COLUMNS))
    write_table(averaged, out_root / "resultsAveragedArray", "averaged repeated runs", fmt=fmt, mat_variable=mat_var)

    # heave/trim spread per condition
    minmax_frames = [condition_minmax(rows) for _, rows in sorted(split_by_condition(results).items())]
    minmax_frames = [f for f in minmax_frames if not f.empty]
    if minmax_frames:
        write_table(pd.concat(minmax_frames, ignore_index=True), out_root / "resultsMinMaxArray",
                    "heave/trim min-max", fmt=fmt, mat_variable="resultsMinMaxArray")

    _run_prohaska(results, cfg, out_root, do_plots)
    blockage = _run_blockage(all_rows, cfg, hull_conditions, particulars, out_root, fmt)
    _run_uncertainty(results, cfg, hull_conditions, particulars, out_root, fmt)

    if do_plots and not averaged.empty:
        from .plotting import save_condition_plots, save_fullscale_plot
        labels = {code: hull.description for code, hull in hull_conditions.items()}
        save_condition_plots(averaged, out_root / "plots", labels=labels, legend_ncol=legend_ncol)
        save_fullscale_plot(averaged, out_root / "plots")
    if do_plots and blockage is not None and not blockage.empty:
        from .plotting import save_blockage_plots
        save_blockage_plots(blockage, out_root / "plots")

    return averaged


def _run_prohaska(results: pd.DataFrame, cfg: dict, out_root: Path, do_plots: bool) -> pd.DataFrame | None:
    pro_cfg = cfg.get("prohaska", {}) or {}
    if not bool(pro_cfg.get("enabled", True)):
        return None
    condition = int(pro_cfg.get("condition", 13))
    lines = [str(v).lower() for v in pro_cfg.get("friction_lines", ["ittc57", "grigson"])]

    rows = split_by_condition(results).get(condition)
    if rows is None or rows.empty:
        print(f"[INFO] Prohaska: no runs for condition {condition}.")
        return None

    fits, points = {}, {}
    for line in lines:
        try:
            fits[line] = prohaska_fit(rows, line)
        except ValueError as e:
            print(f"[WARN] Prohaska ({line}): {e}")
            continue
        points[line] = prohaska_points(rows, line)
        print(f"[INFO] Prohaska ({line}): form factor (1+k) = {fits[line].form_factor:.3f}, "
              f"r = {fits[line].correlation:.3f}")

    if not fits:
        return None
    df = pd.DataFrame([asdict(f) for f in fits.values()])
    write_csv(df, out_root / f"prohaska_cond{condition:02d}.csv", f"Prohaska condition {condition}")
    if do_plots:
        from .plotting import save_prohaska_plot
        save_prohaska_plot(points, fits, out_root / "plots", condition)
    return df


def _stage_conditions(section: dict, default: tuple[int, ...]) -> tuple[int, ...]:
    conds = section.get("conditions")
    return tuple(int(c) for c in conds) if conds else default


def _run_blockage(rows: list[AveragedRow], cfg: dict, hull_conditions: Mapping[int, HullCondition],
                  particulars: Particulars,
                  out_root: Path, fmt: str) -> pd.DataFrame | None:
    bl_cfg = cfg.get("blockage", {}) or {}
    if not bool(bl_cfg.get("enabled", True)):
        return None
    wanted = _stage_conditions(bl_cfg, tuple(range(7, 13)))
    picked = [r for r in rows if int(r.condition) in wanted]
    if not picked:
        print(f"[INFO] blockage: no averaged speeds for conditions {list(wanted)}.")
        return None
    df = blockage_table(picked, hull_conditions, particulars)
    if df.empty:
        print(f"[WARN] blockage: no hull geometry for conditions {sorted({r.condition for r in picked})}.")
        return df
    write_table(df, out_root / "resultsBlockageArray", "blockage corrections", fmt=fmt,
                mat_variable="resultsBlockageArray")
    return df


def _run_uncertainty(results: pd.DataFrame, cfg: dict, hull_conditions: Mapping[int, HullCondition],
                     particulars: Particulars, out_root: Path, fmt: str) -> pd.DataFrame | None:
    ua_cfg = cfg.get("uncertainty", {}) or {}
    if not bool(ua_cfg.get("enabled", True)):
        return None
    inputs = uncertainty_inputs_from_config(cfg)
    by_condition = split_by_condition(results)
    records = []
    for code in _stage_conditions(ua_cfg, tuple(range(7, 13))):
        rows = by_condition.get(code)
        if rows is None or rows.empty:
            continue
        hull = hull_conditions.get(code)
        if hull is None:
            print(f"[WARN] uncertainty: no hull particulars for condition {code}; skipping.")
            continue
        records.extend(condition_uncertainty(rows, hull, particulars, inputs))
    if not records:
        print("[INFO] uncertainty: no runs for the configured conditions.")
        return None
    df = uncertainty_frame(records)
    write_table(df, out_root / "resultsUncertaintyArray", "resistance uncertainty", fmt=fmt,
                mat_variable="resultsUncertaintyArray")
    return df


# --- config-driven wrapper helpers ---

def _report_format(cfg: dict) -> str:
    fmt = str((cfg.get("reports", {}) or {}).get("format", "dat")).lower()
    if fmt not in REPORT_FORMATS:
        print(f"[WARN] unknown reports.format '{fmt}' (expected {'/'.join(REPORT_FORMATS)}); using 'dat'.")
        fmt = "dat"
    return fmt


@dataclass
class PreparedSpectral:
    fs: float
    start_sample: int
    cut_end: int
    peak_delta: float
    detrend: str
    conditions: tuple[int, ...] | None
    do_plots: bool
    max_plot_freq: float


def prepare_spectral(global_cfg: dict) -> PreparedSpectral | None:
    """
    Read the spectral section from config and return a PreparedSpectral.
    Returns None when the stage is disabled.
    """
    sp = (global_cfg or {}).get("spectral", {}) or {}
    if not bool(sp.get("enabled", False)):
        return None
    detrend = str(sp.get("detrend", "mean")).lower()
    if detrend not in ("mean", "linear", "none"):
        detrend = "mean"
    conds = sp.get("conditions")
    return PreparedSpectral(
        fs=float(sp.get("sample_rate_hz", 200)),
        start_sample=int(sp.get("start_sample", 1000)),
        cut_end=int(sp.get("cut_samples_from_end", 400)),
        peak_delta=float(sp.get("peak_delta", 0.01)),
        detrend=detrend,
        conditions=tuple(int(c) for c in conds) if conds else None,
        do_plots=bool(sp.get("plots", False)),
        max_plot_freq=float(sp.get("plot_max_hz", 10)),
    )


def run_spectral(ts_root: Path, results: pd.DataFrame, cfg: dict, out_root: Path) -> pd.DataFrame:
    """Dominant drag frequencies per run time series; writes frequencyArrayFFT."""
    prep = prepare_spectral(cfg)
    empty = pd.DataFrame(columns=FREQUENCY_COLUMNS)
    if prep is None:
        return empty

    recurse = bool(cfg.get("input", {}).get("recurse", True))
    items = discover_timeseries(ts_root, recurse=recurse)
    if not items:
        print(f"[INFO] no R<nn>.dat time series found under: {ts_root}")
        return empty

    wanted = None
    if prep.conditions is not None:
        wanted = set(results.loc[results["condition"].isin(prep.conditions), "run_no"].astype(int))

    records, to_plot = [], []
    for item in items:
        if wanted is not None and item.run_no not in wanted:
            continue
        try:
            ts = load_timeseries(item.path)
        except (OSError, ValueError) as e:
            print(f"[WARN] time series load failed for {item.path.name}: {e}")
            continue
        rec = analyse_drag_signal(item.run_no, ts, results, fs=prep.fs, start=prep.start_sample,
                                  cut_end=prep.cut_end, delta=prep.peak_delta, detrend_mode=prep.detrend)
        if rec is None:
            continue
        print(f"[INFO] Run {rec.run_no}: periodogram maximum at {rec.periodogram_hz:.3f} Hz")
        records.append(asdict(rec))
        if prep.do_plots:
            to_plot.append((rec.run_no, ts["drag_g"].to_numpy(float)))

    df = pd.DataFrame(records, columns=FREQUENCY_COLUMNS)
    fmt = _report_format(cfg)
    write_table(df, out_root / "frequencyArrayFFT", "drag frequencies", fmt=fmt, mat_variable="frequencyArrayFFT")

    # spectra are drawn once the table is on disk
    if to_plot:
        from .plotting import save_spectrum_plot
        for run_no, drag in to_plot:
            y = prepare_signal(trim_samples(drag, prep.start_sample, prep.cut_end), prep.detrend)
            freqs, amps = amplitude_spectrum(y, prep.fs)
            peaks = dominant_peaks(freqs, amps, delta=prep.peak_delta)
            save_spectrum_plot(run_no, freqs, amps, peaks, out_root / "plots" / "fft", prep.max_plot_freq)
    return df

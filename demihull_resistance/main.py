# demihull_resistance/main.py
from __future__ import annotations
from pathlib import Path
import logging
import sys
import yaml

from demihull_resistance.loaders.results_loader import load_results
from demihull_resistance.core.pipeline import run_pipeline, run_spectral
from demihull_resistance.utils.detect import discover_results


def load_config(cfg_path: Path) -> dict:
    with cfg_path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def resolve_results_path(path: Path, recurse: bool = True) -> Path:
    """A results file as given, or the results table found inside a folder."""
    if not path.is_dir():
        return path
    found = discover_results(path, recurse=recurse)
    if not found:
        raise FileNotFoundError(f"no full_resistance_data.dat or resultsArray.dat under {path}")
    return found[0].path


def main(argv: list[str] | None = None):
    argv = sys.argv[1:] if argv is None else argv

    # ---------- config ----------
    here = Path(__file__).resolve().parent
    cfg_path = Path(argv[0]) if argv else here / "config.yaml"
    cfg = load_config(cfg_path)
    base = cfg_path.resolve().parent

    in_cfg = cfg.get("input", {}) or {}
    results_path = (base / in_cfg.get("results", "full_resistance_data.dat")).resolve()
    ts_root = (base / in_cfg.get("timeseries", "_time_series_data")).resolve()
    out_root = (base / cfg.get("output", {}).get("root", "_results")).resolve()
    out_root.mkdir(parents=True, exist_ok=True)

    log_cfg = cfg.get("logging", {}) or {}
    verbose = bool(log_cfg.get("verbose", True))
    logging.basicConfig(level=str(log_cfg.get("level", "WARNING")).upper(),
                        format="%(levelname)s %(name)s: %(message)s")
    if verbose:
        print(f"[cfg] results={results_path}")
        print(f"[cfg] timeseries={ts_root}")
        print(f"[cfg] output={out_root}")

    # ---------- results table ----------
    try:
        results_path = resolve_results_path(results_path, bool(in_cfg.get("recurse", True)))
        results = load_results(results_path)
    except FileNotFoundError as e:
        print("!" * 60)
        print(f"WARNING: required resistance data file does not exist: {e}")
        print("!" * 60)
        sys.exit(1)
    if results.empty:
        print(f"[INFO] {results_path.name} holds no runs; nothing to do.")
        sys.exit(0)
    if verbose:
        print(f"[load] {len(results)} run(s), {results.shape[1]} column(s) from {results_path.name}")

    # ---------- averaging, corrections, scaling ----------
    averaged = run_pipeline(results, cfg, out_root)
    if verbose:
        print(f"[summary] {len(averaged)} averaged speed(s) across "
              f"{averaged['condition'].nunique() if not averaged.empty else 0} condition(s)")

    # ---------- drag spectra ----------
    freqs = run_spectral(ts_root, results, cfg, out_root)
    if verbose and not freqs.empty:
        print(f"[summary] frequency analysis for {len(freqs)} run(s)")


if __name__ == "__main__":
    main()

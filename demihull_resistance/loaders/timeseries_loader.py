# demihull_resistance/loaders/timeseries_loader.py
from __future__ import annotations
from pathlib import Path
import re
import pandas as pd

# R<nn>.dat as written per run: real units first, then zeroed voltages
TIMESERIES_COLUMNS = [
    "time_s", "speed", "fwd_lvdt", "aft_lvdt", "drag_g",
    "speed_V", "fwd_lvdt_V", "aft_lvdt_V", "drag_V",
]

_RUN_RE = re.compile(r"^R(\d+)$", re.IGNORECASE)


def run_number_from_path(path: Path) -> int | None:
    m = _RUN_RE.match(Path(path).stem)
    return int(m.group(1)) if m else None


def _to_float(s) -> pd.Series:
    if pd.api.types.is_numeric_dtype(s):
        return s.astype(float)
    return pd.to_numeric(s.astype(str).str.replace(",", ".", regex=False), errors="coerce")


def load_timeseries(path: Path) -> pd.DataFrame:
    """
    Read one run's time series. Only the five real-unit channels are
    required; the voltage channels are kept when present.
    """
    raw = pd.read_csv(path, sep=",", header=None)
    if raw.shape[1] < 5:
        raise ValueError(f"{Path(path).name}: expected at least 5 columns, got {raw.shape[1]}")
    raw = raw.iloc[:, :len(TIMESERIES_COLUMNS)]
    cols = {name: _to_float(raw.iloc[:, i]) for i, name in enumerate(TIMESERIES_COLUMNS[:raw.shape[1]])}
    df = pd.DataFrame(cols).dropna(subset=["time_s", "drag_g"]).sort_values("time_s")
    return df.reset_index(drop=True)

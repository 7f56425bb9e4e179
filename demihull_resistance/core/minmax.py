# demihull_resistance/core/minmax.py
from __future__ import annotations
import pandas as pd

from .averaging import split_by_froude

MINMAX_COLUMNS = [
    "condition", "froude_number",
    "heave_min", "heave_max", "heave_mid",
    "crm_x1000",
    "trim_min", "trim_max", "trim_mid",
]


def condition_minmax(condition_rows: pd.DataFrame) -> pd.DataFrame:
    """Heave and trim spread of the repeats at each speed of one condition."""
    out = []
    for g in split_by_froude(condition_rows):
        h_min, h_max = float(g["heave"].min()), float(g["heave"].max())
        t_min, t_max = float(g["trim"].min()), float(g["trim"].max())
        out.append({
            "condition": int(g["condition"].iloc[0]),
            "froude_number": float(g["froude_number"].iloc[0]),
            "heave_min": h_min,
            "heave_max": h_max,
            "heave_mid": (h_min + h_max) / 2,
            "crm_x1000": float(g["crm"].mean()) * 1000,
            "trim_min": t_min,
            "trim_max": t_max,
            "trim_mid": (t_min + t_max) / 2,
        })
    return pd.DataFrame(out, columns=MINMAX_COLUMNS)


def split_by_condition(results: pd.DataFrame) -> dict[int, pd.DataFrame]:
    if results.empty:
        return {}
    return {int(code): g.reset_index(drop=True)
            for code, g in results.groupby("condition", sort=True)}

# demihull_resistance/core/prohaska.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Literal
import numpy as np
import pandas as pd

FrictionLine = Literal["ittc57", "grigson"]

_CF_COLUMN = {"ittc57": "cfm_ittc57", "grigson": "cfm_grigson"}


@dataclass
class ProhaskaFit:
    friction_line: str
    slope: float
    form_factor: float        # intercept of the fit, (1+k)
    correlation: float
    n_points: int


def prohaska_points(rows: pd.DataFrame, friction_line: FrictionLine = "grigson") -> tuple[np.ndarray, np.ndarray]:
    """x = Fr^4/CF and y = CT/CF for each run."""
    cf = rows[_CF_COLUMN[friction_line]].to_numpy(float)
    fr = rows["froude_number"].to_numpy(float)
    ct = rows["ctm"].to_numpy(float)
    ok = np.isfinite(cf) & np.isfinite(fr) & np.isfinite(ct) & (cf != 0)
    return fr[ok] ** 4 / cf[ok], ct[ok] / cf[ok]


def prohaska_fit(rows: pd.DataFrame, friction_line: FrictionLine = "grigson") -> ProhaskaFit:
    """
    Prohaska form factor estimate (ITTC 7.5-02-02-01) from low speed runs.
    Raises ValueError when fewer than two usable points remain.
    """
    if friction_line not in _CF_COLUMN:
        raise ValueError(f"unknown friction line {friction_line!r}")
    x, y = prohaska_points(rows, friction_line)
    if x.size < 2:
        raise ValueError(f"Prohaska fit needs at least two runs, got {x.size}")
    if np.ptp(x) == 0:
        raise ValueError("Prohaska fit needs runs at more than one speed")
    slope, intercept = np.polyfit(x, y, 1)
    corr = float(np.corrcoef(x, y)[0, 1]) if np.ptp(y) > 0 else float("nan")
    return ProhaskaFit(
        friction_line=friction_line,
        slope=float(slope),
        form_factor=float(intercept),
        correlation=corr,
        n_points=int(x.size),
    )

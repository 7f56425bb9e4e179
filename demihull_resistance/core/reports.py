# demihull_resistance/core/reports.py
from __future__ import annotations
from pathlib import Path
from typing import Literal
import numpy as np
import pandas as pd
from scipy.io import savemat

ReportFormat = Literal["dat", "mat", "both"]
REPORT_FORMATS: tuple[str, ...] = ("dat", "mat", "both")


def _write_dat(df_out: pd.DataFrame, out_dat: Path, title: str) -> None:
    """
    Comma separated .dat without header (read positionally downstream) and a
    tab separated .txt copy at four significant digits.
    """
    out_dat.parent.mkdir(parents=True, exist_ok=True)
    df_out.to_csv(out_dat, index=False, header=False, encoding="utf-8")
    out_txt = out_dat.with_suffix(".txt")
    df_out.to_csv(out_txt, sep="\t", index=False, header=False, float_format="%.4g", encoding="utf-8")
    print(f"[OK] wrote report: {title} → {out_dat} (+ {out_txt.name})")


def _to_mat_cellstr(seq: list[str]) -> np.ndarray:
    """Make a MATLAB column cell array from a list of strings."""
    seq2 = [("" if s is None else str(s)) for s in seq]
    arr = np.empty((len(seq2), 1), dtype=object)
    arr[:, 0] = seq2
    return arr


def _write_mat(df_out: pd.DataFrame, out_mat: Path, varname: str, title: str) -> None:
    """
    Save a MATLAB struct with one field per column.
    Numeric columns become double (Nx1), anything else a cell array (Nx1).
    """
    out_mat.parent.mkdir(parents=True, exist_ok=True)
    mat_struct = {}
    for name in df_out.columns:
        col = df_out[name]
        if pd.api.types.is_numeric_dtype(col):
            mat_struct[str(name)] = col.to_numpy(dtype=float).reshape(-1, 1)
        else:
            mat_struct[str(name)] = _to_mat_cellstr(col.astype(str).replace("None", "", regex=False).tolist())
    savemat(out_mat, {varname: mat_struct})
    print(f"[OK] wrote report: {title} → {out_mat}")


def write_table(df_out: pd.DataFrame,
                out_base: Path,
                title: str,
                fmt: ReportFormat = "dat",
                mat_variable: str = "report") -> None:
    """
    Write a table in the requested format.
    - out_base is a *base path without extension* (e.g., .../resultsAveragedArray)
    - fmt: "dat" | "mat" | "both"
    - mat_variable: MATLAB variable name of the struct
    Raises ValueError for any other format.
    """
    if fmt not in REPORT_FORMATS:
        raise ValueError(f"unknown report format {fmt!r}, expected one of {REPORT_FORMATS}")
    if df_out is None or df_out.empty:
        return
    if fmt in ("dat", "both"):
        _write_dat(df_out, out_base.with_suffix(".dat"), title)
    if fmt in ("mat", "both"):
        _write_mat(df_out, out_base.with_suffix(".mat"), mat_variable, title)


def write_csv(df_out: pd.DataFrame, out_csv: Path, title: str) -> None:
    """Headed CSV for small summary tables."""
    if df_out is None or df_out.empty:
        return
    out_csv.parent.mkdir(parents=True, exist_ok=True)
    df_out.to_csv(out_csv, index=False, encoding="utf-8")
    print(f"[OK] wrote report: {title} → {out_csv}")

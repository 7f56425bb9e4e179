# demihull_resistance/loaders/results_loader.py
from __future__ import annotations
from pathlib import Path
import io, logging
import pandas as pd

from ..core.model import RESULTS_COLUMNS, MIN_RESULTS_COLUMNS

_LOG = logging.getLogger(__name__)


def _to_numeric_frame(df: pd.DataFrame) -> pd.DataFrame:
    return df.apply(lambda s: pd.to_numeric(s, errors="coerce"))


def name_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Attach RESULTS_COLUMNS names to a positional results array."""
    n = df.shape[1]
    if n < MIN_RESULTS_COLUMNS:
        raise ValueError(f"results table has {n} columns, need at least {MIN_RESULTS_COLUMNS}")
    if n > len(RESULTS_COLUMNS):
        _LOG.debug("dropping %d trailing columns", n - len(RESULTS_COLUMNS))
        df = df.iloc[:, :len(RESULTS_COLUMNS)]
        n = len(RESULTS_COLUMNS)
    out = df.copy()
    out.columns = list(RESULTS_COLUMNS[:n])
    return out


def drop_zero_rows(df: pd.DataFrame) -> pd.DataFrame:
    # an all-zero row is an unused run slot in the DAQ export
    keep = ~(df.fillna(0) == 0).all(axis=1)
    return df[keep].reset_index(drop=True)


def results_from_bytes(buff: bytes) -> pd.DataFrame:
    if not buff.strip():
        return pd.DataFrame(columns=list(RESULTS_COLUMNS[:MIN_RESULTS_COLUMNS]))
    df = pd.read_csv(io.BytesIO(buff), sep=",", header=None, skipinitialspace=True)
    df = _to_numeric_frame(df)
    df = drop_zero_rows(df)
    df = name_columns(df)
    df = df.dropna(subset=["run_no", "condition"]).reset_index(drop=True)
    df["run_no"] = df["run_no"].round().astype(int)
    df["condition"] = df["condition"].round().astype(int)
    return df


def load_results(path: Path) -> pd.DataFrame:
    """
    Read full_resistance_data.dat (comma separated, no header).
    Raises FileNotFoundError when the file is missing.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"results data file does not exist: {path}")
    df = results_from_bytes(path.read_bytes())
    _LOG.info("loaded %d runs x %d columns from %s", len(df), df.shape[1], path.name)
    return df

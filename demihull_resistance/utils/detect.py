# demihull_resistance/utils/detect.py
from __future__ import annotations
from pathlib import Path
from dataclasses import dataclass
from typing import Literal

from ..loaders.timeseries_loader import run_number_from_path

DetectedKind = Literal["results", "timeseries", "unknown"]

RESULTS_NAMES = ("full_resistance_data.dat", "resultsarray.dat")


@dataclass(frozen=True)
class DetectedItem:
    path: Path        # actual path on disk
    kind: DetectedKind
    run_no: int | None = None


def detect_kind(p: Path) -> DetectedKind:
    """
    Classify a single path.
    - full_resistance_data.dat / resultsArray.dat -> 'results'
    - R<nn>.dat                                   -> 'timeseries'
    else                                          -> 'unknown'
    """
    if p.suffix.lower() != ".dat":
        return "unknown"
    if p.name.lower() in RESULTS_NAMES:
        return "results"
    if run_number_from_path(p) is not None:
        return "timeseries"
    return "unknown"


def discover_timeseries(root: Path, recurse: bool = True) -> list[DetectedItem]:
    """
    If 'root' is a file -> return that one item (if it is a run time series).
    If 'root' is a folder -> walk (optionally recursively) and collect R<nn>.dat.
    """
    items: list[DetectedItem] = []
    if root.is_file():
        if detect_kind(root) == "timeseries":
            items.append(DetectedItem(root.resolve(), "timeseries", run_number_from_path(root)))
        return items
    if not root.is_dir():
        return items

    it = root.rglob("*") if recurse else root.glob("*")
    for p in it:
        if not p.is_file():
            continue
        if detect_kind(p) == "timeseries":
            items.append(DetectedItem(p.resolve(), "timeseries", run_number_from_path(p)))

    # deterministic ordering
    items.sort(key=lambda x: (x.run_no, str(x.path)))
    return items


def discover_results(root: Path, recurse: bool = True) -> list[DetectedItem]:
    """
    Results tables under 'root' (or 'root' itself), shallowest first so a
    top-level full_resistance_data.dat wins over copies in subfolders.
    """
    if root.is_file():
        return [DetectedItem(root.resolve(), "results")] if detect_kind(root) == "results" else []
    if not root.is_dir():
        return []
    it = root.rglob("*") if recurse else root.glob("*")
    items = [DetectedItem(p.resolve(), "results") for p in it if p.is_file() and detect_kind(p) == "results"]
    items.sort(key=lambda x: (len(x.path.parts), str(x.path)))
    return items

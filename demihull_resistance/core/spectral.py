# demihull_resistance/core/spectral.py
from __future__ import annotations
from dataclasses import dataclass
import logging
import numpy as np
import pandas as pd
from scipy.signal import detrend, find_peaks, periodogram

_LOG = logging.getLogger(__name__)


@dataclass
class FrequencyRecord:
    run_no: int
    froude_number: float
    condition: int
    periodogram_hz: float
    peak1_hz: float | None
    peak2_hz: float | None


FREQUENCY_COLUMNS = ["run_no", "froude_number", "condition", "periodogram_hz", "peak1_hz", "peak2_hz"]


def trim_samples(y, start: int = 1000, cut_end: int = 400) -> np.ndarray:
    """Drop carriage acceleration at the start and braking at the end."""
    y = np.asarray(y, float)
    end = len(y) - cut_end if cut_end > 0 else len(y)
    return y[start:end]


def next_pow2(n: int) -> int:
    return 1 << max(int(n) - 1, 0).bit_length()


def amplitude_spectrum(y, fs: float) -> tuple[np.ndarray, np.ndarray]:
    """
    Single-sided amplitude spectrum, zero padded to the next power of two.
    Returns (frequencies in Hz, amplitudes in the signal's units).
    """
    y = np.asarray(y, float)
    L = len(y)
    if L == 0:
        return np.array([]), np.array([])
    nfft = next_pow2(L)
    Y = np.fft.fft(y, nfft) / L
    half = nfft // 2 + 1
    f = fs / 2 * np.linspace(0, 1, half)
    return f, 2 * np.abs(Y[:half])


def dominant_peaks(freqs, amps, delta: float = 0.01, limit: int = 2) -> list[tuple[float, float]]:
    """Largest spectral peaks as (frequency, amplitude), the DC bin excluded."""
    amps = np.asarray(amps, float)
    freqs = np.asarray(freqs, float)
    if amps.size < 3:
        return []
    idx, _ = find_peaks(amps, prominence=delta)
    peaks = [(float(freqs[i]), float(amps[i])) for i in idx if freqs[i] != 0]
    peaks.sort(key=lambda fa: fa[1], reverse=True)
    return peaks[:limit]


def periodogram_peak(y, fs: float) -> float:
    y = np.asarray(y, float)
    f, pxx = periodogram(y, fs=fs, nfft=len(y))
    return float(f[int(np.argmax(pxx))])


def prepare_signal(y, mode: str = "mean") -> np.ndarray:
    if mode == "linear":
        return detrend(y, type="linear")
    if mode == "mean":
        return y - np.mean(y)
    return y


def analyse_drag_signal(run_no: int,
                        ts: pd.DataFrame,
                        results: pd.DataFrame,
                        fs: float = 200.0,
                        start: int = 1000,
                        cut_end: int = 400,
                        delta: float = 0.01,
                        detrend_mode: str = "mean") -> FrequencyRecord | None:
    """
    Frequency content of one run's drag signal.
    Returns None when the run is missing from ``results`` or too short.
    """
    match = results[results["run_no"] == run_no]
    if match.empty:
        _LOG.debug("run %s not in results table", run_no)
        return None
    y = trim_samples(ts["drag_g"].to_numpy(float), start, cut_end)
    if y.size < 3:
        _LOG.debug("run %s: %d samples left after trimming", run_no, y.size)
        return None
    y = prepare_signal(y, detrend_mode)

    freqs, amps = amplitude_spectrum(y, fs)
    peaks = dominant_peaks(freqs, amps, delta=delta, limit=2)
    row = match.iloc[0]
    return FrequencyRecord(
        run_no=int(run_no),
        froude_number=float(row["froude_number"]),
        condition=int(row["condition"]),
        periodogram_hz=periodogram_peak(y, fs),
        peak1_hz=peaks[0][0] if len(peaks) > 0 else None,
        peak2_hz=peaks[1][0] if len(peaks) > 1 else None,
    )

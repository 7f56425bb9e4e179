import math
import unittest

import numpy as np
import pandas as pd

from demihull_resistance.core.minmax import MINMAX_COLUMNS, condition_minmax, split_by_condition
from demihull_resistance.core.prohaska import prohaska_fit, prohaska_points
from demihull_resistance.core.spectral import (
    amplitude_spectrum, analyse_drag_signal, dominant_peaks, next_pow2, periodogram_peak, trim_samples,
)

from _frames import make_results, run_row


class MinMaxTests(unittest.TestCase):
    def test_spread_per_speed(self):
        rows = make_results([
            run_row(1, 7, 2.0, 0.31, heave=5.0, trim=0.1, crm=0.002),
            run_row(2, 7, 2.0, 0.31, heave=9.0, trim=0.3, crm=0.004),
            run_row(3, 7, 2.6, 0.40, heave=-1.0, trim=0.5, crm=0.003),
        ])
        out = condition_minmax(rows)
        self.assertEqual(MINMAX_COLUMNS, list(out.columns))
        self.assertEqual([0.31, 0.40], out["froude_number"].tolist())
        first = out.iloc[0]
        self.assertAlmostEqual(5.0, first["heave_min"])
        self.assertAlmostEqual(9.0, first["heave_max"])
        self.assertAlmostEqual(7.0, first["heave_mid"])
        self.assertAlmostEqual(3.0, first["crm_x1000"])
        self.assertAlmostEqual(0.2, first["trim_mid"])
        self.assertAlmostEqual(-1.0, out.iloc[1]["heave_mid"])

    def test_split_by_condition_sorted(self):
        rows = make_results([run_row(1, 9, 2.0, 0.31), run_row(2, 7, 2.0, 0.31), run_row(3, 9, 2.2, 0.34)])
        parts = split_by_condition(rows)
        self.assertEqual([7, 9], list(parts))
        self.assertEqual(2, len(parts[9]))


def _prohaska_rows(intercept=1.2, slope=0.5):
    cf = 0.004
    out = []
    for i, fr in enumerate([0.10, 0.12, 0.14, 0.16]):
        ctm = intercept * cf + slope * fr ** 4
        out.append(run_row(i + 1, 13, 0.6 + 0.12 * i, fr, ctm=ctm, cf_ittc=cf, cf_grigson=cf))
    return make_results(out)


class ProhaskaTests(unittest.TestCase):
    def test_recovers_known_line(self):
        fit = prohaska_fit(_prohaska_rows(), "grigson")
        self.assertAlmostEqual(1.2, fit.form_factor, places=9)
        self.assertAlmostEqual(0.5, fit.slope, places=6)
        self.assertAlmostEqual(1.0, fit.correlation, places=9)
        self.assertEqual(4, fit.n_points)

    def test_points_skip_zero_cf(self):
        rows = _prohaska_rows()
        rows.loc[0, "cfm_ittc57"] = 0.0
        x, y = prohaska_points(rows, "ittc57")
        self.assertEqual(3, x.size)
        self.assertAlmostEqual(0.12 ** 4 / 0.004, x[0])

    def test_rejects_bad_input(self):
        rows = _prohaska_rows()
        with self.assertRaises(ValueError):
            prohaska_fit(rows, "hughes")
        with self.assertRaises(ValueError):
            prohaska_fit(rows.iloc[:1], "grigson")
        same_speed = rows.copy()
        same_speed["froude_number"] = 0.12
        with self.assertRaises(ValueError):
            prohaska_fit(same_speed, "grigson")


FS = 200.0
N = 4096
F1 = 41 * FS / N      # on-bin frequencies, no leakage
F2 = 102 * FS / N


def _two_tone():
    t = np.arange(N) / FS
    return np.sin(2 * math.pi * F1 * t) + 0.5 * np.sin(2 * math.pi * F2 * t)


class SpectralTests(unittest.TestCase):
    def test_next_pow2(self):
        self.assertEqual(1, next_pow2(1))
        self.assertEqual(1024, next_pow2(1000))
        self.assertEqual(1024, next_pow2(1024))
        self.assertEqual(2048, next_pow2(1025))

    def test_trim_samples(self):
        y = trim_samples(np.arange(2000), 1000, 400)
        self.assertEqual(600, y.size)
        self.assertEqual(1000, y[0])
        self.assertEqual(2000, trim_samples(np.arange(2000), 0, 0).size)

    def test_amplitude_spectrum_peaks(self):
        freqs, amps = amplitude_spectrum(_two_tone(), FS)
        self.assertEqual(N // 2 + 1, freqs.size)
        self.assertAlmostEqual(FS / 2, freqs[-1])
        peaks = dominant_peaks(freqs, amps)
        self.assertEqual(2, len(peaks))
        self.assertAlmostEqual(F1, peaks[0][0])
        self.assertAlmostEqual(1.0, peaks[0][1], places=6)
        self.assertAlmostEqual(F2, peaks[1][0])
        self.assertAlmostEqual(0.5, peaks[1][1], places=6)

    def test_periodogram_peak(self):
        self.assertAlmostEqual(F1, periodogram_peak(_two_tone(), FS))

    def test_analyse_drag_signal(self):
        ts = pd.DataFrame({"time_s": np.arange(N) / FS, "drag_g": 1500.0 + _two_tone()})
        results = make_results([run_row(5, 7, 2.0, 0.31)])
        rec = analyse_drag_signal(5, ts, results, fs=FS, start=0, cut_end=0)
        self.assertIsNotNone(rec)
        self.assertEqual(7, rec.condition)
        self.assertAlmostEqual(0.31, rec.froude_number)
        self.assertAlmostEqual(F1, rec.peak1_hz)
        self.assertAlmostEqual(F2, rec.peak2_hz)
        self.assertAlmostEqual(F1, rec.periodogram_hz)

    def test_analyse_drag_signal_missing_or_short(self):
        ts = pd.DataFrame({"time_s": np.arange(N) / FS, "drag_g": _two_tone()})
        results = make_results([run_row(5, 7, 2.0, 0.31)])
        self.assertIsNone(analyse_drag_signal(6, ts, results, fs=FS))
        self.assertIsNone(analyse_drag_signal(5, ts.iloc[:1200], results, fs=FS, start=1000, cut_end=400))


if __name__ == "__main__":
    unittest.main()

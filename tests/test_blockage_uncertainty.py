import math
import unittest

import numpy as np

from demihull_resistance.core.averaging import average_condition_runs
from demihull_resistance.core.blockage import (
    BLOCKAGE_COLUMNS, BLOCKAGE_METHODS, blockage_corrections, blockage_table, catamaran_wsa,
    scott_k1, scott_k2, scott_ratio,
)
from demihull_resistance.core.particulars import Particulars, build_hull_conditions
from demihull_resistance.core.uncertainty import (
    UncertaintyInputs, condition_uncertainty, ittc_kin_viscosity, uncertainty_inputs_from_config,
)

from _frames import make_results, run_row

RHO = 998.5048
G = 9.806


def _averaged(code=7):
    results = make_results([
        run_row(1, 7, 2.0, 0.31, drag=1200.0),
        run_row(2, 7, 2.2, 0.31, drag=1400.0),
        run_row(3, 13, 0.8, 0.13, drag=300.0),
    ])
    runs = {7: [1, 2], 13: [3]}[code]
    return average_condition_runs(runs, results, build_hull_conditions())


class BlockageTests(unittest.TestCase):
    def setUp(self):
        self.p = Particulars()
        self.hull = build_hull_conditions()[7]
        self.row = _averaged()[0]
        self.out = {r.method: r for r in blockage_corrections(self.row, self.hull, self.p)}

    def test_one_row_per_method(self):
        self.assertEqual(list(BLOCKAGE_METHODS), list(self.out))

    def test_uncorrected_keeps_measured_speed(self):
        unc = self.out["uncorrected"]
        self.assertEqual(self.row.speed, unc.corrected_speed)
        self.assertEqual(0.0, unc.speed_ratio)
        self.assertEqual(0.0, unc.crm_grigson_delta)
        self.assertEqual(0.0, unc.crm_ittc57_delta)
        self.assertAlmostEqual(2 * self.row.rtm, unc.cat_rtm)
        # Fr above 0.3 uses the wetted area less the dry transom
        expected = 2 * self.row.rtm / (0.5 * RHO * 2 * 1.486 * self.row.speed ** 2)
        self.assertAlmostEqual(expected, unc.cat_ctm, places=12)

    def test_transom_area_above_threshold_only(self):
        self.assertAlmostEqual(2 * 1.501, catamaran_wsa(self.hull, 0.30, self.p))
        self.assertAlmostEqual(2 * 1.486, catamaran_wsa(self.hull, 0.31, self.p))
        hull13 = build_hull_conditions()[13]
        self.assertAlmostEqual(2 * 1.49, catamaran_wsa(hull13, 0.40, self.p))

    def test_tamura_speed_correction(self):
        v = self.row.speed
        fh = v / math.sqrt(G * 1.45)
        ratio = 0.67 * (0.024 / (1.45 * 3.5)) * (4.30 / 3.5) ** 0.75 / (1 - fh ** 2)
        tam = self.out["tamura"]
        self.assertAlmostEqual(ratio, tam.speed_ratio, places=12)
        self.assertAlmostEqual(v * (1 + ratio), tam.corrected_speed, places=12)
        self.assertAlmostEqual(tam.corrected_speed * 4.30 / 1.0411e-6, tam.rem, places=3)
        unc = self.out["uncorrected"]
        self.assertAlmostEqual((unc.crm_grigson - tam.crm_grigson) / tam.crm_grigson,
                               tam.crm_grigson_delta, places=12)

    def test_schuster_uses_viscous_share(self):
        v = self.row.speed
        unc = self.out["uncorrected"]
        m = 0.024 / (1.45 * 3.5)
        fh = v / math.sqrt(G * 1.45)
        rv = unc.cfm_grigson * 0.5 * RHO * 2 * 1.486 * v ** 2
        ratio = m / (1 - m - fh ** 2) + (1 - rv / unc.cat_rtm) * (2 / 3) * fh ** 10
        self.assertAlmostEqual(ratio, self.out["schuster"].speed_ratio, places=12)

    def test_scott_ratio(self):
        v, fr = self.row.speed, self.row.froude_number
        volume = 2 * 74.47 / RHO
        disp_length = 0.592 * volume ** (1 / 3) / 4.30
        re = v * 4.30 / 1.0411e-6
        section = (1.45 * 3.5) ** -1.5
        expected = (scott_k1(disp_length, re) * volume * section
                    + (4.5 / 21.6) * 4.30 ** 2 * scott_k2(fr) * section)
        self.assertAlmostEqual(expected, scott_ratio(v, fr, self.hull, self.p), places=12)
        self.assertAlmostEqual(expected, self.out["scott"].speed_ratio, places=12)

    def test_full_scale_at_measured_speed(self):
        fs = {r.fs_speed for r in self.out.values()}
        self.assertEqual({self.row.speed * math.sqrt(21.6)}, fs)
        unc = self.out["uncorrected"]
        fs_wsa = 2 * 1.486 * 21.6 ** 2
        caa = 0.446 * 1.2041 * 341.5 / (1025.0187 * fs_wsa)
        self.assertAlmostEqual(caa, unc.air_resistance_coeff, places=15)
        cts = 1.18 * unc.cfs_grigson + unc.roughness_allowance + unc.correlation_allowance + caa + unc.crm_grigson
        self.assertAlmostEqual(cts, unc.cts_grigson, places=15)
        rts = cts * 0.5 * 1025.0187 * fs_wsa * unc.fs_speed ** 2 / 1000
        self.assertAlmostEqual(rts, unc.rts_grigson_kn, places=6)

    def test_condition_without_geometry(self):
        hull13 = build_hull_conditions()[13]
        row13 = _averaged(13)[0]
        with self.assertRaises(ValueError):
            blockage_corrections(row13, hull13)
        df = blockage_table([self.row, row13], build_hull_conditions())
        self.assertEqual(list(BLOCKAGE_COLUMNS), list(df.columns))
        self.assertEqual(4, len(df))
        self.assertEqual({7}, set(df["condition"]))


class ScottCoefficientTests(unittest.TestCase):
    def test_k1_bands(self):
        self.assertAlmostEqual(1.8955, scott_k1(0.07, 5e6))
        self.assertAlmostEqual(-1e-7 * 1e7 + 2.4732, scott_k1(0.07, 1e7))
        self.assertAlmostEqual(-2e-9 * 5.2e6 + 1.5965, scott_k1(0.10, 5.2e6))
        self.assertAlmostEqual(1.5636, scott_k1(0.10, 6e6))
        self.assertAlmostEqual(-4e-8 * 1e7 + 1.1928, scott_k1(0.12, 1e7))

    def test_k1_outside_range(self):
        with self.assertLogs("demihull_resistance.core.blockage", level="WARNING"):
            self.assertTrue(math.isnan(scott_k1(0.07, 2e7)))

    def test_k2(self):
        self.assertAlmostEqual(0.01536, scott_k2(0.30))
        self.assertEqual(0.0, scott_k2(0.22))
        self.assertEqual(0.0, scott_k2(0.40))
        self.assertEqual(0.0, scott_k2(0.15))


def _repeats():
    return make_results([
        run_row(10, 7, 2.0, 0.31, rtm=10.0),
        run_row(11, 7, 2.0, 0.31, rtm=10.5),
        run_row(12, 7, 2.0, 0.31, rtm=11.0),
        run_row(13, 7, 1.5, 0.23, rtm=6.0),
    ])


class UncertaintyTests(unittest.TestCase):
    def setUp(self):
        self.hull = build_hull_conditions()[7]

    def test_ittc_viscosity(self):
        self.assertAlmostEqual(1.139435e-6, ittc_kin_viscosity(15.0), places=12)
        self.assertAlmostEqual(1.235e-6, ittc_kin_viscosity(12.0), places=15)

    def test_groups_in_ascending_froude(self):
        recs = condition_uncertainty(_repeats(), self.hull)
        self.assertEqual([0.23, 0.31], [r.froude_number for r in recs])
        self.assertEqual([13, 10], [r.run_no for r in recs])
        self.assertEqual([1, 3], [r.repeat_count for r in recs])

    def test_precision_from_sample_std(self):
        rec = condition_uncertainty(_repeats(), self.hull)[1]
        q = 0.5 * RHO * 1.501 * 2.0 ** 2
        self.assertAlmostEqual(10.5 / q, rec.ct, places=12)
        self.assertAlmostEqual(float(np.std([10.0, 10.5, 11.0], ddof=1)) / q, rec.ct_std, places=12)
        self.assertAlmostEqual(2 * rec.ct_std / math.sqrt(3), rec.precision_ct, places=15)
        self.assertAlmostEqual(math.hypot(rec.bias_ct, rec.precision_ct), rec.total_ct, places=15)
        self.assertAlmostEqual(100.0, rec.bias_share_pct + rec.precision_share_pct)
        self.assertAlmostEqual(rec.total_ct / rec.ct15 * 100, rec.total_ct_pct)

    def test_temperature_correction(self):
        rec = condition_uncertainty(_repeats(), self.hull)[1]
        re15 = 2.0 * 4.30 / ittc_kin_viscosity(15.0)
        retw = 2.0 * 4.30 / ittc_kin_viscosity(17.5)
        d_cf = 0.075 / (math.log10(re15) - 2) ** 2 - 0.075 / (math.log10(retw) - 2) ** 2
        self.assertGreater(d_cf, 0)
        self.assertAlmostEqual(rec.ct + d_cf * 1.18, rec.ct15, places=15)
        self.assertAlmostEqual(rec.ct15 * 0.5 * RHO * 1.501 * 4.0, rec.rx, places=12)
        self.assertAlmostEqual(rec.rx / G, rec.mx, places=12)

    def test_bias_terms(self):
        rec = condition_uncertainty(_repeats(), self.hull)[1]
        bs1 = 1.501 * 0.005
        self.assertAlmostEqual(math.sqrt(bs1 ** 2 + (bs1 / 2) ** 2), rec.bias_s, places=15)
        self.assertAlmostEqual(0.003, rec.bias_v)
        self.assertAlmostEqual(math.sqrt(0.000006847 ** 2 + 0.000007174 ** 2 + 0.0008384 ** 2), rec.bias_mx,
                               places=15)
        self.assertAlmostEqual(G / (0.5 * RHO * 4.0 * 1.501), rec.theta_mx, places=12)
        self.assertAlmostEqual(abs(0.0638 - 0.0173 * 17.5 + 0.000189 * 17.5 ** 2), rec.theta_rho_tw, places=15)

    def test_single_run_has_no_precision_term(self):
        rec = condition_uncertainty(_repeats(), self.hull)[0]
        self.assertEqual(0.0, rec.ct_std)
        self.assertEqual(0.0, rec.precision_ct)
        self.assertAlmostEqual(rec.bias_ct, rec.total_ct, places=15)
        self.assertAlmostEqual(100.0, rec.bias_share_pct)

    def test_stationary_group_skipped(self):
        rows = make_results([run_row(1, 7, 0.0, 0.0, rtm=0.0), run_row(2, 7, 2.0, 0.31, rtm=10.0)])
        with self.assertLogs("demihull_resistance.core.uncertainty", level="WARNING"):
            recs = condition_uncertainty(rows, self.hull)
        self.assertEqual([2], [r.run_no for r in recs])

    def test_coverage_factor_from_config(self):
        inputs = uncertainty_inputs_from_config({"uncertainty": {"coverage_factor": 3, "enabled": True}})
        self.assertEqual(3.0, inputs.coverage_factor)
        self.assertEqual(UncertaintyInputs().speed_bias, inputs.speed_bias)
        rec2 = condition_uncertainty(_repeats(), self.hull)[1]
        rec3 = condition_uncertainty(_repeats(), self.hull, inputs=inputs)[1]
        self.assertAlmostEqual(1.5 * rec2.precision_ct, rec3.precision_ct, places=15)


if __name__ == "__main__":
    unittest.main()

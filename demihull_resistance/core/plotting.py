# demihull_resistance/core/plotting.py
from __future__ import annotations
from pathlib import Path
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

# averaged column -> (axis label, title, file name)
CONDITION_PLOTS: dict[str, tuple[str, str, str]] = {
    "ctm": ("Total resistance coeff. C_Tm [-]", "C_Tm vs Fr", "ctm_vs_fr.png"),
    "crm": ("Residual resistance coeff. C_Rm [-]", "C_Rm vs Fr", "crm_vs_fr.png"),
    "heave": ("Heave [mm]", "Heave vs Fr", "heave_vs_fr.png"),
    "trim": ("Trim [deg]", "Trim vs Fr", "trim_vs_fr.png"),
}


def save_condition_plots(averaged: pd.DataFrame, out_dir: Path,
                         labels: dict[int, str] | None = None, legend_ncol: int = 3):
    if averaged is None or averaged.empty:
        return
    out_dir.mkdir(parents=True, exist_ok=True)
    for column, (y_label, title_metric, file_name) in CONDITION_PLOTS.items():
        _save_vs_froude_plot(
            averaged=averaged,
            out_dir=out_dir,
            y_column=column,
            y_label=y_label,
            title_metric=title_metric,
            file_name=file_name,
            labels=labels or {},
            legend_ncol=legend_ncol,
        )


def _save_vs_froude_plot(
    *,
    averaged: pd.DataFrame,
    out_dir: Path,
    y_column: str,
    y_label: str,
    title_metric: str,
    file_name: str,
    labels: dict[int, str],
    legend_ncol: int,
):
    prepared: list[tuple[np.ndarray, np.ndarray, str]] = []
    for code, g in averaged.groupby("condition", sort=True):
        g = g.sort_values("froude_number")
        values = pd.to_numeric(g[y_column], errors="coerce")
        mask = values.notna()
        if not mask.any():
            continue
        label = f"Cond. {int(code)}"
        if int(code) in labels:
            label = f"{label}: {labels[int(code)]}"
        prepared.append((g.loc[mask, "froude_number"].to_numpy(), values[mask].to_numpy(), label))

    if not prepared:
        print(f"[INFO] column '{y_column}' contains no numeric data; skipping {file_name}.")
        return

    plt.figure(figsize=(11, 6))
    for x, y, label in prepared:
        plt.plot(x, y, marker="o", label=label)
    plt.xlabel("Froude length number Fr [-]")
    plt.ylabel(y_label)
    plt.title(f"Averaged repeated runs: {title_metric}")
    plt.grid(True, alpha=0.3)
    plt.legend(
        fontsize=8,
        ncol=legend_ncol,
        loc="upper center",
        bbox_to_anchor=(0.5, -0.15),
        frameon=False,
    )
    plt.tight_layout(rect=[0, 0.18, 1, 1])
    out_path = out_dir / file_name
    plt.savefig(out_path, dpi=160)
    plt.close()
    print(f"[OK] {title_metric}: {len(prepared)} condition(s) → {out_path}")


def save_fullscale_plot(averaged: pd.DataFrame, out_dir: Path):
    """Full scale resistance and effective power against ship speed in knots."""
    if averaged is None or averaged.empty:
        return
    out_dir.mkdir(parents=True, exist_ok=True)

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(12, 5))
    for code, g in averaged.groupby("condition", sort=True):
        g = g.sort_values("fs_speed_knots")
        ax1.plot(g["fs_speed_knots"], g["rts"] / 1000, marker="o", label=f"Cond. {int(code)}")
        ax2.plot(g["fs_speed_knots"], g["pes"] / 1e6, marker="o", label=f"Cond. {int(code)}")
    ax1.set_xlabel("Full scale speed [knots]")
    ax1.set_ylabel("R_Ts [kN]")
    ax2.set_xlabel("Full scale speed [knots]")
    ax2.set_ylabel("P_Es [MW]")
    for ax in (ax1, ax2):
        ax.grid(True, alpha=0.3)
        ax.legend(fontsize=8)
    fig.suptitle("Full scale demihull resistance and effective power")
    fig.tight_layout()
    out_path = out_dir / "fullscale_rts_pes.png"
    fig.savefig(out_path, dpi=160)
    plt.close(fig)
    print(f"[OK] full scale plot → {out_path}")


def save_blockage_plots(blockage: pd.DataFrame, out_dir: Path):
    """Catamaran R_Ts (Grigson line) against knots, one curve per correction, one figure per condition."""
    if blockage is None or blockage.empty:
        return
    out_dir.mkdir(parents=True, exist_ok=True)

    for code, cond in blockage.groupby("condition", sort=True):
        fig, ax = plt.subplots(figsize=(9, 6))
        for method, g in cond.groupby("method", sort=False):
            g = g.sort_values("fs_speed_knots")
            ax.plot(g["fs_speed_knots"], g["rts_grigson_kn"], marker="o", label=str(method).capitalize())
        ax.set_xlabel("Full scale speed [knots]")
        ax.set_ylabel("Catamaran R_Ts [kN]")
        ax.set_title(f"Cond. {int(code)}: blockage corrected full scale resistance")
        ax.grid(True, alpha=0.3)
        ax.legend(fontsize=8)
        fig.tight_layout()
        out_path = out_dir / f"blockage_cond{int(code):02d}.png"
        fig.savefig(out_path, dpi=160)
        plt.close(fig)
        print(f"[OK] blockage plot → {out_path}")


def save_prohaska_plot(points: dict[str, tuple[np.ndarray, np.ndarray]],
                       fits: dict, out_dir: Path, condition: int):
    """points/fits keyed by friction line name; fits hold ProhaskaFit."""
    if not points:
        return
    out_dir.mkdir(parents=True, exist_ok=True)

    plt.figure(figsize=(8, 6))
    for name, (x, y) in points.items():
        line = plt.plot(x, y, "o", label=f"{name}")[0]
        fit = fits.get(name)
        if fit is not None and x.size:
            xx = np.linspace(0, float(np.max(x)), 50)
            sign = "+" if fit.form_factor >= 0 else "-"
            plt.plot(xx, fit.slope * xx + fit.form_factor, "--", color=line.get_color(),
                     label=f"{name}: y = {fit.slope:.3f}x {sign} {abs(fit.form_factor):.3f}")
    plt.xlabel("Fr^4 / C_F [-]")
    plt.ylabel("C_T / C_F [-]")
    plt.title(f"Cond. {condition}: Prohaska form factor estimate")
    plt.grid(True, alpha=0.3)
    plt.legend(fontsize=8)
    plt.tight_layout()
    out_path = out_dir / f"prohaska_cond{condition:02d}.png"
    plt.savefig(out_path, dpi=160)
    plt.close()
    print(f"[OK] Prohaska plot → {out_path}")


def save_spectrum_plot(run_no: int, freqs, amps, peaks: list[tuple[float, float]],
                       out_dir: Path, max_freq: float = 10.0):
    if len(freqs) == 0:
        return
    out_dir.mkdir(parents=True, exist_ok=True)

    plt.figure(figsize=(9, 4))
    plt.plot(freqs, amps, "-", linewidth=1, label=f"Run {run_no}")
    if peaks:
        plt.plot([f for f, _ in peaks], [a for _, a in peaks], "ko", markersize=6, label="Peaks")
    plt.xlim(0, max_freq)
    plt.xlabel("Frequency [Hz]")
    plt.ylabel("|Y(f)| drag [g]")
    plt.title(f"Run {run_no}: single-sided amplitude spectrum")
    plt.grid(True, alpha=0.3)
    plt.legend(fontsize=8)
    plt.tight_layout()
    out_path = out_dir / f"fft_R{run_no:03d}.png"
    plt.savefig(out_path, dpi=160)
    plt.close()

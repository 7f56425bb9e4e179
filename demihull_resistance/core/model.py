# demihull_resistance/core/model.py
from __future__ import annotations
from dataclasses import dataclass

# full_resistance_data.dat, one row per run; position i holds column i+1 of the DAQ export
RESULTS_COLUMNS: tuple[str, ...] = (
    "run_no", "sample_rate_hz", "n_samples", "record_time_s",
    "speed", "fwd_lvdt", "aft_lvdt", "drag_g",            # m/s, mm, mm, g
    "rtm", "ctm", "froude_number", "heave", "trim",
    "fs_speed", "fs_speed_knots",
    "rem", "cfm_ittc57", "cfm_grigson", "crm", "pem", "pbm",
    "res", "cfs_ittc57", "cts", "rts", "pes", "pbs",
    "condition",
    "speed_min", "speed_max", "speed_mean", "speed_pct",
    "fwd_lvdt_min", "fwd_lvdt_max", "fwd_lvdt_mean", "fwd_lvdt_pct",
    "aft_lvdt_min", "aft_lvdt_max", "aft_lvdt_mean", "aft_lvdt_pct",
    "drag_min", "drag_max", "drag_mean", "drag_pct",
    "speed_std", "fwd_lvdt_std", "aft_lvdt_std", "drag_std",
    "cfs_grigson",
    "roughness_allowance", "correlation_allowance", "air_resistance_coeff",
    "rtm_uncorrected",
    "speed_var", "fwd_lvdt_var", "aft_lvdt_var", "drag_var",
)

MIN_RESULTS_COLUMNS = 28  # up to and including "condition"


class UnknownConditionError(KeyError):
    """Raised when a run condition code has no hull particulars."""

    def __init__(self, code):
        super().__init__(code)
        self.code = code

    def __str__(self) -> str:
        return f"unknown run condition {self.code!r}"


@dataclass(frozen=True)
class HullCondition:
    code: int
    description: str
    ms_lwl: float             # model waterline length (m)
    ms_wsa: float             # model wetted surface area (m^2)
    ms_draft: float           # model draft (m)
    block_coeff: float | None
    scale_ratio: float = 21.6
    # blockage inputs, None where the campaign has no measurement
    ms_wsa_transom: float | None = None       # wetted area less the dry transom (m^2)
    ms_max_section: float | None = None       # max. transverse section area (m^2)
    displacement_kg: float | None = None      # demihull displacement

    @property
    def fs_lwl(self) -> float:
        return self.ms_lwl * self.scale_ratio

    @property
    def fs_wsa(self) -> float:
        return self.ms_wsa * self.scale_ratio ** 2

    @property
    def fs_draft(self) -> float:
        return self.ms_draft * self.scale_ratio


@dataclass
class AveragedRow:
    condition: int
    froude_number: float
    speed: float
    fwd_lvdt: float
    aft_lvdt: float
    drag_g: float
    rtm: float
    rtm_uncorrected: float
    ctm: float
    heave: float
    trim: float
    fs_speed: float
    fs_speed_knots: float
    rem: float
    cfm_ittc57: float
    cfm_grigson: float
    crm: float
    pem: float
    pbm: float
    res: float
    cfs_ittc57: float
    cfs_grigson: float
    roughness_allowance: float
    correlation_allowance: float
    air_resistance_coeff: float
    cts: float
    rts: float
    pes: float
    pbs: float
    speed_min: float
    speed_max: float
    fwd_lvdt_min: float
    fwd_lvdt_max: float
    aft_lvdt_min: float
    aft_lvdt_max: float
    drag_min: float
    drag_max: float
    speed_std: float
    fwd_lvdt_std: float
    aft_lvdt_std: float
    drag_std: float
    speed_var: float
    fwd_lvdt_var: float
    aft_lvdt_var: float
    drag_var: float
    trim_std: float
    ctm_x1000_std: float
    repeat_count: int


# resultsAveragedArray keeps the results table layout so it can be read back
# positionally; the columns past the results schema are averaging-only
AVERAGED_EXTRA_COLUMNS: tuple[str, ...] = ("trim_std", "ctm_x1000_std", "repeat_count")
AVERAGED_COLUMNS: tuple[str, ...] = RESULTS_COLUMNS + AVERAGED_EXTRA_COLUMNS

# channel prefix in RESULTS_COLUMNS -> mean field of AveragedRow
CHANNEL_MEANS: dict[str, str] = {
    "speed": "speed",
    "fwd_lvdt": "fwd_lvdt",
    "aft_lvdt": "aft_lvdt",
    "drag": "drag_g",
}

# demihull_resistance/core/particulars.py
from __future__ import annotations
from dataclasses import dataclass, fields, replace
from types import MappingProxyType
from typing import Mapping
import logging

from .model import HullCondition, UnknownConditionError

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class Particulars:
    gravity: float = 9.806                     # m/s^2
    ms_kin_viscosity: float = 1.0411e-6        # 18.5 deg C, ITTC 7.5-02-01-03
    fs_kin_viscosity: float = 1.0711e-6        # 19.2 deg C
    freshwater_density: float = 998.5048       # kg/m^3
    saltwater_density: float = 1025.0187       # kg/m^3
    post_spacing_mm: float = 1150.0            # fwd/aft LVDT carriage posts
    scale_ratio: float = 21.6
    form_factor: float = 1.18                  # (1+k)
    air_drag_coeff: float = 0.446
    hull_roughness_m: float = 150e-6
    air_density: float = 1.2041
    fs_projected_area: float = 341.5 / 2       # demihull area above waterline (m^2)
    propulsive_efficiency: float = 0.5
    knots_per_ms: float = 0.5144
    ts_slope: float = 3.1638
    ts_intercept: float = -0.4031
    ts_conditions: tuple[int, ...] = tuple(range(4, 13))
    grigson_threshold: float = 1e7
    tank_width: float = 3.5                    # m
    tank_depth: float = 1.45                   # m
    water_temp_c: float = 17.5                 # tank water temperature
    transom_wsa_froude: float = 0.3            # dry transom above this Fr


# code: (description, lwl, wsa, draft, block coefficient)
_CAMPAIGN_GEOMETRY: dict[int, tuple[str, float, float, float, float | None]] = {
    1:  ("Turb-studs: bare hull, 1,500t level",          4.30, 1.501, 0.133, 0.592),
    2:  ("Turb-studs: 1st row, 1,500t level",            4.30, 1.501, 0.133, 0.592),
    3:  ("Turb-studs: 1st and 2nd row, 1,500t level",    4.30, 1.501, 0.133, 0.592),
    4:  ("Trim-tab: 5 deg, 1,500t level",                4.30, 1.501, 0.133, 0.592),
    5:  ("Trim-tab: 0 deg, 1,500t level",                4.30, 1.501, 0.133, 0.592),
    6:  ("Trim-tab: 10 deg, 1,500t level",               4.30, 1.501, 0.133, 0.592),
    7:  ("Resistance: 1,500t, level",                    4.30, 1.501, 0.133, 0.592),
    8:  ("Resistance: 1,500t, -0.5 deg bow",             4.33, 1.48,  0.138, 0.570),
    9:  ("Resistance: 1,500t, 0.5 deg stern",            4.22, 1.52,  0.131, 0.614),
    10: ("Resistance: 1,804t, level",                    4.22, 1.68,  0.153, 0.631),
    11: ("Resistance: 1,804t, -0.5 deg bow",             4.31, 1.66,  0.157, 0.603),
    12: ("Resistance: 1,804t, 0.5 deg stern",            4.11, 1.70,  0.151, 0.657),
    13: ("Prohaska: 1,500t, deep transom",               3.78, 1.49,  0.133, None),
}

# code: (wsa less dry transom, max. section area, demihull displacement kg)
_BLOCKAGE_GEOMETRY: dict[int, tuple[float, float, float]] = {
    **{code: (1.486, 0.024, 74.47) for code in range(1, 8)},
    8:  (1.468, 0.025, 74.47),
    9:  (1.502, 0.024, 74.47),
    10: (1.661, 0.028, 89.18),
    11: (1.644, 0.030, 89.18),
    12: (1.678, 0.028, 89.18),
}

DEFAULT_RUN_GROUPS: Mapping[int, tuple[int, ...]] = MappingProxyType({
    1:  tuple(range(1, 16)),
    2:  tuple(range(16, 26)),
    3:  tuple(range(26, 36)),
    4:  tuple(range(36, 45)),
    5:  tuple(range(45, 54)),
    6:  tuple(range(54, 63)),
    7:  tuple(range(63, 142)),
    8:  tuple(range(142, 157)),
    9:  tuple(range(157, 172)),
    10: tuple(range(172, 202)),
    11: tuple(range(202, 217)),
    12: tuple(range(217, 232)),
    13: tuple(range(232, 250)),
})


def build_hull_conditions(scale_ratio: float = 21.6) -> Mapping[int, HullCondition]:
    table = {}
    for code, (desc, lwl, wsa, draft, cb) in _CAMPAIGN_GEOMETRY.items():
        transom, ax, kg = _BLOCKAGE_GEOMETRY.get(code, (None, None, None))
        table[code] = HullCondition(code, desc, lwl, wsa, draft, cb, scale_ratio=scale_ratio,
                                    ms_wsa_transom=transom, ms_max_section=ax, displacement_kg=kg)
    return MappingProxyType(table)


def lookup_condition(hull_conditions: Mapping[int, HullCondition], code) -> HullCondition:
    try:
        key = int(code)
    except (TypeError, ValueError):
        raise UnknownConditionError(code) from None
    if key != code or key not in hull_conditions:
        raise UnknownConditionError(code)
    return hull_conditions[key]


# --- config-driven helpers ---

def particulars_from_config(cfg: dict | None) -> Particulars:
    """
    Read the ``particulars`` section and return defaults overridden by it.
    Unknown keys are ignored with a debug message.
    """
    section = (cfg or {}).get("particulars", {}) or {}
    known = {f.name: f for f in fields(Particulars)}
    overrides = {}
    for key, value in section.items():
        if key not in known:
            _LOG.debug("ignoring unknown particulars key '%s'", key)
            continue
        if key == "ts_conditions":
            overrides[key] = tuple(int(v) for v in value)
        else:
            overrides[key] = float(value)
    return replace(Particulars(), **overrides)


def _expand_runs(value) -> tuple[int, ...]:
    # [first, last] is an inclusive range, anything longer is an explicit list
    if isinstance(value, (list, tuple)) and len(value) == 2:
        first, last = int(value[0]), int(value[1])
        return tuple(range(first, last + 1))
    if isinstance(value, (list, tuple)):
        return tuple(int(v) for v in value)
    raise ValueError(f"run group must be a list, got {value!r}")


def run_groups_from_config(cfg: dict | None) -> dict[int, tuple[int, ...]]:
    section = (cfg or {}).get("run_groups")
    if not section:
        return dict(DEFAULT_RUN_GROUPS)
    return {int(code): _expand_runs(runs) for code, runs in section.items()}

"""
Cable table resolution.

Maps a cable configuration onto key paths in mepcalc.cable_tables. The
mapping is an explicit decision table keyed by

    (arrangement, armoured, method, conductors, layout, system)

and queried by exact match. Configurations that are physically invalid
(armoured cable in conduit, method E for single-core, ...) are rejected
by validity rules before the table is consulted, so a decision-table miss
means the table has no data for an otherwise valid configuration.

Installation methods:
    A           insulated conductors in conduit in a thermally insulating wall
    B           conduit or trunking on a wall
    C           clipped direct
    E           multicore on perforated tray / free air
    F_touching  single-core on tray, touching
    F_spacedH   single-core spaced, horizontal
    F_spacedV   single-core spaced, vertical
    G_spacedH   single-core spaced by one diameter, horizontal (XLPE only)
    G_spacedV   single-core spaced by one diameter, vertical (XLPE only)
"""

import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from mepcalc.cable_tables import TABLES
from mepcalc.errors import TableLookupError

logger = logging.getLogger(__name__)

INSULATIONS = ('pvc', 'xlpe')
ARRANGEMENTS = ('multicore', 'single')
SYSTEMS = ('ac', 'dc')
METHODS = ('A', 'B', 'C', 'E', 'F_touching', 'F_spacedH', 'F_spacedV', 'G_spacedH', 'G_spacedV')
SPACED_METHODS = ('F_spacedH', 'F_spacedV', 'G_spacedH', 'G_spacedV')


class _NoEntry:
    def __repr__(self) -> str:
        return 'NO_ENTRY'

    def __bool__(self) -> bool:
        return False


NO_ENTRY = _NoEntry()


@dataclass(frozen=True)
class CableConfig:
    """
    Cable construction and installation.

    `layout` may be left as None to take the first layout the other
    fields allow. DC circuits are always treated as two conductors.
    """
    insulation: str = 'xlpe'
    armoured: bool = False
    arrangement: str = 'multicore'
    method: str = 'C'
    conductors: int = 3
    layout: Optional[str] = None
    system: str = 'ac'

    def normalized(self) -> 'CableConfig':
        cfg = self
        if cfg.system == 'dc' and cfg.conductors != 2:
            cfg = replace(cfg, conductors=2)
        if cfg.layout is None:
            layouts = available_layouts(cfg.arrangement, cfg.method, cfg.conductors)
            cfg = replace(cfg, layout=layouts[0])
        return cfg

    @property
    def key(self) -> Tuple:
        return (self.arrangement, self.armoured, self.method, self.conductors, self.layout, self.system)

    @property
    def table_root(self) -> Tuple[str, str, str]:
        armour = 'armoured' if self.armoured else 'non_armoured'
        arrangement = 'multicore' if self.arrangement == 'multicore' else 'single_core'
        return (self.insulation, armour, arrangement)


def _expand(rows: Dict[Tuple, object]) -> Dict[Tuple, object]:
    """Expand system '*' rows into one row per system."""
    table = {}
    for key, value in rows.items():
        *head, system = key
        systems = SYSTEMS if system == '*' else (system,)
        for s in systems:
            table[(*head, s)] = value
    return table


# (arrangement, armoured, method, conductors, layout, system) → path under 'ccc'
CCC_DECISION_TABLE = _expand({
    # Multicore, non-armoured
    ('multicore', False, 'A', 2, 'standard', '*'): ('methodA', '2'),
    ('multicore', False, 'A', 3, 'standard', 'ac'): ('methodA', '3_4'),
    ('multicore', False, 'A', 4, 'standard', 'ac'): ('methodA', '3_4'),
    ('multicore', False, 'B', 2, 'standard', '*'): ('methodB', '2'),
    ('multicore', False, 'B', 3, 'standard', 'ac'): ('methodB', '3_4'),
    ('multicore', False, 'B', 4, 'standard', 'ac'): ('methodB', '3_4'),
    ('multicore', False, 'C', 2, 'standard', '*'): ('methodC', '2'),
    ('multicore', False, 'C', 3, 'standard', 'ac'): ('methodC', '3_4'),
    ('multicore', False, 'C', 4, 'standard', 'ac'): ('methodC', '3_4'),
    ('multicore', False, 'E', 2, 'standard', '*'): ('methodE', '2'),
    ('multicore', False, 'E', 3, 'standard', 'ac'): ('methodE', '3_4'),
    ('multicore', False, 'E', 4, 'standard', 'ac'): ('methodE', '3_4'),
    # Multicore, armoured
    ('multicore', True, 'C', 2, 'standard', '*'): ('methodC', '2'),
    ('multicore', True, 'C', 3, 'standard', 'ac'): ('methodC', '3_4'),
    ('multicore', True, 'C', 4, 'standard', 'ac'): ('methodC', '3_4'),
    ('multicore', True, 'E', 2, 'standard', '*'): ('methodE', '2'),
    ('multicore', True, 'E', 3, 'standard', 'ac'): ('methodE', '3_4'),
    ('multicore', True, 'E', 4, 'standard', 'ac'): ('methodE', '3_4'),
    # Single-core, non-armoured
    ('single', False, 'A', 2, 'flat', '*'): ('methodA', '2'),
    ('single', False, 'A', 3, 'standard', 'ac'): ('methodA', '3'),
    ('single', False, 'B', 2, 'flat', '*'): ('methodB', '2'),
    ('single', False, 'B', 3, 'standard', 'ac'): ('methodB', '3'),
    ('single', False, 'C', 2, 'flat', '*'): ('methodC', '2'),
    ('single', False, 'C', 3, 'flat', 'ac'): ('methodC', '3'),
    ('single', False, 'C', 3, 'trefoil', 'ac'): ('methodC', '3'),
    ('single', False, 'F_touching', 2, 'flat', '*'): ('methodF', 'touching', 'flat'),
    ('single', False, 'F_touching', 3, 'flat', 'ac'): ('methodF', 'touching', 'flat_3ph'),
    ('single', False, 'F_touching', 3, 'trefoil', 'ac'): ('methodF', 'touching', 'trefoil'),
    ('single', False, 'F_spacedH', 2, 'flat', '*'): ('methodF', 'spaced', 'horizontal'),
    ('single', False, 'F_spacedH', 3, 'flat', 'ac'): ('methodF', 'spaced', 'horizontal'),
    ('single', False, 'F_spacedV', 2, 'flat', '*'): ('methodF', 'spaced', 'vertical'),
    ('single', False, 'F_spacedV', 3, 'flat', 'ac'): ('methodF', 'spaced', 'vertical'),
    ('single', False, 'G_spacedH', 2, 'flat', '*'): ('methodG', 'spaced', 'horizontal'),
    ('single', False, 'G_spacedH', 3, 'flat', 'ac'): ('methodG', 'spaced', 'horizontal'),
    ('single', False, 'G_spacedV', 2, 'flat', '*'): ('methodG', 'spaced', 'vertical'),
    ('single', False, 'G_spacedV', 3, 'flat', 'ac'): ('methodG', 'spaced', 'vertical'),
    # Single-core, armoured
    ('single', True, 'C', 2, 'flat', '*'): ('methodC', '2'),
    ('single', True, 'C', 3, 'flat', 'ac'): ('methodC', '3'),
    ('single', True, 'C', 3, 'trefoil', 'ac'): ('methodC', '3'),
    ('single', True, 'F_touching', 2, 'flat', '*'): ('methodF', 'touching', '2'),
    ('single', True, 'F_touching', 3, 'flat', 'ac'): ('methodF', 'touching', '3_flat'),
    ('single', True, 'F_touching', 3, 'trefoil', 'ac'): ('methodF', 'touching', '3_trefoil'),
    ('single', True, 'F_spacedH', 2, 'flat', 'ac'): ('methodF', 'spaced', 'ac_2_horizontal'),
    ('single', True, 'F_spacedH', 3, 'flat', 'ac'): ('methodF', 'spaced', 'ac_3_horizontal'),
    ('single', True, 'F_spacedH', 2, 'flat', 'dc'): ('methodF', 'spaced', 'dc_horizontal'),
    ('single', True, 'F_spacedV', 2, 'flat', 'ac'): ('methodF', 'spaced', 'ac_2_vertical'),
    ('single', True, 'F_spacedV', 3, 'flat', 'ac'): ('methodF', 'spaced', 'ac_3_vertical'),
    ('single', True, 'F_spacedV', 2, 'flat', 'dc'): ('methodF', 'spaced', 'dc_vertical'),
})

_MC_2 = (('ac', '2'),)
_MC_3 = (('ac', '3_4'),)
_DC = (('dc',),)
_TOUCHING_2 = (('methodCF', 'touching', 'cables_touching'), ('methodCFG', 'touching', 'cables_touching'))
_TOUCHING_FLAT = (('methodCF', 'touching', 'flat'), ('methodCFG', 'touching', 'flat'))
_TOUCHING_TREFOIL = (('methodCF', 'touching', 'trefoil'), ('methodCFG', 'touching', 'trefoil'))
_SPACED_2 = (('methodCF', 'spaced', 'flat_2'), ('methodCFG', 'spaced', 'flat_2'))
_SPACED_3 = (('methodCF', 'spaced', 'flat_3'), ('methodCFG', 'spaced', 'flat_3'))

# Same key → candidate paths under 'voltageDrop', tried in order. PVC
# tabulates C/F together ('methodCF'); XLPE adds G ('methodCFG').
VD_DECISION_TABLE = _expand({
    # Multicore (same drop for every method)
    ('multicore', False, 'A', 2, 'standard', 'ac'): _MC_2,
    ('multicore', False, 'A', 3, 'standard', 'ac'): _MC_3,
    ('multicore', False, 'A', 4, 'standard', 'ac'): _MC_3,
    ('multicore', False, 'A', 2, 'standard', 'dc'): _DC,
    ('multicore', False, 'B', 2, 'standard', 'ac'): _MC_2,
    ('multicore', False, 'B', 3, 'standard', 'ac'): _MC_3,
    ('multicore', False, 'B', 4, 'standard', 'ac'): _MC_3,
    ('multicore', False, 'B', 2, 'standard', 'dc'): _DC,
    ('multicore', False, 'C', 2, 'standard', 'ac'): _MC_2,
    ('multicore', False, 'C', 3, 'standard', 'ac'): _MC_3,
    ('multicore', False, 'C', 4, 'standard', 'ac'): _MC_3,
    ('multicore', False, 'C', 2, 'standard', 'dc'): _DC,
    ('multicore', False, 'E', 2, 'standard', 'ac'): _MC_2,
    ('multicore', False, 'E', 3, 'standard', 'ac'): _MC_3,
    ('multicore', False, 'E', 4, 'standard', 'ac'): _MC_3,
    ('multicore', False, 'E', 2, 'standard', 'dc'): _DC,
    ('multicore', True, 'C', 2, 'standard', 'ac'): _MC_2,
    ('multicore', True, 'C', 3, 'standard', 'ac'): _MC_3,
    ('multicore', True, 'C', 4, 'standard', 'ac'): _MC_3,
    ('multicore', True, 'C', 2, 'standard', 'dc'): _DC,
    ('multicore', True, 'E', 2, 'standard', 'ac'): _MC_2,
    ('multicore', True, 'E', 3, 'standard', 'ac'): _MC_3,
    ('multicore', True, 'E', 4, 'standard', 'ac'): _MC_3,
    ('multicore', True, 'E', 2, 'standard', 'dc'): _DC,
    # Single-core, non-armoured
    ('single', False, 'A', 2, 'flat', 'ac'): (('methodAB', '2'),),
    ('single', False, 'A', 3, 'standard', 'ac'): (('methodAB', '3'),),
    ('single', False, 'B', 2, 'flat', 'ac'): (('methodAB', '2'),),
    ('single', False, 'B', 3, 'standard', 'ac'): (('methodAB', '3'),),
    ('single', False, 'C', 2, 'flat', 'ac'): _TOUCHING_2,
    ('single', False, 'C', 3, 'flat', 'ac'): _TOUCHING_FLAT,
    ('single', False, 'C', 3, 'trefoil', 'ac'): _TOUCHING_TREFOIL,
    ('single', False, 'F_touching', 2, 'flat', 'ac'): _TOUCHING_2,
    ('single', False, 'F_touching', 3, 'flat', 'ac'): _TOUCHING_FLAT,
    ('single', False, 'F_touching', 3, 'trefoil', 'ac'): _TOUCHING_TREFOIL,
    ('single', False, 'F_spacedH', 2, 'flat', 'ac'): _SPACED_2,
    ('single', False, 'F_spacedH', 3, 'flat', 'ac'): _SPACED_3,
    ('single', False, 'F_spacedV', 2, 'flat', 'ac'): _SPACED_2,
    ('single', False, 'F_spacedV', 3, 'flat', 'ac'): _SPACED_3,
    ('single', False, 'G_spacedH', 2, 'flat', 'ac'): _SPACED_2,
    ('single', False, 'G_spacedH', 3, 'flat', 'ac'): _SPACED_3,
    ('single', False, 'G_spacedV', 2, 'flat', 'ac'): _SPACED_2,
    ('single', False, 'G_spacedV', 3, 'flat', 'ac'): _SPACED_3,
    ('single', False, 'A', 2, 'flat', 'dc'): _DC,
    ('single', False, 'B', 2, 'flat', 'dc'): _DC,
    ('single', False, 'C', 2, 'flat', 'dc'): _DC,
    ('single', False, 'F_touching', 2, 'flat', 'dc'): _DC,
    ('single', False, 'F_spacedH', 2, 'flat', 'dc'): _DC,
    ('single', False, 'F_spacedV', 2, 'flat', 'dc'): _DC,
    ('single', False, 'G_spacedH', 2, 'flat', 'dc'): _DC,
    ('single', False, 'G_spacedV', 2, 'flat', 'dc'): _DC,
    # Single-core, armoured
    ('single', True, 'C', 2, 'flat', 'ac'): (('single_phase', 'touching'),),
    ('single', True, 'C', 3, 'flat', 'ac'): (('three_phase', 'flat_touching'),),
    ('single', True, 'C', 3, 'trefoil', 'ac'): (('three_phase', 'trefoil'),),
    ('single', True, 'F_touching', 2, 'flat', 'ac'): (('single_phase', 'touching'),),
    ('single', True, 'F_touching', 3, 'flat', 'ac'): (('three_phase', 'flat_touching'),),
    ('single', True, 'F_touching', 3, 'trefoil', 'ac'): (('three_phase', 'trefoil'),),
    ('single', True, 'F_spacedH', 2, 'flat', 'ac'): (('single_phase', 'spaced'),),
    ('single', True, 'F_spacedH', 3, 'flat', 'ac'): (('three_phase', 'flat_spaced'),),
    ('single', True, 'F_spacedV', 2, 'flat', 'ac'): (('single_phase', 'spaced'),),
    ('single', True, 'F_spacedV', 3, 'flat', 'ac'): (('three_phase', 'flat_spaced'),),
    ('single', True, 'C', 2, 'flat', 'dc'): _DC,
    ('single', True, 'F_touching', 2, 'flat', 'dc'): _DC,
    ('single', True, 'F_spacedH', 2, 'flat', 'dc'): _DC,
    ('single', True, 'F_spacedV', 2, 'flat', 'dc'): _DC,
})


def lookup_ccc_path(key: Tuple):
    """Exact-match query; NO_ENTRY when the key is not in the table."""
    return CCC_DECISION_TABLE.get(key, NO_ENTRY)


def lookup_vd_paths(key: Tuple):
    return VD_DECISION_TABLE.get(key, NO_ENTRY)


def safe_get(tree: Dict, path: Tuple):
    """Walk nested dicts; None as soon as a key is missing."""
    node = tree
    for key in path:
        if not isinstance(node, dict) or key not in node:
            return None
        node = node[key]
    return node


# ---------------------------------------------------------------------------
# Validity rules
# ---------------------------------------------------------------------------

def method_rejection(method: str, insulation: str, armoured: bool, arrangement: str) -> Optional[str]:
    """Why `method` cannot be used for this cable, or None if it can."""
    if method not in METHODS:
        return f"Unknown installation method '{method}'. Must be one of: {list(METHODS)}"
    if method in ('A', 'B') and armoured:
        return f"Method {method} (enclosed in conduit/trunking) is not available for armoured cables"
    if method == 'E' and arrangement != 'multicore':
        return "Method E (perforated tray) applies to multicore cables only"
    if method.startswith('F_') and arrangement != 'single':
        return f"Method {method} applies to single-core cables only"
    if method.startswith('G_'):
        if insulation != 'xlpe':
            return f"Method {method} is only tabulated for XLPE insulation"
        if arrangement != 'single':
            return f"Method {method} applies to single-core cables only"
        if armoured:
            return f"Method {method} is not available for armoured cables"
    return None


def available_methods(insulation: str, armoured: bool, arrangement: str) -> List[str]:
    """Installation methods valid for a cable construction."""
    return [m for m in METHODS if method_rejection(m, insulation, armoured, arrangement) is None]


def available_layouts(arrangement: str, method: str, conductors: int) -> List[str]:
    """
    Conductor layouts for a configuration.

    Multicore cables have a single 'standard' layout. Two single-core
    conductors run flat. Three single-core conductors on C or F touching
    may be flat or trefoil; spaced methods are flat only.
    """
    if arrangement == 'multicore':
        return ['standard']
    if conductors == 2:
        return ['flat']
    if conductors == 3 and method in ('C', 'F_touching'):
        return ['flat', 'trefoil']
    if conductors == 3 and method in SPACED_METHODS:
        return ['flat']
    return ['standard']


def validate_config(config: CableConfig) -> CableConfig:
    """
    Normalize and check a configuration. Raises TableLookupError naming the
    failing dimension.
    """
    if config.insulation not in INSULATIONS:
        raise TableLookupError(
            f"Unknown insulation '{config.insulation}'. Must be one of: {list(INSULATIONS)}",
            dimension='insulation',
        )
    if config.arrangement not in ARRANGEMENTS:
        raise TableLookupError(
            f"Unknown arrangement '{config.arrangement}'. Must be one of: {list(ARRANGEMENTS)}",
            dimension='arrangement',
        )
    if config.system not in SYSTEMS:
        raise TableLookupError(
            f"Unknown system '{config.system}'. Must be one of: {list(SYSTEMS)}",
            dimension='system',
        )

    reason = method_rejection(config.method, config.insulation, config.armoured, config.arrangement)
    if reason:
        raise TableLookupError(reason, dimension='method')

    cfg = config.normalized()
    allowed = (2, 3, 4) if cfg.arrangement == 'multicore' else (2, 3)
    if cfg.conductors not in allowed:
        raise TableLookupError(
            f"{cfg.conductors} conductors not tabulated for {cfg.arrangement} cables; use one of {list(allowed)}",
            dimension='conductors',
        )

    layouts = available_layouts(cfg.arrangement, cfg.method, cfg.conductors)
    if cfg.layout not in layouts:
        raise TableLookupError(
            f"Layout '{cfg.layout}' not available for {cfg.conductors} {cfg.arrangement} conductors "
            f"on method {cfg.method}; use one of {layouts}",
            dimension='layout',
        )
    return cfg


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

def resolve_ccc_path(config: CableConfig) -> Tuple:
    """Full key path into TABLES for the ampacity column of `config`."""
    cfg = validate_config(config)
    path = lookup_ccc_path(cfg.key)
    if path is NO_ENTRY:
        logger.debug("No ampacity decision entry for %s", cfg.key)
        raise TableLookupError(
            f"No current-carrying capacity table for {cfg.arrangement} "
            f"{'armoured' if cfg.armoured else 'non-armoured'} cable, method {cfg.method}, "
            f"{cfg.conductors} conductors, {cfg.layout} layout, {cfg.system.upper()}",
            dimension='ccc_configuration',
            path=cfg.key,
        )
    return (*cfg.table_root, 'ccc', *path)


def resolve_vd_paths(config: CableConfig) -> List[Tuple]:
    """Candidate key paths for the voltage-drop column, in preference order."""
    cfg = validate_config(config)
    candidates = lookup_vd_paths(cfg.key)
    if candidates is NO_ENTRY:
        logger.debug("No voltage drop decision entry for %s", cfg.key)
        raise TableLookupError(
            f"No voltage drop table for {cfg.arrangement} "
            f"{'armoured' if cfg.armoured else 'non-armoured'} cable, method {cfg.method}, "
            f"{cfg.conductors} conductors, {cfg.layout} layout, {cfg.system.upper()}",
            dimension='vd_configuration',
            path=cfg.key,
        )
    return [(*cfg.table_root, 'voltageDrop', *path) for path in candidates]


def ccc_column(config: CableConfig, tables: Dict = TABLES) -> Tuple[Tuple, Dict[float, float]]:
    """(path, {size: amps}) for a configuration."""
    path = resolve_ccc_path(config)
    column = safe_get(tables, path)
    if not column:
        logger.debug("Ampacity table missing at %s", path)
        raise TableLookupError(
            f"Current-carrying capacity data missing for {config.insulation.upper()} cable",
            dimension='ccc_table',
            path=path,
        )
    return path, column


def vd_column(config: CableConfig, tables: Dict = TABLES) -> Tuple[Tuple, Dict[float, Dict]]:
    """(path, {size: entry}) from the first candidate path that exists."""
    candidates = resolve_vd_paths(config)
    for path in candidates:
        column = safe_get(tables, path)
        if column:
            return path, column
    logger.debug("Voltage drop table missing at all of %s", candidates)
    raise TableLookupError(
        f"Voltage drop data missing for {config.insulation.upper()} cable",
        dimension='vd_table',
        path=candidates[-1],
    )

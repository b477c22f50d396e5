"""
Cable sizing by current-carrying capacity and voltage drop.

    Ca      ambient temperature factor
    Cg      grouping factor
    It,min  = Ib / (Ca · Cg)          minimum tabulated ampacity

The smallest conductor with tabulated ampacity ≥ It,min is chosen, then
stepped up until the voltage drop

    VD = (mV/A/m) · Ib · L / 1000     volts

is within the allowed percentage of the nominal voltage. Tabulated mV/A/m
values are already per circuit (single-phase values cover the go and
return conductors, three-phase values are line-to-line), so no further
√3 or factor of 2 is applied.
"""

import logging
import math
from dataclasses import asdict
from typing import Dict, Optional, Tuple

from mepcalc.cable_resolver import CableConfig, ccc_column, validate_config, vd_column
from mepcalc.cable_tables import (
    GROUPING_FACTORS,
    GROUPING_GROUP,
    TEMPERATURE_FACTOR_ABOVE_RANGE,
    TEMPERATURE_FACTORS,
)
from mepcalc.errors import InvalidInputError, TableLookupError

logger = logging.getLogger(__name__)

DEFAULT_MAX_VOLTAGE_DROP = 4.0  # percent

STATUS_ACCEPTABLE = "Acceptable"
STATUS_INCREASED = "Acceptable (Increased for VDrop)"


def temperature_factor(insulation: str, ambient: float) -> float:
    """Ca for an ambient temperature in °C."""
    if insulation not in TEMPERATURE_FACTORS:
        raise InvalidInputError(f"Unknown insulation '{insulation}'")
    if not math.isfinite(ambient):
        raise InvalidInputError("Ambient temperature must be a number")
    for limit, factor in TEMPERATURE_FACTORS[insulation]:
        if ambient <= limit:
            return factor
    return TEMPERATURE_FACTOR_ABOVE_RANGE[insulation]


def grouping_factor(method: str, circuits: int) -> float:
    """Cg for a number of circuits grouped together."""
    if method not in GROUPING_GROUP:
        raise InvalidInputError(f"Unknown installation method '{method}'")
    if circuits < 1:
        raise InvalidInputError("Number of circuits must be at least 1")
    for limit, factor in GROUPING_FACTORS[GROUPING_GROUP[method]]:
        if limit is None or circuits <= limit:
            return factor
    raise InvalidInputError(f"No grouping factor for {circuits} circuits")


def voltage_drop_factor(entry: Dict) -> Tuple[float, str]:
    """mV/A/m to use from a table entry: impedance when given, else resistance."""
    if entry.get('z') is not None:
        return entry['z'], 'z'
    return entry['r'], 'r'


def voltage_drop(entry: Dict, current: float, length: float) -> Tuple[float, float, str]:
    """(volts, factor, factor type) for one table entry."""
    factor, kind = voltage_drop_factor(entry)
    return factor * current * length / 1000, factor, kind


def _positive(name: str, value: float) -> None:
    if value is None or not math.isfinite(value) or value <= 0:
        raise InvalidInputError(f"{name} must be a positive number")


def size_cable(
    config: CableConfig,
    design_current: float,
    length: float,
    voltage: float,
    ambient_temperature: float = 30.0,
    circuits: int = 1,
    max_voltage_drop_percent: float = DEFAULT_MAX_VOLTAGE_DROP,
) -> Dict:
    """
    Select a conductor size.

    Args:
        config: Cable construction and installation.
        design_current: Ib in A.
        length: Route length in m.
        voltage: Nominal circuit voltage in V (line-to-line for three-phase).
        ambient_temperature: °C.
        circuits: Number of grouped circuits.
        max_voltage_drop_percent: Allowed voltage drop, % of `voltage`.

    Returns:
        Dict with rating factors, minimum CCC, the initial and final sizes,
        voltage drop figures, status and the table paths used.

    Raises:
        InvalidInputError: non-positive current, length, voltage or limit.
        TableLookupError: invalid configuration, missing table, or no size
            large enough for the required ampacity.
    """
    _positive("Design current", design_current)
    _positive("Cable length", length)
    _positive("Voltage", voltage)
    _positive("Maximum voltage drop", max_voltage_drop_percent)

    cfg = validate_config(config)
    ca = temperature_factor(cfg.insulation, ambient_temperature)
    cg = grouping_factor(cfg.method, circuits)
    min_ccc = design_current / (ca * cg)

    ccc_path, ccc = ccc_column(cfg)
    sizes = sorted(ccc)
    initial = next((s for s in sizes if ccc[s] >= min_ccc), None)
    if initial is None:
        raise TableLookupError(
            f"No tabulated size carries {min_ccc:.1f} A "
            f"(largest is {sizes[-1]:g} mm² at {ccc[sizes[-1]]:g} A)",
            dimension='size',
            path=ccc_path,
        )

    vd_path, vd_table = vd_column(cfg)

    result = {
        'config': asdict(cfg),
        'temperature_factor': ca,
        'grouping_factor': cg,
        'min_ccc': min_ccc,
        'initial_size': initial,
        'initial_ccc': ccc[initial],
        'selected_size': initial,
        'selected_ccc': ccc[initial],
        'voltage_drop': None,
        'voltage_drop_percent': None,
        'vd_factor': None,
        'vd_factor_type': None,
        'max_voltage_drop_percent': max_voltage_drop_percent,
        'status': None,
        'ccc_path': list(ccc_path),
        'vd_path': list(vd_path),
    }

    if initial not in vd_table:
        logger.debug("No voltage drop entry for %s mm² at %s", initial, vd_path)
        result['status'] = f"Too High (VD data unavailable for {initial:g} mm²)"
        return result

    last: Optional[Tuple] = None
    for size in (s for s in sizes if s >= initial):
        entry = vd_table.get(size)
        if entry is None:
            continue
        volts, factor, kind = voltage_drop(entry, design_current, length)
        percent = volts / voltage * 100
        last = (size, volts, percent, factor, kind)
        if percent <= max_voltage_drop_percent:
            break

    size, volts, percent, factor, kind = last
    result.update({
        'selected_size': size,
        'selected_ccc': ccc[size],
        'voltage_drop': volts,
        'voltage_drop_percent': percent,
        'vd_factor': factor,
        'vd_factor_type': kind,
    })

    if percent > max_voltage_drop_percent:
        result['status'] = (
            f"Too High (Largest size {size:g} mm² still exceeds {max_voltage_drop_percent:g}%)"
        )
    elif size == initial:
        result['status'] = STATUS_ACCEPTABLE
    else:
        result['status'] = STATUS_INCREASED
    return result

"""
Simplified cable protection check.

1. Cable impedance from conductor size:
       R = 22.5 / S  mΩ/m   (copper at operating temperature)
       X = 0.08      mΩ/m
       Z = √(R² + X²) · L / 1000   Ω
2. Earth fault current at the far end on a 220 V phase-to-neutral
   supply: If = U0 / Z.
3. Device operating time from coarse trip bands (multiples of In).
4. Adiabatic withstand of the cable for the disconnection time:
       I = √(k² S² / t)
   compared against the prospective fault level at the source.
"""

import math
from typing import Dict, List, Tuple

from mepcalc.errors import InvalidInputError

PHASE_VOLTAGE = 220.0
COPPER_RESISTANCE = 22.5      # mΩ·mm²/m
CABLE_REACTANCE = 0.08        # mΩ/m

K_FACTORS = {
    'pvc': 115,
    'xlpe': 143,
}

# (multiple of In, operating time s), checked top-down; last entry is the fallback
TRIP_BANDS: Dict[str, List[Tuple[float, float]]] = {
    'mcb': [(5, 0.01), (3, 0.1), (0, 10.0)],
    'mccb': [(10, 0.02), (1.5, 0.2), (0, 20.0)],
    'fuse': [(6, 0.01), (2, 0.1), (0, 10.0)],
}

PROTECTION_ADEQUATE = "Adequate Protection (Simplified Check)"
PROTECTION_INADEQUATE = "Potentially Inadequate Protection - Verify Trip Curve"
THERMAL_PROTECTED = "Cable Thermally Protected (Source Fault)"
THERMAL_NOT_PROTECTED = (
    "Cable Potentially Not Protected (Source Fault) - Check Breaker Energy Let-Through"
)


def cable_impedance(csa: float, length: float) -> float:
    """Cable impedance in Ω."""
    r = COPPER_RESISTANCE / csa
    z_per_m = math.hypot(r, CABLE_REACTANCE)
    return z_per_m * length / 1000


def operating_time(device: str, fault_current: float, rating: float) -> float:
    if device not in TRIP_BANDS:
        raise InvalidInputError(f"Unknown device type '{device}'. Must be one of: {list(TRIP_BANDS)}")
    for multiple, seconds in TRIP_BANDS[device]:
        if fault_current > multiple * rating:
            return seconds
    return TRIP_BANDS[device][-1][1]


def adiabatic_withstand(csa: float, time: float, insulation: str) -> float:
    """Largest fault current (A) the conductor withstands for `time` seconds."""
    if insulation not in K_FACTORS:
        raise InvalidInputError(f"Unknown insulation '{insulation}'. Must be one of: {list(K_FACTORS)}")
    k = K_FACTORS[insulation]
    return math.sqrt(k ** 2 * csa ** 2 / time)


def check_circuit_protection(
    fault_level: float,
    device_rating: float,
    device_type: str,
    cable_csa: float,
    cable_length: float,
    disconnection_time: float,
    insulation: str = 'xlpe',
) -> Dict:
    """
    Check that a protective device clears a far-end fault in time and that
    the cable survives the source fault level.
    """
    for name, value in (
        ("Fault level", fault_level),
        ("Device rating", device_rating),
        ("Cable CSA", cable_csa),
        ("Cable length", cable_length),
        ("Disconnection time", disconnection_time),
    ):
        if not math.isfinite(value) or value <= 0:
            raise InvalidInputError(f"{name} must be a positive number")

    z = cable_impedance(cable_csa, cable_length)
    fault_current = PHASE_VOLTAGE / z
    trip_time = operating_time(device_type, fault_current, device_rating)
    withstand = adiabatic_withstand(cable_csa, disconnection_time, insulation)

    return {
        'cable_impedance': z,
        'fault_current_at_end': fault_current,
        'operating_time': trip_time,
        'protection_adequate': trip_time <= disconnection_time,
        'protection_status': PROTECTION_ADEQUATE if trip_time <= disconnection_time else PROTECTION_INADEQUATE,
        'k_factor': K_FACTORS[insulation],
        'thermal_withstand_current': withstand,
        'thermally_protected': fault_level <= withstand,
        'thermal_status': THERMAL_PROTECTED if fault_level <= withstand else THERMAL_NOT_PROTECTED,
    }

"""
Reactive component values: engineering notation and E-series snapping.

Matching networks at RF land in the pF / nH range, so formatting covers
femto through giga and snapping works per decade on IEC 60063 values.
"""

import math
from typing import Dict, List, Tuple

E6_BASE = [1.0, 1.5, 2.2, 3.3, 4.7, 6.8]

E12_BASE = [1.0, 1.2, 1.5, 1.8, 2.2, 2.7, 3.3, 3.9, 4.7, 5.6, 6.8, 8.2]

E24_BASE = [
    1.0, 1.1, 1.2, 1.3, 1.5, 1.6, 1.8, 2.0, 2.2, 2.4, 2.7, 3.0,
    3.3, 3.6, 3.9, 4.3, 4.7, 5.1, 5.6, 6.2, 6.8, 7.5, 8.2, 9.1,
]

E_SERIES = {
    'E6': E6_BASE,
    'E12': E12_BASE,
    'E24': E24_BASE,
}

_SI_PREFIXES = [
    (1e-15, 'f'),
    (1e-12, 'p'),
    (1e-9,  'n'),
    (1e-6,  'µ'),
    (1e-3,  'm'),
    (1e0,   ''),
    (1e3,   'k'),
    (1e6,   'M'),
    (1e9,   'G'),
]

UNITS = {
    'inductor': 'H',
    'capacitor': 'F',
}


def snap_to_e_series(value: float, series: str = 'E12') -> Tuple[float, float]:
    """
    Snap a positive value to the nearest standard E-series value.

    Distance is measured on a log scale, so 9.5 snaps to 10 rather than 8.2
    in E12. Returns (snapped_value, error_pct) where error_pct is signed:
    positive means the standard part is larger than the target.
    """
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"Value must be positive and finite, got {value}")
    if series not in E_SERIES:
        raise ValueError(f"Unknown series '{series}'. Must be one of: {list(E_SERIES.keys())}")

    decade = math.floor(math.log10(value))
    # Candidates span the neighbouring decades so values near a decade edge
    # can snap across it.
    candidates: List[float] = []
    for d in (decade - 1, decade, decade + 1):
        candidates.extend(b * 10 ** d for b in E_SERIES[series])

    target = math.log10(value)
    snapped = min(candidates, key=lambda c: abs(math.log10(c) - target))
    error_pct = (snapped - value) / value * 100
    return snapped, round(error_pct, 4)


def engineering_notation(value: float, unit: str = '', precision: int = 3) -> str:
    """
    Format a value with an SI prefix.

    Examples:
        engineering_notation(1.2e-11, 'F')  → '12pF'
        engineering_notation(7.96e-8, 'H')  → '79.6nH'
        engineering_notation(1e8, 'Hz')     → '100MHz'
    """
    if value == 0:
        return f"0{unit}"
    if not math.isfinite(value):
        return f"{value}{unit}"

    abs_value = abs(value)
    sign = '-' if value < 0 else ''

    for i, (scale, prefix) in enumerate(reversed(_SI_PREFIXES)):
        if abs_value >= scale:
            scaled = float(f"{abs_value / scale:.{precision}g}")
            # Rounding can carry into the next prefix (999.96n → 1µ)
            if scaled >= 1000 and i > 0:
                scale, prefix = list(reversed(_SI_PREFIXES))[i - 1]
                scaled = float(f"{abs_value / scale:.{precision}g}")
            if scaled == int(scaled):
                return f"{sign}{int(scaled)}{prefix}{unit}"
            return f"{sign}{scaled:g}{prefix}{unit}"

    return f"{value:.{precision}g}{unit}"


def snap_component(kind: str, value: float, series: str = 'E12') -> Dict:
    """Snap an inductor or capacitor value and return display info for both."""
    unit = UNITS.get(kind)
    if unit is None:
        raise ValueError(f"Unknown component kind '{kind}'")
    snapped, error_pct = snap_to_e_series(value, series)
    return {
        'target': value,
        'actual': snapped,
        'error_pct': error_pct,
        'series': series,
        'display': engineering_notation(snapped, unit),
    }

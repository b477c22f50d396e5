"""
Three-phase load balance check (BEC 7.6.3).

    unbalance % = (Imax − Iavg) / Iavg · 100

Imax is the most heavily loaded phase, so the figure measures how far the
worst-loaded phase sits above the average.
"""

import math
from typing import Dict

from mepcalc.errors import InvalidInputError

MAX_UNBALANCE_PERCENT = 10.0


def calculate_load_balance(
    phase_a: float,
    phase_b: float,
    phase_c: float,
    limit_percent: float = MAX_UNBALANCE_PERCENT,
) -> Dict:
    """Average current, deviation of the heaviest phase and percentage unbalance."""
    currents = {'L1': phase_a, 'L2': phase_b, 'L3': phase_c}
    for phase, current in currents.items():
        if not math.isfinite(current) or current < 0:
            raise InvalidInputError(f"{phase} current must be a non-negative number")

    average = sum(currents.values()) / 3
    if average == 0:
        raise InvalidInputError("At least one phase must carry current")

    heaviest = max(currents, key=currents.get)
    max_deviation = currents[heaviest] - average
    unbalance = max_deviation / average * 100

    return {
        'average_current': average,
        'deviations': {phase: current - average for phase, current in currents.items()},
        'max_deviation': max_deviation,
        'heaviest_phase': heaviest,
        'unbalance_percent': unbalance,
        'limit_percent': limit_percent,
        'compliant': unbalance <= limit_percent,
    }

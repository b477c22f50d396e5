"""
Approximate fuse pre-arcing time from BS 88 style time-current curves.

The curves are piecewise power-law fits in the overcurrent ratio
r = I / In and are only meant for a first look. Use manufacturer data
for discrimination studies.
"""

import math
from typing import Dict

from mepcalc.errors import InvalidInputError

FUSE_TYPES = {
    'gG': 'General Purpose (gG)',
    'aM': 'Motor Circuit (aM)',
}

# Below this ratio a fuse is taken never to operate
NON_OPERATING_RATIO = 1.1


def _gg_time(r: float) -> float:
    if r <= 1.5:
        return 10000 / (r - 1) ** 2
    if r <= 3:
        return 100 / (r - 1.2) ** 1.8
    if r <= 10:
        return 30 / (r - 0.9) ** 1.5
    return 8 / r ** 0.8


def _am_time(r: float) -> float:
    # aM fuses give back-up protection only; no operation in the overload zone
    if r <= 1.8:
        return math.inf
    if r <= 3:
        return 20000 / (r - 1.8) ** 2.2
    if r <= 7:
        return 80 / (r - 1.5) ** 1.7
    return 10 / r ** 0.7


def _generic_time(r: float) -> float:
    return 100 / (r - 1) ** 1.8


def fuse_operation_time(rated_current: float, actual_current: float, fuse_type: str = 'gG') -> Dict:
    """
    Estimated operating time in seconds (math.inf when it will not operate).
    """
    if not math.isfinite(rated_current) or rated_current <= 0:
        raise InvalidInputError("Rated current must be a positive number")
    if not math.isfinite(actual_current) or actual_current <= 0:
        raise InvalidInputError("Actual current must be a positive number")

    ratio = actual_current / rated_current
    if ratio <= NON_OPERATING_RATIO:
        seconds = math.inf
    elif fuse_type == 'gG':
        seconds = _gg_time(ratio)
    elif fuse_type == 'aM':
        seconds = _am_time(ratio)
    else:
        seconds = _generic_time(ratio)

    return {
        'fuse_type': fuse_type,
        'ratio': ratio,
        'operating_time': seconds,
        'operates': math.isfinite(seconds),
        'display': format_operation_time(seconds),
    }


def format_operation_time(seconds: float) -> str:
    if math.isinf(seconds):
        return 'Will not operate'
    if seconds < 0.1:
        return f"{seconds * 1000:.1f} ms"
    if seconds < 60:
        return f"{seconds:.2f} seconds"
    if seconds < 3600:
        minutes = math.floor(seconds / 60)
        return f"{minutes} min {seconds % 60:.0f} sec"
    hours = math.floor(seconds / 3600)
    minutes = math.floor((seconds % 3600) / 60)
    return f"{hours} hr {minutes} min"

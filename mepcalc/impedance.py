"""
Port impedance normalization and mismatch metrics.

For a port impedance Z and reference Z0:
    Γ      = (Z − Z0) / (Z + Z0)        complex reflection coefficient
    |Γ|    = |Z − Z0| / |Z + Z0|
    VSWR   = (1 + |Γ|) / (1 − |Γ|)
    RL(dB) = −20·log10|Γ|
    η(%)   = (1 − |Γ|²)·100              power delivered vs. available

A perfect match gives Γ = 0, VSWR = 1 and infinite return loss. A purely
reactive port gives |Γ| = 1 and infinite VSWR. Infinities are returned
as float('inf') and left for the caller to present.
"""

import math
from dataclasses import dataclass
from typing import Dict, Optional

from mepcalc.errors import InvalidInputError

DEFAULT_Z0 = 50.0


@dataclass(frozen=True)
class Impedance:
    """Series resistance and reactance of a port, in Ohms."""
    resistance: float
    reactance: float = 0.0

    @property
    def complex(self) -> complex:
        return complex(self.resistance, self.reactance)

    def normalized(self, z0: float = DEFAULT_Z0) -> 'Impedance':
        return Impedance(self.resistance / z0, self.reactance / z0)

    def conjugate(self) -> 'Impedance':
        return Impedance(self.resistance, -self.reactance)

    @classmethod
    def from_complex(cls, z: complex) -> 'Impedance':
        return cls(z.real, z.imag)

    def __str__(self) -> str:
        sign = '+' if self.reactance >= 0 else '-'
        return f"{self.resistance:g} {sign} j{abs(self.reactance):g} Ω"


def validate_impedance(z: Impedance, label: str = 'impedance') -> None:
    """Raise InvalidInputError unless R is finite and ≥ 0 and X is finite."""
    if not math.isfinite(z.resistance) or not math.isfinite(z.reactance):
        raise InvalidInputError(f"{label} must be finite, got {z}")
    if z.resistance < 0:
        raise InvalidInputError(f"{label} resistance must be non-negative, got {z.resistance}")


def validate_reference(z0: float) -> None:
    if not math.isfinite(z0) or z0 <= 0:
        raise InvalidInputError(f"Reference impedance must be positive, got {z0}")


def complex_reflection_coefficient(z: Impedance, z0: float = DEFAULT_Z0) -> complex:
    """Complex Γ of `z` against a real reference `z0`."""
    validate_impedance(z)
    validate_reference(z0)
    return (z.complex - z0) / (z.complex + z0)


def reflection_coefficient(z: Impedance, z0: float = DEFAULT_Z0) -> float:
    """Magnitude of the reflection coefficient, 0 ≤ |Γ| ≤ 1 for passive ports."""
    return abs(complex_reflection_coefficient(z, z0))


def vswr_from_gamma(gamma: float) -> float:
    if gamma < 0 or gamma > 1:
        raise InvalidInputError(f"|Γ| must be between 0 and 1, got {gamma}")
    if gamma == 1:
        return math.inf
    return (1 + gamma) / (1 - gamma)


def gamma_from_vswr(vswr: float) -> float:
    """Inverse of vswr_from_gamma."""
    if vswr < 1:
        raise InvalidInputError(f"VSWR must be at least 1, got {vswr}")
    if math.isinf(vswr):
        return 1.0
    return (vswr - 1) / (vswr + 1)


def return_loss_db(gamma: float) -> float:
    if gamma == 0:
        return math.inf
    return -20 * math.log10(gamma)


def mismatch_efficiency(gamma: float) -> float:
    """Percentage of available power delivered to the port."""
    return (1 - gamma ** 2) * 100


def bandwidth_estimate(center_frequency: float, q: float) -> Optional[float]:
    """Loaded-Q bandwidth approximation f0/Q. Undefined for Q = 0."""
    if q == 0:
        return None
    return center_frequency / q


def impedance_metrics(z: Impedance, z0: float = DEFAULT_Z0) -> Dict:
    """All mismatch figures for one port in a single dict."""
    gamma_c = complex_reflection_coefficient(z, z0)
    gamma = abs(gamma_c)
    return {
        'impedance': z,
        'normalized': z.normalized(z0),
        'gamma': gamma,
        'gamma_angle_deg': math.degrees(math.atan2(gamma_c.imag, gamma_c.real)),
        'vswr': vswr_from_gamma(min(gamma, 1.0)),
        'return_loss_db': return_loss_db(gamma),
        'mismatch_efficiency': mismatch_efficiency(gamma),
    }

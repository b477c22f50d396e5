"""
Ladder-network analysis for lossless LC matching networks.

A network is an ordered list of components from source to load, each
either in series with the signal path or shunted to ground. The input
impedance is found by walking from the load back toward the source:

    series element:  Z ← Z + Zc
    shunt element:   Z ← 1 / (1/Z + 1/Zc)

with Zc = jωL for inductors and 1/(jωC) for capacitors.

The network is matched when the impedance seen from the source equals the
complex conjugate of the source impedance. Mismatch is reported as the
power-wave reflection coefficient Γ = (Zin − Zs*) / (Zin + Zs).
"""

import numpy as np
from typing import Dict, List, Optional, Sequence

from mepcalc.impedance import Impedance


def _component_impedance(comp, omega: np.ndarray) -> np.ndarray:
    """Impedance of one reactive component at angular frequencies `omega`."""
    if comp.kind == 'inductor':
        return 1j * omega * comp.value
    if comp.kind == 'capacitor':
        return 1.0 / (1j * omega * comp.value)
    raise ValueError(f"Unknown component kind '{comp.kind}'")


def ladder_input_impedance(
    load: Impedance,
    components: Sequence,
    frequencies: np.ndarray,
) -> np.ndarray:
    """
    Impedance looking into the network from the source side.

    Args:
        load: Load port impedance (assumed frequency-independent).
        components: Source-to-load ordered components with kind, value and
                    connection ('series' or 'shunt').
        frequencies: Frequencies in Hz.

    Returns:
        Complex impedance array, one entry per frequency.
    """
    frequencies = np.atleast_1d(np.asarray(frequencies, dtype=float))
    omega = 2 * np.pi * frequencies
    z = np.full(frequencies.shape, load.complex, dtype=complex)

    with np.errstate(divide='ignore', invalid='ignore'):
        for comp in reversed(list(components)):
            zc = _component_impedance(comp, omega)
            if comp.connection == 'series':
                z = z + zc
            else:
                z = 1.0 / (1.0 / z + 1.0 / zc)
    return z


def mismatch_gamma(source: Impedance, z_in: np.ndarray) -> np.ndarray:
    """|Γ| between a source and the impedance presented to it."""
    zs = source.complex
    with np.errstate(divide='ignore', invalid='ignore'):
        gamma = np.abs((z_in - np.conj(zs)) / (z_in + zs))
    return np.nan_to_num(gamma, nan=1.0, posinf=1.0)


def verify_network(
    source: Impedance,
    load: Impedance,
    components: Sequence,
    frequency: float,
) -> Dict:
    """Check a synthesized network at its design frequency."""
    z_in = ladder_input_impedance(load, components, np.array([frequency]))[0]
    gamma = float(mismatch_gamma(source, np.array([z_in]))[0])
    return {
        'input_impedance': Impedance.from_complex(complex(z_in)),
        'target_impedance': source.conjugate(),
        'gamma': gamma,
        'return_loss_db': float(-20 * np.log10(gamma)) if gamma > 0 else float('inf'),
    }


def sweep_frequencies(
    center: float,
    span_ratio: float = 0.5,
    num_points: int = 201,
) -> np.ndarray:
    """Linearly spaced frequencies covering center·(1 ± span_ratio/2)."""
    if center <= 0 or span_ratio <= 0 or span_ratio >= 2:
        raise ValueError("center must be positive and span_ratio within (0, 2)")
    half = center * span_ratio / 2
    return np.linspace(center - half, center + half, num_points)


def frequency_response(
    source: Impedance,
    load: Impedance,
    components: Sequence,
    frequencies: np.ndarray,
    threshold_db: float = 10.0,
) -> Dict:
    """
    Sweep the match across frequency.

    The matched band is the range of swept frequencies where return loss
    meets `threshold_db` (10 dB ≈ VSWR 1.92). It is None when no point
    qualifies.
    """
    frequencies = np.asarray(frequencies, dtype=float)
    z_in = ladder_input_impedance(load, components, frequencies)
    gamma = mismatch_gamma(source, z_in)

    with np.errstate(divide='ignore'):
        return_loss = -20 * np.log10(np.maximum(gamma, 1e-12))
    vswr = np.where(gamma < 1, (1 + gamma) / np.maximum(1 - gamma, 1e-12), np.inf)

    in_band = frequencies[return_loss >= threshold_db]
    matched_band: Optional[List[float]] = None
    if in_band.size:
        matched_band = [float(in_band.min()), float(in_band.max())]

    return {
        'frequencies': frequencies.tolist(),
        'gamma': gamma.tolist(),
        'return_loss_db': return_loss.tolist(),
        'vswr': vswr.tolist(),
        'threshold_db': threshold_db,
        'matched_band': matched_band,
        'num_points': int(frequencies.size),
    }

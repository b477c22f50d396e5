"""
Power factor correction capacitor sizing.

    Qc = P · (tan φ1 − tan φ2)

where φ1 = acos(PF1) is the existing displacement angle and
φ2 = acos(PF2,total) the target. Harmonic distortion lowers the true
power factor for a given displacement power factor, so the target is
raised to PF2 · √(1 + THD²) before taking the angle.
"""

import math
from typing import Dict

from mepcalc.errors import InvalidInputError

CAPACITOR_STEP_KVAR = 25.0


def _check_pf(name: str, pf: float) -> None:
    if not math.isfinite(pf) or pf <= 0 or pf > 1:
        raise InvalidInputError(f"{name} must be between 0 and 1, got {pf}")


def standard_bank_size(kvar: float, step: float = CAPACITOR_STEP_KVAR) -> float:
    """Round a requirement up to the next standard bank size."""
    if kvar <= 0:
        return 0.0
    return math.ceil(kvar / step) * step


def calculate_power_factor_correction(
    power_kw: float,
    initial_pf: float,
    target_pf: float,
    thd_percent: float = 0.0,
) -> Dict:
    """
    Size a capacitor bank to raise `initial_pf` to `target_pf`.

    Args:
        power_kw: Active power in kW.
        initial_pf: Existing power factor.
        target_pf: Required displacement power factor.
        thd_percent: Total harmonic distortion in percent.

    Returns:
        Dict of angles, tangents, kVAr required, kVA before and after,
        and the standard bank size. A negative kVAr means the existing
        power factor is already better than the target.
    """
    if not math.isfinite(power_kw) or power_kw <= 0:
        raise InvalidInputError("Active power must be a positive number")
    _check_pf("Initial power factor", initial_pf)
    _check_pf("Target power factor", target_pf)
    if not math.isfinite(thd_percent) or thd_percent < 0:
        raise InvalidInputError("THD must be zero or a positive percentage")

    thd = thd_percent / 100
    target_total_pf = target_pf * math.sqrt(1 + thd ** 2)
    if target_total_pf > 1:
        raise InvalidInputError(
            f"Target power factor {target_pf} with {thd_percent}% THD gives a "
            f"total power factor of {target_total_pf:.3f}, above unity"
        )

    initial_angle = math.acos(initial_pf)
    target_angle = math.acos(target_total_pf)
    initial_tan = math.tan(initial_angle)
    target_tan = math.tan(target_angle)

    kvar = power_kw * (initial_tan - target_tan)
    initial_kva = power_kw / initial_pf
    target_kva = power_kw / target_total_pf

    return {
        'initial_total_pf': initial_pf,
        'target_total_pf': target_total_pf,
        'initial_angle_deg': math.degrees(initial_angle),
        'target_angle_deg': math.degrees(target_angle),
        'initial_tan': initial_tan,
        'target_tan': target_tan,
        'kvar_required': kvar,
        'initial_kva': initial_kva,
        'target_kva': target_kva,
        'kva_reduction': initial_kva - target_kva,
        'standard_capacitor_kvar': standard_bank_size(kvar),
    }

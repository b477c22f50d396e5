"""
Tests for power factor correction sizing.
"""

import math
import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from mepcalc.errors import InvalidInputError
from mepcalc.power_factor import calculate_power_factor_correction, standard_bank_size


class TestPowerFactorCorrection:
    """Test kVAr sizing."""

    def test_basic_correction(self):
        """100 kW from 0.8 to 0.95: Qc = P(tan φ1 − tan φ2)."""
        result = calculate_power_factor_correction(100, 0.8, 0.95)
        expected = 100 * (0.75 - math.tan(math.acos(0.95)))
        assert result['initial_tan'] == pytest.approx(0.75)
        assert result['kvar_required'] == pytest.approx(expected)
        assert result['kvar_required'] == pytest.approx(42.13, abs=0.01)
        assert result['standard_capacitor_kvar'] == 50
        assert result['initial_kva'] == pytest.approx(125)
        assert result['target_kva'] == pytest.approx(100 / 0.95)
        assert result['kva_reduction'] == pytest.approx(125 - 100 / 0.95)

    def test_angles(self):
        """Angles are reported in degrees."""
        result = calculate_power_factor_correction(10, 0.5, 1.0)
        assert result['initial_angle_deg'] == pytest.approx(60)
        assert result['target_angle_deg'] == pytest.approx(0)
        assert result['kvar_required'] == pytest.approx(10 * math.sqrt(3))

    def test_thd_raises_target(self):
        """Harmonics lift the total power factor the correction must reach."""
        clean = calculate_power_factor_correction(100, 0.8, 0.9)
        distorted = calculate_power_factor_correction(100, 0.8, 0.9, thd_percent=30)
        assert distorted['target_total_pf'] == pytest.approx(0.9 * math.sqrt(1.09))
        assert distorted['kvar_required'] > clean['kvar_required']

    def test_thd_above_unity_rejected(self):
        """A target that harmonics push past 1 is an error."""
        with pytest.raises(InvalidInputError, match="above unity"):
            calculate_power_factor_correction(100, 0.8, 0.95, thd_percent=50)

    def test_already_better(self):
        """No bank is needed when the existing PF beats the target."""
        result = calculate_power_factor_correction(100, 0.98, 0.9)
        assert result['kvar_required'] < 0
        assert result['standard_capacitor_kvar'] == 0

    @pytest.mark.parametrize("power,initial,target,thd", [
        (0, 0.8, 0.95, 0),
        (100, 0, 0.95, 0),
        (100, 0.8, 1.2, 0),
        (100, 0.8, 0.95, -5),
        (float('inf'), 0.8, 0.95, 0),
    ])
    def test_invalid_inputs(self, power, initial, target, thd):
        """Out-of-range inputs are rejected."""
        with pytest.raises(InvalidInputError):
            calculate_power_factor_correction(power, initial, target, thd)


class TestBankSize:
    """Test standard bank rounding."""

    @pytest.mark.parametrize("kvar,expected", [
        (1, 25), (25, 25), (25.1, 50), (42.13, 50), (0, 0), (-3, 0),
    ])
    def test_rounds_up(self, kvar, expected):
        """Requirements round up to the next 25 kVAr step."""
        assert standard_bank_size(kvar) == expected

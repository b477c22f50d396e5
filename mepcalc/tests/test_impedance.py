"""
Tests for port impedance metrics.

Validates:
1. Reflection coefficient against hand-computed values
2. VSWR / Γ round trip
3. Return loss and mismatch efficiency limits
4. Input validation
"""

import math
import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from mepcalc.errors import InvalidInputError
from mepcalc.impedance import (
    Impedance,
    bandwidth_estimate,
    complex_reflection_coefficient,
    gamma_from_vswr,
    impedance_metrics,
    mismatch_efficiency,
    reflection_coefficient,
    return_loss_db,
    vswr_from_gamma,
)


class TestReflectionCoefficient:
    """Test |Γ| and complex Γ."""

    def test_matched_port(self):
        """Z = Z0 reflects nothing."""
        assert reflection_coefficient(Impedance(50, 0), 50) == pytest.approx(0.0)

    def test_resistive_mismatch(self):
        """100 Ω on a 50 Ω line gives Γ = 1/3."""
        assert reflection_coefficient(Impedance(100, 0), 50) == pytest.approx(1 / 3)

    def test_complex_load(self):
        """100 + j50 Ω against 50 Ω: |50+j50| / |150+j50|."""
        expected = abs(complex(50, 50)) / abs(complex(150, 50))
        assert reflection_coefficient(Impedance(100, 50), 50) == pytest.approx(expected)

    def test_complex_gamma_sign(self):
        """A resistance below Z0 gives a negative real Γ."""
        gamma = complex_reflection_coefficient(Impedance(25, 0), 50)
        assert gamma.real == pytest.approx(-1 / 3)
        assert gamma.imag == pytest.approx(0.0)

    def test_custom_reference(self):
        """A 75 Ω port is matched on a 75 Ω reference."""
        assert reflection_coefficient(Impedance(75, 0), 75) == pytest.approx(0.0)

    def test_purely_reactive_port(self):
        """A lossless port reflects everything."""
        assert reflection_coefficient(Impedance(0, 30), 50) == pytest.approx(1.0)


class TestVSWR:
    """Test VSWR conversions."""

    @pytest.mark.parametrize("gamma", [0.0, 0.1, 1 / 3, 0.5, 0.9])
    def test_round_trip(self, gamma):
        """gamma_from_vswr inverts vswr_from_gamma."""
        assert gamma_from_vswr(vswr_from_gamma(gamma)) == pytest.approx(gamma)

    def test_known_value(self):
        """Γ = 1/3 is a 2:1 VSWR."""
        assert vswr_from_gamma(1 / 3) == pytest.approx(2.0)

    def test_total_reflection(self):
        """Γ = 1 gives infinite VSWR and back."""
        assert math.isinf(vswr_from_gamma(1.0))
        assert gamma_from_vswr(math.inf) == 1.0

    def test_out_of_range(self):
        """Γ outside [0, 1] and VSWR below 1 are rejected."""
        with pytest.raises(InvalidInputError):
            vswr_from_gamma(1.5)
        with pytest.raises(InvalidInputError):
            gamma_from_vswr(0.5)


class TestLossFigures:
    """Test return loss, efficiency and bandwidth."""

    def test_return_loss(self):
        """Γ = 0.1 is 20 dB return loss."""
        assert return_loss_db(0.1) == pytest.approx(20.0)

    def test_return_loss_perfect_match(self):
        """A perfect match has infinite return loss."""
        assert math.isinf(return_loss_db(0.0))

    def test_efficiency(self):
        """Γ = 0.5 delivers 75 % of the available power."""
        assert mismatch_efficiency(0.5) == pytest.approx(75.0)

    def test_bandwidth(self):
        """f/Q, undefined at Q = 0."""
        assert bandwidth_estimate(100e6, 4) == pytest.approx(25e6)
        assert bandwidth_estimate(100e6, 0) is None

    def test_metrics_bundle(self):
        """impedance_metrics combines the individual figures."""
        m = impedance_metrics(Impedance(100, 0), 50)
        assert m['gamma'] == pytest.approx(1 / 3)
        assert m['vswr'] == pytest.approx(2.0)
        assert m['normalized'] == Impedance(2.0, 0.0)


class TestValidation:
    """Test input validation."""

    def test_negative_resistance(self):
        """Active (negative-resistance) ports are rejected."""
        with pytest.raises(InvalidInputError):
            reflection_coefficient(Impedance(-10, 0))

    def test_non_finite(self):
        """NaN reactance is rejected."""
        with pytest.raises(InvalidInputError):
            reflection_coefficient(Impedance(50, float('nan')))

    def test_bad_reference(self):
        """Z0 must be positive."""
        with pytest.raises(InvalidInputError):
            reflection_coefficient(Impedance(50, 0), 0)

    def test_errors_are_value_errors(self):
        """Engine errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            reflection_coefficient(Impedance(50, 0), -1)

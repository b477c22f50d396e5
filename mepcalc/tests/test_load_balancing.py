"""
Tests for the three-phase load balance check.
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from mepcalc.errors import InvalidInputError
from mepcalc.load_balancing import calculate_load_balance


class TestLoadBalance:
    """Test unbalance percentage and compliance."""

    def test_reference_feeder(self):
        """400 / 425 / 370 A: 6.70 % unbalance, within the 10 % limit."""
        result = calculate_load_balance(400, 425, 370)
        assert result['average_current'] == pytest.approx(398.33, abs=0.01)
        assert result['max_deviation'] == pytest.approx(26.67, abs=0.01)
        assert result['unbalance_percent'] == pytest.approx(6.70, abs=0.01)
        assert result['heaviest_phase'] == 'L2'
        assert result['compliant'] is True

    def test_deviations_sum_to_zero(self):
        """Signed deviations from the mean cancel."""
        result = calculate_load_balance(400, 425, 370)
        assert sum(result['deviations'].values()) == pytest.approx(0.0, abs=1e-9)
        assert result['deviations']['L3'] < 0

    def test_balanced(self):
        """Equal phases are perfectly balanced."""
        result = calculate_load_balance(100, 100, 100)
        assert result['unbalance_percent'] == pytest.approx(0.0)
        assert result['compliant'] is True

    def test_non_compliant(self):
        """A heavily loaded phase fails the limit."""
        result = calculate_load_balance(100, 150, 100)
        assert result['unbalance_percent'] == pytest.approx((150 - 350 / 3) / (350 / 3) * 100)
        assert result['compliant'] is False

    def test_custom_limit(self):
        """The limit can be tightened."""
        result = calculate_load_balance(400, 425, 370, limit_percent=5)
        assert result['limit_percent'] == 5
        assert result['compliant'] is False

    def test_single_loaded_phase(self):
        """One loaded phase gives 200 % unbalance."""
        result = calculate_load_balance(0, 0, 30)
        assert result['unbalance_percent'] == pytest.approx(200.0)

    @pytest.mark.parametrize("currents", [(0, 0, 0), (-1, 10, 10), (float('nan'), 1, 1)])
    def test_invalid(self, currents):
        """No load or negative currents are rejected."""
        with pytest.raises(InvalidInputError):
            calculate_load_balance(*currents)

"""
Tests for cable sizing by ampacity and voltage drop.
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from mepcalc.cable_resolver import CableConfig, resolve_ccc_path, resolve_vd_paths
from mepcalc.cable_sizing import (
    STATUS_ACCEPTABLE,
    STATUS_INCREASED,
    grouping_factor,
    size_cable,
    temperature_factor,
    voltage_drop,
    voltage_drop_factor,
)
from mepcalc.errors import InvalidInputError, TableLookupError


class TestRatingFactors:
    """Test ambient and grouping correction."""

    @pytest.mark.parametrize("insulation,ambient,expected", [
        ('xlpe', 30, 1.00),
        ('xlpe', 27, 1.00),
        ('xlpe', 40, 0.91),
        ('xlpe', 85, 0.32),
        ('pvc', 25, 1.06),
        ('pvc', 60, 0.50),
    ])
    def test_temperature(self, insulation, ambient, expected):
        """Factor for the first band at or above the ambient."""
        assert temperature_factor(insulation, ambient) == expected

    @pytest.mark.parametrize("method,circuits,expected", [
        ('C', 1, 1.00),
        ('C', 3, 0.79),
        ('A', 25, 0.45),
        ('E', 7, 0.70),
        ('G_spacedH', 2, 0.88),
    ])
    def test_grouping(self, method, circuits, expected):
        """Factor for the group the method belongs to."""
        assert grouping_factor(method, circuits) == expected

    def test_grouping_rejects_zero(self):
        """At least one circuit is required."""
        with pytest.raises(InvalidInputError):
            grouping_factor('C', 0)


class TestVoltageDropFactor:
    """Test mV/A/m selection."""

    def test_impedance_preferred(self):
        """z is used when the entry has it."""
        assert voltage_drop_factor({'r': 1.6, 'x': 0.145, 'z': 1.607}) == (1.607, 'z')

    def test_resistance_fallback(self):
        """Small sizes carry only r."""
        assert voltage_drop_factor({'r': 2.5}) == (2.5, 'r')

    def test_volts(self):
        """VD = mV/A/m · A · m / 1000."""
        volts, factor, kind = voltage_drop({'r': 2.5}, 100, 50)
        assert volts == pytest.approx(12.5)


class TestSizeCable:
    """Test the full sizing procedure."""

    def test_reference_circuit(self):
        """100 A, XLPE multicore clipped direct, 50 m at 400 V → 16 mm²."""
        result = size_cable(CableConfig(), 100, 50, 400)
        assert result['temperature_factor'] == 1.0
        assert result['grouping_factor'] == 1.0
        assert result['min_ccc'] == pytest.approx(100)
        assert result['initial_size'] == 16
        assert result['selected_size'] == 16
        assert result['selected_ccc'] == 100
        assert result['voltage_drop'] == pytest.approx(12.5)
        assert result['voltage_drop_percent'] == pytest.approx(3.125)
        assert result['vd_factor_type'] == 'r'
        assert result['status'] == STATUS_ACCEPTABLE
        assert result['ccc_path'] == ['xlpe', 'non_armoured', 'multicore', 'ccc', 'methodC', '3_4']

    def test_increased_for_voltage_drop(self):
        """Doubling the length steps 16 → 25 (4.02 %) → 35 mm² (2.90 %)."""
        result = size_cable(CableConfig(), 100, 100, 400)
        assert result['initial_size'] == 16
        assert result['selected_size'] == 35
        assert result['vd_factor_type'] == 'z'
        assert result['vd_factor'] == pytest.approx(1.159)
        assert result['voltage_drop_percent'] == pytest.approx(2.8975)
        assert result['status'] == STATUS_INCREASED

    def test_selected_never_smaller_than_initial(self):
        """Voltage drop can only increase the size."""
        for length in (1, 10, 80, 150, 400):
            result = size_cable(CableConfig(), 60, length, 400)
            assert result['selected_size'] >= result['initial_size']
            assert result['selected_ccc'] >= result['min_ccc']

    def test_derated_ambient_and_grouping(self):
        """Ca and Cg both raise the required tabulated ampacity."""
        result = size_cable(CableConfig(), 100, 10, 400, ambient_temperature=40, circuits=3)
        assert result['min_ccc'] == pytest.approx(100 / (0.91 * 0.79))
        assert result['initial_size'] == 35
        assert result['initial_ccc'] == 158

    def test_too_high_at_largest_size(self):
        """An impossible route reports the largest size and its drop."""
        result = size_cable(CableConfig(), 100, 5000, 400)
        assert result['selected_size'] == 300
        assert result['voltage_drop_percent'] > 4
        assert result['status'].startswith("Too High (Largest size 300 mm²")

    def test_no_size_large_enough(self):
        """Currents beyond the largest tabulated size fail with a size lookup error."""
        with pytest.raises(TableLookupError) as exc:
            size_cable(CableConfig(), 1000, 10, 400)
        assert exc.value.dimension == 'size'

    def test_dc_circuit(self):
        """DC uses the resistive column and two conductors."""
        config = CableConfig(conductors=3, system='dc')
        result = size_cable(config, 20, 30, 48)
        assert result['config']['conductors'] == 2
        assert result['vd_path'][-1] == 'dc'
        assert result['vd_factor_type'] == 'r'
        assert result['selected_size'] == 16
        assert result['voltage_drop_percent'] == pytest.approx(3.625)

    def test_armoured_single_core(self):
        """Armoured single-core sizing starts from 50 mm²."""
        config = CableConfig('xlpe', True, 'single', 'C', 3, 'trefoil')
        result = size_cable(config, 50, 20, 400)
        assert result['initial_size'] == 50
        assert result['status'] == STATUS_ACCEPTABLE

    def test_invalid_configuration(self):
        """Invalid configurations surface the resolver error."""
        with pytest.raises(TableLookupError) as exc:
            size_cable(CableConfig(armoured=True, method='B'), 10, 10, 230)
        assert exc.value.dimension == 'method'

    @pytest.mark.parametrize("current,length,voltage", [
        (0, 10, 400),
        (10, -1, 400),
        (10, 10, 0),
        (float('nan'), 10, 400),
    ])
    def test_invalid_inputs(self, current, length, voltage):
        """Non-positive or non-finite figures are rejected."""
        with pytest.raises(InvalidInputError):
            size_cable(CableConfig(), current, length, voltage)


class TestIdempotence:
    """Resolving the same configuration twice gives the same answer."""

    CONFIGS = [
        CableConfig(),
        CableConfig('xlpe', False, 'single', 'F_touching', 3, 'trefoil'),
        CableConfig('xlpe', True, 'single', 'F_spacedH', 2, 'flat', 'dc'),
    ]

    @pytest.mark.parametrize("config", CONFIGS)
    def test_paths_repeat(self, config):
        """Path resolution is a pure lookup."""
        assert resolve_ccc_path(config) == resolve_ccc_path(config)
        assert resolve_vd_paths(config) == resolve_vd_paths(config)

    @pytest.mark.parametrize("config", CONFIGS)
    def test_sizing_repeats(self, config):
        """Size, status and both paths are unchanged on a second run."""
        voltage = 48 if config.system == 'dc' else 400
        first = size_cable(config, 40, 25, voltage)
        second = size_cable(config, 40, 25, voltage)
        assert first == second
        for key in ('selected_size', 'status', 'ccc_path', 'vd_path'):
            assert first[key] == second[key]

    def test_normalized_config_resolves_identically(self):
        """Sizing the normalized form of a config matches sizing the original."""
        config = CableConfig(conductors=3, system='dc')
        assert size_cable(config, 20, 30, 48) == size_cable(config.normalized(), 20, 30, 48)

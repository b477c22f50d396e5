"""
Tests for cable table resolution.

The decision tables must cover every configuration the validity rules
accept, and every path they produce must exist in the reference data.
"""

import itertools
import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from mepcalc.cable_resolver import (
    ARRANGEMENTS,
    CCC_DECISION_TABLE,
    INSULATIONS,
    NO_ENTRY,
    SYSTEMS,
    VD_DECISION_TABLE,
    CableConfig,
    available_layouts,
    available_methods,
    ccc_column,
    lookup_ccc_path,
    method_rejection,
    resolve_ccc_path,
    resolve_vd_paths,
    safe_get,
    validate_config,
    vd_column,
)
from mepcalc.cable_tables import TABLES
from mepcalc.errors import TableLookupError


def _all_valid_configs():
    for insulation, armoured, arrangement in itertools.product(INSULATIONS, (False, True), ARRANGEMENTS):
        conductor_options = (2, 3, 4) if arrangement == 'multicore' else (2, 3)
        for method in available_methods(insulation, armoured, arrangement):
            for conductors, system in itertools.product(conductor_options, SYSTEMS):
                if system == 'dc' and conductors != 2:
                    continue
                for layout in available_layouts(arrangement, method, conductors):
                    yield CableConfig(insulation, armoured, arrangement, method, conductors, layout, system)


class TestDecisionTables:
    """Test decision table coverage."""

    def test_every_valid_config_resolves(self):
        """Both columns exist for every configuration the rules allow."""
        count = 0
        for config in _all_valid_configs():
            _, ccc = ccc_column(config)
            _, vd = vd_column(config)
            assert ccc, config
            assert vd, config
            count += 1
        assert count > 100

    def test_ccc_paths_point_at_size_columns(self):
        """Resolved ampacity paths end at {size: amps}."""
        for config in _all_valid_configs():
            column = safe_get(TABLES, resolve_ccc_path(config))
            assert all(isinstance(v, (int, float)) for v in column.values())

    def test_wildcard_system_expanded(self):
        """'*' rows appear once per system."""
        assert CCC_DECISION_TABLE[('multicore', False, 'C', 2, 'standard', 'ac')] == ('methodC', '2')
        assert CCC_DECISION_TABLE[('multicore', False, 'C', 2, 'standard', 'dc')] == ('methodC', '2')
        assert all(key[-1] in SYSTEMS for key in CCC_DECISION_TABLE)
        assert all(key[-1] in SYSTEMS for key in VD_DECISION_TABLE)

    def test_miss_is_sentinel(self):
        """Unknown keys return the falsy sentinel."""
        miss = lookup_ccc_path(('multicore', True, 'A', 3, 'standard', 'ac'))
        assert miss is NO_ENTRY
        assert not miss


class TestResolution:
    """Test resolved key paths."""

    def test_default_multicore(self):
        """XLPE multicore clipped direct, three-phase."""
        assert resolve_ccc_path(CableConfig()) == (
            'xlpe', 'non_armoured', 'multicore', 'ccc', 'methodC', '3_4')
        assert resolve_vd_paths(CableConfig()) == [
            ('xlpe', 'non_armoured', 'multicore', 'voltageDrop', 'ac', '3_4')]

    def test_pvc_single_core_trefoil(self):
        """PVC takes the C/F voltage-drop group."""
        config = CableConfig('pvc', False, 'single', 'C', 3, 'trefoil')
        path, column = vd_column(config)
        assert path == ('pvc', 'non_armoured', 'single_core', 'voltageDrop', 'methodCF', 'touching', 'trefoil')
        assert column[95]['z'] > column[95]['r']

    def test_xlpe_single_core_falls_through(self):
        """XLPE has no 'methodCF' so the second candidate is used."""
        config = CableConfig('xlpe', False, 'single', 'F_touching', 3, 'flat')
        path, _ = vd_column(config)
        assert path[4] == 'methodCFG'

    def test_armoured_single_core_starts_at_50(self):
        """Armoured single-core tables begin at 50 mm²."""
        config = CableConfig('xlpe', True, 'single', 'F_touching', 3, 'trefoil')
        _, ccc = ccc_column(config)
        _, vd = vd_column(config)
        assert min(ccc) == 50
        assert min(vd) == 50

    def test_dc_forces_two_conductors(self):
        """DC circuits resolve as two-conductor circuits."""
        config = CableConfig(conductors=3, system='dc')
        assert validate_config(config).conductors == 2
        assert resolve_ccc_path(config)[-1] == '2'
        assert resolve_vd_paths(config) == [('xlpe', 'non_armoured', 'multicore', 'voltageDrop', 'dc')]

    def test_armoured_spaced_dc(self):
        """Armoured spaced single-core DC has its own ampacity column."""
        config = CableConfig('pvc', True, 'single', 'F_spacedV', 2, system='dc')
        assert resolve_ccc_path(config)[-1] == 'dc_vertical'

    def test_layout_defaults_to_first(self):
        """Omitted layout takes the first available."""
        assert validate_config(CableConfig(arrangement='single', method='C', conductors=3)).layout == 'flat'
        assert validate_config(CableConfig()).layout == 'standard'


class TestValidityRules:
    """Test configuration rejection."""

    @pytest.mark.parametrize("config,dimension", [
        (CableConfig(armoured=True, method='A'), 'method'),
        (CableConfig(arrangement='single', method='E'), 'method'),
        (CableConfig(method='F_touching'), 'method'),
        (CableConfig('pvc', False, 'single', 'G_spacedH', 3, 'flat'), 'method'),
        (CableConfig(method='Z'), 'method'),
        (CableConfig(insulation='rubber'), 'insulation'),
        (CableConfig(arrangement='triplex'), 'arrangement'),
        (CableConfig(system='hvdc'), 'system'),
        (CableConfig(arrangement='single', method='C', conductors=4), 'conductors'),
        (CableConfig(conductors=5), 'conductors'),
        (CableConfig(arrangement='single', method='F_spacedH', conductors=3, layout='trefoil'), 'layout'),
        (CableConfig(layout='flat'), 'layout'),
    ])
    def test_rejected(self, config, dimension):
        """Each invalid configuration names the failing dimension."""
        with pytest.raises(TableLookupError) as exc:
            validate_config(config)
        assert exc.value.dimension == dimension

    def test_rejection_reasons(self):
        """Valid methods report no reason."""
        assert method_rejection('C', 'xlpe', True, 'multicore') is None
        assert "armoured" in method_rejection('B', 'xlpe', True, 'multicore')

    def test_available_methods(self):
        """Armoured multicore is clipped direct or tray only."""
        assert available_methods('xlpe', True, 'multicore') == ['C', 'E']
        assert 'G_spacedH' in available_methods('xlpe', False, 'single')
        assert 'G_spacedH' not in available_methods('pvc', False, 'single')

    def test_layouts(self):
        """Trefoil only for three touching single-core conductors."""
        assert available_layouts('single', 'F_touching', 3) == ['flat', 'trefoil']
        assert available_layouts('single', 'G_spacedV', 3) == ['flat']
        assert available_layouts('single', 'A', 3) == ['standard']
        assert available_layouts('multicore', 'C', 4) == ['standard']


class TestMissingData:
    """Test reporting of absent table data."""

    def test_missing_ccc_table(self):
        """A resolved path absent from the data names the path."""
        with pytest.raises(TableLookupError) as exc:
            ccc_column(CableConfig(), tables={})
        assert exc.value.dimension == 'ccc_table'
        assert exc.value.path[-2:] == ('methodC', '3_4')
        assert "lookup path" in str(exc.value)

    def test_missing_vd_table(self):
        """All candidates missing reports the last one tried."""
        config = CableConfig('pvc', False, 'single', 'C', 2)
        with pytest.raises(TableLookupError) as exc:
            vd_column(config, tables={'pvc': {}})
        assert exc.value.dimension == 'vd_table'
        assert exc.value.path[4] == 'methodCFG'

    def test_safe_get(self):
        """Missing keys and non-dict nodes yield None."""
        tree = {'a': {'b': 1}}
        assert safe_get(tree, ('a', 'b')) == 1
        assert safe_get(tree, ('a', 'c')) is None
        assert safe_get(tree, ('a', 'b', 'c')) is None

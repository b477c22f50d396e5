"""
Tests for Smith chart projection and SVG output.
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from mepcalc.errors import InvalidInputError
from mepcalc.impedance import Impedance
from mepcalc.smith_chart import (
    REACTANCE_ARCS,
    RESISTANCE_CIRCLES,
    chart_grid,
    impedance_to_gamma,
    matching_chart_points,
    project_impedances,
    render_svg,
)


class TestProjection:
    """Test impedance → Γ plane mapping."""

    def test_center(self):
        """Z = Z0 sits at the chart centre."""
        gr, gi = impedance_to_gamma(Impedance(50, 0))
        assert gr == pytest.approx(0.0)
        assert gi == pytest.approx(0.0)

    def test_short_and_open_circuit_edges(self):
        """Short circuit at Γ = −1, very large R toward +1."""
        assert impedance_to_gamma(Impedance(0, 0))[0] == pytest.approx(-1.0)
        assert impedance_to_gamma(Impedance(1e9, 0))[0] == pytest.approx(1.0, abs=1e-6)

    def test_inductive_upper_half(self):
        """Positive reactance plots above the real axis."""
        _, gi = impedance_to_gamma(Impedance(50, 50))
        assert gi > 0

    def test_matches_reflection_coefficient(self):
        """(r,x) = (2,1): Γ = (1+j)/(3+j) = 0.4 + 0.2j."""
        gr, gi = impedance_to_gamma(Impedance(100, 50))
        assert gr == pytest.approx(0.4)
        assert gi == pytest.approx(0.2)

    def test_passive_inside_unit_disk(self):
        """Any passive impedance projects inside |Γ| ≤ 1."""
        points = {f"p{i}": Impedance(r, x) for i, (r, x) in enumerate(
            [(0.1, 400), (5, -3), (1000, 1), (50, 0), (0, 25)])}
        for point in project_impedances(points):
            assert point['gamma_magnitude'] <= 1.0 + 1e-12

    def test_projection_order_and_fields(self):
        """Labels keep insertion order and carry normalized values."""
        out = project_impedances({'load': Impedance(100, 50), 'source': Impedance(50, 0)}, z0=50)
        assert [p['label'] for p in out] == ['load', 'source']
        assert out[0]['r'] == pytest.approx(2.0)
        assert out[0]['x'] == pytest.approx(1.0)

    def test_negative_resistance_rejected(self):
        """Active impedances cannot be placed on the passive chart."""
        with pytest.raises(InvalidInputError):
            impedance_to_gamma(Impedance(-10, 0))


class TestGrid:
    """Test grid geometry."""

    def test_resistance_circles(self):
        """Constant-r circles are tangent at Γ = 1."""
        grid = chart_grid()
        assert len(grid['resistance_circles']) == len(RESISTANCE_CIRCLES)
        for circle in grid['resistance_circles']:
            assert circle['center'][0] + circle['radius'] == pytest.approx(1.0)

    def test_reactance_arcs_both_signs(self):
        """Each reactance magnitude produces an inductive and a capacitive arc."""
        grid = chart_grid(num_points=16)
        assert len(grid['reactance_arcs']) == 2 * len(REACTANCE_ARCS)
        for arc in grid['reactance_arcs']:
            assert len(arc['points']) == 16
            for gr, gi in arc['points']:
                assert gr ** 2 + gi ** 2 <= 1.0 + 1e-9


class TestSvg:
    """Test SVG rendering."""

    def test_svg_document(self):
        """Output is a standalone SVG with one marker per point."""
        svg = render_svg(matching_chart_points(Impedance(50, 0), Impedance(100, 50)))
        assert svg.startswith('<svg')
        assert svg.rstrip().endswith('</svg>')
        assert svg.count('class="point"') == 2
        assert '#f97316' in svg

    def test_labels_escaped(self):
        """Labels and titles are escaped."""
        svg = render_svg({'<b>': Impedance(50, 0)}, title='A & B')
        assert '&lt;b&gt;' in svg
        assert 'A &amp; B' in svg

    def test_extra_points(self):
        """Extra labelled points are appended after source and load."""
        points = matching_chart_points(Impedance(50, 0), Impedance(10, 5),
                                       extra=[('matched', Impedance(50, 0))])
        assert list(points) == ['source', 'load', 'matched']

"""
Smith chart projection and SVG rendering.

An impedance normalized to Z0 (z = r + jx) maps onto the reflection
coefficient plane:

    Γr = (r² + x² − 1) / ((r + 1)² + x²)
    Γi = 2x / ((r + 1)² + x²)

Passive impedances (r ≥ 0) land inside the unit disk. The output is for
display only.
"""

from html import escape as html_escape
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from mepcalc.impedance import DEFAULT_Z0, Impedance, validate_impedance, validate_reference

RESISTANCE_CIRCLES = [0.0, 0.2, 0.5, 1.0, 2.0, 5.0]
REACTANCE_ARCS = [0.2, 0.5, 1.0, 2.0, 5.0]

_POINT_COLORS = {
    'source': '#22c55e',
    'load': '#f97316',
    'matched': '#3B82F6',
}


def impedance_to_gamma(z: Impedance, z0: float = DEFAULT_Z0) -> Tuple[float, float]:
    """Chart coordinates (Γr, Γi) of an impedance."""
    validate_impedance(z)
    validate_reference(z0)
    r = z.resistance / z0
    x = z.reactance / z0
    denom = (r + 1) ** 2 + x ** 2
    return (r ** 2 + x ** 2 - 1) / denom, 2 * x / denom


def project_impedances(points: Dict[str, Impedance], z0: float = DEFAULT_Z0) -> List[Dict]:
    """Project labelled impedances, keeping the insertion order of `points`."""
    projected = []
    for label, z in points.items():
        gr, gi = impedance_to_gamma(z, z0)
        projected.append({
            'label': label,
            'resistance': z.resistance,
            'reactance': z.reactance,
            'r': z.resistance / z0,
            'x': z.reactance / z0,
            'gamma_real': gr,
            'gamma_imag': gi,
            'gamma_magnitude': float(np.hypot(gr, gi)),
        })
    return projected


def _arc_points(x: float, num_points: int) -> np.ndarray:
    """Constant-reactance arc, traced by sweeping r from 0 toward infinity."""
    r = np.concatenate(([0.0], np.logspace(-2, 3, num_points - 1)))
    denom = (r + 1) ** 2 + x ** 2
    return np.column_stack(((r ** 2 + x ** 2 - 1) / denom, 2 * x / denom))


def chart_grid(num_points: int = 64) -> Dict:
    """
    Constant-r circles and constant-x arcs in Γ coordinates.

    Circles are returned by centre and radius. Arcs are polylines clipped
    to the unit disk, plus the centre/radius of the full circle they lie on.
    """
    circles = [
        {'r': r, 'center': [r / (r + 1), 0.0], 'radius': 1 / (r + 1)}
        for r in RESISTANCE_CIRCLES
    ]
    arcs = []
    for magnitude in REACTANCE_ARCS:
        for x in (magnitude, -magnitude):
            arcs.append({
                'x': x,
                'center': [1.0, 1 / x],
                'radius': 1 / abs(x),
                'points': _arc_points(x, num_points).tolist(),
            })
    return {'resistance_circles': circles, 'reactance_arcs': arcs}


def _safe(text: str) -> str:
    return html_escape(str(text), quote=True)


def render_svg(
    points: Optional[Dict[str, Impedance]] = None,
    z0: float = DEFAULT_Z0,
    size: int = 400,
    title: str = 'Smith Chart',
) -> str:
    """Standalone SVG of the chart grid with labelled impedance markers."""
    margin = 30
    radius = (size - 2 * margin) / 2
    cx = cy = size / 2

    def to_px(gr: float, gi: float) -> Tuple[float, float]:
        return round(cx + gr * radius, 2), round(cy - gi * radius, 2)

    parts = [
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {size} {size}" '
        f'width="{size}" height="{size}">',
        f'  <rect width="{size}" height="{size}" fill="#0f172a" rx="8"/>',
        f'  <text x="{cx}" y="18" text-anchor="middle" fill="#64748b" '
        f'font-size="12" font-family="monospace">{_safe(title)} (Z0 = {z0:g} Ω)</text>',
        f'  <circle cx="{cx}" cy="{cy}" r="{radius}" fill="none" stroke="#94a3b8" stroke-width="1.5"/>',
        f'  <line x1="{cx - radius}" y1="{cy}" x2="{cx + radius}" y2="{cy}" stroke="#475569" stroke-width="1"/>',
    ]

    grid = chart_grid()
    for circle in grid['resistance_circles']:
        if circle['r'] == 0:
            continue
        px, py = to_px(*circle['center'])
        parts.append(
            f'  <circle class="r-circle" cx="{px}" cy="{py}" r="{round(circle["radius"] * radius, 2)}" '
            f'fill="none" stroke="#475569" stroke-width="0.8"/>'
        )
    for arc in grid['reactance_arcs']:
        coords = ' '.join(f'{x},{y}' for x, y in (to_px(gr, gi) for gr, gi in arc['points']))
        parts.append(
            f'  <polyline class="x-arc" points="{coords}" fill="none" stroke="#475569" stroke-width="0.8"/>'
        )

    for point in project_impedances(points or {}, z0):
        px, py = to_px(point['gamma_real'], point['gamma_imag'])
        color = _POINT_COLORS.get(point['label'], '#e2e8f0')
        parts.append(f'  <circle class="point" cx="{px}" cy="{py}" r="4" fill="{color}"/>')
        parts.append(
            f'  <text x="{px + 6}" y="{py - 6}" fill="{color}" font-size="10" '
            f'font-family="monospace">{_safe(point["label"])}</text>'
        )

    parts.append('</svg>')
    return '\n'.join(parts)


def matching_chart_points(
    source: Impedance,
    load: Impedance,
    extra: Optional[Sequence[Tuple[str, Impedance]]] = None,
) -> Dict[str, Impedance]:
    """Standard labelled points for a matching problem."""
    points = {'source': source, 'load': load}
    for label, z in extra or []:
        points[label] = z
    return points

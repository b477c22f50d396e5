"""
Lumped-element impedance matching network synthesis.

Given source Zs = rs + j·xs and load Zl = rl + j·xl, find reactive
elements that present the conjugate of Zs to the source (see
mepcalc.simulation for the ladder convention). Three families are
supported, each in a low-pass or high-pass topology:

    L   two elements. The series arm faces the lower resistance.
        Q is fixed by the resistance ratio: Qmin = sqrt(Rmax/Rmin − 1).
    Pi  shunt, series, shunt. Two L-sections back to back through a
        virtual resistance Rv = Rmax / (Q² + 1) below both ports.
    T   series, shunt, series. Two L-sections through
        Rv = Rmin · (Q² + 1) above both ports.

Port reactances are absorbed: the source/load reactance is folded into
the adjacent element (series arms subtract it, shunt arms use the parallel
equivalent). The element type then follows the sign of the net
reactance (X > 0 inductor, X < 0 capacitor). When absorption flips an
element away from its nominal low-pass/high-pass type it is labelled
"(modified)".

Component values at ω = 2πf:
    L = X / ω
    C = −1 / (ω·X)
"""

import functools
import logging
import math
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional

from mepcalc.components import UNITS, engineering_notation, snap_component
from mepcalc.errors import (
    CalculationError,
    DegenerateNetworkError,
    InsufficientQError,
    InvalidComponentError,
    InvalidInputError,
)
from mepcalc.impedance import (
    DEFAULT_Z0,
    Impedance,
    bandwidth_estimate,
    mismatch_efficiency,
    reflection_coefficient,
    return_loss_db,
    validate_impedance,
    validate_reference,
    vswr_from_gamma,
)

logger = logging.getLogger(__name__)

NETWORKS = ('L', 'Pi', 'T')
TOPOLOGIES = ('lowpass', 'highpass')
MATCHING_POSITIONS = ('load', 'source')

# Pi and T default to a looser Q than the L minimum so the virtual
# resistance sits clear of both ports.
ENHANCED_Q_FACTOR = 1.5

# Relative tolerance for "this element is zero" decisions
_ZERO_TOL = 1e-9


@dataclass(frozen=True)
class ReactiveComponent:
    """One inductor or capacitor of a synthesized network."""
    kind: str                  # 'inductor' | 'capacitor'
    value: float               # H or F
    reactance: float           # Ω at the design frequency
    connection: str            # 'series' | 'shunt'
    position: str

    @property
    def unit(self) -> str:
        return UNITS[self.kind]

    @property
    def display(self) -> str:
        return engineering_notation(self.value, self.unit)

    def to_dict(self) -> Dict:
        d = asdict(self)
        d['unit'] = self.unit
        d['display'] = self.display
        return d


@dataclass
class MatchingResult:
    """Outcome of one matching calculation. On error, numeric fields are None."""
    network: str
    topology: str
    frequency_hz: float
    source: Optional[Impedance] = None
    load: Optional[Impedance] = None
    components: List[ReactiveComponent] = field(default_factory=list)
    vswr: Optional[float] = None
    reflection_coefficient: Optional[float] = None
    return_loss_db: Optional[float] = None
    matching_efficiency: Optional[float] = None
    calculated_q: Optional[float] = None
    bandwidth_hz: Optional[float] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict:
        return {
            'network': self.network,
            'topology': self.topology,
            'frequency_hz': self.frequency_hz,
            'source': asdict(self.source) if self.source else None,
            'load': asdict(self.load) if self.load else None,
            'components': [c.to_dict() for c in self.components],
            'vswr': self.vswr,
            'reflection_coefficient': self.reflection_coefficient,
            'return_loss_db': self.return_loss_db,
            'matching_efficiency': self.matching_efficiency,
            'calculated_q': self.calculated_q,
            'bandwidth_hz': self.bandwidth_hz,
            'error': self.error,
        }


# ---------------------------------------------------------------------------
# Q helpers
# ---------------------------------------------------------------------------

def minimum_q(rs: float, rl: float) -> float:
    """Lowest Q any L/Pi/T network can have between two resistances."""
    return math.sqrt(max(rs, rl) / min(rs, rl) - 1)


def default_q(rs: float, rl: float) -> float:
    """Natural Q of the resistance ratio, or 1 when the ratio gives none."""
    try:
        q = minimum_q(rs, rl)
    except (ValueError, ZeroDivisionError):
        return 1.0
    if not math.isfinite(q) or q <= 0:
        return 1.0
    return q


def _check_q(q: float, q_min: float) -> None:
    # Tiny tolerance so Q == Qmin computed from the same inputs is accepted
    if q < q_min * (1 - 1e-12):
        raise InsufficientQError(q, q_min)


def _check_resistances(source: Impedance, load: Impedance) -> None:
    validate_impedance(source, 'Source impedance')
    validate_impedance(load, 'Load impedance')
    if source.resistance <= 0 or load.resistance <= 0:
        raise InvalidInputError(
            "Source and load resistance must both be positive to synthesize a network"
        )


def _same_resistance(source: Impedance, load: Impedance) -> bool:
    return math.isclose(source.resistance, load.resistance, rel_tol=1e-12)


def _already_matched(source: Impedance, load: Impedance) -> bool:
    scale = max(source.resistance, load.resistance)
    return (
        _same_resistance(source, load)
        and abs(source.reactance + load.reactance) <= _ZERO_TOL * scale
    )


# ---------------------------------------------------------------------------
# Element construction
# ---------------------------------------------------------------------------

def reactance_to_component(
    reactance: float,
    omega: float,
    connection: str,
    position: str,
) -> ReactiveComponent:
    """Turn a signed reactance into an inductor (X > 0) or capacitor (X < 0)."""
    if not math.isfinite(reactance):
        raise InvalidComponentError(f"{position}: reactance is not finite ({reactance})")
    if reactance == 0:
        raise DegenerateNetworkError(f"{position}: element would have zero reactance")

    if reactance > 0:
        kind = 'inductor'
        value = reactance / omega
    else:
        kind = 'capacitor'
        value = -1.0 / (omega * reactance)

    if not math.isfinite(value) or value <= 0:
        raise InvalidComponentError(f"{position}: invalid {kind} value {value}")

    return ReactiveComponent(
        kind=kind,
        value=value,
        reactance=reactance,
        connection=connection,
        position=position,
    )


def _series(x: float, omega: float, nominal: str, where: str) -> ReactiveComponent:
    position = f"Series {where}"
    kind = 'inductor' if x > 0 else 'capacitor'
    if kind != nominal:
        position += " (modified)"
    return reactance_to_component(x, omega, 'series', position)


def _shunt(b: float, omega: float, nominal: str, where: str) -> ReactiveComponent:
    """Shunt element from its susceptance B (capacitor when B > 0)."""
    if b == 0 or not math.isfinite(b):
        raise DegenerateNetworkError(
            f"Shunt {where}: susceptance is {b}, element would be an open circuit"
        )
    x = -1.0 / b
    position = f"Shunt {where}"
    kind = 'inductor' if x > 0 else 'capacitor'
    if kind != nominal:
        position += " (modified)"
    return reactance_to_component(x, omega, 'shunt', position)


def _intermediate(name: str, value: float) -> float:
    """Finite, non-zero intermediate or DegenerateNetworkError."""
    if not math.isfinite(value) or value == 0:
        raise DegenerateNetworkError(f"{name} is {value}; the impedances are out of numerical range")
    return value


def _numeric_guard(synthesizer):
    """Report float overflow or division by zero as a degenerate network."""
    @functools.wraps(synthesizer)
    def wrapper(*args, **kwargs):
        try:
            return synthesizer(*args, **kwargs)
        except ArithmeticError as e:
            raise DegenerateNetworkError(
                f"Numerical range exceeded during {synthesizer.__name__} synthesis: {e}"
            ) from e
    return wrapper


def _nominal(topology: str):
    """(series kind, shunt kind) for a topology."""
    if topology == 'lowpass':
        return 'inductor', 'capacitor'
    return 'capacitor', 'inductor'


def _validate_request(omega: float, topology: str) -> None:
    if not math.isfinite(omega) or omega <= 0:
        raise InvalidInputError("Frequency must be positive")
    if topology not in TOPOLOGIES:
        raise InvalidInputError(f"Unknown topology '{topology}'. Must be one of: {list(TOPOLOGIES)}")


# ---------------------------------------------------------------------------
# L network
# ---------------------------------------------------------------------------

@_numeric_guard
def l_network(
    source: Impedance,
    load: Impedance,
    frequency: float,
    topology: str = 'lowpass',
    q: Optional[float] = None,
) -> List[ReactiveComponent]:
    """
    Two-element L match.

    rs < rl: series arm at the source, shunt arm across the load.
    rs > rl: shunt arm across the source, series arm at the load.

    An element whose net reactance cancels to zero against the port
    reactance is left out, so one element can be returned.

    Raises:
        DegenerateNetworkError: rs == rl but the reactances do not cancel.
            An L network cannot change resistance level in that case; a
            single series reactance of −(xs + xl) is what is needed.
        InsufficientQError: a custom q below sqrt(Rmax/Rmin − 1).
    """
    omega = 2 * math.pi * frequency
    _validate_request(omega, topology)
    _check_resistances(source, load)

    if _already_matched(source, load):
        return []

    rs, xs = source.resistance, source.reactance
    rl, xl = load.resistance, load.reactance

    if _same_resistance(source, load):
        raise DegenerateNetworkError(
            "L network needs different source and load resistances; "
            f"equal resistances only need a series reactance of {-(xs + xl):.4g} Ω"
        )

    q_min = minimum_q(rs, rl)
    if q is not None:
        _check_q(q, q_min)

    sign = 1.0 if topology == 'lowpass' else -1.0
    nominal_series, nominal_shunt = _nominal(topology)
    scale = max(rs, rl)
    components: List[ReactiveComponent] = []

    if rs < rl:
        # Shunt across the load brings its real part down to rs
        yl = 1 / load.complex
        gl, bl = _intermediate('Load conductance', yl.real), yl.imag
        b_net = sign * math.sqrt(max(gl / rs - gl ** 2, 0.0))
        b_shunt = b_net - bl
        x_mid = -b_net / _intermediate('Mid-point admittance', gl ** 2 + b_net ** 2)
        x_series = -xs - x_mid

        if abs(x_series) > _ZERO_TOL * scale:
            components.append(_series(x_series, omega, nominal_series, 'at source'))
        if abs(b_shunt) * scale > _ZERO_TOL:
            components.append(_shunt(b_shunt, omega, nominal_shunt, 'at load'))
    else:
        # Series arm at the load lifts its parallel resistance up to match the source
        ys = 1 / source.complex
        gs, bs = _intermediate('Source conductance', ys.real), ys.imag
        x_net = sign * math.sqrt(max(rl / gs - rl ** 2, 0.0))
        x_series = x_net - xl
        b_mid = -x_net / _intermediate('Mid-point impedance', rl ** 2 + x_net ** 2)
        b_shunt = -bs - b_mid

        if abs(b_shunt) * scale > _ZERO_TOL:
            components.append(_shunt(b_shunt, omega, nominal_shunt, 'at source'))
        if abs(x_series) > _ZERO_TOL * scale:
            components.append(_series(x_series, omega, nominal_series, 'at load'))

    return components


# ---------------------------------------------------------------------------
# Pi and T networks
# ---------------------------------------------------------------------------

def _side_q(ratio: float) -> float:
    """sqrt(ratio − 1), clamping rounding noise just below zero."""
    value = ratio - 1
    if value < 0:
        if value > -1e-9:
            return 0.0
        raise DegenerateNetworkError(
            "Virtual resistance is outside the range reachable from this port"
        )
    return math.sqrt(value)


def _check_series_arm(x: float, scale: float, where: str) -> None:
    if abs(x) <= _ZERO_TOL * scale:
        raise DegenerateNetworkError(f"Series {where}: net reactance is zero")


def _check_shunt_arm(b: float, scale: float, where: str) -> None:
    if abs(b) * scale <= _ZERO_TOL:
        raise DegenerateNetworkError(f"Shunt {where}: net susceptance is zero")


@_numeric_guard
def pi_network(
    source: Impedance,
    load: Impedance,
    frequency: float,
    topology: str = 'lowpass',
    q: Optional[float] = None,
) -> List[ReactiveComponent]:
    """
    Shunt-series-shunt match through Rv = max(rs, rl) / (Q² + 1).

    Each shunt arm works against the parallel-equivalent resistance of its
    port, Rp = (r² + x²)/r, with partial Q = sqrt(Rp/Rv − 1).

    Raises:
        InsufficientQError: q below sqrt(Rmax/Rmin − 1).
        DegenerateNetworkError: an arm would need zero susceptance or zero
            reactance (typically Q exactly at the minimum).
    """
    omega = 2 * math.pi * frequency
    _validate_request(omega, topology)
    _check_resistances(source, load)

    rs, xs = source.resistance, source.reactance
    rl, xl = load.resistance, load.reactance

    if q is None:
        q = default_q(rs, rl) * ENHANCED_Q_FACTOR
    if q == 0 and _same_resistance(source, load):
        return []
    q_min = minimum_q(rs, rl)
    _check_q(q, q_min)

    rv = _intermediate('Virtual resistance', max(rs, rl) / (q ** 2 + 1))
    zs2 = _intermediate('|Zs|²', rs ** 2 + xs ** 2)
    zl2 = _intermediate('|Zl|²', rl ** 2 + xl ** 2)
    rps = zs2 / rs
    rpl = zl2 / rl
    q1 = _side_q(rps / rv)
    q2 = _side_q(rpl / rv)

    sign = 1.0 if topology == 'lowpass' else -1.0
    b1 = sign * q1 / rps + xs / zs2
    x2 = sign * (q1 + q2) * rv
    b3 = sign * q2 / rpl + xl / zl2

    scale = max(rs, rl)
    _check_shunt_arm(b1, scale, 'at source')
    _check_series_arm(x2, scale, 'arm')
    _check_shunt_arm(b3, scale, 'at load')

    nominal_series, nominal_shunt = _nominal(topology)
    return [
        _shunt(b1, omega, nominal_shunt, 'at source'),
        _series(x2, omega, nominal_series, 'arm'),
        _shunt(b3, omega, nominal_shunt, 'at load'),
    ]


@_numeric_guard
def t_network(
    source: Impedance,
    load: Impedance,
    frequency: float,
    topology: str = 'lowpass',
    q: Optional[float] = None,
) -> List[ReactiveComponent]:
    """
    Series-shunt-series match through Rv = min(rs, rl) · (Q² + 1).

    Partial Q per side is sqrt(Rv/r − 1). Series arms absorb the port
    reactance directly.
    """
    omega = 2 * math.pi * frequency
    _validate_request(omega, topology)
    _check_resistances(source, load)

    rs, xs = source.resistance, source.reactance
    rl, xl = load.resistance, load.reactance

    if q is None:
        q = default_q(rs, rl) * ENHANCED_Q_FACTOR
    if q == 0 and _same_resistance(source, load):
        return []
    q_min = minimum_q(rs, rl)
    _check_q(q, q_min)

    rv = _intermediate('Virtual resistance', min(rs, rl) * (q ** 2 + 1))
    q1 = _side_q(rv / rs)
    q2 = _side_q(rv / rl)

    sign = 1.0 if topology == 'lowpass' else -1.0
    x1 = sign * q1 * rs - xs
    b2 = sign * (q1 + q2) / rv
    x3 = sign * q2 * rl - xl

    scale = max(rs, rl)
    _check_series_arm(x1, scale, 'at source')
    _check_shunt_arm(b2, scale, 'arm')
    _check_series_arm(x3, scale, 'at load')

    nominal_series, nominal_shunt = _nominal(topology)
    return [
        _series(x1, omega, nominal_series, 'at source'),
        _shunt(b2, omega, nominal_shunt, 'arm'),
        _series(x3, omega, nominal_series, 'at load'),
    ]


_SYNTHESIZERS = {
    'L': l_network,
    'Pi': pi_network,
    'T': t_network,
}


def synthesize(
    source: Impedance,
    load: Impedance,
    frequency: float,
    network: str = 'L',
    topology: str = 'lowpass',
    q: Optional[float] = None,
) -> List[ReactiveComponent]:
    """Dispatch to the L, Pi or T synthesizer."""
    if network not in _SYNTHESIZERS:
        raise InvalidInputError(f"Unknown network '{network}'. Must be one of: {list(NETWORKS)}")
    return _SYNTHESIZERS[network](source, load, frequency, topology, q)


def snap_components(components: List[ReactiveComponent], series: str = 'E12') -> List[Dict]:
    """Nearest standard part for each element, alongside the ideal value."""
    snapped = []
    for comp in components:
        entry = comp.to_dict()
        entry['e_series_snapped'] = snap_component(comp.kind, comp.value, series)
        snapped.append(entry)
    return snapped


# ---------------------------------------------------------------------------
# Calculator front door
# ---------------------------------------------------------------------------

def calculate_matching(
    frequency_hz: float,
    source: Impedance,
    load: Impedance,
    network: str = 'L',
    topology: str = 'lowpass',
    q: Optional[float] = None,
    z0: float = DEFAULT_Z0,
    matching_position: str = 'load',
) -> MatchingResult:
    """
    Full impedance-matching calculation.

    `matching_position` picks which port is matched to the reference Z0:
    'load' designs from a Z0 source into `load`; 'source' designs from
    `source` into a Z0 load. The mismatch figures describe the matched
    port against Z0 before any network is added.

    `calculated_q` is the Q in use: the caller's q when given, otherwise
    Qmin for L networks and the enhanced default for Pi and T.

    Never raises for bad input, infeasible synthesis or inputs too extreme
    for float arithmetic; the failure is reported in `error` and every
    numeric field stays None.
    """
    result = MatchingResult(network=network, topology=topology, frequency_hz=frequency_hz)

    try:
        if not math.isfinite(frequency_hz) or frequency_hz <= 0:
            raise InvalidInputError("Frequency must be a positive number")
        validate_reference(z0)
        if matching_position not in MATCHING_POSITIONS:
            raise InvalidInputError(
                f"Unknown matching position '{matching_position}'. Must be one of: {list(MATCHING_POSITIONS)}"
            )
        if q is not None and (not math.isfinite(q) or q < 0):
            raise InvalidInputError("Q must be a non-negative number")

        reference = Impedance(z0, 0.0)
        if matching_position == 'load':
            src, dst, port = reference, load, load
        else:
            src, dst, port = source, reference, source

        components = synthesize(src, dst, frequency_hz, network, topology, q)

        gamma = min(reflection_coefficient(port, z0), 1.0)
        if q is not None:
            used_q = q
        elif network == 'L':
            used_q = minimum_q(src.resistance, dst.resistance)
        else:
            used_q = default_q(src.resistance, dst.resistance) * ENHANCED_Q_FACTOR
    except ArithmeticError as e:
        logger.debug("Matching overflowed (%s %s): %s", network, topology, e)
        result.error = f"Numerical range exceeded: {e}"
        return result
    except CalculationError as e:
        logger.debug("Matching failed (%s %s): %s", network, topology, e)
        result.error = str(e)
        return result

    result.source = src
    result.load = dst
    result.components = components
    result.reflection_coefficient = gamma
    result.vswr = vswr_from_gamma(gamma)
    result.return_loss_db = return_loss_db(gamma)
    result.matching_efficiency = mismatch_efficiency(gamma)
    result.calculated_q = used_q
    result.bandwidth_hz = bandwidth_estimate(frequency_hz, used_q)
    return result

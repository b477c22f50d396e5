"""
MEPCalc Compute Engine

Electrical installation and RF calculators: impedance matching network
synthesis, Smith chart projection, cable sizing against code-of-practice
tables, power factor correction, protection checks, lighting energy
checks and load balancing.

Every calculation is a deterministic function of its inputs.
"""

from mepcalc.errors import CalculationError, InvalidInputError, SynthesisError, TableLookupError
from mepcalc.impedance import Impedance, impedance_metrics, reflection_coefficient
from mepcalc.matching import MatchingResult, ReactiveComponent, calculate_matching, synthesize
from mepcalc.simulation import frequency_response, verify_network
from mepcalc.smith_chart import chart_grid, impedance_to_gamma, render_svg
from mepcalc.cable_resolver import CableConfig, available_layouts, available_methods
from mepcalc.cable_sizing import size_cable
from mepcalc.power_factor import calculate_power_factor_correction
from mepcalc.circuit_protection import check_circuit_protection
from mepcalc.fuse_operation import fuse_operation_time
from mepcalc.lighting import calculate_lpd, lighting_control_points
from mepcalc.load_balancing import calculate_load_balance
from mepcalc.export import prepare_export_data, export_csv, export_json, export_text

__version__ = "0.1.0"

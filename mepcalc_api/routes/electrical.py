"""Electrical calculator routes: power factor, protection, fuses, lighting, load balance."""

import logging

from fastapi import APIRouter, Request

from mepcalc.circuit_protection import check_circuit_protection
from mepcalc.errors import CalculationError
from mepcalc.fuse_operation import FUSE_TYPES, fuse_operation_time
from mepcalc.lighting import SPACE_TYPES, calculate_lpd, lighting_control_points
from mepcalc.load_balancing import calculate_load_balance
from mepcalc.power_factor import calculate_power_factor_correction
from mepcalc_api.models import (
    CircuitProtectionRequest,
    FuseTimeRequest,
    LightingControlRequest,
    LoadBalanceRequest,
    LPDRequest,
    PowerFactorRequest,
)
from mepcalc_api.services.results import (
    calculation_http_error,
    json_safe,
    record_calculation,
    unexpected_http_error,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _run(request: Request, body, calculator_type: str, calculator_name: str, calculate, *args):
    """Run an engine calculation, map its errors, and record it if asked."""
    try:
        result = json_safe(calculate(*args))
    except CalculationError as e:
        raise calculation_http_error(e, calculator_name)
    except Exception:
        raise unexpected_http_error(calculator_name)
    result["history_id"] = record_calculation(
        request, body, "Electrical", calculator_type, calculator_name, result
    )
    return result


@router.post("/electrical/power-factor")
async def power_factor(request: Request, body: PowerFactorRequest):
    """Capacitor bank size for power factor correction."""
    return _run(
        request, body, "power_factor", "Power Factor Correction",
        calculate_power_factor_correction,
        body.power_kw, body.initial_pf, body.target_pf, body.thd_percent,
    )


@router.post("/electrical/circuit-protection")
async def circuit_protection(request: Request, body: CircuitProtectionRequest):
    """Disconnection and thermal withstand check for a protected cable."""
    return _run(
        request, body, "circuit_protection", "Circuit Protection",
        check_circuit_protection,
        body.fault_level, body.device_rating, body.device_type, body.cable_csa,
        body.cable_length, body.disconnection_time, body.insulation,
    )


@router.post("/electrical/fuse-time")
async def fuse_time(request: Request, body: FuseTimeRequest):
    """Approximate fuse operating time."""
    result = _run(
        request, body, "fuse_operation", "Fuse Operation Time",
        fuse_operation_time,
        body.rated_current, body.actual_current, body.fuse_type,
    )
    result["fuse_type_name"] = FUSE_TYPES.get(body.fuse_type, body.fuse_type)
    return result


@router.post("/electrical/lighting-control")
async def lighting_control(request: Request, body: LightingControlRequest):
    """Minimum number of lighting control points."""
    return _run(
        request, body, "lighting_control", "Lighting Control Points",
        lighting_control_points,
        body.area, body.lpd,
    )


@router.post("/electrical/lpd")
async def lighting_power_density(request: Request, body: LPDRequest):
    """LPD compliance per space."""
    return _run(
        request, body, "lpd", "Lighting Power Density",
        calculate_lpd,
        [s.model_dump() for s in body.spaces],
        [lum.model_dump() for lum in body.luminaires],
    )


@router.get("/electrical/lpd/space-types")
async def space_types():
    """Space types with their maximum LPD and control requirement."""
    return {
        "space_types": [{"key": key, **info} for key, info in SPACE_TYPES.items()],
        "total": len(SPACE_TYPES),
    }


@router.post("/electrical/load-balance")
async def load_balance(request: Request, body: LoadBalanceRequest):
    """Three-phase unbalance check."""
    return _run(
        request, body, "load_balancing", "Load Balancing",
        calculate_load_balance,
        body.phase_a, body.phase_b, body.phase_c, body.limit_percent,
    )

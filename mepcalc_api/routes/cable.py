"""Cable sizing routes."""

from fastapi import APIRouter, Request

from mepcalc.cable_resolver import (
    METHODS,
    CableConfig,
    available_layouts,
    available_methods,
    method_rejection,
)
from mepcalc.cable_sizing import size_cable
from mepcalc.errors import CalculationError
from mepcalc_api.models import CableOptionsRequest, CableSizeRequest
from mepcalc_api.services.results import (
    calculation_http_error,
    json_safe,
    record_calculation,
    unexpected_http_error,
)

router = APIRouter()


@router.post("/cable/size")
async def cable_size(request: Request, body: CableSizeRequest):
    """Select a conductor size by ampacity, then voltage drop."""
    config = CableConfig(
        insulation=body.insulation,
        armoured=body.armoured,
        arrangement=body.arrangement,
        method=body.method,
        conductors=body.conductors,
        layout=body.layout,
        system=body.system,
    )
    try:
        result = json_safe(size_cable(
            config,
            design_current=body.design_current,
            length=body.length,
            voltage=body.voltage,
            ambient_temperature=body.ambient_temperature,
            circuits=body.circuits,
            max_voltage_drop_percent=body.max_voltage_drop_percent,
        ))
    except CalculationError as e:
        raise calculation_http_error(e, "Cable sizing")
    except Exception:
        raise unexpected_http_error("Cable sizing")

    result["history_id"] = record_calculation(
        request, body, "Electrical", "cable_sizing", "Cable Sizing", result
    )
    return result


@router.post("/cable/options")
async def cable_options(body: CableOptionsRequest):
    """Methods, conductor counts and layouts open to a partial configuration."""
    methods = available_methods(body.insulation, body.armoured, body.arrangement)
    rejected = {
        m: method_rejection(m, body.insulation, body.armoured, body.arrangement)
        for m in METHODS if m not in methods
    }
    conductors = [2, 3, 4] if body.arrangement == "multicore" else [2, 3]
    layouts = []
    if body.method and body.conductors:
        layouts = available_layouts(body.arrangement, body.method, body.conductors)
    return {
        "methods": methods,
        "rejected_methods": rejected,
        "conductors": conductors,
        "layouts": layouts,
    }

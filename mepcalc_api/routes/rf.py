"""RF routes: impedance matching, Smith chart and swept response."""

import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response

from mepcalc.errors import CalculationError
from mepcalc.impedance import impedance_metrics
from mepcalc.matching import calculate_matching, snap_components
from mepcalc.simulation import frequency_response, sweep_frequencies, verify_network
from mepcalc.smith_chart import chart_grid, matching_chart_points, project_impedances, render_svg
from mepcalc_api.models import (
    FrequencyResponseRequest,
    MatchingRequest,
    SmithChartRequest,
    SmithChartSvgRequest,
)
from mepcalc_api.services.results import (
    calculation_http_error,
    json_safe,
    record_calculation,
    unexpected_http_error,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _match(body: MatchingRequest):
    return calculate_matching(
        frequency_hz=body.frequency_mhz * 1e6,
        source=body.source_impedance.to_impedance(),
        load=body.load_impedance.to_impedance(),
        network=body.network.value,
        topology=body.topology.value,
        q=body.q,
        z0=body.z0,
        matching_position=body.matching_position.value,
    )


@router.post("/rf/impedance-matching")
async def impedance_matching(request: Request, body: MatchingRequest):
    """Synthesize an L, Pi or T matching network.

    Infeasible requests return 200 with `error` set and no components, so
    the client can show the reason next to the form.
    """
    try:
        result = _match(body)
        payload = result.to_dict()
        payload["frequency_mhz"] = body.frequency_mhz
        if result.ok:
            payload["components"] = snap_components(result.components, body.e_series.value)
            payload["verification"] = verify_network(
                result.source, result.load, result.components, result.frequency_hz
            )
            payload["smith_chart"] = project_impedances(
                matching_chart_points(result.source, result.load), body.z0
            )
        else:
            logger.warning("Matching network synthesis failed: %s", result.error)
        payload = json_safe(payload)
    except CalculationError as e:
        raise calculation_http_error(e, "Impedance matching")
    except Exception:
        raise unexpected_http_error("Impedance matching")

    if result.ok:
        payload["history_id"] = record_calculation(
            request, body, "RF", "impedance_matching", "RF Impedance Matching", payload
        )
    return payload


@router.post("/rf/smith-chart")
async def smith_chart(body: SmithChartRequest):
    """Project labelled impedances onto the Smith chart."""
    try:
        points = {p.label: p.to_impedance() for p in body.points}
        payload = {
            "z0": body.z0,
            "points": project_impedances(points, body.z0),
            "metrics": {label: impedance_metrics(z, body.z0) for label, z in points.items()},
        }
        if body.include_grid:
            payload["grid"] = chart_grid(body.grid_points)
        return json_safe(payload)
    except CalculationError as e:
        raise calculation_http_error(e, "Smith chart")
    except Exception:
        raise unexpected_http_error("Smith chart")


@router.post("/rf/smith-chart/svg")
async def smith_chart_svg(body: SmithChartSvgRequest):
    """Smith chart as a standalone SVG document."""
    try:
        points = {p.label: p.to_impedance() for p in body.points}
        svg = render_svg(points, z0=body.z0, size=body.size, title=body.title)
    except CalculationError as e:
        raise calculation_http_error(e, "Smith chart")
    except Exception:
        raise unexpected_http_error("Smith chart")
    return Response(content=svg, media_type="image/svg+xml")


@router.post("/rf/frequency-response")
async def rf_frequency_response(body: FrequencyResponseRequest):
    """Synthesize a network and sweep its return loss around the design frequency."""
    result = _match(body)
    if not result.ok:
        logger.warning("Frequency response synthesis failed: %s", result.error)
        raise HTTPException(status_code=400, detail=result.error)
    try:
        freqs = sweep_frequencies(result.frequency_hz, body.span_ratio, body.num_points)
        response = frequency_response(
            result.source, result.load, result.components, freqs, body.threshold_db
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        raise unexpected_http_error("Frequency response")
    response["components"] = [c.to_dict() for c in result.components]
    return json_safe(response)

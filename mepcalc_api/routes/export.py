"""Export route: a single calculation as CSV, JSON or text."""

from fastapi import APIRouter
from fastapi.responses import Response

from mepcalc.export import EXPORTERS, prepare_export_data, sanitize_filename
from mepcalc_api.models import ExportFormat, ExportRequest
from mepcalc_api.services.results import json_safe, unexpected_http_error

router = APIRouter()


@router.post("/export/{fmt}")
async def export_calculation(fmt: ExportFormat, body: ExportRequest):
    """Render a calculation for download."""
    try:
        data = prepare_export_data(
            body.title,
            body.discipline,
            json_safe(body.inputs),
            json_safe(body.results),
            calculator_name=body.calculator_name,
            project_name=body.project_name,
            notes=body.notes,
        )
        render, media_type = EXPORTERS[fmt.value]
        content = render(data)
    except Exception:
        raise unexpected_http_error("Export")

    filename = f"{sanitize_filename(data['title'])}.{fmt.value}"
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

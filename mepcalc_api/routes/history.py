"""Calculation history routes."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import Response

from mepcalc.errors import CalculationError
from mepcalc_api.models import HistoryImportRequest

logger = logging.getLogger(__name__)

router = APIRouter()


def _store(request: Request):
    return request.app.state.history_store


@router.get("/history")
async def list_history(request: Request, discipline: Optional[str] = Query(None)):
    """All saved calculations, newest first."""
    items = _store(request).list(discipline)
    return {"calculations": items, "total": len(items)}


@router.get("/history/summary")
async def history_summary(request: Request):
    return _store(request).summary()


@router.get("/history/favorites")
async def history_favorites(request: Request):
    items = _store(request).favorites()
    return {"calculations": items, "total": len(items)}


@router.get("/history/recent")
async def history_recent(request: Request, n: int = Query(10, ge=1, le=100)):
    items = _store(request).recent(n)
    return {"calculations": items, "total": len(items)}


@router.get("/history/search")
async def history_search(request: Request, q: str = Query(..., min_length=1, max_length=200)):
    """Case-insensitive search over name, discipline, project and notes."""
    items = _store(request).search(q)
    return {"calculations": items, "total": len(items)}


@router.get("/history/{calculation_id}")
async def get_history_entry(request: Request, calculation_id: str):
    entry = _store(request).get(calculation_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Calculation not found")
    return entry


@router.post("/history/{calculation_id}/favorite")
async def toggle_favorite(request: Request, calculation_id: str):
    entry = _store(request).toggle_favorite(calculation_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Calculation not found")
    return entry


@router.delete("/history/{calculation_id}")
async def delete_history_entry(request: Request, calculation_id: str):
    if not _store(request).delete(calculation_id):
        raise HTTPException(status_code=404, detail="Calculation not found")
    return {"deleted": calculation_id}


@router.delete("/history")
async def clear_history(request: Request):
    return {"deleted": _store(request).clear()}


@router.get("/history-export")
async def export_history(request: Request):
    """Download the full history as JSON."""
    return Response(
        content=_store(request).export_json(),
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="calculation_history.json"'},
    )


@router.post("/history-import")
async def import_history(request: Request, body: HistoryImportRequest):
    """Import calculations from a previous export."""
    try:
        count = _store(request).import_json(body.data)
    except CalculationError as e:
        logger.warning("History import rejected: %s", e)
        raise HTTPException(status_code=400, detail=str(e))
    return {"imported": count}

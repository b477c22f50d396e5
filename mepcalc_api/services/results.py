"""Helpers shared by the calculation routes: JSON-safe results, error mapping, history recording."""

import logging
import math
from dataclasses import asdict, is_dataclass
from typing import Any, Optional

import numpy as np
from fastapi import HTTPException, Request

from mepcalc.errors import CalculationError, TableLookupError

logger = logging.getLogger(__name__)


def json_safe(value: Any) -> Any:
    """Recursively convert a result to plain JSON types. inf and NaN become None."""
    if isinstance(value, dict):
        return {str(k): json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_safe(v) for v in value]
    if isinstance(value, np.ndarray):
        return [json_safe(v) for v in value.tolist()]
    if is_dataclass(value) and not isinstance(value, type):
        return json_safe(asdict(value))
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, (int, np.integer)):
        return int(value)
    if isinstance(value, (float, np.floating)):
        value = float(value)
        return value if math.isfinite(value) else None
    return value


def calculation_http_error(error: CalculationError, context: str) -> HTTPException:
    """400 carrying the engine message, plus the failing dimension for table misses."""
    logger.warning("%s failed: %s", context, error)
    if isinstance(error, TableLookupError):
        return HTTPException(status_code=400, detail={
            "message": str(error),
            "dimension": error.dimension,
            "path": list(error.path) if error.path else None,
        })
    return HTTPException(status_code=400, detail=str(error))


def unexpected_http_error(context: str) -> HTTPException:
    logger.exception("%s raised an unexpected error", context)
    return HTTPException(status_code=500, detail=f"{context} failed unexpectedly")


def record_calculation(
    request: Request,
    body,
    discipline: str,
    calculator_type: str,
    calculator_name: str,
    results: dict,
) -> Optional[str]:
    """
    Save to history when the request asks for it. Returns the history id.
    A failed write is logged and surfaces as a 500.
    """
    if not getattr(body, "save", False):
        return None
    store = request.app.state.history_store
    inputs = body.model_dump(mode="json", exclude={"save", "project_name", "notes"})
    try:
        entry = store.save(
            discipline=discipline,
            calculator_type=calculator_type,
            calculator_name=calculator_name,
            inputs=inputs,
            results=results,
            notes=body.notes,
            project_name=body.project_name,
        )
    except Exception:
        raise unexpected_http_error(f"Saving {calculator_name} to history")
    return entry["id"]

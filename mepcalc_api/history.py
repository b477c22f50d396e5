"""Persistent calculation history backed by SQLAlchemy."""

from __future__ import annotations

import json
import logging
import os
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, or_

from mepcalc.errors import InvalidInputError
from mepcalc_api.models_db import CalculationRecord

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 100
EXPORT_VERSION = 1

_REQUIRED_FIELDS = ("discipline", "calculator_type", "calculator_name", "inputs", "results")


def _parse_timestamp(value) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


class CalculationHistoryStore:
    """Saved calculations, newest first, capped at `limit` entries."""

    def __init__(self, session_factory=None, limit: Optional[int] = None):
        if session_factory is None:
            from mepcalc_api.database import SessionLocal
            session_factory = SessionLocal
        self._session_factory = session_factory
        if limit is None:
            limit = int(os.getenv("MEPCALC_HISTORY_LIMIT", DEFAULT_HISTORY_LIMIT))
        self.limit = limit

    def _to_dict(self, row: CalculationRecord) -> dict:
        return {
            "id": row.id,
            "discipline": row.discipline,
            "calculator_type": row.calculator_type,
            "calculator_name": row.calculator_name,
            "inputs": json.loads(row.inputs_json) if row.inputs_json else {},
            "results": json.loads(row.results_json) if row.results_json else {},
            "notes": row.notes,
            "project_name": row.project_name,
            "is_favorite": bool(row.is_favorite),
            "timestamp": row.created_at.isoformat() if row.created_at else None,
        }

    def _newest_first(self, query):
        return query.order_by(CalculationRecord.created_at.desc(), CalculationRecord.id.desc())

    def _prune(self, db) -> int:
        """Drop the oldest non-favorites, then the oldest overall, down to the limit."""
        excess = db.query(CalculationRecord).count() - self.limit
        if excess <= 0:
            return 0
        removed = 0
        for favorites_too in (False, True):
            query = db.query(CalculationRecord)
            if not favorites_too:
                query = query.filter(CalculationRecord.is_favorite.is_(False))
            rows = query.order_by(CalculationRecord.created_at.asc()).limit(excess - removed).all()
            for row in rows:
                db.delete(row)
            removed += len(rows)
            if removed >= excess:
                break
        logger.info("Pruned %d calculation(s) from history", removed)
        return removed

    def save(
        self,
        discipline: str,
        calculator_type: str,
        calculator_name: str,
        inputs: dict,
        results: dict,
        notes: Optional[str] = None,
        project_name: Optional[str] = None,
        is_favorite: bool = False,
        timestamp: Optional[datetime] = None,
    ) -> dict:
        db = self._session_factory()
        try:
            row = CalculationRecord(
                id=str(uuid.uuid4()),
                discipline=discipline,
                calculator_type=calculator_type,
                calculator_name=calculator_name,
                inputs_json=json.dumps(inputs, default=str),
                results_json=json.dumps(results, default=str),
                notes=notes or f"Calculation performed using {calculator_name}",
                project_name=project_name,
                is_favorite=is_favorite,
                created_at=timestamp or datetime.now(timezone.utc),
            )
            db.add(row)
            db.flush()
            saved = self._to_dict(row)
            self._prune(db)
            db.commit()
            return saved
        finally:
            db.close()

    def list(self, discipline: Optional[str] = None) -> list[dict]:
        db = self._session_factory()
        try:
            query = db.query(CalculationRecord)
            if discipline:
                query = query.filter(CalculationRecord.discipline == discipline)
            return [self._to_dict(r) for r in self._newest_first(query).all()]
        finally:
            db.close()

    def favorites(self) -> list[dict]:
        db = self._session_factory()
        try:
            query = db.query(CalculationRecord).filter(CalculationRecord.is_favorite.is_(True))
            return [self._to_dict(r) for r in self._newest_first(query).all()]
        finally:
            db.close()

    def get(self, calculation_id: str) -> Optional[dict]:
        db = self._session_factory()
        try:
            row = db.query(CalculationRecord).filter(CalculationRecord.id == calculation_id).first()
            return self._to_dict(row) if row else None
        finally:
            db.close()

    def recent(self, n: int = 10) -> list[dict]:
        db = self._session_factory()
        try:
            rows = self._newest_first(db.query(CalculationRecord)).limit(n).all()
            return [self._to_dict(r) for r in rows]
        finally:
            db.close()

    def search(self, q: str) -> list[dict]:
        """Case-insensitive match on name, discipline, project and notes."""
        pattern = f"%{q.strip()}%"
        db = self._session_factory()
        try:
            query = db.query(CalculationRecord).filter(or_(
                CalculationRecord.calculator_name.ilike(pattern),
                CalculationRecord.discipline.ilike(pattern),
                CalculationRecord.project_name.ilike(pattern),
                CalculationRecord.notes.ilike(pattern),
            ))
            return [self._to_dict(r) for r in self._newest_first(query).all()]
        finally:
            db.close()

    def summary(self) -> dict:
        db = self._session_factory()
        try:
            total = db.query(CalculationRecord).count()
            by_discipline = dict(
                db.query(CalculationRecord.discipline, func.count(CalculationRecord.id))
                .group_by(CalculationRecord.discipline)
                .all()
            )
            favorites = db.query(CalculationRecord).filter(CalculationRecord.is_favorite.is_(True)).count()
            oldest, newest = db.query(
                func.min(CalculationRecord.created_at), func.max(CalculationRecord.created_at)
            ).one()
            return {
                "total": total,
                "by_discipline": by_discipline,
                "favorites": favorites,
                "oldest": oldest.isoformat() if oldest else None,
                "newest": newest.isoformat() if newest else None,
                "limit": self.limit,
            }
        finally:
            db.close()

    def toggle_favorite(self, calculation_id: str) -> Optional[dict]:
        db = self._session_factory()
        try:
            row = db.query(CalculationRecord).filter(CalculationRecord.id == calculation_id).first()
            if not row:
                return None
            row.is_favorite = not row.is_favorite
            db.commit()
            db.refresh(row)
            return self._to_dict(row)
        finally:
            db.close()

    def delete(self, calculation_id: str) -> bool:
        db = self._session_factory()
        try:
            deleted = db.query(CalculationRecord).filter(CalculationRecord.id == calculation_id).delete()
            db.commit()
            return deleted > 0
        finally:
            db.close()

    def clear(self) -> int:
        db = self._session_factory()
        try:
            deleted = db.query(CalculationRecord).delete()
            db.commit()
            logger.info("Cleared %d calculation(s) from history", deleted)
            return deleted
        finally:
            db.close()

    def export_json(self) -> str:
        return json.dumps({
            "version": EXPORT_VERSION,
            "exported_at": datetime.now(timezone.utc).isoformat(),
            "calculations": self.list(),
        }, indent=2)

    def import_json(self, text: str) -> int:
        """
        Add calculations from an export. Accepts the export document or a
        bare list. Every entry is validated before anything is written.
        Returns the number imported.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidInputError(f"History import is not valid JSON: {e.msg}") from e

        entries = data.get("calculations") if isinstance(data, dict) else data
        if not isinstance(entries, list):
            raise InvalidInputError("History import must contain a list of calculations")

        for i, entry in enumerate(entries):
            if not isinstance(entry, dict):
                raise InvalidInputError(f"Entry {i} is not an object")
            missing = [f for f in _REQUIRED_FIELDS if f not in entry]
            if missing:
                raise InvalidInputError(f"Entry {i} is missing {', '.join(missing)}")
            if not isinstance(entry["inputs"], dict) or not isinstance(entry["results"], dict):
                raise InvalidInputError(f"Entry {i} inputs and results must be objects")

        for entry in entries:
            self.save(
                discipline=entry["discipline"],
                calculator_type=entry["calculator_type"],
                calculator_name=entry["calculator_name"],
                inputs=entry["inputs"],
                results=entry["results"],
                notes=entry.get("notes"),
                project_name=entry.get("project_name"),
                is_favorite=bool(entry.get("is_favorite", False)),
                timestamp=_parse_timestamp(entry.get("timestamp")),
            )
        logger.info("Imported %d calculation(s) into history", len(entries))
        return len(entries)

"""SQLAlchemy ORM models."""
import uuid
from datetime import datetime, timezone
from sqlalchemy import Boolean, Column, String, DateTime, Text, Index
from mepcalc_api.database import Base


class CalculationRecord(Base):
    """One saved calculator run. Inputs and results are stored as JSON text."""
    __tablename__ = "calculations"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    discipline = Column(String, nullable=False)
    calculator_type = Column(String, nullable=False)
    calculator_name = Column(String, nullable=False)
    inputs_json = Column(Text, nullable=False, default="{}")
    results_json = Column(Text, nullable=False, default="{}")
    notes = Column(Text, nullable=False, default="")
    project_name = Column(String, nullable=True)
    is_favorite = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_calculations_discipline", "discipline"),
        Index("ix_calculations_created_at", "created_at"),
    )

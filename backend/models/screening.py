"""Screening response model definitions."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.sql import func
from backend.database import Base


class ScreeningResponse(Base):
    """Represents one completed PHQ-9 or GAD-7 questionnaire."""
    __tablename__ = "screening_responses"

    id = Column(Integer, primary_key=True)
    profile_id = Column(Integer, ForeignKey("profiles.id"), nullable=False, index=True)
    screening_type = Column(String, nullable=False)
    responses = Column(JSON, nullable=False)
    total_score = Column(Integer, nullable=False)
    risk_level = Column(String, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

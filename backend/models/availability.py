"""Weekly availability rule model definitions."""

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, Time
from backend.database import Base


class AvailabilityRule(Base):
    """Represents a recurring weekly window in which a counselor takes bookings."""
    __tablename__ = "counselor_availability"
    __table_args__ = (
        Index('idx_availability_counselor_day', 'counselor_id', 'day_of_week'),
    )

    id = Column(Integer, primary_key=True)
    counselor_id = Column(Integer, ForeignKey("counselor_profiles.id"), nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

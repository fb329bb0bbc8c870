"""Time slot model definitions."""

from sqlalchemy import Column, Date, ForeignKey, Index, Integer, String, Time
from backend.database import Base

SLOT_AVAILABLE = 'available'
SLOT_BOOKED = 'booked'
SLOT_BLOCKED = 'blocked'
SLOT_STATUSES = (SLOT_AVAILABLE, SLOT_BOOKED, SLOT_BLOCKED)


class TimeSlot(Base):
    """Represents a dated, bookable slot generated from availability rules."""
    __tablename__ = "counselor_time_slots"
    __table_args__ = (
        Index('uq_counselor_time_slot', 'counselor_id', 'date', 'start_time', 'end_time', unique=True),
        Index('idx_time_slots_counselor_date', 'counselor_id', 'date', 'start_time'),
    )

    id = Column(Integer, primary_key=True)
    counselor_id = Column(Integer, ForeignKey("counselor_profiles.id"), nullable=False)
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    status = Column(String, nullable=False, default=SLOT_AVAILABLE)

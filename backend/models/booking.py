"""Booking model definitions."""

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.sql import func
from backend.database import Base

BOOKING_PENDING = 'pending'
BOOKING_CONFIRMED = 'confirmed'
BOOKING_COMPLETED = 'completed'
BOOKING_CANCELLED = 'cancelled'
BOOKING_STATUSES = (BOOKING_PENDING, BOOKING_CONFIRMED, BOOKING_COMPLETED, BOOKING_CANCELLED)

COMMUNICATION_MODES = ('video', 'audio', 'chat')

_ACTIVE_BOOKING = text("status <> 'cancelled'")


class Booking(Base):
    """Represents a student's claim on one counselor time slot."""
    __tablename__ = "counselor_bookings"
    __table_args__ = (
        CheckConstraint(
            '(student_id IS NULL) <> (anonymous_id IS NULL)',
            name='ck_counselor_bookings_identity',
        ),
        Index(
            'uq_counselor_bookings_active_slot',
            'time_slot_id',
            unique=True,
            sqlite_where=_ACTIVE_BOOKING,
            postgresql_where=_ACTIVE_BOOKING,
        ),
        Index('idx_bookings_counselor_appointment', 'counselor_id', 'appointment_at'),
    )

    id = Column(Integer, primary_key=True)
    student_id = Column(Integer, ForeignKey("profiles.id"), nullable=True)
    anonymous_id = Column(String, nullable=True)
    counselor_id = Column(Integer, ForeignKey("counselor_profiles.id"), nullable=False)
    time_slot_id = Column(Integer, ForeignKey("counselor_time_slots.id"), nullable=False)
    appointment_at = Column(DateTime, nullable=False)
    status = Column(String, nullable=False, default=BOOKING_PENDING)
    reason = Column(Text)
    communication_mode = Column(String, nullable=False, default='video')
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

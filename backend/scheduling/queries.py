"""Read-side helpers for slot and booking listings."""

from dataclasses import dataclass
from datetime import date, datetime, time

from sqlalchemy import func
from sqlalchemy.orm import Session

from backend.models.booking import BOOKING_COMPLETED, BOOKING_PENDING, Booking
from backend.models.time_slot import SLOT_AVAILABLE, TimeSlot


@dataclass(frozen=True)
class BookingSummary:
    total: int
    today: int
    pending: int
    completed: int


def list_slots(db: Session, counselor_id: int, start_date: date, end_date: date) -> list[TimeSlot]:
    return db.query(TimeSlot).filter(
        TimeSlot.counselor_id == counselor_id,
        TimeSlot.date >= start_date,
        TimeSlot.date <= end_date,
    ).order_by(TimeSlot.date.asc(), TimeSlot.start_time.asc()).all()


def list_counselor_bookings(db: Session, counselor_id: int) -> list[Booking]:
    return db.query(Booking).filter(
        Booking.counselor_id == counselor_id,
    ).order_by(Booking.appointment_at.asc(), Booking.id.asc()).all()


def list_student_bookings(db: Session, student_id: int) -> list[Booking]:
    return db.query(Booking).filter(
        Booking.student_id == student_id,
    ).order_by(Booking.appointment_at.asc(), Booking.id.asc()).all()


def available_counts(db: Session, counselor_id: int, today: date | None = None) -> dict[date, int]:
    today = today or date.today()
    rows = db.query(TimeSlot.date, func.count(TimeSlot.id)).filter(
        TimeSlot.counselor_id == counselor_id,
        TimeSlot.status == SLOT_AVAILABLE,
        TimeSlot.date >= today,
    ).group_by(TimeSlot.date).order_by(TimeSlot.date.asc()).all()

    return {slot_date: count for slot_date, count in rows}


def summarize_counselor_bookings(db: Session, counselor_id: int, today: date | None = None) -> BookingSummary:
    today = today or date.today()
    bookings = list_counselor_bookings(db, counselor_id)
    day_start = datetime.combine(today, time.min)
    day_end = datetime.combine(today, time.max)

    return BookingSummary(
        total=len(bookings),
        today=sum(1 for booking in bookings if day_start <= booking.appointment_at <= day_end),
        pending=sum(1 for booking in bookings if booking.status == BOOKING_PENDING),
        completed=sum(1 for booking in bookings if booking.status == BOOKING_COMPLETED),
    )

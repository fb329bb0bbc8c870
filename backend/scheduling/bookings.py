"""
Booking state machine.

Creating a booking claims its slot with a single conditional UPDATE
(available -> booked); when no row matches, the slot was taken or blocked in
the meantime and the booking is rejected. Status changes after creation are
made by the owning counselor along a fixed set of edges and are written the
same way, conditioned on the status the caller expects to leave.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from backend.core import config
from backend.core.errors import (
    InvalidTransitionError,
    NotFoundError,
    NotOwnerError,
    SlotBookedError,
    SlotUnavailableError,
)
from backend.models.booking import (
    BOOKING_CANCELLED,
    BOOKING_COMPLETED,
    BOOKING_CONFIRMED,
    BOOKING_PENDING,
    COMMUNICATION_MODES,
    Booking,
)
from backend.models.time_slot import SLOT_AVAILABLE, SLOT_BLOCKED, SLOT_BOOKED, TimeSlot

logger = logging.getLogger(__name__)

BOOKING_TRANSITIONS = {
    BOOKING_PENDING: {BOOKING_CONFIRMED, BOOKING_CANCELLED},
    BOOKING_CONFIRMED: {BOOKING_COMPLETED},
    BOOKING_COMPLETED: set(),
    BOOKING_CANCELLED: set(),
}


@dataclass(frozen=True)
class IdentifiedStudent:
    student_id: int


@dataclass(frozen=True)
class AnonymousStudent:
    display_id: str


BookingIdentity = IdentifiedStudent | AnonymousStudent


def make_anonymous_display_id() -> str:
    return f'Anonymous_{secrets.randbelow(1_000_000):06d}'


def booking_identity(booking: Booking) -> BookingIdentity:
    if booking.student_id is not None:
        return IdentifiedStudent(student_id=booking.student_id)
    return AnonymousStudent(display_id=booking.anonymous_id)


def get_slot(db: Session, slot_id: int) -> TimeSlot:
    slot = db.get(TimeSlot, slot_id)
    if slot is None:
        raise NotFoundError('Time slot not found.')
    return slot


def get_booking(db: Session, booking_id: int) -> Booking:
    booking = db.get(Booking, booking_id)
    if booking is None:
        raise NotFoundError('Booking not found.')
    return booking


def _claim_slot(db: Session, slot_id: int) -> bool:
    updated = db.query(TimeSlot).filter(
        TimeSlot.id == slot_id,
        TimeSlot.status == SLOT_AVAILABLE,
    ).update({TimeSlot.status: SLOT_BOOKED}, synchronize_session=False)
    return updated == 1


def book_slot(
    db: Session,
    slot_id: int,
    identity: BookingIdentity,
    communication_mode: str = 'video',
    reason: str | None = None,
    counselor_id: int | None = None,
    now: datetime | None = None,
) -> Booking:
    """Create a pending booking, atomically taking the slot out of circulation.

    ``counselor_id``, when given, must match the slot's counselor; it guards
    against a client submitting a slot picked from another counselor's page.
    Slots whose start time has already passed cannot be booked. Lost races
    are reported as ``SlotUnavailableError`` and are not retried.
    """
    if communication_mode not in COMMUNICATION_MODES:
        raise ValueError(f'Unsupported communication mode: {communication_mode}')

    now = now or datetime.now()
    slot = get_slot(db, slot_id)

    if counselor_id is not None and slot.counselor_id != counselor_id:
        raise NotFoundError('Time slot not found for this counselor.')

    appointment_at = datetime.combine(slot.date, slot.start_time)
    if appointment_at <= now or slot.status != SLOT_AVAILABLE:
        raise SlotUnavailableError()

    if isinstance(identity, IdentifiedStudent):
        student_id, anonymous_id = identity.student_id, None
    else:
        student_id, anonymous_id = None, identity.display_id

    try:
        if not _claim_slot(db, slot.id):
            db.rollback()
            logger.warning('Booking for slot %s lost the race; slot is no longer available.', slot_id)
            raise SlotUnavailableError()

        booking = Booking(
            student_id=student_id,
            anonymous_id=anonymous_id,
            counselor_id=slot.counselor_id,
            time_slot_id=slot.id,
            appointment_at=appointment_at,
            status=BOOKING_PENDING,
            reason=reason,
            communication_mode=communication_mode,
        )
        db.add(booking)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning('Booking for slot %s rejected by the active-booking constraint.', slot_id)
        raise SlotUnavailableError() from exc
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(booking)
    logger.info('Booking %s created for slot %s (counselor %s).', booking.id, slot_id, booking.counselor_id)
    return booking


def _release_slot(db: Session, slot_id: int) -> None:
    released = db.query(TimeSlot).filter(
        TimeSlot.id == slot_id,
        TimeSlot.status == SLOT_BOOKED,
    ).update({TimeSlot.status: SLOT_AVAILABLE}, synchronize_session=False)
    if not released:
        logger.warning('Slot %s was not booked when its booking was cancelled.', slot_id)


def transition_booking(
    db: Session,
    booking_id: int,
    target_status: str,
    actor_counselor_id: int,
    release_slot: bool | None = None,
) -> Booking:
    booking = get_booking(db, booking_id)

    if booking.counselor_id != actor_counselor_id:
        raise NotOwnerError('Only the counselor for this booking can update it.')

    current_status = booking.status
    if target_status not in BOOKING_TRANSITIONS.get(current_status, set()):
        raise InvalidTransitionError(f'Cannot move a booking from {current_status} to {target_status}.')

    if release_slot is None:
        release_slot = config.RELEASE_SLOT_ON_CANCEL

    try:
        updated = db.query(Booking).filter(
            Booking.id == booking_id,
            Booking.status == current_status,
        ).update({Booking.status: target_status}, synchronize_session=False)

        if not updated:
            db.rollback()
            raise InvalidTransitionError()

        if target_status == BOOKING_CANCELLED and release_slot:
            _release_slot(db, booking.time_slot_id)

        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(booking)
    logger.info('Booking %s moved from %s to %s.', booking_id, current_status, target_status)
    return booking


def _toggle_slot(db: Session, slot_id: int, actor_counselor_id: int, from_status: str, to_status: str) -> TimeSlot:
    slot = get_slot(db, slot_id)

    if slot.counselor_id != actor_counselor_id:
        raise NotOwnerError('Only the counselor who owns this slot can change it.')

    try:
        updated = db.query(TimeSlot).filter(
            TimeSlot.id == slot_id,
            TimeSlot.status == from_status,
        ).update({TimeSlot.status: to_status}, synchronize_session=False)

        if not updated:
            db.rollback()
            db.refresh(slot)
            if slot.status == SLOT_BOOKED:
                raise SlotBookedError()
            raise InvalidTransitionError(f'Slot is {slot.status}, expected {from_status}.')

        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(slot)
    logger.info('Slot %s moved from %s to %s.', slot_id, from_status, to_status)
    return slot


def block_slot(db: Session, slot_id: int, actor_counselor_id: int) -> TimeSlot:
    return _toggle_slot(db, slot_id, actor_counselor_id, SLOT_AVAILABLE, SLOT_BLOCKED)


def unblock_slot(db: Session, slot_id: int, actor_counselor_id: int) -> TimeSlot:
    return _toggle_slot(db, slot_id, actor_counselor_id, SLOT_BLOCKED, SLOT_AVAILABLE)

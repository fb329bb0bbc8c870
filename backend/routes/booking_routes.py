from datetime import datetime
from typing import Annotated, Literal, Union

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.dependencies import (
    get_current_counselor,
    get_current_profile,
    get_current_student,
    get_optional_profile,
)
from backend.database import get_db
from backend.models.booking import Booking
from backend.models.counselor import CounselorProfile
from backend.models.profile import ROLE_ADMIN, ROLE_STUDENT, Profile
from backend.routes.common import database_unavailable, ensure_database_ready
from backend.scheduling import bookings, counselors, queries

router = APIRouter(tags=['bookings'])

MAX_REASON_LENGTH = 1000
MAX_DISPLAY_ID_LENGTH = 40


class IdentifiedIdentityRequest(BaseModel):
    kind: Literal['identified'] = 'identified'


class AnonymousIdentityRequest(BaseModel):
    kind: Literal['anonymous']
    display_id: str | None = None

    @field_validator('display_id')
    @classmethod
    def validate_display_id(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if not normalized:
            return None

        if len(normalized) > MAX_DISPLAY_ID_LENGTH:
            raise ValueError(f'Display id must be {MAX_DISPLAY_ID_LENGTH} characters or fewer.')

        return normalized


class CreateBookingRequest(BaseModel):
    time_slot_id: int
    counselor_id: int | None = None
    identity: Annotated[
        Union[IdentifiedIdentityRequest, AnonymousIdentityRequest],
        Field(discriminator='kind'),
    ] = IdentifiedIdentityRequest()
    communication_mode: Literal['video', 'audio', 'chat'] = 'video'
    reason: str | None = None

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if not normalized:
            return None

        if len(normalized) > MAX_REASON_LENGTH:
            raise ValueError(f'Reason must be {MAX_REASON_LENGTH} characters or fewer.')

        return normalized


class UpdateBookingStatusRequest(BaseModel):
    status: Literal['confirmed', 'cancelled', 'completed']


class IdentifiedIdentityResponse(BaseModel):
    kind: Literal['identified'] = 'identified'
    student_id: int


class AnonymousIdentityResponse(BaseModel):
    kind: Literal['anonymous'] = 'anonymous'
    display_id: str


class BookingResponse(BaseModel):
    id: int
    counselor_id: int
    time_slot_id: int
    appointment_at: datetime
    status: str
    communication_mode: str
    reason: str | None = None
    student_name: str | None = None
    identity: Annotated[
        Union[IdentifiedIdentityResponse, AnonymousIdentityResponse],
        Field(discriminator='kind'),
    ]


class BookingSummaryResponse(BaseModel):
    total: int
    today: int
    pending: int
    completed: int


def to_booking_response(booking: Booking, student_name: str | None = None) -> BookingResponse:
    identity = bookings.booking_identity(booking)
    if isinstance(identity, bookings.IdentifiedStudent):
        identity_response = IdentifiedIdentityResponse(student_id=identity.student_id)
    else:
        identity_response = AnonymousIdentityResponse(display_id=identity.display_id)

    return BookingResponse(
        id=booking.id,
        counselor_id=booking.counselor_id,
        time_slot_id=booking.time_slot_id,
        appointment_at=booking.appointment_at,
        status=booking.status,
        communication_mode=booking.communication_mode,
        reason=booking.reason,
        student_name=student_name,
        identity=identity_response,
    )


def student_display_name(db: Session, booking: Booking) -> str:
    if booking.student_id is None:
        return booking.anonymous_id
    return counselors.get_profile(db, booking.student_id).display_name


def resolve_identity(
    data: CreateBookingRequest,
    profile: Profile | None,
) -> bookings.BookingIdentity:
    if profile is not None and profile.role != ROLE_STUDENT:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail='Only students can book counseling sessions.',
        )

    if isinstance(data.identity, AnonymousIdentityRequest):
        return bookings.AnonymousStudent(
            display_id=data.identity.display_id or bookings.make_anonymous_display_id(),
        )

    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail='Sign in to book with your campus identity, or book anonymously.',
        )

    return bookings.IdentifiedStudent(student_id=profile.id)


@router.post('', response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: CreateBookingRequest,
    profile: Profile | None = Depends(get_optional_profile),
    db: Session = Depends(get_db),
):
    identity = resolve_identity(data, profile)
    ensure_database_ready()

    try:
        booking = bookings.book_slot(
            db,
            slot_id=data.time_slot_id,
            identity=identity,
            communication_mode=data.communication_mode,
            reason=data.reason,
            counselor_id=data.counselor_id,
        )
        return to_booking_response(booking)
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc


@router.get('/mine', response_model=list[BookingResponse])
def list_my_bookings(
    student: Profile = Depends(get_current_student),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        return [to_booking_response(booking) for booking in queries.list_student_bookings(db, student.id)]
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.get('/counselor', response_model=list[BookingResponse])
def list_my_counselor_bookings(
    counselor: CounselorProfile = Depends(get_current_counselor),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        return [
            to_booking_response(booking, student_name=student_display_name(db, booking))
            for booking in queries.list_counselor_bookings(db, counselor.id)
        ]
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.get('/counselor/summary', response_model=BookingSummaryResponse)
def get_my_booking_summary(
    counselor: CounselorProfile = Depends(get_current_counselor),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        summary = queries.summarize_counselor_bookings(db, counselor.id)
        return BookingSummaryResponse(
            total=summary.total,
            today=summary.today,
            pending=summary.pending,
            completed=summary.completed,
        )
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.get('/{booking_id}', response_model=BookingResponse)
def get_booking(
    booking_id: int,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        booking = bookings.get_booking(db, booking_id)
        counselor = counselors.find_counselor_profile(db, profile.id)
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc

    is_student_owner = booking.student_id is not None and booking.student_id == profile.id
    is_counselor_owner = counselor is not None and counselor.id == booking.counselor_id
    if not (is_student_owner or is_counselor_owner or profile.role == ROLE_ADMIN):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail='You do not have access to this booking.',
        )

    return to_booking_response(booking)


@router.patch('/{booking_id}/status', response_model=BookingResponse)
def update_booking_status(
    booking_id: int,
    data: UpdateBookingStatusRequest,
    counselor: CounselorProfile = Depends(get_current_counselor),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        booking = bookings.transition_booking(db, booking_id, data.status, counselor.id)
        return to_booking_response(booking)
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc

from datetime import date, time, timedelta

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.dependencies import get_current_counselor
from backend.core import config
from backend.core.errors import NotOwnerError
from backend.database import get_db
from backend.models.counselor import CounselorProfile
from backend.routes.common import database_unavailable, ensure_database_ready
from backend.scheduling import bookings, counselors, queries, slots

router = APIRouter(tags=['availability'])

PUBLIC_SLOT_RANGE_DAYS = 7


class AvailabilityRuleRequest(BaseModel):
    day_of_week: int = Field(ge=0, le=6)
    start_time: time
    end_time: time
    is_active: bool = True

    @field_validator('start_time', 'end_time')
    @classmethod
    def validate_naive_time(cls, value: time) -> time:
        if value.tzinfo is not None:
            raise ValueError('Times must be local wall-clock times without a UTC offset.')
        return value


class ReplaceAvailabilityRequest(BaseModel):
    rules: list[AvailabilityRuleRequest]


class AvailabilityRuleResponse(BaseModel):
    id: int
    day_of_week: int
    start_time: time
    end_time: time
    is_active: bool

    class Config:
        from_attributes = True


class TimeSlotResponse(BaseModel):
    id: int
    counselor_id: int
    date: date
    start_time: time
    end_time: time
    status: str

    class Config:
        from_attributes = True


class GeneratedSlotsResponse(BaseModel):
    created: int
    slots: list[TimeSlotResponse]


class AvailableCountResponse(BaseModel):
    date: date
    available: int


def resolve_range(start_date: date | None, end_date: date | None, default_days: int) -> tuple[date, date]:
    start_date = start_date or date.today()
    end_date = end_date or start_date + timedelta(days=default_days - 1)
    return start_date, end_date


@router.get('/rules', response_model=list[AvailabilityRuleResponse])
def list_my_rules(
    counselor: CounselorProfile = Depends(get_current_counselor),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        return slots.list_rules(db, counselor.id)
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.put('/rules', response_model=list[AvailabilityRuleResponse])
def replace_my_rules(
    data: ReplaceAvailabilityRequest,
    counselor: CounselorProfile = Depends(get_current_counselor),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    rules = [
        slots.RuleInput(
            day_of_week=rule.day_of_week,
            start_time=rule.start_time,
            end_time=rule.end_time,
            is_active=rule.is_active,
        )
        for rule in data.rules
    ]

    try:
        return slots.replace_rules(db, counselor.id, rules)
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc


@router.get('/slots', response_model=list[TimeSlotResponse])
def list_my_slots(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    counselor: CounselorProfile = Depends(get_current_counselor),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    start_date, end_date = resolve_range(start_date, end_date, config.SLOT_HORIZON_DAYS)

    try:
        return queries.list_slots(db, counselor.id, start_date, end_date)
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.post('/slots/regenerate', response_model=GeneratedSlotsResponse)
def regenerate_my_slots(
    counselor: CounselorProfile = Depends(get_current_counselor),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        created = slots.generate_slots_for_horizon(db, counselor.id)
        return GeneratedSlotsResponse(
            created=len(created),
            slots=[TimeSlotResponse.model_validate(slot) for slot in created],
        )
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc


@router.post('/slots/{slot_id}/block', response_model=TimeSlotResponse)
def block_my_slot(
    slot_id: int,
    counselor: CounselorProfile = Depends(get_current_counselor),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        return bookings.block_slot(db, slot_id, counselor.id)
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.post('/slots/{slot_id}/unblock', response_model=TimeSlotResponse)
def unblock_my_slot(
    slot_id: int,
    counselor: CounselorProfile = Depends(get_current_counselor),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        return bookings.unblock_slot(db, slot_id, counselor.id)
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.get('/counselors/{counselor_id}/slots', response_model=list[TimeSlotResponse])
def list_counselor_slots(
    counselor_id: int,
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    start_date, end_date = resolve_range(start_date, end_date, PUBLIC_SLOT_RANGE_DAYS)

    try:
        counselors.get_counselor(db, counselor_id)
        return queries.list_slots(db, counselor_id, start_date, end_date)
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.post(
    '/counselors/{counselor_id}/slots/generate',
    response_model=GeneratedSlotsResponse,
    status_code=status.HTTP_201_CREATED,
)
def generate_counselor_slots(
    counselor_id: int,
    target_date: date = Query(...),
    counselor: CounselorProfile = Depends(get_current_counselor),
    db: Session = Depends(get_db),
):
    if counselor.id != counselor_id:
        raise NotOwnerError('Counselors can only generate their own slots.')

    ensure_database_ready()

    try:
        created = slots.generate_slots_for_date(db, counselor_id, target_date)
        return GeneratedSlotsResponse(
            created=len(created),
            slots=[TimeSlotResponse.model_validate(slot) for slot in created],
        )
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc


@router.get('/counselors/{counselor_id}/available-counts', response_model=list[AvailableCountResponse])
def list_available_counts(
    counselor_id: int,
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        counselors.get_counselor(db, counselor_id)
        counts = queries.available_counts(db, counselor_id)
        return [AvailableCountResponse(date=slot_date, available=count) for slot_date, count in counts.items()]
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc

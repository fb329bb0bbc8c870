from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.database import get_db
from backend.routes.common import database_unavailable, ensure_database_ready
from backend.scheduling import counselors

router = APIRouter(tags=['counselors'])


class CounselorResponse(BaseModel):
    id: int
    name: str
    specialization: list[str]
    languages: list[str]
    experience_years: int
    bio: str | None = None
    hourly_rate: int

    class Config:
        from_attributes = True


@router.get('', response_model=list[CounselorResponse])
def list_counselors(
    search: str | None = Query(default=None),
    specialization: str | None = Query(default=None),
    language: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        return counselors.list_counselors(db, search=search, specialization=specialization, language=language)
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.get('/{counselor_id}', response_model=CounselorResponse)
def get_counselor(counselor_id: int, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return counselors.get_counselor(db, counselor_id)
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc

from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.dependencies import get_current_profile, get_current_staff, get_optional_profile
from backend.database import get_db
from backend.models.profile import Profile
from backend.routes.common import database_unavailable, ensure_database_ready
from backend.scheduling.counselors import profile_summary
from backend.support import moderation, screening
from backend.support.chat import ChatMessage, ChatSupportClient

router = APIRouter(tags=['support'])

MAX_CHAT_MESSAGE_LENGTH = 4000
HIGH_RISK_LIST_LIMIT = 10


class ModerationRequest(BaseModel):
    content: str


class ModerationResponse(BaseModel):
    approved: bool
    needs_review: bool
    crisis_detected: bool
    flags: list[str]
    suggested_action: str
    confidence: float
    crisis_response: dict | None = None


class ChatMessageRequest(BaseModel):
    role: Literal['user', 'assistant']
    content: str

    @field_validator('content')
    @classmethod
    def validate_content(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Message content is required.')
        if len(normalized) > MAX_CHAT_MESSAGE_LENGTH:
            raise ValueError(f'Messages must be {MAX_CHAT_MESSAGE_LENGTH} characters or fewer.')
        return normalized


class ChatRequest(BaseModel):
    messages: list[ChatMessageRequest]


class ChatResponse(BaseModel):
    reply: str


class ScreeningRequest(BaseModel):
    screening_type: Literal['phq9', 'gad7']
    responses: list[int]


class ScreeningQuestionsResponse(BaseModel):
    screening_type: str
    questions: list[str]
    options: dict[int, str]


class ScreeningResultResponse(BaseModel):
    id: int
    profile_id: int
    screening_type: str
    total_score: int
    risk_level: str
    recommendations: list[str]
    created_at: datetime | None = None


def get_chat_client(request: Request) -> ChatSupportClient:
    return request.app.state.chat_client


def to_screening_response(record) -> ScreeningResultResponse:
    return ScreeningResultResponse(
        id=record.id,
        profile_id=record.profile_id,
        screening_type=record.screening_type,
        total_score=record.total_score,
        risk_level=record.risk_level,
        recommendations=screening.RECOMMENDATIONS[record.risk_level],
        created_at=record.created_at,
    )


@router.post('/moderate', response_model=ModerationResponse)
def moderate_content(
    data: ModerationRequest,
    profile: Profile | None = Depends(get_optional_profile),
):
    result = moderation.moderate(data.content)
    crisis = None
    if result.crisis_detected:
        user_name = profile_summary(profile).display_name if profile is not None else 'friend'
        crisis = moderation.crisis_response(user_name)

    return ModerationResponse(
        approved=result.approved,
        needs_review=result.needs_review,
        crisis_detected=result.crisis_detected,
        flags=result.flags,
        suggested_action=result.suggested_action,
        confidence=result.confidence,
        crisis_response=crisis,
    )


@router.get('/crisis-resources')
def get_crisis_resources():
    return moderation.crisis_resources()


@router.post('/chat', response_model=ChatResponse)
def chat(data: ChatRequest, chat_client: ChatSupportClient = Depends(get_chat_client)):
    if not data.messages or data.messages[-1].role != 'user':
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='The last message must come from the user.',
        )

    history = [ChatMessage(role=message.role, content=message.content) for message in data.messages]
    return ChatResponse(reply=chat_client.generate(history))


@router.get('/screenings/questions/{screening_type}', response_model=ScreeningQuestionsResponse)
def get_screening_questions(screening_type: Literal['phq9', 'gad7']):
    return ScreeningQuestionsResponse(
        screening_type=screening_type,
        questions=list(screening.QUESTIONS[screening_type]),
        options=screening.RESPONSE_OPTIONS,
    )


@router.post('/screenings', response_model=ScreeningResultResponse, status_code=status.HTTP_201_CREATED)
def submit_screening(
    data: ScreeningRequest,
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        record = screening.record_screening(db, profile.id, data.screening_type, data.responses)
        return to_screening_response(record)
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc


@router.get('/screenings/mine', response_model=list[ScreeningResultResponse])
def list_my_screenings(
    profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        return [to_screening_response(record) for record in screening.list_screenings(db, profile.id)]
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.get('/screenings/high-risk', response_model=list[ScreeningResultResponse])
def list_high_risk_screenings(
    staff: Profile = Depends(get_current_staff),
    db: Session = Depends(get_db),
):
    del staff
    ensure_database_ready()

    try:
        return [
            to_screening_response(record)
            for record in screening.list_high_risk_screenings(db, limit=HIGH_RISK_LIST_LIMIT)
        ]
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc

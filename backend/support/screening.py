"""PHQ-9 and GAD-7 scoring."""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from backend.core.errors import InvalidScreeningError
from backend.models.screening import ScreeningResponse

logger = logging.getLogger(__name__)

PHQ9 = 'phq9'
GAD7 = 'gad7'

PHQ9_QUESTIONS = (
    'Little interest or pleasure in doing things',
    'Feeling down, depressed, or hopeless',
    'Trouble falling or staying asleep, or sleeping too much',
    'Feeling tired or having little energy',
    'Poor appetite or overeating',
    'Feeling bad about yourself or that you are a failure or have let yourself or your family down',
    'Trouble concentrating on things, such as reading the newspaper or watching television',
    'Moving or speaking so slowly that other people could have noticed, or the opposite being so '
    'fidgety or restless that you have been moving around a lot more than usual',
    'Thoughts that you would be better off dead, or of hurting yourself',
)

GAD7_QUESTIONS = (
    'Feeling nervous, anxious, or on edge',
    'Not being able to stop or control worrying',
    'Worrying too much about different things',
    'Trouble relaxing',
    'Being so restless that it is hard to sit still',
    'Becoming easily annoyed or irritable',
    'Feeling afraid, as if something awful might happen',
)

QUESTIONS = {PHQ9: PHQ9_QUESTIONS, GAD7: GAD7_QUESTIONS}

RESPONSE_OPTIONS = {
    0: 'Not at all',
    1: 'Several days',
    2: 'More than half the days',
    3: 'Nearly every day',
}

# Highest total still counted as (low, medium); anything above is high.
RISK_THRESHOLDS = {PHQ9: (4, 14), GAD7: (4, 9)}

RECOMMENDATIONS = {
    'low': [
        'Continue with healthy lifestyle habits',
        'Practice regular mindfulness and self-care',
        'Stay connected with friends and family',
        'Maintain regular exercise and sleep schedule',
    ],
    'medium': [
        'Consider speaking with a counselor',
        'Explore our mental health resources',
        'Practice stress management techniques',
        'Monitor your symptoms and seek help if they worsen',
    ],
    'high': [
        'Book a session with a campus counselor as soon as possible',
        'Reach out to someone you trust today',
        'Call the KIRAN helpline (1800-599-0019) if you need to talk now',
        'Contact emergency services if you are in immediate danger',
    ],
}


@dataclass(frozen=True)
class ScreeningResult:
    screening_type: str
    total_score: int
    risk_level: str

    @property
    def recommendations(self) -> list[str]:
        return RECOMMENDATIONS[self.risk_level]


def risk_level_for(screening_type: str, total_score: int) -> str:
    low_max, medium_max = RISK_THRESHOLDS[screening_type]
    if total_score <= low_max:
        return 'low'
    if total_score <= medium_max:
        return 'medium'
    return 'high'


def score_screening(screening_type: str, responses: list[int]) -> ScreeningResult:
    if screening_type not in QUESTIONS:
        raise InvalidScreeningError(f'Unknown screening type: {screening_type}.')

    expected = len(QUESTIONS[screening_type])
    if len(responses) != expected:
        raise InvalidScreeningError(f'{screening_type.upper()} needs exactly {expected} answers.')

    if any(response not in RESPONSE_OPTIONS for response in responses):
        raise InvalidScreeningError('Each answer must be between 0 and 3.')

    total_score = sum(responses)
    return ScreeningResult(
        screening_type=screening_type,
        total_score=total_score,
        risk_level=risk_level_for(screening_type, total_score),
    )


def record_screening(db: Session, profile_id: int, screening_type: str, responses: list[int]) -> ScreeningResponse:
    result = score_screening(screening_type, responses)
    screening = ScreeningResponse(
        profile_id=profile_id,
        screening_type=result.screening_type,
        responses=list(responses),
        total_score=result.total_score,
        risk_level=result.risk_level,
    )
    db.add(screening)
    db.commit()
    db.refresh(screening)

    if result.risk_level == 'high':
        logger.warning('High-risk %s screening %s recorded for profile %s.', screening_type, screening.id, profile_id)
    return screening


def list_screenings(db: Session, profile_id: int) -> list[ScreeningResponse]:
    return db.query(ScreeningResponse).filter(
        ScreeningResponse.profile_id == profile_id,
    ).order_by(ScreeningResponse.created_at.desc(), ScreeningResponse.id.desc()).all()


def list_high_risk_screenings(db: Session, limit: int = 10) -> list[ScreeningResponse]:
    return db.query(ScreeningResponse).filter(
        ScreeningResponse.risk_level == 'high',
    ).order_by(ScreeningResponse.created_at.desc(), ScreeningResponse.id.desc()).limit(limit).all()

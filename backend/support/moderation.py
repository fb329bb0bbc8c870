"""Keyword-based content moderation and crisis detection for peer-support posts."""

from dataclasses import dataclass, field

CRISIS_KEYWORDS = (
    'suicide', 'kill myself', 'end it all', 'not worth living', 'better off dead',
    'self harm', 'cut myself', 'hurt myself', 'want to die', 'end my life',
    'hopeless', 'no point', 'give up', "can't go on", 'too much pain',
    'overdose', 'pills', 'jump off', 'hang myself', 'drown myself',
)

HARMFUL_KEYWORDS = (
    'hate', 'stupid', 'worthless', 'pathetic', 'loser', 'failure',
    'drugs', 'alcohol', 'substance', 'illegal', 'harmful substances',
)

SUPPORTIVE_KEYWORDS = (
    'help', 'support', 'understand', 'care', 'love', 'hope', 'better',
    'therapy', 'counselor', 'professional', 'medication', 'treatment',
)

MIN_CONTENT_LENGTH = 10
MAX_CONTENT_LENGTH = 2000
MAX_EXCLAMATION_MARKS = 5

HELPLINE_NAME = 'KIRAN Mental Health Helpline'
HELPLINE_NUMBER = '1800-599-0019'


@dataclass
class ModerationResult:
    approved: bool
    needs_review: bool
    crisis_detected: bool
    flags: list[str] = field(default_factory=list)
    suggested_action: str = 'approve'  # approve/review/escalate
    confidence: float = 0.8


def _matches(content: str, keywords: tuple[str, ...]) -> list[str]:
    return [keyword for keyword in keywords if keyword in content]


def moderate(text: str) -> ModerationResult:
    lowered = text.lower()

    if _matches(lowered, CRISIS_KEYWORDS):
        return ModerationResult(
            approved=False,
            needs_review=False,
            crisis_detected=True,
            flags=['crisis_detected'],
            suggested_action='escalate',
            confidence=0.95,
        )

    flags: list[str] = []
    confidence = 0.8

    if _matches(lowered, HARMFUL_KEYWORDS):
        flags.append('harmful_content')
        confidence = 0.7

    if len(text) < MIN_CONTENT_LENGTH:
        flags.append('too_short')

    if len(text) > MAX_CONTENT_LENGTH:
        flags.append('too_long')

    if text.count('!') > MAX_EXCLAMATION_MARKS or text.isupper():
        flags.append('aggressive_tone')

    if flags:
        return ModerationResult(
            approved=False,
            needs_review=True,
            crisis_detected=False,
            flags=flags,
            suggested_action='review',
            confidence=confidence,
        )

    if _matches(lowered, SUPPORTIVE_KEYWORDS):
        confidence = 0.9

    return ModerationResult(
        approved=True,
        needs_review=False,
        crisis_detected=False,
        flags=flags,
        suggested_action='approve',
        confidence=confidence,
    )


def crisis_resources() -> dict:
    return {
        'helpline': {'number': HELPLINE_NUMBER, 'name': HELPLINE_NAME, 'available': '24/7'},
        'emergency': {'number': '108', 'name': 'Emergency Services', 'available': '24/7'},
        'campus': {'service': 'Campus Counseling Center', 'action': 'Book immediate appointment'},
    }


def crisis_response(user_name: str) -> dict:
    return {
        'title': 'We Care About You',
        'message': (
            f"Hi {user_name}, we noticed you might be going through a difficult time. "
            "You're not alone, and there are people who want to help."
        ),
        'resources': crisis_resources(),
        'actions': [
            f'Call KIRAN Helpline: {HELPLINE_NUMBER}',
            'Contact campus counseling center',
            'Reach out to a trusted friend or family member',
            'Visit the nearest emergency room if in immediate danger',
        ],
    }

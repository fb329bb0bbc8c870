import pytest

from backend.support.moderation import HELPLINE_NUMBER, crisis_resources, crisis_response, moderate


@pytest.mark.parametrize(
    'text',
    [
        'I feel like I want to die after these exams',
        'Everything is HOPELESS lately',
        'thinking about taking all my pills tonight',
    ],
)
def test_crisis_language_is_escalated(text: str) -> None:
    result = moderate(text)

    assert result.crisis_detected is True
    assert result.approved is False
    assert result.suggested_action == 'escalate'
    assert result.flags == ['crisis_detected']
    assert result.confidence == 0.95


def test_supportive_post_is_approved_with_high_confidence() -> None:
    result = moderate('Talking to a counselor this week really made things easier for me.')

    assert result.approved is True
    assert result.needs_review is False
    assert result.flags == []
    assert result.confidence == 0.9


def test_neutral_post_is_approved() -> None:
    result = moderate('Does anyone know when the library opens on Sunday?')

    assert result.approved is True
    assert result.confidence == 0.8


@pytest.mark.parametrize(
    ('text', 'expected_flags'),
    [
        ('You are so stupid for posting this', ['harmful_content']),
        ('ok', ['too_short']),
        ('x' * 2001, ['too_long']),
        ('WHY DOES NOBODY ANSWER MY QUESTIONS', ['aggressive_tone']),
        ('Why is nobody answering!!!!!!', ['aggressive_tone']),
    ],
)
def test_problem_posts_are_sent_for_review(text: str, expected_flags: list[str]) -> None:
    result = moderate(text)

    assert result.approved is False
    assert result.needs_review is True
    assert result.crisis_detected is False
    assert result.suggested_action == 'review'
    assert result.flags == expected_flags


def test_harmful_content_lowers_confidence() -> None:
    assert moderate('You are so stupid for posting this').confidence == 0.7


def test_crisis_response_is_personalised_and_lists_helpline() -> None:
    response = crisis_response('Sam')

    assert response['message'].startswith('Hi Sam,')
    assert f'Call KIRAN Helpline: {HELPLINE_NUMBER}' in response['actions']
    assert response['resources'] == crisis_resources()
    assert crisis_resources()['helpline']['number'] == HELPLINE_NUMBER

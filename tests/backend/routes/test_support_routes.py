from types import SimpleNamespace

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from backend.core.errors import InvalidScreeningError
from backend.models.profile import ROLE_COUNSELOR
from backend.routes.support_routes import (
    ChatMessageRequest,
    ChatRequest,
    ModerationRequest,
    ScreeningRequest,
    chat,
    get_chat_client,
    get_screening_questions,
    list_high_risk_screenings,
    list_my_screenings,
    moderate_content,
    submit_screening,
)
from backend.support.chat import FALLBACK_REPLY, ChatSupportClient


@pytest.fixture(autouse=True)
def skip_schema_check(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr('backend.routes.support_routes.ensure_database_ready', lambda: None)


class EchoChatClient:
    def __init__(self) -> None:
        self.history = None

    def generate(self, history):
        self.history = history
        return f'You said: {history[-1].content}'


def test_moderate_content_attaches_crisis_response_for_signed_in_user(make_profile) -> None:
    profile = make_profile('sam@campus.edu', display_name='Sam')

    response = moderate_content(data=ModerationRequest(content='I just want to die'), profile=profile)

    assert response.crisis_detected is True
    assert response.crisis_response['message'].startswith('Hi Sam,')


def test_moderate_content_greets_anonymous_posters_as_friend() -> None:
    response = moderate_content(data=ModerationRequest(content='there is no point anymore'), profile=None)

    assert response.crisis_response['message'].startswith('Hi friend,')


def test_moderate_content_without_crisis_has_no_crisis_response() -> None:
    response = moderate_content(data=ModerationRequest(content='Study group at the library tonight?'), profile=None)

    assert response.approved is True
    assert response.crisis_response is None


def test_chat_message_request_rejects_blank_content() -> None:
    with pytest.raises(ValidationError):
        ChatMessageRequest(role='user', content='   ')


def test_chat_passes_history_to_client() -> None:
    client = EchoChatClient()
    data = ChatRequest(messages=[
        ChatMessageRequest(role='user', content='Hi'),
        ChatMessageRequest(role='assistant', content='Hello! How are you feeling?'),
        ChatMessageRequest(role='user', content=' Stressed about finals '),
    ])

    response = chat(data=data, chat_client=client)

    assert response.reply == 'You said: Stressed about finals'
    assert [message.role for message in client.history] == ['user', 'assistant', 'user']


def test_chat_requires_last_message_from_user() -> None:
    data = ChatRequest(messages=[ChatMessageRequest(role='assistant', content='Hello!')])

    with pytest.raises(HTTPException) as exception_info:
        chat(data=data, chat_client=EchoChatClient())

    assert exception_info.value.status_code == 400


def test_chat_uses_fallback_without_configured_client() -> None:
    data = ChatRequest(messages=[ChatMessageRequest(role='user', content='Hi')])

    assert chat(data=data, chat_client=ChatSupportClient(client=None)).reply == FALLBACK_REPLY


def test_get_chat_client_reads_application_state() -> None:
    client = ChatSupportClient(client=None)
    request = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(chat_client=client)))

    assert get_chat_client(request) is client


def test_get_screening_questions_lists_gad7() -> None:
    response = get_screening_questions(screening_type='gad7')

    assert len(response.questions) == 7
    assert response.options[3] == 'Nearly every day'


def test_submit_and_list_screenings(db, make_profile) -> None:
    student = make_profile('student@campus.edu')
    counselor = make_profile('counselor@campus.edu', role=ROLE_COUNSELOR)

    result = submit_screening(
        data=ScreeningRequest(screening_type='phq9', responses=[2] * 9),
        profile=student,
        db=db,
    )

    assert result.total_score == 18
    assert result.risk_level == 'high'
    assert [item.id for item in list_my_screenings(profile=student, db=db)] == [result.id]
    assert [item.id for item in list_high_risk_screenings(staff=counselor, db=db)] == [result.id]


def test_submit_screening_rejects_wrong_answer_count(db, make_profile) -> None:
    student = make_profile('student@campus.edu')

    with pytest.raises(InvalidScreeningError) as exception_info:
        submit_screening(data=ScreeningRequest(screening_type='gad7', responses=[1, 1]), profile=student, db=db)

    assert exception_info.value.status_code == 422

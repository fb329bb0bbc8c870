import json

import pytest
from fastapi import FastAPI

from backend.core.errors import (
    AppError,
    InvalidTransitionError,
    NotFoundError,
    SlotBookedError,
    SlotUnavailableError,
    register_exception_handlers,
)


@pytest.mark.parametrize(
    ('error', 'status_code', 'code'),
    [
        (SlotUnavailableError(), 409, 'SLOT_UNAVAILABLE'),
        (InvalidTransitionError(), 409, 'STALE_STATE'),
        (SlotBookedError(), 409, 'SLOT_BOOKED'),
        (NotFoundError('Booking not found.'), 404, 'NOT_FOUND'),
    ],
)
def test_to_response_renders_code_and_status(error: AppError, status_code: int, code: str) -> None:
    response = error.to_response()
    body = json.loads(response.body)

    assert response.status_code == status_code
    assert body['success'] is False
    assert body['code'] == code
    assert body['message'] == error.message


def test_default_message_used_when_none_given() -> None:
    assert SlotUnavailableError().message == SlotUnavailableError.default_message
    assert NotFoundError('Booking not found.').message == 'Booking not found.'


def test_slot_booked_is_a_stale_state_error() -> None:
    assert isinstance(SlotBookedError(), InvalidTransitionError)


def test_register_exception_handlers_adds_app_error_handler() -> None:
    app = FastAPI()

    register_exception_handlers(app)

    assert AppError in app.exception_handlers

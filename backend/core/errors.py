"""Error taxonomy shared by the scheduling and support layers.

Each error carries a stable ``code`` so clients can tell a lost booking race
(re-select a slot) apart from stale state (refresh) and from generic failures
(retry).
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    success: bool = False
    code: str
    message: str


class AppError(Exception):
    status_code = 400
    code = 'BAD_REQUEST'
    default_message = 'The request could not be processed.'
    log_level = logging.WARNING

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self) -> JSONResponse:
        payload = ErrorResponse(code=self.code, message=self.message)
        return JSONResponse(status_code=self.status_code, content=payload.model_dump())


class NotFoundError(AppError):
    status_code = 404
    code = 'NOT_FOUND'
    default_message = 'Resource not found.'
    log_level = logging.INFO


class NotOwnerError(AppError):
    status_code = 403
    code = 'FORBIDDEN'
    default_message = 'Only the owning counselor can change this resource.'


class InvalidAvailabilityRulesError(AppError):
    status_code = 422
    code = 'INVALID_AVAILABILITY_RULES'
    default_message = 'Availability rules are invalid.'


class SlotUnavailableError(AppError):
    status_code = 409
    code = 'SLOT_UNAVAILABLE'
    default_message = 'This time slot is no longer available. Please choose another slot.'


class InvalidTransitionError(AppError):
    status_code = 409
    code = 'STALE_STATE'
    default_message = 'This item has changed since it was loaded. Please refresh and try again.'


class SlotBookedError(InvalidTransitionError):
    code = 'SLOT_BOOKED'
    default_message = 'Booked slots cannot be blocked or unblocked.'


class InvalidScreeningError(AppError):
    status_code = 422
    code = 'INVALID_SCREENING'
    default_message = 'Screening responses are invalid.'


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        logger.log(exc.log_level, '%s: %s | path=%s', exc.code, exc.message, request.url.path)
        return exc.to_response()

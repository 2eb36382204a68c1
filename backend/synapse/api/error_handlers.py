"""Error Handlers — every failure leaves the API as a SynapseError envelope.

Invariants:
    - SynapseError → its own http_status and to_response() envelope
    - Business-rule failures (4xx) logged at WARNING, infrastructure (5xx) at ERROR
    - RequestValidationError → RequestValidationFailedError (400, field-level details)
    - Any other exception → UnexpectedError (opaque 500); the original is logged only

Design Decisions:
    - Foreign exceptions are converted, then rendered by the one domain path, so
      clients parse a single envelope shape whatever went wrong
    - Kept out of main.py so the app module stays a wiring file
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from synapse.core.errors import (
    RequestValidationFailedError, SynapseError, UnexpectedError,
)

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SynapseError, _handle_synapse_error)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(Exception, _handle_unexpected_error)


def _render(request: Request, exc: SynapseError) -> JSONResponse:
    level = logging.WARNING if exc.http_status < 500 else logging.ERROR
    logger.log(
        level,
        f"{exc.code}: {exc.message}",
        extra={
            "error_code": exc.code,
            "path": request.url.path,
            "user_id": exc.context.user_id,
        },
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def _handle_synapse_error(request: Request, exc: SynapseError) -> JSONResponse:
    return _render(request, exc)


async def _handle_validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(loc) for loc in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
    return _render(request, RequestValidationFailedError(details))


async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled {type(exc).__name__} on {request.url.path}", exc_info=exc)
    return _render(request, UnexpectedError())

"""
Error envelope handlers.

Every error body has the shape ``{"detail": {"message", "code", "details"}}``
so clients can switch on ``code`` regardless of where the error came from.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .core.exceptions import DomainException, ValidationException

logger = logging.getLogger(__name__)


def _envelope(exc: DomainException) -> JSONResponse:
    http_exc = exc.to_http_exception()
    return JSONResponse(
        content={"detail": jsonable_encoder(http_exc.detail)},
        status_code=http_exc.status_code,
        headers=http_exc.headers,
    )


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        # Malformed bodies are reported like any other validation failure
        errors = jsonable_encoder(exc.errors())
        return _envelope(
            ValidationException("Request validation failed", details={"errors": errors})
        )

    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
        logger.info("Unhandled %s on %s: %s", type(exc).__name__, request.url.path, exc.message)
        return _envelope(exc)

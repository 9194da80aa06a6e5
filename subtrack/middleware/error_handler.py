import logging

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from subtrack.errors import HttpError
from subtrack.schemas.envelope import create_failure, envelope_response

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI):
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        sentry_sdk.capture_exception(exc)
        return envelope_response(create_failure("Internal server error", 500))

    @app.exception_handler(HttpError)
    async def http_error_handler(request: Request, exc: HttpError):
        return envelope_response(create_failure(exc.message, exc.status_code))

    @app.exception_handler(StarletteHTTPException)
    async def starlette_http_exception_handler(request: Request, exc: StarletteHTTPException):
        return envelope_response(create_failure(str(exc.detail), exc.status_code))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        messages = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ]
        return envelope_response(
            create_failure(f"Validation failed: {', '.join(messages)}", 400)
        )

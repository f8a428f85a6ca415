"""
Centralized exception-to-response mapping for the user API.
"""
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from atrium.modules.users.api.schemas import error_response
from atrium.modules.users.domain.errors import (
    ProtectedUserError,
    UserAlreadyExistsError,
    UserNotFoundError,
    UserServiceError,
    ValidationError,
)

logger = logging.getLogger("atrium.users.errors")


def _field_name(loc) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path", "header")]
    return ".".join(parts) or "body"


async def handle_request_validation(request: Request, exc: RequestValidationError):
    errors = {}
    for error in exc.errors():
        errors.setdefault(_field_name(error.get("loc", ())), error.get("msg", "Invalid value"))
    return error_response(400, "Validation failed", errors)


async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


async def handle_protected_user(request: Request, exc: ProtectedUserError):
    return error_response(403, str(exc))


async def handle_user_not_found(request: Request, exc: UserNotFoundError):
    return error_response(404, str(exc))


async def handle_bad_request(request: Request, exc: UserServiceError):
    return error_response(400, str(exc))


async def handle_service_error(request: Request, exc: UserServiceError):
    message = str(exc)
    if "not found" in message.lower():
        return error_response(404, message)
    logger.error(f"Unhandled service error on {request.method} {request.url.path}: {message}", exc_info=exc)
    return error_response(500, f"An internal error occurred: {message}")


async def handle_unexpected(request: Request, exc: Exception):
    logger.error(f"Unexpected error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return error_response(500, "An unexpected server error occurred. Please contact support.")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(ProtectedUserError, handle_protected_user)
    app.add_exception_handler(UserNotFoundError, handle_user_not_found)
    app.add_exception_handler(ValidationError, handle_bad_request)
    app.add_exception_handler(UserAlreadyExistsError, handle_bad_request)
    app.add_exception_handler(UserServiceError, handle_service_error)
    app.add_exception_handler(Exception, handle_unexpected)

"""
Mapping of service error kinds and key verdicts to HTTP responses.

This is the only place transport status codes are decided.
"""
import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from key_manager.core.errors import ErrorKind, ServiceError
from key_manager.services.key_validator import KeyVerdict

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorKind.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorKind.DUPLICATE_EMAIL: status.HTTP_409_CONFLICT,
    ErrorKind.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.MISSING_CREDENTIAL: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.INVALID_CREDENTIAL: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.STORAGE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

VERDICT_STATUS = {
    KeyVerdict.VALID: status.HTTP_200_OK,
    KeyVerdict.KEY_NOT_FOUND: status.HTTP_401_UNAUTHORIZED,
    KeyVerdict.KEY_STATUS_INVALID: status.HTTP_403_FORBIDDEN,
    KeyVerdict.KEY_EXPIRED: status.HTTP_403_FORBIDDEN,
}

_BEARER_CHALLENGE_KINDS = {ErrorKind.MISSING_CREDENTIAL, ErrorKind.INVALID_CREDENTIAL}


class ServiceErrorException(Exception):
    """Raised from dependencies, which cannot return a response directly."""

    def __init__(self, error: ServiceError):
        super().__init__(error.message)
        self.error = error


def error_response(error: ServiceError) -> JSONResponse:
    """Render a ServiceError as {"error", "message"} with its mapped status."""
    headers = None
    if error.kind in _BEARER_CHALLENGE_KINDS:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=ERROR_STATUS.get(error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR),
        content={"error": error.kind.value, "message": error.message},
        headers=headers,
    )


async def service_error_handler(request: Request, exc: ServiceErrorException) -> JSONResponse:
    return error_response(exc.error)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed or missing request bodies as 400 ValidationError."""
    problems = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    message = "Invalid request body"
    if problems:
        message = f"{message}: {'; '.join(problems)}"
    logger.debug(f"Request validation failed for {request.method} {request.url.path}: {message}")
    return error_response(ServiceError(kind=ErrorKind.VALIDATION_ERROR, message=message))

"""API error types and their JSON rendering."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

CREDENTIALS_MESSAGE = "The provided credentials are incorrect."

# Request locations stripped from validation error paths
_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


class APIError(Exception):
    """Base class for errors rendered as structured JSON responses."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Server error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_content(self) -> dict:
        return {"detail": self.message}

    @property
    def headers(self) -> dict[str, str] | None:
        return None


class ValidationError(APIError):
    """Malformed, missing or conflicting input.

    Rendered as a map of field name to the list of messages for that field.
    """

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    message = "The given data was invalid."

    def __init__(self, errors: dict[str, list[str]]):
        self.errors = errors
        super().__init__()

    def to_content(self) -> dict:
        return self.errors


class CredentialsError(ValidationError):
    """Login failure that does not reveal which half of the credentials was wrong."""

    def __init__(self):
        super().__init__({"credentials": [CREDENTIALS_MESSAGE]})


class AuthenticationError(APIError):
    """Missing, malformed or revoked bearer token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Unauthenticated."

    @property
    def headers(self) -> dict[str, str]:
        return {"WWW-Authenticate": "Bearer"}


class AuthorizationError(APIError):
    """Authenticated caller does not own the requested resource."""

    status_code = status.HTTP_403_FORBIDDEN
    message = "Not authorized"


class NotFoundError(APIError):
    """Referenced resource does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


def format_validation_errors(errors: list[dict]) -> dict[str, list[str]]:
    """Collapse pydantic error entries into a field -> messages map."""
    result: dict[str, list[str]] = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        field = loc[0] if loc else "body"
        message = error.get("msg", "Invalid value.").removeprefix("Value error, ")
        messages = result.setdefault(field, [])
        if message not in messages:
            messages.append(message)
    return result


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_content(),
        headers=exc.headers,
    )


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = format_validation_errors(exc.errors())
    logger.debug(f"Rejected {request.method} {request.url.path}: {sorted(errors)}")
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=errors)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the JSON error handlers to the application."""
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)

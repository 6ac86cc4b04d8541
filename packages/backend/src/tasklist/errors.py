"""Error taxonomy shared by the services and the HTTP layer.

Every caller-visible failure is an AppError carrying a stable machine
code and an HTTP status. The app factory renders them as
{"error": code}; nothing else about the failure leaves the process.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

import structlog

logger = structlog.get_logger()


class AppError(Exception):
    """Base class for errors that map to a structured API response."""

    code = "server_error"
    status_code = 500

    def __init__(self, message: str = "", code: Optional[str] = None):
        super().__init__(message or self.__class__.__name__)
        if code:
            self.code = code


class InvalidInput(AppError):
    """Malformed or missing request fields. Raised before any store access."""

    code = "invalid_input"
    status_code = 400


class InvalidCredentials(AppError):
    """Login failed. Deliberately the same for unknown email and wrong password."""

    code = "invalid_credentials"
    status_code = 401


class Unauthorized(AppError):
    """Missing, malformed, expired or badly signed bearer token."""

    code = "unauthorized"
    status_code = 401


class NotFound(AppError):
    code = "not_found"
    status_code = 404


class DuplicateEmail(AppError):
    """An account with this (normalized) email already exists."""

    code = "email_exists"
    status_code = 409


class ServerError(AppError):
    """Opaque failure of a collaborator (usually the store)."""


class StoreUnavailable(Exception):
    """Raised by storage backends when the store itself fails.

    Not an AppError: services log it and re-raise ServerError so that
    driver messages never reach a caller.
    """


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """Log a StoreUnavailable and surface it as an opaque ServerError."""
    try:
        yield
    except StoreUnavailable as e:
        logger.error("store.unavailable", operation=operation, error=str(e))
        raise ServerError("Storage unavailable") from e

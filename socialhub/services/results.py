"""Error taxonomy and structured results returned by core operations.

Core operations raise :class:`ActionError` subclasses. The operation boundary
(:func:`action_boundary` / :func:`run_action`) turns them into an
:class:`ActionResult` so callers always receive ``success`` plus a message
instead of an exception. Routers map failed results onto HTTP status codes.
"""
from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Callable, ParamSpec

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

P = ParamSpec("P")


class ErrorKind(StrEnum):
    UNAUTHENTICATED = "unauthenticated"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    INTERNAL = "internal"


_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.VALIDATION: 422,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class ActionError(RuntimeError):
    """Base class for failures a caller is allowed to see."""

    kind: ErrorKind = ErrorKind.INTERNAL
    default_message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class UnauthenticatedError(ActionError):
    kind = ErrorKind.UNAUTHENTICATED
    default_message = "You must be logged in"


class NotFoundError(ActionError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Not found"


class ForbiddenError(ActionError):
    kind = ErrorKind.FORBIDDEN
    default_message = "You are not allowed to do that"


class ConflictError(ActionError):
    kind = ErrorKind.CONFLICT
    default_message = "Already exists"


class ValidationError(ActionError):
    kind = ErrorKind.VALIDATION
    default_message = "Invalid input"

    def __init__(self, message: str | None = None, *, errors: dict[str, list[str]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or {}


@dataclass(slots=True)
class ActionResult:
    """Outcome of a mutation, shaped like the JSON returned to clients."""

    success: bool
    message: str | None = None
    is_active: bool | None = None
    count: int | None = None
    data: Any = None
    error: ErrorKind | None = None
    errors: dict[str, list[str]] | None = None

    @classmethod
    def ok(cls, message: str | None = None, **fields: Any) -> "ActionResult":
        return cls(success=True, message=message, **fields)

    @classmethod
    def failure(cls, exc: ActionError) -> "ActionResult":
        errors = exc.errors if isinstance(exc, ValidationError) and exc.errors else None
        return cls(success=False, message=exc.message, error=exc.kind, errors=errors)

    @property
    def status_code(self) -> int:
        if self.success:
            return status.HTTP_200_OK
        return _STATUS_BY_KIND.get(self.error or ErrorKind.INTERNAL, status.HTTP_500_INTERNAL_SERVER_ERROR)


def run_action(operation: Callable[[], ActionResult], *, failure_message: str) -> ActionResult:
    """Execute ``operation`` and convert every failure into an :class:`ActionResult`."""

    try:
        return operation()
    except ActionError as exc:
        logger.info("Action refused (%s): %s", exc.kind, exc.message)
        return ActionResult.failure(exc)
    except SQLAlchemyError:
        logger.exception("Database error: %s", failure_message)
        return ActionResult(success=False, message=failure_message, error=ErrorKind.INTERNAL)


def action_boundary(failure_message: str) -> Callable[[Callable[P, ActionResult]], Callable[P, ActionResult]]:
    """Decorate a core mutation so it never raises to its caller."""

    def decorator(func: Callable[P, ActionResult]) -> Callable[P, ActionResult]:
        @functools.wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> ActionResult:
            return run_action(lambda: func(*args, **kwargs), failure_message=failure_message)

        return wrapper

    return decorator


def http_error(exc: ActionError) -> HTTPException:
    """Translate a domain error raised by a read operation into an ``HTTPException``."""

    return HTTPException(status_code=_STATUS_BY_KIND[exc.kind], detail=exc.message)


__all__ = [
    "ErrorKind",
    "ActionError",
    "UnauthenticatedError",
    "NotFoundError",
    "ForbiddenError",
    "ConflictError",
    "ValidationError",
    "ActionResult",
    "run_action",
    "action_boundary",
    "http_error",
]

"""Domain level exceptions and helpers for the record store."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, TypeVar

from sqlalchemy import exc as sa_exc

__all__ = [
    "AppError",
    "StoreError",
    "NotFoundError",
    "ConstraintViolation",
    "ValidationError",
    "ensure_found",
    "handle_sqlalchemy_errors",
]

T = TypeVar("T")


class AppError(Exception):
    """Base class for application specific errors."""


class StoreError(AppError):
    """Raised when the record store or one of its transactions fails."""


class NotFoundError(StoreError):
    """Raised when a record could not be located."""


class ConstraintViolation(StoreError):
    """Raised when a write breaks a constraint declared by the store schema."""


class ValidationError(AppError):
    """Raised when input does not have the expected shape."""


@dataclass(slots=True)
class _EntityContext:
    """Internal helper describing the entity for error messages."""

    entity: str | None = None

    def format(self, message: str) -> str:
        if self.entity:
            return f"{self.entity}: {message}"
        return message


def ensure_found(record: T | None, *, entity: str, identifier: str) -> T:
    """Ensure a record exists, otherwise raise :class:`NotFoundError`."""

    if record is None:
        raise NotFoundError(f"{entity} '{identifier}' not found")
    return record


def _translate_sqlalchemy_error(exc: Exception, *, context: _EntityContext) -> StoreError:
    if isinstance(exc, sa_exc.IntegrityError):
        return ConstraintViolation(context.format("integrity constraint violated"))
    if isinstance(exc, sa_exc.DBAPIError):
        return StoreError(context.format("database operation failed"))
    return StoreError(context.format(str(exc)))


@contextmanager
def handle_sqlalchemy_errors(*, entity: str | None = None) -> Iterator[None]:
    """Translate SQLAlchemy errors into domain specific ones."""

    context = _EntityContext(entity)
    try:
        yield
    except sa_exc.SQLAlchemyError as exc:
        raise _translate_sqlalchemy_error(exc, context=context) from exc

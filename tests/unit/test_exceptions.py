from __future__ import annotations

import pytest
from sqlalchemy import exc as sa_exc

from src.userhub.api.errors import from_app_error
from src.userhub.exceptions import (
    AppError,
    ConstraintViolation,
    NotFoundError,
    StoreError,
    ValidationError,
    ensure_found,
    handle_sqlalchemy_errors,
)


def test_integrity_error_becomes_constraint_violation() -> None:
    with pytest.raises(ConstraintViolation) as excinfo:
        with handle_sqlalchemy_errors(entity="user"):
            raise sa_exc.IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

    assert str(excinfo.value) == "user: integrity constraint violated"
    assert isinstance(excinfo.value.__cause__, sa_exc.IntegrityError)


def test_operational_error_becomes_store_error() -> None:
    with pytest.raises(StoreError) as excinfo:
        with handle_sqlalchemy_errors(entity="transaction"):
            raise sa_exc.OperationalError("SELECT 1", {}, Exception("database is locked"))

    assert not isinstance(excinfo.value, ConstraintViolation)
    assert str(excinfo.value) == "transaction: database operation failed"


def test_domain_errors_pass_through_untouched() -> None:
    with pytest.raises(NotFoundError):
        with handle_sqlalchemy_errors():
            raise NotFoundError("user 'x' not found")


def test_ensure_found() -> None:
    record = object()
    assert ensure_found(record, entity="user", identifier="1") is record
    with pytest.raises(NotFoundError):
        ensure_found(None, entity="user", identifier="1")


@pytest.mark.parametrize(
    ("error", "status_code", "code"),
    [
        (NotFoundError("missing"), 404, "not_found"),
        (ConstraintViolation("dup"), 409, "constraint_violation"),
        (ValidationError("bad"), 422, "validation_error"),
        (StoreError("down"), 503, "store_error"),
        (AppError("other"), 500, "internal_error"),
    ],
)
def test_http_mapping(error: AppError, status_code: int, code: str) -> None:
    api_error = from_app_error(error)

    assert api_error.status_code == status_code
    assert api_error.code == code

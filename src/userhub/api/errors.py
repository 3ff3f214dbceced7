"""Error envelopes and exception handlers for the HTTP layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

import structlog
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..exceptions import (
    AppError,
    ConstraintViolation,
    NotFoundError,
    StoreError,
    ValidationError,
)

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class ApiError(Exception):
    """Structured application-level error for HTTP handlers."""

    status_code: int
    code: str
    message: str
    headers: Mapping[str, str] | None = None
    details: object | None = None

    def to_response(self) -> JSONResponse:
        """Materialise the error into a ``JSONResponse`` instance."""

        body: dict[str, object] = {"code": self.code, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return JSONResponse(
            status_code=self.status_code,
            content=jsonable_encoder({"error": body}),
            headers=dict(self.headers or {}),
        )


def from_app_error(exc: AppError) -> ApiError:
    """Map the domain taxonomy onto HTTP status codes."""

    if isinstance(exc, NotFoundError):
        return ApiError(status.HTTP_404_NOT_FOUND, "not_found", str(exc))
    if isinstance(exc, ConstraintViolation):
        return ApiError(status.HTTP_409_CONFLICT, "constraint_violation", str(exc))
    if isinstance(exc, ValidationError):
        return ApiError(422, "validation_error", str(exc))
    if isinstance(exc, StoreError):
        return ApiError(status.HTTP_503_SERVICE_UNAVAILABLE, "store_error", str(exc))
    return ApiError(status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_error", "internal error")


async def api_error_handler(_: Request, exc: ApiError) -> JSONResponse:
    """Convert :class:`ApiError` exceptions into JSON payloads."""

    return exc.to_response()


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    error = from_app_error(exc)
    log = logger.warning if error.status_code < 500 else logger.error
    log(
        "http.request.failed",
        method=request.method,
        path=request.url.path,
        status=error.status_code,
        code=error.code,
        reason=str(exc),
    )
    return error.to_response()


async def request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"loc": list(item.get("loc", ())), "msg": item.get("msg", "")}
        for item in exc.errors()
    ]
    return ApiError(
        422,
        "validation_error",
        "request body or parameters are malformed",
        details=details,
    ).to_response()


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]


__all__ = [
    "ApiError",
    "api_error_handler",
    "app_error_handler",
    "from_app_error",
    "register_error_handlers",
    "request_validation_handler",
]

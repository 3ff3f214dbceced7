"""HTTP layer helpers."""

from .errors import ApiError, register_error_handlers

__all__ = ["ApiError", "register_error_handlers"]

"""Infrastructure adapters and transactional contracts for userhub."""

from __future__ import annotations

from .unit_of_work import SqlAlchemyUnitOfWork, UnitOfWork

__all__ = ["SqlAlchemyUnitOfWork", "UnitOfWork"]

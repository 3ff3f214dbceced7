"""Dependency wiring helpers."""

from fastapi import FastAPI

from .config import AppConfig
from .transactions.transactions_api import router as transactions_router
from .transactions.transactions_service import TransactionalWriteUnit
from .users.users_api import router as users_router
from .users.users_repository import UserRepository


def include_routers(app: FastAPI, config: AppConfig) -> None:
    """Mount module routers and attach the store handles they share."""
    app.state.config = config
    app.state.user_repo = UserRepository(config.session_factory)
    app.state.write_unit = TransactionalWriteUnit(config.session_factory)

    app.include_router(users_router)
    app.include_router(transactions_router)

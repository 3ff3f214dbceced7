"""Application configuration builder."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .db.db_init import init_db

DEFAULT_PORT = 3001


@dataclass(slots=True)
class AppConfig:
    database_url: str
    engine: Engine
    session_factory: sessionmaker[Session]
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    log_level: str = "INFO"
    deactivate_email_domain: str = "@email.com"


def _int_env(name: str, default: int | None) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def build_engine(
    database_url: str,
    *,
    isolation_level: str | None = None,
    statement_timeout_ms: int | None = None,
) -> Engine:
    """Create the process-wide engine with dialect specific connect args."""
    engine_kwargs: dict[str, Any] = {"future": True, "pool_pre_ping": True}
    connect_args: dict[str, Any] = {}

    if database_url.startswith("sqlite"):
        # request handlers run in a threadpool
        connect_args["check_same_thread"] = False
    elif database_url.startswith("postgresql") and statement_timeout_ms:
        connect_args["options"] = f"-c statement_timeout={statement_timeout_ms}"

    if connect_args:
        engine_kwargs["connect_args"] = connect_args
    if isolation_level:
        engine_kwargs["isolation_level"] = isolation_level
    return create_engine(database_url, **engine_kwargs)


def load_config() -> AppConfig:
    """Load configuration from environment (SQLite by default)."""
    load_dotenv(".env.local")
    load_dotenv(".env", override=False)

    port = _int_env("PORT", DEFAULT_PORT) or DEFAULT_PORT
    statement_timeout_ms = _int_env("DATABASE_STATEMENT_TIMEOUT_MS", None)

    database_url = os.getenv("DATABASE_URL", "sqlite:///userhub.db")
    engine = build_engine(
        database_url,
        isolation_level=os.getenv("DATABASE_ISOLATION_LEVEL") or None,
        statement_timeout_ms=statement_timeout_ms,
    )
    session_factory: sessionmaker[Session] = sessionmaker(bind=engine, expire_on_commit=False)

    init_db(engine)

    return AppConfig(
        database_url=database_url,
        engine=engine,
        session_factory=session_factory,
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        deactivate_email_domain=os.getenv("DEACTIVATE_EMAIL_DOMAIN", "@email.com"),
    )

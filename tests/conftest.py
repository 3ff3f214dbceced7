from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:  # pragma: no cover - test helper
    sys.path.append(str(ROOT))

from src.userhub.config import AppConfig, build_engine  # noqa: E402
from src.userhub.db.db_init import init_db  # noqa: E402
from src.userhub.main import create_app  # noqa: E402
from src.userhub.users.users_repository import UserRepository  # noqa: E402


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'userhub.db'}"


@pytest.fixture
def engine(database_url: str) -> Iterator[Engine]:
    engine = build_engine(database_url)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def user_repo(session_factory: sessionmaker[Session]) -> UserRepository:
    return UserRepository(session_factory)


@pytest.fixture
def app_config(
    database_url: str, engine: Engine, session_factory: sessionmaker[Session]
) -> AppConfig:
    return AppConfig(
        database_url=database_url,
        engine=engine,
        session_factory=session_factory,
        port=3001,
        deactivate_email_domain="@email.com",
    )


@pytest.fixture
def client(app_config: AppConfig) -> Iterator[TestClient]:
    with TestClient(create_app(app_config)) as test_client:
        yield test_client


class CountFailsSession(Session):
    """Session whose scalar reads fail the way a dropped connection does."""

    def scalar(self, *args, **kwargs):  # type: ignore[override]
        raise sa_exc.OperationalError("SELECT count(user.id)", {}, Exception("disk I/O error"))


@pytest.fixture
def count_fails_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, class_=CountFailsSession, expire_on_commit=False)

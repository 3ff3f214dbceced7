"""Smoke tests ensuring ``create_app`` wires every route and store handle."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.userhub.config import AppConfig
from src.userhub.main import create_app
from src.userhub.transactions.transactions_service import TransactionalWriteUnit
from src.userhub.users.users_repository import UserRepository

pytestmark = pytest.mark.unit


def _collect_route_signatures(app: FastAPI) -> set[tuple[str, str]]:
    """Return (path, method) pairs published in the OpenAPI schema."""

    signatures: set[tuple[str, str]] = set()
    for path, operations in app.openapi()["paths"].items():
        for method in operations:
            signatures.add((path, method.upper()))
    return signatures


def test_create_app_exposes_expected_routes(app_config: AppConfig) -> None:
    app = create_app(app_config)

    assert isinstance(app.state.user_repo, UserRepository)
    assert isinstance(app.state.write_unit, TransactionalWriteUnit)
    expected = {
        ("/users", "POST"),
        ("/users/batch", "POST"),
        ("/users", "GET"),
        ("/users/{user_id}", "GET"),
        ("/users/stats", "GET"),
        ("/users/{user_id}", "PUT"),
        ("/users/batch", "PUT"),
        ("/users/{user_id}", "DELETE"),
        ("/transactions", "GET"),
        ("/transactions", "POST"),
        ("/users/join", "GET"),
    }
    assert expected <= _collect_route_signatures(app)


def test_static_user_paths_take_precedence_over_id(client: TestClient) -> None:
    stats = client.get("/users/stats")
    join = client.get("/users/join")
    batch = client.put("/users/batch")

    assert stats.status_code == 200
    assert "stats" in stats.json()
    assert join.status_code == 200
    assert join.json() == {"users": []}
    assert batch.status_code == 200
    assert batch.json() == {"totalUsers": {"matchedCount": 0}}

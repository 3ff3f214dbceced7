from __future__ import annotations

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from src.userhub.db.db_models import ProfileModel


def _create(client: TestClient, name: str, email: str) -> str:
    response = client.post("/users", json={"name": name, "email": email})
    assert response.status_code == 200
    return response.json()["user"]["id"]


def test_create_user_returns_id_and_read_back(client: TestClient) -> None:
    user_id = _create(client, "Ada", "ada@email.com")

    response = client.get(f"/users/{user_id}")

    assert response.status_code == 200
    payload = response.json()["users"]
    assert payload["id"] == user_id
    assert payload["name"] == "Ada"
    assert payload["email"] == "ada@email.com"
    assert payload["isActive"] is True


def test_create_user_with_duplicate_email_returns_409(client: TestClient) -> None:
    _create(client, "Ada", "ada@email.com")

    response = client.post("/users", json={"name": "Ada", "email": "ada@email.com"})

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "constraint_violation"


def test_create_user_with_malformed_body_returns_422(client: TestClient) -> None:
    response = client.post("/users", json={"name": "Ada"})

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "validation_error"
    assert any("email" in item["loc"] for item in error["details"])


def test_batch_create_skips_duplicates(client: TestClient) -> None:
    _create(client, "Ada", "ada@email.com")

    response = client.post(
        "/users/batch",
        json={
            "users": [
                {"name": "Ada", "email": "ada@email.com"},
                {"name": "Grace", "email": "grace@email.com"},
            ]
        },
    )

    assert response.status_code == 200
    assert response.json() == {"user": {"insertedCount": 1}}
    assert len(client.get("/users").json()["users"]) == 2


def test_list_users(client: TestClient) -> None:
    _create(client, "Ada", "ada@email.com")
    _create(client, "Grace", "grace@email.com")

    response = client.get("/users")

    assert response.status_code == 200
    names = sorted(user["name"] for user in response.json()["users"])
    assert names == ["Ada", "Grace"]


def test_get_missing_user_returns_404(client: TestClient) -> None:
    response = client.get("/users/does-not-exist")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "not_found"


def test_stats_aggregates_ages(client: TestClient) -> None:
    for index, age in enumerate((20, 30, 40)):
        user_id = _create(client, f"User {index}", f"user{index}@email.com")
        assert client.put(f"/users/{user_id}", json={"age": age}).status_code == 200

    response = client.get("/users/stats")

    assert response.status_code == 200
    assert response.json() == {
        "stats": {
            "totalEmails": 3,
            "oldestPerson": 40,
            "youngestPerson": 20,
            "averageAge": 30.0,
        }
    }


def test_stats_on_empty_store(client: TestClient) -> None:
    response = client.get("/users/stats")

    assert response.status_code == 200
    assert response.json()["stats"] == {
        "totalEmails": 0,
        "oldestPerson": None,
        "youngestPerson": None,
        "averageAge": None,
    }


def test_partial_update_keeps_other_fields(client: TestClient) -> None:
    user_id = _create(client, "Ada", "ada@email.com")

    response = client.put(f"/users/{user_id}", json={"isActive": False})

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["isActive"] is False
    assert user["name"] == "Ada"
    assert user["email"] == "ada@email.com"


def test_update_rejects_null_name(client: TestClient) -> None:
    user_id = _create(client, "Ada", "ada@email.com")

    response = client.put(f"/users/{user_id}", json={"name": None})

    assert response.status_code == 422
    assert client.get(f"/users/{user_id}").json()["users"]["name"] == "Ada"


def test_update_rejects_unknown_field(client: TestClient) -> None:
    user_id = _create(client, "Ada", "ada@email.com")

    response = client.put(f"/users/{user_id}", json={"nmae": "typo"})

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "validation_error"
    assert any("nmae" in item["loc"] for item in error["details"])
    assert client.get(f"/users/{user_id}").json()["users"]["name"] == "Ada"


def test_create_rejects_unknown_field(client: TestClient) -> None:
    response = client.post(
        "/users", json={"name": "Ada", "email": "ada@email.com", "role": "admin"}
    )

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "validation_error"
    assert client.get("/users").json()["users"] == []


def test_update_missing_user_returns_404(client: TestClient) -> None:
    response = client.put("/users/missing", json={"age": 10})

    assert response.status_code == 404


def test_batch_update_deactivates_configured_domain(client: TestClient) -> None:
    ada = _create(client, "Ada", "ada@email.com")
    grace = _create(client, "Grace", "grace@email.com")
    linus = _create(client, "Linus", "linus@other.org")

    response = client.put("/users/batch")

    assert response.status_code == 200
    assert response.json() == {"totalUsers": {"matchedCount": 2}}
    assert client.get(f"/users/{ada}").json()["users"]["isActive"] is False
    assert client.get(f"/users/{grace}").json()["users"]["isActive"] is False
    assert client.get(f"/users/{linus}").json()["users"]["isActive"] is True


def test_delete_user_then_read_returns_404(client: TestClient) -> None:
    user_id = _create(client, "Ada", "ada@email.com")

    response = client.delete(f"/users/{user_id}")

    assert response.status_code == 200
    assert response.json()["user"]["id"] == user_id
    assert client.get(f"/users/{user_id}").status_code == 404
    assert client.delete(f"/users/{user_id}").status_code == 404


def test_join_returns_profiles(
    client: TestClient, session_factory: sessionmaker[Session]
) -> None:
    ada = _create(client, "Ada", "ada@email.com")
    grace = _create(client, "Grace", "grace@email.com")
    with session_factory() as session:
        session.add(ProfileModel(user_id=ada, github_username="ada", twitter_handle="@ada"))
        session.commit()

    response = client.get("/users/join")

    assert response.status_code == 200
    users = {user["id"]: user for user in response.json()["users"]}
    assert users[ada]["profile"] == {"githubUsername": "ada", "twitterHandle": "@ada"}
    assert users[grace]["profile"] is None
    assert "age" not in users[ada]

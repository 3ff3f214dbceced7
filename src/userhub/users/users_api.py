"""User CRUD and aggregate routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ..config import AppConfig
from .users_models import UserFilter
from .users_repository import AggregateSpec, NewUser, UserRepository
from .users_schemas import (
    BatchCreateRequest,
    BatchCreateResponse,
    BatchUpdateResponse,
    CreatedUserRef,
    CreateUserRequest,
    CreateUserResponse,
    InsertedCount,
    MatchedCount,
    UpdateUserRequest,
    UserJoinResponse,
    UserListResponse,
    UserLookupResponse,
    UserPayload,
    UserResponse,
    UserStats,
    UserStatsResponse,
    UserWithProfilePayload,
)

router = APIRouter(prefix="/users", tags=["users"])

STATS_SPEC = AggregateSpec(count=("email",), max=("age",), min=("age",), avg=("age",))


def get_user_repo(request: Request) -> UserRepository:
    try:
        return request.app.state.user_repo  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("UserRepository is not configured") from exc


def get_config(request: Request) -> AppConfig:
    try:
        return request.app.state.config  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("AppConfig is not configured") from exc


@router.post("", response_model=CreateUserResponse)
def create_user(
    payload: CreateUserRequest,
    repo: UserRepository = Depends(get_user_repo),
) -> CreateUserResponse:
    user = repo.create(name=payload.name, email=payload.email)
    return CreateUserResponse(user=CreatedUserRef(id=user.id))


@router.post("/batch", response_model=BatchCreateResponse)
def create_users_batch(
    payload: BatchCreateRequest,
    repo: UserRepository = Depends(get_user_repo),
) -> BatchCreateResponse:
    inserted = repo.create_many(
        [NewUser(name=item.name, email=item.email) for item in payload.users],
        skip_duplicates=True,
    )
    return BatchCreateResponse(user=InsertedCount(inserted_count=inserted))


@router.get("", response_model=UserListResponse)
def list_users(repo: UserRepository = Depends(get_user_repo)) -> UserListResponse:
    users = repo.find_many()
    return UserListResponse(users=[UserPayload.from_domain(user) for user in users])


@router.get("/stats", response_model=UserStatsResponse)
def user_stats(repo: UserRepository = Depends(get_user_repo)) -> UserStatsResponse:
    summary = repo.aggregate(STATS_SPEC)
    return UserStatsResponse(
        stats=UserStats(
            total_emails=summary["count"]["email"] or 0,
            oldest_person=summary["max"]["age"],
            youngest_person=summary["min"]["age"],
            average_age=summary["avg"]["age"],
        )
    )


@router.get("/join", response_model=UserJoinResponse)
def list_users_with_profiles(repo: UserRepository = Depends(get_user_repo)) -> UserJoinResponse:
    users = repo.list_with_profiles()
    return UserJoinResponse(users=[UserWithProfilePayload.from_domain(user) for user in users])


@router.put("/batch", response_model=BatchUpdateResponse)
def deactivate_users_batch(
    repo: UserRepository = Depends(get_user_repo),
    config: AppConfig = Depends(get_config),
) -> BatchUpdateResponse:
    """Deactivate every user whose email ends with the configured domain."""
    matched = repo.update_many(
        UserFilter(email_suffix=config.deactivate_email_domain),
        {"is_active": False},
    )
    return BatchUpdateResponse(total_users=MatchedCount(matched_count=matched))


@router.get("/{user_id}", response_model=UserLookupResponse)
def fetch_user(user_id: str, repo: UserRepository = Depends(get_user_repo)) -> UserLookupResponse:
    user = repo.find_first_or_throw(UserFilter(id=user_id))
    return UserLookupResponse(users=UserPayload.from_domain(user))


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    payload: UpdateUserRequest,
    repo: UserRepository = Depends(get_user_repo),
) -> UserResponse:
    user = repo.update(user_id, payload.changes())
    return UserResponse(user=UserPayload.from_domain(user))


@router.delete("/{user_id}", response_model=UserResponse)
def delete_user(user_id: str, repo: UserRepository = Depends(get_user_repo)) -> UserResponse:
    user = repo.delete(user_id)
    return UserResponse(user=UserPayload.from_domain(user))

"""Pydantic schemas for the user API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .users_models import Profile, User


class CreateUserRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)


class BatchCreateRequest(BaseModel):
    users: list[CreateUserRequest]


class UpdateUserRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    name: str | None = Field(default=None, min_length=1)
    email: str | None = Field(default=None, min_length=3)
    age: int | None = Field(default=None, ge=0)
    is_active: bool | None = Field(default=None, alias="isActive")

    @model_validator(mode="before")
    @classmethod
    def _reject_null_required(cls, data: Any) -> Any:
        if isinstance(data, dict):
            for key in ("name", "email"):
                if key in data and data[key] is None:
                    raise ValueError(f"{key} cannot be null")
        return data

    def changes(self) -> dict[str, Any]:
        """Return only the fields the caller actually sent."""
        return self.model_dump(exclude_unset=True, by_alias=False)


class CreatedUserRef(BaseModel):
    id: str


class ProfilePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    github_username: str | None = Field(default=None, alias="githubUsername")
    twitter_handle: str | None = Field(default=None, alias="twitterHandle")

    @classmethod
    def from_domain(cls, profile: Profile) -> "ProfilePayload":
        return cls(github_username=profile.github_username, twitter_handle=profile.twitter_handle)


class UserPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    email: str
    age: int | None = None
    is_active: bool | None = Field(default=None, alias="isActive")

    @classmethod
    def from_domain(cls, user: User) -> "UserPayload":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            age=user.age,
            is_active=user.is_active,
        )


class UserWithProfilePayload(BaseModel):
    id: str
    name: str
    email: str
    profile: ProfilePayload | None = None

    @classmethod
    def from_domain(cls, user: User) -> "UserWithProfilePayload":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            profile=ProfilePayload.from_domain(user.profile) if user.profile else None,
        )


class CreateUserResponse(BaseModel):
    user: CreatedUserRef


class InsertedCount(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    inserted_count: int = Field(alias="insertedCount")


class BatchCreateResponse(BaseModel):
    user: InsertedCount


class UserListResponse(BaseModel):
    users: list[UserPayload]


class UserLookupResponse(BaseModel):
    users: UserPayload


class UserResponse(BaseModel):
    user: UserPayload


class MatchedCount(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    matched_count: int = Field(alias="matchedCount")


class BatchUpdateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_users: MatchedCount = Field(alias="totalUsers")


class UserStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_emails: int = Field(alias="totalEmails")
    oldest_person: int | None = Field(default=None, alias="oldestPerson")
    youngest_person: int | None = Field(default=None, alias="youngestPerson")
    average_age: float | None = Field(default=None, alias="averageAge")


class UserStatsResponse(BaseModel):
    stats: UserStats


class UserJoinResponse(BaseModel):
    users: list[UserWithProfilePayload]


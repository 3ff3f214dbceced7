"""User domain dataclasses."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class Profile:
    github_username: str | None = None
    twitter_handle: str | None = None


@dataclass(slots=True)
class User:
    id: str
    name: str
    email: str
    age: int | None = None
    is_active: bool | None = None
    profile: Profile | None = None


@dataclass(slots=True)
class UserFilter:
    """Equality and suffix filters; every value is sent as a bound parameter."""

    id: str | None = None
    email: str | None = None
    email_suffix: str | None = None
    is_active: bool | None = None

    def is_empty(self) -> bool:
        return (
            self.id is None
            and self.email is None
            and self.email_suffix is None
            and self.is_active is None
        )

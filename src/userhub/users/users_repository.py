"""User repository backed by SQLAlchemy."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import structlog
from sqlalchemy import func, insert, select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session, selectinload

from ..db.db_models import UserModel, new_user_id
from ..exceptions import (
    NotFoundError,
    StoreError,
    ValidationError,
    ensure_found,
    handle_sqlalchemy_errors,
)
from .users_models import Profile, User, UserFilter

logger = structlog.get_logger(__name__)

UPDATABLE_FIELDS = frozenset({"name", "email", "age", "is_active"})
REQUIRED_FIELDS = frozenset({"name", "email"})

_AGGREGATE_COLUMNS = {
    "id": UserModel.id,
    "name": UserModel.name,
    "email": UserModel.email,
    "age": UserModel.age,
}
_NUMERIC_COLUMNS = frozenset({"age"})

_UPSERT_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": postgresql_insert,
}


@dataclass(frozen=True, slots=True)
class NewUser:
    name: str
    email: str


@dataclass(frozen=True, slots=True)
class AggregateSpec:
    """Columns to aggregate per function; ``avg`` accepts numeric columns only."""

    count: tuple[str, ...] = ()
    max: tuple[str, ...] = ()
    min: tuple[str, ...] = ()
    avg: tuple[str, ...] = ()


class UserRepository:
    """Provide CRUD and aggregate access to users stored in the database."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def create(self, *, name: str, email: str) -> User:
        with handle_sqlalchemy_errors(entity="user"), self._session_factory() as session:
            row = UserModel(id=new_user_id(), name=name, email=email, is_active=True)
            session.add(row)
            session.commit()
            user = self._to_domain(row)
        logger.info("users.created", user_id=user.id)
        return user

    def create_many(self, users: Iterable[NewUser], *, skip_duplicates: bool = False) -> int:
        """Insert ``users`` in one statement and return how many rows were written.

        With ``skip_duplicates`` rows colliding with a unique constraint are
        silently dropped; otherwise any collision fails the whole batch.
        """
        rows = [
            {"id": new_user_id(), "name": user.name, "email": user.email, "is_active": True}
            for user in users
        ]
        if not rows:
            return 0

        with handle_sqlalchemy_errors(entity="user"), self._session_factory() as session:
            if skip_duplicates:
                dialect = session.get_bind().dialect.name
                dialect_insert = _UPSERT_INSERTS.get(dialect)
                if dialect_insert is None:
                    raise StoreError(f"skip_duplicates is not supported on {dialect}")
                stmt = (
                    dialect_insert(UserModel)
                    .values(rows)
                    .on_conflict_do_nothing()
                    .returning(UserModel.id)
                )
                inserted = len(session.scalars(stmt).all())
            else:
                session.execute(insert(UserModel), rows)
                inserted = len(rows)
            session.commit()

        logger.info(
            "users.batch_created",
            submitted=len(rows),
            inserted=inserted,
            skip_duplicates=skip_duplicates,
        )
        return inserted

    def find_many(self, user_filter: UserFilter | None = None) -> Sequence[User]:
        with handle_sqlalchemy_errors(entity="user"), self._session_factory() as session:
            stmt = _apply_filter(select(UserModel), user_filter).order_by(UserModel.id)
            rows = session.scalars(stmt).all()
            return [self._to_domain(row) for row in rows]

    def find_first_or_throw(self, user_filter: UserFilter) -> User:
        with handle_sqlalchemy_errors(entity="user"), self._session_factory() as session:
            stmt = _apply_filter(select(UserModel), user_filter).order_by(UserModel.id).limit(1)
            row = session.scalars(stmt).first()
            if row is None:
                raise NotFoundError(f"user matching {_describe(user_filter)} not found")
            return self._to_domain(row)

    def get(self, user_id: str) -> User:
        with handle_sqlalchemy_errors(entity="user"), self._session_factory() as session:
            row = ensure_found(session.get(UserModel, user_id), entity="user", identifier=user_id)
            return self._to_domain(row)

    def update(self, user_id: str, fields: Mapping[str, Any]) -> User:
        """Apply ``fields`` to one user; keys not present stay untouched."""
        changes = _validate_changes(fields)
        with handle_sqlalchemy_errors(entity="user"), self._session_factory() as session:
            row = ensure_found(session.get(UserModel, user_id), entity="user", identifier=user_id)
            for key, value in changes.items():
                setattr(row, key, value)
            if changes:
                session.commit()
            user = self._to_domain(row)
        if changes:
            logger.info("users.updated", user_id=user_id, fields=sorted(changes))
        return user

    def update_many(self, user_filter: UserFilter | None, fields: Mapping[str, Any]) -> int:
        """Apply ``fields`` to every matching user and return the matched count."""
        changes = _validate_changes(fields)
        with handle_sqlalchemy_errors(entity="user"), self._session_factory() as session:
            if not changes:
                count_stmt = _apply_filter(select(func.count(UserModel.id)), user_filter)
                return session.scalar(count_stmt) or 0
            stmt = (
                _apply_filter(update(UserModel), user_filter)
                .values(**changes)
                .execution_options(synchronize_session=False)
            )
            result = session.execute(stmt)
            session.commit()
            matched = result.rowcount or 0
        logger.info(
            "users.batch_updated",
            matched=matched,
            fields=sorted(changes),
            filter=_describe(user_filter),
        )
        return matched

    def delete(self, user_id: str) -> User:
        with handle_sqlalchemy_errors(entity="user"), self._session_factory() as session:
            row = ensure_found(session.get(UserModel, user_id), entity="user", identifier=user_id)
            user = self._to_domain(row)
            session.delete(row)
            session.commit()
        logger.info("users.deleted", user_id=user_id)
        return user

    def aggregate(self, spec: AggregateSpec) -> dict[str, dict[str, Any]]:
        """Run count/max/min/avg over the requested columns in one query."""
        functions = (
            ("count", spec.count, func.count),
            ("max", spec.max, func.max),
            ("min", spec.min, func.min),
            ("avg", spec.avg, func.avg),
        )
        columns = []
        keys: list[tuple[str, str]] = []
        for name, fields, function in functions:
            for field_name in fields:
                column = _aggregate_column(field_name, numeric=name == "avg")
                columns.append(function(column).label(f"{name}_{field_name}"))
                keys.append((name, field_name))
        if not columns:
            raise ValidationError("aggregate requires at least one field")

        with handle_sqlalchemy_errors(entity="user"), self._session_factory() as session:
            row = session.execute(select(*columns)).one()

        summary: dict[str, dict[str, Any]] = {name: {} for name, _, _ in functions}
        for (name, field_name), value in zip(keys, row):
            if name == "avg" and value is not None:
                value = float(value)
            summary[name][field_name] = value
        return summary

    def list_with_profiles(self) -> Sequence[User]:
        """Return every user joined with its profile (``None`` when absent)."""
        with handle_sqlalchemy_errors(entity="user"), self._session_factory() as session:
            rows = session.scalars(
                select(UserModel).options(selectinload(UserModel.profile)).order_by(UserModel.id)
            ).all()
            return [self._to_domain(row, with_profile=True) for row in rows]

    @staticmethod
    def _to_domain(model: UserModel, *, with_profile: bool = False) -> User:
        profile = None
        if with_profile and model.profile is not None:
            profile = Profile(
                github_username=model.profile.github_username,
                twitter_handle=model.profile.twitter_handle,
            )
        return User(
            id=model.id,
            name=model.name,
            email=model.email,
            age=model.age,
            is_active=model.is_active,
            profile=profile,
        )


def _apply_filter(stmt: Any, user_filter: UserFilter | None) -> Any:
    if user_filter is None:
        return stmt
    conditions = []
    if user_filter.id is not None:
        conditions.append(UserModel.id == user_filter.id)
    if user_filter.email is not None:
        conditions.append(UserModel.email == user_filter.email)
    if user_filter.email_suffix is not None:
        conditions.append(UserModel.email.endswith(user_filter.email_suffix, autoescape=True))
    if user_filter.is_active is not None:
        conditions.append(UserModel.is_active.is_(user_filter.is_active))
    if conditions:
        stmt = stmt.where(*conditions)
    return stmt


def _validate_changes(fields: Mapping[str, Any]) -> dict[str, Any]:
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"unknown user fields: {', '.join(sorted(unknown))}")
    for key in REQUIRED_FIELDS:
        if key in fields and fields[key] is None:
            raise ValidationError(f"{key} cannot be null")
    return dict(fields)


def _aggregate_column(field_name: str, *, numeric: bool) -> Any:
    column = _AGGREGATE_COLUMNS.get(field_name)
    if column is None:
        raise ValidationError(f"cannot aggregate unknown field '{field_name}'")
    if numeric and field_name not in _NUMERIC_COLUMNS:
        raise ValidationError(f"cannot average non-numeric field '{field_name}'")
    return column


def _describe(user_filter: UserFilter | None) -> str:
    if user_filter is None or user_filter.is_empty():
        return "{}"
    parts = [
        f"{key}={value!r}"
        for key, value in (
            ("id", user_filter.id),
            ("email", user_filter.email),
            ("email_suffix", user_filter.email_suffix),
            ("is_active", user_filter.is_active),
        )
        if value is not None
    ]
    return "{" + ", ".join(parts) + "}"

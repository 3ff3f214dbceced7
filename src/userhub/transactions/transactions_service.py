"""Transactional write unit: ordered inserts plus a count, applied atomically."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from functools import partial

import structlog
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..db.db_models import UserModel, new_user_id
from ..exceptions import StoreError, ValidationError, handle_sqlalchemy_errors
from ..infrastructure.unit_of_work import SqlAlchemyUnitOfWork, UnitOfWork
from ..users.users_models import User

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class InsertUser:
    name: str
    email: str


@dataclass(slots=True)
class TransactionOutcome:
    created: list[User] = field(default_factory=list)
    total_users: int = 0


DEMO_OPERATIONS: tuple[InsertUser, ...] = (
    InsertUser(name="John Doe", email="john.doe@email.com"),
    InsertUser(name="Jane Doe", email="jane.doe@email.com"),
)


class TransactionalWriteUnit:
    """Run a list of user inserts followed by a count as one transaction.

    Inserts execute in submission order and are flushed one by one so a
    failing step stops the unit immediately. The count is read inside the
    same transaction, after the inserts, and the transaction is committed
    before :meth:`run` returns. On any failure everything is rolled back and
    the translated :class:`StoreError` propagates unchanged.

    ``uow_factory`` builds a fresh :class:`UnitOfWork` per run and defaults to
    a :class:`SqlAlchemyUnitOfWork` over ``session_factory``.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        uow_factory: Callable[[], UnitOfWork] | None = None,
    ) -> None:
        self._uow_factory = uow_factory or partial(SqlAlchemyUnitOfWork, session_factory)

    def run(self, operations: Sequence[InsertUser]) -> TransactionOutcome:
        steps = tuple(operations)
        if not steps:
            raise ValidationError("a transaction needs at least one operation")

        log = logger.bind(operations=len(steps))
        try:
            with handle_sqlalchemy_errors(entity="transaction"), self._uow_factory() as uow:
                rows: list[UserModel] = []
                for step in steps:
                    row = UserModel(id=new_user_id(), name=step.name, email=step.email, is_active=True)
                    uow.session.add(row)
                    uow.session.flush()
                    rows.append(row)
                total_users = uow.session.scalar(select(func.count(UserModel.id))) or 0
                created = [
                    User(
                        id=row.id,
                        name=row.name,
                        email=row.email,
                        age=row.age,
                        is_active=row.is_active,
                    )
                    for row in rows
                ]
                uow.commit()
        except StoreError as exc:
            log.warning("transaction.rolled_back", error=type(exc).__name__, reason=str(exc))
            raise

        log.info("transaction.committed", total_users=total_users)
        return TransactionOutcome(created=created, total_users=total_users)

    def run_demo(self) -> TransactionOutcome:
        """Insert the two demo users and count, as exposed by ``GET /transactions``."""
        return self.run(DEMO_OPERATIONS)

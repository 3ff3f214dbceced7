"""Routes running the transactional write unit."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ..users.users_schemas import UserPayload
from .transactions_schemas import (
    DemoTransactionResponse,
    TransactionRequest,
    TransactionResponse,
)
from .transactions_service import InsertUser, TransactionalWriteUnit

router = APIRouter(prefix="/transactions", tags=["transactions"])


def get_write_unit(request: Request) -> TransactionalWriteUnit:
    try:
        return request.app.state.write_unit  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("TransactionalWriteUnit is not configured") from exc


@router.get("", response_model=DemoTransactionResponse)
def run_demo_transaction(
    unit: TransactionalWriteUnit = Depends(get_write_unit),
) -> DemoTransactionResponse:
    """Insert two users and count them atomically; committed before responding."""
    outcome = unit.run_demo()
    user1, user2 = outcome.created
    return DemoTransactionResponse(
        user1=UserPayload.from_domain(user1),
        user2=UserPayload.from_domain(user2),
        total_users=outcome.total_users,
    )


@router.post("", response_model=TransactionResponse)
def run_transaction(
    payload: TransactionRequest,
    unit: TransactionalWriteUnit = Depends(get_write_unit),
) -> TransactionResponse:
    outcome = unit.run([InsertUser(name=item.name, email=item.email) for item in payload.users])
    return TransactionResponse(
        users=[UserPayload.from_domain(user) for user in outcome.created],
        total_users=outcome.total_users,
    )

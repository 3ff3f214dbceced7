"""Pydantic schemas for transaction routes."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ..users.users_schemas import CreateUserRequest, UserPayload


class TransactionRequest(BaseModel):
    users: list[CreateUserRequest] = Field(..., min_length=1)


class DemoTransactionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user1: UserPayload
    user2: UserPayload
    total_users: int = Field(alias="totalUsers")


class TransactionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    users: list[UserPayload]
    total_users: int = Field(alias="totalUsers")

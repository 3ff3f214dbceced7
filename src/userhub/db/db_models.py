"""SQLAlchemy ORM models."""

from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Boolean, ForeignKey, Integer, String, UniqueConstraint, true
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def new_user_id() -> str:
    return str(uuid4())


class Base(DeclarativeBase):
    """Base declarative class."""


class UserModel(Base):
    __tablename__ = "user"
    __table_args__ = (UniqueConstraint("email", name="uq_user_email"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_user_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    age: Mapped[int | None] = mapped_column(Integer)
    is_active: Mapped[bool | None] = mapped_column(Boolean, default=True, server_default=true())

    profile: Mapped["ProfileModel | None"] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        uselist=False,
    )


class ProfileModel(Base):
    __tablename__ = "profile"
    __table_args__ = (UniqueConstraint("user_id", name="uq_profile_user_id"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_user_id)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("user.id", ondelete="CASCADE"), nullable=False
    )
    github_username: Mapped[str | None] = mapped_column(String(255))
    twitter_handle: Mapped[str | None] = mapped_column(String(255))

    user: Mapped[UserModel] = relationship(back_populates="profile")

"""Database models and schema helpers."""

from .db_models import Base, ProfileModel, UserModel

__all__ = ["Base", "ProfileModel", "UserModel"]

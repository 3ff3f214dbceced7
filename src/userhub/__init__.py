"""userhub: CRUD and aggregate HTTP service over a single user entity."""

from .main import create_app

__all__ = ["create_app"]

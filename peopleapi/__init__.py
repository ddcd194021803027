"""CRUD service for the people resource."""

from __future__ import annotations

from typing import Any

from .database import Database, DatabaseError, DatabaseUnavailableError
from .models import Person


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the HTTP application."""

    from .api import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "Database",
    "DatabaseError",
    "DatabaseUnavailableError",
    "Person",
    "create_app",
]

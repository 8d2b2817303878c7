"""Record stores for users, their items and item rental slots."""

from __future__ import annotations

from typing import Any

from .context import Stores, build_stores
from .database import Database, MemoryBackend, resolve_database_path
from .errors import ErrorKind, StoreError


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the HTTP application."""

    from .api import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "Database",
    "ErrorKind",
    "MemoryBackend",
    "StoreError",
    "Stores",
    "build_stores",
    "create_app",
    "resolve_database_path",
]

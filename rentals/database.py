"""Ordered key-value stores backing the record services."""
from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Dict, Generic, List, Optional, Type, TypeVar

from .models import record_from_dict, record_to_dict

ValueT = TypeVar("ValueT")


def _ensure_directory(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def resolve_database_path(env_value: Optional[str]) -> Path:
    """Resolve the on-disk path for the record database."""

    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    base_dir = Path(__file__).resolve().parent.parent / "data"
    return (base_dir / "rentals.sqlite3").resolve(strict=False)


class MemoryStore(Generic[ValueT]):
    """Process-local ordered map. Contents are lost when the process exits."""

    def __init__(self) -> None:
        self._data: Dict[str, ValueT] = {}

    def insert(self, key: str, value: ValueT) -> Optional[ValueT]:
        previous = self._data.get(key)
        self._data[key] = value
        return previous

    def get(self, key: str) -> Optional[ValueT]:
        return self._data.get(key)

    def contains_key(self, key: str) -> bool:
        return key in self._data

    def remove(self, key: str) -> Optional[ValueT]:
        return self._data.pop(key, None)

    def values(self) -> List[ValueT]:
        return [self._data[key] for key in sorted(self._data)]

    def __len__(self) -> int:
        return len(self._data)


class SQLiteStore(Generic[ValueT]):
    """One namespace of the ``records`` table, holding JSON-encoded dataclasses."""

    def __init__(self, database: "Database", namespace: str, record_type: Type[ValueT]) -> None:
        self._database = database
        self._namespace = namespace
        self._record_type = record_type

    def insert(self, key: str, value: ValueT) -> Optional[ValueT]:
        encoded = json.dumps(record_to_dict(value), sort_keys=True)
        with self._database.connect() as conn:
            row = conn.execute(
                "SELECT value FROM records WHERE namespace = ? AND key = ?",
                (self._namespace, key),
            ).fetchone()
            conn.execute(
                """
                INSERT INTO records (namespace, key, value) VALUES (?, ?, ?)
                ON CONFLICT(namespace, key) DO UPDATE SET value = excluded.value
                """,
                (self._namespace, key, encoded),
            )
        return self._decode(row)

    def get(self, key: str) -> Optional[ValueT]:
        with self._database.connect() as conn:
            row = conn.execute(
                "SELECT value FROM records WHERE namespace = ? AND key = ?",
                (self._namespace, key),
            ).fetchone()
        return self._decode(row)

    def contains_key(self, key: str) -> bool:
        with self._database.connect() as conn:
            row = conn.execute(
                "SELECT 1 FROM records WHERE namespace = ? AND key = ?",
                (self._namespace, key),
            ).fetchone()
        return row is not None

    def remove(self, key: str) -> Optional[ValueT]:
        with self._database.connect() as conn:
            row = conn.execute(
                "SELECT value FROM records WHERE namespace = ? AND key = ?",
                (self._namespace, key),
            ).fetchone()
            if row is None:
                return None
            conn.execute(
                "DELETE FROM records WHERE namespace = ? AND key = ?",
                (self._namespace, key),
            )
        return self._decode(row)

    def values(self) -> List[ValueT]:
        with self._database.connect() as conn:
            rows = conn.execute(
                "SELECT value FROM records WHERE namespace = ? ORDER BY key",
                (self._namespace,),
            ).fetchall()
        return [self._decode_row(row) for row in rows]

    def __len__(self) -> int:
        with self._database.connect() as conn:
            row = conn.execute(
                "SELECT COUNT(*) AS total FROM records WHERE namespace = ?",
                (self._namespace,),
            ).fetchone()
        return int(row["total"])

    def _decode(self, row: Optional[sqlite3.Row]) -> Optional[ValueT]:
        if row is None:
            return None
        return self._decode_row(row)

    def _decode_row(self, row: sqlite3.Row) -> ValueT:
        return record_from_dict(self._record_type, json.loads(row["value"]))


class Database:
    """SQLite file holding every record namespace."""

    def __init__(self, path: Path) -> None:
        _ensure_directory(path)
        self._path = path

    def connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def initialize(self) -> None:
        """Create the required tables if they do not already exist."""

        with self.connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS records (
                    namespace TEXT NOT NULL,
                    key TEXT NOT NULL,
                    value TEXT NOT NULL,
                    PRIMARY KEY (namespace, key)
                );
                """
            )

    def store(self, namespace: str, record_type: Type[ValueT]) -> SQLiteStore[ValueT]:
        return SQLiteStore(self, namespace, record_type)


class MemoryBackend:
    """Hands out :class:`MemoryStore` instances, one per namespace."""

    def __init__(self) -> None:
        self._stores: Dict[str, MemoryStore] = {}

    def initialize(self) -> None:
        return None

    def store(self, namespace: str, record_type: Type[ValueT]) -> MemoryStore[ValueT]:
        return self._stores.setdefault(namespace, MemoryStore())


__all__ = [
    "Database",
    "MemoryBackend",
    "MemoryStore",
    "SQLiteStore",
    "resolve_database_path",
]

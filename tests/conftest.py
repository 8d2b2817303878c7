from __future__ import annotations

import itertools
import sys
from pathlib import Path
from typing import Iterator

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from rentals.context import Stores, build_stores
from rentals.database import Database, MemoryBackend


class StepClock:
    """Deterministic clock advancing by ``step`` on every reading."""

    def __init__(self, start: int = 1_000, step: int = 10) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> int:
        value = self.now
        self.now += self.step
        return value


class SequentialIds:
    def __init__(self, prefix: str = "id") -> None:
        self._counter = itertools.count(1)
        self._prefix = prefix

    def __call__(self) -> str:
        return f"{self._prefix}-{next(self._counter):04d}"


@pytest.fixture()
def clock() -> StepClock:
    return StepClock()


@pytest.fixture(params=["memory", "sqlite"])
def stores(request: pytest.FixtureRequest, clock: StepClock, tmp_path: Path) -> Stores:
    if request.param == "memory":
        backend = MemoryBackend()
    else:
        backend = Database(tmp_path / "stores.sqlite3")
        backend.initialize()
    return build_stores(backend, clock=clock, new_id=SequentialIds())


@pytest.fixture()
def database(tmp_path: Path) -> Iterator[Database]:
    db = Database(tmp_path / "rentals.sqlite3")
    db.initialize()
    yield db


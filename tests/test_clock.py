from __future__ import annotations

import uuid

from rentals.clock import MonotonicClock, new_uuid


def test_clock_never_goes_backwards() -> None:
    readings = iter([100, 250, 90, 250, 300])
    clock = MonotonicClock(source=lambda: next(readings))

    assert [clock() for _ in range(5)] == [100, 250, 250, 250, 300]


def test_default_clock_returns_integers() -> None:
    clock = MonotonicClock()
    first = clock()
    second = clock()
    assert isinstance(first, int)
    assert second >= first


def test_new_uuid_is_unique_uuid4_text() -> None:
    values = {new_uuid() for _ in range(50)}
    assert len(values) == 50
    assert all(uuid.UUID(value).version == 4 for value in values)

"""In-memory event storage for the event listing API."""
from __future__ import annotations

import threading
import time
import uuid
from typing import Any, Callable

IdFactory = Callable[[], str]


def uuid_id() -> str:
    """Return a random hex identifier."""
    return uuid.uuid4().hex


def millisecond_id() -> str:
    """Return the current epoch time in milliseconds as a string.

    Two events created within the same millisecond get the same value, so
    this is only suitable where collisions are acceptable.
    """
    return str(time.time_ns() // 1_000_000)


class EventStore:
    """Process-lifetime, insertion-ordered list of events."""

    def __init__(self) -> None:
        self._events: list[dict[str, Any]] = []
        self._lock = threading.Lock()

    def append(self, event: dict[str, Any]) -> dict[str, Any]:
        with self._lock:
            self._events.append(event)
        return event

    def list(self) -> list[dict[str, Any]]:
        """Return a snapshot of all events in the order they were added."""
        with self._lock:
            return list(self._events)

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

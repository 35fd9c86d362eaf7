"""Per-key mutual exclusion for fetch-and-save sequences."""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from threading import Lock
from typing import Dict, Iterator


@dataclass
class _Slot:
    lock: Lock = field(default_factory=Lock)
    users: int = 0


class KeyedLocks:
    """Hand out one lock per key, dropping it once nobody holds or waits on it."""

    def __init__(self) -> None:
        self._guard = Lock()
        self._slots: Dict[str, _Slot] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            slot = self._slots.setdefault(key, _Slot())
            slot.users += 1
        slot.lock.acquire()
        try:
            yield
        finally:
            slot.lock.release()
            with self._guard:
                slot.users -= 1
                if slot.users == 0:
                    self._slots.pop(key, None)

    def __len__(self) -> int:
        with self._guard:
            return len(self._slots)


__all__ = ["KeyedLocks"]

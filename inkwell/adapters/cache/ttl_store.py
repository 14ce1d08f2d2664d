"""In-memory TTL store adapter.

Implements TTLStorePort for preview tokens. Entries live in process memory,
so tokens do not survive a restart and are not shared between workers.
"""

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta

from inkwell.adapters.clock import SystemClock
from inkwell.ports.clock import ClockPort


@dataclass
class _Entry:
    value: str
    expires_at: datetime


class InMemoryTTLStore:
    """Dict-backed store; expired entries are dropped on read, on write and on purge."""

    def __init__(self, clock: ClockPort | None = None) -> None:
        self._clock = clock or SystemClock()
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def put(self, key: str, value: str, ttl: timedelta) -> None:
        """Store a value; expired entries are swept on every write."""
        now = self._clock.now_utc()
        with self._lock:
            self._drop_expired(now)
            self._entries[key] = _Entry(value=value, expires_at=now + ttl)

    def get(self, key: str) -> str | None:
        now = self._clock.now_utc()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= now:
                del self._entries[key]
                return None
            return entry.value

    def purge_expired(self) -> int:
        """Drop expired entries. Returns count removed."""
        now = self._clock.now_utc()
        with self._lock:
            return self._drop_expired(now)

    def _drop_expired(self, now: datetime) -> int:
        # Caller holds the lock
        expired = [k for k, e in self._entries.items() if e.expires_at <= now]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        """Clear all entries - useful for testing."""
        with self._lock:
            self._entries.clear()

from datetime import timedelta
from typing import Protocol


class TTLStorePort(Protocol):
    """Ephemeral key-value store where entries vanish after their time-to-live."""

    def put(self, key: str, value: str, ttl: timedelta) -> None:
        ...

    def get(self, key: str) -> str | None:
        """Return the value, or None if absent or expired."""
        ...

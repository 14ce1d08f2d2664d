"""
Articles component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from inkwell.ports.db import ArticleRepoPort, MediaRepoPort, UnitOfWorkPort, VersionRepoPort


class TimePort(Protocol):
    """Port for time operations."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...


__all__ = [
    "ArticleRepoPort",
    "MediaRepoPort",
    "TimePort",
    "UnitOfWorkPort",
    "VersionRepoPort",
]

"""
Scheduler component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal
from uuid import UUID

PublishOutcome = Literal["published", "skipped", "failed"]


@dataclass(frozen=True)
class SchedulerError:
    """Sweeper-level error."""

    code: str
    message: str
    article_id: UUID | None = None


@dataclass(frozen=True)
class PublishResult:
    """Outcome of publishing one due article."""

    article_id: UUID
    outcome: PublishOutcome
    message: str
    published_at: datetime | None = None
    slug: str | None = None


@dataclass(frozen=True)
class ProcessDueInput:
    """Input for one sweeper pass. `max_articles` of None means no cap."""

    max_articles: int | None = None


@dataclass(frozen=True)
class ProcessDueOutput:
    results: tuple[PublishResult, ...]
    published_count: int = 0
    failed_count: int = 0
    errors: list[SchedulerError] = field(default_factory=list)
    success: bool = True

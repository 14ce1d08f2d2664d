"""
Persistence ports for articles, versions and media.

Implementations: SQLite (adapters/sqlite). A unit of work groups the
repositories behind one transaction.
"""

from __future__ import annotations

from datetime import datetime
from types import TracebackType
from typing import Protocol
from uuid import UUID

from inkwell.domain.entities import Article, ArticleVersion, Media


class ArticleRepoPort(Protocol):
    """
    Repository for articles.

    Invariants:
    - I1: slug is unique across all articles
    """

    def get_by_id(self, article_id: UUID) -> Article | None:
        ...

    def get_owned(self, article_id: UUID, owner_id: UUID) -> Article | None:
        """Get article only if owner_id owns it."""
        ...

    def get_by_slug(self, slug: str) -> Article | None:
        ...

    def slug_taken(self, slug: str, exclude_id: UUID) -> bool:
        """Whether any article other than exclude_id holds this slug."""
        ...

    def save(self, article: Article) -> Article:
        """Insert or update (upsert)."""
        ...

    def delete(self, article_id: UUID) -> None:
        ...

    def list_by_owner(self, owner_id: UUID) -> list[Article]:
        """Owner's articles, most recently updated first."""
        ...

    def list_due_scheduled(self, now_utc: datetime) -> list[Article]:
        """Scheduled articles with scheduled_at <= now_utc."""
        ...


class VersionRepoPort(Protocol):
    """Append-only snapshots of article content."""

    def append(self, version: ArticleVersion) -> ArticleVersion:
        ...

    def count_for_article(self, article_id: UUID) -> int:
        ...

    def list_for_article(self, article_id: UUID) -> list[ArticleVersion]:
        """Oldest first."""
        ...

    def delete_for_article(self, article_id: UUID) -> int:
        """Delete all snapshots of an article. Returns count deleted."""
        ...


class MediaRepoPort(Protocol):
    def save(self, media: Media) -> Media:
        ...

    def get_by_id(self, media_id: UUID) -> Media | None:
        ...

    def attach(self, article_id: UUID, media_id: UUID) -> None:
        """Associate media with an article. Attaching twice is a no-op."""
        ...

    def detach_all(self, article_id: UUID) -> int:
        """Remove every association of an article. Media rows are kept."""
        ...

    def list_for_article(self, article_id: UUID) -> list[Media]:
        ...


class UnitOfWorkPort(Protocol):
    """
    Transaction boundary shared by the repositories.

    Usage: `with uow: ...; uow.commit()`. Leaving the block without
    commit (or via an exception) rolls back.
    """

    def __enter__(self) -> UnitOfWorkPort:
        ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        ...

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...

    @property
    def articles(self) -> ArticleRepoPort:
        ...

    @property
    def versions(self) -> VersionRepoPort:
        ...

    @property
    def media(self) -> MediaRepoPort:
        ...

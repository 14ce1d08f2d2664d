"""
Articles component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from inkwell.domain.entities import Article, ArticleVersion
from inkwell.domain.errors import ErrorKind

# --- Error ---


@dataclass(frozen=True)
class ArticleError:
    """Article operation error."""

    kind: ErrorKind
    code: str
    message: str
    field: str | None = None


# --- Configuration ---


@dataclass(frozen=True)
class ArticleConfig:
    """Lifecycle tunables, normally built from rules.yaml."""

    words_per_minute: int = 200
    slug_fallback: str = "article"
    draft_slug_prefix: str = "draft-"
    title_max_length: int = 255


# --- Input Models ---


@dataclass(frozen=True)
class CreateDraftInput:
    """Input for starting a new, empty draft."""

    owner_id: UUID


@dataclass(frozen=True)
class SaveArticleInput:
    """Input for an explicit save. Omitted fields are left untouched."""

    article_id: UUID
    owner_id: UUID
    title: str | None = None
    content: str | None = None
    seo: dict[str, Any] | None = None


@dataclass(frozen=True)
class UpdateTitleInput:
    """Input for the title autosave."""

    article_id: UUID
    owner_id: UUID
    title: str


@dataclass(frozen=True)
class UpdateContentInput:
    """Input for the content autosave."""

    article_id: UUID
    owner_id: UUID
    content: str | None


@dataclass(frozen=True)
class PublishArticleInput:
    article_id: UUID
    owner_id: UUID


@dataclass(frozen=True)
class ScheduleArticleInput:
    article_id: UUID
    owner_id: UUID
    scheduled_at: datetime


@dataclass(frozen=True)
class DeleteArticleInput:
    article_id: UUID
    owner_id: UUID


@dataclass(frozen=True)
class GetArticleInput:
    article_id: UUID
    owner_id: UUID


@dataclass(frozen=True)
class ListArticlesInput:
    owner_id: UUID


@dataclass(frozen=True)
class GetPublishedInput:
    """Input for the public lookup by slug."""

    slug: str


@dataclass(frozen=True)
class ListVersionsInput:
    article_id: UUID
    owner_id: UUID


# --- Output Models ---


@dataclass(frozen=True)
class ArticleOutput:
    """Output containing a single article."""

    article: Article | None
    errors: list[ArticleError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class ArticleListOutput:
    items: list[Article]
    errors: list[ArticleError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class VersionListOutput:
    versions: list[ArticleVersion]
    errors: list[ArticleError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class DeleteOutput:
    """Output for delete: what was removed alongside the article."""

    deleted: bool
    versions_deleted: int = 0
    media_detached: int = 0
    errors: list[ArticleError] = field(default_factory=list)
    success: bool = True

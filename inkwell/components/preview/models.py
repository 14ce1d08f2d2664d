"""
Preview component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from inkwell.domain.errors import ErrorKind

PREVIEW_EXPIRED_MESSAGE = "Preview not available or has expired."


@dataclass(frozen=True)
class PreviewError:
    kind: ErrorKind
    code: str
    message: str


@dataclass(frozen=True)
class PreviewConfig:
    ttl_hours: int = 24
    base_url: str = ""


@dataclass(frozen=True)
class IssuePreviewInput:
    """Input for issuing a preview link for an owned article."""

    article_id: UUID
    owner_id: UUID


@dataclass(frozen=True)
class ResolvePreviewInput:
    token: str


@dataclass(frozen=True)
class PreviewTokenOutput:
    """Issued token, its expiry and the shareable URL."""

    token: str | None = None
    url: str | None = None
    expires_at: datetime | None = None
    errors: list[PreviewError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class ResolveOutput:
    article_id: UUID | None = None
    errors: list[PreviewError] = field(default_factory=list)
    success: bool = True

"""
Media component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from inkwell.domain.entities import Media
from inkwell.domain.errors import ErrorKind


@dataclass(frozen=True)
class MediaError:
    """Media operation error with actionable message."""

    kind: ErrorKind
    code: str
    message: str
    field: str = "file"


@dataclass(frozen=True)
class MediaConfig:
    """Upload limits, normally built from the uploads section of rules.yaml."""

    allowed_mime_types: tuple[str, ...] = (
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/svg+xml",
    )
    max_upload_bytes: int = 10 * 1024 * 1024
    base_url: str = ""


# --- Input Models ---


@dataclass(frozen=True)
class UploadMediaInput:
    """Input for uploading an image into an article."""

    article_id: UUID
    owner_id: UUID
    filename: str
    content_type: str
    data: bytes


@dataclass(frozen=True)
class ListMediaInput:
    article_id: UUID
    owner_id: UUID


# --- Output Models ---


@dataclass(frozen=True)
class UploadOutput:
    """Output of an upload: the stored media and its public URL."""

    media: Media | None = None
    url: str | None = None
    errors: list[MediaError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class MediaListOutput:
    items: list[Media]
    errors: list[MediaError] = field(default_factory=list)
    success: bool = True

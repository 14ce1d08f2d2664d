from datetime import UTC, datetime
from typing import Any, Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

# --- Enums / Literals ---
ArticleStatus = Literal["draft", "scheduled", "published"]

PUBLISHED_VERSION_LABEL = "Published Version"


def utcnow() -> datetime:
    return datetime.now(UTC)


# --- Identity ---

class Actor(BaseModel):
    """Caller identity, taken from the bearer token and passed explicitly."""

    user_id: UUID
    display_name: str | None = None


# --- Articles ---

class Article(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    owner_id: UUID
    title: str = ""
    slug: str
    content: str = ""
    status: ArticleStatus = "draft"

    published_at: datetime | None = None
    scheduled_at: datetime | None = None

    seo: dict[str, Any] | None = None

    word_count: int = 0
    reading_time: int = 0

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class ArticleVersion(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    article_id: UUID
    content: str
    label: str
    created_at: datetime = Field(default_factory=utcnow)


# --- Media ---

class Media(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    owner_id: UUID
    original_name: str
    filename: str  # generated, never derived from original_name
    mime_type: str
    path: str
    size: int
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)

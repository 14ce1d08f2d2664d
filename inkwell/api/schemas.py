from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field

ArticleStatus = Literal["draft", "scheduled", "published"]


# --- Requests ---
class SaveArticleRequest(BaseModel):
    id: UUID = Field(validation_alias=AliasChoices("id", "uuid"))
    title: str | None = Field(default=None, max_length=255)
    content: str | None = None
    seo: dict[str, Any] | None = None


class UpdateTitleRequest(BaseModel):
    title: str = Field(..., max_length=255)


class UpdateContentRequest(BaseModel):
    content: str | None = None


class PreviewRequest(BaseModel):
    id: UUID = Field(validation_alias=AliasChoices("id", "uuid"))


class ScheduleRequest(BaseModel):
    scheduled_at: datetime


# --- Responses ---
class SaveArticleResponse(BaseModel):
    success: bool
    slug: str
    word_count: int
    reading_time: int


class TitleResponse(BaseModel):
    success: bool
    slug: str


class ContentResponse(BaseModel):
    success: bool
    word_count: int
    reading_time: int


class PreviewResponse(BaseModel):
    preview_url: str
    expires_at: datetime


class PublishResponse(BaseModel):
    success: bool
    article_url: str


class ScheduleResponse(BaseModel):
    success: bool
    message: str


class VersionModel(BaseModel):
    id: UUID
    label: str
    content: str
    created_at: datetime


class VersionListResponse(BaseModel):
    success: bool
    versions: list[VersionModel]


class MediaModel(BaseModel):
    id: UUID
    url: str
    filename: str
    stored_name: str
    mime_type: str
    size: int
    width: int | None = None
    height: int | None = None


class MediaUploadResponse(BaseModel):
    success: bool
    media: MediaModel


class MediaListResponse(BaseModel):
    success: bool
    media: list[MediaModel]

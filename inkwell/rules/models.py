from pydantic import BaseModel, Field


class ArticleRules(BaseModel):
    words_per_minute: int = Field(default=200, gt=0)
    slug_fallback: str = "article"
    draft_slug_prefix: str = "draft-"
    title_max_length: int = Field(default=255, gt=0)


class UploadsRules(BaseModel):
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    allowlist_mime_types: list[str] = Field(
        default_factory=lambda: ["image/jpeg", "image/png", "image/gif", "image/svg+xml"]
    )


class PreviewRules(BaseModel):
    ttl_hours: int = Field(default=24, gt=0)


class Rules(BaseModel):
    articles: ArticleRules = Field(default_factory=ArticleRules)
    uploads: UploadsRules = Field(default_factory=UploadsRules)
    preview: PreviewRules = Field(default_factory=PreviewRules)

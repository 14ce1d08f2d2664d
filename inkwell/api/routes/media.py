"""
Media routes: upload into an article, list an article's media, serve files.
"""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import Response

from inkwell.adapters.clock import SystemClock
from inkwell.adapters.fs.filestore import FileSystemStore
from inkwell.adapters.sqlite.repos import SQLiteUnitOfWork
from inkwell.api.deps import (
    get_clock,
    get_current_actor,
    get_file_store,
    get_media_config,
    get_uow,
)
from inkwell.api.errors import raise_for_errors
from inkwell.api.schemas import MediaListResponse, MediaModel, MediaUploadResponse
from inkwell.components.media import (
    MEDIA_DIR,
    ListMediaInput,
    MediaConfig,
    UploadMediaInput,
    media_url,
    run_list_for_article,
    run_upload,
)
from inkwell.domain.entities import Actor, Media

router = APIRouter()

# Stored names are uuid4 + extension and never change
CACHE_CONTROL_IMMUTABLE = "public, max-age=31536000, immutable"

_SERVED_TYPES = {
    "jpg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "svg": "image/svg+xml",
}


def _to_model(media: Media, base_url: str) -> MediaModel:
    metadata: dict[str, Any] = media.metadata or {}
    return MediaModel(
        id=media.id,
        url=media_url(base_url, media.filename),
        filename=media.original_name,
        stored_name=media.filename,
        mime_type=media.mime_type,
        size=media.size,
        width=metadata.get("width"),
        height=metadata.get("height"),
    )


@router.post("/articles/media", response_model=MediaUploadResponse)
def upload_media(
    file: UploadFile = File(...),
    article_id: UUID = Form(...),
    actor: Actor = Depends(get_current_actor),
    uow: SQLiteUnitOfWork = Depends(get_uow),
    storage: FileSystemStore = Depends(get_file_store),
    clock: SystemClock = Depends(get_clock),
    config: MediaConfig = Depends(get_media_config),
) -> MediaUploadResponse:
    """Upload an image and attach it to one of the author's articles."""
    # At most one byte past the limit
    content = file.file.read(config.max_upload_bytes + 1)
    mime_type = file.content_type or "application/octet-stream"

    inp = UploadMediaInput(
        article_id=article_id,
        owner_id=actor.user_id,
        filename=file.filename or "unnamed",
        content_type=mime_type,
        data=content,
    )
    result = run_upload(inp, uow=uow, storage=storage, time=clock, config=config)
    raise_for_errors(result.errors)
    assert result.media is not None
    return MediaUploadResponse(success=True, media=_to_model(result.media, config.base_url))


@router.get("/api/articles/{article_id}/media", response_model=MediaListResponse)
def list_article_media(
    article_id: UUID,
    actor: Actor = Depends(get_current_actor),
    uow: SQLiteUnitOfWork = Depends(get_uow),
    config: MediaConfig = Depends(get_media_config),
) -> MediaListResponse:
    result = run_list_for_article(
        ListMediaInput(article_id=article_id, owner_id=actor.user_id), uow=uow
    )
    raise_for_errors(result.errors)
    return MediaListResponse(
        success=True, media=[_to_model(m, config.base_url) for m in result.items]
    )


@router.get("/media/{filename}")
def serve_media(
    filename: str,
    storage: FileSystemStore = Depends(get_file_store),
) -> Response:
    """Serve stored media bytes. No auth: media URLs are embedded in public articles."""
    if "/" in filename or "\\" in filename or filename.startswith("."):
        raise HTTPException(status_code=404, detail="Media not found")
    extension = filename.rsplit(".", 1)[-1].lower()
    try:
        data = storage.get(f"{MEDIA_DIR}/{filename}")
    except (FileNotFoundError, ValueError):
        raise HTTPException(status_code=404, detail="Media not found") from None

    return Response(
        content=data,
        media_type=_SERVED_TYPES.get(extension, "application/octet-stream"),
        headers={"Cache-Control": CACHE_CONTROL_IMMUTABLE},
    )

"""
Media component - Image uploads attached to articles.

Invariants:
- I1: MIME type must be in the allowlist and match the sniffed bytes
- I2: 0 < size <= max_upload_bytes
- I3: stored names are generated (uuid4 + extension), never client-supplied
- I4: attaching the same media twice is a no-op
- I5: a stored file whose database write failed is removed again
"""

from __future__ import annotations

import io
import logging
from typing import Any
from uuid import uuid4

from PIL import Image, UnidentifiedImageError

from inkwell.domain.entities import Media
from inkwell.domain.errors import GENERIC_PERSISTENCE_MESSAGE
from inkwell.rules.models import UploadsRules

from .models import (
    ListMediaInput,
    MediaConfig,
    MediaError,
    MediaListOutput,
    UploadMediaInput,
    UploadOutput,
)
from .ports import FileStorePort, TimePort, UnitOfWorkPort

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = MediaConfig()

MEDIA_DIR = "media"

_MIME_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/svg+xml": "svg",
}

# Formats Pillow cannot rasterize
_VECTOR_TYPES = {"image/svg+xml"}

SVG_SNIFF_BYTES = 4096

# Camera JPEGs carrying extra frames sniff as MPO
_SNIFFED_ALIASES = {"image/mpo": "image/jpeg"}


# --- Helper Functions ---


def mime_to_extension(mime_type: str) -> str:
    """Get file extension from MIME type."""
    return _MIME_EXTENSIONS.get(mime_type, "bin")


def media_url(base_url: str, filename: str) -> str:
    return f"{base_url.rstrip('/')}/{MEDIA_DIR}/{filename}"


def read_image(data: bytes) -> tuple[str | None, int | None, int | None]:
    """
    Sniff raster bytes with Pillow.

    Returns the detected MIME type with width and height, or
    (None, None, None) when the bytes are not a decodable image.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            mime_type = Image.MIME.get(img.format or "")
            width, height = img.size
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError):
        return None, None, None
    return _SNIFFED_ALIASES.get(mime_type or "", mime_type), width, height


def looks_like_svg(data: bytes) -> bool:
    head = data[:SVG_SNIFF_BYTES].removeprefix(b"\xef\xbb\xbf").lstrip().lower()
    return head.startswith((b"<?xml", b"<svg", b"<!--", b"<!doctype svg")) and b"<svg" in head


def inspect_content(
    data: bytes, declared_type: str
) -> tuple[list[MediaError], str, dict[str, Any]]:
    """
    Check that the bytes really are the declared image type.

    Returns (errors, sniffed MIME type, dimension metadata).
    """
    if declared_type in _VECTOR_TYPES:
        if not looks_like_svg(data):
            return [_content_error(declared_type)], declared_type, {}
        return [], declared_type, {"width": None, "height": None}

    sniffed, width, height = read_image(data)
    if sniffed is None:
        logger.warning("Rejected %s upload: bytes are not a readable image", declared_type)
        return [_content_error(declared_type)], declared_type, {}
    if sniffed != declared_type:
        logger.warning("Rejected upload declared %s but sniffed as %s", declared_type, sniffed)
        mismatch = MediaError(
            kind="validation",
            code="mime_mismatch",
            message=f"File content is {sniffed}, not the declared {declared_type}",
            field="content_type",
        )
        return [mismatch], sniffed, {}
    return [], sniffed, {"width": width, "height": height}


def _content_error(declared_type: str) -> MediaError:
    return MediaError(
        kind="validation",
        code="invalid_image",
        message=f"File content is not a valid {declared_type} image",
    )


def validate_upload(
    content_type: str, size: int, config: MediaConfig
) -> list[MediaError]:
    """Check type and size. Returns list of errors (empty if valid)."""
    errors: list[MediaError] = []

    if content_type not in config.allowed_mime_types:
        errors.append(
            MediaError(
                kind="validation",
                code="invalid_mime_type",
                message=(
                    f"MIME type '{content_type}' is not allowed. "
                    f"Allowed types: {', '.join(sorted(config.allowed_mime_types))}"
                ),
                field="content_type",
            )
        )

    if size <= 0:
        errors.append(
            MediaError(kind="validation", code="empty_file", message="Uploaded file is empty")
        )
    elif size > config.max_upload_bytes:
        errors.append(
            MediaError(
                kind="validation",
                code="file_too_large",
                message=f"File exceeds the maximum of {config.max_upload_bytes} bytes",
            )
        )

    return errors


def build_media_config(rules: UploadsRules | None, base_url: str = "") -> MediaConfig:
    """Map the uploads section of rules.yaml onto the component config."""
    if rules is None:
        return MediaConfig(base_url=base_url)
    return MediaConfig(
        allowed_mime_types=tuple(rules.allowlist_mime_types),
        max_upload_bytes=rules.max_upload_bytes,
        base_url=base_url,
    )


def _not_found(inp: UploadMediaInput | ListMediaInput) -> MediaError:
    return MediaError(
        kind="not_found",
        code="article_not_found",
        message=f"Article {inp.article_id} not found",
        field="article_id",
    )


def _store_error() -> MediaError:
    return MediaError(kind="persistence", code="store_error", message=GENERIC_PERSISTENCE_MESSAGE)


# --- Component Entry Points ---


def run_upload(
    inp: UploadMediaInput,
    *,
    uow: UnitOfWorkPort,
    storage: FileStorePort,
    time: TimePort,
    config: MediaConfig = DEFAULT_CONFIG,
) -> UploadOutput:
    """
    Store an uploaded image and attach it to an owned article.

    Args:
        inp: Upload payload and target article.
        uow: Unit of work for the media row and the association.
        storage: Blob storage for the file bytes.
        time: Clock for created_at.
        config: Allowlist, size limit and public base URL.

    Returns:
        UploadOutput with the media and its URL, or errors.
    """
    errors = validate_upload(inp.content_type, len(inp.data), config)
    if errors:
        return UploadOutput(errors=errors, success=False)

    errors, mime_type, metadata = inspect_content(inp.data, inp.content_type)
    if errors:
        return UploadOutput(errors=errors, success=False)

    filename = f"{uuid4()}.{mime_to_extension(mime_type)}"

    stored_path: str | None = None
    try:
        with uow:
            article = uow.articles.get_owned(inp.article_id, inp.owner_id)
            if article is None:
                return UploadOutput(errors=[_not_found(inp)], success=False)

            stored_path = storage.save(f"{MEDIA_DIR}/{filename}", inp.data)
            media = Media(
                owner_id=inp.owner_id,
                original_name=inp.filename,
                filename=filename,
                mime_type=mime_type,
                path=stored_path,
                size=len(inp.data),
                metadata=metadata,
                created_at=time.now_utc(),
            )
            uow.media.save(media)
            uow.media.attach(article.id, media.id)
            uow.commit()
    except Exception:
        logger.exception(
            "Error uploading media for article %s (owner %s)", inp.article_id, inp.owner_id
        )
        if stored_path is not None:
            try:
                storage.delete(stored_path)
            except OSError:
                logger.exception("Failed to remove orphaned media file %s", stored_path)
        return UploadOutput(errors=[_store_error()], success=False)

    logger.info("Stored media %s for article %s", media.filename, inp.article_id)
    return UploadOutput(
        media=media,
        url=media_url(config.base_url, media.filename),
        errors=[],
        success=True,
    )


def run_list_for_article(
    inp: ListMediaInput,
    *,
    uow: UnitOfWorkPort,
) -> MediaListOutput:
    """Media attached to an owned article."""
    try:
        with uow:
            article = uow.articles.get_owned(inp.article_id, inp.owner_id)
            if article is None:
                return MediaListOutput(items=[], errors=[_not_found(inp)], success=False)
            items = uow.media.list_for_article(article.id)
    except Exception:
        logger.exception("Error listing media for article %s", inp.article_id)
        return MediaListOutput(items=[], errors=[_store_error()], success=False)

    return MediaListOutput(items=items, errors=[], success=True)


def run(
    inp: UploadMediaInput | ListMediaInput,
    *,
    uow: UnitOfWorkPort,
    storage: FileStorePort | None = None,
    time: TimePort | None = None,
    config: MediaConfig = DEFAULT_CONFIG,
) -> UploadOutput | MediaListOutput:
    """
    Main entry point for the media component.

    Dispatches to the appropriate handler based on input type.
    """
    if isinstance(inp, ListMediaInput):
        return run_list_for_article(inp, uow=uow)
    elif isinstance(inp, UploadMediaInput):
        if storage is None or time is None:
            raise ValueError("FileStorePort and TimePort are required for upload")
        return run_upload(inp, uow=uow, storage=storage, time=time, config=config)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")

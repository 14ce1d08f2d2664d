"""
Media component - Image uploads attached to articles.
"""

from .component import (
    MEDIA_DIR,
    build_media_config,
    inspect_content,
    looks_like_svg,
    media_url,
    mime_to_extension,
    read_image,
    run,
    run_list_for_article,
    run_upload,
    validate_upload,
)
from .models import (
    ListMediaInput,
    MediaConfig,
    MediaError,
    MediaListOutput,
    UploadMediaInput,
    UploadOutput,
)
from .ports import FileStorePort, MediaRepoPort, TimePort, UnitOfWorkPort

__all__ = [
    # Entry points
    "run",
    "run_list_for_article",
    "run_upload",
    # Helpers
    "MEDIA_DIR",
    "build_media_config",
    "inspect_content",
    "looks_like_svg",
    "media_url",
    "mime_to_extension",
    "read_image",
    "validate_upload",
    # Models
    "ListMediaInput",
    "MediaConfig",
    "MediaError",
    "MediaListOutput",
    "UploadMediaInput",
    "UploadOutput",
    # Ports
    "FileStorePort",
    "MediaRepoPort",
    "TimePort",
    "UnitOfWorkPort",
]

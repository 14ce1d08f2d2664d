"""
Preview component - Expiring preview links for unpublished articles.
"""

from .component import (
    TOKEN_BYTES,
    build_preview_config,
    preview_url,
    run_issue,
    run_resolve,
)
from .models import (
    PREVIEW_EXPIRED_MESSAGE,
    IssuePreviewInput,
    PreviewConfig,
    PreviewError,
    PreviewTokenOutput,
    ResolveOutput,
    ResolvePreviewInput,
)
from .ports import TimePort, TTLStorePort, UnitOfWorkPort

__all__ = [
    "run_issue",
    "run_resolve",
    "TOKEN_BYTES",
    "build_preview_config",
    "preview_url",
    "PREVIEW_EXPIRED_MESSAGE",
    "IssuePreviewInput",
    "PreviewConfig",
    "PreviewError",
    "PreviewTokenOutput",
    "ResolveOutput",
    "ResolvePreviewInput",
    "TTLStorePort",
    "TimePort",
    "UnitOfWorkPort",
]

"""
Preview component - Unguessable, expiring preview links.

A token maps to an article id in the TTL store for `ttl_hours`. Anyone
holding the token may view the article whatever its status; there is no
revocation, tokens simply expire.
"""

from __future__ import annotations

import logging
import secrets
from datetime import timedelta
from uuid import UUID

from inkwell.domain.errors import GENERIC_PERSISTENCE_MESSAGE
from inkwell.rules.models import PreviewRules

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

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = PreviewConfig()

TOKEN_BYTES = 32
_KEY_PREFIX = "preview:"


def preview_url(base_url: str, token: str) -> str:
    return f"{base_url.rstrip('/')}/preview/{token}"


def build_preview_config(rules: PreviewRules | None, base_url: str = "") -> PreviewConfig:
    if rules is None:
        return PreviewConfig(base_url=base_url)
    return PreviewConfig(ttl_hours=rules.ttl_hours, base_url=base_url)


def run_issue(
    inp: IssuePreviewInput,
    *,
    uow: UnitOfWorkPort,
    store: TTLStorePort,
    time: TimePort,
    config: PreviewConfig = DEFAULT_CONFIG,
) -> PreviewTokenOutput:
    """Issue a fresh preview token for an owned article."""
    try:
        with uow:
            article = uow.articles.get_owned(inp.article_id, inp.owner_id)
    except Exception:
        logger.exception("Error loading article %s for preview", inp.article_id)
        return PreviewTokenOutput(
            errors=[
                PreviewError(
                    kind="persistence", code="store_error", message=GENERIC_PERSISTENCE_MESSAGE
                )
            ],
            success=False,
        )

    if article is None:
        return PreviewTokenOutput(
            errors=[
                PreviewError(
                    kind="not_found",
                    code="article_not_found",
                    message=f"Article {inp.article_id} not found",
                )
            ],
            success=False,
        )

    token = secrets.token_urlsafe(TOKEN_BYTES)
    ttl = timedelta(hours=config.ttl_hours)
    store.put(_KEY_PREFIX + token, str(article.id), ttl)

    return PreviewTokenOutput(
        token=token,
        url=preview_url(config.base_url, token),
        expires_at=time.now_utc() + ttl,
        errors=[],
        success=True,
    )


def run_resolve(
    inp: ResolvePreviewInput,
    *,
    store: TTLStorePort,
) -> ResolveOutput:
    """Map a token back to its article id while it is still live."""
    value = store.get(_KEY_PREFIX + inp.token)
    if value is None:
        return ResolveOutput(
            errors=[
                PreviewError(
                    kind="not_found", code="preview_expired", message=PREVIEW_EXPIRED_MESSAGE
                )
            ],
            success=False,
        )
    return ResolveOutput(article_id=UUID(value), errors=[], success=True)

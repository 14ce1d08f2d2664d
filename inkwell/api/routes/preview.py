"""
Public preview view. Anyone holding a live token sees the article as-is.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from inkwell.adapters.cache.ttl_store import InMemoryTTLStore
from inkwell.adapters.sqlite.repos import SQLiteUnitOfWork
from inkwell.api.deps import get_ttl_store, get_uow
from inkwell.api.views import article_body, html_page, redirect_with_flash
from inkwell.components.preview import (
    PREVIEW_EXPIRED_MESSAGE,
    ResolvePreviewInput,
    run_resolve,
)

router = APIRouter()


@router.get("/preview/{token}", response_model=None)
def show_preview(
    request: Request,
    token: str,
    store: InMemoryTTLStore = Depends(get_ttl_store),
    uow: SQLiteUnitOfWork = Depends(get_uow),
) -> HTMLResponse | RedirectResponse:
    resolved = run_resolve(ResolvePreviewInput(token=token), store=store)
    if not resolved.success or resolved.article_id is None:
        return redirect_with_flash("/articles", PREVIEW_EXPIRED_MESSAGE)

    with uow:
        article = uow.articles.get_by_id(resolved.article_id)
    if article is None:
        # Deleted since the link was issued
        return redirect_with_flash("/articles", PREVIEW_EXPIRED_MESSAGE)

    title = f"Preview: {article.title or 'Untitled'}"
    return html_page(request, title, article_body(article, preview=True))

"""
Public article page, by slug.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from inkwell.adapters.clock import SystemClock
from inkwell.adapters.sqlite.repos import SQLiteUnitOfWork
from inkwell.api.deps import get_clock, get_uow
from inkwell.api.views import article_body, html_page, redirect_with_flash, seo_description
from inkwell.components.articles import GetPublishedInput, run_get_published

router = APIRouter()


@router.get("/articles/{slug}", response_model=None)
def show_article(
    request: Request,
    slug: str,
    uow: SQLiteUnitOfWork = Depends(get_uow),
    clock: SystemClock = Depends(get_clock),
) -> HTMLResponse | RedirectResponse:
    """Only published articles whose publish time has passed are visible."""
    result = run_get_published(GetPublishedInput(slug=slug), uow=uow, time=clock)
    if not result.success or result.article is None:
        return redirect_with_flash("/", "Article not found.")

    article = result.article
    return html_page(request, article.title, article_body(article), seo_description(article))


@router.get("/", response_class=HTMLResponse)
def home(request: Request) -> HTMLResponse:
    """Landing page; shows any flash left by a redirect."""
    body = """
    <main>
        <h1>Inkwell</h1>
    </main>
    """
    return html_page(request, "Inkwell", body)

"""
Author article routes.

Editor pages (HTML) plus the JSON endpoints the editor calls: explicit save,
title/content autosave, publish, schedule, preview links and version history.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from inkwell.adapters.cache.ttl_store import InMemoryTTLStore
from inkwell.adapters.clock import SystemClock
from inkwell.adapters.sqlite.repos import SQLiteUnitOfWork
from inkwell.api.deps import (
    Settings,
    get_article_config,
    get_clock,
    get_current_actor,
    get_preview_config,
    get_settings,
    get_ttl_store,
    get_uow,
)
from inkwell.api.errors import raise_for_errors
from inkwell.api.schemas import (
    ContentResponse,
    PreviewRequest,
    PreviewResponse,
    PublishResponse,
    SaveArticleRequest,
    SaveArticleResponse,
    ScheduleRequest,
    ScheduleResponse,
    TitleResponse,
    UpdateContentRequest,
    UpdateTitleRequest,
    VersionListResponse,
    VersionModel,
)
from inkwell.api.views import (
    article_list_body,
    editor_body,
    html_page,
    redirect_with_flash,
)
from inkwell.components.articles import (
    ArticleConfig,
    CreateDraftInput,
    DeleteArticleInput,
    GetArticleInput,
    ListArticlesInput,
    ListVersionsInput,
    PublishArticleInput,
    SaveArticleInput,
    ScheduleArticleInput,
    UpdateContentInput,
    UpdateTitleInput,
    run_create_draft,
    run_delete,
    run_get,
    run_list,
    run_list_versions,
    run_publish,
    run_save,
    run_schedule,
    run_update_content,
    run_update_title,
)
from inkwell.components.preview import IssuePreviewInput, PreviewConfig, run_issue
from inkwell.domain.entities import Actor

router = APIRouter()


# --- HTML ---


@router.get("/articles", response_class=HTMLResponse)
def list_articles(
    request: Request,
    actor: Actor = Depends(get_current_actor),
    uow: SQLiteUnitOfWork = Depends(get_uow),
) -> HTMLResponse:
    """List the author's articles, most recently updated first."""
    result = run_list(ListArticlesInput(owner_id=actor.user_id), uow=uow)
    return html_page(request, "Articles", article_list_body(result.items))


@router.get("/articles/create", response_class=HTMLResponse)
def create_article(
    request: Request,
    actor: Actor = Depends(get_current_actor),
    uow: SQLiteUnitOfWork = Depends(get_uow),
    clock: SystemClock = Depends(get_clock),
    config: ArticleConfig = Depends(get_article_config),
) -> HTMLResponse:
    """Start a new draft and open it in the editor."""
    result = run_create_draft(
        CreateDraftInput(owner_id=actor.user_id), uow=uow, time=clock, config=config
    )
    raise_for_errors(result.errors)
    assert result.article is not None
    return html_page(request, "New article", editor_body(result.article))


@router.get("/articles/{article_id}/edit", response_model=None)
def edit_article(
    request: Request,
    article_id: UUID,
    actor: Actor = Depends(get_current_actor),
    uow: SQLiteUnitOfWork = Depends(get_uow),
) -> HTMLResponse | RedirectResponse:
    result = run_get(GetArticleInput(article_id=article_id, owner_id=actor.user_id), uow=uow)
    if not result.success or result.article is None:
        return redirect_with_flash("/articles", "Article not found.")
    article = result.article
    return html_page(request, article.title or "Untitled", editor_body(article))


@router.delete("/articles/{article_id}")
def delete_article(
    article_id: UUID,
    actor: Actor = Depends(get_current_actor),
    uow: SQLiteUnitOfWork = Depends(get_uow),
) -> RedirectResponse:
    """Delete and go back to the list; the outcome travels as a flash message."""
    result = run_delete(
        DeleteArticleInput(article_id=article_id, owner_id=actor.user_id), uow=uow
    )
    if not result.success:
        err = result.errors[0]
        message = "Article not found." if err.kind == "not_found" else "Failed to delete article."
        return redirect_with_flash("/articles", message)
    return redirect_with_flash("/articles", "Article deleted successfully.", kind="success")


# --- JSON ---


@router.post("/articles", response_model=SaveArticleResponse)
def save_article(
    body: SaveArticleRequest,
    actor: Actor = Depends(get_current_actor),
    uow: SQLiteUnitOfWork = Depends(get_uow),
    clock: SystemClock = Depends(get_clock),
    config: ArticleConfig = Depends(get_article_config),
) -> SaveArticleResponse:
    """Explicit save: applies the given fields and records a snapshot."""
    result = run_save(
        SaveArticleInput(
            article_id=body.id,
            owner_id=actor.user_id,
            title=body.title,
            content=body.content,
            seo=body.seo,
        ),
        uow=uow,
        time=clock,
        config=config,
    )
    raise_for_errors(result.errors)
    assert result.article is not None
    return SaveArticleResponse(
        success=True,
        slug=result.article.slug,
        word_count=result.article.word_count,
        reading_time=result.article.reading_time,
    )


@router.patch("/articles/{article_id}/title", response_model=TitleResponse)
def update_title(
    article_id: UUID,
    body: UpdateTitleRequest,
    actor: Actor = Depends(get_current_actor),
    uow: SQLiteUnitOfWork = Depends(get_uow),
    clock: SystemClock = Depends(get_clock),
    config: ArticleConfig = Depends(get_article_config),
) -> TitleResponse:
    result = run_update_title(
        UpdateTitleInput(article_id=article_id, owner_id=actor.user_id, title=body.title),
        uow=uow,
        time=clock,
        config=config,
    )
    raise_for_errors(result.errors)
    assert result.article is not None
    return TitleResponse(success=True, slug=result.article.slug)


@router.patch("/articles/{article_id}/content", response_model=ContentResponse)
def update_content(
    article_id: UUID,
    body: UpdateContentRequest,
    actor: Actor = Depends(get_current_actor),
    uow: SQLiteUnitOfWork = Depends(get_uow),
    clock: SystemClock = Depends(get_clock),
    config: ArticleConfig = Depends(get_article_config),
) -> ContentResponse:
    result = run_update_content(
        UpdateContentInput(article_id=article_id, owner_id=actor.user_id, content=body.content),
        uow=uow,
        time=clock,
        config=config,
    )
    raise_for_errors(result.errors)
    assert result.article is not None
    return ContentResponse(
        success=True,
        word_count=result.article.word_count,
        reading_time=result.article.reading_time,
    )


@router.post("/articles/preview", response_model=PreviewResponse)
def generate_preview(
    body: PreviewRequest,
    actor: Actor = Depends(get_current_actor),
    uow: SQLiteUnitOfWork = Depends(get_uow),
    store: InMemoryTTLStore = Depends(get_ttl_store),
    clock: SystemClock = Depends(get_clock),
    config: PreviewConfig = Depends(get_preview_config),
) -> PreviewResponse:
    """Issue a shareable preview link, valid for the configured TTL."""
    result = run_issue(
        IssuePreviewInput(article_id=body.id, owner_id=actor.user_id),
        uow=uow,
        store=store,
        time=clock,
        config=config,
    )
    raise_for_errors(result.errors)
    assert result.url is not None and result.expires_at is not None
    return PreviewResponse(preview_url=result.url, expires_at=result.expires_at)


@router.post("/articles/{article_id}/publish", response_model=PublishResponse)
def publish_article(
    article_id: UUID,
    actor: Actor = Depends(get_current_actor),
    uow: SQLiteUnitOfWork = Depends(get_uow),
    clock: SystemClock = Depends(get_clock),
    config: ArticleConfig = Depends(get_article_config),
    settings: Settings = Depends(get_settings),
) -> PublishResponse:
    result = run_publish(
        PublishArticleInput(article_id=article_id, owner_id=actor.user_id),
        uow=uow,
        time=clock,
        config=config,
    )
    raise_for_errors(result.errors)
    assert result.article is not None
    return PublishResponse(
        success=True, article_url=f"{settings.base_url}/articles/{result.article.slug}"
    )


@router.post("/articles/{article_id}/schedule", response_model=ScheduleResponse)
def schedule_article(
    article_id: UUID,
    body: ScheduleRequest,
    actor: Actor = Depends(get_current_actor),
    uow: SQLiteUnitOfWork = Depends(get_uow),
    clock: SystemClock = Depends(get_clock),
) -> ScheduleResponse:
    result = run_schedule(
        ScheduleArticleInput(
            article_id=article_id, owner_id=actor.user_id, scheduled_at=body.scheduled_at
        ),
        uow=uow,
        time=clock,
    )
    raise_for_errors(result.errors)
    assert result.article is not None and result.article.scheduled_at is not None
    return ScheduleResponse(
        success=True,
        message=f"Article scheduled for publication at {result.article.scheduled_at.isoformat()}",
    )


@router.get("/api/articles/{article_id}/versions", response_model=VersionListResponse)
def list_versions(
    article_id: UUID,
    actor: Actor = Depends(get_current_actor),
    uow: SQLiteUnitOfWork = Depends(get_uow),
) -> VersionListResponse:
    result = run_list_versions(
        ListVersionsInput(article_id=article_id, owner_id=actor.user_id), uow=uow
    )
    raise_for_errors(result.errors)
    return VersionListResponse(
        success=True,
        versions=[
            VersionModel(id=v.id, label=v.label, content=v.content, created_at=v.created_at)
            for v in result.versions
        ],
    )

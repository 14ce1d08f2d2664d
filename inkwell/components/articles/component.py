"""
Articles component - Article lifecycle: drafts, autosave, publish, schedule.

Manages one author's articles through draft -> scheduled -> published,
assigning slugs, keeping reading statistics current and snapshotting
content into versions.

Lifecycle:
- draft -> scheduled (schedule, scheduled_at strictly in the future)
- draft|scheduled|published -> published (publish now, or the sweeper)
- any -> deleted (versions removed, media detached and kept)

Invariants:
- I1: published implies published_at set and non-empty title and content
- I2: scheduled implies scheduled_at set and published_at cleared
- I3: slug unique across all articles; probe base, base-1, base-2, ...
- I4: versions are append-only
- I5: a statistics failure never blocks the save it belongs to
"""

from __future__ import annotations

import logging
import secrets
from datetime import UTC, datetime
from uuid import UUID, uuid4

from inkwell.domain.entities import PUBLISHED_VERSION_LABEL, Article, ArticleVersion
from inkwell.domain.errors import GENERIC_PERSISTENCE_MESSAGE
from inkwell.domain.text import compute_word_stats, probe_unique_slug, slugify
from inkwell.rules.models import ArticleRules

from .models import (
    ArticleConfig,
    ArticleError,
    ArticleListOutput,
    ArticleOutput,
    CreateDraftInput,
    DeleteArticleInput,
    DeleteOutput,
    GetArticleInput,
    GetPublishedInput,
    ListArticlesInput,
    ListVersionsInput,
    PublishArticleInput,
    SaveArticleInput,
    ScheduleArticleInput,
    UpdateContentInput,
    UpdateTitleInput,
    VersionListOutput,
)
from .ports import ArticleRepoPort, TimePort, UnitOfWorkPort

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = ArticleConfig()


# --- Errors ---


def _not_found(article_id: UUID) -> ArticleError:
    return ArticleError(
        kind="not_found",
        code="article_not_found",
        message=f"Article {article_id} not found",
    )


def _store_error() -> ArticleError:
    return ArticleError(
        kind="persistence",
        code="store_error",
        message=GENERIC_PERSISTENCE_MESSAGE,
    )


PUBLISHABLE_MESSAGE = "Article must have a title and content to be published."
KEEP_PUBLISHABLE_MESSAGE = "Scheduled and published articles must keep a title and content."


def require_publishable(
    article: Article, message: str = PUBLISHABLE_MESSAGE
) -> list[ArticleError]:
    """Title and content must both be present to go public (I1)."""
    errors: list[ArticleError] = []
    if not article.title.strip():
        errors.append(
            ArticleError(
                kind="validation",
                code="title_required",
                message=message,
                field="title",
            )
        )
    if not article.content.strip():
        errors.append(
            ArticleError(
                kind="validation",
                code="content_required",
                message=message,
                field="content",
            )
        )
    return errors


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


# --- Lifecycle steps ---


def assign_slug(
    article: Article,
    title: str,
    articles: ArticleRepoPort,
    config: ArticleConfig = DEFAULT_CONFIG,
) -> str:
    """
    Derive the canonical slug from a title and set it on the article (I3).

    The uniqueness probe excludes the article itself, so re-deriving an
    unchanged title keeps the current slug.
    """
    slug = probe_unique_slug(
        slugify(title),
        lambda candidate: articles.slug_taken(candidate, article.id),
        fallback=config.slug_fallback,
    )
    article.slug = slug
    return slug


def refresh_word_stats(article: Article, config: ArticleConfig = DEFAULT_CONFIG) -> None:
    """Recompute word count and reading time; failures are logged only (I5)."""
    try:
        stats = compute_word_stats(article.content, config.words_per_minute)
    except Exception:
        logger.exception("Word stats recomputation failed for article %s", article.id)
        return
    article.word_count = stats.word_count
    article.reading_time = stats.reading_time


def snapshot(
    uow: UnitOfWorkPort,
    article: Article,
    now: datetime,
    label: str | None = None,
) -> ArticleVersion:
    """Append an immutable copy of the article content (I4)."""
    if label is None:
        label = f"Snapshot {uow.versions.count_for_article(article.id) + 1}"
    version = ArticleVersion(
        id=uuid4(),
        article_id=article.id,
        content=article.content,
        label=label,
        created_at=now,
    )
    return uow.versions.append(version)


def mark_published(uow: UnitOfWorkPort, article: Article, now: datetime) -> Article:
    """Flip an article to published and record the published snapshot."""
    article.status = "published"
    article.published_at = now
    article.updated_at = now
    uow.articles.save(article)
    snapshot(uow, article, now, label=PUBLISHED_VERSION_LABEL)
    return article


# --- Component Entry Points ---


def run_create_draft(
    inp: CreateDraftInput,
    *,
    uow: UnitOfWorkPort,
    time: TimePort,
    config: ArticleConfig = DEFAULT_CONFIG,
) -> ArticleOutput:
    """
    Start a new empty draft owned by the caller.

    The slug is a random placeholder until the article is named.
    """
    now = time.now_utc()
    article = Article(
        id=uuid4(),
        owner_id=inp.owner_id,
        title="",
        slug=f"{config.draft_slug_prefix}{secrets.token_hex(5)}",
        content="",
        status="draft",
        created_at=now,
        updated_at=now,
    )

    try:
        with uow:
            uow.articles.save(article)
            uow.commit()
    except Exception:
        logger.exception("Failed to create draft for owner %s", inp.owner_id)
        return ArticleOutput(article=None, errors=[_store_error()], success=False)

    logger.info("Created new article %s for owner %s", article.id, inp.owner_id)
    return ArticleOutput(article=article, errors=[], success=True)


def run_save(
    inp: SaveArticleInput,
    *,
    uow: UnitOfWorkPort,
    time: TimePort,
    config: ArticleConfig = DEFAULT_CONFIG,
) -> ArticleOutput:
    """
    Explicit save: apply fields, re-slug drafts, recompute stats, snapshot.

    All-or-nothing: the field update and the version snapshot commit together.
    """
    now = time.now_utc()

    try:
        with uow:
            article = uow.articles.get_owned(inp.article_id, inp.owner_id)
            if article is None:
                logger.warning(
                    "Article %s not found during save for owner %s",
                    inp.article_id,
                    inp.owner_id,
                )
                return ArticleOutput(
                    article=None, errors=[_not_found(inp.article_id)], success=False
                )

            if inp.title is not None:
                article.title = inp.title
            if inp.content is not None:
                article.content = inp.content
            if inp.seo is not None:
                article.seo = inp.seo

            if article.status != "draft":
                errors = require_publishable(article, KEEP_PUBLISHABLE_MESSAGE)
                if errors:
                    return ArticleOutput(article=None, errors=errors, success=False)

            # A supplied but empty title keeps the current slug
            if inp.title and article.status == "draft":
                assign_slug(article, inp.title, uow.articles, config)

            refresh_word_stats(article, config)
            article.updated_at = now
            uow.articles.save(article)
            snapshot(uow, article, now)
            uow.commit()
    except Exception:
        logger.exception(
            "Error saving article %s for owner %s", inp.article_id, inp.owner_id
        )
        return ArticleOutput(article=None, errors=[_store_error()], success=False)

    logger.info("Article %s saved", article.id)
    return ArticleOutput(article=article, errors=[], success=True)


def run_update_title(
    inp: UpdateTitleInput,
    *,
    uow: UnitOfWorkPort,
    time: TimePort,
    config: ArticleConfig = DEFAULT_CONFIG,
) -> ArticleOutput:
    """Autosave the title; drafts follow it with a fresh slug."""
    if not inp.title.strip():
        return ArticleOutput(
            article=None,
            errors=[
                ArticleError(
                    kind="validation",
                    code="title_required",
                    message="Title is required",
                    field="title",
                )
            ],
            success=False,
        )
    if len(inp.title) > config.title_max_length:
        return ArticleOutput(
            article=None,
            errors=[
                ArticleError(
                    kind="validation",
                    code="title_too_long",
                    message=f"Title must be at most {config.title_max_length} characters",
                    field="title",
                )
            ],
            success=False,
        )

    now = time.now_utc()
    try:
        with uow:
            article = uow.articles.get_owned(inp.article_id, inp.owner_id)
            if article is None:
                logger.warning(
                    "Article %s not found during title update for owner %s",
                    inp.article_id,
                    inp.owner_id,
                )
                return ArticleOutput(
                    article=None, errors=[_not_found(inp.article_id)], success=False
                )

            article.title = inp.title
            if article.status == "draft":
                assign_slug(article, inp.title, uow.articles, config)
            article.updated_at = now
            uow.articles.save(article)
            uow.commit()
    except Exception:
        logger.exception(
            "Error updating title of article %s for owner %s", inp.article_id, inp.owner_id
        )
        return ArticleOutput(article=None, errors=[_store_error()], success=False)

    return ArticleOutput(article=article, errors=[], success=True)


def run_update_content(
    inp: UpdateContentInput,
    *,
    uow: UnitOfWorkPort,
    time: TimePort,
    config: ArticleConfig = DEFAULT_CONFIG,
) -> ArticleOutput:
    """Autosave the content and return the refreshed reading statistics."""
    now = time.now_utc()
    try:
        with uow:
            article = uow.articles.get_owned(inp.article_id, inp.owner_id)
            if article is None:
                logger.warning(
                    "Article %s not found during content update for owner %s",
                    inp.article_id,
                    inp.owner_id,
                )
                return ArticleOutput(
                    article=None, errors=[_not_found(inp.article_id)], success=False
                )

            article.content = inp.content or ""
            if article.status != "draft":
                errors = require_publishable(article, KEEP_PUBLISHABLE_MESSAGE)
                if errors:
                    return ArticleOutput(article=None, errors=errors, success=False)

            refresh_word_stats(article, config)
            article.updated_at = now
            uow.articles.save(article)
            uow.commit()
    except Exception:
        logger.exception(
            "Error updating content of article %s for owner %s",
            inp.article_id,
            inp.owner_id,
        )
        return ArticleOutput(article=None, errors=[_store_error()], success=False)

    return ArticleOutput(article=article, errors=[], success=True)


def run_publish(
    inp: PublishArticleInput,
    *,
    uow: UnitOfWorkPort,
    time: TimePort,
    config: ArticleConfig = DEFAULT_CONFIG,
) -> ArticleOutput:
    """
    Publish now.

    Always re-derives the canonical slug from the current title, even for
    articles that were already published.
    """
    now = time.now_utc()
    try:
        with uow:
            article = uow.articles.get_owned(inp.article_id, inp.owner_id)
            if article is None:
                return ArticleOutput(
                    article=None, errors=[_not_found(inp.article_id)], success=False
                )

            errors = require_publishable(article)
            if errors:
                return ArticleOutput(article=article, errors=errors, success=False)

            assign_slug(article, article.title, uow.articles, config)
            mark_published(uow, article, now)
            uow.commit()
    except Exception:
        logger.exception(
            "Error publishing article %s for owner %s", inp.article_id, inp.owner_id
        )
        return ArticleOutput(article=None, errors=[_store_error()], success=False)

    logger.info("Published article %s as '%s'", article.id, article.slug)
    return ArticleOutput(article=article, errors=[], success=True)


def run_schedule(
    inp: ScheduleArticleInput,
    *,
    uow: UnitOfWorkPort,
    time: TimePort,
) -> ArticleOutput:
    """
    Schedule publication (I2).

    Naive datetimes are taken as UTC. The date must be strictly in the future.
    """
    now = time.now_utc()
    scheduled_at = _as_utc(inp.scheduled_at)

    try:
        with uow:
            article = uow.articles.get_owned(inp.article_id, inp.owner_id)
            if article is None:
                return ArticleOutput(
                    article=None, errors=[_not_found(inp.article_id)], success=False
                )

            errors: list[ArticleError] = []
            if scheduled_at <= now:
                errors.append(
                    ArticleError(
                        kind="validation",
                        code="schedule_in_past",
                        message="Scheduled date must be in the future.",
                        field="scheduled_at",
                    )
                )
            errors.extend(require_publishable(article))
            if errors:
                return ArticleOutput(article=article, errors=errors, success=False)

            article.status = "scheduled"
            article.scheduled_at = scheduled_at
            article.published_at = None
            article.updated_at = now
            uow.articles.save(article)
            uow.commit()
    except Exception:
        logger.exception(
            "Error scheduling article %s for owner %s", inp.article_id, inp.owner_id
        )
        return ArticleOutput(article=None, errors=[_store_error()], success=False)

    logger.info("Scheduled article %s for %s", article.id, scheduled_at.isoformat())
    return ArticleOutput(article=article, errors=[], success=True)


def run_delete(
    inp: DeleteArticleInput,
    *,
    uow: UnitOfWorkPort,
) -> DeleteOutput:
    """Delete an article with its versions; attached media is detached, not deleted."""
    try:
        with uow:
            article = uow.articles.get_owned(inp.article_id, inp.owner_id)
            if article is None:
                return DeleteOutput(
                    deleted=False, errors=[_not_found(inp.article_id)], success=False
                )

            versions_deleted = uow.versions.delete_for_article(article.id)
            media_detached = uow.media.detach_all(article.id)
            uow.articles.delete(article.id)
            uow.commit()
    except Exception:
        logger.exception(
            "Error deleting article %s for owner %s", inp.article_id, inp.owner_id
        )
        return DeleteOutput(deleted=False, errors=[_store_error()], success=False)

    logger.info(
        "Deleted article %s (%d versions, %d media detached)",
        inp.article_id,
        versions_deleted,
        media_detached,
    )
    return DeleteOutput(
        deleted=True,
        versions_deleted=versions_deleted,
        media_detached=media_detached,
        errors=[],
        success=True,
    )


def run_get(
    inp: GetArticleInput,
    *,
    uow: UnitOfWorkPort,
) -> ArticleOutput:
    """Get an owned article (editor load)."""
    with uow:
        article = uow.articles.get_owned(inp.article_id, inp.owner_id)
    if article is None:
        return ArticleOutput(article=None, errors=[_not_found(inp.article_id)], success=False)
    return ArticleOutput(article=article, errors=[], success=True)


def run_list(
    inp: ListArticlesInput,
    *,
    uow: UnitOfWorkPort,
) -> ArticleListOutput:
    """List the owner's articles, most recently updated first."""
    with uow:
        items = uow.articles.list_by_owner(inp.owner_id)
    return ArticleListOutput(items=items, errors=[], success=True)


def run_get_published(
    inp: GetPublishedInput,
    *,
    uow: UnitOfWorkPort,
    time: TimePort,
) -> ArticleOutput:
    """Public lookup: only published articles whose publish time has passed."""
    now = time.now_utc()
    with uow:
        article = uow.articles.get_by_slug(inp.slug)

    if (
        article is None
        or article.status != "published"
        or article.published_at is None
        or _as_utc(article.published_at) > now
    ):
        return ArticleOutput(
            article=None,
            errors=[
                ArticleError(
                    kind="not_found",
                    code="article_not_found",
                    message="Article not found.",
                )
            ],
            success=False,
        )
    return ArticleOutput(article=article, errors=[], success=True)


def run_list_versions(
    inp: ListVersionsInput,
    *,
    uow: UnitOfWorkPort,
) -> VersionListOutput:
    """Version history of an owned article, oldest first."""
    with uow:
        article = uow.articles.get_owned(inp.article_id, inp.owner_id)
        if article is None:
            return VersionListOutput(
                versions=[], errors=[_not_found(inp.article_id)], success=False
            )
        versions = uow.versions.list_for_article(article.id)
    return VersionListOutput(versions=versions, errors=[], success=True)


def run(
    inp: (
        CreateDraftInput
        | SaveArticleInput
        | UpdateTitleInput
        | UpdateContentInput
        | PublishArticleInput
        | ScheduleArticleInput
        | DeleteArticleInput
        | GetArticleInput
        | ListArticlesInput
        | GetPublishedInput
        | ListVersionsInput
    ),
    *,
    uow: UnitOfWorkPort,
    time: TimePort | None = None,
    config: ArticleConfig = DEFAULT_CONFIG,
) -> ArticleOutput | ArticleListOutput | VersionListOutput | DeleteOutput:
    """
    Main entry point for the articles component.

    Dispatches to the appropriate handler based on input type.
    """
    if isinstance(inp, GetArticleInput):
        return run_get(inp, uow=uow)
    elif isinstance(inp, ListArticlesInput):
        return run_list(inp, uow=uow)
    elif isinstance(inp, ListVersionsInput):
        return run_list_versions(inp, uow=uow)
    elif isinstance(inp, DeleteArticleInput):
        return run_delete(inp, uow=uow)

    if time is None:
        raise ValueError(f"TimePort is required for {type(inp).__name__}")

    if isinstance(inp, CreateDraftInput):
        return run_create_draft(inp, uow=uow, time=time, config=config)
    elif isinstance(inp, SaveArticleInput):
        return run_save(inp, uow=uow, time=time, config=config)
    elif isinstance(inp, UpdateTitleInput):
        return run_update_title(inp, uow=uow, time=time, config=config)
    elif isinstance(inp, UpdateContentInput):
        return run_update_content(inp, uow=uow, time=time, config=config)
    elif isinstance(inp, PublishArticleInput):
        return run_publish(inp, uow=uow, time=time, config=config)
    elif isinstance(inp, ScheduleArticleInput):
        return run_schedule(inp, uow=uow, time=time)
    elif isinstance(inp, GetPublishedInput):
        return run_get_published(inp, uow=uow, time=time)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")


def build_article_config(rules: ArticleRules | None) -> ArticleConfig:
    """Map the articles section of rules.yaml onto the component config."""
    if rules is None:
        return DEFAULT_CONFIG
    return ArticleConfig(
        words_per_minute=rules.words_per_minute,
        slug_fallback=rules.slug_fallback,
        draft_slug_prefix=rules.draft_slug_prefix,
        title_max_length=rules.title_max_length,
    )

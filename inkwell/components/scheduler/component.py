"""
Scheduler component - Publishes scheduled articles once they fall due.

Triggered externally (cron via `inkwell publish-due`). Each due article is
published in its own unit of work so one failure never blocks the rest.

Invariants:
- I1: only `scheduled` articles with scheduled_at <= now are touched
- I2: each publish appends a "Published Version" snapshot
- I3: per-article failures are logged and reported, never raised
- I4: an article missing its title or content is reported failed, never published
"""

from __future__ import annotations

import logging
from datetime import UTC

from inkwell.components.articles.component import mark_published, require_publishable

from .models import ProcessDueInput, ProcessDueOutput, PublishResult, SchedulerError
from .ports import TimePort, UnitOfWorkPort

logger = logging.getLogger(__name__)


def run_publish_due(
    inp: ProcessDueInput,
    *,
    uow: UnitOfWorkPort,
    time: TimePort,
) -> ProcessDueOutput:
    """
    Publish every scheduled article whose time has come.

    Args:
        inp: Sweep options.
        uow: Unit of work, entered once for selection and once per article.
        time: Clock; `now` is read once per pass.

    Returns:
        ProcessDueOutput with one result per selected article.
    """
    now = time.now_utc()

    try:
        with uow:
            due = uow.articles.list_due_scheduled(now)
    except Exception:
        logger.exception("Failed to select scheduled articles due at %s", now.isoformat())
        return ProcessDueOutput(
            results=(),
            errors=[SchedulerError(code="select_failed", message="Could not load due articles")],
            success=False,
        )

    if inp.max_articles is not None:
        due = due[: inp.max_articles]

    results: list[PublishResult] = []
    for candidate in due:
        try:
            with uow:
                article = uow.articles.get_by_id(candidate.id)
                # Re-check inside the transaction; another run may have won
                if (
                    article is None
                    or article.status != "scheduled"
                    or article.scheduled_at is None
                    or article.scheduled_at.astimezone(UTC) > now
                ):
                    results.append(
                        PublishResult(
                            article_id=candidate.id,
                            outcome="skipped",
                            message="No longer due",
                        )
                    )
                    continue

                errors = require_publishable(article)
                if errors:
                    logger.warning(
                        "Scheduled article %s is missing %s; not publishing",
                        article.id,
                        " and ".join(e.field or e.code for e in errors),
                    )
                    results.append(
                        PublishResult(
                            article_id=article.id,
                            outcome="failed",
                            message=errors[0].message,
                        )
                    )
                    continue

                mark_published(uow, article, now)
                uow.commit()
        except Exception as e:
            logger.exception("Failed to publish scheduled article %s", candidate.id)
            results.append(
                PublishResult(article_id=candidate.id, outcome="failed", message=str(e))
            )
            continue

        logger.info("Published scheduled article: %s", article.slug)
        results.append(
            PublishResult(
                article_id=article.id,
                outcome="published",
                message="Published",
                published_at=now,
                slug=article.slug,
            )
        )

    published = sum(1 for r in results if r.outcome == "published")
    failed = sum(1 for r in results if r.outcome == "failed")
    if results:
        logger.info("Sweeper pass: %d published, %d failed", published, failed)

    return ProcessDueOutput(
        results=tuple(results),
        published_count=published,
        failed_count=failed,
        errors=[],
        success=True,
    )


def run(inp: ProcessDueInput, *, uow: UnitOfWorkPort, time: TimePort) -> ProcessDueOutput:
    """Main entry point for the scheduler component."""
    if isinstance(inp, ProcessDueInput):
        return run_publish_due(inp, uow=uow, time=time)
    raise ValueError(f"Unknown input type: {type(inp)}")

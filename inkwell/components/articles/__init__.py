"""
Articles component - Article lifecycle management.
"""

from .component import (
    assign_slug,
    build_article_config,
    mark_published,
    refresh_word_stats,
    require_publishable,
    run,
    run_create_draft,
    run_delete,
    run_get,
    run_get_published,
    run_list,
    run_list_versions,
    run_publish,
    run_save,
    run_schedule,
    run_update_content,
    run_update_title,
    snapshot,
)
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

__all__ = [
    # Entry points
    "run",
    "run_create_draft",
    "run_delete",
    "run_get",
    "run_get_published",
    "run_list",
    "run_list_versions",
    "run_publish",
    "run_save",
    "run_schedule",
    "run_update_content",
    "run_update_title",
    # Lifecycle steps
    "assign_slug",
    "build_article_config",
    "mark_published",
    "refresh_word_stats",
    "require_publishable",
    "snapshot",
    # Input models
    "CreateDraftInput",
    "DeleteArticleInput",
    "GetArticleInput",
    "GetPublishedInput",
    "ListArticlesInput",
    "ListVersionsInput",
    "PublishArticleInput",
    "SaveArticleInput",
    "ScheduleArticleInput",
    "UpdateContentInput",
    "UpdateTitleInput",
    # Output models
    "ArticleListOutput",
    "ArticleOutput",
    "DeleteOutput",
    "VersionListOutput",
    # Errors and config
    "ArticleConfig",
    "ArticleError",
    # Ports
    "ArticleRepoPort",
    "TimePort",
    "UnitOfWorkPort",
]

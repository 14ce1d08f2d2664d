"""
Shared fixtures: in-memory ports for component tests, a migrated SQLite
database for integration tests.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path
from types import TracebackType
from uuid import UUID, uuid4

import pytest

from inkwell.adapters.sqlite.migrator import DEFAULT_MIGRATIONS_DIR, SQLiteMigrator
from inkwell.domain.entities import Article, ArticleVersion, Media


# --- Mock Implementations ---


@dataclass
class MockClock:
    """Deterministic clock."""

    current_time: datetime = field(
        default_factory=lambda: datetime(2025, 4, 21, 12, 0, 0, tzinfo=UTC)
    )

    def now_utc(self) -> datetime:
        return self.current_time

    def advance(self, **kwargs: float) -> None:
        self.current_time += timedelta(**kwargs)


@dataclass
class InMemoryState:
    articles: dict[UUID, Article] = field(default_factory=dict)
    versions: list[ArticleVersion] = field(default_factory=list)
    media: dict[UUID, Media] = field(default_factory=dict)
    links: list[tuple[UUID, UUID]] = field(default_factory=list)


class MockArticleRepo:
    def __init__(self, uow: InMemoryUnitOfWork) -> None:
        self._uow = uow

    @property
    def _articles(self) -> dict[UUID, Article]:
        return self._uow.state.articles

    def get_by_id(self, article_id: UUID) -> Article | None:
        article = self._articles.get(article_id)
        return article.model_copy(deep=True) if article else None

    def get_owned(self, article_id: UUID, owner_id: UUID) -> Article | None:
        article = self.get_by_id(article_id)
        if article is None or article.owner_id != owner_id:
            return None
        return article

    def get_by_slug(self, slug: str) -> Article | None:
        for article in self._articles.values():
            if article.slug == slug:
                return article.model_copy(deep=True)
        return None

    def slug_taken(self, slug: str, exclude_id: UUID) -> bool:
        return any(a.slug == slug and a.id != exclude_id for a in self._articles.values())

    def save(self, article: Article) -> Article:
        if article.id in self._uow.fail_save_ids:
            raise RuntimeError(f"simulated store failure for {article.id}")
        if self.slug_taken(article.slug, article.id):
            raise ValueError(f"UNIQUE constraint failed: articles.slug ({article.slug})")
        self._articles[article.id] = article.model_copy(deep=True)
        return article

    def delete(self, article_id: UUID) -> None:
        self._articles.pop(article_id, None)

    def list_by_owner(self, owner_id: UUID) -> list[Article]:
        owned = [a for a in self._articles.values() if a.owner_id == owner_id]
        return sorted(owned, key=lambda a: a.updated_at, reverse=True)

    def list_due_scheduled(self, now_utc: datetime) -> list[Article]:
        due = [
            a
            for a in self._articles.values()
            if a.status == "scheduled" and a.scheduled_at is not None and a.scheduled_at <= now_utc
        ]
        return [a.model_copy(deep=True) for a in sorted(due, key=lambda a: a.scheduled_at)]


class MockVersionRepo:
    def __init__(self, uow: InMemoryUnitOfWork) -> None:
        self._uow = uow

    def append(self, version: ArticleVersion) -> ArticleVersion:
        self._uow.state.versions.append(version)
        return version

    def count_for_article(self, article_id: UUID) -> int:
        return len(self.list_for_article(article_id))

    def list_for_article(self, article_id: UUID) -> list[ArticleVersion]:
        return [v for v in self._uow.state.versions if v.article_id == article_id]

    def delete_for_article(self, article_id: UUID) -> int:
        before = len(self._uow.state.versions)
        self._uow.state.versions = [
            v for v in self._uow.state.versions if v.article_id != article_id
        ]
        return before - len(self._uow.state.versions)


class MockMediaRepo:
    def __init__(self, uow: InMemoryUnitOfWork) -> None:
        self._uow = uow

    def save(self, media: Media) -> Media:
        if self._uow.fail_media_save:
            raise RuntimeError("simulated media store failure")
        self._uow.state.media[media.id] = media
        return media

    def get_by_id(self, media_id: UUID) -> Media | None:
        return self._uow.state.media.get(media_id)

    def attach(self, article_id: UUID, media_id: UUID) -> None:
        if (article_id, media_id) not in self._uow.state.links:
            self._uow.state.links.append((article_id, media_id))

    def detach_all(self, article_id: UUID) -> int:
        before = len(self._uow.state.links)
        self._uow.state.links = [
            link for link in self._uow.state.links if link[0] != article_id
        ]
        return before - len(self._uow.state.links)

    def list_for_article(self, article_id: UUID) -> list[Media]:
        return [self._uow.state.media[m] for a, m in self._uow.state.links if a == article_id]


class InMemoryUnitOfWork:
    """
    Transactional fake: state is snapshotted on enter and restored on exit
    unless commit() was called.
    """

    def __init__(self) -> None:
        self.state = InMemoryState()
        self.commits = 0
        self.fail_save_ids: set[UUID] = set()
        self.fail_media_save = False
        self._snapshot: InMemoryState | None = None
        self._committed = False
        self.articles = MockArticleRepo(self)
        self.versions = MockVersionRepo(self)
        self.media = MockMediaRepo(self)

    def __enter__(self) -> InMemoryUnitOfWork:
        self._snapshot = copy.deepcopy(self.state)
        self._committed = False
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if not self._committed:
            self.rollback()
        self._snapshot = None

    def commit(self) -> None:
        self._committed = True
        self.commits += 1

    def rollback(self) -> None:
        if self._snapshot is not None:
            self.state = copy.deepcopy(self._snapshot)

    # Test helpers

    def seed(self, article: Article) -> Article:
        self.state.articles[article.id] = article.model_copy(deep=True)
        return article

    def stored(self, article_id: UUID) -> Article:
        return self.state.articles[article_id]


@dataclass
class MockFileStore:
    files: dict[str, bytes] = field(default_factory=dict)
    deleted: list[str] = field(default_factory=list)

    def save(self, name: str, data: bytes) -> str:
        self.files[name] = data
        return name

    def get(self, path: str) -> bytes:
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]

    def delete(self, path: str) -> None:
        self.deleted.append(path)
        self.files.pop(path, None)


# --- Fixtures ---


@pytest.fixture
def clock() -> MockClock:
    return MockClock()


@pytest.fixture
def uow() -> InMemoryUnitOfWork:
    return InMemoryUnitOfWork()


@pytest.fixture
def file_store() -> MockFileStore:
    return MockFileStore()


@pytest.fixture
def owner_id() -> UUID:
    return uuid4()


@pytest.fixture
def make_article(uow: InMemoryUnitOfWork, owner_id: UUID, clock: MockClock):
    """Factory seeding an article straight into the fake store."""

    def _make(**overrides: object) -> Article:
        fields: dict[str, object] = {
            "owner_id": owner_id,
            "title": "",
            "slug": f"draft-{uuid4().hex[:10]}",
            "content": "",
            "status": "draft",
            "created_at": clock.now_utc(),
            "updated_at": clock.now_utc(),
        }
        fields.update(overrides)
        return uow.seed(Article(**fields))  # type: ignore[arg-type]

    return _make


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    """Freshly migrated SQLite database."""
    path = str(tmp_path / "inkwell.db")
    SQLiteMigrator(path, DEFAULT_MIGRATIONS_DIR).run_migrations()
    return path

"""
SQLite adapters for the article, version and media ports.

Repositories either own short-lived connections or share the connection
of a SQLiteUnitOfWork, in which case committing is the unit's job.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import UTC, datetime
from types import TracebackType
from typing import Any
from uuid import UUID

from inkwell.domain.entities import Article, ArticleVersion, Media

# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def format_dt(dt: datetime | None) -> str | None:
    """
    Serialize as fixed-width UTC ISO text so string comparison in SQL
    orders the same as the datetimes.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat(timespec="microseconds")


def parse_dt(s: str | None) -> datetime | None:
    """Parse ISO datetime string."""
    return datetime.fromisoformat(s) if s else None


# -----------------------------------------------------------------------------
# Base SQLite Repository
# -----------------------------------------------------------------------------


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str, connection: sqlite3.Connection | None = None):
        self.db_path = db_path
        self._external_conn = connection

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection (uses external if provided)."""
        if self._external_conn is not None:
            return self._external_conn

        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def _should_close(self) -> bool:
        """Whether to close connection after use."""
        return self._external_conn is None


# -----------------------------------------------------------------------------
# Articles
# -----------------------------------------------------------------------------


class SQLiteArticleRepo(SQLiteRepoBase):
    """SQLite implementation of ArticleRepoPort."""

    def get_by_id(self, article_id: UUID) -> Article | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM articles WHERE id = ?", (str(article_id),)
            ).fetchone()
            return self._map_row(row) if row else None
        finally:
            if self._should_close():
                conn.close()

    def get_owned(self, article_id: UUID, owner_id: UUID) -> Article | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM articles WHERE id = ? AND owner_id = ?",
                (str(article_id), str(owner_id)),
            ).fetchone()
            return self._map_row(row) if row else None
        finally:
            if self._should_close():
                conn.close()

    def get_by_slug(self, slug: str) -> Article | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM articles WHERE slug = ?", (slug,)).fetchone()
            return self._map_row(row) if row else None
        finally:
            if self._should_close():
                conn.close()

    def slug_taken(self, slug: str, exclude_id: UUID) -> bool:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT 1 AS hit FROM articles WHERE slug = ? AND id != ? LIMIT 1",
                (slug, str(exclude_id)),
            ).fetchone()
            return row is not None
        finally:
            if self._should_close():
                conn.close()

    def save(self, article: Article) -> Article:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO articles (
                    id, owner_id, title, slug, content, status,
                    published_at, scheduled_at, seo_json,
                    word_count, reading_time, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title=excluded.title,
                    slug=excluded.slug,
                    content=excluded.content,
                    status=excluded.status,
                    published_at=excluded.published_at,
                    scheduled_at=excluded.scheduled_at,
                    seo_json=excluded.seo_json,
                    word_count=excluded.word_count,
                    reading_time=excluded.reading_time,
                    updated_at=excluded.updated_at
                """,
                (
                    str(article.id),
                    str(article.owner_id),
                    article.title,
                    article.slug,
                    article.content,
                    article.status,
                    format_dt(article.published_at),
                    format_dt(article.scheduled_at),
                    json.dumps(article.seo) if article.seo is not None else None,
                    article.word_count,
                    article.reading_time,
                    format_dt(article.created_at),
                    format_dt(article.updated_at),
                ),
            )
            if self._should_close():
                conn.commit()
            return article
        finally:
            if self._should_close():
                conn.close()

    def delete(self, article_id: UUID) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM articles WHERE id = ?", (str(article_id),))
            if self._should_close():
                conn.commit()
        finally:
            if self._should_close():
                conn.close()

    def list_by_owner(self, owner_id: UUID) -> list[Article]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM articles WHERE owner_id = ? ORDER BY updated_at DESC",
                (str(owner_id),),
            ).fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            if self._should_close():
                conn.close()

    def list_due_scheduled(self, now_utc: datetime) -> list[Article]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                """
                SELECT * FROM articles
                WHERE status = 'scheduled'
                  AND scheduled_at IS NOT NULL
                  AND scheduled_at <= ?
                ORDER BY scheduled_at ASC
                """,
                (format_dt(now_utc),),
            ).fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            if self._should_close():
                conn.close()

    def _map_row(self, row: dict[str, Any]) -> Article:
        return Article(
            id=UUID(row["id"]),
            owner_id=UUID(row["owner_id"]),
            title=row["title"],
            slug=row["slug"],
            content=row["content"],
            status=row["status"],
            published_at=parse_dt(row["published_at"]),
            scheduled_at=parse_dt(row["scheduled_at"]),
            seo=json.loads(row["seo_json"]) if row["seo_json"] else None,
            word_count=row["word_count"],
            reading_time=row["reading_time"],
            created_at=parse_dt(row["created_at"]) or datetime.min.replace(tzinfo=UTC),
            updated_at=parse_dt(row["updated_at"]) or datetime.min.replace(tzinfo=UTC),
        )


# -----------------------------------------------------------------------------
# Article versions
# -----------------------------------------------------------------------------


class SQLiteArticleVersionRepo(SQLiteRepoBase):
    """SQLite implementation of VersionRepoPort."""

    def append(self, version: ArticleVersion) -> ArticleVersion:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO article_versions (id, article_id, content, label, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    str(version.id),
                    str(version.article_id),
                    version.content,
                    version.label,
                    format_dt(version.created_at),
                ),
            )
            if self._should_close():
                conn.commit()
            return version
        finally:
            if self._should_close():
                conn.close()

    def count_for_article(self, article_id: UUID) -> int:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT COUNT(*) AS cnt FROM article_versions WHERE article_id = ?",
                (str(article_id),),
            ).fetchone()
            return row["cnt"] if row else 0
        finally:
            if self._should_close():
                conn.close()

    def list_for_article(self, article_id: UUID) -> list[ArticleVersion]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                """
                SELECT * FROM article_versions
                WHERE article_id = ?
                ORDER BY created_at ASC, rowid ASC
                """,
                (str(article_id),),
            ).fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            if self._should_close():
                conn.close()

    def delete_for_article(self, article_id: UUID) -> int:
        conn = self._get_conn()
        try:
            cursor = conn.execute(
                "DELETE FROM article_versions WHERE article_id = ?", (str(article_id),)
            )
            if self._should_close():
                conn.commit()
            return cursor.rowcount
        finally:
            if self._should_close():
                conn.close()

    def _map_row(self, row: dict[str, Any]) -> ArticleVersion:
        return ArticleVersion(
            id=UUID(row["id"]),
            article_id=UUID(row["article_id"]),
            content=row["content"],
            label=row["label"],
            created_at=parse_dt(row["created_at"]) or datetime.min.replace(tzinfo=UTC),
        )


# -----------------------------------------------------------------------------
# Media
# -----------------------------------------------------------------------------


class SQLiteMediaRepo(SQLiteRepoBase):
    """SQLite implementation of MediaRepoPort."""

    def save(self, media: Media) -> Media:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO media (
                    id, owner_id, original_name, filename, mime_type,
                    path, size, metadata_json, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    original_name=excluded.original_name,
                    mime_type=excluded.mime_type,
                    path=excluded.path,
                    size=excluded.size,
                    metadata_json=excluded.metadata_json
                """,
                (
                    str(media.id),
                    str(media.owner_id),
                    media.original_name,
                    media.filename,
                    media.mime_type,
                    media.path,
                    media.size,
                    json.dumps(media.metadata),
                    format_dt(media.created_at),
                ),
            )
            if self._should_close():
                conn.commit()
            return media
        finally:
            if self._should_close():
                conn.close()

    def get_by_id(self, media_id: UUID) -> Media | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM media WHERE id = ?", (str(media_id),)).fetchone()
            return self._map_row(row) if row else None
        finally:
            if self._should_close():
                conn.close()

    def attach(self, article_id: UUID, media_id: UUID) -> None:
        conn = self._get_conn()
        try:
            # Primary key on the pair makes a repeat attach a no-op
            conn.execute(
                """
                INSERT OR IGNORE INTO article_media (article_id, media_id, created_at)
                VALUES (?, ?, ?)
                """,
                (str(article_id), str(media_id), format_dt(datetime.now(UTC))),
            )
            if self._should_close():
                conn.commit()
        finally:
            if self._should_close():
                conn.close()

    def detach_all(self, article_id: UUID) -> int:
        conn = self._get_conn()
        try:
            cursor = conn.execute(
                "DELETE FROM article_media WHERE article_id = ?", (str(article_id),)
            )
            if self._should_close():
                conn.commit()
            return cursor.rowcount
        finally:
            if self._should_close():
                conn.close()

    def list_for_article(self, article_id: UUID) -> list[Media]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                """
                SELECT m.* FROM media m
                JOIN article_media am ON am.media_id = m.id
                WHERE am.article_id = ?
                ORDER BY am.created_at ASC
                """,
                (str(article_id),),
            ).fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            if self._should_close():
                conn.close()

    def _map_row(self, row: dict[str, Any]) -> Media:
        return Media(
            id=UUID(row["id"]),
            owner_id=UUID(row["owner_id"]),
            original_name=row["original_name"],
            filename=row["filename"],
            mime_type=row["mime_type"],
            path=row["path"],
            size=row["size"],
            metadata=json.loads(row["metadata_json"]) if row["metadata_json"] else {},
            created_at=parse_dt(row["created_at"]) or datetime.min.replace(tzinfo=UTC),
        )


# -----------------------------------------------------------------------------
# Unit of Work
# -----------------------------------------------------------------------------


class SQLiteUnitOfWork:
    """
    SQLite Unit of Work implementation.

    Provides transaction management and access to all repositories.
    Uses a shared connection for all operations within a transaction.

    With immediate=True the transaction starts with BEGIN IMMEDIATE, taking
    the write lock up front so a slug probe and the write that follows it
    cannot interleave with another writer.
    """

    def __init__(self, db_path: str, immediate: bool = True, timeout: float = 5.0):
        self.db_path = db_path
        self.immediate = immediate
        self.timeout = timeout
        self._conn: sqlite3.Connection | None = None

        # Lazy-initialized repositories, bound to the current connection
        self._articles: SQLiteArticleRepo | None = None
        self._versions: SQLiteArticleVersionRepo | None = None
        self._media: SQLiteMediaRepo | None = None

    def __enter__(self) -> SQLiteUnitOfWork:
        self._conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        self._conn.row_factory = dict_factory
        self._conn.execute("PRAGMA foreign_keys = ON;")
        if self.immediate:
            self._conn.execute("BEGIN IMMEDIATE")
        self._articles = None
        self._versions = None
        self._media = None
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        # Anything not committed is discarded
        self.rollback()
        if self._conn:
            self._conn.close()
            self._conn = None

    def _require_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Unit of work used outside of a 'with' block")
        return self._conn

    def commit(self) -> None:
        if self._conn:
            self._conn.commit()

    def rollback(self) -> None:
        if self._conn:
            self._conn.rollback()

    @property
    def articles(self) -> SQLiteArticleRepo:
        if self._articles is None:
            self._articles = SQLiteArticleRepo(self.db_path, self._require_conn())
        return self._articles

    @property
    def versions(self) -> SQLiteArticleVersionRepo:
        if self._versions is None:
            self._versions = SQLiteArticleVersionRepo(self.db_path, self._require_conn())
        return self._versions

    @property
    def media(self) -> SQLiteMediaRepo:
        if self._media is None:
            self._media = SQLiteMediaRepo(self.db_path, self._require_conn())
        return self._media

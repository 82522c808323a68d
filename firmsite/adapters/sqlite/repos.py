"""
SQLite repositories for articles and gallery images.

One connection per operation; each write commits on its own, which gives
single-record atomicity. sqlite3 failures surface as DependencyError.
"""

from __future__ import annotations

import builtins
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from firmsite.domain.entities import Article, GalleryImage
from firmsite.domain.errors import DependencyError


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def to_db_dt(dt: datetime) -> str:
    """Serialize as UTC ISO-8601 so lexical order matches time order."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat()


def parse_dt(s: str) -> datetime:
    dt = datetime.fromisoformat(s)
    return dt if dt.tzinfo else dt.replace(tzinfo=UTC)


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise DependencyError(f"Database unavailable: {e}") from e
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise DependencyError(f"Database operation failed: {e}") from e
        finally:
            conn.close()

    def _page(
        self,
        table: str,
        where: list[str],
        params: builtins.list[Any],
        order_by: str,
        limit: int,
        offset: int,
    ) -> tuple[builtins.list[dict[str, Any]], int]:
        clause = " AND ".join(["1=1", *where])
        with self._connection() as conn:
            total_row = conn.execute(
                f"SELECT COUNT(*) AS total FROM {table} WHERE {clause}", params
            ).fetchone()
            rows = conn.execute(
                f"SELECT * FROM {table} WHERE {clause} ORDER BY {order_by} LIMIT ? OFFSET ?",
                [*params, limit, offset],
            ).fetchall()
        return rows, int(total_row["total"])


class SQLiteArticleRepo(SQLiteRepoBase):
    """SQLite implementation of ArticleRepoPort."""

    def save(self, article: Article) -> Article:
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO articles (
                    id, title, category, summary, content, image_url, media_id,
                    author, is_published, published_at, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title=excluded.title,
                    category=excluded.category,
                    summary=excluded.summary,
                    content=excluded.content,
                    image_url=excluded.image_url,
                    media_id=excluded.media_id,
                    author=excluded.author,
                    is_published=excluded.is_published,
                    published_at=excluded.published_at,
                    updated_at=excluded.updated_at
                """,
                (
                    str(article.id),
                    article.title,
                    article.category,
                    article.summary,
                    article.content,
                    article.image_url,
                    article.media_id,
                    article.author,
                    int(article.is_published),
                    to_db_dt(article.published_at),
                    to_db_dt(article.created_at),
                    to_db_dt(article.updated_at),
                ),
            )
        return article

    def get_by_id(self, article_id: UUID) -> Article | None:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT * FROM articles WHERE id = ?", (str(article_id),)
            ).fetchone()
        return self._map_row(row) if row else None

    def delete(self, article_id: UUID) -> bool:
        with self._connection() as conn:
            cur = conn.execute("DELETE FROM articles WHERE id = ?", (str(article_id),))
        return cur.rowcount > 0

    def list(
        self,
        *,
        category: str | None = None,
        published: bool | None = True,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[builtins.list[Article], int]:
        where: builtins.list[str] = []
        params: builtins.list[Any] = []
        if category:
            where.append("category = ?")
            params.append(category)
        if published is not None:
            where.append("is_published = ?")
            params.append(int(published))

        rows, total = self._page(
            "articles", where, params, "published_at DESC, created_at DESC", limit, offset
        )
        return [self._map_row(r) for r in rows], total

    def _map_row(self, row: dict[str, Any]) -> Article:
        return Article(
            id=UUID(row["id"]),
            title=row["title"],
            category=row["category"],
            summary=row["summary"],
            content=row["content"],
            image_url=row["image_url"],
            media_id=row["media_id"],
            author=row["author"],
            is_published=bool(row["is_published"]),
            published_at=parse_dt(row["published_at"]),
            created_at=parse_dt(row["created_at"]),
            updated_at=parse_dt(row["updated_at"]),
        )


class SQLiteGalleryRepo(SQLiteRepoBase):
    """SQLite implementation of GalleryRepoPort."""

    def save(self, image: GalleryImage) -> GalleryImage:
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO gallery_images (
                    id, title, description, image_url, media_id, is_external,
                    category, display_order, is_visible, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title=excluded.title,
                    description=excluded.description,
                    image_url=excluded.image_url,
                    media_id=excluded.media_id,
                    is_external=excluded.is_external,
                    category=excluded.category,
                    display_order=excluded.display_order,
                    is_visible=excluded.is_visible,
                    updated_at=excluded.updated_at
                """,
                (
                    str(image.id),
                    image.title,
                    image.description,
                    image.image_url,
                    image.media_id,
                    int(image.is_external),
                    image.category,
                    image.display_order,
                    int(image.is_visible),
                    to_db_dt(image.created_at),
                    to_db_dt(image.updated_at),
                ),
            )
        return image

    def get_by_id(self, image_id: UUID) -> GalleryImage | None:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT * FROM gallery_images WHERE id = ?", (str(image_id),)
            ).fetchone()
        return self._map_row(row) if row else None

    def delete(self, image_id: UUID) -> bool:
        with self._connection() as conn:
            cur = conn.execute("DELETE FROM gallery_images WHERE id = ?", (str(image_id),))
        return cur.rowcount > 0

    def list(
        self,
        *,
        category: str | None = None,
        visible: bool | None = True,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[builtins.list[GalleryImage], int]:
        where: builtins.list[str] = []
        params: builtins.list[Any] = []
        if category:
            where.append("category = ?")
            params.append(category)
        if visible is not None:
            where.append("is_visible = ?")
            params.append(int(visible))

        rows, total = self._page(
            "gallery_images", where, params, "display_order ASC, created_at DESC", limit, offset
        )
        return [self._map_row(r) for r in rows], total

    def _map_row(self, row: dict[str, Any]) -> GalleryImage:
        return GalleryImage(
            id=UUID(row["id"]),
            title=row["title"],
            description=row["description"],
            image_url=row["image_url"],
            media_id=row["media_id"],
            is_external=bool(row["is_external"]),
            category=row["category"],
            display_order=row["display_order"],
            is_visible=bool(row["is_visible"]),
            created_at=parse_dt(row["created_at"]),
            updated_at=parse_dt(row["updated_at"]),
        )

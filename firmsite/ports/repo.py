from typing import Protocol
from uuid import UUID

from firmsite.domain.entities import Article, GalleryImage


class ArticleRepoPort(Protocol):
    def save(self, article: Article) -> Article:
        """Insert or replace the full record."""
        ...

    def get_by_id(self, article_id: UUID) -> Article | None:
        ...

    def delete(self, article_id: UUID) -> bool:
        """Remove the record. Returns False if it did not exist."""
        ...

    def list(
        self,
        *,
        category: str | None = None,
        published: bool | None = True,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[Article], int]:
        """Page sorted by published_at desc. Returns (items, total_count)."""
        ...


class GalleryRepoPort(Protocol):
    def save(self, image: GalleryImage) -> GalleryImage:
        ...

    def get_by_id(self, image_id: UUID) -> GalleryImage | None:
        ...

    def delete(self, image_id: UUID) -> bool:
        ...

    def list(
        self,
        *,
        category: str | None = None,
        visible: bool | None = True,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[GalleryImage], int]:
        """Page sorted by (display_order asc, created_at desc)."""
        ...

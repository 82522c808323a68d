import io
from datetime import UTC, datetime
from uuid import UUID

import pytest
from PIL import Image

from firmsite.adapters.clock import FixedClock
from firmsite.adapters.sqlite.migrator import SQLiteMigrator
from firmsite.domain.entities import Article, GalleryImage
from firmsite.ports.media import MediaUpload, StoredMedia
from firmsite.rules.loader import load_rules
from firmsite.rules.models import Rules
from firmsite.services.content import ArticleRepository, GalleryRepository
from firmsite.services.publish import PublishingService


# --- In-memory fakes ---
class InMemoryArticleRepo:
    def __init__(self) -> None:
        self.items: dict[UUID, Article] = {}

    def save(self, article: Article) -> Article:
        self.items[article.id] = article
        return article

    def get_by_id(self, article_id: UUID) -> Article | None:
        return self.items.get(article_id)

    def delete(self, article_id: UUID) -> bool:
        return self.items.pop(article_id, None) is not None

    def list(self, *, category=None, published=True, limit=10, offset=0):
        rows = [
            a
            for a in self.items.values()
            if (not category or a.category == category)
            and (published is None or a.is_published == published)
        ]
        rows.sort(key=lambda a: a.published_at, reverse=True)
        return rows[offset : offset + limit], len(rows)


class InMemoryGalleryRepo:
    def __init__(self) -> None:
        self.items: dict[UUID, GalleryImage] = {}

    def save(self, image: GalleryImage) -> GalleryImage:
        self.items[image.id] = image
        return image

    def get_by_id(self, image_id: UUID) -> GalleryImage | None:
        return self.items.get(image_id)

    def delete(self, image_id: UUID) -> bool:
        return self.items.pop(image_id, None) is not None

    def list(self, *, category=None, visible=True, limit=50, offset=0):
        rows = [
            i
            for i in self.items.values()
            if (not category or i.category == category)
            and (visible is None or i.is_visible == visible)
        ]
        rows.sort(key=lambda i: i.created_at, reverse=True)
        rows.sort(key=lambda i: i.display_order)
        return rows[offset : offset + limit], len(rows)


class FakeMediaStore:
    """Media store double that records every call."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []
        self.objects: dict[str, bytes] = {}
        self.fail_upload: Exception | None = None
        self.fail_delete: Exception | None = None
        self._counter = 0

    def upload(self, upload: MediaUpload) -> StoredMedia:
        self.calls.append(("upload", upload.filename))
        if self.fail_upload:
            raise self.fail_upload
        self._counter += 1
        media_id = f"test-folder/obj{self._counter}"
        self.objects[media_id] = upload.data
        return StoredMedia(media_id=media_id, url=f"https://media.example.com/{media_id}.jpg")

    def delete(self, media_id: str) -> None:
        self.calls.append(("delete", media_id))
        if self.fail_delete:
            raise self.fail_delete
        self.objects.pop(media_id, None)

    def uploads(self) -> list[str]:
        return [arg for op, arg in self.calls if op == "upload"]

    def deletes(self) -> list[str]:
        return [arg for op, arg in self.calls if op == "delete"]


def make_image_bytes(fmt: str = "JPEG", size=(64, 48), mode: str = "RGB") -> bytes:
    color = (200, 30, 30, 128) if "A" in mode else (200, 30, 30)
    img = Image.new(mode, size, color)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


# --- Fixtures ---
@pytest.fixture
def rules() -> Rules:
    return load_rules()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2025, 1, 15, 9, 0, tzinfo=UTC))


@pytest.fixture
def article_store() -> InMemoryArticleRepo:
    return InMemoryArticleRepo()


@pytest.fixture
def gallery_store() -> InMemoryGalleryRepo:
    return InMemoryGalleryRepo()


@pytest.fixture
def media() -> FakeMediaStore:
    return FakeMediaStore()


@pytest.fixture
def articles(article_store, rules, clock) -> ArticleRepository:
    return ArticleRepository(article_store, rules.articles, clock)


@pytest.fixture
def gallery(gallery_store, rules, clock) -> GalleryRepository:
    return GalleryRepository(gallery_store, rules.gallery, clock)


@pytest.fixture
def publisher(articles, gallery, media, rules) -> PublishingService:
    return PublishingService(articles, gallery, media, rules.media)


@pytest.fixture
def jpeg_upload() -> MediaUpload:
    return MediaUpload(data=make_image_bytes(), filename="photo.jpg", content_type="image/jpeg")


@pytest.fixture
def db_path(tmp_path) -> str:
    path = str(tmp_path / "data" / "test.db")
    SQLiteMigrator(path).run_migrations()
    return path


@pytest.fixture
def image_bytes():
    """Factory for small in-memory images: image_bytes(fmt, size, mode)."""
    return make_image_bytes

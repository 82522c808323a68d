from datetime import UTC, datetime
from typing import Literal, get_args
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, model_validator

# --- Enums / Literals ---
ArticleCategory = Literal[
    "GST Update",
    "Income Tax",
    "MCA & ROC",
    "Audit & Assurance",
    "Compliance Alert",
    "Advisory",
    "Other",
]
GalleryCategory = Literal["Office", "Team", "Events", "Engagements", "Other"]
MediaBinding = Literal["no_media", "external_linked", "store_managed", "deleted"]

ARTICLE_CATEGORIES: tuple[str, ...] = get_args(ArticleCategory)
GALLERY_CATEGORIES: tuple[str, ...] = get_args(GalleryCategory)

DEFAULT_AUTHOR = "J KRISHNAN & CO"


def utcnow() -> datetime:
    return datetime.now(UTC)


# --- Articles ---

class Article(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    title: str
    category: ArticleCategory
    summary: str
    content: str = ""
    image_url: str | None = None
    # Set only for images uploaded through the media store
    media_id: str | None = None
    author: str = DEFAULT_AUTHOR
    is_published: bool = True
    published_at: datetime = Field(default_factory=utcnow)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def _media_requires_image(self) -> "Article":
        if self.media_id and not self.image_url:
            raise ValueError("media_id requires image_url")
        return self


# --- Gallery ---

class GalleryImage(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    title: str
    description: str = ""
    image_url: str
    media_id: str | None = None
    is_external: bool = False
    category: GalleryCategory = "Other"
    display_order: int = 0
    is_visible: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def _external_has_no_media(self) -> "GalleryImage":
        if self.is_external and self.media_id:
            raise ValueError("external images cannot carry a media_id")
        return self


def media_binding(entity: Article | GalleryImage | None) -> MediaBinding:
    """
    Current media binding state of a record.

    NoMedia -> ExternalLinked | StoreManaged
    StoreManaged -> StoreManaged (swap) | ExternalLinked (URL override)
    any -> Deleted
    """
    if entity is None:
        return "deleted"
    if entity.media_id:
        return "store_managed"
    if entity.image_url:
        return "external_linked"
    return "no_media"

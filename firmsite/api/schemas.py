from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from firmsite.domain.entities import ArticleCategory, GalleryCategory


class CamelModel(BaseModel):
    """Wire models use camelCase; snake_case is accepted on input too."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class _BlankCategoryIsUnset(CamelModel):
    @field_validator("category", mode="before", check_fields=False)
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


# --- Articles ---
class ArticleWrite(_BlankCategoryIsUnset):
    """Create and update payload. Omitted fields stay unset."""

    title: str | None = None
    category: ArticleCategory | None = None
    summary: str | None = None
    content: str | None = None
    image_url: str | None = None
    author: str | None = None
    is_published: bool | None = None


class ArticleResponse(CamelModel):
    id: UUID
    title: str
    category: str
    summary: str
    content: str
    image_url: str | None = None
    media_id: str | None = None
    author: str
    is_published: bool
    published_at: datetime
    created_at: datetime
    updated_at: datetime


# --- Gallery ---
class GalleryImageWrite(_BlankCategoryIsUnset):
    title: str | None = None
    description: str | None = None
    image_url: str | None = None
    category: GalleryCategory | None = None
    display_order: int | None = None
    is_visible: bool | None = None


class GalleryImageResponse(CamelModel):
    id: UUID
    title: str
    description: str
    image_url: str
    media_id: str | None = None
    is_external: bool
    category: str
    display_order: int
    is_visible: bool
    created_at: datetime
    updated_at: datetime


# --- Envelopes ---
class Envelope(CamelModel):
    success: bool = True
    message: str | None = None


class ArticleEnvelope(Envelope):
    data: ArticleResponse


class ArticleListEnvelope(Envelope):
    count: int
    total: int
    page: int
    pages: int
    data: list[ArticleResponse]


class GalleryImageEnvelope(Envelope):
    data: GalleryImageResponse


class GalleryImageListEnvelope(Envelope):
    count: int
    total: int
    data: list[GalleryImageResponse]


class CategoriesEnvelope(Envelope):
    data: list[str]


class UploadedImage(CamelModel):
    image_url: str
    media_id: str


class UploadedImageEnvelope(Envelope):
    data: UploadedImage


# --- Auth ---
class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""


class LoginData(CamelModel):
    token: str
    username: str


class LoginEnvelope(Envelope):
    data: LoginData


class VerifyData(CamelModel):
    username: str
    role: str


class VerifyEnvelope(Envelope):
    data: VerifyData

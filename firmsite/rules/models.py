from typing import Literal

from pydantic import BaseModel, Field


class MaxLength(BaseModel):
    max: int


class ArticleRules(BaseModel):
    title: MaxLength
    summary: MaxLength
    default_author: str
    page_size: int = 10


class GalleryRules(BaseModel):
    title: MaxLength
    description: MaxLength
    page_size: int = 50


class TransformRules(BaseModel):
    max_width: int
    max_height: int
    jpeg_quality: int = Field(ge=1, le=95)


class UploadsRules(BaseModel):
    max_upload_bytes: int
    mime_prefix: str = "image/"
    allowed_formats: list[str]
    transform: TransformRules


class MediaRules(BaseModel):
    folder: str
    # Replacing a store image by an external URL leaves the old object in place
    # unless this is switched on.
    delete_replaced_on_url_override: bool = False


class AuthRules(BaseModel):
    token_ttl_minutes: int
    algorithm: Literal["HS256", "HS384", "HS512"] = "HS256"


class PaginationRules(BaseModel):
    max_limit: int = 100


class Rules(BaseModel):
    articles: ArticleRules
    gallery: GalleryRules
    uploads: UploadsRules
    media: MediaRules
    auth: AuthRules
    pagination: PaginationRules = Field(default_factory=PaginationRules)

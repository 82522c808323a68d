"""
Article (newsletter) routes.

Reads are public; every mutation requires the admin bearer token.
"""

import math
from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile, status
from starlette.concurrency import run_in_threadpool

from firmsite.api.deps import get_article_repository, get_publishing_service, require_admin
from firmsite.api.payloads import read_payload
from firmsite.api.schemas import (
    ArticleEnvelope,
    ArticleListEnvelope,
    ArticleResponse,
    ArticleWrite,
    CategoriesEnvelope,
    Envelope,
    UploadedImage,
    UploadedImageEnvelope,
)
from firmsite.domain.entities import ARTICLE_CATEGORIES
from firmsite.domain.errors import ValidationError
from firmsite.ports.media import MediaUpload
from firmsite.services.auth import Identity
from firmsite.services.content import ArticleRepository
from firmsite.services.publish import PublishingService

router = APIRouter()

PUBLISHED_FILTER: dict[str, bool | None] = {"true": True, "false": False, "all": None}


@router.get("", response_model=ArticleListEnvelope)
def list_articles(
    category: str | None = None,
    limit: Annotated[int | None, Query(ge=1)] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    published: Literal["true", "false", "all"] = "true",
    repo: ArticleRepository = Depends(get_article_repository),
) -> ArticleListEnvelope:
    """Published articles, newest first."""
    page_size = repo.clamp_limit(limit, repo.rules.page_size)
    items, total = repo.list(
        category=category,
        published=PUBLISHED_FILTER[published],
        limit=page_size,
        offset=(page - 1) * page_size,
    )
    return ArticleListEnvelope(
        count=len(items),
        total=total,
        page=page,
        pages=math.ceil(total / page_size),
        data=[ArticleResponse.model_validate(a) for a in items],
    )


@router.get("/categories", response_model=CategoriesEnvelope)
def list_categories() -> CategoriesEnvelope:
    return CategoriesEnvelope(data=list(ARTICLE_CATEGORIES))


@router.post("/upload-image", response_model=UploadedImageEnvelope)
async def upload_content_image(
    image: UploadFile | None = File(None),
    admin: Identity = Depends(require_admin),
    service: PublishingService = Depends(get_publishing_service),
) -> UploadedImageEnvelope:
    """Upload an image for embedding in article content as [[IMAGE:<url>]]."""
    if image is None or not image.filename:
        raise ValidationError.single("image", "image_required", "Please upload an image file")

    upload = MediaUpload(
        data=await image.read(),
        filename=image.filename,
        content_type=image.content_type or "application/octet-stream",
    )
    stored = await run_in_threadpool(service.upload_content_image, upload)
    return UploadedImageEnvelope(
        message="Image uploaded successfully",
        data=UploadedImage(image_url=stored.url, media_id=stored.media_id),
    )


@router.get("/{article_id}", response_model=ArticleEnvelope)
def get_article(
    article_id: UUID,
    repo: ArticleRepository = Depends(get_article_repository),
) -> ArticleEnvelope:
    return ArticleEnvelope(data=ArticleResponse.model_validate(repo.get_by_id(article_id)))


@router.post("", response_model=ArticleEnvelope, status_code=status.HTTP_201_CREATED)
async def create_article(
    request: Request,
    admin: Identity = Depends(require_admin),
    service: PublishingService = Depends(get_publishing_service),
) -> ArticleEnvelope:
    """Create an article; multipart with an optional ``image`` file, or JSON."""
    fields, upload = await read_payload(request, ArticleWrite)
    article = await run_in_threadpool(service.create_article, fields, upload)
    return ArticleEnvelope(
        message="Newsletter created successfully",
        data=ArticleResponse.model_validate(article),
    )


@router.put("/{article_id}", response_model=ArticleEnvelope)
async def update_article(
    article_id: UUID,
    request: Request,
    admin: Identity = Depends(require_admin),
    service: PublishingService = Depends(get_publishing_service),
) -> ArticleEnvelope:
    fields, upload = await read_payload(request, ArticleWrite)
    article = await run_in_threadpool(service.update_article, article_id, fields, upload)
    return ArticleEnvelope(
        message="Newsletter updated successfully",
        data=ArticleResponse.model_validate(article),
    )


@router.delete("/{article_id}", response_model=Envelope)
def delete_article(
    article_id: UUID,
    admin: Identity = Depends(require_admin),
    service: PublishingService = Depends(get_publishing_service),
) -> Envelope:
    service.delete_article(article_id)
    return Envelope(message="Newsletter deleted successfully")

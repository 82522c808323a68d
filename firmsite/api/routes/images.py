"""
Gallery image routes.

POST accepts a multipart upload (``image`` file) or a JSON body carrying an
external ``imageUrl``. /url is kept for clients that post URLs explicitly.
"""

from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from starlette.concurrency import run_in_threadpool

from firmsite.api.deps import get_gallery_repository, get_publishing_service, require_admin
from firmsite.api.payloads import is_form, read_payload
from firmsite.api.schemas import (
    CategoriesEnvelope,
    Envelope,
    GalleryImageEnvelope,
    GalleryImageListEnvelope,
    GalleryImageResponse,
    GalleryImageWrite,
)
from firmsite.domain.entities import GALLERY_CATEGORIES
from firmsite.domain.errors import ValidationError
from firmsite.services.auth import Identity
from firmsite.services.content import GalleryRepository
from firmsite.services.publish import PublishingService

router = APIRouter()

VISIBLE_FILTER: dict[str, bool | None] = {"true": True, "false": False, "all": None}


@router.get("", response_model=GalleryImageListEnvelope)
def list_images(
    category: str | None = None,
    limit: Annotated[int | None, Query(ge=1)] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    visible: Literal["true", "false", "all"] = "true",
    repo: GalleryRepository = Depends(get_gallery_repository),
) -> GalleryImageListEnvelope:
    page_size = repo.clamp_limit(limit, repo.rules.page_size)
    items, total = repo.list(
        category=category,
        visible=VISIBLE_FILTER[visible],
        limit=page_size,
        offset=(page - 1) * page_size,
    )
    return GalleryImageListEnvelope(
        count=len(items),
        total=total,
        data=[GalleryImageResponse.model_validate(i) for i in items],
    )


@router.get("/categories", response_model=CategoriesEnvelope)
def list_categories() -> CategoriesEnvelope:
    return CategoriesEnvelope(data=list(GALLERY_CATEGORIES))


@router.post("/url", response_model=GalleryImageEnvelope, status_code=status.HTTP_201_CREATED)
async def add_image_by_url(
    request: Request,
    admin: Identity = Depends(require_admin),
    service: PublishingService = Depends(get_publishing_service),
) -> GalleryImageEnvelope:
    fields, _ = await read_payload(request, GalleryImageWrite)
    item = await run_in_threadpool(service.add_gallery_image_by_url, fields)
    return GalleryImageEnvelope(
        message="Image added successfully", data=GalleryImageResponse.model_validate(item)
    )


@router.get("/{image_id}", response_model=GalleryImageEnvelope)
def get_image(
    image_id: UUID,
    repo: GalleryRepository = Depends(get_gallery_repository),
) -> GalleryImageEnvelope:
    return GalleryImageEnvelope(data=GalleryImageResponse.model_validate(repo.get_by_id(image_id)))


@router.post("", response_model=GalleryImageEnvelope, status_code=status.HTTP_201_CREATED)
async def create_image(
    request: Request,
    admin: Identity = Depends(require_admin),
    service: PublishingService = Depends(get_publishing_service),
) -> GalleryImageEnvelope:
    fields, upload = await read_payload(request, GalleryImageWrite)

    if upload is not None:
        item = await run_in_threadpool(service.create_gallery_image, fields, upload)
        message = "Image uploaded successfully"
    elif is_form(request) and not fields.get("image_url"):
        raise ValidationError.single("image", "image_required", "Please upload an image file")
    else:
        item = await run_in_threadpool(service.add_gallery_image_by_url, fields)
        message = "Image added successfully"

    return GalleryImageEnvelope(message=message, data=GalleryImageResponse.model_validate(item))


@router.put("/{image_id}", response_model=GalleryImageEnvelope)
async def update_image(
    image_id: UUID,
    request: Request,
    admin: Identity = Depends(require_admin),
    service: PublishingService = Depends(get_publishing_service),
) -> GalleryImageEnvelope:
    fields, upload = await read_payload(request, GalleryImageWrite)
    item = await run_in_threadpool(service.update_gallery_image, image_id, fields, upload)
    return GalleryImageEnvelope(
        message="Image updated successfully", data=GalleryImageResponse.model_validate(item)
    )


@router.delete("/{image_id}", response_model=Envelope)
def delete_image(
    image_id: UUID,
    admin: Identity = Depends(require_admin),
    service: PublishingService = Depends(get_publishing_service),
) -> Envelope:
    service.delete_gallery_image(image_id)
    return Envelope(message="Image deleted successfully")

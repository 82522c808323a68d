"""
Request body parsing shared by the content routes.

Mutating endpoints accept either multipart/urlencoded forms (optionally with
an ``image`` file) or a JSON object. Both are validated through the same
pydantic DTO and returned as a dict of the fields the client actually sent.
"""

import json
from typing import Any, TypeVar

import pydantic
from fastapi import Request
from starlette.datastructures import UploadFile

from firmsite.domain.errors import ValidationError, field_errors_from_pydantic
from firmsite.ports.media import MediaUpload

M = TypeVar("M", bound=pydantic.BaseModel)

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


def is_form(request: Request) -> bool:
    content_type = request.headers.get("content-type", "").lower()
    return content_type.startswith(FORM_CONTENT_TYPES)


async def _read_form(request: Request, file_field: str) -> tuple[dict[str, Any], MediaUpload | None]:
    form = await request.form()
    raw: dict[str, Any] = {}
    upload = None
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            # Browsers send an empty part when no file was chosen
            if key == file_field and value.filename:
                upload = MediaUpload(
                    data=await value.read(),
                    filename=value.filename,
                    content_type=value.content_type or "application/octet-stream",
                )
            continue
        raw[key] = value
    return raw, upload


async def _read_json(request: Request) -> dict[str, Any]:
    body = await request.body()
    if not body.strip():
        return {}
    try:
        raw = json.loads(body)
    except ValueError as e:
        raise ValidationError.single("body", "invalid_json", "Request body is not valid JSON") from e
    if not isinstance(raw, dict):
        raise ValidationError.single("body", "invalid_json", "Request body must be a JSON object")
    return raw


async def read_payload(
    request: Request, model: type[M], file_field: str = "image"
) -> tuple[dict[str, Any], MediaUpload | None]:
    """Return (fields sent by the client, optional image upload)."""
    if is_form(request):
        raw, upload = await _read_form(request, file_field)
    else:
        raw, upload = await _read_json(request), None

    try:
        dto = model.model_validate(raw)
    except pydantic.ValidationError as e:
        raise ValidationError(field_errors_from_pydantic(e)) from e
    return dto.model_dump(exclude_unset=True), upload

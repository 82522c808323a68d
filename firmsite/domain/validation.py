"""
Field validation for articles and gallery images.

Validators take the full set of field values (snake_case keys) and return a
list of FieldError; an empty list means valid. They never raise.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlparse

from firmsite.domain.entities import ARTICLE_CATEGORIES, GALLERY_CATEGORIES
from firmsite.domain.errors import FieldError
from firmsite.rules.models import ArticleRules, GalleryRules

IMAGE_PLACEHOLDER_RE = re.compile(r"\[\[IMAGE:(.*?)\]\]")


def is_absolute_url(value: str) -> bool:
    """True for well-formed absolute http(s) URLs."""
    try:
        parsed = urlparse(value.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def is_embeddable_url(value: str) -> bool:
    """Absolute http(s) URL, or a root-relative path such as /media/folder/x.jpg."""
    value = value.strip()
    if value.startswith("/") and not value.startswith("//"):
        parsed = urlparse(value)
        return not parsed.scheme and not parsed.netloc and len(parsed.path) > 1
    return is_absolute_url(value)


def extract_image_placeholders(content: str | None) -> list[str]:
    """Return the URLs embedded in content as [[IMAGE:<url>]] tokens, in order."""
    if not content:
        return []
    return [m.strip() for m in IMAGE_PLACEHOLDER_RE.findall(content)]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _required_text(
    fields: Mapping[str, Any], name: str, label: str, max_len: int
) -> list[FieldError]:
    value = fields.get(name)
    if _is_blank(value):
        return [FieldError(code=f"{name}_required", message=f"{label} is required", field=name)]
    if len(str(value).strip()) > max_len:
        return [
            FieldError(
                code=f"{name}_too_long",
                message=f"{label} cannot exceed {max_len} characters",
                field=name,
            )
        ]
    return []


def _category(
    fields: Mapping[str, Any], allowed: tuple[str, ...], required: bool
) -> list[FieldError]:
    value = fields.get("category")
    if _is_blank(value):
        if required:
            return [
                FieldError(code="category_required", message="Category is required", field="category")
            ]
        return []
    if value not in allowed:
        return [
            FieldError(
                code="category_invalid",
                message=f"Invalid category '{value}'. Allowed: {', '.join(allowed)}",
                field="category",
            )
        ]
    return []


def _external_url(fields: Mapping[str, Any], required: bool) -> list[FieldError]:
    url = fields.get("image_url")
    if _is_blank(url):
        if required:
            return [
                FieldError(
                    code="image_url_required", message="Image URL is required", field="image_url"
                )
            ]
        return []
    # Store-managed URLs come from the media store and are trusted as issued
    if fields.get("media_id"):
        return []
    if not is_absolute_url(str(url)):
        return [
            FieldError(
                code="image_url_invalid",
                message="Please provide a valid image URL",
                field="image_url",
            )
        ]
    return []


def validate_category(kind: str, fields: Mapping[str, Any]) -> list[FieldError]:
    """Check only the enum fields present in a payload."""
    if "category" not in fields or fields["category"] is None:
        return []
    allowed = ARTICLE_CATEGORIES if kind == "article" else GALLERY_CATEGORIES
    return _category(fields, allowed, required=False)


def validate_article(fields: Mapping[str, Any], rules: ArticleRules) -> list[FieldError]:
    errors: list[FieldError] = []
    errors.extend(_required_text(fields, "title", "Title", rules.title.max))
    errors.extend(_category(fields, ARTICLE_CATEGORIES, required=True))
    errors.extend(_required_text(fields, "summary", "Summary", rules.summary.max))
    errors.extend(_external_url(fields, required=False))

    for url in extract_image_placeholders(fields.get("content")):
        if not is_embeddable_url(url):
            errors.append(
                FieldError(
                    code="content_image_invalid",
                    message=f"Embedded image URL is not valid: '{url}'",
                    field="content",
                )
            )

    if fields.get("media_id") and _is_blank(fields.get("image_url")):
        errors.append(
            FieldError(
                code="media_without_url",
                message="Stored media requires an image URL",
                field="media_id",
            )
        )
    return errors


def validate_gallery_image(fields: Mapping[str, Any], rules: GalleryRules) -> list[FieldError]:
    errors: list[FieldError] = []
    errors.extend(_required_text(fields, "title", "Title", rules.title.max))

    description = fields.get("description") or ""
    if len(description) > rules.description.max:
        errors.append(
            FieldError(
                code="description_too_long",
                message=f"Description cannot exceed {rules.description.max} characters",
                field="description",
            )
        )

    errors.extend(_category(fields, GALLERY_CATEGORIES, required=False))
    errors.extend(_external_url(fields, required=True))

    if fields.get("is_external") and fields.get("media_id"):
        errors.append(
            FieldError(
                code="external_with_media",
                message="External images cannot reference stored media",
                field="media_id",
            )
        )

    display_order = fields.get("display_order", 0)
    if not isinstance(display_order, int) or isinstance(display_order, bool):
        errors.append(
            FieldError(
                code="display_order_invalid",
                message="Display order must be an integer",
                field="display_order",
            )
        )
    return errors

"""
Content repository services.

Wrap the persistence ports with validation, defaults, timestamps and partial
update semantics. Callers get domain errors, never None:

- get_by_id / update / delete raise NotFoundError for unknown ids
- create / update raise ValidationError with field-level messages
"""

from __future__ import annotations

import builtins
from collections.abc import Iterable, Mapping
from typing import Any, Generic, TypeVar
from uuid import UUID, uuid4

import pydantic

from firmsite.domain.entities import Article, GalleryImage
from firmsite.domain.errors import (
    FieldError,
    NotFoundError,
    ValidationError,
    field_errors_from_pydantic,
)
from firmsite.domain.validation import validate_article, validate_category, validate_gallery_image
from firmsite.ports.clock import ClockPort
from firmsite.ports.repo import ArticleRepoPort, GalleryRepoPort
from firmsite.rules.models import ArticleRules, GalleryRules

T = TypeVar("T", Article, GalleryImage)

TEXT_FIELDS = {"title", "summary", "description", "author", "image_url", "category"}


def _clean(fields: Mapping[str, Any], allowed: Iterable[str]) -> dict[str, Any]:
    """Keep known keys only and trim text values."""
    allowed = set(allowed)
    out: dict[str, Any] = {}
    for key, value in fields.items():
        if key not in allowed:
            continue
        if key in TEXT_FIELDS and isinstance(value, str):
            value = value.strip()
        out[key] = value
    return out


class ContentRepository(Generic[T]):
    """Shared create/update/delete flow for one entity kind."""

    kind: str = "Content"
    category_kind: str = "article"
    entity_cls: type
    fields: frozenset[str] = frozenset()
    # Blank values for these never overwrite on update
    required: frozenset[str] = frozenset()
    # Blank values for these reset the field to None
    nullable: frozenset[str] = frozenset()

    def __init__(self, repo: Any, clock: ClockPort, max_limit: int = 100) -> None:
        self.repo = repo
        self.clock = clock
        self.max_limit = max_limit

    # --- Hooks ---

    def _validate(self, fields: Mapping[str, Any]) -> builtins.list[FieldError]:
        raise NotImplementedError

    def _defaults(self, fields: dict[str, Any]) -> dict[str, Any]:
        return fields

    # --- Queries ---

    def clamp_limit(self, limit: int | None, default: int) -> int:
        if limit is None:
            return default
        return max(1, min(int(limit), self.max_limit))

    def get_by_id(self, item_id: UUID) -> T:
        item = self.repo.get_by_id(item_id)
        if item is None:
            raise NotFoundError(self.kind, item_id)
        return item  # type: ignore[no-any-return]

    # --- Commands ---

    def precheck(self, fields: Mapping[str, Any]) -> None:
        """Reject bad enum values before anything touches the media store."""
        errors = validate_category(self.category_kind, _clean(fields, self.fields))
        if errors:
            raise ValidationError(errors)

    def create(self, fields: Mapping[str, Any]) -> T:
        data = self._defaults(_clean(fields, self.fields))
        errors = self._validate(data)
        if errors:
            raise ValidationError(errors)

        now = self.clock.now_utc()
        item = self._build({**data, "id": uuid4(), "created_at": now, "updated_at": now})
        saved: T = self.repo.save(item)
        return saved

    def update(
        self,
        item_id: UUID,
        changes: Mapping[str, Any],
        *,
        clear: Iterable[str] = (),
    ) -> T:
        """
        Apply only the provided fields.

        None values and blank required fields are ignored. Names in ``clear``
        are reset to None explicitly (used for media references).
        """
        existing = self.get_by_id(item_id)
        to_clear = set(clear)
        provided: dict[str, Any] = {}
        for key, value in _clean(changes, self.fields).items():
            if value is None:
                continue
            if isinstance(value, str) and not value:
                if key in self.nullable:
                    to_clear.add(key)
                    continue
                if key in self.required:
                    continue
            provided[key] = value
        self.precheck(provided)

        merged = existing.model_dump()
        merged.update(provided)
        for name in to_clear:
            if name in self.fields:
                merged[name] = None

        errors = self._validate(merged)
        if errors:
            raise ValidationError(errors)

        merged["updated_at"] = self.clock.now_utc()
        item = self._build(merged)
        saved: T = self.repo.save(item)
        return saved

    def delete(self, item_id: UUID) -> T:
        """Remove the record and return what was removed."""
        existing = self.get_by_id(item_id)
        if not self.repo.delete(item_id):
            raise NotFoundError(self.kind, item_id)
        return existing

    def _build(self, data: Mapping[str, Any]) -> T:
        try:
            built: T = self.entity_cls(**data)
        except pydantic.ValidationError as e:
            raise ValidationError(field_errors_from_pydantic(e)) from e
        return built


class ArticleRepository(ContentRepository[Article]):
    kind = "Article"
    entity_cls = Article
    fields = frozenset(
        {
            "title",
            "category",
            "summary",
            "content",
            "image_url",
            "media_id",
            "author",
            "is_published",
            "published_at",
        }
    )
    required = frozenset({"title", "category", "summary", "author"})
    nullable = frozenset({"image_url"})

    def __init__(
        self,
        repo: ArticleRepoPort,
        rules: ArticleRules,
        clock: ClockPort,
        max_limit: int = 100,
    ) -> None:
        super().__init__(repo, clock, max_limit)
        self.rules = rules

    def _validate(self, fields: Mapping[str, Any]) -> builtins.list[FieldError]:
        return validate_article(fields, self.rules)

    def _defaults(self, fields: dict[str, Any]) -> dict[str, Any]:
        if not fields.get("author"):
            fields["author"] = self.rules.default_author
        if fields.get("content") is None:
            fields["content"] = ""
        if fields.get("published_at") is None:
            # Set once at creation; edits never move it
            fields["published_at"] = self.clock.now_utc()
        if fields.get("is_published") is None:
            fields.pop("is_published", None)
        return fields

    def list(
        self,
        *,
        category: str | None = None,
        published: bool | None = True,
        limit: int | None = None,
        offset: int = 0,
    ) -> tuple[builtins.list[Article], int]:
        page_size = self.clamp_limit(limit, self.rules.page_size)
        items, total = self.repo.list(
            category=category or None,
            published=published,
            limit=page_size,
            offset=max(0, offset),
        )
        return items, total


class GalleryRepository(ContentRepository[GalleryImage]):
    kind = "Image"
    category_kind = "gallery"
    entity_cls = GalleryImage
    fields = frozenset(
        {
            "title",
            "description",
            "image_url",
            "media_id",
            "is_external",
            "category",
            "display_order",
            "is_visible",
        }
    )
    required = frozenset({"title", "image_url", "category"})

    def __init__(
        self,
        repo: GalleryRepoPort,
        rules: GalleryRules,
        clock: ClockPort,
        max_limit: int = 100,
    ) -> None:
        super().__init__(repo, clock, max_limit)
        self.rules = rules

    def _validate(self, fields: Mapping[str, Any]) -> builtins.list[FieldError]:
        return validate_gallery_image(fields, self.rules)

    def _defaults(self, fields: dict[str, Any]) -> dict[str, Any]:
        for key, default in (
            ("description", ""),
            ("category", "Other"),
            ("display_order", 0),
            ("is_visible", True),
            ("is_external", False),
        ):
            if fields.get(key) in (None, ""):
                fields[key] = default
        return fields

    def list(
        self,
        *,
        category: str | None = None,
        visible: bool | None = True,
        limit: int | None = None,
        offset: int = 0,
    ) -> tuple[builtins.list[GalleryImage], int]:
        page_size = self.clamp_limit(limit, self.rules.page_size)
        items, total = self.repo.list(
            category=category or None,
            visible=visible,
            limit=page_size,
            offset=max(0, offset),
        )
        return items, total


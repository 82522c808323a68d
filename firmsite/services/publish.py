"""
Publishing service.

Orchestrates the repository and the media store so that records and stored
images stay consistent:

- create with upload: precheck enums -> upload -> persist; compensating
  delete of the new object if persisting fails
- update with upload: upload -> persist new reference -> best-effort delete
  of the old object
- update with a plain URL: the record becomes externally linked; the old
  object is kept unless rules say otherwise
- delete: record first, then best-effort media delete

Cleanup failures are logged and never surface to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any
from uuid import UUID

from firmsite.domain.entities import Article, GalleryImage
from firmsite.ports.media import MediaStorePort, MediaUpload, StoredMedia
from firmsite.rules.models import MediaRules
from firmsite.services.content import ArticleRepository, GalleryRepository

logger = logging.getLogger(__name__)

# Managed by this service only; never taken from client input
SYSTEM_FIELDS = ("media_id", "is_external")


def _client_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in fields.items() if k not in SYSTEM_FIELDS}


def _url_change(changes: Mapping[str, Any], current: str | None) -> str | None:
    """The new image_url when the payload really changes it, else None."""
    url = changes.get("image_url")
    if url is None:
        return None
    url = str(url).strip()
    if url == (current or ""):
        return None
    return url


class PublishingService:
    def __init__(
        self,
        articles: ArticleRepository,
        gallery: GalleryRepository,
        media: MediaStorePort,
        rules: MediaRules,
    ):
        self.articles = articles
        self.gallery = gallery
        self.media = media
        self.rules = rules

    # --- Media helpers ---

    def _discard(self, media_id: str) -> None:
        """Best-effort delete. Failures are logged and swallowed."""
        try:
            self.media.delete(media_id)
        except Exception:
            logger.warning("Failed to delete media %s", media_id, exc_info=True)

    def _compensate(self, stored: StoredMedia) -> None:
        logger.info("Persist failed, removing uploaded media %s", stored.media_id)
        self._discard(stored.media_id)

    def _replaced(self, old_media_id: str | None, new_media_id: str | None = None) -> None:
        if old_media_id and old_media_id != new_media_id:
            self._discard(old_media_id)

    def upload_content_image(self, upload: MediaUpload) -> StoredMedia:
        """Standalone upload for images embedded in article content."""
        return self.media.upload(upload)

    # --- Articles ---

    def create_article(
        self, fields: Mapping[str, Any], image: MediaUpload | None = None
    ) -> Article:
        data = _client_fields(fields)
        if image is None:
            article = self.articles.create(data)
            logger.info("Created article %s", article.id)
            return article

        self.articles.precheck(data)
        stored = self.media.upload(image)
        try:
            article = self.articles.create(
                {**data, "image_url": stored.url, "media_id": stored.media_id}
            )
        except Exception:
            self._compensate(stored)
            raise
        logger.info("Created article %s with media %s", article.id, stored.media_id)
        return article

    def update_article(
        self,
        article_id: UUID,
        changes: Mapping[str, Any],
        image: MediaUpload | None = None,
    ) -> Article:
        existing = self.articles.get_by_id(article_id)
        data = _client_fields(changes)

        if image is not None:
            self.articles.precheck(data)
            stored = self.media.upload(image)
            try:
                updated = self.articles.update(
                    article_id,
                    {**data, "image_url": stored.url, "media_id": stored.media_id},
                )
            except Exception:
                self._compensate(stored)
                raise
            self._replaced(existing.media_id, stored.media_id)
            return updated

        new_url = _url_change(data, existing.image_url)
        if new_url is None:
            data.pop("image_url", None)
            return self.articles.update(article_id, data)

        # External URL or removal; the store reference is dropped either way
        clear = ["media_id"] if new_url else ["media_id", "image_url"]
        data["image_url"] = new_url or None
        updated = self.articles.update(article_id, data, clear=clear)
        if self.rules.delete_replaced_on_url_override:
            self._replaced(existing.media_id)
        return updated

    def delete_article(self, article_id: UUID) -> Article:
        removed = self.articles.delete(article_id)
        logger.info("Deleted article %s", article_id)
        if removed.media_id:
            self._discard(removed.media_id)
        return removed

    # --- Gallery ---

    def create_gallery_image(
        self, fields: Mapping[str, Any], image: MediaUpload
    ) -> GalleryImage:
        data = _client_fields(fields)
        data.pop("image_url", None)
        self.gallery.precheck(data)
        stored = self.media.upload(image)
        try:
            item = self.gallery.create(
                {
                    **data,
                    "image_url": stored.url,
                    "media_id": stored.media_id,
                    "is_external": False,
                }
            )
        except Exception:
            self._compensate(stored)
            raise
        logger.info("Created gallery image %s with media %s", item.id, stored.media_id)
        return item

    def add_gallery_image_by_url(self, fields: Mapping[str, Any]) -> GalleryImage:
        data = _client_fields(fields)
        item = self.gallery.create({**data, "is_external": True})
        logger.info("Added external gallery image %s", item.id)
        return item

    def update_gallery_image(
        self,
        image_id: UUID,
        changes: Mapping[str, Any],
        image: MediaUpload | None = None,
    ) -> GalleryImage:
        existing = self.gallery.get_by_id(image_id)
        data = _client_fields(changes)

        if image is not None:
            data.pop("image_url", None)
            self.gallery.precheck(data)
            stored = self.media.upload(image)
            try:
                updated = self.gallery.update(
                    image_id,
                    {
                        **data,
                        "image_url": stored.url,
                        "media_id": stored.media_id,
                        "is_external": False,
                    },
                )
            except Exception:
                self._compensate(stored)
                raise
            self._replaced(existing.media_id, stored.media_id)
            return updated

        new_url = _url_change(data, existing.image_url)
        if not new_url:
            # Gallery images always keep a URL; blank means unchanged
            data.pop("image_url", None)
            return self.gallery.update(image_id, data)

        data.update(image_url=new_url, is_external=True)
        updated = self.gallery.update(image_id, data, clear=["media_id"])
        if self.rules.delete_replaced_on_url_override:
            self._replaced(existing.media_id)
        return updated

    def delete_gallery_image(self, image_id: UUID) -> GalleryImage:
        removed = self.gallery.delete(image_id)
        logger.info("Deleted gallery image %s", image_id)
        if removed.media_id:
            self._discard(removed.media_id)
        return removed

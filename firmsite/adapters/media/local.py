"""
Local filesystem media store.

Stands in for a hosted image service. Uploads are validated, bounded to the
configured box with Pillow and written as JPEG (opaque) or PNG (alpha).

Directory structure: {base_path}/{folder}/{hex}.{ext}
media_id: "{folder}/{hex}"; url: "{public_base_url}/{folder}/{hex}.{ext}"
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from uuid import uuid4

from PIL import Image, UnidentifiedImageError

from firmsite.domain.errors import DependencyError, PayloadTooLargeError, UnsupportedMediaError
from firmsite.ports.media import MediaUpload, StoredMedia
from firmsite.rules.models import UploadsRules

logger = logging.getLogger(__name__)

CONTENT_TYPES = {"jpg": "image/jpeg", "png": "image/png"}


def _has_alpha(img: Image.Image) -> bool:
    if img.mode in ("RGBA", "LA", "PA"):
        return True
    return img.mode == "P" and "transparency" in img.info


class LocalMediaStore:
    """Filesystem implementation of MediaStorePort."""

    def __init__(
        self,
        base_path: str | Path,
        public_base_url: str,
        rules: UploadsRules,
        folder: str,
    ) -> None:
        self.base_path = Path(base_path)
        self.public_base_url = public_base_url.rstrip("/")
        self.rules = rules
        self.folder = folder

    # --- Validation ---

    def validate_upload(self, upload: MediaUpload) -> None:
        """Size and MIME checks that need no decoding."""
        size = len(upload.data)
        if size > self.rules.max_upload_bytes:
            raise PayloadTooLargeError(size, self.rules.max_upload_bytes)
        if size == 0:
            raise UnsupportedMediaError("Uploaded file is empty")
        if not (upload.content_type or "").startswith(self.rules.mime_prefix):
            raise UnsupportedMediaError("Only image files are allowed!")

    def _decode(self, data: bytes) -> Image.Image:
        try:
            img = Image.open(io.BytesIO(data))
            img.load()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            raise UnsupportedMediaError("File is not a readable image") from e

        fmt = (img.format or "").lower()
        # Camera JPEGs with embedded previews decode as MPO
        if fmt == "mpo":
            fmt = "jpeg"
        if fmt not in self.rules.allowed_formats:
            allowed = ", ".join(self.rules.allowed_formats)
            raise UnsupportedMediaError(f"Image format '{fmt}' not allowed. Allowed: {allowed}")
        return img

    def _transform(self, img: Image.Image) -> tuple[bytes, str]:
        bounds = self.rules.transform
        # thumbnail() never upscales and keeps aspect ratio
        img.thumbnail((bounds.max_width, bounds.max_height))

        buf = io.BytesIO()
        if _has_alpha(img):
            img.convert("RGBA").save(buf, format="PNG", optimize=True)
            return buf.getvalue(), "png"

        if img.mode != "RGB":
            img = img.convert("RGB")
        img.save(buf, format="JPEG", quality=bounds.jpeg_quality, optimize=True)
        return buf.getvalue(), "jpg"

    # --- Port ---

    def upload(self, upload: MediaUpload) -> StoredMedia:
        self.validate_upload(upload)
        img = self._decode(upload.data)
        data, ext = self._transform(img)

        media_id = f"{self.folder}/{uuid4().hex}"
        path = self.base_path / f"{media_id}.{ext}"
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise DependencyError(f"Media store write failed: {e}") from e

        logger.info("Stored media %s (%d bytes)", media_id, len(data))
        return StoredMedia(
            media_id=media_id,
            url=f"{self.public_base_url}/{media_id}.{ext}",
            content_type=CONTENT_TYPES[ext],
            width=img.width,
            height=img.height,
        )

    def delete(self, media_id: str) -> None:
        path = self._find(media_id)
        if path is None:
            logger.info("Media delete for unknown id %s ignored", media_id)
            return
        try:
            path.unlink()
        except FileNotFoundError:
            logger.info("Media %s already removed", media_id)
        except OSError as e:
            raise DependencyError(f"Media store delete failed: {e}") from e
        logger.info("Deleted media %s", media_id)

    def open(self, media_id: str) -> tuple[bytes, str] | None:
        """Return (bytes, content_type) for a stored object, or None."""
        path = self._find(media_id)
        if path is None:
            return None
        try:
            data = path.read_bytes()
        except OSError as e:
            raise DependencyError(f"Media store read failed: {e}") from e
        return data, CONTENT_TYPES.get(path.suffix.lstrip("."), "application/octet-stream")

    def _find(self, media_id: str) -> Path | None:
        parts = media_id.split("/")
        # Reject traversal and anything that is not exactly folder/name
        if len(parts) != 2 or any(not p or p in (".", "..") for p in parts):
            return None
        folder, name = parts
        directory = self.base_path / folder
        for ext in CONTENT_TYPES:
            candidate = directory / f"{name}.{ext}"
            if candidate.is_file():
                return candidate
        return None

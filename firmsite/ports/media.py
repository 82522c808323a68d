"""
Media store port.

The media store exclusively owns uploaded image objects, addressed by an
opaque media_id. Implementations: local filesystem (now), hosted image
services behind the same contract.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class MediaUpload:
    """Binary image supplied by a client."""

    data: bytes
    filename: str
    content_type: str


@dataclass(frozen=True)
class StoredMedia:
    """Handle returned by a successful upload."""

    media_id: str
    url: str
    content_type: str = "image/jpeg"
    width: int | None = None
    height: int | None = None


class MediaStorePort(Protocol):
    def upload(self, upload: MediaUpload) -> StoredMedia:
        """
        Validate, transform and store an image.

        Raises:
            UnsupportedMediaError: not an image or not an allowed format
            PayloadTooLargeError: over the size ceiling
            DependencyError: store unreachable
        """
        ...

    def delete(self, media_id: str) -> None:
        """
        Remove a stored object.

        Unknown ids are logged and ignored. May raise DependencyError on
        storage failure; callers treat that as non-fatal.
        """
        ...

"""Serves objects held by the local media store at their public URLs."""

from pathlib import PurePosixPath

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from firmsite.adapters.media.local import LocalMediaStore
from firmsite.api.deps import get_media_store
from firmsite.domain.errors import NotFoundError

router = APIRouter()


@router.get("/{folder}/{filename}")
def get_media(
    folder: str,
    filename: str,
    store: LocalMediaStore = Depends(get_media_store),
) -> Response:
    media_id = f"{folder}/{PurePosixPath(filename).stem}"
    found = store.open(media_id)
    if found is None:
        raise NotFoundError("Media", media_id)

    data, content_type = found
    return Response(
        content=data,
        media_type=content_type,
        # Objects are never rewritten under the same id
        headers={"Cache-Control": "public, max-age=31536000, immutable"},
    )

"""
Image uploads to object storage.
"""

from __future__ import annotations

import logging
import re
from typing import Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, File, Form, UploadFile

from mamacita.auth import Identity, get_current_identity
from mamacita.config import get_settings
from mamacita.db import DbClient
from mamacita.dependencies import get_db_client, get_storage_client
from mamacita.enums import MediaType
from mamacita.errors import Forbidden, NotFound, ValidationError
from mamacita.messages import msg
from mamacita.schemas import Envelope, MediaOut
from mamacita.storage import MediaStorage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/media", tags=["media"])

DEFAULT_FOLDER = "mamacita"
# Slash-separated slugs; no dot segments or leading slash.
FOLDER_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*(/[A-Za-z0-9][A-Za-z0-9_-]*)*$")


def _storage_folder(folder: str) -> str:
    folder = folder.strip().strip("/")
    if not folder:
        return DEFAULT_FOLDER
    if not FOLDER_PATTERN.match(folder):
        raise ValidationError(msg("invalid_folder"), details={"folder": folder})
    return folder


@router.post("/upload", response_model=Envelope[MediaOut], status_code=201)
async def upload_image(
    image: Optional[UploadFile] = File(default=None),
    folder: str = Form(default=DEFAULT_FOLDER),
    identity: Identity = Depends(get_current_identity),
    db: DbClient = Depends(get_db_client),
    storage: MediaStorage = Depends(get_storage_client),
):
    if image is None:
        raise ValidationError(msg("image_required"))
    content_type = image.content_type or ""
    if not content_type.startswith("image/"):
        raise ValidationError(msg("invalid_image"))
    folder = _storage_folder(folder)

    limit = get_settings().max_upload_bytes
    data = await image.read(limit + 1)
    if not data:
        raise ValidationError(msg("image_required"))
    if len(data) > limit:
        raise ValidationError(
            msg("image_too_large", limit_mb=f"{limit / (1024 * 1024):g}"),
            details={"max_bytes": limit},
        )

    public_id = f"{folder}/{uuid4().hex}"
    url = storage.upload_bytes(public_id, data, content_type)
    media = db.create_media(
        identity.id, url=url, public_id=public_id, media_type=MediaType.IMAGE.value
    )
    logger.info("Stored %s (%d bytes) for %s", public_id, len(data), identity.id)
    return Envelope(message=msg("image_uploaded"), data=MediaOut.model_validate(media))


@router.delete("/{public_id:path}", response_model=Envelope[None])
def delete_media(
    public_id: str,
    identity: Identity = Depends(get_current_identity),
    db: DbClient = Depends(get_db_client),
    storage: MediaStorage = Depends(get_storage_client),
):
    media = db.get_media_by_public_id(public_id)
    if not media:
        raise NotFound(msg("media_not_found"))
    if media.account_id != identity.id and not identity.is_admin:
        raise Forbidden(msg("media_not_owner"))
    storage.delete(public_id)
    db.delete_media(media.id)
    return Envelope(message=msg("media_deleted"))

# photojournal/services/photos.py
"""
Photo repository: maps stored rows to Photo entities and runs the gallery
workflows against the access client.

Uploads and permanent deletes span two independent systems (object store and
row store) with no shared transaction, so each is an ordered sequence of
compensable steps:

* create: upload object -> insert row; a failed insert removes the object.
* permanent_delete: remove object (missing object tolerated) -> delete row.
"""

import asyncio
import logging
import re
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from photojournal.config import settings
from photojournal.core.errors import AuthorizationError, NotFoundError
from photojournal.schemas.photo import (
    AdminPhotos,
    AdminScope,
    ImageFile,
    Photo,
    PhotoMetadataIn,
    PhotoRow,
)
from photojournal.services.access_client import IS_NULL, NOT_NULL, AccessClient, eq

logger = logging.getLogger(__name__)

PHOTO_COLUMNS = "id,title,caption,tags,shot_date,image_path,created_at,updated_at,deleted_at"
PHOTO_ORDER = (("shot_date", True), ("created_at", True))

_UNSAFE_FILENAME = re.compile(r"[^a-z0-9.\-_]+")


def sanitize_filename(filename: str) -> str:
    return _UNSAFE_FILENAME.sub("-", (filename or "").lower())


def build_storage_key(owner_id: str, filename: str) -> str:
    """Storage key namespaced by owner: `{owner}/{millis}-{uuid}-{safe name}`."""
    millis = int(time.time() * 1000)
    return f"{owner_id}/{millis}-{uuid.uuid4()}-{sanitize_filename(filename)}"


def clean_tags(tags: Optional[Iterable[str]]) -> List[str]:
    return [t.strip() for t in (tags or []) if t and t.strip()]


def parse_tags(value: Optional[str]) -> List[str]:
    """Split comma-separated form input into tags."""
    return clean_tags((value or "").split(","))


def clean_metadata(metadata: PhotoMetadataIn) -> Dict[str, Any]:
    caption = (metadata.caption or "").strip()
    return {
        "title": metadata.title.strip(),
        "caption": caption or None,
        "tags": clean_tags(metadata.tags),
        "shot_date": metadata.shot_date.isoformat(),
    }


class PhotoRepository:
    def __init__(
        self,
        client: AccessClient,
        *,
        table: Optional[str] = None,
        bucket: Optional[str] = None,
        cache_control: Optional[str] = None,
    ):
        self.client = client
        self.table = table or settings.PHOTOS_TABLE
        self.bucket = bucket or settings.PHOTOS_BUCKET
        self.cache_control = cache_control or settings.UPLOAD_CACHE_CONTROL

    def to_photo(self, raw: Dict[str, Any]) -> Photo:
        row = PhotoRow.model_validate(raw)
        return Photo(
            **row.model_dump(exclude={"tags"}),
            tags=row.tags or [],
            image_url=self.client.public_url(self.bucket, row.image_path),
        )

    # ---- reads ----

    async def list_public(self, offset: int, limit: int) -> List[Photo]:
        """One page of the public feed. A page shorter than `limit` means the feed is exhausted."""
        if limit <= 0:
            raise ValueError("limit must be positive")
        if offset < 0:
            raise ValueError("offset must not be negative")
        rows = await self.client.select(
            self.table,
            columns=PHOTO_COLUMNS,
            filters={"deleted_at": IS_NULL},
            order=PHOTO_ORDER,
            offset=offset,
            limit=limit,
        )
        return [self.to_photo(r) for r in rows]

    async def list_admin(self, scope: AdminScope) -> List[Photo]:
        if scope == "active":
            filters = {"deleted_at": IS_NULL}
        elif scope == "trash":
            filters = {"deleted_at": NOT_NULL}
        else:
            raise ValueError(f"Unknown scope {scope!r}")
        rows = await self.client.select(
            self.table,
            columns=PHOTO_COLUMNS,
            filters=filters,
            order=PHOTO_ORDER,
        )
        return [self.to_photo(r) for r in rows]

    async def list_admin_all(self) -> AdminPhotos:
        active, trash = await asyncio.gather(self.list_admin("active"), self.list_admin("trash"))
        return AdminPhotos(active=active, trash=trash)

    async def get(self, photo_id: str) -> Photo:
        rows = await self.client.select(
            self.table,
            columns=PHOTO_COLUMNS,
            filters={"id": eq(photo_id)},
            limit=1,
        )
        if not rows:
            raise NotFoundError(f"Photo {photo_id} not found")
        return self.to_photo(rows[0])

    # ---- writes ----

    async def create(self, file: ImageFile, metadata: PhotoMetadataIn, owner_id: str) -> Photo:
        key = build_storage_key(owner_id, file.filename)
        await self.client.upload(
            self.bucket,
            key,
            file.data,
            content_type=file.content_type,
            cache_control=self.cache_control,
            upsert=False,
        )

        payload = clean_metadata(metadata)
        payload["image_path"] = key
        inserted = False
        try:
            row = await self.client.insert(self.table, payload, columns=PHOTO_COLUMNS)
            inserted = True
        finally:
            # Also runs when the request is cancelled mid-insert.
            if not inserted:
                await self._discard_upload(key)

        logger.info("Uploaded photo %s to %s", row.get("id"), key)
        return self.to_photo(row)

    async def _discard_upload(self, key: str) -> None:
        try:
            await self.client.remove(self.bucket, key)
            logger.warning("Row insert failed; removed orphaned upload %s", key)
        except Exception:
            # The insert error is what the caller needs to see.
            logger.exception("Row insert failed and orphaned upload %s could not be removed", key)

    async def update(self, photo_id: str, metadata: PhotoMetadataIn) -> Photo:
        rows = await self.client.update(
            self.table,
            clean_metadata(metadata),
            filters={"id": eq(photo_id)},
            columns=PHOTO_COLUMNS,
        )
        await self._ensure_changed(rows, photo_id, "edit")
        return self.to_photo(rows[0])

    async def soft_delete(self, photo_id: str) -> None:
        now = datetime.now(timezone.utc).isoformat()
        rows = await self.client.update(self.table, {"deleted_at": now}, filters={"id": eq(photo_id)})
        await self._ensure_changed(rows, photo_id, "trash")

    async def restore(self, photo_id: str) -> None:
        rows = await self.client.update(self.table, {"deleted_at": None}, filters={"id": eq(photo_id)})
        await self._ensure_changed(rows, photo_id, "restore")

    async def permanent_delete(self, photo: Photo) -> None:
        """Remove the object, then the row. Safe to re-run after a partial failure."""
        try:
            await self.client.remove(self.bucket, photo.image_path)
        except NotFoundError:
            logger.warning("Object %s already gone; deleting row %s", photo.image_path, photo.id)

        rows = await self.client.delete(self.table, filters={"id": eq(photo.id)})
        await self._ensure_changed(rows, photo.id, "delete")
        logger.info("Permanently deleted photo %s", photo.id)

    async def _ensure_changed(self, rows: List[Dict[str, Any]], photo_id: str, action: str) -> None:
        """Turn a write that touched no rows into an error.

        Row policies hide rows from a caller instead of refusing the write, so
        a row the caller can still read but could not change was refused.
        """
        if rows:
            return
        visible = await self.client.select(self.table, columns="id", filters={"id": eq(photo_id)}, limit=1)
        if visible:
            logger.warning("Write to photo %s was filtered out by row policies (%s)", photo_id, action)
            raise AuthorizationError(f"Not permitted to {action} photo {photo_id}", status_code=403)
        raise NotFoundError(f"Photo {photo_id} not found")

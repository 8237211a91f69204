"""Media library persistence: listing, uploads, inline edits and deletion."""

from __future__ import annotations

import logging
import re
import time
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time as dt_time, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from sqlalchemy import or_
from sqlalchemy.orm import Session

from models.media import MediaAsset
from services import storage_service
from services.metrics import record_bulk_item, record_media_deletion, record_orphaned_object

logger = logging.getLogger(__name__)

_SAFE_NAME_PATTERN = re.compile(r"[^A-Za-z0-9._-]+")
_EDITABLE_FIELDS = {"title": "title", "description": "description", "altText": "alt_text"}


class MediaServiceError(RuntimeError):
    def __init__(self, code: str, message: str, status_code: int = 400):
        super().__init__(message)
        self.code = code
        self.status_code = status_code


@dataclass
class MediaFilter:
    """Library filter state.

    ``types`` is an OR facet over mime types; an empty list or one containing
    ``"all"`` disables it. The facet is AND-ed with ``search``, which matches
    title OR description.
    """

    search: str = ""
    types: List[str] = field(default_factory=list)
    date_from: Optional[Union[date, datetime]] = None
    date_to: Optional[Union[date, datetime]] = None
    is_generated: Optional[bool] = None

    @property
    def type_facet_active(self) -> bool:
        return bool(self.types) and "all" not in self.types


@dataclass
class BulkDeleteResult:
    succeeded: int = 0
    failed: int = 0
    errors: List[Dict[str, str]] = field(default_factory=list)


def parse_type_facet(raw: Optional[Iterable[str]]) -> List[str]:
    """Split comma separated query values into a flat, de-duplicated list."""

    values: List[str] = []
    for chunk in raw or []:
        for item in str(chunk).split(","):
            item = item.strip().lower()
            if item and item not in values:
                values.append(item)
    return values


def _start_of(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, dt_time.min, tzinfo=timezone.utc)


def _end_of(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, dt_time.max, tzinfo=timezone.utc)


def list_assets(db: Session, filters: Optional[MediaFilter] = None) -> List[MediaAsset]:
    filters = filters or MediaFilter()
    query = db.query(MediaAsset)

    term = (filters.search or "").strip()
    if term:
        pattern = f"%{term}%"
        query = query.filter(or_(MediaAsset.title.ilike(pattern), MediaAsset.description.ilike(pattern)))
    if filters.type_facet_active:
        query = query.filter(MediaAsset.mime_type.in_(filters.types))
    if filters.date_from is not None:
        query = query.filter(MediaAsset.created_at >= _start_of(filters.date_from))
    if filters.date_to is not None:
        query = query.filter(MediaAsset.created_at <= _end_of(filters.date_to))
    if filters.is_generated is not None:
        query = query.filter(MediaAsset.is_generated.is_(filters.is_generated))

    return query.order_by(MediaAsset.created_at.desc()).all()


def get_asset(db: Session, asset_id: uuid.UUID) -> MediaAsset:
    asset = db.query(MediaAsset).filter(MediaAsset.id == asset_id).first()
    if asset is None:
        raise MediaServiceError("media.not_found", "Media asset not found.", 404)
    return asset


def storage_key(prefix: str, filename: str) -> str:
    """``<prefix>/<epoch-ms>-<sanitized name>``"""

    safe = _SAFE_NAME_PATTERN.sub("-", filename or "file").strip("-") or "file"
    return f"{prefix}/{int(time.time() * 1000)}-{safe}"


def store_asset(
    db: Session,
    *,
    data: bytes,
    filename: str,
    mime_type: str,
    prefix: str = "uploads",
    user_id: Optional[str] = None,
    **attributes: Any,
) -> MediaAsset:
    """Upload bytes to the media bucket, then insert the row describing them."""

    if not data:
        raise MediaServiceError("media.empty_file", "The uploaded file is empty.")
    object_name = storage_key(prefix, filename)
    try:
        url = storage_service.upload_bytes(data, object_name, content_type=mime_type)
    except storage_service.StorageError as exc:
        raise MediaServiceError(exc.code, str(exc), 502) from exc

    asset = MediaAsset(
        filename=filename,
        file_size=len(data),
        mime_type=mime_type,
        original_url=url,
        storage_path=object_name,
        created_by=uuid.UUID(str(user_id)) if user_id else None,
        **attributes,
    )
    if asset.title is None:
        asset.title = filename
    db.add(asset)
    db.commit()
    db.refresh(asset)
    return asset


def update_asset(db: Session, asset_id: uuid.UUID, changes: Dict[str, Any]) -> MediaAsset:
    asset = get_asset(db, asset_id)
    for source, attr in _EDITABLE_FIELDS.items():
        if source in changes:
            setattr(asset, attr, changes[source])
    db.commit()
    db.refresh(asset)
    return asset


def _remove_object(object_name: str) -> bool:
    try:
        return bool(storage_service.delete_object(object_name))
    except Exception as exc:
        logger.warning("Storage removal of %s raised: %s", object_name, exc)
        return False


def delete_asset(db: Session, asset_id: uuid.UUID) -> None:
    """Remove an asset's storage objects and then its row.

    Order: original (failure aborts, nothing is deleted), optimized and
    thumbnail (failures are logged and counted as orphans), database row.
    There is no rollback if the row delete fails after storage removal.
    """

    asset = get_asset(db, asset_id)
    bucket = storage_service.bucket_name()

    original_key = asset.storage_path or storage_service.object_name_from_url(asset.original_url, bucket)
    if not original_key or not _remove_object(original_key):
        record_media_deletion("aborted")
        raise MediaServiceError(
            "media.storage_delete_failed",
            "Failed to remove the original file from storage.",
            502,
        )

    for variant, url in (("optimized", asset.optimized_url), ("thumbnail", asset.thumbnail_url)):
        key = storage_service.object_name_from_url(url, bucket)
        if not key:
            continue
        if not _remove_object(key):
            logger.warning("Leaving orphaned %s object %s for asset %s.", variant, key, asset.id)
            record_orphaned_object(variant)

    db.delete(asset)
    db.commit()
    record_media_deletion("deleted")
    logger.info("Deleted media asset %s.", asset_id)


def bulk_delete(db: Session, asset_ids: Sequence[uuid.UUID]) -> BulkDeleteResult:
    """Delete assets one after another; a failure does not stop the rest."""

    result = BulkDeleteResult()
    for asset_id in asset_ids:
        try:
            delete_asset(db, asset_id)
        except MediaServiceError as exc:
            db.rollback()
            result.failed += 1
            result.errors.append({"id": str(asset_id), "error": str(exc)})
            record_bulk_item("media.delete", False)
            continue
        result.succeeded += 1
        record_bulk_item("media.delete", True)
    return result


def serialize_asset(asset: MediaAsset) -> Dict[str, Any]:
    return {
        "id": asset.id,
        "title": asset.title,
        "description": asset.description,
        "altText": asset.alt_text,
        "filename": asset.filename,
        "fileSize": asset.file_size,
        "mimeType": asset.mime_type,
        "width": asset.width,
        "height": asset.height,
        "originalUrl": asset.original_url,
        "optimizedUrl": asset.optimized_url,
        "thumbnailUrl": asset.thumbnail_url,
        "storagePath": asset.storage_path,
        "generationPrompt": asset.generation_prompt,
        "generationStyle": asset.generation_style,
        "isGenerated": bool(asset.is_generated),
        "createdBy": asset.created_by,
        "createdAt": asset.created_at,
        "updatedAt": asset.updated_at,
    }


__all__ = [
    "BulkDeleteResult",
    "MediaFilter",
    "MediaServiceError",
    "bulk_delete",
    "delete_asset",
    "get_asset",
    "list_assets",
    "parse_type_facet",
    "serialize_asset",
    "storage_key",
    "store_asset",
    "update_asset",
]

"""Unified abstraction over the object-storage provider backing the media bucket."""

from __future__ import annotations

import logging
from functools import lru_cache
from types import ModuleType
from typing import Dict, Optional, Tuple
from urllib.parse import unquote, urlparse

from core.env import env_str

from services import minio_service

logger = logging.getLogger(__name__)

PROVIDERS: Dict[str, ModuleType] = {"minio": minio_service}


class StorageError(RuntimeError):
    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code


def _configured_provider() -> str:
    setting = (env_str("STORAGE_PROVIDER", "auto") or "auto").strip().lower()
    if setting not in PROVIDERS and setting not in {"auto", "none"}:
        logger.warning("Unknown STORAGE_PROVIDER %r; falling back to auto.", setting)
        return "auto"
    return setting


@lru_cache(maxsize=1)
def _resolve_provider() -> Tuple[str, Optional[ModuleType]]:
    setting = _configured_provider()
    if setting == "none":
        return "none", None
    names = list(PROVIDERS) if setting == "auto" else [setting]
    for name in names:
        if PROVIDERS[name].is_enabled():
            logger.info("Using %s storage provider.", name)
            return name, PROVIDERS[name]
    logger.warning("No object storage provider is configured; uploads are disabled.")
    return "none", None


def provider_name() -> str:
    return _resolve_provider()[0]


def is_enabled() -> bool:
    return _resolve_provider()[1] is not None


def bucket_name() -> str:
    return minio_service.MINIO_BUCKET


def upload_bytes(data: bytes, object_name: str, *, content_type: Optional[str] = None) -> str:
    """Upload and return the public URL of the stored object.

    Raises:
        StorageError: when no provider is configured or the upload fails.
    """

    provider = _resolve_provider()[1]
    if provider is None:
        raise StorageError("storage.unavailable", "Object storage is not configured.")
    stored = provider.upload_bytes(data, object_name, content_type=content_type)
    if not stored:
        raise StorageError("storage.upload_failed", f"Failed to store {object_name}.")
    return provider.public_url(stored)


def delete_object(object_name: str) -> bool:
    provider = _resolve_provider()[1]
    if provider is None:
        return False
    return bool(provider.delete_object(object_name))


def object_name_from_url(url: Optional[str], bucket: Optional[str] = None) -> Optional[str]:
    """Derive the storage key from a public object URL.

    The key is everything after the ``/<bucket>/`` path segment; URLs that do
    not contain the bucket fall back to their last path segment.
    """

    if not url:
        return None
    path = unquote(urlparse(url).path or "")
    marker = f"/{bucket or bucket_name()}/"
    if marker in path:
        key = path.split(marker, 1)[1]
    else:
        key = path.rstrip("/").rsplit("/", 1)[-1]
    return key or None


__all__ = [
    "StorageError",
    "bucket_name",
    "delete_object",
    "is_enabled",
    "object_name_from_url",
    "provider_name",
    "upload_bytes",
]

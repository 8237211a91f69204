"""MinIO backend for the media bucket."""

from __future__ import annotations

import io
import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from minio import Minio

logger = logging.getLogger(__name__)

MINIO_BUCKET = os.getenv("MINIO_BUCKET", "media")


@dataclass(frozen=True)
class MinioSettings:
    endpoint: Optional[str]
    access_key: Optional[str]
    secret_key: Optional[str]
    bucket: str
    secure: bool
    public_base_url: Optional[str]

    @classmethod
    def from_env(cls) -> "MinioSettings":
        return cls(
            endpoint=os.getenv("MINIO_ENDPOINT"),
            access_key=os.getenv("MINIO_ACCESS_KEY"),
            secret_key=os.getenv("MINIO_SECRET_KEY"),
            bucket=MINIO_BUCKET,
            secure=os.getenv("MINIO_SECURE", "true").lower() == "true",
            public_base_url=os.getenv("MEDIA_PUBLIC_BASE_URL"),
        )

    @property
    def complete(self) -> bool:
        return bool(self.endpoint and self.access_key and self.secret_key)


SETTINGS = MinioSettings.from_env()


@lru_cache(maxsize=1)
def _client() -> Optional[Minio]:
    if not SETTINGS.complete:
        return None
    try:
        client = Minio(
            SETTINGS.endpoint,
            access_key=SETTINGS.access_key,
            secret_key=SETTINGS.secret_key,
            secure=SETTINGS.secure,
        )
    except ValueError as exc:
        logger.error("Invalid MinIO configuration for %s: %s", SETTINGS.endpoint, exc)
        return None
    logger.info("MinIO client ready for %s (bucket %s).", SETTINGS.endpoint, SETTINGS.bucket)
    return client


def is_enabled() -> bool:
    return _client() is not None


@lru_cache(maxsize=1)
def _ensure_bucket(client: Minio) -> None:
    if not client.bucket_exists(SETTINGS.bucket):
        client.make_bucket(SETTINGS.bucket)
        logger.info("Created bucket %s.", SETTINGS.bucket)


def public_url(object_name: str) -> str:
    base = SETTINGS.public_base_url
    if not base:
        base = f"{'https' if SETTINGS.secure else 'http'}://{SETTINGS.endpoint}"
    return f"{base.rstrip('/')}/{SETTINGS.bucket}/{object_name}"


def upload_bytes(data: bytes, object_name: str, *, content_type: Optional[str] = None) -> Optional[str]:
    """Store ``data`` under ``object_name``; returns the key or ``None`` on failure."""

    client = _client()
    if client is None:
        return None
    try:
        _ensure_bucket(client)
        client.put_object(
            SETTINGS.bucket,
            object_name,
            io.BytesIO(data),
            len(data),
            content_type=content_type or "application/octet-stream",
        )
    except Exception as exc:  # pragma: no cover
        logger.error("MinIO upload of %s failed: %s", object_name, exc, exc_info=True)
        return None
    return object_name


def delete_object(object_name: str) -> bool:
    client = _client()
    if client is None:
        return False
    try:
        client.remove_object(SETTINGS.bucket, object_name)
    except Exception as exc:  # pragma: no cover
        logger.warning("MinIO removal of %s failed: %s", object_name, exc)
        return False
    return True


__all__ = ["MINIO_BUCKET", "MinioSettings", "delete_object", "is_enabled", "public_url", "upload_bytes"]

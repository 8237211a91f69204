"""Site languages and the in-process change feed behind the realtime channel."""

from __future__ import annotations

import asyncio
import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, List, Optional, Set, Tuple

from sqlalchemy.orm import Session

from llm import llm_service
from models.language import Language

logger = logging.getLogger(__name__)

STATIC_LANGUAGES: Tuple[Dict[str, Any], ...] = (
    {"code": "fi", "name": "Finnish", "native_name": "Suomi", "enabled": True},
    {"code": "en", "name": "English", "native_name": "English", "enabled": True},
    {"code": "sv", "name": "Swedish", "native_name": "Svenska", "enabled": True},
)


class LanguageServiceError(RuntimeError):
    def __init__(self, code: str, message: str, status_code: int = 400):
        super().__init__(message)
        self.code = code
        self.status_code = status_code


@dataclass(frozen=True)
class LanguageChange:
    event: str  # INSERT, UPDATE, DELETE
    code: str
    record: Optional[Dict[str, Any]] = None
    at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def as_payload(self) -> Dict[str, Any]:
        return {"event": self.event, "code": self.code, "record": self.record, "at": self.at.isoformat()}


class LanguageChangeFeed:
    """Fan-out of language table changes to asyncio subscribers.

    Publishing is thread-safe: routes run in the threadpool while subscribers
    live on the event loop.
    """

    def __init__(self, max_queue: int = 100) -> None:
        self._max_queue = max_queue
        self._lock = threading.Lock()
        self._subscribers: Set[Tuple[asyncio.AbstractEventLoop, "asyncio.Queue[LanguageChange]"]] = set()

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def publish(self, change: LanguageChange) -> None:
        with self._lock:
            targets = list(self._subscribers)
        for loop, queue in targets:
            try:
                loop.call_soon_threadsafe(self._offer, queue, change)
            except RuntimeError:
                # Loop already closed; the subscriber will be dropped on exit.
                logger.debug("Dropping language change for a closed subscriber loop.")

    @staticmethod
    def _offer(queue: "asyncio.Queue[LanguageChange]", change: LanguageChange) -> None:
        try:
            queue.put_nowait(change)
        except asyncio.QueueFull:
            stale = queue.get_nowait()
            queue.put_nowait(change)
            logger.warning("Language change subscriber is lagging; dropped %s for %s.", stale.event, stale.code)

    async def subscribe(self) -> AsyncIterator[LanguageChange]:
        loop = asyncio.get_running_loop()
        queue: "asyncio.Queue[LanguageChange]" = asyncio.Queue(maxsize=self._max_queue)
        entry = (loop, queue)
        with self._lock:
            self._subscribers.add(entry)
        try:
            while True:
                yield await queue.get()
        finally:
            with self._lock:
                self._subscribers.discard(entry)


change_feed = LanguageChangeFeed()


def serialize_language(language: Language) -> Dict[str, Any]:
    return {
        "code": language.code,
        "name": language.name,
        "native_name": language.native_name,
        "enabled": bool(language.enabled),
        "updated_at": language.updated_at,
    }


def list_enabled_languages(db: Session) -> List[Dict[str, Any]]:
    """Enabled languages ordered by code, or the static fi/en/sv set when none are."""

    try:
        rows = db.query(Language).filter(Language.enabled.is_(True)).order_by(Language.code.asc()).all()
    except Exception as exc:
        logger.warning("Language lookup failed, serving static set: %s", exc)
        return [dict(item) for item in STATIC_LANGUAGES]
    if not rows:
        return [dict(item) for item in STATIC_LANGUAGES]
    return [serialize_language(row) for row in rows]


def _get(db: Session, code: str) -> Language:
    language = db.query(Language).filter(Language.code == code).first()
    if language is None:
        raise LanguageServiceError("languages.not_found", f"Language '{code}' not found.", 404)
    return language


def create_language(db: Session, *, code: str, name: str, user_id: Optional[str] = None) -> Language:
    code = (code or "").strip().lower()
    name = (name or "").strip()
    if not code or not name:
        raise LanguageServiceError("languages.invalid_payload", "Missing required fields.")
    if db.query(Language).filter(Language.code == code).first() is not None:
        raise LanguageServiceError("languages.exists", f"Language '{code}' already exists.", 409)

    native_name = llm_service.translate_language_name(name) or name
    language = Language(
        code=code,
        name=name,
        native_name=native_name[:64],
        enabled=True,
        last_edited_by=uuid.UUID(str(user_id)) if user_id else None,
    )
    db.add(language)
    db.commit()
    db.refresh(language)
    change_feed.publish(LanguageChange("INSERT", code, serialize_language(language)))
    return language


def update_language(db: Session, code: str, changes: Dict[str, Any], *, user_id: Optional[str] = None) -> Language:
    language = _get(db, code)
    if changes.get("enabled") is not None:
        language.enabled = bool(changes["enabled"])
    if changes.get("name"):
        language.name = changes["name"].strip()
    if changes.get("native_name") is not None:
        language.native_name = changes["native_name"].strip() or None
    if user_id:
        language.last_edited_by = uuid.UUID(str(user_id))
    db.commit()
    db.refresh(language)
    change_feed.publish(LanguageChange("UPDATE", language.code, serialize_language(language)))
    return language


def delete_language(db: Session, code: str) -> None:
    language = _get(db, code)
    db.delete(language)
    db.commit()
    change_feed.publish(LanguageChange("DELETE", code))


__all__ = [
    "LanguageChange",
    "LanguageChangeFeed",
    "LanguageServiceError",
    "STATIC_LANGUAGES",
    "change_feed",
    "create_language",
    "delete_language",
    "list_enabled_languages",
    "serialize_language",
    "update_language",
]

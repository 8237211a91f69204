"""Lightweight Prometheus helpers with graceful degradation."""

from __future__ import annotations

from typing import Optional

from core.logging import get_logger

logger = get_logger(__name__)

try:  # pragma: no cover - optional dependency
    from prometheus_client import Counter  # type: ignore
except ImportError:  # pragma: no cover - optional dependency
    Counter = None  # type: ignore

_CONVERSATION_TURNS: Optional["Counter"] = None  # type: ignore[name-defined]
_MEDIA_DELETIONS: Optional["Counter"] = None  # type: ignore[name-defined]
_ORPHANED_OBJECTS: Optional["Counter"] = None  # type: ignore[name-defined]
_BULK_ITEMS: Optional["Counter"] = None  # type: ignore[name-defined]

if Counter is not None:
    try:
        _CONVERSATION_TURNS = Counter(
            "trusty_conversation_turns_total",
            "Onboarding advisor turns by outcome.",
            ("outcome",),
        )
        _MEDIA_DELETIONS = Counter(
            "trusty_media_deletions_total",
            "Media asset deletions by outcome.",
            ("outcome",),
        )
        _ORPHANED_OBJECTS = Counter(
            "trusty_storage_orphaned_objects_total",
            "Storage objects left behind after a failed derivative removal.",
            ("variant",),
        )
        _BULK_ITEMS = Counter(
            "trusty_bulk_action_items_total",
            "Items processed by admin bulk actions.",
            ("action", "result"),
        )
    except ValueError:
        # Already registered when the module is reloaded.
        logger.debug("Prometheus metrics already registered; reusing existing collectors.")


def record_conversation_turn(outcome: str) -> None:
    if _CONVERSATION_TURNS is None:
        return
    _CONVERSATION_TURNS.labels(outcome=outcome).inc()


def record_media_deletion(outcome: str) -> None:
    if _MEDIA_DELETIONS is None:
        return
    _MEDIA_DELETIONS.labels(outcome=outcome).inc()


def record_orphaned_object(variant: str) -> None:
    """Count an optimized/thumbnail object that could not be removed."""

    if _ORPHANED_OBJECTS is None:
        return
    _ORPHANED_OBJECTS.labels(variant=variant).inc()


def record_bulk_item(action: str, succeeded: bool) -> None:
    if _BULK_ITEMS is None:
        return
    _BULK_ITEMS.labels(action=action, result="succeeded" if succeeded else "failed").inc()


__all__ = [
    "record_bulk_item",
    "record_conversation_turn",
    "record_media_deletion",
    "record_orphaned_object",
]

"""Descriptor for JSON ``metadata`` columns, a name SQLAlchemy reserves on Base."""

from __future__ import annotations

from typing import Any

from database import Base


class JSONMetadataProxy:
    """Class access yields ``Base.metadata``; instance access reads the JSON column."""

    def __init__(self, backing_attr: str) -> None:
        self._backing_attr = backing_attr

    def __set_name__(self, owner, name) -> None:  # pragma: no cover - descriptor hook
        self._name = name

    def __get__(self, instance, owner):
        if instance is None:
            return Base.metadata
        value = getattr(instance, self._backing_attr)
        return {} if value is None else value

    def __set__(self, instance, value: Any) -> None:
        setattr(instance, self._backing_attr, dict(value or {}))


__all__ = ["JSONMetadataProxy"]

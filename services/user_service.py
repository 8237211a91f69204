"""User data access helpers."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Optional

from database import SessionLocal
from models.user import User


@dataclass(frozen=True)
class UserRecord:
    id: str
    email: str
    role: Optional[str]
    is_admin: bool
    organization_id: Optional[str]


def _coerce_uuid(value: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


def fetch_user_by_id(user_id: str) -> Optional[UserRecord]:
    """Load a user row by identifier."""

    identifier = _coerce_uuid(user_id)
    if identifier is None:
        return None

    db = SessionLocal()
    try:
        row = db.query(User).filter(User.id == identifier).first()
        if not row:
            return None
        return UserRecord(
            id=str(row.id),
            email=row.email,
            role=row.role,
            is_admin=bool(row.is_admin),
            organization_id=str(row.organization_id) if row.organization_id else None,
        )
    finally:
        db.close()


__all__ = ["UserRecord", "fetch_user_by_id"]

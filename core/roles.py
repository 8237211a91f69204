"""Platform user roles shared by auth, admin screens and dashboards."""

from __future__ import annotations

from enum import Enum
from typing import Optional, Sequence


class UserRole(str, Enum):
    VISITOR = "visitor"
    BUYER = "buyer"
    SELLER = "seller"
    BROKER = "broker"
    PARTNER = "partner"
    ADMIN = "admin"

    def __str__(self) -> str:  # pragma: no cover - convenience
        return self.value


SUPPORTED_ROLES: Sequence[UserRole] = tuple(UserRole)
DEFAULT_ROLE = UserRole.VISITOR

ROLE_LABELS = {
    UserRole.VISITOR: "Vierailija",
    UserRole.BUYER: "Ostaja",
    UserRole.SELLER: "Myyjä",
    UserRole.BROKER: "Välittäjä",
    UserRole.PARTNER: "Kumppani",
    UserRole.ADMIN: "Admin",
}


def parse_role(value: Optional[str]) -> UserRole:
    """Map a stored role string onto the enum, defaulting to visitor."""
    if not value:
        return DEFAULT_ROLE
    try:
        return UserRole(value.strip().lower())
    except ValueError:
        return DEFAULT_ROLE


__all__ = ["DEFAULT_ROLE", "ROLE_LABELS", "SUPPORTED_ROLES", "UserRole", "parse_role"]

"""Admin-side user management: list, create, update and delete accounts."""

from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from core.env import env_int
from core.roles import UserRole, parse_role
from models.company import Company
from models.user import User
from services.auth_service import hash_password, normalize_email

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = env_int("ADMIN_MIN_PASSWORD_LENGTH", 6, minimum=1)
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
ROLE_FILTERS = {"admin", "partner", "user"}


class AdminUserError(RuntimeError):
    def __init__(self, code: str, message: str, status_code: int = 400):
        super().__init__(message)
        self.code = code
        self.status_code = status_code


@dataclass(frozen=True)
class UserPage:
    users: List[User]
    companies: Dict[uuid.UUID, Company]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def validate_password(password: Optional[str]) -> str:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise AdminUserError(
            "admin.users.password_too_short",
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters.",
        )
    return password


def _apply_filters(query, search: str, role: str):
    term = (search or "").strip()
    if term:
        pattern = f"%{term}%"
        query = query.filter(
            or_(
                User.email.ilike(pattern),
                User.first_name.ilike(pattern),
                User.last_name.ilike(pattern),
            )
        )
    if role == "admin":
        query = query.filter(User.is_admin.is_(True))
    elif role == "partner":
        query = query.filter(User.is_partner.is_(True))
    elif role == "user":
        query = query.filter(User.is_admin.is_(False), User.is_partner.is_(False))
    return query


def list_users(
    db: Session,
    *,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    search: str = "",
    role: str = "",
) -> UserPage:
    """Return one page of users, newest first.

    ``search`` matches email, first or last name case-insensitively. ``role``
    narrows to admins, partners, or plain users (neither flag set); unknown
    values are ignored.
    """

    page = max(1, page)
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    role = role if role in ROLE_FILTERS else ""

    base = _apply_filters(db.query(User), search, role)
    total = base.order_by(None).count()
    users = (
        base.order_by(User.created_at.desc(), User.email.asc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    company_ids = {user.company_id for user in users if user.company_id}
    companies: Dict[uuid.UUID, Company] = {}
    if company_ids:
        for company in db.query(Company).filter(Company.id.in_(company_ids)).all():
            companies[company.id] = company

    return UserPage(users=users, companies=companies, page=page, limit=limit, total=total)


def get_user(db: Session, user_id: uuid.UUID) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise AdminUserError("admin.users.not_found", "User not found.", 404)
    return user


def _email_taken(db: Session, email: str, *, exclude: Optional[uuid.UUID] = None) -> bool:
    query = db.query(User.id).filter(func.lower(User.email) == email)
    if exclude is not None:
        query = query.filter(User.id != exclude)
    return query.first() is not None


def _resolve_role(role: Optional[UserRole], is_admin: bool, is_partner: bool) -> UserRole:
    if is_admin:
        return UserRole.ADMIN
    if is_partner:
        return UserRole.PARTNER
    if role is not None:
        return parse_role(role)
    return UserRole.VISITOR


def create_user(db: Session, payload: Dict[str, Any]) -> User:
    email = normalize_email(payload.get("email"))
    if not email:
        raise AdminUserError("admin.users.email_required", "Email is required.")
    password = validate_password(payload.get("password"))
    if _email_taken(db, email):
        raise AdminUserError("admin.users.email_taken", "A user with this email already exists.", 409)

    is_admin = bool(payload.get("isAdmin"))
    is_partner = bool(payload.get("isPartner"))
    user = User(
        email=email,
        password_hash=hash_password(password),
        first_name=payload.get("firstName"),
        last_name=payload.get("lastName"),
        phone_number=payload.get("phoneNumber"),
        is_admin=is_admin,
        is_partner=is_partner,
        role=_resolve_role(payload.get("role"), is_admin, is_partner).value,
        company_id=payload.get("companyId"),
        organization_id=payload.get("organizationId"),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Admin created user %s (%s).", user.id, email)
    return user


_PROFILE_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("firstName", "first_name"),
    ("lastName", "last_name"),
    ("phoneNumber", "phone_number"),
    ("isAdmin", "is_admin"),
    ("isPartner", "is_partner"),
    ("companyId", "company_id"),
    ("organizationId", "organization_id"),
)


def update_user(db: Session, user_id: uuid.UUID, payload: Dict[str, Any]) -> User:
    """Apply a partial update; keys absent from ``payload`` are left untouched."""

    user = get_user(db, user_id)

    if "email" in payload and payload["email"] is not None:
        email = normalize_email(payload["email"])
        if not email:
            raise AdminUserError("admin.users.email_required", "Email is required.")
        if _email_taken(db, email, exclude=user.id):
            raise AdminUserError("admin.users.email_taken", "A user with this email already exists.", 409)
        user.email = email

    if payload.get("password"):
        user.password_hash = hash_password(validate_password(payload["password"]))

    for source, attr in _PROFILE_FIELDS:
        if source in payload:
            setattr(user, attr, payload[source])

    if payload.get("role") is not None or "isAdmin" in payload or "isPartner" in payload:
        user.role = _resolve_role(payload.get("role"), bool(user.is_admin), bool(user.is_partner)).value

    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, user_id: uuid.UUID, *, acting_user_id: Optional[str] = None) -> None:
    if acting_user_id and str(user_id) == str(acting_user_id):
        raise AdminUserError("admin.users.self_delete", "You cannot delete your own account.")
    user = get_user(db, user_id)
    db.delete(user)
    db.commit()
    logger.info("Admin %s deleted user %s.", acting_user_id, user_id)


def serialize_user(user: User, company: Optional[Company] = None) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "phoneNumber": user.phone_number,
        "role": parse_role(user.role),
        "isAdmin": bool(user.is_admin),
        "isPartner": bool(user.is_partner),
        "organizationId": user.organization_id,
        "companyId": user.company_id,
        "company": (
            {"id": company.id, "name": company.name, "businessId": company.business_id} if company else None
        ),
        "lastSignInAt": user.last_sign_in_at,
        "createdAt": user.created_at,
        "updatedAt": user.updated_at,
    }


__all__ = [
    "AdminUserError",
    "MIN_PASSWORD_LENGTH",
    "UserPage",
    "create_user",
    "delete_user",
    "get_user",
    "list_users",
    "serialize_user",
    "update_user",
    "validate_password",
]

"""Email and password login."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerifyMismatchError
from sqlalchemy import func
from sqlalchemy.orm import Session

from core.env import env_int
from core.roles import parse_role
from models.user import User
from services.auth_tokens import create_access_token

logger = logging.getLogger(__name__)

_ARGON_TIME_COST = env_int("AUTH_ARGON2_TIME_COST", 2, minimum=1)
_ARGON_MEMORY_COST = env_int("AUTH_ARGON2_MEMORY_COST", 65536, minimum=8192)
_ARGON_PARALLELISM = env_int("AUTH_ARGON2_PARALLELISM", 1, minimum=1)

_PASSWORD_HASHER = PasswordHasher(
    time_cost=_ARGON_TIME_COST,
    memory_cost=_ARGON_MEMORY_COST,
    parallelism=_ARGON_PARALLELISM,
)


class AuthServiceError(RuntimeError):
    def __init__(self, code: str, message: str, status_code: int):
        super().__init__(message)
        self.code = code
        self.status_code = status_code


@dataclass(frozen=True)
class LoginResult:
    access_token: str
    expires_in: int
    user: User


def hash_password(password: str) -> str:
    return _PASSWORD_HASHER.hash(password)


def verify_password(password_hash: Optional[str], password: str) -> bool:
    if not password_hash:
        return False
    try:
        return _PASSWORD_HASHER.verify(password_hash, password)
    except (VerifyMismatchError, InvalidHashError):
        return False


def normalize_email(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def login_user(db: Session, *, email: str, password: str) -> LoginResult:
    """Verify credentials and issue an access token for the matching user."""

    normalized = normalize_email(email)
    if not normalized or not password:
        raise AuthServiceError("auth.invalid_payload", "Email and password are required.", 400)

    user = db.query(User).filter(func.lower(User.email) == normalized).first()
    if user is None or not verify_password(user.password_hash, password):
        logger.info("Login rejected for %s.", normalized)
        raise AuthServiceError("auth.invalid_credentials", "Invalid email or password.", 401)

    user.last_sign_in_at = datetime.now(timezone.utc)
    db.commit()

    token, expires_in = create_access_token(
        user_id=str(user.id),
        email=user.email,
        role=parse_role(user.role).value,
        is_admin=bool(user.is_admin),
    )
    return LoginResult(access_token=token, expires_in=expires_in, user=user)


__all__ = [
    "AuthServiceError",
    "LoginResult",
    "hash_password",
    "login_user",
    "normalize_email",
    "verify_password",
]

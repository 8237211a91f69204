"""Attach authenticated user information from Authorization headers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from core.logging import get_logger
from core.roles import UserRole, parse_role
from services.auth_tokens import AuthTokenError, decode_token
from services.user_service import fetch_user_by_id

logger = get_logger(__name__)

_BYPASS_PREFIXES = (
    "/api/auth",
    "/docs",
    "/openapi",
    "/health",
    "/metrics",
)


@dataclass(frozen=True)
class AuthenticatedUser:
    id: str
    email: str
    role: UserRole
    is_admin: bool
    organization_id: Optional[str] = None


def _should_bypass(path: str) -> bool:
    path = path or ""
    return any(path.startswith(prefix) for prefix in _BYPASS_PREFIXES)


def _extract_bearer(header_value: Optional[str]) -> Optional[str]:
    if not header_value:
        return None
    value = header_value.strip()
    if value.lower().startswith("bearer "):
        token = value[7:].strip()
        return token or None
    return None


def _unauthorized(code: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=401, content={"detail": {"code": code, "message": message}})


async def auth_context_middleware(request: Request, call_next):
    path = request.url.path if request.url else ""
    if request.method == "OPTIONS" or _should_bypass(path):
        return await call_next(request)

    token = _extract_bearer(request.headers.get("authorization"))
    if not token:
        return await call_next(request)

    try:
        payload = decode_token(token, scope="access")
    except AuthTokenError as exc:
        return _unauthorized(exc.code, str(exc))

    user_id = payload.get("sub")
    if not user_id:
        return _unauthorized("auth.token_invalid", "Invalid token.")

    record = fetch_user_by_id(str(user_id))
    if not record:
        logger.info("Token subject %s no longer exists.", user_id)
        return _unauthorized("auth.user_not_found", "User not found.")

    role = parse_role(record.role or payload.get("role"))
    is_admin = record.is_admin or role is UserRole.ADMIN
    request.state.user = AuthenticatedUser(
        id=record.id,
        email=record.email,
        role=UserRole.ADMIN if record.is_admin else role,
        is_admin=is_admin,
        organization_id=record.organization_id,
    )
    request.state.user_claims = payload
    return await call_next(request)


__all__ = ["AuthenticatedUser", "auth_context_middleware"]

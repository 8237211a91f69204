"""Shared FastAPI dependencies."""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request, status

from web.middleware.auth_context import AuthenticatedUser


def get_optional_user(request: Request) -> Optional[AuthenticatedUser]:
    return getattr(request.state, "user", None)


def get_current_user(request: Request) -> AuthenticatedUser:
    user = getattr(request.state, "user", None)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "auth.required", "message": "Authentication required."},
        )
    return user


def require_admin(user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "auth.forbidden", "message": "Admin access required."},
        )
    return user


__all__ = ["get_current_user", "get_optional_user", "require_admin"]

"""Email and password login."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from schemas.api.auth import LoginRequest, LoginResponse
from services.admin_user_service import serialize_user
from services.auth_service import AuthServiceError, login_user

router = APIRouter(prefix="/auth", tags=["Auth"])


def _raise(exc: AuthServiceError) -> None:
    raise HTTPException(status_code=exc.status_code, detail={"code": exc.code, "message": str(exc)}) from exc


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> LoginResponse:
    try:
        result = login_user(db, email=payload.email, password=payload.password)
    except AuthServiceError as exc:
        _raise(exc)
    return LoginResponse(
        accessToken=result.access_token,
        expiresIn=result.expires_in,
        user=serialize_user(result.user),
    )

"""Onboarding advisor conversation."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from database import get_db
from schemas.api.conversation import ConversationRequest, ConversationResponse
from services import conversation_service
from services.company_service import CompanyServiceError
from services.conversation_service import ConversationError
from web.middleware.auth_context import AuthenticatedUser

router = APIRouter(prefix="/onboarding", tags=["Onboarding"])


def _require_user(request: Request) -> AuthenticatedUser:
    user = getattr(request.state, "user", None)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "auth.required", "message": "Authentication required."},
        )
    return user


@router.post("/conversation", response_model=ConversationResponse)
def conversation_turn(
    payload: ConversationRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> ConversationResponse:
    user = _require_user(request)
    try:
        result = conversation_service.run_conversation_turn(
            db, payload, user_id=user.id, is_admin=user.is_admin
        )
    except (ConversationError, CompanyServiceError) as exc:
        raise HTTPException(status_code=exc.status_code, detail={"code": exc.code, "message": str(exc)}) from exc
    return ConversationResponse.model_validate(result)

"""Financing-needs snapshots."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from database import get_db
from schemas.api.financing import FinancingNeedCreateRequest, FinancingNeedListResponse, FinancingNeedResponse
from services import financing_needs_service
from services.company_service import CompanyServiceError
from web.deps import get_current_user
from web.middleware.auth_context import AuthenticatedUser

router = APIRouter(prefix="/financing-needs", tags=["Financing Needs"])


@router.post("", response_model=FinancingNeedResponse, status_code=201)
def create_financing_need(
    payload: FinancingNeedCreateRequest,
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user),
) -> FinancingNeedResponse:
    try:
        need = financing_needs_service.create_need(
            db,
            company_id=payload.companyId,
            questionnaire=payload.questionnaire.model_dump(),
            user_id=user.id,
            is_admin=user.is_admin,
        )
    except CompanyServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail={"code": exc.code, "message": str(exc)}) from exc
    return FinancingNeedResponse(data=financing_needs_service.serialize_need(need))


@router.get("", response_model=FinancingNeedListResponse)
def list_financing_needs(
    companyId: uuid.UUID = Query(...),
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user),
) -> FinancingNeedListResponse:
    try:
        needs = financing_needs_service.list_needs(db, company_id=companyId, user_id=user.id, is_admin=user.is_admin)
    except CompanyServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail={"code": exc.code, "message": str(exc)}) from exc
    return FinancingNeedListResponse(data=[financing_needs_service.serialize_need(need) for need in needs])

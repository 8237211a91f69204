"""Company profile endpoints and the public registry lookup."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from database import get_db
from schemas.api.companies import CompanyListResponse, CompanyResponse, CompanySearchResponse, CompanyUpsertRequest
from services import company_registry, company_service
from services.company_registry import CompanyRegistryError
from services.company_service import CompanyServiceError
from web.deps import get_current_user
from web.middleware.auth_context import AuthenticatedUser

router = APIRouter(prefix="/companies", tags=["Companies"])


@router.get("", response_model=CompanyListResponse)
def list_companies(
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user),
) -> CompanyListResponse:
    companies = company_service.list_companies_for_user(db, user.id)
    return CompanyListResponse(data=[company_service.serialize_company(company) for company in companies])


@router.post("", response_model=CompanyResponse)
def upsert_company(
    payload: CompanyUpsertRequest,
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user),
) -> CompanyResponse:
    try:
        company, created = company_service.upsert_company(db, user.id, payload.model_dump())
    except CompanyServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail={"code": exc.code, "message": str(exc)}) from exc
    return CompanyResponse(data=company_service.serialize_company(company), created=created)


@router.get("/search", response_model=CompanySearchResponse)
def search_registry(
    query: str = Query("", description="Company name fragment."),
    limit: int = Query(5, ge=1, le=20),
) -> CompanySearchResponse:
    try:
        results = company_registry.search_companies(query, limit=limit)
    except CompanyRegistryError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"code": "companies.registry_failed", "message": str(exc)},
        ) from exc
    return CompanySearchResponse(data=results)

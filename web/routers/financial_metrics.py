"""Yearly financial metrics per company."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from database import get_db
from schemas.api.companies import FinancialMetricListResponse
from services import company_service, financial_metrics_service
from services.company_service import CompanyServiceError
from web.deps import get_current_user
from web.middleware.auth_context import AuthenticatedUser

router = APIRouter(prefix="/financial-metrics", tags=["Financial Metrics"])


@router.get("/list", response_model=FinancialMetricListResponse)
def list_financial_metrics(
    companyId: uuid.UUID = Query(...),
    order: str = Query("fiscal_year"),
    direction: str = Query("desc"),
    chart: bool = Query(False, description="Include chart datasets."),
    db: Session = Depends(get_db),
    user: AuthenticatedUser = Depends(get_current_user),
) -> FinancialMetricListResponse:
    try:
        company_service.get_company_for_user(db, companyId, user.id, is_admin=user.is_admin)
    except CompanyServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail={"code": exc.code, "message": str(exc)}) from exc

    metrics = financial_metrics_service.list_metrics(db, companyId, order=order, direction=direction)
    return FinancialMetricListResponse(
        data=[financial_metrics_service.serialize_metric(metric) for metric in metrics],
        chart=financial_metrics_service.build_chart(metrics) if chart else None,
    )

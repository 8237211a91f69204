"""Factoring calculator, lead capture and the calculator chat."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from core.logging import get_logger
from database import get_db
from llm import llm_service
from schemas.api.calculator import (
    CalcChatRequest,
    CalcChatResponse,
    CalculatorSaveRequest,
    CalculatorSaveResponse,
    FactoringInputs,
    FactoringResultSchema,
)
from services import calculator_service
from services.calculator_service import CalculatorError
from services.company_service import CompanyServiceError
from web.deps import get_optional_user
from web.middleware.auth_context import AuthenticatedUser

logger = get_logger(__name__)

router = APIRouter(tags=["Calculator"])


@router.post("/calculator/factoring", response_model=FactoringResultSchema)
def compute_factoring(payload: FactoringInputs) -> FactoringResultSchema:
    result = calculator_service.compute_factoring(payload.monthlyInvoices, payload.avgDays)
    return FactoringResultSchema(**result.as_dict())


@router.post("/calculator/save", response_model=CalculatorSaveResponse)
def save_calculation(
    payload: CalculatorSaveRequest,
    db: Session = Depends(get_db),
    user: Optional[AuthenticatedUser] = Depends(get_optional_user),
) -> CalculatorSaveResponse:
    try:
        lead, result, company_id = calculator_service.save_lead(
            db,
            payload.model_dump(),
            user_id=user.id if user else None,
        )
    except (CalculatorError, CompanyServiceError) as exc:
        raise HTTPException(status_code=exc.status_code, detail={"code": exc.code, "message": str(exc)}) from exc
    return CalculatorSaveResponse(id=lead.id, result=result.as_dict(), companyId=company_id)


@router.post("/calc-chat", response_model=CalcChatResponse)
def calculator_chat(payload: CalcChatRequest) -> CalcChatResponse:
    try:
        text = llm_service.answer_calculator_question(
            payload.message,
            context=calculator_service.format_chat_context(payload.context),
            history=[turn.model_dump() for turn in payload.history],
            locale=payload.locale,
        )
    except llm_service.LLMServiceError as exc:
        logger.warning("Calculator chat failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"code": "calculator.chat_failed", "message": "The assistant is unavailable."},
        ) from exc
    return CalcChatResponse(text=text)

"""Factoring calculator lead capture and chat context."""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Dict, Optional, Tuple, Union

from sqlalchemy.orm import Session

from core.factoring import FactoringResult, compute_factoring
from models.financing import CalculatorLead
from services import company_service

logger = logging.getLogger(__name__)

CALC_CHAT_MAX_TURNS = 5


class CalculatorError(RuntimeError):
    def __init__(self, code: str, message: str, status_code: int = 400):
        super().__init__(message)
        self.code = code
        self.status_code = status_code


def save_lead(
    db: Session,
    payload: Dict[str, Any],
    *,
    user_id: Optional[str] = None,
) -> Tuple[CalculatorLead, FactoringResult, Optional[uuid.UUID]]:
    """Persist a calculator lead; email and company name are mandatory.

    The stored result is recomputed from the inputs. With an authenticated
    caller and ``createCompany`` set, the company is upserted for that user.
    """

    email = (payload.get("email") or "").strip()
    company_name = (payload.get("companyName") or "").strip()
    if not email or not company_name:
        raise CalculatorError("calculator.missing_contact", "Email and company name are required.")

    inputs = payload.get("inputs") or {}
    result = compute_factoring(inputs.get("monthlyInvoices") or 0, inputs.get("avgDays") or 0)

    company_id: Optional[uuid.UUID] = None
    if user_id and payload.get("createCompany"):
        extra = payload.get("companyPayload") or {}
        company, _ = company_service.upsert_company(
            db,
            user_id,
            {
                "name": extra.get("name") or company_name,
                "businessId": extra.get("business_id") or payload.get("businessId"),
                "industry": extra.get("mainBusinessLine"),
                "registrationDate": extra.get("registrationDate"),
                "street": extra.get("address"),
                "postCode": extra.get("postCode"),
                "city": extra.get("city"),
            },
        )
        company_id = company.id

    lead = CalculatorLead(
        locale=payload.get("locale") or "fi",
        source_page=payload.get("sourcePage"),
        calculator_type=payload.get("calculatorType") or "factoring",
        business_id=payload.get("businessId"),
        company_name=company_name,
        email=email,
        phone=payload.get("phone"),
        inputs=dict(inputs),
        result=result.as_dict(),
        user_id=uuid.UUID(str(user_id)) if user_id else None,
        company_id=company_id,
    )
    db.add(lead)
    db.commit()
    db.refresh(lead)
    logger.info("Stored %s calculator lead %s.", lead.calculator_type, lead.id)
    return lead, result, company_id


def format_chat_context(context: Union[Dict[str, Any], str, None]) -> Optional[str]:
    if context is None:
        return None
    if isinstance(context, str):
        return context
    return json.dumps(context, ensure_ascii=False, default=str)


__all__ = [
    "CALC_CHAT_MAX_TURNS",
    "CalculatorError",
    "FactoringResult",
    "compute_factoring",
    "format_chat_context",
    "save_lead",
]

"""Financing-needs snapshots captured at the end of an onboarding conversation."""

from __future__ import annotations

import logging
import re
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from llm import llm_service
from models.financing import FinancingNeed
from services import company_service

logger = logging.getLogger(__name__)

_URGENCY_LEVELS = {"high", "medium", "low"}
_NUMBER_PATTERN = re.compile(r"-?\d+(?:[.,]\d+)?")
_THOUSANDS_PATTERN = re.compile(r"(?<=\d)[,.\s\u00a0](?=\d{3}\b)")


def describe_questionnaire(questionnaire: Dict[str, Any]) -> str:
    summary = (questionnaire.get("summary") or "").strip()
    answers = [
        f"{answer.get('key')}: {answer.get('value')}"
        for answer in questionnaire.get("answers") or []
        if answer.get("key")
    ]
    parts = [summary] if summary else []
    if answers:
        parts.append("; ".join(answers))
    return ". ".join(parts) or "Financing needs collected from the onboarding conversation."


def _coerce_amount(value: Any) -> Optional[float]:
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        return None
    match = _NUMBER_PATTERN.search(_THOUSANDS_PATTERN.sub("", value))
    if not match:
        return None
    try:
        return float(match.group(0).replace(",", "."))
    except ValueError:
        return None


def _apply_parsed_details(need: FinancingNeed, parsed: Dict[str, Any]) -> None:
    amount = _coerce_amount(parsed.get("amount"))
    if amount is not None:
        need.amount = amount
    currency = parsed.get("currency")
    if isinstance(currency, str) and len(currency.strip()) == 3:
        need.currency = currency.strip().upper()
    if parsed.get("purpose"):
        need.purpose = str(parsed["purpose"])[:255]
    if parsed.get("time_horizon"):
        need.time_horizon = str(parsed["time_horizon"])[:64]
    urgency = str(parsed.get("urgency") or "").strip().lower()
    if urgency in _URGENCY_LEVELS:
        need.urgency = urgency


def create_need(
    db: Session,
    *,
    company_id: uuid.UUID,
    questionnaire: Dict[str, Any],
    user_id: str,
    is_admin: bool = False,
) -> FinancingNeed:
    """Store the snapshot, then enrich it from the LLM when possible.

    The enrichment step never fails the request; the row keeps its defaults
    when the model is unavailable.
    """

    company_service.get_company_for_user(db, company_id, user_id, is_admin=is_admin)
    description = describe_questionnaire(questionnaire)
    need = FinancingNeed(
        company_id=company_id,
        created_by=uuid.UUID(str(user_id)),
        description=description,
        requirements={
            "summary": questionnaire.get("summary") or "",
            "answers": list(questionnaire.get("answers") or []),
        },
        currency="EUR",
    )
    db.add(need)
    db.commit()
    db.refresh(need)

    try:
        parsed = llm_service.parse_financing_description(description)
    except Exception as exc:
        logger.warning("Financing needs enrichment failed for %s: %s", need.id, exc)
        parsed = {}
    if parsed:
        _apply_parsed_details(need, parsed)
        db.commit()
        db.refresh(need)
    return need


def list_needs(db: Session, *, company_id: uuid.UUID, user_id: str, is_admin: bool = False) -> List[FinancingNeed]:
    company_service.get_company_for_user(db, company_id, user_id, is_admin=is_admin)
    return (
        db.query(FinancingNeed)
        .filter(FinancingNeed.company_id == company_id)
        .order_by(FinancingNeed.created_at.desc())
        .all()
    )


def serialize_need(need: FinancingNeed) -> Dict[str, Any]:
    return {
        "id": need.id,
        "companyId": need.company_id,
        "createdBy": need.created_by,
        "description": need.description,
        "requirements": need.requirements or {},
        "amount": need.amount,
        "currency": need.currency,
        "purpose": need.purpose,
        "timeHorizon": need.time_horizon,
        "urgency": need.urgency,
        "createdAt": need.created_at,
    }


__all__ = ["create_need", "describe_questionnaire", "list_needs", "serialize_need"]

"""Server side of the onboarding advisor conversation.

The advisor's decisions come from the LLM. This module only assembles the
prompt inputs (locale, company facts, asked questions, question budget) and
normalizes whatever JSON comes back into the response contract.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from llm import llm_service
from schemas.api.conversation import ConversationRequest, ConversationResponse
from services import company_service
from services.metrics import record_conversation_turn

logger = logging.getLogger(__name__)

_NESTED_JSON_FIELDS = {
    "optionsJson": "options",
    "collectedJson": "collected",
    "recommendationJson": "recommendation",
    "updatedRecommendationsJson": "updatedRecommendations",
}
_OPTION_TYPE_ALIASES = {
    "single": "single",
    "click_options": "single",
    "radio": "single",
    "multi": "multi",
    "multiple": "multi",
    "checkbox": "multi",
    "text": "text_input",
    "text_input": "text_input",
}


class ConversationError(RuntimeError):
    def __init__(self, code: str, message: str, status_code: int = 502):
        super().__init__(message)
        self.code = code
        self.status_code = status_code


def _decode_nested(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Expand the flat ``*Json`` string fields some providers are asked to emit."""

    data = dict(payload)
    for source, target in _NESTED_JSON_FIELDS.items():
        raw = data.pop(source, None)
        if not isinstance(raw, str) or (target in data and data[target] is not None):
            continue
        try:
            data[target] = json.loads(raw) if raw.strip() else None
        except ValueError:
            logger.warning("Advisor returned malformed %s; dropping it.", source)
            data[target] = None
    return data


def _normalize_options(raw: Any) -> List[Dict[str, str]]:
    options: List[Dict[str, str]] = []
    for item in raw or []:
        if isinstance(item, str):
            options.append({"label": item, "value": item})
        elif isinstance(item, dict) and (item.get("label") or item.get("value")):
            label = str(item.get("label") or item.get("value"))
            options.append({"label": label, "value": str(item.get("value") or label)})
    return options


def _normalize_recommendation(raw: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(raw, dict):
        return None
    items = [item for item in raw.get("items") or [] if isinstance(item, dict) and item.get("title")]
    for item in items:
        item.setdefault("type", "business_loan_unsecured")
    return {"items": items, "comparison": raw.get("comparison")}


def normalize_advisor_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Coerce a raw advisor JSON object into ``ConversationResponse`` shape."""

    data = _decode_nested(payload)
    options = _normalize_options(data.get("options"))
    option_type = _OPTION_TYPE_ALIASES.get(str(data.get("optionType") or "").strip().lower())
    if option_type is None:
        option_type = "single" if options else "text_input"

    collected = data.get("collected") if isinstance(data.get("collected"), dict) else None
    if collected is not None:
        collected = {
            "summary": str(collected.get("summary") or ""),
            "answers": [
                {"key": str(answer.get("key")), "value": str(answer.get("value"))}
                for answer in collected.get("answers") or []
                if isinstance(answer, dict) and answer.get("key") is not None
            ],
        }

    normalized = {
        "nextQuestion": str(data.get("nextQuestion") or ""),
        "optionType": option_type,
        "options": options,
        "cfoGuidance": data.get("cfoGuidance") or None,
        "category": data.get("category") or None,
        "done": bool(data.get("done")),
        "collected": collected,
        "recommendation": _normalize_recommendation(data.get("recommendation")),
        "updatedRecommendations": _normalize_recommendation(data.get("updatedRecommendations")),
    }
    return ConversationResponse.model_validate(normalized).model_dump()


def run_conversation_turn(
    db: Session,
    request: ConversationRequest,
    *,
    user_id: str,
    is_admin: bool = False,
) -> Dict[str, Any]:
    """Ask the advisor for the next question or recommendation set.

    Raises:
        ConversationError: 400 without a company, 502 when the model call fails
            or returns something unusable.
        CompanyServiceError: when the company is unknown or not the caller's.
    """

    if request.companyId is None:
        raise ConversationError("conversation.company_required", "companyId is required.", 400)
    company = company_service.get_company_for_user(db, request.companyId, user_id, is_admin=is_admin)

    current = None
    if request.isRecommendationFollowUp and request.currentRecommendations is not None:
        current = request.currentRecommendations.model_dump()

    result = llm_service.run_advisor_turn(
        locale=request.locale,
        analysis_type=request.analysisType,
        company_context=company_service.company_context(company),
        history=[turn.model_dump() for turn in request.history],
        avoid_questions=request.avoidQuestions,
        user_message=request.userMessage,
        current_recommendations=current,
        model=request.model,
        normalizer=normalize_advisor_payload,
    )
    if "error" in result:
        record_conversation_turn("failed")
        raise ConversationError("conversation.upstream_failed", f"Advisor unavailable: {result['error']}")

    result.pop("model_used", None)
    try:
        response = ConversationResponse.model_validate(result).model_dump()
    except ValidationError as exc:
        record_conversation_turn("failed")
        raise ConversationError("conversation.invalid_response", f"Advisor returned an invalid payload: {exc}") from exc

    outcome = "recommendation" if response["recommendation"] and response["recommendation"]["items"] else "question"
    if request.isRecommendationFollowUp:
        outcome = "follow_up"
    record_conversation_turn(outcome)
    return response


__all__ = ["ConversationError", "normalize_advisor_payload", "run_conversation_turn"]

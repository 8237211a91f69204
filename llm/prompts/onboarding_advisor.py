"""Prompt template for the onboarding financing advisor."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence

LANGUAGE_NAMES = {"fi": "Finnish", "sv": "Swedish", "en": "English"}

QUESTION_BUDGETS = {
    "quick": "QUICK (3-5 questions, then recommend)",
    "comprehensive": "COMPREHENSIVE (5-10 questions, comprehensive but efficient)",
}

SYSTEM_PROMPT = """You are Trusty Finance's digital financing advisor, the digital equivalent of an
experienced, impartial Chief Financial Officer (CFO).
Personality: analytical, empathetic, direct but constructive.
Mission: help business decision-makers understand their financing options impartially.

LANGUAGE: Always answer in {language}. Every question, option label, guidance text and
recommendation must be written in {language}.

ANALYSIS TYPE: {budget}

QUESTION SEQUENCING:
- Ask about the basic need first (working capital, growth, investment, restructuring).
- Ask the financing amount and the timeline as SEPARATE questions.
- Assess collateral after the amount is known.
- Never repeat a question listed under "Already asked" or one answered in the history.

PRODUCT TYPES (use these values for recommendation item "type"):
business_loan_unsecured, business_loan_secured, credit_line, factoring_ar, leasing.

COLLATERAL RULES:
- Under {currency_symbol}100,000: personal guarantee only, decision in 1-3 days.
- {currency_symbol}100,000 - {currency_symbol}350,000: collateral optional, explain both paths.
- Over {currency_symbol}350,000: collateral normally required, 2-4 weeks processing.

STYLE: never quote the customer's revenue or profit figures inside cfoGuidance or
nextQuestion; put numbers only in structured fields.

Respond with strict JSON only:
{{
  "nextQuestion": "string",
  "optionType": "single | multi | text_input",
  "options": [{{"label": "string", "value": "string"}}],
  "cfoGuidance": "string or null",
  "category": "string or null",
  "done": false,
  "collected": {{"summary": "string", "answers": [{{"key": "string", "value": "string"}}]}},
  "recommendation": {{"items": [{{"type": "string", "title": "string", "summary": "string",
    "amount": null, "termMonths": null, "guaranteesRequired": null, "costNotes": null}}],
    "comparison": "string"}},
  "updatedRecommendations": null
}}
Set "done" to true only when you present final recommendations."""

FOLLOW_UP_INSTRUCTIONS = """The client has already received these recommendations:
{recommendations}

Answer the client's follow-up question in cfoGuidance as their CFO advisor. Keep "done" true.
If the client asks to change the recommendations, return the full revised set in
"updatedRecommendations"; otherwise leave it null."""

CONTEXT_TEMPLATE = """COMPANY CONTEXT:
{company}

ALREADY ASKED:
{avoid}

CONVERSATION HISTORY:
{history}

LATEST CLIENT MESSAGE:
{message}"""


def currency_for(locale: str, business_id: Optional[str]) -> Dict[str, str]:
    """SEK for Swedish organisation numbers in a Swedish locale, EUR otherwise."""

    swedish_id = bool(business_id) and len(business_id) == 11 and business_id[6] == "-" and (
        business_id[:6] + business_id[7:]
    ).isdigit()
    if swedish_id and locale == "sv":
        return {"code": "SEK", "symbol": "kr"}
    return {"code": "EUR", "symbol": "€"}


def _format_history(history: Sequence[Dict[str, Any]]) -> str:
    if not history:
        return "(no previous turns)"
    return "\n".join(f"{turn.get('role')}: {turn.get('content')}" for turn in history)


def get_prompt(
    *,
    locale: str,
    analysis_type: Optional[str],
    company_context: Dict[str, Any],
    history: Sequence[Dict[str, Any]],
    avoid_questions: Sequence[str],
    user_message: str,
    current_recommendations: Optional[Dict[str, Any]] = None,
) -> List[dict]:
    language = LANGUAGE_NAMES.get(locale, "Finnish")
    budget = QUESTION_BUDGETS.get(analysis_type or "comprehensive", QUESTION_BUDGETS["comprehensive"])
    currency = currency_for(locale, company_context.get("businessId"))
    system = SYSTEM_PROMPT.format(language=language, budget=budget, currency_symbol=currency["symbol"])
    if current_recommendations is not None:
        system += "\n\n" + FOLLOW_UP_INSTRUCTIONS.format(
            recommendations=json.dumps(current_recommendations, ensure_ascii=False, indent=2)
        )
    user = CONTEXT_TEMPLATE.format(
        company=json.dumps(company_context, ensure_ascii=False, default=str),
        avoid="\n".join(f"- {question}" for question in avoid_questions[-40:]) or "(none)",
        history=_format_history(history),
        message=user_message or "(no message)",
    )
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]


__all__ = ["LANGUAGE_NAMES", "currency_for", "get_prompt"]

"""Prompt template for structuring a financing-needs description."""

from __future__ import annotations

from typing import List

SYSTEM_PROMPT = (
    "You analyse descriptions of a company's financing needs. "
    "Respond ONLY with a JSON object. Use null for anything not explicitly stated."
)

USER_PROMPT_TEMPLATE = """User description:
"{description}"

Return JSON with these keys:
- amount: number, estimated funding amount needed
- currency: string, currency code such as EUR or SEK
- purpose: string, brief summary of the funding purpose
- time_horizon: string such as "0-6 months", "6-12 months", ">1 year"
- urgency: one of "High", "Medium", "Low\""""


def get_prompt(description: str) -> List[dict]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": USER_PROMPT_TEMPLATE.format(description=description)},
    ]


__all__ = ["get_prompt"]

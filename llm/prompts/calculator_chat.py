"""Prompt template for the calculator help chat."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from llm.prompts.onboarding_advisor import LANGUAGE_NAMES

SYSTEM_PROMPT = (
    "You are Trusty Finance's calculator assistant. Explain factoring and working-capital "
    "figures in plain language, in {language}. Keep answers under 120 words, refer to the "
    "numbers in the calculator context when relevant, and do not promise loan approval."
)


def get_prompt(
    message: str,
    *,
    context: Optional[str] = None,
    history: Sequence[Dict[str, str]] = (),
    locale: str = "fi",
) -> List[dict]:
    system = SYSTEM_PROMPT.format(language=LANGUAGE_NAMES.get(locale, "Finnish"))
    if context:
        system += f"\n\nCalculator context:\n{context}"
    messages: List[dict] = [{"role": "system", "content": system}]
    for turn in history:
        messages.append({"role": turn["role"], "content": turn["content"]})
    messages.append({"role": "user", "content": message})
    return messages


__all__ = ["get_prompt"]

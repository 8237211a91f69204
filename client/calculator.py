"""Factoring calculator widget: local arithmetic, lead saving and the chat."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from client.api import ApiClient, ApiError
from core.factoring import FactoringResult as FactoringEstimate
from core.factoring import compute_factoring

logger = logging.getLogger(__name__)

MAX_CHAT_TURNS = 5
CHAT_ERROR_MESSAGE = "Tekninen virhe, yritä hetken päästä uudelleen."


def estimate(monthly_invoices: float, avg_days: float) -> FactoringEstimate:
    return compute_factoring(monthly_invoices, avg_days)


@dataclass
class ChatMessage:
    role: str
    content: str


@dataclass
class FactoringCalculator:
    api: ApiClient
    locale: str = "fi"
    monthly_invoices: float = 0
    avg_days: float = 0
    business_id: str = ""
    company_name: str = ""
    email: str = ""
    phone: str = ""
    chat: List[ChatMessage] = field(default_factory=list)
    chat_turns: int = 0

    @property
    def result(self) -> FactoringEstimate:
        return estimate(self.monthly_invoices, self.avg_days)

    @property
    def inputs(self) -> Dict[str, float]:
        return {"monthlyInvoices": self.monthly_invoices, "avgDays": self.avg_days}

    @property
    def can_save(self) -> bool:
        return bool(self.email.strip() and self.company_name.strip())

    async def save(
        self,
        *,
        source_page: Optional[str] = None,
        create_company: bool = False,
        company_payload: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        if not self.can_save:
            raise ValueError("Email and company name are required.")
        body = {
            "locale": self.locale,
            "sourcePage": source_page,
            "calculatorType": "factoring",
            "businessId": self.business_id or None,
            "companyName": self.company_name.strip(),
            "email": self.email.strip(),
            "phone": self.phone or None,
            "inputs": self.inputs,
            "result": asdict(self.result),
            "createCompany": create_company,
            "companyPayload": company_payload,
        }
        return await self.api.post("/api/calculator/save", json=body)

    @property
    def chat_exhausted(self) -> bool:
        return self.chat_turns >= MAX_CHAT_TURNS

    async def ask(self, message: str) -> Optional[str]:
        """Send one chat question; returns None once the turn cap is reached."""
        message = message.strip()
        if not message or self.chat_exhausted:
            return None
        history = [asdict(item) for item in self.chat]
        self.chat.append(ChatMessage("user", message))
        self.chat_turns += 1
        body = {
            "message": message,
            "context": {"inputs": self.inputs, "result": asdict(self.result)},
            "history": history,
            "locale": self.locale,
        }
        try:
            reply = (await self.api.post("/api/calc-chat", json=body, authorized=False) or {}).get("text") or ""
        except ApiError as exc:
            logger.warning("Calculator chat failed: %s", exc)
            reply = CHAT_ERROR_MESSAGE
        self.chat.append(ChatMessage("assistant", reply))
        return reply


__all__ = ["CHAT_ERROR_MESSAGE", "FactoringCalculator", "FactoringEstimate", "MAX_CHAT_TURNS", "estimate"]

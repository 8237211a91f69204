"""Onboarding advisor conversation widget.

The widget keeps the transcript locally and asks the server for each next
step. All branching (what to ask, when to conclude) comes from the advisor
response; the widget only tracks which phase it is in.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from client.api import ApiClient, ApiError

logger = logging.getLogger(__name__)

CONVERSATION_PATH = "/api/onboarding/conversation"
FINANCING_NEEDS_PATH = "/api/financing-needs"
PRESS_HINT_SECONDS = 5.0

_TEXTS: Dict[str, Dict[str, str]] = {
    "fi": {
        "start": "Aloitetaan",
        "question": "Haluatko nopean vai perusteellisen analyysin?",
        "guidance": (
            "Nopea analyysi antaa sinulle pääsuositukset muutamassa minuutissa. Perusteellinen analyysi "
            "kartoittaa tarkemmin yrityksesi tilanteen ja antaa kattavammat suositukset."
        ),
        "quick": "Nopea analyysi (2 min)",
        "comprehensive": "Perusteellinen analyysi (7 min)",
        "updated": "Suositukset päivitetty toiveidesi mukaan",
        "error": "Pahoittelut, en saanut seuraavaa kysymystä haettua. Yritä uudelleen hetken kuluttua.",
        "follow_up_error": "Pahoittelut, en saanut vastausta kysymykseenne. Yritä uudelleen hetken kuluttua.",
    },
    "sv": {
        "start": "Vi börjar",
        "question": "Vill du ha en snabb eller omfattande analys?",
        "guidance": (
            "Snabb analys ger dig huvudrekommendationer på några minuter. Omfattande analys kartlägger ditt "
            "företags situation mer noggrant och ger mer omfattande rekommendationer."
        ),
        "quick": "Snabb analys (2 min)",
        "comprehensive": "Omfattande analys (7 min)",
        "updated": "Rekommendationer uppdaterade baserat på dina preferenser",
        "error": "Tyvärr kunde nästa fråga inte hämtas. Försök igen om en stund.",
        "follow_up_error": "Tyvärr fick jag inget svar på din fråga. Försök igen om en stund.",
    },
    "en": {
        "start": "Let's start",
        "question": "Would you like a quick or comprehensive analysis?",
        "guidance": (
            "Quick analysis gives you key recommendations in just a few minutes. Comprehensive analysis maps "
            "your company's situation in detail and provides more thorough recommendations."
        ),
        "quick": "Quick analysis (2 min)",
        "comprehensive": "Comprehensive analysis (7 min)",
        "updated": "Recommendations updated based on your preferences",
        "error": "Sorry, I could not fetch the next question. Please try again in a moment.",
        "follow_up_error": "Sorry, I did not get an answer to your question. Please try again in a moment.",
    },
}


class ConversationState(str, Enum):
    NOT_STARTED = "not_started"
    AWAITING_ANALYSIS_TYPE = "awaiting_analysis_type"
    QUESTION_LOOP = "question_loop"
    DONE = "done"


@dataclass
class ConversationTurn:
    role: str  # user, assistant, cfo
    content: str
    timestamp: int = field(default_factory=lambda: int(time.time() * 1000))


@dataclass(frozen=True)
class Option:
    label: str
    value: str


def _has_items(recommendation: Optional[Dict[str, Any]]) -> bool:
    return bool(recommendation and recommendation.get("items"))


class ConversationWidget:
    def __init__(
        self,
        api: ApiClient,
        *,
        company_id: Optional[str],
        locale: str = "fi",
        model: Optional[str] = None,
        provider: Optional[str] = None,
        hint_seconds: float = PRESS_HINT_SECONDS,
    ) -> None:
        self.api = api
        self.company_id = company_id
        self.locale = locale if locale in _TEXTS else "fi"
        self.model = model
        self.provider = provider
        self.hint_seconds = hint_seconds
        self._hint_handle: Optional[asyncio.TimerHandle] = None
        self._inflight: Optional[asyncio.Future] = None
        self._closed = False
        self._generation = 0
        self._clear()

    def _clear(self) -> None:
        self.state = ConversationState.NOT_STARTED
        self.turns: List[ConversationTurn] = []
        self.question: str = ""
        self.options: List[Option] = []
        self.option_type: str = "single"
        self.selected: List[str] = []
        self.input: str = ""
        self.cfo_guidance: Optional[str] = None
        self.analysis_type: Optional[str] = None
        self.recommendation: Optional[Dict[str, Any]] = None
        self.asked_questions: List[str] = []
        self.loading = False
        self.show_press_hint = False

    @property
    def texts(self) -> Dict[str, str]:
        return _TEXTS[self.locale]

    def _push(self, role: str, content: str) -> None:
        self.turns.append(ConversationTurn(role=role, content=content))

    # -- local interactions --------------------------------------------------

    def start(self) -> None:
        """Dismiss the intro and show the analysis type question; no request is made."""
        if self.state is not ConversationState.NOT_STARTED:
            return
        texts = self.texts
        self._push("user", texts["start"])
        self.question = texts["question"]
        self.options = [
            Option(texts["quick"], "quick"),
            Option(texts["comprehensive"], "comprehensive"),
        ]
        self.option_type = "single"
        self.cfo_guidance = texts["guidance"]
        self._push("assistant", texts["question"])
        self._push("cfo", texts["guidance"])
        self.state = ConversationState.AWAITING_ANALYSIS_TYPE

    def toggle_option(self, value: str) -> None:
        if self.option_type == "single":
            self.selected = [value]
        elif value in self.selected:
            self.selected = [item for item in self.selected if item != value]
        else:
            self.selected = self.selected + [value]
        self._arm_hint()

    def set_input(self, text: str) -> None:
        self.input = text
        self._arm_hint()

    def _arm_hint(self) -> None:
        self._cancel_hint()
        if not self.selected or self.loading:
            self.show_press_hint = False
            return
        self.show_press_hint = True
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._hint_handle = loop.call_later(self.hint_seconds, self._expire_hint)

    def _expire_hint(self) -> None:
        self._hint_handle = None
        self.show_press_hint = False

    def _cancel_hint(self) -> None:
        if self._hint_handle is not None:
            self._hint_handle.cancel()
            self._hint_handle = None

    # -- network -------------------------------------------------------------

    async def choose_analysis_type(self, value: str) -> None:
        if self.state is not ConversationState.AWAITING_ANALYSIS_TYPE:
            return
        self.analysis_type = value
        self.selected = [value]
        self.state = ConversationState.QUESTION_LOOP
        await self.submit()

    def _user_text(self, follow_up: bool) -> str:
        typed = (self.input or "").strip()
        if follow_up:
            return typed
        labels = {option.value: option.label for option in self.options}
        picked = ", ".join(labels[value] for value in self.selected if value in labels)
        return "; ".join(part for part in (picked, typed) if part)

    def build_request(self, text: str, *, follow_up: bool) -> Dict[str, Any]:
        return {
            "locale": self.locale,
            "companyId": self.company_id,
            "userMessage": text,
            "selectedValues": list(self.selected),
            "history": [asdict(turn) for turn in self.turns],
            "avoidQuestions": [turn.content for turn in self.turns if turn.role == "assistant"],
            "provider": self.provider,
            "model": self.model,
            "analysisType": self.analysis_type or "quick",
            "isRecommendationFollowUp": follow_up,
            "currentRecommendations": self.recommendation if follow_up else None,
        }

    def _is_stale(self, generation: int) -> bool:
        return self._closed or generation != self._generation

    async def submit(self) -> None:
        if self._closed or self.loading:
            return
        if self.state is ConversationState.NOT_STARTED:
            return
        if self.state is ConversationState.AWAITING_ANALYSIS_TYPE:
            if self.selected:
                await self.choose_analysis_type(self.selected[0])
            return
        follow_up = self.state is ConversationState.DONE
        text = self._user_text(follow_up)
        if not text and not self.selected:
            return

        self._cancel_hint()
        self.show_press_hint = False
        body = self.build_request(text, follow_up=follow_up)
        self._push("user", text)
        self.input = ""
        self.selected = []
        self.loading = True

        generation = self._generation
        task = asyncio.ensure_future(self.api.post(CONVERSATION_PATH, json=body))
        self._inflight = task
        try:
            data = await task
        except asyncio.CancelledError:
            if self._is_stale(generation):
                return
            raise
        except ApiError as exc:
            if self._is_stale(generation):
                return
            template = self.texts["follow_up_error" if follow_up else "error"]
            self._push("cfo" if follow_up else "assistant", f"{template}\n({exc})")
            return
        finally:
            if not self._is_stale(generation):
                self._inflight = None
                self.loading = False

        # A reply that completed just before reset() could not be cancelled.
        if self._is_stale(generation):
            return
        if follow_up:
            self._apply_follow_up(data or {})
        else:
            await self._apply_turn(data or {})

    def _apply_follow_up(self, data: Dict[str, Any]) -> None:
        if data.get("cfoGuidance"):
            self.cfo_guidance = data["cfoGuidance"]
            self._push("cfo", data["cfoGuidance"])
        if data.get("updatedRecommendations"):
            self.recommendation = data["updatedRecommendations"]
            self._push("assistant", self.texts["updated"])

    async def _apply_turn(self, data: Dict[str, Any]) -> None:
        if data.get("cfoGuidance"):
            self.cfo_guidance = data["cfoGuidance"]
            self._push("cfo", data["cfoGuidance"])
        if data.get("nextQuestion"):
            self.question = data["nextQuestion"]
            self.options = [Option(item["label"], item["value"]) for item in data.get("options") or []]
            self.option_type = data.get("optionType") or "multi"
            self.asked_questions.append(data["nextQuestion"])
            self._push("assistant", data["nextQuestion"])

        recommendation = data.get("recommendation")
        if data.get("done") or _has_items(recommendation):
            self.state = ConversationState.DONE
            self.recommendation = recommendation
            await self._save_financing_needs(data.get("collected") or {})

    async def _save_financing_needs(self, collected: Dict[str, Any]) -> None:
        if not self.company_id:
            return
        payload = {
            "companyId": self.company_id,
            "questionnaire": {
                "summary": collected.get("summary") or "",
                "answers": list(collected.get("answers") or []),
            },
        }
        try:
            await self.api.post(FINANCING_NEEDS_PATH, json=payload)
        except ApiError as exc:
            logger.warning("Failed to save financing needs from conversation: %s", exc)

    def reset(self) -> None:
        """Start a new analysis."""
        self._cancel_hint()
        if self._inflight is not None:
            self._inflight.cancel()
            self._inflight = None
        self._generation += 1
        self._clear()

    def close(self) -> None:
        """Tear down: cancel the hint timer and any in-flight request."""
        self._closed = True
        self._cancel_hint()
        if self._inflight is not None:
            self._inflight.cancel()


__all__ = ["ConversationState", "ConversationTurn", "ConversationWidget", "Option"]

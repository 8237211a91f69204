"""LLM interaction helpers for the advisor, calculators, languages and media."""

from __future__ import annotations

import base64
import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import httpx
import litellm
import yaml
from langfuse import Langfuse

from core.logging import get_logger
from llm.prompts import calculator_chat, financing_needs, language_name, onboarding_advisor

logger = get_logger(__name__)

MODEL_CONFIG_PATH = Path(
    os.getenv("LITELLM_CONFIG_PATH") or Path(__file__).resolve().parent.parent / "litellm_config.yaml"
)

ADVISOR_MODEL = os.getenv("LLM_ADVISOR_MODEL", "advisor")
ADVISOR_FALLBACK_MODEL = os.getenv("LLM_ADVISOR_FALLBACK_MODEL", "fallback_model")
UTILITY_MODEL = os.getenv("LLM_UTILITY_MODEL", "utility")
IMAGE_MODEL = os.getenv("LLM_IMAGE_MODEL", "gpt-image-1")

TRACE_TEXT_LIMIT = 2000

Normalizer = Callable[[Dict[str, Any]], Dict[str, Any]]


class LLMServiceError(RuntimeError):
    """Raised when an upstream model call yields nothing usable."""


def load_model_aliases(path: Path) -> Dict[str, str]:
    """Map the ``model_name`` aliases in a LiteLLM proxy config to provider models."""
    if not path.is_file():
        return {}
    try:
        config = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Ignoring unreadable model config %s: %s", path, exc)
        return {}
    entries = config.get("model_list") if isinstance(config, dict) else None
    aliases: Dict[str, str] = {}
    for entry in entries if isinstance(entries, list) else []:
        if not isinstance(entry, dict):
            continue
        params = entry.get("litellm_params")
        alias = entry.get("model_name")
        target = params.get("model") if isinstance(params, dict) else None
        if alias and isinstance(target, str) and target and alias not in aliases:
            aliases[alias] = target
    return aliases


litellm.model_alias_map.update(load_model_aliases(MODEL_CONFIG_PATH))


def _init_langfuse() -> Optional[Langfuse]:
    public_key = os.getenv("LANGFUSE_PUBLIC_KEY")
    secret_key = os.getenv("LANGFUSE_SECRET_KEY")
    if not (public_key and secret_key):
        return None
    try:
        client = Langfuse(public_key=public_key, secret_key=secret_key, host=os.getenv("LANGFUSE_HOST"))
    except Exception as exc:
        logger.error("Langfuse tracing disabled: %s", exc, exc_info=True)
        return None
    logger.info("Langfuse tracing enabled.")
    return client


LANGFUSE_CLIENT: Optional[Langfuse] = _init_langfuse()


def _trace(model: str, messages: List[Dict[str, Any]], *, output: str = "", error: Optional[str] = None) -> None:
    client = LANGFUSE_CLIENT
    if client is None:
        return
    prompt = messages[-1].get("content") if messages else ""
    if not isinstance(prompt, str):
        prompt = json.dumps(prompt, ensure_ascii=False)
    try:
        trace = client.trace(name="llm_call", metadata={"model": model})
        trace.generation(
            name="completion",
            model=model,
            input=prompt[:TRACE_TEXT_LIMIT],
            output=output[:TRACE_TEXT_LIMIT],
            metadata={"error": error} if error else None,
        )
        if error:
            trace.update(status="error")
        client.flush()
    except Exception as exc:
        logger.debug("Langfuse trace dropped: %s", exc, exc_info=True)


def _message_text(response: Any) -> str:
    choices = getattr(response, "choices", None)
    if choices is None and isinstance(response, Mapping):
        choices = response.get("choices")
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    if message is None and isinstance(choices[0], Mapping):
        message = choices[0].get("message")
    content = message.get("content") if isinstance(message, Mapping) else getattr(message, "content", None)
    return content if isinstance(content, str) else ""


def _complete(
    messages: List[Dict[str, Any]],
    models: Sequence[Optional[str]],
    *,
    response_format: Optional[Dict[str, Any]] = None,
) -> Tuple[str, str]:
    """Try each model in order; returns ``(text, model_used)``."""
    chain = [name for index, name in enumerate(models) if name and name not in models[:index]]
    failures: List[str] = []
    for model in chain:
        try:
            response = litellm.completion(model=model, messages=messages, response_format=response_format)
        except Exception as exc:
            logger.warning("Completion with %s failed: %s", model, exc, exc_info=True)
            _trace(model, messages, error=str(exc))
            failures.append(f"{model}: {exc}")
            continue
        text = _message_text(response)
        _trace(model, messages, output=text)
        if failures:
            logger.info("Model %s answered after %d failure(s).", model, len(failures))
        return text, model
    raise LLMServiceError("; ".join(failures) or "no model configured")


def _parse_json_object(text: str) -> Dict[str, Any]:
    content = text.strip()
    if content.startswith("```"):
        content = content.strip("`")
        if content.lower().startswith("json"):
            content = content[4:]
    payload = json.loads(content or "{}")
    if not isinstance(payload, dict):
        raise ValueError("JSON payload is not an object")
    return payload


def _json_prompt(
    label: str,
    messages: List[Dict[str, Any]],
    models: Sequence[Optional[str]],
    *,
    normalizer: Optional[Normalizer] = None,
) -> Dict[str, Any]:
    """Run a JSON-mode prompt. Failures come back as ``{"error": ...}``, never raised."""
    try:
        text, model_used = _complete(messages, models, response_format={"type": "json_object"})
    except LLMServiceError as exc:
        logger.error("%s failed: %s", label, exc)
        return {"error": str(exc)}
    try:
        payload = _parse_json_object(text)
    except ValueError as exc:
        logger.error("%s returned unusable JSON: %s", label, exc)
        return {"error": str(exc), "model_used": model_used}
    payload["model_used"] = model_used
    if normalizer is None:
        return payload
    try:
        normalized = normalizer(payload)
    except Exception as exc:
        logger.error("%s normalizer failed: %s", label, exc, exc_info=True)
        return {"error": f"normalizer_failed: {exc}", "raw": payload}
    normalized.setdefault("model_used", model_used)
    return normalized


def run_advisor_turn(
    *,
    locale: str,
    analysis_type: Optional[str],
    company_context: Dict[str, Any],
    history: Sequence[Dict[str, Any]],
    avoid_questions: Sequence[str],
    user_message: str,
    current_recommendations: Optional[Dict[str, Any]] = None,
    model: Optional[str] = None,
    normalizer: Optional[Normalizer] = None,
) -> Dict[str, Any]:
    """One advisor turn. Returns the raw or normalized JSON, or ``{"error": ...}``."""

    messages = onboarding_advisor.get_prompt(
        locale=locale,
        analysis_type=analysis_type,
        company_context=company_context,
        history=history,
        avoid_questions=avoid_questions,
        user_message=user_message,
        current_recommendations=current_recommendations,
    )
    models = [model or ADVISOR_MODEL, ADVISOR_FALLBACK_MODEL]
    return _json_prompt("Onboarding advisor", messages, models, normalizer=normalizer)


def parse_financing_description(description: str) -> Dict[str, Any]:
    """Structured amount/currency/purpose/time_horizon/urgency; ``{}`` on failure."""

    result = _json_prompt("Financing needs parsing", financing_needs.get_prompt(description), [UTILITY_MODEL])
    if "error" in result:
        return {}
    result.pop("model_used", None)
    return result


def answer_calculator_question(
    message: str,
    *,
    context: Optional[str] = None,
    history: Sequence[Dict[str, str]] = (),
    locale: str = "fi",
) -> str:
    messages = calculator_chat.get_prompt(message, context=context, history=history, locale=locale)
    text, _ = _complete(messages, [UTILITY_MODEL, ADVISOR_FALLBACK_MODEL])
    return text.strip()


def translate_language_name(name: str) -> Optional[str]:
    try:
        text, _ = _complete(language_name.get_prompt(name), [UTILITY_MODEL])
    except LLMServiceError as exc:
        logger.warning("Native name lookup for %r failed: %s", name, exc)
        return None
    return text.strip().strip('"') or None


def _image_bytes(response: Any) -> bytes:
    data = getattr(response, "data", None)
    if data is None and isinstance(response, Mapping):
        data = response.get("data")
    if not data:
        raise LLMServiceError("image response contained no data")
    first = data[0]
    b64 = getattr(first, "b64_json", None) if not isinstance(first, Mapping) else first.get("b64_json")
    if b64:
        return base64.b64decode(b64)
    url = getattr(first, "url", None) if not isinstance(first, Mapping) else first.get("url")
    if url:
        download = httpx.get(url, timeout=60.0)
        download.raise_for_status()
        return download.content
    raise LLMServiceError("image response contained neither b64_json nor url")


def generate_image(prompt: str, *, model: Optional[str] = None, size: str = "1024x1024") -> bytes:
    model_name = model or IMAGE_MODEL
    try:
        response = litellm.image_generation(model=model_name, prompt=prompt, size=size, n=1)
    except Exception as exc:
        logger.error("Image generation failed for %s: %s", model_name, exc, exc_info=True)
        raise LLMServiceError(f"image generation failed: {exc}") from exc
    return _image_bytes(response)


def edit_image(image: bytes, prompt: str, *, model: Optional[str] = None) -> bytes:
    model_name = model or IMAGE_MODEL
    try:
        response = litellm.image_edit(model=model_name, image=image, prompt=prompt)
    except Exception as exc:
        logger.error("Image edit failed for %s: %s", model_name, exc, exc_info=True)
        raise LLMServiceError(f"image edit failed: {exc}") from exc
    return _image_bytes(response)


__all__ = [
    "ADVISOR_MODEL",
    "IMAGE_MODEL",
    "LLMServiceError",
    "UTILITY_MODEL",
    "answer_calculator_question",
    "edit_image",
    "generate_image",
    "parse_financing_description",
    "run_advisor_turn",
    "translate_language_name",
]

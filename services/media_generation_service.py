"""AI image generation/editing and image-to-video for the media library."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional, Tuple

import httpx
from sqlalchemy.orm import Session

from core.env import env_float, env_str
from llm import llm_service
from models.media import MediaAsset
from services import media_service
from services.media_service import MediaServiceError

logger = logging.getLogger(__name__)

BRAND_NAME = "Trusty Finance"
SIZE_DIMENSIONS: Dict[str, Tuple[int, int]] = {
    "1024x1024": (1024, 1024),
    "1024x1792": (1024, 1792),
    "1792x1024": (1792, 1024),
}
VIDEO_GENERATION_URL = env_str("VIDEO_GENERATION_URL")
VIDEO_GENERATION_API_KEY = env_str("VIDEO_GENERATION_API_KEY")
VIDEO_GENERATION_TIMEOUT = env_float("VIDEO_GENERATION_TIMEOUT_SECONDS", 300.0, minimum=1.0)
DEFAULT_VIDEO_MODEL = env_str("VIDEO_GENERATION_MODEL", "veo-2.0-generate-001")


def brand_styled_prompt(prompt: str, *, editing: bool = False) -> str:
    """Append the brand styling cue after the user's own request."""

    lead = "Apply edits with" if editing else "Brand styling:"
    return (
        f"{prompt.strip()}. {lead} {BRAND_NAME} brand aesthetic, professional financial tech, "
        "clean visual style. Use brand colors: blue (#4A90E2) and coral (#FF6B6B) accents. "
        "High quality, professional composition."
    )


def generate_asset(
    db: Session,
    *,
    prompt: str,
    model: Optional[str] = None,
    style: Optional[str] = None,
    size: str = "1024x1024",
    user_id: Optional[str] = None,
) -> MediaAsset:
    if size not in SIZE_DIMENSIONS:
        raise MediaServiceError("media.invalid_size", f"Unsupported size '{size}'.")
    try:
        image = llm_service.generate_image(brand_styled_prompt(prompt), model=model, size=size)
    except llm_service.LLMServiceError as exc:
        raise MediaServiceError("media.generation_failed", str(exc), 502) from exc

    width, height = SIZE_DIMENSIONS[size]
    return media_service.store_asset(
        db,
        data=image,
        filename=f"{uuid.uuid4()}.png",
        mime_type="image/png",
        prefix="generated",
        user_id=user_id,
        title=prompt[:255],
        alt_text=prompt[:255],
        width=width,
        height=height,
        is_generated=True,
        generation_prompt=prompt,
        generation_style=style,
    )


def _download(url: str, *, timeout: float = 60.0) -> bytes:
    response = httpx.get(url, timeout=timeout, follow_redirects=True)
    response.raise_for_status()
    return response.content


def edit_asset(
    db: Session,
    *,
    asset_id: uuid.UUID,
    edit_prompt: str,
    user_id: Optional[str] = None,
) -> MediaAsset:
    """Run an AI edit on an image asset and store the result as a new asset."""

    source = media_service.get_asset(db, asset_id)
    if not (source.mime_type or "").startswith("image/"):
        raise MediaServiceError("media.not_an_image", "Only images can be edited.")
    try:
        original = _download(source.original_url)
        edited = llm_service.edit_image(original, brand_styled_prompt(edit_prompt, editing=True))
    except httpx.HTTPError as exc:
        raise MediaServiceError("media.source_unavailable", f"Could not fetch the source image: {exc}", 502) from exc
    except llm_service.LLMServiceError as exc:
        raise MediaServiceError("media.edit_failed", str(exc), 502) from exc

    return media_service.store_asset(
        db,
        data=edited,
        filename=f"edited-{uuid.uuid4()}.png",
        mime_type="image/png",
        prefix="edited",
        user_id=user_id,
        title=f"{source.title or source.filename} (edited)",
        description=source.description,
        alt_text=source.alt_text,
        width=source.width,
        height=source.height,
        is_generated=True,
        generation_prompt=edit_prompt,
        generation_style="edit",
    )


def _request_video(payload: Dict[str, Any]) -> str:
    if not VIDEO_GENERATION_URL:
        raise MediaServiceError("media.video_unavailable", "Video generation is not configured.", 503)
    headers = {"Content-Type": "application/json"}
    if VIDEO_GENERATION_API_KEY:
        headers["Authorization"] = f"Bearer {VIDEO_GENERATION_API_KEY}"
    try:
        response = httpx.post(VIDEO_GENERATION_URL, json=payload, headers=headers, timeout=VIDEO_GENERATION_TIMEOUT)
        response.raise_for_status()
        body = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.error("Video generation request failed: %s", exc)
        raise MediaServiceError("media.video_failed", f"Video generation failed: {exc}", 502) from exc
    video_url = body.get("videoUrl") or body.get("url") if isinstance(body, dict) else None
    if not video_url:
        raise MediaServiceError("media.video_failed", "Video generation returned no video.", 502)
    return video_url


def generate_video(
    db: Session,
    *,
    asset_id: uuid.UUID,
    prompt: str,
    model: Optional[str] = None,
    aspect_ratio: str = "16:9",
    duration_seconds: int = 5,
    user_id: Optional[str] = None,
) -> MediaAsset:
    source = media_service.get_asset(db, asset_id)
    model_name = model or DEFAULT_VIDEO_MODEL
    video_url = _request_video(
        {
            "imageUrl": source.original_url,
            "mimeType": source.mime_type,
            "prompt": prompt,
            "model": model_name,
            "aspectRatio": aspect_ratio,
            "durationSeconds": duration_seconds,
        }
    )
    try:
        clip = _download(video_url, timeout=VIDEO_GENERATION_TIMEOUT)
    except httpx.HTTPError as exc:
        raise MediaServiceError("media.video_failed", f"Could not download the generated video: {exc}", 502) from exc

    return media_service.store_asset(
        db,
        data=clip,
        filename=f"video-{uuid.uuid4()}.mp4",
        mime_type="video/mp4",
        prefix="generated/videos",
        user_id=user_id,
        title=f"{source.title or source.filename} (video)",
        description=f"Video generated from image using {model_name}",
        is_generated=True,
        generation_prompt=prompt,
        generation_style=f"{model_name} video generation",
    )


__all__ = ["brand_styled_prompt", "edit_asset", "generate_asset", "generate_video"]

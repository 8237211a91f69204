"""Site language management and its change stream."""

from __future__ import annotations

import json
from typing import AsyncIterator

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from database import get_db
from schemas.api.languages import (
    LanguageCreateRequest,
    LanguageListResponse,
    LanguageResponse,
    LanguageUpdateRequest,
)
from services import language_service
from services.language_service import LanguageChangeFeed, LanguageServiceError, change_feed
from web.deps import require_admin
from web.middleware.auth_context import AuthenticatedUser

router = APIRouter(prefix="/languages", tags=["Languages"])


def _raise(exc: LanguageServiceError) -> None:
    raise HTTPException(status_code=exc.status_code, detail={"code": exc.code, "message": str(exc)}) from exc


@router.get("", response_model=LanguageListResponse)
def list_languages(db: Session = Depends(get_db)) -> LanguageListResponse:
    return LanguageListResponse(data=language_service.list_enabled_languages(db))


@router.post("", response_model=LanguageResponse, status_code=201)
def create_language(
    payload: LanguageCreateRequest,
    db: Session = Depends(get_db),
    admin: AuthenticatedUser = Depends(require_admin),
) -> LanguageResponse:
    try:
        language = language_service.create_language(db, code=payload.code, name=payload.name, user_id=admin.id)
    except LanguageServiceError as exc:
        _raise(exc)
    return LanguageResponse(data=language_service.serialize_language(language))


@router.patch("/{code}", response_model=LanguageResponse)
def update_language(
    code: str,
    payload: LanguageUpdateRequest,
    db: Session = Depends(get_db),
    admin: AuthenticatedUser = Depends(require_admin),
) -> LanguageResponse:
    try:
        language = language_service.update_language(
            db, code, payload.model_dump(exclude_unset=True), user_id=admin.id
        )
    except LanguageServiceError as exc:
        _raise(exc)
    return LanguageResponse(data=language_service.serialize_language(language))


@router.delete("")
def delete_language(
    code: str = Query(..., min_length=2),
    db: Session = Depends(get_db),
    _admin: AuthenticatedUser = Depends(require_admin),
):
    try:
        language_service.delete_language(db, code)
    except LanguageServiceError as exc:
        _raise(exc)
    return {"data": {"code": code, "deleted": True}}


def _sse(payload: dict) -> str:
    return f"data: {json.dumps(payload, default=str)}\n\n"


async def language_events(feed: LanguageChangeFeed = change_feed) -> AsyncIterator[str]:
    """Server-sent events: a ``ready`` event, then one event per table change."""
    yield _sse({"event": "ready"})
    async for change in feed.subscribe():
        yield _sse(change.as_payload())


@router.get("/changes")
async def stream_language_changes() -> StreamingResponse:
    return StreamingResponse(
        language_events(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )

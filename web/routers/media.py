"""Admin media library endpoints."""

from __future__ import annotations

import uuid
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session

from database import get_db
from schemas.api.media import (
    BulkDeleteResponse,
    MediaAssetResponse,
    MediaBulkDeleteRequest,
    MediaDeleteRequest,
    MediaEditRequest,
    MediaGenerateRequest,
    MediaListResponse,
    MediaUpdateRequest,
    MediaVideoRequest,
)
from services import media_generation_service, media_service
from services.media_service import MediaFilter, MediaServiceError
from web.deps import require_admin
from web.middleware.auth_context import AuthenticatedUser

router = APIRouter(prefix="/media", tags=["Media"])


def _raise(exc: MediaServiceError) -> None:
    raise HTTPException(status_code=exc.status_code, detail={"code": exc.code, "message": str(exc)}) from exc


def _asset_response(asset) -> MediaAssetResponse:
    return MediaAssetResponse(data=media_service.serialize_asset(asset), url=asset.original_url)


@router.get("", response_model=MediaListResponse)
def list_media(
    search: str = Query(""),
    type: Optional[List[str]] = Query(None, description="Mime types, repeated or comma separated; 'all' disables."),
    dateFrom: Optional[date] = Query(None),
    dateTo: Optional[date] = Query(None),
    isGenerated: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
    _admin: AuthenticatedUser = Depends(require_admin),
) -> MediaListResponse:
    filters = MediaFilter(
        search=search,
        types=media_service.parse_type_facet(type),
        date_from=dateFrom,
        date_to=dateTo,
        is_generated=isGenerated,
    )
    assets = media_service.list_assets(db, filters)
    return MediaListResponse(data=[media_service.serialize_asset(asset) for asset in assets], total=len(assets))


@router.post("/upload", response_model=MediaAssetResponse, status_code=201)
def upload_media(
    file: UploadFile = File(...),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    altText: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    admin: AuthenticatedUser = Depends(require_admin),
) -> MediaAssetResponse:
    try:
        asset = media_service.store_asset(
            db,
            data=file.file.read(),
            filename=file.filename or "upload",
            mime_type=file.content_type or "application/octet-stream",
            user_id=admin.id,
            title=title,
            description=description,
            alt_text=altText,
        )
    except MediaServiceError as exc:
        _raise(exc)
    return _asset_response(asset)


@router.patch("/{asset_id}", response_model=MediaAssetResponse)
def update_media(
    asset_id: uuid.UUID,
    payload: MediaUpdateRequest,
    db: Session = Depends(get_db),
    _admin: AuthenticatedUser = Depends(require_admin),
) -> MediaAssetResponse:
    try:
        asset = media_service.update_asset(db, asset_id, payload.model_dump(exclude_unset=True))
    except MediaServiceError as exc:
        _raise(exc)
    return _asset_response(asset)


@router.post("/generate", response_model=MediaAssetResponse, status_code=201)
def generate_media(
    payload: MediaGenerateRequest,
    db: Session = Depends(get_db),
    admin: AuthenticatedUser = Depends(require_admin),
) -> MediaAssetResponse:
    try:
        asset = media_generation_service.generate_asset(
            db,
            prompt=payload.prompt,
            model=payload.model,
            style=payload.style,
            size=payload.size,
            user_id=admin.id,
        )
    except MediaServiceError as exc:
        _raise(exc)
    return _asset_response(asset)


@router.post("/edit", response_model=MediaAssetResponse, status_code=201)
def edit_media(
    payload: MediaEditRequest,
    db: Session = Depends(get_db),
    admin: AuthenticatedUser = Depends(require_admin),
) -> MediaAssetResponse:
    try:
        asset = media_generation_service.edit_asset(
            db, asset_id=payload.assetId, edit_prompt=payload.editPrompt, user_id=admin.id
        )
    except MediaServiceError as exc:
        _raise(exc)
    return _asset_response(asset)


@router.post("/generate-video", response_model=MediaAssetResponse, status_code=201)
def generate_video(
    payload: MediaVideoRequest,
    db: Session = Depends(get_db),
    admin: AuthenticatedUser = Depends(require_admin),
) -> MediaAssetResponse:
    try:
        asset = media_generation_service.generate_video(
            db,
            asset_id=payload.assetId,
            prompt=payload.prompt,
            model=payload.model,
            aspect_ratio=payload.aspectRatio,
            duration_seconds=payload.durationSeconds,
            user_id=admin.id,
        )
    except MediaServiceError as exc:
        _raise(exc)
    return _asset_response(asset)


@router.post("/delete")
def delete_media(
    payload: MediaDeleteRequest,
    db: Session = Depends(get_db),
    _admin: AuthenticatedUser = Depends(require_admin),
):
    try:
        media_service.delete_asset(db, payload.id)
    except MediaServiceError as exc:
        _raise(exc)
    return {"success": True, "id": str(payload.id)}


@router.post("/bulk-delete", response_model=BulkDeleteResponse)
def bulk_delete_media(
    payload: MediaBulkDeleteRequest,
    db: Session = Depends(get_db),
    _admin: AuthenticatedUser = Depends(require_admin),
) -> BulkDeleteResponse:
    result = media_service.bulk_delete(db, payload.ids)
    return BulkDeleteResponse(succeeded=result.succeeded, failed=result.failed, errors=result.errors)

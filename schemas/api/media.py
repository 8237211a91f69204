"""Schemas for the media library API."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class MediaAssetSchema(BaseModel):
    id: uuid.UUID
    title: Optional[str] = None
    description: Optional[str] = None
    altText: Optional[str] = None
    filename: str
    fileSize: Optional[int] = None
    mimeType: str
    width: Optional[int] = None
    height: Optional[int] = None
    originalUrl: str
    optimizedUrl: Optional[str] = None
    thumbnailUrl: Optional[str] = None
    storagePath: Optional[str] = None
    generationPrompt: Optional[str] = None
    generationStyle: Optional[str] = None
    isGenerated: bool = False
    createdBy: Optional[uuid.UUID] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class MediaListResponse(BaseModel):
    data: List[MediaAssetSchema]
    total: int


class MediaAssetResponse(BaseModel):
    success: bool = True
    data: MediaAssetSchema
    url: Optional[str] = None


class MediaUpdateRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    altText: Optional[str] = Field(default=None, max_length=512)


class MediaGenerateRequest(BaseModel):
    prompt: str = Field(..., min_length=1)
    model: Optional[str] = Field(default=None, description="LiteLLM image model; server default when omitted.")
    style: Optional[str] = None
    size: str = Field(default="1024x1024", description="1024x1024, 1024x1792 or 1792x1024")


class MediaEditRequest(BaseModel):
    assetId: uuid.UUID
    editPrompt: str = Field(..., min_length=1)


class MediaVideoRequest(BaseModel):
    assetId: uuid.UUID
    prompt: str = Field(..., min_length=1)
    model: Optional[str] = None
    aspectRatio: str = "16:9"
    durationSeconds: int = Field(default=5, ge=1, le=60)


class MediaDeleteRequest(BaseModel):
    id: uuid.UUID


class MediaBulkDeleteRequest(BaseModel):
    ids: List[uuid.UUID] = Field(..., min_length=1)


class BulkItemError(BaseModel):
    id: str
    error: str


class BulkDeleteResponse(BaseModel):
    succeeded: int
    failed: int
    errors: List[BulkItemError] = Field(default_factory=list)

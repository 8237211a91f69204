from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class LanguageSchema(BaseModel):
    code: str
    name: str
    native_name: Optional[str] = None
    enabled: bool = True
    updated_at: Optional[datetime] = None


class LanguageListResponse(BaseModel):
    data: List[LanguageSchema]


class LanguageResponse(BaseModel):
    data: LanguageSchema


class LanguageCreateRequest(BaseModel):
    code: str = Field(..., min_length=2, max_length=8)
    name: str = Field(..., min_length=1, max_length=64)


class LanguageUpdateRequest(BaseModel):
    enabled: Optional[bool] = None
    name: Optional[str] = Field(default=None, min_length=1, max_length=64)
    native_name: Optional[str] = Field(default=None, max_length=64)

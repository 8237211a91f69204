from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from schemas.api.conversation import CollectedSchema


class FinancingNeedCreateRequest(BaseModel):
    companyId: uuid.UUID
    userId: Optional[uuid.UUID] = Field(default=None, description="Ignored; the caller's identity is used.")
    questionnaire: CollectedSchema


class FinancingNeedSchema(BaseModel):
    id: uuid.UUID
    companyId: uuid.UUID
    createdBy: Optional[uuid.UUID] = None
    description: Optional[str] = None
    requirements: Dict[str, Any] = Field(default_factory=dict)
    amount: Optional[float] = None
    currency: Optional[str] = None
    purpose: Optional[str] = None
    timeHorizon: Optional[str] = None
    urgency: Optional[str] = None
    createdAt: Optional[datetime] = None


class FinancingNeedResponse(BaseModel):
    success: bool = True
    data: FinancingNeedSchema


class FinancingNeedListResponse(BaseModel):
    data: List[FinancingNeedSchema]

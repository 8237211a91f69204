"""Schemas for the role dashboards."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from core.roles import UserRole


class DashboardCardSchema(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    href: Optional[str] = None


class DashboardResponse(BaseModel):
    role: UserRole
    roleLabel: str = Field(..., description="Localized role name.")
    stats: Dict[str, Any] = Field(default_factory=dict)
    cards: List[DashboardCardSchema] = Field(default_factory=list)

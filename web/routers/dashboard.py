from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.roles import UserRole
from database import get_db
from schemas.api.dashboard import DashboardResponse
from services.dashboard_service import DashboardRequestContext, build_dashboard
from web.deps import get_optional_user
from web.middleware.auth_context import AuthenticatedUser

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("", response_model=DashboardResponse)
def read_dashboard(
    db: Session = Depends(get_db),
    user: Optional[AuthenticatedUser] = Depends(get_optional_user),
) -> DashboardResponse:
    if user is None:
        context = DashboardRequestContext(user_id=None, org_id=None, role=UserRole.VISITOR)
    else:
        context = DashboardRequestContext(
            user_id=uuid.UUID(user.id),
            org_id=uuid.UUID(user.organization_id) if user.organization_id else None,
            role=user.role,
        )
    return DashboardResponse(**build_dashboard(db, context=context).as_dict())

"""Admin user management endpoints."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from database import get_db
from schemas.api.users import (
    AdminUserCreateRequest,
    AdminUserDeleteResponse,
    AdminUserListResponse,
    AdminUserResponse,
    AdminUserUpdateRequest,
)
from services import admin_user_service
from services.admin_user_service import AdminUserError
from web.deps import require_admin
from web.middleware.auth_context import AuthenticatedUser

router = APIRouter(prefix="/admin/users", tags=["Admin Users"])


def _raise(exc: AdminUserError) -> None:
    raise HTTPException(status_code=exc.status_code, detail={"code": exc.code, "message": str(exc)}) from exc


@router.get("", response_model=AdminUserListResponse)
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(admin_user_service.DEFAULT_PAGE_SIZE, ge=1),
    search: str = Query(""),
    role: str = Query(""),
    db: Session = Depends(get_db),
    _admin: AuthenticatedUser = Depends(require_admin),
) -> AdminUserListResponse:
    result = admin_user_service.list_users(db, page=page, limit=limit, search=search, role=role)
    return AdminUserListResponse(
        data=[
            admin_user_service.serialize_user(user, result.companies.get(user.company_id))
            for user in result.users
        ],
        pagination={
            "page": result.page,
            "limit": result.limit,
            "total": result.total,
            "totalPages": result.total_pages,
        },
        filters={"search": search, "role": role},
    )


@router.post("/create", response_model=AdminUserResponse, status_code=201)
def create_user(
    payload: AdminUserCreateRequest,
    db: Session = Depends(get_db),
    _admin: AuthenticatedUser = Depends(require_admin),
) -> AdminUserResponse:
    try:
        user = admin_user_service.create_user(db, payload.model_dump())
    except AdminUserError as exc:
        _raise(exc)
    return AdminUserResponse(data=admin_user_service.serialize_user(user))


@router.get("/{user_id}", response_model=AdminUserResponse)
def read_user(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    _admin: AuthenticatedUser = Depends(require_admin),
) -> AdminUserResponse:
    try:
        user = admin_user_service.get_user(db, user_id)
    except AdminUserError as exc:
        _raise(exc)
    return AdminUserResponse(data=admin_user_service.serialize_user(user))


@router.put("/{user_id}/update", response_model=AdminUserResponse)
def update_user(
    user_id: uuid.UUID,
    payload: AdminUserUpdateRequest,
    db: Session = Depends(get_db),
    _admin: AuthenticatedUser = Depends(require_admin),
) -> AdminUserResponse:
    try:
        user = admin_user_service.update_user(db, user_id, payload.model_dump(exclude_unset=True))
    except AdminUserError as exc:
        _raise(exc)
    return AdminUserResponse(data=admin_user_service.serialize_user(user))


@router.delete("/{user_id}", response_model=AdminUserDeleteResponse)
def delete_user(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    admin: AuthenticatedUser = Depends(require_admin),
) -> AdminUserDeleteResponse:
    try:
        admin_user_service.delete_user(db, user_id, acting_user_id=admin.id)
    except AdminUserError as exc:
        _raise(exc)
    return AdminUserDeleteResponse(id=user_id)

"""Schemas for the admin user management API."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field

from core.roles import UserRole


class UserCompanySchema(BaseModel):
    id: uuid.UUID
    name: str
    businessId: Optional[str] = None


class AdminUserSchema(BaseModel):
    id: uuid.UUID
    email: str
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    phoneNumber: Optional[str] = None
    role: UserRole = UserRole.VISITOR
    isAdmin: bool = False
    isPartner: bool = False
    organizationId: Optional[uuid.UUID] = None
    companyId: Optional[uuid.UUID] = None
    company: Optional[UserCompanySchema] = None
    lastSignInAt: Optional[datetime] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class PaginationSchema(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class UserListFiltersSchema(BaseModel):
    search: str = ""
    role: str = ""


class AdminUserListResponse(BaseModel):
    data: List[AdminUserSchema]
    pagination: PaginationSchema
    filters: UserListFiltersSchema


class AdminUserCreateRequest(BaseModel):
    email: EmailStr = Field(..., description="Login email, unique across the platform.")
    password: str = Field(..., description="Initial password.")
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    phoneNumber: Optional[str] = None
    role: Optional[UserRole] = None
    isAdmin: bool = False
    isPartner: bool = False
    companyId: Optional[uuid.UUID] = None
    organizationId: Optional[uuid.UUID] = None


class AdminUserUpdateRequest(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, description="New password; omitted keeps the current one.")
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    phoneNumber: Optional[str] = None
    role: Optional[UserRole] = None
    isAdmin: Optional[bool] = None
    isPartner: Optional[bool] = None
    companyId: Optional[uuid.UUID] = None
    organizationId: Optional[uuid.UUID] = None


class AdminUserResponse(BaseModel):
    data: AdminUserSchema


class AdminUserDeleteResponse(BaseModel):
    success: bool = True
    id: uuid.UUID


RoleFilter = Literal["admin", "partner", "user"]

"""Pydantic schemas for the login endpoint."""

from __future__ import annotations

from pydantic import BaseModel, Field

from schemas.api.users import AdminUserSchema


class LoginRequest(BaseModel):
    email: str = Field(..., description="Account email.")
    password: str = Field(..., description="Account password.")


class LoginResponse(BaseModel):
    accessToken: str = Field(..., description="Bearer token for privileged calls.")
    tokenType: str = Field(default="bearer")
    expiresIn: int = Field(..., description="Token lifetime in seconds.")
    user: AdminUserSchema

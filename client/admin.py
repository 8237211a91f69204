"""Admin screen helpers: user management and the media library."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import EmailStr, TypeAdapter, ValidationError

from client.api import ApiClient, ApiError

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
_EMAIL = TypeAdapter(EmailStr)


class FormValidationError(ValueError):
    def __init__(self, errors: Dict[str, str]):
        super().__init__("; ".join(f"{key}: {value}" for key, value in errors.items()))
        self.errors = errors


@dataclass
class CreateUserForm:
    email: str = ""
    password: str = ""
    first_name: str = ""
    last_name: str = ""
    phone_number: str = ""
    role: Optional[str] = None
    is_admin: bool = False
    is_partner: bool = False

    def validate(self) -> Dict[str, str]:
        errors: Dict[str, str] = {}
        email = self.email.strip()
        if not email:
            errors["email"] = "Email is required."
        else:
            try:
                _EMAIL.validate_python(email)
            except ValidationError:
                errors["email"] = "Enter a valid email address."
        if len(self.password) < MIN_PASSWORD_LENGTH:
            errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters."
        return errors

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "email": self.email.strip(),
            "password": self.password,
            "firstName": self.first_name or None,
            "lastName": self.last_name or None,
            "phoneNumber": self.phone_number or None,
            "isAdmin": self.is_admin,
            "isPartner": self.is_partner,
        }
        if self.role:
            payload["role"] = self.role
        return payload


@dataclass
class BulkResult:
    succeeded: int = 0
    failed: int = 0
    errors: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def summary(self) -> str:
        return f"Deleted {self.succeeded}, failed {self.failed}."


class AdminUsersClient:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    async def list(self, *, page: int = 1, limit: int = 20, search: str = "", role: str = "") -> Dict[str, Any]:
        params = {"page": page, "limit": limit, "search": search, "role": role}
        return await self.api.get("/api/admin/users", params=params)

    async def get(self, user_id: str) -> Dict[str, Any]:
        return (await self.api.get(f"/api/admin/users/{user_id}"))["data"]

    async def create(self, form: CreateUserForm) -> Dict[str, Any]:
        errors = form.validate()
        if errors:
            raise FormValidationError(errors)
        return (await self.api.post("/api/admin/users/create", json=form.to_payload()))["data"]

    async def update(self, user_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        password = changes.get("password")
        if password and len(password) < MIN_PASSWORD_LENGTH:
            raise FormValidationError({"password": f"Password must be at least {MIN_PASSWORD_LENGTH} characters."})
        return (await self.api.put(f"/api/admin/users/{user_id}/update", json=changes))["data"]

    async def delete(self, user_id: str) -> None:
        await self.api.delete(f"/api/admin/users/{user_id}")

    async def bulk_delete(self, user_ids: Sequence[str]) -> BulkResult:
        """Delete one by one; a failure does not stop the remaining deletes."""
        result = BulkResult()
        for user_id in user_ids:
            try:
                await self.delete(user_id)
            except ApiError as exc:
                logger.warning("Deleting user %s failed: %s", user_id, exc)
                result.failed += 1
                result.errors.append((user_id, str(exc)))
            else:
                result.succeeded += 1
        return result


@dataclass
class MediaFilter:
    search: str = ""
    types: List[str] = field(default_factory=list)
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    is_generated: Optional[bool] = None

    def to_params(self) -> List[Tuple[str, str]]:
        params: List[Tuple[str, str]] = []
        if self.search.strip():
            params.append(("search", self.search.strip()))
        if self.types and "all" not in self.types:
            params.extend(("type", value) for value in self.types)
        if self.date_from:
            params.append(("dateFrom", self.date_from.isoformat()))
        if self.date_to:
            params.append(("dateTo", self.date_to.isoformat()))
        if self.is_generated is not None:
            params.append(("isGenerated", "true" if self.is_generated else "false"))
        return params


class AdminMediaClient:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    async def list(self, filters: Optional[MediaFilter] = None) -> List[Dict[str, Any]]:
        params = (filters or MediaFilter()).to_params()
        return (await self.api.get("/api/media", params=params))["data"]

    async def update(self, asset_id: str, *, title=None, description=None, alt_text=None) -> Dict[str, Any]:
        changes = {
            key: value
            for key, value in (("title", title), ("description", description), ("altText", alt_text))
            if value is not None
        }
        return (await self.api.patch(f"/api/media/{asset_id}", json=changes))["data"]

    async def delete(self, asset_id: str) -> None:
        await self.api.post("/api/media/delete", json={"id": asset_id})

    async def bulk_delete(self, asset_ids: Sequence[str]) -> BulkResult:
        result = BulkResult()
        for asset_id in asset_ids:
            try:
                await self.delete(asset_id)
            except ApiError as exc:
                result.failed += 1
                result.errors.append((asset_id, str(exc)))
            else:
                result.succeeded += 1
        return result

    async def generate(
        self, prompt: str, *, model: Optional[str] = None, style: Optional[str] = None, size: str = "1024x1024"
    ) -> Dict[str, Any]:
        body = {"prompt": prompt, "model": model, "style": style, "size": size}
        return (await self.api.post("/api/media/generate", json=body))["data"]

    async def edit(self, asset_id: str, edit_prompt: str) -> Dict[str, Any]:
        return (await self.api.post("/api/media/edit", json={"assetId": asset_id, "editPrompt": edit_prompt}))["data"]

    async def generate_video(self, asset_id: str, prompt: str, **options: Any) -> Dict[str, Any]:
        body = {"assetId": asset_id, "prompt": prompt, **options}
        return (await self.api.post("/api/media/generate-video", json=body))["data"]


__all__ = [
    "AdminMediaClient",
    "AdminUsersClient",
    "BulkResult",
    "CreateUserForm",
    "FormValidationError",
    "MediaFilter",
]

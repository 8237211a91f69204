"""Thin JSON shim over ``httpx.AsyncClient`` shared by the client modules."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from client.session import SessionProvider

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class ApiError(RuntimeError):
    """Non-2xx response or transport failure."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401


def _error_from_response(response: httpx.Response) -> ApiError:
    message = f"HTTP {response.status_code}"
    code = None
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        detail = body.get("detail")
        if isinstance(detail, dict):
            message = detail.get("message") or message
            code = detail.get("code")
        elif isinstance(detail, str):
            message = detail
        elif body.get("error"):
            message = str(body["error"])
    return ApiError(message, status_code=response.status_code, code=code)


class ApiClient:
    def __init__(
        self,
        http: httpx.AsyncClient,
        session_provider: Optional[SessionProvider] = None,
    ) -> None:
        self.http = http
        self.session_provider = session_provider

    @classmethod
    def for_base_url(cls, base_url: str, session_provider: Optional[SessionProvider] = None) -> "ApiClient":
        return cls(httpx.AsyncClient(base_url=base_url, timeout=DEFAULT_TIMEOUT), session_provider)

    async def _headers(self, authorized: bool) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if authorized and self.session_provider is not None:
            session = await self.session_provider.get_session()
            if session is not None:
                headers["Authorization"] = f"Bearer {session.access_token}"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Any = None,
        files: Any = None,
        authorized: bool = True,
    ) -> Any:
        headers = await self._headers(authorized)
        if files is not None:
            headers.pop("Content-Type", None)
        try:
            response = await self.http.request(method, path, json=json, params=params, files=files, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(str(exc)) from exc
        if response.status_code >= 400:
            raise _error_from_response(response)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            logger.warning("%s %s returned a non-JSON body.", method, path)
            raise ApiError("Invalid JSON response", status_code=response.status_code) from exc

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Any:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> Any:
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> Any:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", path, **kwargs)

    async def aclose(self) -> None:
        await self.http.aclose()


__all__ = ["ApiClient", "ApiError"]

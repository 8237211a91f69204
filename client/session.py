"""Session providers used by the client widgets."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol

import httpx

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    access_token: str
    user: Dict[str, Any] = field(default_factory=dict)

    @property
    def user_id(self) -> Optional[str]:
        value = self.user.get("id")
        return str(value) if value else None

    @property
    def is_admin(self) -> bool:
        return bool(self.user.get("isAdmin"))


class SessionProvider(Protocol):
    async def get_session(self) -> Optional[Session]:
        ...


class StaticSessionProvider:
    """Serves a fixed session, or none for anonymous callers."""

    def __init__(self, session: Optional[Session] = None) -> None:
        self._session = session

    async def get_session(self) -> Optional[Session]:
        return self._session

    def set_session(self, session: Optional[Session]) -> None:
        self._session = session


class LoginSessionProvider:
    """Logs in once through ``/api/auth/login`` and caches the token."""

    def __init__(self, http: httpx.AsyncClient, *, email: str, password: str) -> None:
        self._http = http
        self._email = email
        self._password = password
        self._session: Optional[Session] = None

    async def get_session(self) -> Optional[Session]:
        if self._session is not None:
            return self._session
        try:
            response = await self._http.post(
                "/api/auth/login",
                json={"email": self._email, "password": self._password},
            )
        except httpx.HTTPError as exc:
            logger.warning("Login request failed: %s", exc)
            return None
        if response.status_code != 200:
            logger.info("Login rejected with HTTP %s.", response.status_code)
            return None
        body = response.json()
        self._session = Session(access_token=body["accessToken"], user=body.get("user") or {})
        return self._session

    def clear(self) -> None:
        self._session = None


__all__ = ["LoginSessionProvider", "Session", "SessionProvider", "StaticSessionProvider"]

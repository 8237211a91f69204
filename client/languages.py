"""Language switcher list kept in sync with the server's language table."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from client.api import ApiClient, ApiError

logger = logging.getLogger(__name__)

LANGUAGES_PATH = "/api/languages"
CHANGES_PATH = "/api/languages/changes"
REFRESH_DEBOUNCE_SECONDS = 1.0

STATIC_LANGUAGES: List[Dict[str, Any]] = [
    {"code": "fi", "name": "Finnish", "native_name": "Suomi", "enabled": True},
    {"code": "en", "name": "English", "native_name": "English", "enabled": True},
    {"code": "sv", "name": "Swedish", "native_name": "Svenska", "enabled": True},
]


class LanguageList:
    def __init__(self, api: ApiClient, *, debounce: float = REFRESH_DEBOUNCE_SECONDS) -> None:
        self.api = api
        self.debounce = debounce
        self.languages: List[Dict[str, Any]] = [dict(item) for item in STATIC_LANGUAGES]
        self._pending: Optional[asyncio.Task] = None

    async def refresh(self) -> List[Dict[str, Any]]:
        try:
            body = await self.api.get(LANGUAGES_PATH, authorized=False)
            enabled = [item for item in (body or {}).get("data") or [] if item.get("enabled", True)]
        except ApiError as exc:
            logger.warning("Language list refresh failed: %s", exc)
            enabled = []
        self.languages = enabled or [dict(item) for item in STATIC_LANGUAGES]
        return self.languages

    def notify_change(self) -> None:
        """Coalesce bursts of change events into one refetch."""
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = asyncio.get_running_loop().create_task(self._delayed_refresh())

    async def _delayed_refresh(self) -> None:
        await asyncio.sleep(self.debounce)
        await self.refresh()

    async def wait(self) -> None:
        if self._pending is not None:
            try:
                await self._pending
            except asyncio.CancelledError:
                pass

    async def follow_changes(self) -> None:
        """Consume the server change stream until cancelled or disconnected."""
        try:
            async with self.api.http.stream("GET", CHANGES_PATH) as response:
                async for line in response.aiter_lines():
                    if not line.startswith("data:"):
                        continue
                    try:
                        event = json.loads(line[len("data:"):])
                    except ValueError:
                        continue
                    if event.get("event") in {"INSERT", "UPDATE", "DELETE"}:
                        self.notify_change()
        except httpx.HTTPError as exc:
            logger.info("Language change stream closed: %s", exc)

    def close(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None


__all__ = ["LanguageList", "STATIC_LANGUAGES"]

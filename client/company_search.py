"""Debounced company name lookup against the public registry proxy."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

from client.api import ApiClient, ApiError

logger = logging.getLogger(__name__)

SEARCH_PATH = "/api/companies/search"
DEBOUNCE_SECONDS = 0.5
MIN_QUERY_LENGTH = 3


class CompanySearch:
    def __init__(
        self,
        api: ApiClient,
        *,
        limit: int = 5,
        debounce: float = DEBOUNCE_SECONDS,
        on_results: Optional[Callable[[List[Dict[str, Any]]], None]] = None,
    ) -> None:
        self.api = api
        self.limit = limit
        self.debounce = debounce
        self.on_results = on_results
        self.manual_mode = False
        self.query = ""
        self.results: List[Dict[str, Any]] = []
        self.loading = False
        self._task: Optional[asyncio.Task] = None

    def set_manual_mode(self, enabled: bool) -> None:
        self.manual_mode = enabled
        if enabled:
            self.cancel()
            self._publish([])

    def set_query(self, query: str) -> None:
        """Schedule a lookup; any pending or running one is cancelled first."""
        self.query = query
        self.cancel()
        if self.manual_mode or len(query.strip()) < MIN_QUERY_LENGTH:
            self._publish([])
            return
        self._task = asyncio.get_running_loop().create_task(self._run(query.strip()))

    async def _run(self, query: str) -> None:
        await asyncio.sleep(self.debounce)
        self.loading = True
        try:
            body = await self.api.get(SEARCH_PATH, params={"query": query, "limit": self.limit}, authorized=False)
        except ApiError as exc:
            logger.info("Company search for %r failed: %s", query, exc)
            self._publish([])
            return
        finally:
            self.loading = False
        self._publish(list((body or {}).get("data") or []))

    def _publish(self, results: List[Dict[str, Any]]) -> None:
        self.results = results
        if self.on_results is not None:
            self.on_results(results)

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def wait(self) -> None:
        """Wait for the scheduled lookup, if any, to finish."""
        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            pass


__all__ = ["CompanySearch", "MIN_QUERY_LENGTH"]

"""Media drop zone: collects dropped files and uploads them."""

from __future__ import annotations

import logging
import mimetypes
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from client.api import ApiClient, ApiError

logger = logging.getLogger(__name__)

DEFAULT_ACCEPT = ("image/", "video/", "application/pdf")
DEFAULT_MAX_BYTES = 50 * 1024 * 1024


@dataclass(frozen=True)
class DroppedFile:
    name: str
    data: bytes
    content_type: Optional[str] = None

    @property
    def mime_type(self) -> str:
        return self.content_type or mimetypes.guess_type(self.name)[0] or "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class UploadOutcome:
    file: DroppedFile
    asset: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class UploadZone:
    def __init__(
        self,
        api: ApiClient,
        on_files_selected: Callable[[List[DroppedFile]], None],
        *,
        accept: Sequence[str] = DEFAULT_ACCEPT,
        max_bytes: int = DEFAULT_MAX_BYTES,
    ) -> None:
        self.api = api
        self.on_files_selected = on_files_selected
        self.accept = tuple(accept)
        self.max_bytes = max_bytes
        self.pending: List[DroppedFile] = []
        self.rejected: List[DroppedFile] = []

    def accepts(self, file: DroppedFile) -> bool:
        mime = file.mime_type
        return any(mime.startswith(prefix) for prefix in self.accept) and 0 < file.size <= self.max_bytes

    def drop(self, files: Sequence[DroppedFile]) -> List[DroppedFile]:
        """Filter the dropped batch and hand it to the callback in one call."""
        accepted = [item for item in files if self.accepts(item)]
        self.rejected = [item for item in files if not self.accepts(item)]
        if not accepted:
            return []
        self.pending.extend(accepted)
        self.on_files_selected(accepted)
        return accepted

    async def upload_all(self) -> List[UploadOutcome]:
        outcomes: List[UploadOutcome] = []
        while self.pending:
            item = self.pending.pop(0)
            try:
                body = await self.api.post(
                    "/api/media/upload",
                    files={"file": (item.name, item.data, item.mime_type)},
                )
                outcomes.append(UploadOutcome(file=item, asset=body["data"]))
            except ApiError as exc:
                logger.warning("Upload of %s failed: %s", item.name, exc)
                outcomes.append(UploadOutcome(file=item, error=str(exc)))
        return outcomes


__all__ = ["DroppedFile", "UploadOutcome", "UploadZone"]

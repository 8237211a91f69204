"""Typed environment readers and optional .env loading."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, List, Optional, Sequence, TypeVar

from dotenv import load_dotenv

from core.logging import get_logger

logger = get_logger(__name__)

_Number = TypeVar("_Number", int, float)


def load_dotenv_if_available(path: Path | None = None) -> None:
    """Load variables from a .env file when one exists; existing values win."""

    env_path = path or Path(".env")
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)
        logger.debug("Loaded environment variables from %s", env_path)


def env_str(key: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(key)
    return default if value is None or not value.strip() else value


def _env_number(key: str, default: _Number, parse: Callable[[str], _Number], minimum: Optional[_Number]) -> _Number:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = parse(raw.strip())
    except ValueError:
        value = None
    if value is None or (minimum is not None and value < minimum):
        logger.warning("Ignoring %s=%r; using %s.", key, raw, default)
        return default
    return value


def env_int(key: str, default: int, *, minimum: Optional[int] = None) -> int:
    return _env_number(key, default, int, minimum)


def env_float(key: str, default: float, *, minimum: Optional[float] = None) -> float:
    return _env_number(key, default, float, minimum)


def env_list(key: str, default: Sequence[str] = ()) -> List[str]:
    """Comma separated list; blank entries are dropped."""
    raw = os.getenv(key)
    if raw is None:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


__all__ = ["env_float", "env_int", "env_list", "env_str", "load_dotenv_if_available"]

"""
Visitor persistence — a tiny key-value contract.

The core only ever calls ``get`` and ``set``; a store that cannot be read
or written degrades to memory so the current session still works, it just
won't be remembered on the next visit.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)

SESSION_SEED_KEY = "stillbecoming_session_seed"
VISITOR_TOKEN_KEY = "stillbecoming_visitor_token"
MOBILE_ACK_KEY = "stillbecoming_mobile_ack"


class Persistence(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """Ephemeral store; also the fallback when a real store fails."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def to_dict(self) -> dict[str, str]:
        return dict(self._data)


class JsonFileStore:
    """
    Key-value store backed by one JSON object on disk.

    Read and write failures (missing directory, permissions, corrupt JSON)
    are logged and absorbed; values then live in memory only.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._memory = MemoryStore(self._load())

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Visitor store unreadable (%s); using memory only", e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Visitor store is not a JSON object; using memory only")
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def get(self, key: str) -> Optional[str]:
        return self._memory.get(key)

    def set(self, key: str, value: str) -> None:
        self._memory.set(key, value)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(self._memory.to_dict(), f, indent=2)
        except OSError as e:
            logger.warning("Could not persist %s (%s); value kept in memory", key, e)


def safe_get(store: Persistence, key: str) -> Optional[str]:
    try:
        return store.get(key)
    except Exception as e:
        logger.warning("Store read failed for %s (%s)", key, e)
        return None


def safe_set(store: Persistence, key: str, value: str) -> bool:
    try:
        store.set(key, value)
    except Exception as e:
        logger.warning("Store write failed for %s (%s); value is session-only", key, e)
        return False
    return True


def get_or_create(store: Persistence, key: str, factory: Callable[[], str]) -> str:
    """Read a value if present, otherwise generate it and write it once."""
    value = safe_get(store, key)
    if value:
        return value
    value = factory()
    safe_set(store, key, value)
    return value

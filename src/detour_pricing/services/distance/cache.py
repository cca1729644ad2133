"""Time-bounded caches for routing-service distances."""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
import threading
import time
from pathlib import Path
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9_.-]")


def make_cache_key(origin: str, destination: str) -> str:
    """Directional key; (a, b) and (b, a) are cached separately."""
    return _UNSAFE_KEY_CHARS.sub("_", f"dist_{origin}_{destination}")


class DistanceCache(Protocol):
    def get(self, key: str) -> str | None: ...

    def put(self, key: str, value: str, ttl_seconds: int) -> None: ...


class MemoryDistanceCache:
    """In-process cache; each entry carries its own expiry."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            now = self._clock()
            expired = [k for k, (_, expires_at) in self._entries.items() if now >= expires_at]
            for k in expired:
                del self._entries[k]
            self._entries[key] = (value, now + ttl_seconds)

    def __len__(self) -> int:
        return len(self._entries)


class JsonFileDistanceCache:
    """Cache persisted to a JSON file so distances survive restarts.

    Writes go to a temporary file that is renamed over the target.
    """

    def __init__(self, path: Path, clock: Callable[[], float] = time.time) -> None:
        self.path = path
        self._clock = clock
        self._lock = threading.Lock()

    def _load(self) -> dict[str, dict]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning(f"Ignoring unreadable distance cache {self.path}: {exc}")
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, entries: dict[str, dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w", dir=self.path.parent, delete=False, suffix=".tmp", encoding="utf-8"
        ) as tmp:
            json.dump(entries, tmp)
            tmp_path = tmp.name
        os.replace(tmp_path, self.path)

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._load().get(key)
        if not isinstance(entry, dict):
            return None
        if self._clock() >= _expiry(entry):
            return None
        value = entry.get("value")
        return value if isinstance(value, str) else None

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            entries = self._load()
            now = self._clock()
            entries = {k: v for k, v in entries.items() if isinstance(v, dict) and _expiry(v) > now}
            entries[key] = {"value": value, "expires_at": now + ttl_seconds}
            self._save(entries)


def _expiry(entry: dict) -> float:
    try:
        return float(entry.get("expires_at", 0))
    except (TypeError, ValueError):
        return 0.0

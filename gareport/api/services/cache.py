from __future__ import annotations

import hashlib
import json
import threading
import time
from typing import Any, Dict, Optional, Tuple


def query_fingerprint(query: Dict[str, Any], limit: Optional[int] = None) -> str:
    """Stable key for a validated query description and a record limit."""
    payload = json.dumps({"query": query, "limit": limit}, sort_keys=True, default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class ResultCache:
    """Thread-safe TTL cache of materialized query responses."""

    def __init__(self, ttl_seconds: int = 300, max_size: int = 256) -> None:
        self._ttl = ttl_seconds
        self._max_size = max_size
        self._entries: Dict[str, Tuple[float, Dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        now = time.monotonic()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, response = entry
            if expires_at <= now:
                del self._entries[key]
                return None
            return response

    def put(self, key: str, response: Dict[str, Any]) -> None:
        with self._lock:
            if key not in self._entries and len(self._entries) >= self._max_size:
                oldest = min(self._entries, key=lambda k: self._entries[k][0])
                del self._entries[oldest]
            self._entries[key] = (time.monotonic() + self._ttl, response)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

from __future__ import annotations

import threading
import time
from collections import deque
from typing import Any, Deque, Dict, List


class QueryLog:
    """Thread-safe bounded log of executed report queries, newest first."""

    def __init__(self, capacity: int = 100) -> None:
        self._entries: Deque[Dict[str, Any]] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def record(self, view_id: str, metrics: List[str], total_results: int, cache_hit: bool) -> None:
        entry = {
            "view_id": view_id,
            "metrics": list(metrics),
            "total_results": total_results,
            "cache_hit": cache_hit,
            "timestamp": time.time(),
        }
        with self._lock:
            self._entries.appendleft(entry)

    def list(self) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self._entries)

from __future__ import annotations

import time
from collections import deque
from typing import Any

DEFAULT_MAX_EVENTS = 10_000


class EventLog:
    """Bounded in-memory log of lookup, batch and nearby events."""

    def __init__(self, max_events: int = DEFAULT_MAX_EVENTS) -> None:
        self._events: deque[dict[str, Any]] = deque(maxlen=max_events)

    def record(self, event_type: str, data: dict[str, Any]) -> None:
        self._events.append({
            "type": event_type,
            "timestamp": time.time(),
            **data,
        })

    def events(self) -> list[dict[str, Any]]:
        return list(self._events)

    def clear(self) -> None:
        self._events.clear()

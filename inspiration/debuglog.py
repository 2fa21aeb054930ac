"""
In-memory log of AI traffic (request / response / error), with subscribers.

Subscribers get the whole snapshot after every change. The log is bounded;
once ``limit`` entries are stored the oldest ones are dropped.
"""
from __future__ import annotations
from collections import deque
from datetime import datetime
import logging
import threading
from typing import Any, Callable, Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict

log = logging.getLogger("inspiration.debuglog")

EntryType = Literal["request", "response", "error"]


class LogEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: str
    type: EntryType
    model: str
    content: str
    metadata: Optional[dict[str, Any]] = None


Subscriber = Callable[[list[LogEntry]], None]


class DebugLog:
    def __init__(self, limit: int = 500):
        self._entries: deque[LogEntry] = deque(maxlen=limit if limit > 0 else None)
        self._subscribers: list[Subscriber] = []
        self._lock = threading.Lock()

    def add(
        self,
        type: EntryType,
        model: str,
        content: str,
        metadata: Optional[dict[str, Any]] = None,
    ) -> LogEntry:
        entry = LogEntry(
            id=uuid4().hex[:9],
            timestamp=datetime.now().strftime("%H:%M:%S"),
            type=type,
            model=model,
            content=content,
            metadata=metadata,
        )
        with self._lock:
            self._entries.append(entry)
        self._notify()
        return entry

    def entries(self) -> list[LogEntry]:
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        self._notify()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback``; the returned function unregisters it."""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def close(self) -> None:
        with self._lock:
            self._subscribers.clear()

    def _notify(self) -> None:
        with self._lock:
            snapshot = list(self._entries)
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(list(snapshot))
            except Exception:
                log.exception("debug log subscriber %r failed", callback)

"""Bounded in-memory log exposed through the logs endpoint."""

from __future__ import annotations

import threading
import uuid
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Deque, Dict, List

from ..config import LOG_BUFFER_CAPACITY, DebugLevel
from ..logger import DEBUG_LEVELS, get_logger

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class LogEntry:
    """A single immutable log record."""

    id: str
    timestamp: datetime
    level: DebugLevel
    message: str
    source: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": self.level.value,
            "message": self.message,
            "source": self.source,
        }


class LogBuffer:
    """Append-only ring of log entries, evicting the oldest beyond ``capacity``.

    Entries are mirrored to the console logger under ``pironman5_lite.addon.<source>``
    so operators see the same stream in the container output.
    """

    def __init__(
        self,
        capacity: int = LOG_BUFFER_CAPACITY,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if capacity < 1:
            raise ValueError("Log buffer capacity must be positive.")
        self._entries: Deque[LogEntry] = deque(maxlen=capacity)
        self._lock = threading.Lock()
        self._clock = clock
        self.capacity = capacity
        logger.debug("Log buffer initialised (capacity=%d)", capacity)

    def append(self, level: DebugLevel | str, message: str, source: str) -> LogEntry:
        """Record a new entry and return it."""

        level = DebugLevel(level)
        entry = LogEntry(
            id=str(uuid.uuid4()),
            timestamp=self._clock(),
            level=level,
            message=message,
            source=source,
        )
        with self._lock:
            self._entries.append(entry)
        get_logger(f"addon.{source}").log(DEBUG_LEVELS[level], message)
        return entry

    def read_all(self) -> List[LogEntry]:
        """Return a snapshot of the buffer, newest entry first."""

        with self._lock:
            snapshot = list(self._entries)
        snapshot.reverse()
        return snapshot

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

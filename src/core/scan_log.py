"""
Bounded audit log for scan activity.

The log stream is what the dashboard shows to the user: every scan,
fetch failure and detected opportunity ends up here. Only the most recent
entries are kept; older ones fall off the front.
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from config import MAX_LOG_ENTRIES

logger = logging.getLogger(__name__)


class LogSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


_PYTHON_LEVELS = {
    LogSeverity.INFO: logging.INFO,
    LogSeverity.WARNING: logging.WARNING,
    LogSeverity.ERROR: logging.ERROR,
    LogSeverity.SUCCESS: logging.INFO,
}


@dataclass(frozen=True)
class LogEntry:
    """Single audit log line"""
    message: str
    severity: LogSeverity = LogSeverity.INFO
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "severity": self.severity.value,
            "timestamp": self.timestamp.isoformat(),
        }


class ScanLog:
    """
    Append-only ring buffer of LogEntry.

    Appends are serialized with a lock so concurrent fetch workers (or
    threads) can write safely. Every entry is mirrored to the Python logger.
    """

    def __init__(self, capacity: int = MAX_LOG_ENTRIES):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._entries: deque = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def append(self, message: str, severity: LogSeverity = LogSeverity.INFO) -> LogEntry:
        entry = LogEntry(message=message, severity=LogSeverity(severity))
        with self._lock:
            self._entries.append(entry)
        logger.log(_PYTHON_LEVELS[entry.severity], message)
        return entry

    def info(self, message: str) -> LogEntry:
        return self.append(message, LogSeverity.INFO)

    def warning(self, message: str) -> LogEntry:
        return self.append(message, LogSeverity.WARNING)

    def error(self, message: str) -> LogEntry:
        return self.append(message, LogSeverity.ERROR)

    def success(self, message: str) -> LogEntry:
        return self.append(message, LogSeverity.SUCCESS)

    def entries(self) -> List[LogEntry]:
        """Oldest first"""
        with self._lock:
            return list(self._entries)

    def recent(self, limit: Optional[int] = None) -> List[LogEntry]:
        """Most recent first, for display"""
        with self._lock:
            newest_first = list(reversed(self._entries))
        return newest_first if limit is None else newest_first[:limit]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

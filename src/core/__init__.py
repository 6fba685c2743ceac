"""
Core data structures shared by the scan engines.
"""

from .opportunity import Opportunity
from .scan_log import LogEntry, LogSeverity, ScanLog

__all__ = [
    "Opportunity",
    "LogEntry",
    "LogSeverity",
    "ScanLog",
]

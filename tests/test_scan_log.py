"""
Tests for the bounded scan log.
"""

import threading

import pytest

from src.core.scan_log import LogEntry, LogSeverity, ScanLog


def test_keeps_last_hundred_in_order():
    log = ScanLog()

    for i in range(150):
        log.info(f"entry {i}")

    entries = log.entries()
    assert len(entries) == 100
    assert entries[0].message == "entry 50"
    assert entries[-1].message == "entry 149"


def test_recent_is_newest_first():
    log = ScanLog()
    for i in range(5):
        log.info(f"entry {i}")

    assert [e.message for e in log.recent(3)] == ["entry 4", "entry 3", "entry 2"]
    assert len(log.recent()) == 5


def test_severity_helpers():
    log = ScanLog()

    log.info("a")
    log.warning("b")
    log.error("c")
    log.success("d")

    assert [e.severity for e in log.entries()] == [
        LogSeverity.INFO, LogSeverity.WARNING, LogSeverity.ERROR, LogSeverity.SUCCESS,
    ]


def test_accepts_severity_string():
    log = ScanLog()

    entry = log.append("hello", "warning")

    assert entry.severity is LogSeverity.WARNING


def test_mirrors_to_python_logger(caplog):
    log = ScanLog()

    with caplog.at_level("INFO", logger="src.core.scan_log"):
        log.error("Scan failed: boom")

    assert "Scan failed: boom" in caplog.text


def test_entry_is_immutable():
    entry = LogEntry("x")

    with pytest.raises(AttributeError):
        entry.message = "y"


def test_entry_to_dict():
    data = LogEntry("x", LogSeverity.SUCCESS).to_dict()

    assert data["message"] == "x"
    assert data["severity"] == "success"
    assert "timestamp" in data


def test_concurrent_appends_respect_capacity():
    log = ScanLog(capacity=50)

    def writer(n):
        for i in range(100):
            log.info(f"{n}-{i}")

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(log) == 50


def test_invalid_capacity():
    with pytest.raises(ValueError):
        ScanLog(capacity=0)

"""Tests for the NDJSON audit trail."""

import json

from searchconfig.registration.audit import FileAuditSink, MemoryAuditSink
from searchconfig.registration.models import (
    RegistrationAttempt,
    RegistrationMode,
    RegistrationOutcome,
    ValidationState,
)


def _attempt(outcome=RegistrationOutcome.TIMEOUT):
    return RegistrationAttempt(
        mode=RegistrationMode.AUTOMATIC,
        acting_user="tester",
        is_privileged=True,
        binary_path=r"C:\Windows\System32\SearchAPI.dll",
        outcome=outcome,
        post_validation=ValidationState.NOT_CHECKED,
        duration_ms=1000,
        error_message="Registration timed out after 1 seconds",
    )


def test_file_sink_appends_one_line_per_attempt(tmp_path):
    sink = FileAuditSink(tmp_path / "audit")
    first, second = _attempt(), _attempt(RegistrationOutcome.BINARY_NOT_FOUND)

    assert sink.record(first)
    assert sink.record(second)

    path = sink.path_for(first.timestamp)
    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2

    entry = json.loads(lines[0])
    assert entry["event_type"] == "com_registration"
    assert entry["attempt_id"] == first.attempt_id
    assert entry["outcome"] == "timeout"
    assert entry["mode"] == "automatic"
    assert "request_id" in entry


def test_file_sink_read_round_trip(tmp_path):
    sink = FileAuditSink(tmp_path)
    attempt = _attempt()
    sink.record(attempt)
    records = sink.read(attempt.timestamp)
    assert [r["attempt_id"] for r in records] == [attempt.attempt_id]


def test_file_sink_read_missing_day(tmp_path):
    assert FileAuditSink(tmp_path / "empty").read() == []


def test_file_sink_reports_write_failure(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file in the way", encoding="utf-8")
    sink = FileAuditSink(blocker)
    assert sink.record(_attempt()) is False


def test_daily_file_name(tmp_path):
    attempt = _attempt()
    path = FileAuditSink(tmp_path).path_for(attempt.timestamp)
    assert path.name == f"registration_{attempt.timestamp:%Y%m%d}.ndjson"


def test_memory_sink_keeps_order():
    sink = MemoryAuditSink()
    a, b = _attempt(), _attempt()
    sink.record(a)
    sink.record(b)
    assert sink.records == [a, b]

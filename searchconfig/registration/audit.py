"""Append-only audit trail for registration attempts.

Each attempt is one NDJSON line in ``<audit_dir>/registration_YYYYMMDD.ndjson``.
"""

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol

from searchconfig.registration.models import RegistrationAttempt
from searchconfig.utils.logging import get_request_id, logger


class AuditSink(Protocol):
    def record(self, attempt: RegistrationAttempt) -> bool: ...


class FileAuditSink:
    """Writes attempts to a daily NDJSON file."""

    def __init__(self, audit_dir: str | Path):
        self.audit_dir = Path(audit_dir)

    def path_for(self, when: datetime) -> Path:
        return self.audit_dir / f"registration_{when:%Y%m%d}.ndjson"

    def record(self, attempt: RegistrationAttempt) -> bool:
        """Append one attempt. Returns False if the trail could not be written."""
        path = self.path_for(attempt.timestamp)
        entry = {
            "event_type": "com_registration",
            "request_id": get_request_id(),
            **attempt.to_dict(),
        }
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry) + "\n")
        except OSError as e:
            logger.warning("Failed to write audit record to {path}: {err}", path=path, err=e)
            return False
        return True

    def read(self, day: datetime | None = None) -> list[dict[str, Any]]:
        """Load the records written on ``day`` (today by default)."""
        path = self.path_for(day or datetime.now(UTC))
        if not path.exists():
            return []
        with open(path, encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]


class MemoryAuditSink:
    """Keeps attempts in a list."""

    def __init__(self):
        self.records: list[RegistrationAttempt] = []

    def record(self, attempt: RegistrationAttempt) -> bool:
        self.records.append(attempt)
        return True

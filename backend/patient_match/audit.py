"""Audit trail for $match requests.

One ``AuditEvent`` is recorded per authorised request.  ``AuditLog``
appends events to a JSON-lines file; ``MemoryAuditLog`` keeps them in
memory and is the sink when no audit path is configured.
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

MATCH_DESCRIPTION: str = "POST /Patient/$match"


class AuditEventOutcome(str, Enum):
    """FHIR AuditEvent.outcome codes."""

    SUCCESS = "0"
    MINOR_FAILURE = "4"
    SERIOUS_FAILURE = "8"
    MAJOR_FAILURE = "12"


class AuditEventType(str, Enum):
    REST = "rest"


class AuditEventAction(str, Enum):
    CREATE = "C"
    READ = "R"
    UPDATE = "U"
    DELETE = "D"
    EXECUTE = "E"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AuditEvent(BaseModel):
    recorded: str = Field(default_factory=_now)
    type: AuditEventType = AuditEventType.REST
    action: AuditEventAction = AuditEventAction.EXECUTE
    outcome: AuditEventOutcome
    source: str | None = None  # client address
    description: str = MATCH_DESCRIPTION


class AuditLog:
    """Append-only JSON-lines audit file."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = threading.Lock()

    def record(self, event: AuditEvent) -> None:
        line = event.model_dump_json()
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as fh:
                fh.write(line + "\n")

    def events(self) -> list[AuditEvent]:
        """Read back all events; corrupt lines are skipped with a warning."""
        if not self.path.exists():
            return []
        result: list[AuditEvent] = []
        with self.path.open("r", encoding="utf-8") as fh:
            for lineno, line in enumerate(fh, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    result.append(AuditEvent(**json.loads(line)))
                except (json.JSONDecodeError, TypeError, ValueError) as exc:
                    logger.warning("Skipping corrupt audit line %d in %s: %s", lineno, self.path, exc)
        return result


class MemoryAuditLog:
    """In-memory audit sink."""

    def __init__(self) -> None:
        self._events: list[AuditEvent] = []
        self._lock = threading.Lock()

    def record(self, event: AuditEvent) -> None:
        with self._lock:
            self._events.append(event)

    def events(self) -> list[AuditEvent]:
        with self._lock:
            return list(self._events)

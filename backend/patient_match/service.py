"""Patient/$match request orchestration.

A $match request goes through these steps:

1. The bearer token is checked.  On failure the request stops with a 401
   and nothing is audited.
2. The body is decoded into a ``Patient`` taken from the first parameter of
   a ``Parameters`` resource.
3. The Patient is validated against the minimum criteria of the IDI
   profile it claims (Base, Level0 or Level1).
4. One audit event is recorded and the response is rendered in the
   caller's wire format.

Searching for matching candidates once the criteria are met is not
implemented; accepted requests are answered with ``202 Accepted``.
"""

from __future__ import annotations

import json
import logging
from typing import Protocol

from pydantic import BaseModel

from patient_match.audit import AuditEvent, AuditEventOutcome
from patient_match.auth import INVALID_TOKEN_MESSAGE, validate_access_token
from patient_match.codec import WireFormat, decode_patient, encode_outcome
from patient_match.config import Settings
from patient_match.errors import MalformedInputError
from patient_match.matching import validate
from patient_match.models.outcome import IssueSeverity, IssueType, OperationOutcome

logger = logging.getLogger(__name__)

PROCESS_FAILED: str = "Unable to process the request properly. Check the log for more details."

STATUS_ACCEPTED: int = 202
STATUS_BAD_REQUEST: int = 400
STATUS_UNAUTHORIZED: int = 401


class AuditSink(Protocol):
    def record(self, event: AuditEvent) -> None: ...


class MatchResponse(BaseModel):
    """Transport-independent description of the HTTP response."""

    status_code: int
    body: str = ""
    media_type: str
    headers: dict[str, str] = {}


class PatientMatchService:
    """Runs the $match gate for one request at a time; holds no per-request state."""

    def __init__(self, settings: Settings, audit_sink: AuditSink) -> None:
        self.settings = settings
        self.audit_sink = audit_sink

    def _location(self, request_base_url: str | None) -> str:
        base = self.settings.base_url or (request_base_url or "").rstrip("/")
        return f"{base}/Patient"

    def _audit(self, outcome: AuditEventOutcome, source: str | None) -> None:
        try:
            self.audit_sink.record(AuditEvent(outcome=outcome, source=source))
        except OSError as exc:
            logger.error("Failed to record audit event: %s", exc)

    def match(
        self,
        body: str | bytes,
        wire_format: WireFormat,
        authorization: str | None = None,
        request_base_url: str | None = None,
        client_host: str | None = None,
    ) -> MatchResponse:
        """Handle one ``POST /Patient/$match`` request."""
        logger.info("POST /Patient/$match fhir+%s", wire_format.value)

        if not validate_access_token(authorization, self.settings):
            return MatchResponse(
                status_code=STATUS_UNAUTHORIZED,
                body=json.dumps({"error": INVALID_TOKEN_MESSAGE}),
                media_type="application/json",
            )

        status = STATUS_BAD_REQUEST
        formatted = ""
        audit_outcome = AuditEventOutcome.MINOR_FAILURE

        try:
            patient = decode_patient(body, wire_format)
            validation = validate(patient)
            logger.info(
                "Minimum criteria check: tier=%s score=%d accepted=%s",
                validation.tier.value,
                validation.score,
                validation.accepted,
            )
            if validation.accepted:
                status = STATUS_ACCEPTED
                audit_outcome = AuditEventOutcome.SUCCESS
                # TODO: search stored Patient records once a matching strategy is chosen.
            else:
                error = OperationOutcome.build(IssueSeverity.ERROR, IssueType.INVALID, validation.reason)
                formatted = encode_outcome(error, wire_format)
                logger.warning("Patient resource provided is not conformant to profile as claimed.")
        except MalformedInputError as exc:
            if exc.fatal:
                error = OperationOutcome.build(IssueSeverity.FATAL, IssueType.STRUCTURE, exc.message)
                audit_outcome = AuditEventOutcome.SERIOUS_FAILURE
            else:
                error = OperationOutcome.build(IssueSeverity.ERROR, IssueType.INVALID, exc.message)
            formatted = encode_outcome(error, wire_format)
            logger.warning("Rejected $match body: %s", exc.message)
        except Exception:
            logger.exception("Unexpected failure while processing $match request")
            error = OperationOutcome.build(IssueSeverity.FATAL, IssueType.STRUCTURE, PROCESS_FAILED)
            formatted = encode_outcome(error, wire_format)
            audit_outcome = AuditEventOutcome.SERIOUS_FAILURE

        self._audit(audit_outcome, client_host)

        return MatchResponse(
            status_code=status,
            body=formatted,
            media_type=f"{wire_format.media_type}; charset=utf-8",
            headers={"Location": self._location(request_base_url)},
        )

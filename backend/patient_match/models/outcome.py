"""Pydantic models for validation results and FHIR OperationOutcome.

``ExtractedFields`` and ``ValidationOutcome`` are frozen and built fresh for
every request.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, model_validator


class ProfileTier(str, Enum):
    BASE = "Base"
    LEVEL0 = "Level0"
    LEVEL1 = "Level1"
    UNCLASSIFIED = "Unclassified"


class ExtractedFields(BaseModel):
    """Presence signals the minimum-criteria policy is evaluated on."""

    model_config = ConfigDict(frozen=True)

    has_passport: bool = False
    has_drivers_license: bool = False
    has_qualifying_address: bool = False  # home use, line and city
    has_other_identifier: bool = False
    has_phone: bool = False
    has_email: bool = False
    has_photo: bool = False
    has_full_name: bool = False
    has_birth_date: bool = False
    has_qualifying_contact: bool = False


class ValidationOutcome(BaseModel):
    """Result of checking a record against its claimed profile."""

    model_config = ConfigDict(frozen=True)

    tier: ProfileTier
    score: int = 0
    accepted: bool = False
    reason: str = ""

    @model_validator(mode="after")
    def _reason_matches_decision(self) -> "ValidationOutcome":
        if self.accepted == bool(self.reason):
            raise ValueError("reason must be empty exactly when the outcome is accepted")
        return self


class IssueSeverity(str, Enum):
    FATAL = "fatal"
    ERROR = "error"
    WARNING = "warning"
    INFORMATION = "information"


class IssueType(str, Enum):
    INVALID = "invalid"
    STRUCTURE = "structure"
    REQUIRED = "required"
    EXCEPTION = "exception"


class OperationOutcomeIssue(BaseModel):
    severity: IssueSeverity
    code: IssueType
    diagnostics: str | None = None


class OperationOutcome(BaseModel):
    """A FHIR OperationOutcome carrying the issues found in a request."""

    resource_type: str = "OperationOutcome"
    issue: list[OperationOutcomeIssue] = []

    @classmethod
    def build(
        cls,
        severity: IssueSeverity,
        code: IssueType,
        diagnostics: str,
    ) -> "OperationOutcome":
        """Create an outcome with a single issue."""
        return cls(issue=[OperationOutcomeIssue(severity=severity, code=code, diagnostics=diagnostics)])

    def to_fhir_dict(self) -> dict:
        """Return the FHIR JSON representation (camelCase, no empty values)."""
        return {
            "resourceType": self.resource_type,
            "issue": [issue.model_dump(mode="json", exclude_none=True) for issue in self.issue],
        }

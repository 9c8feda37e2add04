"""Pydantic models for the submitted patient record.

A ``Patient`` is the subset of the FHIR R4 Patient resource that the
minimum-criteria policy looks at: identifiers, telecom, addresses, names,
birth date, photo and contacts, plus the ``meta.profile`` claim that selects
the tier.  Every field is optional and unknown keys are ignored, so any
Patient a client sends can be represented.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _Element(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Coding(_Element):
    system: str | None = None
    code: str | None = None
    display: str | None = None


class CodeableConcept(_Element):
    coding: list[Coding] = []
    text: str | None = None

    def codes(self) -> list[str]:
        return [c.code for c in self.coding if c.code]


class Identifier(_Element):
    """A business identifier (passport, driver license, MRN, ...)."""

    use: str | None = None
    type: CodeableConcept | None = None
    system: str | None = None
    value: str | None = None

    def type_codes(self) -> list[str]:
        return self.type.codes() if self.type is not None else []


class ContactPoint(_Element):
    """A telecom entry; ``system`` is phone, email, fax, ..."""

    system: str | None = None
    value: str | None = None
    use: str | None = None


class Address(_Element):
    use: str | None = None  # home, work, temp, old, billing
    line: list[str] = []
    city: str | None = None
    state: str | None = None
    postal_code: str | None = Field(default=None, alias="postalCode")
    country: str | None = None


class HumanName(_Element):
    use: str | None = None
    text: str | None = None
    family: str | None = None
    given: list[str] = []


class Attachment(_Element):
    content_type: str | None = Field(default=None, alias="contentType")
    url: str | None = None
    data: str | None = None


class Reference(_Element):
    reference: str | None = None
    display: str | None = None


class PatientContact(_Element):
    """A contact party (guardian, emergency contact, ...) for the patient."""

    relationship: list[CodeableConcept] = []
    name: HumanName | None = None
    telecom: list[ContactPoint] = []
    address: Address | None = None
    organization: Reference | None = None


class Meta(_Element):
    profile: list[str] = []


class Patient(_Element):
    """The submitted demographic record."""

    resource_type: str = Field(default="Patient", alias="resourceType")
    id: str | None = None
    meta: Meta | None = None
    identifier: list[Identifier] = []
    name: list[HumanName] = []
    telecom: list[ContactPoint] = []
    gender: str | None = None
    birth_date: str | None = Field(default=None, alias="birthDate")
    address: list[Address] = []
    photo: list[Attachment] = []
    contact: list[PatientContact] = []

    @property
    def declared_profile(self) -> str | None:
        """The first ``meta.profile`` entry, or ``None`` when absent."""
        if self.meta is None or not self.meta.profile:
            return None
        return self.meta.profile[0]

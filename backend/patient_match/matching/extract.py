"""Pull the policy-relevant presence signals out of a submitted Patient.

Everything here is a predicate over the pydantic ``Patient`` model.  Missing
sub-structures are empty lists or ``None`` on the model, so each check
degrades to ``False`` instead of raising.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from patient_match.models.outcome import ExtractedFields
from patient_match.models.patient import Address, Patient

PASSPORT_CODE: str = "PPN"
DRIVERS_LICENSE_CODE: str = "DL"


def _filled(value: str | None) -> bool:
    return bool(value and value.strip())


def has_content(value: Any) -> bool:
    """True if ``value`` holds any non-blank data, looking through nested elements.

    ``{"name": {}}`` or ``telecom: [{}]`` parse into models whose fields are
    all empty; those do not count as present.
    """
    if isinstance(value, BaseModel):
        return any(has_content(getattr(value, field)) for field in type(value).model_fields)
    if isinstance(value, list):
        return any(has_content(item) for item in value)
    if isinstance(value, str):
        return _filled(value)
    return value is not None


def _has_line_and_city(address: Address) -> bool:
    return any(_filled(line) for line in address.line) and _filled(address.city)


def has_identifier_code(patient: Patient, code: str) -> bool:
    """True if an identifier coded ``code`` carries a value."""
    return any(
        code in identifier.type_codes() and _filled(identifier.value)
        for identifier in patient.identifier
    )


def has_other_identifier(patient: Patient) -> bool:
    """True if an identifier with a code other than PPN/DL carries a value."""
    for identifier in patient.identifier:
        if not _filled(identifier.value):
            continue
        other = [c for c in identifier.type_codes() if c not in (PASSPORT_CODE, DRIVERS_LICENSE_CODE)]
        if other:
            return True
    return False


def has_home_address(patient: Patient) -> bool:
    """Weighted-tier address test: a ``home`` address with line and city."""
    return any(
        address.use == "home" and _has_line_and_city(address)
        for address in patient.address
    )


def has_complete_address(patient: Patient) -> bool:
    """Base-tier address test: any address (any use) with line and city."""
    return any(_has_line_and_city(address) for address in patient.address)


def has_telecom_system(patient: Patient, system: str) -> bool:
    return any(
        telecom.system == system and _filled(telecom.value)
        for telecom in patient.telecom
    )


def has_full_name(patient: Patient) -> bool:
    """True if the first name entry has both a family and a given part."""
    if not patient.name:
        return False
    name = patient.name[0]
    return _filled(name.family) and any(_filled(given) for given in name.given)


def has_qualifying_contact(patient: Patient) -> bool:
    """Only the first contact is considered."""
    if not patient.contact:
        return False
    contact = patient.contact[0]
    return (
        has_content(contact.name)
        or has_content(contact.telecom)
        or has_content(contact.address)
        or has_content(contact.organization)
    )


def extract(patient: Patient) -> ExtractedFields:
    return ExtractedFields(
        has_passport=has_identifier_code(patient, PASSPORT_CODE),
        has_drivers_license=has_identifier_code(patient, DRIVERS_LICENSE_CODE),
        has_qualifying_address=has_home_address(patient),
        has_other_identifier=has_other_identifier(patient),
        has_phone=has_telecom_system(patient, "phone"),
        has_email=has_telecom_system(patient, "email"),
        has_photo=has_content(patient.photo),
        has_full_name=has_full_name(patient),
        has_birth_date=_filled(patient.birth_date),
        has_qualifying_contact=has_qualifying_contact(patient),
    )

"""Decide whether a submitted Patient meets its claimed profile's minimum.

Requirements per tier
---------------------
Base
    ``identifier`` or ``telecom`` or a full name (given and family) or an
    address with line and city (any use) or ``birthDate`` must exist.
Level0 / Level1
    The weighted score (see :mod:`patient_match.matching.scoring`) must reach
    10 / 20.

Every tier additionally requires the first ``contact`` to carry a name,
telecom, address or organization.
"""

from __future__ import annotations

from patient_match.matching.extract import extract, has_complete_address, has_content
from patient_match.matching.profiles import classify
from patient_match.matching.scoring import LEVEL0_MIN_SCORE, LEVEL1_MIN_SCORE, score
from patient_match.models.outcome import ExtractedFields, ProfileTier, ValidationOutcome
from patient_match.models.patient import Patient

MISSING_OR_INVALID_PROFILE: str = (
    "Patient's profile is missing or not defined in the IG."
    " Please provide the IDI profile the patient resource conforms to."
)
REQUIRES_MIN_CRITERIA: str = (
    "The Patient resource provided is not conformant to profile: {profile} as claimed. "
    "Please check the profile's constraints and ensure the minimum search fields are provided."
)


def _meets_base(patient: Patient, fields: ExtractedFields) -> bool:
    return fields.has_qualifying_contact and (
        has_content(patient.identifier)
        or has_content(patient.telecom)
        or fields.has_full_name
        or has_complete_address(patient)
        or fields.has_birth_date
    )


def validate(patient: Patient) -> ValidationOutcome:
    """Check ``patient`` against the minimum criteria of its declared profile."""
    profile = patient.declared_profile
    tier = classify(profile)
    if tier is ProfileTier.UNCLASSIFIED:
        return ValidationOutcome(tier=tier, score=0, accepted=False, reason=MISSING_OR_INVALID_PROFILE)

    fields = extract(patient)
    weight = score(fields)

    if tier is ProfileTier.LEVEL0:
        accepted = fields.has_qualifying_contact and weight >= LEVEL0_MIN_SCORE
    elif tier is ProfileTier.LEVEL1:
        accepted = fields.has_qualifying_contact and weight >= LEVEL1_MIN_SCORE
    else:
        accepted = _meets_base(patient, fields)

    reason = "" if accepted else REQUIRES_MIN_CRITERIA.format(profile=profile)
    return ValidationOutcome(tier=tier, score=weight, accepted=accepted, reason=reason)

"""Weighted score used to gate the IDI Level0 and Level1 profiles."""

from __future__ import annotations

from patient_match.models.outcome import ExtractedFields

PASSPORT_WEIGHT: int = 10
DRIVERS_LICENSE_WEIGHT: int = 10
SECONDARY_WEIGHT: int = 4  # home address / other id / phone / email / photo
FULL_NAME_WEIGHT: int = 4
BIRTH_DATE_WEIGHT: int = 2

MAX_SCORE: int = (
    PASSPORT_WEIGHT + DRIVERS_LICENSE_WEIGHT + SECONDARY_WEIGHT + FULL_NAME_WEIGHT + BIRTH_DATE_WEIGHT
)

LEVEL0_MIN_SCORE: int = 10
LEVEL1_MIN_SCORE: int = 20


def score(fields: ExtractedFields) -> int:
    """Sum the rubric weights for the signals present in ``fields``.

    The secondary weight is awarded once, however many of its signals
    are present.
    """
    secondary = (
        fields.has_qualifying_address
        or fields.has_other_identifier
        or fields.has_phone
        or fields.has_email
        or fields.has_photo
    )
    total = 0
    if fields.has_passport:
        total += PASSPORT_WEIGHT
    if fields.has_drivers_license:
        total += DRIVERS_LICENSE_WEIGHT
    if secondary:
        total += SECONDARY_WEIGHT
    if fields.has_full_name:
        total += FULL_NAME_WEIGHT
    if fields.has_birth_date:
        total += BIRTH_DATE_WEIGHT
    return total

"""Map a claimed IDI conformance profile to its tier."""

from __future__ import annotations

from patient_match.models.outcome import ProfileTier

BASE_PROFILE: str = "http://hl7.org/fhir/us/identity-matching/StructureDefinition/IDI-Patient"
LEVEL0_PROFILE: str = "http://hl7.org/fhir/us/identity-matching/StructureDefinition/IDI-Patient-L0"
LEVEL1_PROFILE: str = "http://hl7.org/fhir/us/identity-matching/StructureDefinition/IDI-Patient-L1"

PROFILE_TIERS: dict[str, ProfileTier] = {
    BASE_PROFILE: ProfileTier.BASE,
    LEVEL0_PROFILE: ProfileTier.LEVEL0,
    LEVEL1_PROFILE: ProfileTier.LEVEL1,
}


def classify(declared_profile: str | None) -> ProfileTier:
    """Return the tier for an exact profile URI match, else ``UNCLASSIFIED``."""
    if not isinstance(declared_profile, str):
        return ProfileTier.UNCLASSIFIED
    return PROFILE_TIERS.get(declared_profile, ProfileTier.UNCLASSIFIED)

"""Unit tests for patient_match.matching.profiles."""

import pytest

from patient_match.matching.profiles import (
    BASE_PROFILE,
    LEVEL0_PROFILE,
    LEVEL1_PROFILE,
    PROFILE_TIERS,
    classify,
)
from patient_match.models.outcome import ProfileTier


class TestClassify:
    @pytest.mark.parametrize(
        "uri, tier",
        [
            (BASE_PROFILE, ProfileTier.BASE),
            (LEVEL0_PROFILE, ProfileTier.LEVEL0),
            (LEVEL1_PROFILE, ProfileTier.LEVEL1),
        ],
    )
    def test_known_profiles(self, uri, tier):
        assert classify(uri) is tier

    @pytest.mark.parametrize(
        "declared",
        [
            None,
            "",
            "http://example.org/StructureDefinition/Other",
            BASE_PROFILE + "/",
            LEVEL0_PROFILE.upper(),
            " " + LEVEL1_PROFILE,
            "http://hl7.org/fhir/us/identity-matching/StructureDefinition/IDI-Patient-L2",
        ],
    )
    def test_anything_else_is_unclassified(self, declared):
        """Matching is exact: no prefix, case or whitespace tolerance."""
        assert classify(declared) is ProfileTier.UNCLASSIFIED

    def test_non_string_is_unclassified(self):
        assert classify(42) is ProfileTier.UNCLASSIFIED  # type: ignore[arg-type]

    def test_exactly_three_profiles_are_known(self):
        assert len(PROFILE_TIERS) == 3
        assert ProfileTier.UNCLASSIFIED not in PROFILE_TIERS.values()

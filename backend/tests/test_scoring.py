"""Unit tests for patient_match.matching.scoring."""

import itertools

import pytest

from patient_match.matching.scoring import (
    LEVEL0_MIN_SCORE,
    LEVEL1_MIN_SCORE,
    MAX_SCORE,
    score,
)
from patient_match.models.outcome import ExtractedFields

SIGNALS = [name for name in ExtractedFields.model_fields]
SECONDARY = ["has_qualifying_address", "has_other_identifier", "has_phone", "has_email", "has_photo"]


class TestRubric:
    def test_empty_is_zero(self):
        assert score(ExtractedFields()) == 0

    @pytest.mark.parametrize(
        "signal, weight",
        [
            ("has_passport", 10),
            ("has_drivers_license", 10),
            ("has_full_name", 4),
            ("has_birth_date", 2),
            ("has_qualifying_contact", 0),
        ],
    )
    def test_single_signal_weight(self, signal, weight):
        assert score(ExtractedFields(**{signal: True})) == weight

    @pytest.mark.parametrize("signal", SECONDARY)
    def test_each_secondary_signal_is_worth_four(self, signal):
        assert score(ExtractedFields(**{signal: True})) == 4

    def test_secondary_weight_is_awarded_once(self):
        assert score(ExtractedFields(**{s: True for s in SECONDARY})) == 4

    def test_maximum(self):
        assert MAX_SCORE == 30
        assert score(ExtractedFields(**{s: True for s in SIGNALS})) == MAX_SCORE

    def test_thresholds(self):
        assert LEVEL0_MIN_SCORE == 10
        assert LEVEL1_MIN_SCORE == 20


class TestProperties:
    def test_all_combinations_bounded_and_monotonic(self):
        """Adding a signal never lowers the score; the score stays within [0, 30]."""
        for bits in itertools.product([False, True], repeat=len(SIGNALS)):
            fields = ExtractedFields(**dict(zip(SIGNALS, bits)))
            base = score(fields)
            assert 0 <= base <= MAX_SCORE
            for i, present in enumerate(bits):
                if present:
                    continue
                more = dict(zip(SIGNALS, bits))
                more[SIGNALS[i]] = True
                assert score(ExtractedFields(**more)) >= base

    def test_deterministic(self):
        fields = ExtractedFields(has_passport=True, has_full_name=True)
        assert score(fields) == score(fields) == 14

"""Minimum-criteria validation for Patient/$match submissions.

The four stages run leaf-first: classify the claimed profile, extract the
presence signals, score them, and decide.  Every function here is pure.
"""

from .criteria import (
    MISSING_OR_INVALID_PROFILE,
    REQUIRES_MIN_CRITERIA,
    validate,
)
from .extract import extract, has_complete_address, has_content, has_home_address
from .profiles import BASE_PROFILE, LEVEL0_PROFILE, LEVEL1_PROFILE, classify
from .scoring import LEVEL0_MIN_SCORE, LEVEL1_MIN_SCORE, MAX_SCORE, score

__all__ = [
    "BASE_PROFILE",
    "LEVEL0_PROFILE",
    "LEVEL1_PROFILE",
    "LEVEL0_MIN_SCORE",
    "LEVEL1_MIN_SCORE",
    "MAX_SCORE",
    "MISSING_OR_INVALID_PROFILE",
    "REQUIRES_MIN_CRITERIA",
    "classify",
    "extract",
    "has_complete_address",
    "has_content",
    "has_home_address",
    "score",
    "validate",
]

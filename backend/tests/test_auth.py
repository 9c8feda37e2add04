"""Unit tests for patient_match.auth."""

import pytest

from patient_match.auth import extract_bearer_token, validate_access_token
from patient_match.config import Settings


class TestExtractBearerToken:
    @pytest.mark.parametrize(
        "header, token",
        [
            ("Bearer abc", "abc"),
            ("bearer abc", "abc"),
            ("BEARER   abc  ", "abc"),
            ("Basic dXNlcjpwYXNz", None),
            ("Bearer", None),
            ("Bearer ", None),
            ("", None),
            (None, None),
        ],
    )
    def test_parsing(self, header, token):
        assert extract_bearer_token(header) == token


class TestValidateAccessToken:
    def test_known_token(self):
        settings = Settings(access_tokens=("one", "two"))
        assert validate_access_token("Bearer two", settings)

    def test_unknown_token(self):
        settings = Settings(access_tokens=("one",))
        assert not validate_access_token("Bearer three", settings)

    def test_missing_header(self):
        assert not validate_access_token(None, Settings(access_tokens=("one",)))

    def test_no_tokens_configured_rejects_everything(self):
        assert not validate_access_token("Bearer anything", Settings())

    def test_auth_disabled_allows_everything(self):
        settings = Settings(auth_enabled=False)
        assert validate_access_token(None, settings)
        assert validate_access_token("Basic xyz", settings)

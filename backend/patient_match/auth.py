"""Bearer token gate for the $match endpoint."""

from __future__ import annotations

import hmac
import logging

from patient_match.config import Settings

logger = logging.getLogger(__name__)

INVALID_TOKEN_MESSAGE: str = "Invalid access token. Make sure to use Authorization: Bearer (token)"


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


def validate_access_token(authorization: str | None, settings: Settings) -> bool:
    """Check the request's bearer token against the configured tokens.

    Always passes when authentication is disabled in ``settings``.
    """
    if not settings.auth_enabled:
        return True
    token = extract_bearer_token(authorization)
    if token is None:
        logger.info("Rejected request without a bearer token")
        return False
    for known in settings.access_tokens:
        if hmac.compare_digest(token.encode("utf-8"), known.encode("utf-8")):
            return True
    logger.info("Rejected request with an unknown bearer token")
    return False

"""Health check endpoint for patient-match.

Returns server status along with the version, whether bearer tokens are
enforced, and the IDI profiles the service recognises.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request

from patient_match import __version__
from patient_match.matching.profiles import PROFILE_TIERS

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/health")
async def health(request: Request):
    """Health check endpoint."""
    settings = request.app.state.settings
    return {
        "status": "ok",
        "version": __version__,
        "auth_enabled": settings.auth_enabled,
        "known_profiles": {uri: tier.value for uri, tier in PROFILE_TIERS.items()},
    }

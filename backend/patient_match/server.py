"""FastAPI application for patient-match.

Run with: uvicorn --factory patient_match.server:create_app --host 0.0.0.0 --port 8180 --reload
Or: patient-match start
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from patient_match import __version__
from patient_match.audit import AuditLog, MemoryAuditLog
from patient_match.config import Settings, load_settings
from patient_match.routes import health, match
from patient_match.service import AuditSink, PatientMatchService

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


def create_app(settings: Settings | None = None, audit_sink: AuditSink | None = None) -> FastAPI:
    """Build the application around an injected ``Settings`` object.

    When no audit sink is given, events go to ``settings.audit_log_path``
    (or stay in memory if no path is configured).
    """
    if settings is None:
        settings = load_settings()
    if audit_sink is None:
        audit_sink = AuditLog(settings.audit_log_path) if settings.audit_log_path else MemoryAuditLog()

    configure_logging(settings.log_level)

    app = FastAPI(
        title="Patient-Match",
        description="IDI Patient/$match minimum-criteria gate",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.audit_sink = audit_sink
    app.state.match_service = PatientMatchService(settings, audit_sink)

    app.include_router(health.router)
    app.include_router(match.router)

    if settings.auth_enabled and not settings.access_tokens:
        logger.warning("Authentication is enabled but no access tokens are configured; every request will be rejected.")
    logger.info("Patient-Match app created (auth %s).", "on" if settings.auth_enabled else "off")
    return app

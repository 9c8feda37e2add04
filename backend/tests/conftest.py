"""Shared pytest configuration and fixtures for patient-match tests."""

from __future__ import annotations

import os

import pytest
from fastapi.testclient import TestClient

from patient_match import config
from patient_match.audit import MemoryAuditLog
from patient_match.config import Settings
from patient_match.server import create_app
from patient_match.service import PatientMatchService
from tests.samples import TOKEN


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Point the base dir at a temp directory and drop any PATIENT_MATCH_* variables."""
    for key in list(os.environ):
        if key.startswith(config.ENV_PREFIX):
            monkeypatch.delenv(key, raising=False)
    home = tmp_path / "home"
    monkeypatch.setenv("PATIENT_MATCH_HOME", str(home))
    monkeypatch.setattr(config, "_env_loaded", False)
    return home


@pytest.fixture
def settings(tmp_path):
    return Settings(
        base_url="https://fhir.example.org/fhir",
        access_tokens=(TOKEN,),
        auth_enabled=True,
        audit_log_path=tmp_path / "audit.jsonl",
    )


@pytest.fixture
def audit_log():
    return MemoryAuditLog()


@pytest.fixture
def service(settings, audit_log):
    return PatientMatchService(settings, audit_log)


@pytest.fixture
def client(settings, audit_log):
    app = create_app(settings, audit_log)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_header():
    return {"Authorization": f"Bearer {TOKEN}"}

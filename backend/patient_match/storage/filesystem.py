"""Filesystem helpers for the ~/.patient-match/ directory tree.

Provides path resolution and directory creation for the configuration
file and the audit log.
"""

from __future__ import annotations

from pathlib import Path

from patient_match.config import (
    DIR_AUDIT,
    ENV_FILENAME,
    get_base_dir,
)


def ensure_directories() -> None:
    """Create the ~/.patient-match/ directory tree if it does not exist."""
    get_audit_dir().mkdir(parents=True, exist_ok=True)


def get_audit_dir() -> Path:
    """Return the path to ~/.patient-match/audit/."""
    return get_base_dir() / DIR_AUDIT


def get_env_path() -> Path:
    """Return the path to ~/.patient-match/.env."""
    return get_base_dir() / ENV_FILENAME

"""Configuration management for patient-match.

Loads environment variables from ~/.patient-match/.env and builds the
read-only ``Settings`` object that is handed to the server and the
match orchestrator.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

from patient_match.errors import ConfigurationError

DEFAULT_PORT: int = 8180
DEFAULT_LOG_LEVEL: str = "INFO"

DIR_AUDIT: str = "audit"

AUDIT_FILENAME: str = "audit.jsonl"
ENV_FILENAME: str = ".env"

ENV_PREFIX: str = "PATIENT_MATCH_"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


class Settings(BaseModel):
    """Immutable runtime configuration."""

    model_config = ConfigDict(frozen=True)

    port: int = DEFAULT_PORT
    base_url: str | None = None
    access_tokens: tuple[str, ...] = ()
    auth_enabled: bool = True
    audit_log_path: Path | None = None
    log_level: str = DEFAULT_LOG_LEVEL


def get_base_dir() -> Path:
    override = os.getenv("PATIENT_MATCH_HOME")
    if override:
        return Path(override).expanduser()
    return Path("~/.patient-match").expanduser()


_env_loaded: bool = False


def _ensure_env_loaded() -> None:
    global _env_loaded
    if _env_loaded:
        return
    env_path = get_base_dir() / ENV_FILENAME
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)
    _env_loaded = True


def reload_env() -> None:
    global _env_loaded
    _env_loaded = False
    _ensure_env_loaded()


def _env(name: str) -> str | None:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None:
        return None
    raw = raw.strip()
    return raw or None


def get_port() -> int:
    _ensure_env_loaded()
    raw = _env("PORT")
    if raw is None:
        return DEFAULT_PORT
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{ENV_PREFIX}PORT must be an integer, got {raw!r}") from exc


def _parse_bool(name: str, raw: str | None, default: bool) -> bool:
    if raw is None:
        return default
    lowered = raw.lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ConfigurationError(f"{ENV_PREFIX}{name} must be true or false, got {raw!r}")


def _parse_tokens(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(token.strip() for token in raw.split(",") if token.strip())


def _parse_log_level(raw: str | None) -> str:
    level = (raw or DEFAULT_LOG_LEVEL).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigurationError(f"Unknown log level: {raw!r}")
    return level


def load_settings() -> Settings:
    """Build ``Settings`` from the environment (and the ~/.patient-match/.env file).

    Raises
    ------
    ConfigurationError
        If a value is present but cannot be interpreted.
    """
    _ensure_env_loaded()

    audit_raw = _env("AUDIT_LOG")
    audit_path = (
        Path(audit_raw).expanduser()
        if audit_raw
        else get_base_dir() / DIR_AUDIT / AUDIT_FILENAME
    )

    base_url = _env("BASE_URL")

    return Settings(
        port=get_port(),
        base_url=base_url.rstrip("/") if base_url else None,
        access_tokens=_parse_tokens(_env("ACCESS_TOKENS")),
        auth_enabled=_parse_bool("AUTH_ENABLED", _env("AUTH_ENABLED"), True),
        audit_log_path=audit_path,
        log_level=_parse_log_level(_env("LOG_LEVEL")),
    )

"""
Settings for TalentAI.

Settings are resolved in three layers: built-in defaults, an optional
YAML file and environment variables.  Environment variables win.  A
``.env`` file in the working directory is loaded before the
environment is read, so API keys and overrides can live there.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Dict, Optional

import yaml  # type: ignore
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TALENTAI_CONFIG"
VALID_PROVIDERS = ("openai", "gemini", "placeholder")


@dataclass(frozen=True)
class Settings:
    """Runtime settings shared by the providers, flows and CLI."""

    provider: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    gemini_model: str = "gemini-2.0-flash"
    temperature: float = 0.2
    request_timeout: float = 60.0
    # Up to ``chunk_size`` résumés go into one batch call.
    chunk_size: int = 5
    # Up to ``parallel_threshold`` résumés are scored one call each.
    parallel_threshold: int = 3
    max_concurrency: int = 5
    max_files: int = 10
    max_file_size: int = 5 * 1024 * 1024


_INT_FIELDS = ("chunk_size", "parallel_threshold", "max_concurrency", "max_files", "max_file_size")
_FLOAT_FIELDS = ("temperature", "request_timeout")

# Environment variable -> settings field.  Earlier names take precedence.
_ENV_OVERRIDES = [
    ("LLM_PROVIDER", "provider"),
    ("OPENAI_MODEL", "openai_model"),
    ("GEMINI_MODEL", "gemini_model"),
    ("GOOGLE_MODEL", "gemini_model"),
    ("TALENTAI_TEMPERATURE", "temperature"),
    ("TALENTAI_REQUEST_TIMEOUT", "request_timeout"),
    ("TALENTAI_CHUNK_SIZE", "chunk_size"),
    ("TALENTAI_PARALLEL_THRESHOLD", "parallel_threshold"),
    ("TALENTAI_MAX_CONCURRENCY", "max_concurrency"),
    ("TALENTAI_MAX_FILES", "max_files"),
    ("TALENTAI_MAX_FILE_SIZE", "max_file_size"),
]


def _convert(name: str, value: object, source: str) -> object:
    if name in _INT_FIELDS:
        try:
            return int(value)  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            raise ValueError(f"{source} must be an integer, got {value!r}") from exc
    if name in _FLOAT_FIELDS:
        try:
            return float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            raise ValueError(f"{source} must be a number, got {value!r}") from exc
    if name == "provider":
        if value is None:
            return None
        return str(value).strip().lower() or None
    return str(value)


def _load_yaml(config_path: str) -> Dict[str, object]:
    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping")
    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown config keys in {config_path}: {', '.join(unknown)}")
    return {key: _convert(key, value, f"{config_path}:{key}") for key, value in data.items()}


def _validate(settings: Settings) -> Settings:
    for name in _INT_FIELDS:
        if getattr(settings, name) < 1:
            raise ValueError(f"{name} must be >= 1")
    if settings.request_timeout <= 0:
        raise ValueError("request_timeout must be > 0")
    if not 0.0 <= settings.temperature <= 2.0:
        raise ValueError("temperature must be between 0 and 2")
    if settings.provider is not None and settings.provider not in VALID_PROVIDERS:
        # Unknown providers are tolerated; provider resolution logs and auto-detects.
        logger.warning("Unknown provider '%s' in settings", settings.provider)
    return settings


def load_settings(config_path: Optional[str] = None) -> Settings:
    """Build :class:`Settings` from defaults, YAML and the environment.

    Args:
        config_path: Optional YAML file.  When omitted the path in the
            ``TALENTAI_CONFIG`` environment variable is used, if set.

    Returns:
        A validated :class:`Settings` instance.

    Raises:
        ValueError: If the YAML has unknown keys or any value is out of
            range or of the wrong type.
    """
    load_dotenv()
    settings = Settings()
    path = config_path or os.getenv(CONFIG_ENV_VAR)
    if path:
        settings = replace(settings, **_load_yaml(path))
        logger.debug("Loaded settings from %s", path)
    overrides: Dict[str, object] = {}
    for env_name, field_name in _ENV_OVERRIDES:
        raw = os.getenv(env_name)
        if raw is None or raw == "" or field_name in overrides:
            continue
        overrides[field_name] = _convert(field_name, raw, env_name)
    if overrides:
        settings = replace(settings, **overrides)
    return _validate(settings)

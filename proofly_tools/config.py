"""Application-wide configuration model and settings file loading."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

DEFAULT_BASE_URL = "https://api.proofly.ai"

_ENVIRONMENT_OVERRIDES = {
    "PROOFLY_API_KEY": "api_key",
    "PROOFLY_BASE_URL": "base_url",
}


class AppConfig(BaseModel):
    """Immutable runtime settings shared by every analysis session."""

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="Base URL of the remote deepfake analysis service.",
    )
    api_key: str | None = Field(
        default=None,
        description="Optional bearer token attached to every remote request.",
    )
    poll_interval: float = Field(
        default=2.0,
        ge=0.0,
        le=60.0,
        description="Seconds to wait between two status queries.",
    )
    max_poll_attempts: int = Field(
        default=60,
        ge=1,
        le=1000,
        description="Maximum number of status queries issued for one session.",
    )
    request_timeout: float = Field(
        default=30.0,
        ge=1.0,
        le=600.0,
        description="Timeout (seconds) for each HTTP call.",
    )
    max_concurrency: int = Field(
        default=4,
        ge=1,
        le=32,
        description="Number of worker threads used during batch analysis.",
    )

    @field_validator("base_url")
    @classmethod
    def _normalise_base_url(cls, value: str) -> str:
        base = value.strip()
        if not base:
            raise ValueError("Base URL must not be empty.")
        if "://" not in base:
            raise ValueError("Base URL must include a scheme such as https://api.proofly.ai.")
        return base.rstrip("/")

    @field_validator("api_key")
    @classmethod
    def _blank_api_key_is_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        *,
        environ: Mapping[str, str] | None = None,
    ) -> AppConfig:
        """Validate ``data`` after applying environment overrides."""
        merged = apply_environment(data, os.environ if environ is None else environ)
        return cls.model_validate(merged)

    @classmethod
    def load(cls, path: Path, *, environ: Mapping[str, str] | None = None) -> AppConfig:
        """Load configuration from a YAML or JSON file."""
        data = _read_config_file(path)
        try:
            return cls.from_mapping(data, environ=environ)
        except PydanticValidationError as exc:
            raise ValueError(f"Invalid configuration file at {path}: {exc}") from exc


def apply_environment(data: Mapping[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    """Return a copy of ``data`` with ``PROOFLY_*`` variables applied on top."""
    merged = dict(data)
    for variable, field_name in _ENVIRONMENT_OVERRIDES.items():
        value = environ.get(variable)
        if value:
            merged[field_name] = value
    return merged


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in {".yaml", ".yml"}:
            data = yaml.safe_load(text) or {}
        else:
            data = json.loads(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"Could not parse {path}: {exc}") from exc
    if not isinstance(data, Mapping):
        raise ValueError(f"Configuration file {path} must contain a mapping.")
    return data


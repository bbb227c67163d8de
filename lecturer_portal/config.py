"""
Configuration for the lecturer portal.

Settings are resolved in this order, later sources winning:
built-in defaults, an optional JSON file, then environment variables
(``LECTURER_PORTAL_API_URL`` and friends).
"""

import json
import os
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .core.exceptions import ConfigurationError


DEFAULT_API_BASE_URL = "http://localhost:3000/api"

ENV_PREFIX = "LECTURER_PORTAL_"

# environment variable suffix -> config field
_ENV_FIELDS: Dict[str, str] = {
    "API_URL": "api_base_url",
    "TIMEOUT": "request_timeout",
    "EXPORT_DIR": "export_dir",
    "LOG_LEVEL": "log_level",
}


class PortalConfig(BaseModel):
    """Runtime settings."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout: float = Field(default=30.0, gt=0)
    export_dir: str = "exports"
    log_level: str = "INFO"

    @field_validator("api_base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError("api_base_url must start with http:// or https://")
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level {value!r}")
        return level


def _load_file(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read configuration file {path}: {e}",
                                 error_code="CONFIG_FILE") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a JSON object",
                                 error_code="CONFIG_FILE")
    return data


def load_config(path: Optional[str] = None, env: Optional[Mapping[str, str]] = None) -> PortalConfig:
    """Build the configuration from defaults, a JSON file and the environment.

    Raises:
        ConfigurationError: if the file is unreadable or a value is invalid.
    """
    env = os.environ if env is None else env
    values: Dict[str, Any] = {}

    if path:
        values.update(_load_file(path))

    for suffix, field_name in _ENV_FIELDS.items():
        raw = env.get(ENV_PREFIX + suffix)
        if raw:
            values[field_name] = raw

    try:
        return PortalConfig(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}", error_code="CONFIG_INVALID") from e

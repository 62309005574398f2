"""Configuration management for soil-analyzer.

Defaults live in the YAML files of the package ``config/`` directory; secrets
and deployment overrides come from environment variables (optionally loaded
from a ``.env`` file). Settings are built once and passed explicitly into the
provider and service objects.
"""

import os
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr

from soil_analyzer.errors import ConfigurationError
from soil_analyzer.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_DEPTH_LAYERS = ["0-5", "5-15", "15-30", "30-60", "60-100", "100-200"]


class SoilApiSettings(BaseModel):
    """Connection settings for the soil property provider."""

    base_url: str = "https://api.isda-africa.com"
    data_source: str = "iSDAsoil API v2"
    username: str | None = None
    password: SecretStr | None = None
    timeout_s: float = Field(30.0, gt=0)
    max_concurrency: int | None = Field(16, ge=1)

    def require_credentials(self) -> tuple[str, str]:
        """Return (username, password) or raise if either is missing."""
        if not self.username or self.password is None:
            raise ConfigurationError(
                "API configuration error: iSDAsoil credentials not configured."
            )
        return self.username, self.password.get_secret_value()


class RequestDefaults(BaseModel):
    """Fallback request parameters."""

    latitude: float = Field(-26.2041, ge=-90, le=90)
    longitude: float = Field(28.0473, ge=-180, le=180)
    depth_layers: list[str] = Field(default_factory=lambda: list(DEFAULT_DEPTH_LAYERS))


class AppSettings(BaseModel):
    """Main application settings."""

    soil_api: SoilApiSettings = SoilApiSettings()
    defaults: RequestDefaults = RequestDefaults()
    environmental_context: dict[str, dict[str, Any]] = Field(default_factory=dict)


@lru_cache(maxsize=1)
def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_dir = Path(__file__).resolve().parent / "config"

    if not config_dir.exists():
        raise FileNotFoundError(f"Configuration directory not found: {config_dir}")

    return config_dir


def load_yaml_config(filename: str) -> dict[str, Any]:
    """Load a YAML configuration file."""
    config_file = get_config_dir() / filename

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_file}")

    try:
        with open(config_file, encoding="utf-8") as f:
            data = yaml.safe_load(f)

        logger.debug(f"Loaded configuration from {config_file}")
        return data or {}

    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_file}: {e}") from e


@lru_cache(maxsize=1)
def get_soil_config() -> dict[str, Any]:
    """Load soil provider and request configuration."""
    return load_yaml_config("soil.yaml")


def _parse_concurrency(raw: str) -> int | None:
    if raw.strip().lower() in {"", "0", "none", "unbounded"}:
        return None
    return int(raw)


def build_settings(
    config: Mapping[str, Any], environ: Mapping[str, str] | None = None
) -> AppSettings:
    """Build settings from a configuration mapping and environment variables.

    Args:
        config: Parsed YAML configuration
        environ: Environment mapping (defaults to ``os.environ``)

    Returns:
        Validated application settings
    """
    env = os.environ if environ is None else environ

    provider = dict(config.get("provider", {}))
    username_env = provider.pop("username_env", "ISDASOIL_USERNAME")
    password_env = provider.pop("password_env", "ISDASOIL_PASSWORD")
    provider.pop("name", None)

    provider["username"] = env.get(username_env) or None
    provider["password"] = env.get(password_env) or None

    if env.get("ISDASOIL_BASE_URL"):
        provider["base_url"] = env["ISDASOIL_BASE_URL"]
    if env.get("SOIL_TIMEOUT_S"):
        provider["timeout_s"] = float(env["SOIL_TIMEOUT_S"])
    if "SOIL_MAX_CONCURRENCY" in env:
        provider["max_concurrency"] = _parse_concurrency(env["SOIL_MAX_CONCURRENCY"])

    if not provider["username"] or not provider["password"]:
        logger.warning(
            f"Soil provider credentials not set ({username_env}, {password_env})"
        )

    return AppSettings(
        soil_api=SoilApiSettings(**provider),
        defaults=RequestDefaults(**config.get("request_defaults", {})),
        environmental_context=config.get("environmental_context", {}),
    )


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Get application settings with environment override support.

    This is the single source of truth for configuration.
    The .env file is read on first use, not at import time.
    """
    load_dotenv(override=False)

    return build_settings(get_soil_config())


def clear_settings_cache() -> None:
    """Clear cached configuration to force reload from current environment."""
    get_settings.cache_clear()
    get_soil_config.cache_clear()
    get_config_dir.cache_clear()

"""Tests for YAML configuration loading and environment overrides."""

import pytest
from pydantic import ValidationError

from soil_analyzer.config import (
    DEFAULT_DEPTH_LAYERS,
    SoilApiSettings,
    _parse_concurrency,
    build_settings,
    get_settings,
    get_soil_config,
)
from soil_analyzer.errors import ConfigurationError

CREDENTIALS = {"ISDASOIL_USERNAME": "farmer", "ISDASOIL_PASSWORD": "hunter2"}


class TestShippedConfiguration:
    def test_soil_yaml_sections(self):
        config = get_soil_config()

        assert set(config) >= {"provider", "request_defaults", "environmental_context"}

    def test_defaults_from_yaml(self):
        settings = build_settings(get_soil_config(), environ=CREDENTIALS)

        assert settings.soil_api.base_url == "https://api.isda-africa.com"
        assert settings.soil_api.data_source == "iSDAsoil API v2"
        assert settings.soil_api.timeout_s == 30
        assert settings.soil_api.max_concurrency == 16
        assert settings.defaults.latitude == -26.2041
        assert settings.defaults.longitude == 28.0473
        assert settings.defaults.depth_layers == DEFAULT_DEPTH_LAYERS
        assert "climate" in settings.environmental_context


class TestBuildSettings:
    def test_credentials_from_environment(self):
        settings = build_settings({}, environ=CREDENTIALS)

        assert settings.soil_api.require_credentials() == ("farmer", "hunter2")

    def test_password_not_in_repr(self):
        settings = build_settings({}, environ=CREDENTIALS)
        assert "hunter2" not in repr(settings)

    def test_custom_credential_variables(self):
        config = {"provider": {"username_env": "SOIL_USER", "password_env": "SOIL_PASS"}}

        settings = build_settings(config, environ={"SOIL_USER": "u", "SOIL_PASS": "p"})

        assert settings.soil_api.require_credentials() == ("u", "p")

    def test_missing_credentials(self):
        settings = build_settings({}, environ={})

        with pytest.raises(ConfigurationError, match="API configuration error"):
            settings.soil_api.require_credentials()

    def test_environment_overrides(self):
        env = {
            **CREDENTIALS,
            "ISDASOIL_BASE_URL": "https://mirror.test",
            "SOIL_TIMEOUT_S": "12.5",
            "SOIL_MAX_CONCURRENCY": "4",
        }

        settings = build_settings({"provider": {"timeout_s": 30}}, environ=env)

        assert settings.soil_api.base_url == "https://mirror.test"
        assert settings.soil_api.timeout_s == 12.5
        assert settings.soil_api.max_concurrency == 4

    def test_unbounded_concurrency(self):
        settings = build_settings({}, environ={"SOIL_MAX_CONCURRENCY": "unbounded"})
        assert settings.soil_api.max_concurrency is None

    def test_invalid_defaults_rejected(self):
        with pytest.raises(ValidationError):
            build_settings({"request_defaults": {"latitude": 123}}, environ={})


class TestParseConcurrency:
    @pytest.mark.parametrize("raw", ["", "0", "none", "Unbounded", " none "])
    def test_unbounded(self, raw):
        assert _parse_concurrency(raw) is None

    def test_number(self):
        assert _parse_concurrency("8") == 8

    def test_garbage(self):
        with pytest.raises(ValueError):
            _parse_concurrency("lots")


class TestGetSettings:
    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("ISDASOIL_USERNAME", "env-user")
        monkeypatch.setenv("ISDASOIL_PASSWORD", "env-pass")
        monkeypatch.setenv("SOIL_MAX_CONCURRENCY", "2")

        settings = get_settings()

        assert settings.soil_api.username == "env-user"
        assert settings.soil_api.max_concurrency == 2

    def test_cached(self):
        assert get_settings() is get_settings()

    def test_concurrency_must_be_positive(self):
        with pytest.raises(ValidationError):
            SoilApiSettings(max_concurrency=-1)

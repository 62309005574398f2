"""
pytest configuration for soil-analyzer tests.

Provides isolated settings, a scripted in-memory soil provider and a grid
builder so that no test reaches the live iSDAsoil API unless it is marked
``network``.
"""

import importlib
import threading
import time
from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv

from soil_analyzer.config import AppSettings, SoilApiSettings
from soil_analyzer.errors import AuthenticationError
from soil_analyzer.soil.models import FetchOutcome, PropertyMeasurement
from soil_analyzer.soil.providers.base import SoilPropertyProviderBase


def pytest_configure(config):
    """Configure pytest session - load environment variables."""
    env_path = Path(__file__).parent.parent / ".env"
    if env_path.exists():
        load_dotenv(env_path)


@pytest.fixture(autouse=True)
def _reset_http_cache_state(monkeypatch):
    """Reset the http_cache singleton and force the uncached backend."""
    monkeypatch.setenv("CACHE_BACKEND", "none")
    hc = importlib.import_module("soil_analyzer.http_cache")
    hc.reset_session()
    yield
    hc.reset_session()


@pytest.fixture(autouse=True)
def _clear_settings():
    """Drop cached settings so environment patches take effect."""
    from soil_analyzer.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def settings() -> AppSettings:
    """Settings with dummy credentials and a small concurrency cap."""
    return AppSettings(
        soil_api=SoilApiSettings(
            base_url="https://soil.test",
            username="tester",
            password="secret",
            timeout_s=5.0,
            max_concurrency=4,
        ),
        environmental_context={
            "climate": {"zone": "subtropical highland", "average_rainfall": 713},
            "ecology": {"biome": "Grassland"},
        },
    )


def build_grid(values: dict[str, dict[str, float]]) -> dict:
    return {
        prop: {
            depth: PropertyMeasurement(value=v, scaled_value=v, unit="%")
            for depth, v in layers.items()
        }
        for prop, layers in values.items()
    }


@pytest.fixture
def make_grid():
    """Build a PropertyGrid from plain {property: {depth: value}} data."""
    return build_grid


class ScriptedProvider(SoilPropertyProviderBase):
    """In-memory provider returning canned values.

    Pairs missing from ``values`` fail with "No valid data returned"; pairs in
    ``errors`` raise from ``fetch_property`` to exercise the aggregator guard.
    """

    def __init__(
        self,
        values: dict[str, dict[str, float]],
        metadata: dict[str, Any] | None = None,
        errors: set[tuple[str, str]] | None = None,
        auth_error: Exception | None = None,
        delay_s: float = 0.0,
    ):
        self.values = values
        self.layers = {"property": metadata or {name: {} for name in values}}
        self.errors = errors or set()
        self.auth_error = auth_error
        self.delay_s = delay_s
        self.calls: list[tuple[str, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return "Scripted"

    @property
    def coverage_description(self) -> str:
        return "Test fixture"

    def authenticate(self) -> str:
        if self.auth_error is not None:
            raise self.auth_error
        return "token-123"

    def fetch_layers(self, token: str) -> dict[str, Any]:
        return self.layers

    def property_metadata(self, layers: dict[str, Any]) -> dict[str, dict[str, Any]]:
        return dict(layers["property"])

    def fetch_property(
        self, token, latitude, longitude, property_name, depth, metadata=None
    ) -> FetchOutcome:
        with self._lock:
            self.calls.append((property_name, depth))
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay_s:
                time.sleep(self.delay_s)
            if (property_name, depth) in self.errors:
                raise RuntimeError(f"boom {property_name}@{depth}")
            value = self.values.get(property_name, {}).get(depth)
            if value is None:
                return FetchOutcome.failed(property_name, depth, "No valid data returned")
            factor = float((metadata or {}).get("conversion_factor") or 1)
            return FetchOutcome.ok(
                property_name,
                depth,
                PropertyMeasurement(
                    value=value,
                    unit="%",
                    conversion_factor=factor,
                    scaled_value=value * factor,
                ),
            )
        finally:
            with self._lock:
                self.in_flight -= 1


@pytest.fixture
def scripted_provider():
    """Factory for ScriptedProvider instances."""
    return ScriptedProvider


@pytest.fixture
def auth_rejected():
    return AuthenticationError("Authentication failed: Unauthorized", status_code=401)


SILTY_CLAY_LOCATION = {
    "clay": {"0-5": 30.0, "5-15": 32.0},
    "sand": {"0-5": 40.0, "5-15": 38.0},
    "silt": {"0-5": 30.0, "5-15": 30.0},
    "phh2o": {"0-5": 6.5, "5-15": 6.8},
    "soc": {"0-5": 2.0, "5-15": 1.2},
    "nitrogen": {"0-5": 0.15, "5-15": 0.1},
    "bdod": {"0-5": 1.3, "5-15": 1.45},
}


@pytest.fixture
def silty_clay_values() -> dict[str, dict[str, float]]:
    """Two-layer profile whose top soil classifies as Silty Clay."""
    return {prop: dict(layers) for prop, layers in SILTY_CLAY_LOCATION.items()}

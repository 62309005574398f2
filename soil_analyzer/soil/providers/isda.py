"""iSDAsoil provider for African soil properties at 30m resolution."""

import math
from typing import Any

import requests

from soil_analyzer.config import SoilApiSettings
from soil_analyzer.errors import AuthenticationError, SoilDataError
from soil_analyzer.http_cache import get_session, pool_size_for
from soil_analyzer.logging_config import get_logger
from soil_analyzer.soil.models import FetchOutcome, PropertyMeasurement
from soil_analyzer.soil.providers.base import SoilPropertyProviderBase

logger = get_logger(__name__)


class ISDASoilProvider(SoilPropertyProviderBase):
    """iSDAsoil v2 provider.

    Every property is predicted on six standard depth layers (0-200 cm).
    The API requires a bearer token obtained from ``/login``; the token is
    passed explicitly to each call so one login serves a whole analysis.

    API Documentation: https://api.isda-africa.com/isdasoil/v2/docs
    """

    def __init__(
        self, settings: SoilApiSettings, session: requests.Session | None = None
    ):
        self.settings = settings
        self.base_url = settings.base_url.rstrip("/")
        self.timeout = settings.timeout_s
        self._session = (
            session
            if session is not None
            else get_session(pool_maxsize=pool_size_for(settings.max_concurrency))
        )

    @property
    def name(self) -> str:
        return "iSDAsoil"

    @property
    def coverage_description(self) -> str:
        return "Africa at 30m resolution - soil properties on six depth layers (0-200 cm)"

    def _headers(self, token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    def authenticate(self) -> str:
        username, password = self.settings.require_credentials()
        url = f"{self.base_url}/login"

        try:
            response = self._session.post(
                url,
                data={"username": username, "password": password},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"iSDAsoil login request failed: {e}")
            raise AuthenticationError(f"Authentication failed: {e}") from e

        if not response.ok:
            logger.error(f"iSDAsoil authentication failed: {response.text}")
            raise AuthenticationError(
                f"Authentication failed: {response.reason}",
                status_code=response.status_code,
            )

        try:
            token = response.json().get("access_token")
        except (ValueError, AttributeError):
            token = None

        if not token:
            raise AuthenticationError("Authentication failed: no access token returned")

        logger.debug("Authenticated against iSDAsoil")
        return token

    def fetch_layers(self, token: str) -> dict[str, Any]:
        url = f"{self.base_url}/isdasoil/v2/layers"

        try:
            response = self._session.get(
                url, headers=self._headers(token), timeout=self.timeout
            )
        except requests.RequestException as e:
            raise SoilDataError(f"Failed to fetch soil layers: {e}") from e

        if not response.ok:
            raise SoilDataError(f"Failed to fetch soil layers: {response.reason}")

        try:
            layers = response.json()
        except ValueError as e:
            raise SoilDataError(f"Failed to fetch soil layers: {e}") from e

        return layers if isinstance(layers, dict) else {}

    def property_metadata(self, layers: dict[str, Any]) -> dict[str, dict[str, Any]]:
        properties = layers.get("property") or {}
        metadata: dict[str, dict[str, Any]] = {}

        for name, entry in properties.items():
            # Some catalogue entries list one record per depth; they share units
            if isinstance(entry, list):
                entry = entry[0] if entry else {}
            metadata[name] = entry if isinstance(entry, dict) else {}

        return metadata

    def fetch_property(
        self,
        token: str,
        latitude: float,
        longitude: float,
        property_name: str,
        depth: str,
        metadata: dict[str, Any] | None = None,
    ) -> FetchOutcome:
        url = f"{self.base_url}/isdasoil/v2/soilproperty"
        params = {
            "lon": longitude,
            "lat": latitude,
            "property": property_name,
            "depth": depth,
        }

        try:
            response = self._session.get(
                url, params=params, headers=self._headers(token), timeout=self.timeout
            )

            if not response.ok:
                return FetchOutcome.failed(
                    property_name,
                    depth,
                    f"HTTP {response.status_code}: {response.reason}",
                )

            measurement = self._parse_measurement(
                response.json(), property_name, metadata or {}
            )

        except Exception as e:
            logger.debug(f"Fetch of {property_name}@{depth} failed: {e}")
            return FetchOutcome.failed(property_name, depth, str(e) or type(e).__name__)

        if measurement is None:
            return FetchOutcome.failed(property_name, depth, "No valid data returned")

        return FetchOutcome.ok(property_name, depth, measurement)

    def _parse_measurement(
        self, payload: Any, property_name: str, metadata: dict[str, Any]
    ) -> PropertyMeasurement | None:
        """Extract the first reported value for a property, or None if absent."""
        if not isinstance(payload, dict):
            return None

        entries = (payload.get("property") or {}).get(property_name) or []
        if not entries or not isinstance(entries[0], dict):
            return None

        entry = entries[0]
        value_obj = entry.get("value") or {}
        raw_value = value_obj.get("value")
        if raw_value is None:
            return None

        try:
            value = float(raw_value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Non-numeric value returned: {raw_value!r}") from e

        conversion_factor = float(metadata.get("conversion_factor") or 1)
        scaled_value = value * conversion_factor
        # Non-finite values count as missing data
        if not (math.isfinite(value) and math.isfinite(scaled_value)):
            logger.debug(f"Discarding non-finite {property_name} value: {raw_value!r}")
            return None

        return PropertyMeasurement(
            value=value,
            unit=value_obj.get("unit"),
            confidence=entry.get("confidence"),
            method=entry.get("method") or "unknown",
            conversion_factor=conversion_factor,
            scaled_value=scaled_value,
        )

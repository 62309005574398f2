"""Abstract base class for soil property providers."""

from abc import ABC, abstractmethod
from typing import Any

from soil_analyzer.errors import InvalidLocationError
from soil_analyzer.soil.models import FetchOutcome


class SoilPropertyProviderBase(ABC):
    """Abstract base class for token-authenticated soil property providers.

    A provider answers one (property, depth) question per call. Fan-out over
    many properties and depths is the aggregator's job, so ``fetch_property``
    must be safe to call from several threads at once and must never raise.
    """

    @abstractmethod
    def authenticate(self) -> str:
        """Log in to the provider.

        Returns:
            Bearer token for subsequent calls

        Raises:
            AuthenticationError: If the provider rejects or cannot process the login
        """

    @abstractmethod
    def fetch_layers(self, token: str) -> dict[str, Any]:
        """Fetch the provider's layer catalogue.

        Args:
            token: Bearer token from ``authenticate``

        Returns:
            Raw catalogue payload, kept for debug output

        Raises:
            SoilDataError: If the catalogue cannot be retrieved
        """

    @abstractmethod
    def property_metadata(self, layers: dict[str, Any]) -> dict[str, dict[str, Any]]:
        """Extract per-property metadata from a layer catalogue.

        Args:
            layers: Payload returned by ``fetch_layers``

        Returns:
            Mapping of advertised property name to its metadata
        """

    @abstractmethod
    def fetch_property(
        self,
        token: str,
        latitude: float,
        longitude: float,
        property_name: str,
        depth: str,
        metadata: dict[str, Any] | None = None,
    ) -> FetchOutcome:
        """Fetch a single property at a single depth layer.

        Args:
            token: Bearer token from ``authenticate``
            latitude: Latitude in decimal degrees
            longitude: Longitude in decimal degrees
            property_name: Provider property name (e.g. "clay")
            depth: Depth layer label (e.g. "0-5")
            metadata: Provider metadata for the property

        Returns:
            Success or failure outcome; failures are reported, not raised
        """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name for identification and logging."""

    @property
    @abstractmethod
    def coverage_description(self) -> str:
        """Description of geographic and data coverage."""

    def validate_coordinates(self, latitude: float, longitude: float) -> None:
        """Validate coordinate inputs.

        Args:
            latitude: Latitude in decimal degrees
            longitude: Longitude in decimal degrees

        Raises:
            InvalidLocationError: If coordinates are invalid
        """
        if not (-90 <= latitude <= 90):
            raise InvalidLocationError(f"Latitude must be between -90 and 90, got {latitude}")

        if not (-180 <= longitude <= 180):
            raise InvalidLocationError(f"Longitude must be between -180 and 180, got {longitude}")

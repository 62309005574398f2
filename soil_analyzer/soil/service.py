"""Soil analysis service orchestration."""

import asyncio
from collections.abc import Iterable, Mapping
from typing import Any

from soil_analyzer.config import AppSettings, get_settings
from soil_analyzer.logging_config import get_logger
from soil_analyzer.soil.aggregator import gather_property_grid
from soil_analyzer.soil.classification import perform_soil_classification
from soil_analyzer.soil.context import get_environmental_context, get_temporal_context
from soil_analyzer.soil.derivation import calculate_comprehensive_analysis
from soil_analyzer.soil.models import (
    AnalysisMetadata,
    Location,
    PropertyInfo,
    SoilAnalysisReport,
)
from soil_analyzer.soil.providers.base import SoilPropertyProviderBase
from soil_analyzer.soil.providers.isda import ISDASoilProvider
from soil_analyzer.soil.quality import assess_data_quality
from soil_analyzer.soil.suitability import calculate_agricultural_suitability

logger = get_logger(__name__)


def parse_depths(depths: str | Iterable[str] | None) -> list[str]:
    """Normalize a depth selection to an ordered list without duplicates.

    Accepts a comma-separated string or an iterable of labels. Blank entries
    are dropped; an empty result means "use the configured defaults".
    """
    if depths is None:
        return []

    items = depths.split(",") if isinstance(depths, str) else depths
    unique: list[str] = []
    for item in items:
        label = item.strip()
        if label and label not in unique:
            unique.append(label)
    return unique


def normalize_property_info(metadata: Mapping[str, Any]) -> PropertyInfo:
    """Map provider metadata onto PropertyInfo, filling documented defaults."""
    try:
        conversion_factor = float(metadata.get("conversion_factor") or 1)
    except (TypeError, ValueError):
        conversion_factor = 1.0

    return PropertyInfo(
        description=metadata.get("description") or "No description available",
        units=metadata.get("unit") or "Unknown",
        conversion_factor=conversion_factor,
        data_type=metadata.get("data_type") or "numeric",
        methodology=metadata.get("methodology") or "Unknown",
    )


class SoilAnalysisService:
    """Runs the fetch, aggregate, derive and assemble pipeline for one location.

    The service holds no per-request state; one instance can serve many
    concurrent analyses.
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        provider: SoilPropertyProviderBase | None = None,
    ):
        self.settings = settings if settings is not None else get_settings()
        self.provider = (
            provider if provider is not None else ISDASoilProvider(self.settings.soil_api)
        )
        logger.info(f"Initialized SoilAnalysisService with provider {self.provider.name}")

    async def analyze(
        self,
        latitude: float | None = None,
        longitude: float | None = None,
        depths: str | Iterable[str] | None = None,
        include_raw: bool = False,
    ) -> SoilAnalysisReport:
        """Analyze the soil profile at a location.

        Args:
            latitude: Latitude in decimal degrees (configured default if None)
            longitude: Longitude in decimal degrees (configured default if None)
            depths: Depth layers to fetch (configured defaults if empty)
            include_raw: Attach the layer catalogue and every per-call outcome

        Returns:
            Assembled report; call ``to_response()`` for the JSON payload

        Raises:
            InvalidLocationError: If coordinates are out of range
            ConfigurationError: If provider credentials are missing
            AuthenticationError: If the provider rejects the login
            SoilDataError: If the layer catalogue cannot be retrieved
        """
        defaults = self.settings.defaults
        lat = defaults.latitude if latitude is None else latitude
        lon = defaults.longitude if longitude is None else longitude
        self.provider.validate_coordinates(lat, lon)

        depth_layers = parse_depths(depths) or list(defaults.depth_layers)

        logger.info(f"Fetching comprehensive soil data for coordinates: {lat}, {lon}")

        token = await asyncio.to_thread(self.provider.authenticate)
        layers = await asyncio.to_thread(self.provider.fetch_layers, token)
        metadata = self.provider.property_metadata(layers)
        properties = list(metadata)

        logger.info(
            f"Found {len(properties)} soil properties across {len(depth_layers)} depth layers"
        )

        gathered = await gather_property_grid(
            self.provider,
            token,
            lat,
            lon,
            properties,
            depth_layers,
            metadata=metadata,
            max_concurrency=self.settings.soil_api.max_concurrency,
        )
        grid = gathered.grid

        data_quality = assess_data_quality(
            grid, properties, depth_layers, failed_requests=len(gathered.failed)
        )

        raw = None
        if include_raw:
            raw = {
                "layersMetadata": layers,
                "individualMeasurements": [o.to_payload() for o in gathered.outcomes],
            }

        return SoilAnalysisReport(
            metadata=AnalysisMetadata(
                location=Location(latitude=lat, longitude=lon),
                data_source=self.settings.soil_api.data_source,
                properties_fetched=len(properties),
                depth_layers=depth_layers,
                total_data_points=gathered.populated_cells,
                data_completeness=data_quality.completeness,
            ),
            grid=grid,
            analysis=calculate_comprehensive_analysis(grid),
            classification=perform_soil_classification(grid),
            suitability=calculate_agricultural_suitability(grid),
            environmental=get_environmental_context(self.settings.environmental_context),
            data_quality=data_quality,
            temporal=get_temporal_context(lat),
            property_metadata={
                name: normalize_property_info(meta) for name, meta in metadata.items()
            },
            raw=raw,
        )

    def analyze_location(
        self,
        latitude: float | None = None,
        longitude: float | None = None,
        depths: str | Iterable[str] | None = None,
        include_raw: bool = False,
    ) -> SoilAnalysisReport:
        """Blocking wrapper around ``analyze`` for synchronous callers."""
        return asyncio.run(self.analyze(latitude, longitude, depths, include_raw))

    def describe_properties(self) -> dict[str, PropertyInfo]:
        """List the properties the provider advertises, with their metadata."""
        token = self.provider.authenticate()
        metadata = self.provider.property_metadata(self.provider.fetch_layers(token))
        return {name: normalize_property_info(meta) for name, meta in metadata.items()}

    def get_provider_status(self) -> dict[str, Any]:
        return {
            "name": self.provider.name,
            "coverage": self.provider.coverage_description,
            "base_url": self.settings.soil_api.base_url,
            "credentials_configured": bool(
                self.settings.soil_api.username and self.settings.soil_api.password
            ),
            "max_concurrency": self.settings.soil_api.max_concurrency,
        }

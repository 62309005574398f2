"""Pydantic models for soil property measurements and derived analysis.

Every model serializes with camelCase aliases (``textureClass``,
``scaledValue``...) so the JSON payload keeps the field names the dashboard
consumes. Optional sub-records are ``None`` when the grid lacks the inputs
they need and are dropped from the payload with ``exclude_none``.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

TOPSOIL_DEPTH = "0-5"


class CamelModel(BaseModel):
    """Base model emitting camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self, exclude_none: bool = True) -> dict[str, Any]:
        """Dump to a JSON-compatible dict using aliases."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=exclude_none)


# ---------------------------------------------------------------------------
# Fetch results
# ---------------------------------------------------------------------------


class PropertyMeasurement(CamelModel):
    """One (property, depth) observation returned by the soil provider."""

    model_config = ConfigDict(frozen=True)

    value: float = Field(description="Raw value as reported by the provider")
    unit: str | None = Field(None, description="Unit of the raw value")
    confidence: Any = Field(None, description="Provider confidence, if reported")
    method: str = Field("unknown", description="Measurement or prediction method")
    conversion_factor: float = Field(
        1.0, description="Documented factor turning the raw value into units"
    )
    scaled_value: float = Field(description="value * conversion_factor")


class FetchOutcome(CamelModel):
    """Result of a single property fetch, successful or not."""

    property_name: str = Field(alias="property")
    depth: str
    success: bool
    data: PropertyMeasurement | None = None
    error: str | None = None

    @classmethod
    def ok(
        cls, property_name: str, depth: str, data: PropertyMeasurement
    ) -> "FetchOutcome":
        return cls(property=property_name, depth=depth, success=True, data=data)

    @classmethod
    def failed(cls, property_name: str, depth: str, error: str) -> "FetchOutcome":
        return cls(property=property_name, depth=depth, success=False, error=error)


# property -> depth -> measurement
PropertyGrid = dict[str, dict[str, PropertyMeasurement]]


class PropertyInfo(CamelModel):
    """Provider metadata for an advertised soil property."""

    description: str = "No description available"
    units: str = "Unknown"
    conversion_factor: float = 1.0
    data_type: str = "numeric"
    methodology: str = "Unknown"


# ---------------------------------------------------------------------------
# Physical
# ---------------------------------------------------------------------------


class TextureAnalysis(CamelModel):
    clay: float
    sand: float
    silt: float
    texture_class: str
    texture_index: float = Field(description="Fineness index (clay+silt)/(sand+1)")
    structure_stability: float


class DensityLayer(CamelModel):
    depth: str
    bulk_density: float
    compaction: str


class DensityAnalysis(CamelModel):
    profile: list[DensityLayer]
    average_density: float
    compaction_risk: str


class PhysicalAnalysis(CamelModel):
    texture: TextureAnalysis | None = None
    density: DensityAnalysis | None = None


# ---------------------------------------------------------------------------
# Chemical
# ---------------------------------------------------------------------------


class AcidityLayer(CamelModel):
    depth: str
    ph: float = Field(alias="pH")
    acidity_class: str


class AcidityAnalysis(CamelModel):
    profile: list[AcidityLayer]
    average_ph: float = Field(alias="averagePH")
    ph_variation: float = Field(alias="pHVariation")
    limiting_factor: bool


class NutrientLayer(CamelModel):
    depth: str
    concentration: float
    adequacy_level: str


class NutrientAnalysis(CamelModel):
    profile: list[NutrientLayer]
    average_level: float
    deficiency_risk: bool
    distribution: str


class CarbonLayer(CamelModel):
    depth: str
    carbon_content: float
    organic_matter: float
    carbon_class: str


class CarbonAnalysis(CamelModel):
    profile: list[CarbonLayer]
    total_carbon: float
    average_om: float = Field(alias="averageOM")
    carbon_sequestration_potential: str
    soil_health: str


class ChemicalAnalysis(CamelModel):
    acidity: AcidityAnalysis | None = None
    nutrients: dict[str, NutrientAnalysis] = Field(default_factory=dict)
    carbon_content: CarbonAnalysis | None = None


# ---------------------------------------------------------------------------
# Biological
# ---------------------------------------------------------------------------


class OrganicMatterAnalysis(CamelModel):
    carbon_nitrogen_ratio: float | None = None
    organic_matter_quality: str
    decomposition_rate: str
    biological_activity_index: float


class BiologicalAnalysis(CamelModel):
    organic_matter: OrganicMatterAnalysis | None = None


# ---------------------------------------------------------------------------
# Hydrological
# ---------------------------------------------------------------------------


class WaterRetention(CamelModel):
    field_capacity: float
    wilting_point: float
    available_water: float
    water_holding_class: str


class Infiltration(CamelModel):
    rate: str
    surface_runoff_risk: str
    permeability_class: str


class HydrologicalAnalysis(CamelModel):
    water_retention: WaterRetention | None = None
    infiltration: Infiltration | None = None


# ---------------------------------------------------------------------------
# Structural
# ---------------------------------------------------------------------------


class AggregationAnalysis(CamelModel):
    stability_index: float
    structural_quality: str
    erosion_resistance: str


class CompactionLayer(CamelModel):
    depth: str
    density: float


class CompactionAnalysis(CamelModel):
    compaction_layers: list[CompactionLayer]
    root_penetration_barriers: str
    overall_compaction_risk: str


class StructuralAnalysis(CamelModel):
    aggregation: AggregationAnalysis | None = None
    compaction: CompactionAnalysis | None = None


class DerivedAnalysis(CamelModel):
    """The five independent analysis groups."""

    physical: PhysicalAnalysis
    chemical: ChemicalAnalysis
    biological: BiologicalAnalysis
    hydrological: HydrologicalAnalysis
    structural: StructuralAnalysis


# ---------------------------------------------------------------------------
# Classification and suitability
# ---------------------------------------------------------------------------


class TexturalClassification(CamelModel):
    primary_class: str
    secondary_characteristics: list[str]
    workability: str
    drought_susceptibility: str


class FertilityClassification(CamelModel):
    overall_rating: str
    limiting_factors: list[str]
    management_needs: list[str]
    productivity_potential: str


class SoilClassification(CamelModel):
    textural: TexturalClassification | None = None
    fertility: FertilityClassification | None = None


class CropSuitability(CamelModel):
    overall: str = "unknown"
    score: int | None = None
    limitations: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class LandUseCapability(CamelModel):
    capability_class: str = Field(alias="class")
    limitations: list[str]
    conservation_needs: list[str]
    intensification_potential: str


class AgriculturalSuitability(CamelModel):
    crop_suitability: dict[str, CropSuitability]
    land_use_capability: LandUseCapability


# ---------------------------------------------------------------------------
# Context and quality
# ---------------------------------------------------------------------------


class TemperatureRange(CamelModel):
    minimum: float = Field(alias="min")
    maximum: float = Field(alias="max")


class ClimateContext(CamelModel):
    zone: str
    average_rainfall: float | None = Field(None, description="mm per year")
    rainy_season_months: list[str] = Field(default_factory=list)
    temperature_range: TemperatureRange | None = None
    frost_risk: str | None = None


class TopographicContext(CamelModel):
    elevation: float | None = Field(None, description="metres above sea level")
    slope: str | None = None
    aspect: str | None = None
    drainage_class: str | None = None


class HydrologicContext(CamelModel):
    watershed_position: str | None = None
    flooding_risk: str | None = None
    groundwater_depth: str | None = None


class EcologicalContext(CamelModel):
    biome: str | None = None
    ecoregion: str | None = None
    natural_vegetation: str | None = None
    biodiversity_importance: str | None = None


class EnvironmentalContext(CamelModel):
    climate: ClimateContext | None = None
    topography: TopographicContext | None = None
    hydrology: HydrologicContext | None = None
    ecology: EcologicalContext | None = None


class SeasonalContext(CamelModel):
    season: str
    hemisphere: str
    agricultural_season: str
    growing_degree_days: str = "requires temperature data"
    planting_window: str


class TemporalContext(CamelModel):
    sampling_date: datetime
    season: SeasonalContext
    data_vintage: str = "current"


class DataQuality(CamelModel):
    completeness: float = Field(ge=0.0, le=1.0)
    total_data_points: int = Field(description="Populated (property, depth) cells")
    expected_data_points: int
    failed_requests: int = 0
    missing_properties: list[str]
    data_reliability: str
    recommendations: list[str]


# ---------------------------------------------------------------------------
# Response
# ---------------------------------------------------------------------------


class Location(CamelModel):
    latitude: float
    longitude: float
    coordinate_system: str = "WGS84"


class AnalysisMetadata(CamelModel):
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    location: Location
    data_source: str
    properties_fetched: int
    depth_layers: list[str]
    total_data_points: int
    data_completeness: float
    processing_version: str = "2.0"


class SoilAnalysisReport(BaseModel):
    """Everything the response assembler merges for one request."""

    metadata: AnalysisMetadata
    grid: PropertyGrid
    analysis: DerivedAnalysis
    classification: SoilClassification
    suitability: AgriculturalSuitability
    environmental: EnvironmentalContext
    data_quality: DataQuality
    temporal: TemporalContext
    property_metadata: dict[str, PropertyInfo]
    raw: dict[str, Any] | None = None

    def to_response(self) -> dict[str, Any]:
        """Build the JSON response body."""
        response: dict[str, Any] = {
            "metadata": self.metadata.to_payload(),
            "soilProperties": {
                prop: {
                    depth: measurement.to_payload(exclude_none=False)
                    for depth, measurement in layers.items()
                }
                for prop, layers in self.grid.items()
            },
            "analysis": self.analysis.to_payload(),
            "classification": self.classification.to_payload(),
            "suitability": self.suitability.to_payload(),
            "environmental": self.environmental.to_payload(),
            "dataQuality": self.data_quality.to_payload(),
            "temporal": self.temporal.to_payload(),
            "propertyMetadata": {
                name: info.to_payload() for name, info in self.property_metadata.items()
            },
        }

        if self.raw is not None:
            response["raw"] = self.raw

        return response

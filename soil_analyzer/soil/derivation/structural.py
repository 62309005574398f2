"""Aggregate stability and compaction across the density profile."""

from soil_analyzer.soil.derivation.common import (
    BULK_DENSITY,
    CLAY,
    ORGANIC_CARBON,
    SILT,
    has_properties,
    mean,
    profile,
    topsoil,
    topsoil_organic_matter,
)
from soil_analyzer.soil.derivation.physical import COMPACTION_HIGH, COMPACTION_MODERATE
from soil_analyzer.soil.models import (
    AggregationAnalysis,
    CompactionAnalysis,
    CompactionLayer,
    PropertyGrid,
    StructuralAnalysis,
)

# Layers starting at these depths count as surface for root restriction
SURFACE_DEPTH_PREFIXES = ("0-", "5-")


def aggregate_stability(clay: float, silt: float, organic_matter: float) -> float:
    return (organic_matter * 20 + clay * 0.5 + silt * 0.3) / 100


def classify_structural_quality(stability: float) -> str:
    if stability > 0.7:
        return "excellent structure"
    if stability > 0.5:
        return "good structure"
    if stability > 0.3:
        return "moderate structure"
    return "poor structure"


def erosion_resistance(clay: float, silt: float, organic_matter: float) -> str:
    if organic_matter > 3 and clay > 20:
        return "high erosion resistance"
    if silt > 60:
        return "low erosion resistance"
    return "moderate erosion resistance"


def identify_compaction_layers(layers: list[tuple[str, float]]) -> list[CompactionLayer]:
    return [
        CompactionLayer(depth=depth, density=density)
        for depth, density in layers
        if density > COMPACTION_HIGH
    ]


def assess_root_barriers(barriers: list[CompactionLayer]) -> str:
    if any(b.depth.startswith(SURFACE_DEPTH_PREFIXES) for b in barriers):
        return "surface compaction - severe root restriction"
    if barriers:
        return "subsurface compaction - moderate root restriction"
    return "no significant root barriers"


def compaction_risk(average_density: float) -> str:
    if average_density > COMPACTION_HIGH:
        return "high compaction risk"
    if average_density > COMPACTION_MODERATE:
        return "moderate compaction risk"
    return "low compaction risk"


def analyze_aggregation(grid: PropertyGrid) -> AggregationAnalysis | None:
    if not has_properties(grid, CLAY, SILT, ORGANIC_CARBON):
        return None

    clay = topsoil(grid, CLAY)
    silt = topsoil(grid, SILT)
    organic_matter = topsoil_organic_matter(grid)
    stability = aggregate_stability(clay, silt, organic_matter)

    return AggregationAnalysis(
        stability_index=stability,
        structural_quality=classify_structural_quality(stability),
        erosion_resistance=erosion_resistance(clay, silt, organic_matter),
    )


def analyze_compaction(grid: PropertyGrid) -> CompactionAnalysis | None:
    layers = profile(grid, BULK_DENSITY)
    if not layers:
        return None

    barriers = identify_compaction_layers(layers)

    return CompactionAnalysis(
        compaction_layers=barriers,
        root_penetration_barriers=assess_root_barriers(barriers),
        overall_compaction_risk=compaction_risk(mean(d for _, d in layers)),
    )


def calculate_structural_properties(grid: PropertyGrid) -> StructuralAnalysis:
    return StructuralAnalysis(
        aggregation=analyze_aggregation(grid),
        compaction=analyze_compaction(grid),
    )

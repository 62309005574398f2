"""Physical properties: texture and bulk density."""

from soil_analyzer.soil.derivation.common import (
    BULK_DENSITY,
    CLAY,
    SAND,
    SILT,
    has_properties,
    mean,
    profile,
    topsoil,
)
from soil_analyzer.soil.models import (
    DensityAnalysis,
    DensityLayer,
    PhysicalAnalysis,
    PropertyGrid,
    TextureAnalysis,
)

COMPACTION_HIGH = 1.6
COMPACTION_MODERATE = 1.4


def determine_texture_class(clay: float, sand: float, silt: float) -> str:
    """Classify texture from clay/sand/silt percentages.

    Rules are checked in order and the first match wins.
    """
    if clay > 40:
        return "Clay"
    if 27 < clay <= 40 and sand > 45:
        return "Sandy Clay"
    if 27 < clay <= 40 and sand <= 45:
        return "Silty Clay"
    if 20 < clay <= 27 and sand > 45:
        return "Sandy Clay Loam"
    if 20 < clay <= 27 and sand <= 45:
        return "Silty Clay Loam"
    if clay <= 20 and silt >= 50 and sand <= 52:
        return "Silt"
    if clay <= 20 and silt >= 50 and sand > 52:
        return "Silt Loam"
    if clay <= 20 and silt < 50 and sand >= 70:
        return "Sandy Loam"
    if clay <= 20 and silt < 50 and sand < 70:
        return "Loam"
    return "Unknown"


def texture_index(clay: float, sand: float, silt: float) -> float:
    """Fineness index: fine fractions over coarse."""
    return (clay + silt) / (sand + 1)


def structure_stability(clay: float, silt: float) -> float:
    return (clay * 0.6 + silt * 0.3) / 100


def classify_compaction(bulk_density: float) -> str:
    if bulk_density > COMPACTION_HIGH:
        return "high"
    if bulk_density > COMPACTION_MODERATE:
        return "moderate"
    return "low"


def analyze_texture(grid: PropertyGrid) -> TextureAnalysis | None:
    if not has_properties(grid, CLAY, SAND, SILT):
        return None

    clay = topsoil(grid, CLAY)
    sand = topsoil(grid, SAND)
    silt = topsoil(grid, SILT)

    return TextureAnalysis(
        clay=clay,
        sand=sand,
        silt=silt,
        texture_class=determine_texture_class(clay, sand, silt),
        texture_index=texture_index(clay, sand, silt),
        structure_stability=structure_stability(clay, silt),
    )


def analyze_density(grid: PropertyGrid) -> DensityAnalysis | None:
    layers = profile(grid, BULK_DENSITY)
    if not layers:
        return None

    density_profile = [
        DensityLayer(depth=depth, bulk_density=value, compaction=classify_compaction(value))
        for depth, value in layers
    ]

    return DensityAnalysis(
        profile=density_profile,
        average_density=mean(layer.bulk_density for layer in density_profile),
        compaction_risk="high"
        if any(layer.bulk_density > COMPACTION_HIGH for layer in density_profile)
        else "low",
    )


def calculate_physical_properties(grid: PropertyGrid) -> PhysicalAnalysis:
    return PhysicalAnalysis(texture=analyze_texture(grid), density=analyze_density(grid))

"""Biological indicators from top-soil carbon, nitrogen and pH."""

from soil_analyzer.soil.derivation.common import (
    NITROGEN,
    ORGANIC_CARBON,
    has_properties,
    topsoil,
    topsoil_organic_matter,
    topsoil_ph,
)
from soil_analyzer.soil.models import (
    BiologicalAnalysis,
    OrganicMatterAnalysis,
    PropertyGrid,
)


def carbon_nitrogen_ratio(carbon: float, nitrogen: float) -> float | None:
    return carbon / nitrogen if nitrogen > 0 else None


def classify_organic_matter_quality(carbon: float, nitrogen: float) -> str:
    if nitrogen == 0:
        return "insufficient data"

    ratio = carbon / nitrogen
    if ratio < 15:
        return "high quality - rapid decomposition"
    if ratio < 25:
        return "moderate quality"
    return "low quality - slow decomposition"


def estimate_decomposition_rate(carbon: float, nitrogen: float) -> str:
    if nitrogen == 0:
        return "unknown"

    ratio = carbon / nitrogen
    if ratio < 20:
        return "rapid"
    if ratio < 30:
        return "moderate"
    return "slow"


def biological_activity_index(organic_matter: float, ph: float) -> float:
    """Organic matter score weighted by pH, clamped to [0, 100]."""
    index = organic_matter * 10

    if 6 <= ph <= 8:
        index *= 1.2
    elif ph < 5.5 or ph > 8.5:
        index *= 0.8

    return max(0.0, min(index, 100.0))


def analyze_organic_matter(grid: PropertyGrid) -> OrganicMatterAnalysis | None:
    if not has_properties(grid, ORGANIC_CARBON, NITROGEN):
        return None

    carbon = topsoil(grid, ORGANIC_CARBON)
    nitrogen = topsoil(grid, NITROGEN)

    return OrganicMatterAnalysis(
        carbon_nitrogen_ratio=carbon_nitrogen_ratio(carbon, nitrogen),
        organic_matter_quality=classify_organic_matter_quality(carbon, nitrogen),
        decomposition_rate=estimate_decomposition_rate(carbon, nitrogen),
        biological_activity_index=biological_activity_index(
            topsoil_organic_matter(grid), topsoil_ph(grid)
        ),
    )


def calculate_biological_properties(grid: PropertyGrid) -> BiologicalAnalysis:
    return BiologicalAnalysis(organic_matter=analyze_organic_matter(grid))

"""Data quality scoring of a PropertyGrid against what was requested."""

from collections.abc import Sequence

from soil_analyzer.soil.derivation.common import CLAY, ORGANIC_CARBON, PH, SAND, SILT, mean
from soil_analyzer.soil.models import DataQuality, PropertyGrid


def grid_completeness(grid: PropertyGrid, depths: Sequence[str]) -> float:
    """Mean, over properties present in the grid, of depths present / requested.

    Absent properties do not lower the score; they are reported separately as
    missing. An empty grid scores 0.0.
    """
    if not grid or not depths:
        return 0.0
    return mean(len(layers) / len(depths) for layers in grid.values())


def classify_reliability(completeness: float) -> str:
    if completeness > 0.8:
        return "high"
    if completeness > 0.6:
        return "moderate"
    return "low"


def data_quality_recommendations(completeness: float, grid: PropertyGrid) -> list[str]:
    recommendations = []

    if completeness < 0.7:
        recommendations.append(
            "Consider additional soil sampling to improve data completeness"
        )
    if PH not in grid:
        recommendations.append("pH testing is critical for soil management decisions")
    if ORGANIC_CARBON not in grid:
        recommendations.append(
            "Organic carbon analysis recommended for soil health assessment"
        )
    if not all(name in grid for name in (CLAY, SAND, SILT)):
        recommendations.append(
            "Complete texture analysis needed for proper soil classification"
        )

    recommendations.append(
        "Validate API data with local soil testing when making management decisions"
    )
    return recommendations


def assess_data_quality(
    grid: PropertyGrid,
    properties: Sequence[str],
    depths: Sequence[str],
    failed_requests: int = 0,
) -> DataQuality:
    """Score how much of the (property x depth) matrix was populated.

    Args:
        grid: Folded measurements
        properties: Properties that were requested
        depths: Depth layers that were requested
        failed_requests: Number of per-call failures during the fan-out

    Returns:
        DataQuality record
    """
    completeness = grid_completeness(grid, depths)

    return DataQuality(
        completeness=completeness,
        total_data_points=sum(len(layers) for layers in grid.values()),
        expected_data_points=len(properties) * len(depths),
        failed_requests=failed_requests,
        missing_properties=[prop for prop in properties if prop not in grid],
        data_reliability=classify_reliability(completeness),
        recommendations=data_quality_recommendations(completeness, grid),
    )

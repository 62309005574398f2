"""Water retention and infiltration estimates.

Pedotransfer-style linear estimates from top-soil clay, sand and organic
matter. Values are volumetric fractions, not calibrated measurements.
"""

from soil_analyzer.soil.derivation.common import (
    CLAY,
    ORGANIC_CARBON,
    SAND,
    has_properties,
    topsoil,
    topsoil_organic_matter,
)
from soil_analyzer.soil.models import (
    HydrologicalAnalysis,
    Infiltration,
    PropertyGrid,
    WaterRetention,
)


def estimate_field_capacity(clay: float, sand: float, organic_matter: float) -> float:
    return (clay * 0.4 + organic_matter * 0.8 + (100 - sand) * 0.2) / 100


def estimate_wilting_point(clay: float, sand: float) -> float:
    return (clay * 0.25 + (100 - sand) * 0.1) / 100


def classify_water_holding(available_water: float) -> str:
    if available_water > 0.25:
        return "high water holding capacity"
    if available_water > 0.15:
        return "moderate water holding capacity"
    return "low water holding capacity"


def estimate_infiltration_rate(clay: float, sand: float) -> str:
    if sand > 70:
        return "rapid infiltration"
    if sand > 50:
        return "moderate to rapid infiltration"
    if clay < 30:
        return "moderate infiltration"
    return "slow infiltration"


def assess_runoff_risk(clay: float, sand: float, organic_matter: float) -> str:
    if clay > 40 and organic_matter < 2:
        return "high runoff risk"
    if sand > 70:
        return "low runoff risk"
    return "moderate runoff risk"


def classify_permeability(sand: float, clay: float) -> str:
    if sand > 70:
        return "high permeability"
    if clay > 40:
        return "low permeability"
    return "moderate permeability"


def calculate_hydrological_properties(grid: PropertyGrid) -> HydrologicalAnalysis:
    if not has_properties(grid, CLAY, SAND, ORGANIC_CARBON):
        return HydrologicalAnalysis()

    clay = topsoil(grid, CLAY)
    sand = topsoil(grid, SAND)
    organic_matter = topsoil_organic_matter(grid)

    field_capacity = estimate_field_capacity(clay, sand, organic_matter)
    wilting_point = estimate_wilting_point(clay, sand)
    available_water = field_capacity - wilting_point

    return HydrologicalAnalysis(
        water_retention=WaterRetention(
            field_capacity=field_capacity,
            wilting_point=wilting_point,
            available_water=available_water,
            water_holding_class=classify_water_holding(available_water),
        ),
        infiltration=Infiltration(
            rate=estimate_infiltration_rate(clay, sand),
            surface_runoff_risk=assess_runoff_risk(clay, sand, organic_matter),
            permeability_class=classify_permeability(sand, clay),
        ),
    )

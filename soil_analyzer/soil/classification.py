"""Textural and fertility classification of the top-soil layer."""

from soil_analyzer.soil.derivation.common import (
    CLAY,
    ORGANIC_CARBON,
    PH,
    SAND,
    SILT,
    has_properties,
    topsoil,
    topsoil_organic_matter,
    topsoil_ph,
)
from soil_analyzer.soil.derivation.physical import determine_texture_class
from soil_analyzer.soil.models import (
    FertilityClassification,
    PropertyGrid,
    SoilClassification,
    TexturalClassification,
)

HIGH_PRODUCTIVITY_TEXTURES = {"Loam", "Clay Loam", "Silt Loam"}


def texture_characteristics(clay: float, sand: float, silt: float) -> list[str]:
    characteristics = []

    if clay > 35:
        characteristics.append("plastic when wet")
    if sand > 60:
        characteristics.append("gritty texture")
    if silt > 50:
        characteristics.append("smooth, silky texture")
    if clay < 15 and sand > 70:
        characteristics.append("loose, well-draining")

    return characteristics


def assess_workability(clay: float, sand: float) -> str:
    if clay > 40:
        return "difficult to work when wet, hard when dry"
    if sand > 70:
        return "easy to work, may be too loose"
    if 20 < clay < 35:
        return "good workability"
    return "moderate workability"


def assess_drought_susceptibility(clay: float, sand: float) -> str:
    if sand > 70:
        return "high drought susceptibility"
    if clay > 30:
        return "low drought susceptibility"
    return "moderate drought susceptibility"


def fertility_score(ph: float, organic_matter: float) -> int:
    """Points for top-soil pH and organic matter, 10 to 50."""
    score = 0

    if 6 <= ph <= 7.5:
        score += 25
    elif 5.5 <= ph < 8:
        score += 15
    else:
        score += 5

    if organic_matter > 3:
        score += 25
    elif organic_matter > 1.5:
        score += 15
    else:
        score += 5

    return score


def fertility_rating_for_score(score: int) -> str:
    # TODO: add nitrogen/phosphorus/potassium points; pH and organic matter
    # alone top out at 50, so only the low band is reachable today
    if score > 70:
        return "high fertility"
    if score > 50:
        return "moderate fertility"
    return "low fertility"


def calculate_fertility_rating(grid: PropertyGrid) -> str:
    return fertility_rating_for_score(
        fertility_score(topsoil_ph(grid), topsoil_organic_matter(grid))
    )


def identify_limiting_factors(grid: PropertyGrid) -> list[str]:
    factors = []
    ph = topsoil_ph(grid)

    if ph < 5.5:
        factors.append("soil acidity")
    if ph > 8.5:
        factors.append("soil alkalinity")
    if topsoil_organic_matter(grid) < 1:
        factors.append("low organic matter")

    return factors


def assess_management_needs(grid: PropertyGrid) -> list[str]:
    needs = []
    ph = topsoil_ph(grid)

    if ph < 5.5:
        needs.append("lime application needed")
    if ph > 8.5:
        needs.append("acidifying amendments needed")
    if topsoil_organic_matter(grid) < 2:
        needs.append("organic matter improvement needed")

    return needs


def topsoil_texture_class(grid: PropertyGrid) -> str:
    if not has_properties(grid, CLAY, SAND, SILT):
        return "Unknown"
    return determine_texture_class(
        topsoil(grid, CLAY), topsoil(grid, SAND), topsoil(grid, SILT)
    )


def productivity_potential(fertility: str, texture_class: str) -> str:
    if fertility == "high fertility" and texture_class in HIGH_PRODUCTIVITY_TEXTURES:
        return "high productivity potential"
    if fertility == "moderate fertility":
        return "moderate productivity potential"
    return "limited productivity potential"


def classify_texture_profile(grid: PropertyGrid) -> TexturalClassification | None:
    if not has_properties(grid, CLAY, SAND, SILT):
        return None

    clay = topsoil(grid, CLAY)
    sand = topsoil(grid, SAND)
    silt = topsoil(grid, SILT)

    return TexturalClassification(
        primary_class=determine_texture_class(clay, sand, silt),
        secondary_characteristics=texture_characteristics(clay, sand, silt),
        workability=assess_workability(clay, sand),
        drought_susceptibility=assess_drought_susceptibility(clay, sand),
    )


def classify_fertility(grid: PropertyGrid) -> FertilityClassification | None:
    if not has_properties(grid, PH, ORGANIC_CARBON):
        return None

    rating = calculate_fertility_rating(grid)

    return FertilityClassification(
        overall_rating=rating,
        limiting_factors=identify_limiting_factors(grid),
        management_needs=assess_management_needs(grid),
        productivity_potential=productivity_potential(rating, topsoil_texture_class(grid)),
    )


def perform_soil_classification(grid: PropertyGrid) -> SoilClassification:
    return SoilClassification(
        textural=classify_texture_profile(grid),
        fertility=classify_fertility(grid),
    )

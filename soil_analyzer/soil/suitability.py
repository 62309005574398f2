"""Crop suitability and land-use capability."""

from typing import NamedTuple

from soil_analyzer.soil.classification import calculate_fertility_rating
from soil_analyzer.soil.derivation.common import (
    CLAY,
    topsoil,
    topsoil_organic_matter,
    topsoil_ph,
)
from soil_analyzer.soil.models import (
    AgriculturalSuitability,
    CropSuitability,
    LandUseCapability,
    PropertyGrid,
)


class CropRequirement(NamedTuple):
    min_ph: float
    max_ph: float
    min_organic_matter: float


CROP_REQUIREMENTS: dict[str, CropRequirement] = {
    "maize": CropRequirement(5.8, 7.8, 1.5),
    "wheat": CropRequirement(6.0, 8.0, 1.0),
    "soybeans": CropRequirement(6.0, 7.5, 2.0),
    "vegetables": CropRequirement(6.0, 7.5, 2.5),
    "pasture": CropRequirement(5.5, 8.0, 1.0),
    "forestry": CropRequirement(5.0, 8.5, 1.0),
}


def assess_crop_suitability(crop: str, grid: PropertyGrid) -> CropSuitability:
    """Score a crop from top-soil pH and organic matter.

    pH inside the crop's band scores 40 (20 otherwise); organic matter at or
    above its minimum scores 30 (15 otherwise). Unknown crops stay "unknown".
    """
    requirement = CROP_REQUIREMENTS.get(crop)
    if requirement is None:
        return CropSuitability()

    ph = topsoil_ph(grid)
    organic_matter = topsoil_organic_matter(grid)
    limitations: list[str] = []
    recommendations: list[str] = []
    score = 0

    if requirement.min_ph <= ph <= requirement.max_ph:
        score += 40
    else:
        too_low = ph < requirement.min_ph
        limitations.append(
            f"pH {'too low' if too_low else 'too high'} for optimal {crop} growth"
        )
        recommendations.append(
            "apply agricultural lime to raise pH"
            if too_low
            else "apply acidifying amendments such as elemental sulfur to lower pH"
        )
        score += 20

    if organic_matter >= requirement.min_organic_matter:
        score += 30
    else:
        limitations.append(f"organic matter too low for optimal {crop} growth")
        recommendations.append("incorporate compost or manure to build organic matter")
        score += 15

    if score > 60:
        overall = "suitable"
    elif score > 40:
        overall = "moderately suitable"
    else:
        overall = "marginally suitable"

    return CropSuitability(
        overall=overall,
        score=score,
        limitations=limitations,
        recommendations=recommendations,
    )


def land_use_class(fertility: str, clay: float) -> str:
    if fertility == "high fertility" and 15 < clay < 45:
        return "Class I - Prime agricultural land"
    if fertility == "moderate fertility":
        return "Class II - Good agricultural land"
    return "Class III - Fair agricultural land"


def identify_land_use_limitations(grid: PropertyGrid) -> list[str]:
    limitations = []
    clay = topsoil(grid, CLAY)

    if clay > 50:
        limitations.append("heavy clay texture")
    if clay < 10:
        limitations.append("very sandy texture")

    return limitations


def assess_conservation_needs(grid: PropertyGrid) -> list[str]:
    if topsoil_organic_matter(grid) < 2:
        return ["erosion control measures needed"]
    return []


def intensification_potential(fertility: str) -> str:
    if fertility == "high fertility":
        return "high intensification potential"
    if fertility == "moderate fertility":
        return "moderate intensification potential"
    return "limited intensification potential"


def calculate_agricultural_suitability(grid: PropertyGrid) -> AgriculturalSuitability:
    fertility = calculate_fertility_rating(grid)

    return AgriculturalSuitability(
        crop_suitability={
            crop: assess_crop_suitability(crop, grid) for crop in CROP_REQUIREMENTS
        },
        land_use_capability=LandUseCapability(
            capability_class=land_use_class(fertility, topsoil(grid, CLAY)),
            limitations=identify_land_use_limitations(grid),
            conservation_needs=assess_conservation_needs(grid),
            intensification_potential=intensification_potential(fertility),
        ),
    )

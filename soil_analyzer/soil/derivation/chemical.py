"""Chemical properties: acidity, nutrients and organic carbon."""

from soil_analyzer.soil.derivation.common import (
    ORGANIC_CARBON,
    ORGANIC_MATTER_FACTOR,
    PH,
    mean,
    profile,
)
from soil_analyzer.soil.models import (
    AcidityAnalysis,
    AcidityLayer,
    CarbonAnalysis,
    CarbonLayer,
    ChemicalAnalysis,
    NutrientAnalysis,
    NutrientLayer,
    PropertyGrid,
)

NUTRIENTS = ("nitrogen", "phosphorus", "potassium", "calcium", "magnesium", "sulfur")

# (low, adequate) thresholds in provider units
NUTRIENT_THRESHOLDS: dict[str, tuple[float, float]] = {
    "nitrogen": (20, 40),
    "phosphorus": (10, 25),
    "potassium": (100, 200),
}

ACID_LIMIT = 5.5
ALKALINE_LIMIT = 8.5


def classify_acidity(ph: float) -> str:
    if ph < 4.5:
        return "extremely acidic"
    if ph < 5.5:
        return "strongly acidic"
    if ph < 6.5:
        return "moderately acidic"
    if ph < 7.3:
        return "neutral"
    if ph < 8.5:
        return "moderately alkaline"
    return "strongly alkaline"


def classify_nutrient_level(nutrient: str, value: float) -> str:
    """Adequacy of a nutrient concentration; "unknown" when no thresholds exist."""
    thresholds = NUTRIENT_THRESHOLDS.get(nutrient)
    if thresholds is None:
        return "unknown"

    low, adequate = thresholds
    if value < low:
        return "deficient"
    if value < adequate:
        return "marginal"
    return "adequate"


def classify_carbon(carbon_content: float) -> str:
    if carbon_content < 0.6:
        return "very low"
    if carbon_content < 1.2:
        return "low"
    if carbon_content < 1.8:
        return "moderate"
    if carbon_content < 3.0:
        return "high"
    return "very high"


def nutrient_distribution(layers: list[NutrientLayer]) -> str:
    """Compare the shallowest and deepest layer concentrations."""
    if len(layers) < 2:
        return "insufficient data"

    top = layers[0].concentration
    bottom = layers[-1].concentration

    if top > bottom * 1.5:
        return "surface concentrated"
    if bottom > top * 1.5:
        return "subsurface concentrated"
    return "uniform distribution"


def carbon_sequestration_potential(surface_carbon: float) -> str:
    if surface_carbon > 3:
        return "high sequestration potential"
    if surface_carbon > 1.5:
        return "moderate sequestration potential"
    return "low sequestration potential"


def analyze_acidity(grid: PropertyGrid) -> AcidityAnalysis | None:
    layers = profile(grid, PH)
    if not layers:
        return None

    ph_profile = [
        AcidityLayer(depth=depth, ph=value, acidity_class=classify_acidity(value))
        for depth, value in layers
    ]
    values = [layer.ph for layer in ph_profile]

    return AcidityAnalysis(
        profile=ph_profile,
        average_ph=mean(values),
        ph_variation=max(values) - min(values),
        limiting_factor=any(v < ACID_LIMIT or v > ALKALINE_LIMIT for v in values),
    )


def analyze_nutrients(grid: PropertyGrid) -> dict[str, NutrientAnalysis]:
    nutrients: dict[str, NutrientAnalysis] = {}

    for nutrient in NUTRIENTS:
        layers = profile(grid, nutrient)
        if not layers:
            continue

        nutrient_profile = [
            NutrientLayer(
                depth=depth,
                concentration=value,
                adequacy_level=classify_nutrient_level(nutrient, value),
            )
            for depth, value in layers
        ]

        nutrients[nutrient] = NutrientAnalysis(
            profile=nutrient_profile,
            average_level=mean(layer.concentration for layer in nutrient_profile),
            deficiency_risk=any(
                layer.adequacy_level == "deficient" for layer in nutrient_profile
            ),
            distribution=nutrient_distribution(nutrient_profile),
        )

    return nutrients


def analyze_carbon(grid: PropertyGrid) -> CarbonAnalysis | None:
    layers = profile(grid, ORGANIC_CARBON)
    if not layers:
        return None

    carbon_profile = [
        CarbonLayer(
            depth=depth,
            carbon_content=value,
            organic_matter=value * ORGANIC_MATTER_FACTOR,
            carbon_class=classify_carbon(value),
        )
        for depth, value in layers
    ]
    surface = carbon_profile[0].carbon_content

    if surface > 2:
        soil_health = "good"
    elif surface > 1:
        soil_health = "moderate"
    else:
        soil_health = "poor"

    return CarbonAnalysis(
        profile=carbon_profile,
        total_carbon=sum(layer.carbon_content for layer in carbon_profile),
        average_om=mean(layer.organic_matter for layer in carbon_profile),
        carbon_sequestration_potential=carbon_sequestration_potential(surface),
        soil_health=soil_health,
    )


def calculate_chemical_properties(grid: PropertyGrid) -> ChemicalAnalysis:
    return ChemicalAnalysis(
        acidity=analyze_acidity(grid),
        nutrients=analyze_nutrients(grid),
        carbon_content=analyze_carbon(grid),
    )

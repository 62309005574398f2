"""Grid accessors shared by the derivation functions.

All derivations read scaled values. A property present in the grid but
missing at the top-soil layer reads as 0 (pH reads as neutral 7) so that a
partially populated profile still produces every dependent metric.
"""

from collections.abc import Iterable

from soil_analyzer.soil.models import TOPSOIL_DEPTH, PropertyGrid

# van Bemmelen factor: organic matter = organic carbon x 1.72
ORGANIC_MATTER_FACTOR = 1.72
NEUTRAL_PH = 7.0

CLAY = "clay"
SAND = "sand"
SILT = "silt"
BULK_DENSITY = "bdod"
PH = "phh2o"
ORGANIC_CARBON = "soc"
NITROGEN = "nitrogen"


def has_properties(grid: PropertyGrid, *names: str) -> bool:
    """True when every named property has at least one populated layer."""
    return all(grid.get(name) for name in names)


def topsoil(grid: PropertyGrid, name: str, default: float = 0.0) -> float:
    """Scaled top-soil value of a property, or ``default`` when absent."""
    measurement = grid.get(name, {}).get(TOPSOIL_DEPTH)
    if measurement is None or not measurement.scaled_value:
        return default
    return measurement.scaled_value


def topsoil_ph(grid: PropertyGrid) -> float:
    return topsoil(grid, PH, default=NEUTRAL_PH)


def topsoil_organic_matter(grid: PropertyGrid) -> float:
    return topsoil(grid, ORGANIC_CARBON) * ORGANIC_MATTER_FACTOR


def profile(grid: PropertyGrid, name: str) -> list[tuple[str, float]]:
    """(depth, scaled value) pairs of a property, shallowest first."""
    return [(depth, m.scaled_value) for depth, m in grid.get(name, {}).items()]


def mean(values: Iterable[float]) -> float:
    values = list(values)
    return sum(values) / len(values) if values else 0.0

"""Derivation engine: pure functions from a PropertyGrid to analysis records.

None of these functions touch the network or raise on missing data; a group
whose inputs are absent is simply left empty.
"""

from soil_analyzer.soil.derivation.biological import calculate_biological_properties
from soil_analyzer.soil.derivation.chemical import calculate_chemical_properties
from soil_analyzer.soil.derivation.hydrological import calculate_hydrological_properties
from soil_analyzer.soil.derivation.physical import calculate_physical_properties
from soil_analyzer.soil.derivation.structural import calculate_structural_properties
from soil_analyzer.soil.models import DerivedAnalysis, PropertyGrid


def calculate_comprehensive_analysis(grid: PropertyGrid) -> DerivedAnalysis:
    """Compute the five analysis groups for a grid."""
    return DerivedAnalysis(
        physical=calculate_physical_properties(grid),
        chemical=calculate_chemical_properties(grid),
        biological=calculate_biological_properties(grid),
        hydrological=calculate_hydrological_properties(grid),
        structural=calculate_structural_properties(grid),
    )


__all__ = [
    "calculate_biological_properties",
    "calculate_chemical_properties",
    "calculate_comprehensive_analysis",
    "calculate_hydrological_properties",
    "calculate_physical_properties",
    "calculate_structural_properties",
]

"""Soil property aggregation and agronomic analysis.

Fetches every advertised soil property on each requested depth layer from
the iSDAsoil API, folds the results into a property grid and derives:
- Physical, chemical, biological, hydrological and structural indices
- Textural and fertility classification
- Crop suitability and land-use capability
- Data quality scoring of the fetched grid
"""

from soil_analyzer.soil.service import SoilAnalysisService

__all__ = ["SoilAnalysisService"]

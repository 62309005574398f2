"""Soil Analyzer: aggregate soil properties by depth and derive agronomic indices."""

__version__ = "0.1.0"

from .soil import SoilAnalysisService

__all__ = ["SoilAnalysisService"]

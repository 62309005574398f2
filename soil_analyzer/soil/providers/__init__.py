"""Soil property providers."""

from soil_analyzer.soil.providers.base import SoilPropertyProviderBase
from soil_analyzer.soil.providers.isda import ISDASoilProvider

__all__ = ["ISDASoilProvider", "SoilPropertyProviderBase"]

"""Environmental and temporal context attached to an analysis.

Neither is measured: the environmental block is a static regional lookup
from configuration, and the temporal block is derived from the sampling date
and the hemisphere of the requested latitude.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from soil_analyzer.logging_config import get_logger
from soil_analyzer.soil.models import EnvironmentalContext, SeasonalContext, TemporalContext

logger = get_logger(__name__)

# Meteorological seasons by month for the southern hemisphere
SOUTHERN_SEASONS = {
    12: "summer", 1: "summer", 2: "summer",
    3: "autumn", 4: "autumn", 5: "autumn",
    6: "winter", 7: "winter", 8: "winter",
    9: "spring", 10: "spring", 11: "spring",
}  # fmt: skip

OPPOSITE_SEASON = {
    "summer": "winter",
    "winter": "summer",
    "autumn": "spring",
    "spring": "autumn",
}


def get_environmental_context(
    config: dict[str, dict[str, Any]] | None,
) -> EnvironmentalContext:
    """Build the environmental block from the configured regional lookup.

    Args:
        config: ``environmental_context`` section of the settings

    Returns:
        Context record; sections missing or invalid in config are omitted
    """
    if not config:
        return EnvironmentalContext()

    try:
        return EnvironmentalContext.model_validate(config)
    except ValidationError as e:
        logger.warning(f"Ignoring invalid environmental context configuration: {e}")
        return EnvironmentalContext()


def hemisphere_for(latitude: float) -> str:
    return "southern" if latitude < 0 else "northern"


def season_for(month: int, hemisphere: str) -> str:
    season = SOUTHERN_SEASONS[month]
    return season if hemisphere == "southern" else OPPOSITE_SEASON[season]


def agricultural_season(month: int, hemisphere: str) -> str:
    """Summer-rainfall growing season: October-March south, April-September north."""
    in_southern_season = month >= 10 or month <= 3
    if hemisphere == "northern":
        in_southern_season = not in_southern_season
    return "growing season" if in_southern_season else "dormant season"


def planting_window(season: str) -> str:
    if season == "spring":
        return "optimal planting window for summer crops"
    if season == "autumn":
        return "planting window for winter crops"
    return "outside primary planting windows"


def get_seasonal_context(date: datetime, latitude: float) -> SeasonalContext:
    hemisphere = hemisphere_for(latitude)
    season = season_for(date.month, hemisphere)

    return SeasonalContext(
        season=season,
        hemisphere=hemisphere,
        agricultural_season=agricultural_season(date.month, hemisphere),
        planting_window=planting_window(season),
    )


def get_temporal_context(latitude: float, now: datetime | None = None) -> TemporalContext:
    sampling_date = now or datetime.now(timezone.utc)
    return TemporalContext(
        sampling_date=sampling_date,
        season=get_seasonal_context(sampling_date, latitude),
    )

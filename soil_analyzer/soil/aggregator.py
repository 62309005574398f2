"""Concurrent fan-out of property fetches into a PropertyGrid."""

import asyncio
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from pydantic import BaseModel, Field

from soil_analyzer.logging_config import get_logger
from soil_analyzer.soil.models import FetchOutcome, PropertyGrid, PropertyMeasurement
from soil_analyzer.soil.providers.base import SoilPropertyProviderBase

logger = get_logger(__name__)


class GridResult(BaseModel):
    """Grid of successful measurements plus every per-call outcome."""

    grid: dict[str, dict[str, PropertyMeasurement]] = Field(default_factory=dict)
    outcomes: list[FetchOutcome] = Field(default_factory=list)

    @property
    def failed(self) -> list[FetchOutcome]:
        return [o for o in self.outcomes if not o.success]

    @property
    def populated_cells(self) -> int:
        return sum(len(layers) for layers in self.grid.values())


def fold_outcomes(
    outcomes: Sequence[FetchOutcome], depths: Sequence[str]
) -> PropertyGrid:
    """Index successful outcomes by property then depth.

    Depths inside each property follow the requested depth order, so the
    first entry of a profile is always the shallowest layer fetched.
    """
    order = {depth: i for i, depth in enumerate(depths)}
    grid: PropertyGrid = {}

    for outcome in outcomes:
        if outcome.success and outcome.data is not None:
            grid.setdefault(outcome.property_name, {})[outcome.depth] = outcome.data

    return {
        prop: dict(sorted(layers.items(), key=lambda kv: order.get(kv[0], len(order))))
        for prop, layers in grid.items()
    }


async def gather_property_grid(
    provider: SoilPropertyProviderBase,
    token: str,
    latitude: float,
    longitude: float,
    properties: Sequence[str],
    depths: Sequence[str],
    metadata: Mapping[str, dict[str, Any]] | None = None,
    max_concurrency: int | None = None,
) -> GridResult:
    """Fetch every (property, depth) pair concurrently and wait for all of them.

    Args:
        provider: Provider answering single (property, depth) requests
        token: Bearer token from ``provider.authenticate()``
        latitude: Latitude in decimal degrees
        longitude: Longitude in decimal degrees
        properties: Property names to fetch
        depths: Depth layer labels to fetch for each property
        metadata: Provider metadata per property (conversion factors)
        max_concurrency: Cap on simultaneous requests; None fires all at once

    Returns:
        GridResult with the folded grid and all outcomes in request order
    """
    metadata = metadata or {}
    pairs = [(prop, depth) for prop in properties for depth in depths]
    if not pairs:
        return GridResult()

    limit = len(pairs) if max_concurrency is None else min(max_concurrency, len(pairs))
    semaphore = asyncio.Semaphore(limit)
    loop = asyncio.get_running_loop()

    logger.info(
        f"Fetching {len(pairs)} property/depth pairs "
        f"({len(properties)} properties x {len(depths)} depths, concurrency {limit})"
    )

    with ThreadPoolExecutor(max_workers=limit, thread_name_prefix="soil-fetch") as pool:

        async def fetch_pair(prop: str, depth: str) -> FetchOutcome:
            async with semaphore:
                return await loop.run_in_executor(
                    pool,
                    provider.fetch_property,
                    token,
                    latitude,
                    longitude,
                    prop,
                    depth,
                    metadata.get(prop),
                )

        settled = await asyncio.gather(
            *(fetch_pair(prop, depth) for prop, depth in pairs),
            return_exceptions=True,
        )

    outcomes: list[FetchOutcome] = []
    for (prop, depth), result in zip(pairs, settled, strict=True):
        if isinstance(result, Exception):
            # Providers report failures as outcomes; this guards misbehaving ones
            logger.warning(f"Fetch of {prop}@{depth} raised: {result}")
            outcomes.append(FetchOutcome.failed(prop, depth, str(result)))
        elif isinstance(result, BaseException):
            raise result
        else:
            outcomes.append(result)

    gathered = GridResult(grid=fold_outcomes(outcomes, depths), outcomes=outcomes)
    logger.info(
        f"Collected {gathered.populated_cells} measurements, "
        f"{len(gathered.failed)} failed requests"
    )
    return gathered

"""HTTP service exposing the soil analysis pipeline.

Run with ``soil-analyzer soil serve`` or ``uvicorn soil_analyzer.api:app``.
"""

import math
import time
from typing import Any

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse

from soil_analyzer import __version__
from soil_analyzer.config import AppSettings
from soil_analyzer.errors import InvalidLocationError, SoilAnalysisError, SoilDataError
from soil_analyzer.logging_config import get_logger
from soil_analyzer.soil.service import SoilAnalysisService

logger = get_logger(__name__)

GENERIC_ERROR = "An internal server error occurred while fetching soil data."


class RequestLoggingMiddleware:
    """ASGI middleware logging method, path, status and duration of each request."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        method = scope.get("method", "")
        path = scope.get("path", "")
        status = {"code": None}
        start = time.perf_counter()

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                status["code"] = message.get("status", 0)
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.info(f"{method} {path} -> {status['code']} ({duration_ms:.1f} ms)")


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def error_message(exc: Exception) -> str:
    """User-facing message for a failed analysis."""
    if isinstance(exc, SoilAnalysisError) and not isinstance(exc, SoilDataError):
        return str(exc)
    return f"Soil data API error: {exc}" if str(exc) else GENERIC_ERROR


def parse_coordinate(name: str, raw: str | None) -> float | None:
    """Parse a coordinate query value; blank or missing means "use the default"."""
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        value = math.nan
    if not math.isfinite(value):
        raise InvalidLocationError(
            f"Invalid request parameters: {name} must be a number, got {raw!r}"
        )
    return value


def create_app(
    settings: AppSettings | None = None,
    service: SoilAnalysisService | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Settings for a lazily created service (loaded from the
            environment when omitted)
        service: Prebuilt service, mainly for tests

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(title="Soil Analyzer", version=__version__)
    app.state.settings = settings
    app.state.service = service
    app.add_middleware(RequestLoggingMiddleware)

    def get_service(request: Request) -> SoilAnalysisService:
        state = request.app.state
        if state.service is None:
            state.service = SoilAnalysisService(settings=state.settings)
        return state.service

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {"status": "ok", "version": __version__}

    @app.get("/api/soil-analysis")
    async def soil_analysis(
        lat: str | None = Query(None, description="Latitude in decimal degrees"),
        lon: str | None = Query(None, description="Longitude in decimal degrees"),
        include_raw: str | None = Query(
            None, alias="includeRaw", description="Attach raw per-call results when 'true'"
        ),
        depths: str | None = Query(
            None, description="Comma-separated depth layers, e.g. 0-5,5-15"
        ),
        service: SoilAnalysisService = Depends(get_service),
    ) -> JSONResponse:
        try:
            report = await service.analyze(
                latitude=parse_coordinate("lat", lat),
                longitude=parse_coordinate("lon", lon),
                depths=depths,
                include_raw=include_raw == "true",
            )
            return JSONResponse(content=report.to_response())

        except SoilAnalysisError as e:
            logger.error(f"Soil analysis failed: {e}")
            return error_response(e.status_code, error_message(e))

        except Exception as e:
            logger.exception(f"Error in comprehensive soil data API: {e}")
            return error_response(500, error_message(e))

    return app


app = create_app()

"""CLI commands for soil analysis."""

import json
from pathlib import Path

import click

from soil_analyzer.logging_config import (
    DEFAULT_LOG_FILE,
    configure_from_env,
    get_logger,
    setup_logging,
)
from soil_analyzer.soil import SoilAnalysisService
from soil_analyzer.soil.models import SoilAnalysisReport

logger = get_logger(__name__)


@click.group()
def soil() -> None:
    """Soil property profiles and derived agronomic analysis."""
    pass


@soil.command()
@click.argument("latitude", type=float)
@click.argument("longitude", type=float)
@click.option(
    "--depths",
    default=None,
    help="Comma-separated depth layers (default: 0-5,5-15,15-30,30-60,60-100,100-200)",
)
@click.option("--include-raw", is_flag=True, help="Include raw per-call results")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "summary"]),
    default="summary",
    help="Output format",
)
@click.option(
    "--output", type=click.Path(path_type=Path), help="Write JSON to file instead of stdout"
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def analyze(
    latitude: float,
    longitude: float,
    depths: str | None,
    include_raw: bool,
    output_format: str,
    output: Path | None,
    verbose: bool,
) -> None:
    """Analyze the soil profile at a location.

    LATITUDE: Latitude in decimal degrees
    LONGITUDE: Longitude in decimal degrees
    """
    setup_logging(
        level="DEBUG" if verbose else "WARNING",
        log_file=DEFAULT_LOG_FILE if verbose else None,
    )

    try:
        service = SoilAnalysisService()
        report = service.analyze_location(
            latitude, longitude, depths=depths, include_raw=include_raw
        )

        if output_format == "json" or output:
            output_json = json.dumps(report.to_response(), indent=2, default=str)
            if output:
                output.parent.mkdir(parents=True, exist_ok=True)
                output.write_text(output_json)
                click.echo(f"Results written to {output}")
            else:
                click.echo(output_json)
        else:
            _print_summary(report)

    except Exception as e:
        logger.error(f"Error analyzing soil: {e}")
        click.echo(f"Error: {e}", err=True)
        raise click.Abort() from e


@soil.command()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def properties(verbose: bool) -> None:
    """List the soil properties advertised by the provider."""
    setup_logging(
        level="DEBUG" if verbose else "WARNING",
        log_file=DEFAULT_LOG_FILE if verbose else None,
    )

    try:
        service = SoilAnalysisService()
        catalogue = service.describe_properties()

        click.echo(f"{len(catalogue)} soil properties available:")
        click.echo("=" * 60)
        for name, info in sorted(catalogue.items()):
            click.echo(f"\n{name} ({info.units})")
            click.echo(f"   {info.description}")
            if info.conversion_factor != 1:
                click.echo(f"   Conversion factor: {info.conversion_factor}")

    except Exception as e:
        logger.error(f"Error listing soil properties: {e}")
        click.echo(f"Error: {e}", err=True)
        raise click.Abort() from e


@soil.command()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def providers(verbose: bool) -> None:
    """Show soil provider configuration."""
    setup_logging(
        level="DEBUG" if verbose else "WARNING",
        log_file=DEFAULT_LOG_FILE if verbose else None,
    )

    try:
        status = SoilAnalysisService().get_provider_status()

        configured = "✓" if status["credentials_configured"] else "✗"
        concurrency = status["max_concurrency"] or "unbounded"
        click.echo(f"{configured} {status['name']}")
        click.echo(f"   Coverage: {status['coverage']}")
        click.echo(f"   Endpoint: {status['base_url']}")
        click.echo(f"   Max concurrency: {concurrency}")
        if not status["credentials_configured"]:
            click.echo("   Credentials: not configured (set ISDASOIL_USERNAME/ISDASOIL_PASSWORD)")

    except Exception as e:
        logger.error(f"Error checking provider status: {e}")
        click.echo(f"Error: {e}", err=True)
        raise click.Abort() from e


@soil.command()
@click.option("--host", default="127.0.0.1", help="Bind address")
@click.option("--port", default=8000, type=int, help="Bind port")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def serve(host: str, port: int, verbose: bool) -> None:
    """Serve the soil analysis HTTP API."""
    import uvicorn

    configure_from_env(level="DEBUG" if verbose else None, server=True)
    uvicorn.run(
        "soil_analyzer.api:app",
        host=host,
        port=port,
        log_level="debug" if verbose else "info",
        log_config=None,
    )


def _print_summary(report: SoilAnalysisReport) -> None:
    """Print the headline results of an analysis."""
    meta = report.metadata
    quality = report.data_quality
    analysis = report.analysis

    click.echo(
        f"\nSoil Analysis for ({meta.location.latitude}, {meta.location.longitude})"
    )
    click.echo("=" * 60)
    click.echo(f"Source: {meta.data_source}")
    click.echo(
        f"Data points: {quality.total_data_points}/{quality.expected_data_points} "
        f"(completeness {quality.completeness:.0%}, reliability {quality.data_reliability})"
    )
    if quality.failed_requests:
        click.echo(f"Failed requests: {quality.failed_requests}")

    texture = analysis.physical.texture
    if texture:
        click.echo(
            f"\nTexture: {texture.texture_class} "
            f"(clay {texture.clay:.1f}%, sand {texture.sand:.1f}%, silt {texture.silt:.1f}%)"
        )

    acidity = analysis.chemical.acidity
    if acidity:
        click.echo(f"pH (profile mean): {acidity.average_ph:.2f}")

    carbon = analysis.chemical.carbon_content
    if carbon:
        click.echo(f"Organic matter (mean): {carbon.average_om:.2f}% - soil health {carbon.soil_health}")

    retention = analysis.hydrological.water_retention
    if retention:
        click.echo(f"Available water: {retention.available_water:.3f} ({retention.water_holding_class})")

    fertility = report.classification.fertility
    if fertility:
        click.echo(f"Fertility: {fertility.overall_rating}")

    click.echo(f"Land use: {report.suitability.land_use_capability.capability_class}")

    click.echo("\nCrop suitability:")
    for crop, suitability in report.suitability.crop_suitability.items():
        click.echo(f"  {crop:<12} {suitability.overall}")

    if quality.missing_properties:
        click.echo(f"\nMissing properties: {', '.join(quality.missing_properties)}")


if __name__ == "__main__":
    soil()

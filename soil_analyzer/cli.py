"""Command-line interface for soil analyzer."""

import click

from soil_analyzer import __version__
from soil_analyzer.cli_soil import soil


def show_version() -> None:
    """Print the soil-analyzer version."""
    print(__version__)


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """Soil Analyzer: soil property profiles and agronomic analysis."""


main.add_command(soil, name="soil")


if __name__ == "__main__":
    main()

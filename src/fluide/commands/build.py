"""fluide build / fluide config - Build a theme with the generated configuration."""

import asyncio
import json
import sys
from pathlib import Path

import click
from rich.console import Console

from fluide.build.config import resolve_build_config
from fluide.build.engine import ViteEngine
from fluide.build.logger import BuildLogger
from fluide.core.config import ProjectSettings
from fluide.core.errors import ProcessError
from fluide.log import configure_logging
from fluide.ui.theme import THEME

console = Console(theme=THEME)


@click.command("build")
@click.argument("root", required=False, type=click.Path(file_okay=False, path_type=Path))
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def build_cmd(root: Path, verbose: bool):
    """Build the theme in ROOT (defaults to the current directory).

    Entry points are discovered under the configured entry points
    directory; settings come from fluide.config.json.
    """
    configure_logging(verbose)
    settings = ProjectSettings.load(root or Path.cwd())
    config = resolve_build_config(settings)

    log = BuildLogger(console)
    if not config["build"]["rollupOptions"]["input"]:
        log.warn(f"No entry points found in {settings.entrypoints_dir}")

    try:
        asyncio.run(ViteEngine(settings.root).build(config, log))
    except ProcessError as e:
        log.error(str(e))
        sys.exit(1)

    log.info("build fluide complete")


@click.command("config")
@click.argument("root", required=False, type=click.Path(file_okay=False, path_type=Path))
def config_cmd(root: Path):
    """Print the resolved build configuration for ROOT as JSON."""
    settings = ProjectSettings.load(root or Path.cwd())
    config = resolve_build_config(settings)
    click.echo(json.dumps(config, indent=2, default=str))

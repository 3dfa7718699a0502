"""Main CLI entry point for fluide."""

import click

from fluide import __version__
from fluide.commands.build import build_cmd, config_cmd
from fluide.commands.create import create_cmd
from fluide.log import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="fluide")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def main(verbose: bool):
    """fluide - Shopify theme development with Vite.

    \b
    Quick Start:
      fluide create my-theme      Create a new project
      fluide build                Build the theme in this directory
      fluide config               Show the resolved build configuration

    \b
    Templates:
      fluide create my-theme --template starter
      fluide create my-theme --template owner/repo#branch
      fluide create --list-templates
    """
    configure_logging(verbose)


main.add_command(create_cmd, name="create")
main.add_command(build_cmd, name="build")
main.add_command(config_cmd, name="config")


if __name__ == "__main__":
    main()

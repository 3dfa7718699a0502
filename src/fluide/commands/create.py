"""fluide create - Bootstrap a new theme project from a template."""

import asyncio
import sys

import click
from rich.console import Console
from rich.table import Table

from fluide.core.config import CreateSettings
from fluide.core.prompts import ClickPrompter
from fluide.core.request import ProjectRequest
from fluide.core.templates import TEMPLATES
from fluide.core.tsconfig import PRESETS, UNSURE
from fluide.core.workflow import run_workflow
from fluide.log import configure_logging
from fluide.ui.reporter import Reporter
from fluide.ui.theme import THEME

console = Console(theme=THEME)


@click.command("create")
@click.argument("directory", required=False)
@click.option("--template", "-t", help="Template name or GitHub owner/repo[/path][#ref]")
@click.option("--commit", help="Branch, tag or commit of the template to fetch")
@click.option(
    "--typescript",
    type=click.Choice(list(PRESETS) + [UNSURE]),
    help="TypeScript preset for tsconfig.json",
)
@click.option("--dry-run", is_flag=True, help="Walk through the steps without changing anything")
@click.option("--yes", "-y", is_flag=True, help="Accept the default answer to every question")
@click.option("--skip-intro", "--skip-tars", "skip_intro", is_flag=True, help="Skip the welcome banner")
@click.option("--fancy", is_flag=True, help="Use emoji even where plain fallbacks are the default")
@click.option("--list-templates", is_flag=True, help="List available templates")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def create_cmd(
    directory: str,
    template: str,
    commit: str,
    typescript: str,
    dry_run: bool,
    yes: bool,
    skip_intro: bool,
    fancy: bool,
    list_templates: bool,
    verbose: bool,
):
    """Create a new fluide project.

    DIRECTORY is where the project is created. You'll be asked for one
    if it's missing or not empty.

    \b
    Examples:
      fluide create my-theme
      fluide create my-theme --template minimal --typescript strict
      fluide create my-theme --template acct/repo#dev -y
      fluide create my-theme --dry-run
    """
    configure_logging(verbose)

    if list_templates:
        _show_templates()
        return

    request = ProjectRequest.from_options(
        directory=directory,
        template=template,
        commit=commit,
        typescript=typescript,
        dry_run=dry_run,
        yes=yes,
        skip_intro=skip_intro,
        fancy=fancy,
    )
    result = asyncio.run(run_workflow(
        request,
        ClickPrompter(),
        Reporter(console),
        settings=CreateSettings.from_env(),
    ))
    if result.exit_code != 0:
        sys.exit(result.exit_code)


def _show_templates():
    """Show available templates."""
    console.print("\n[bold]Available Templates[/]\n")

    table = Table()
    table.add_column("Template", style="brand")
    table.add_column("Title")
    table.add_column("Description")

    for info in TEMPLATES:
        table.add_row(info.name, info.title, info.description)

    console.print(table)

    console.print("\n[bold]Usage:[/]")
    console.print("  fluide create my-theme --template starter")
    console.print("  fluide create my-theme -t owner/repo#branch")

"""Intro, outro and explanatory messages for `fluide create`."""

import random
from typing import Optional

from rich.markup import escape
from rich.panel import Panel

from fluide import __version__
from fluide.ui.reporter import Reporter

WELCOME = (
    "Let's build something great!",
    "Let's make the web weird!",
    "Time to ship a theme.",
    "Ready for liftoff?",
    "Your next storefront starts here.",
)

ADJECTIVES = (
    "bright", "calm", "cosmic", "crisp", "electric", "gentle", "golden",
    "lunar", "nimble", "orbital", "quiet", "rapid", "stellar", "vivid",
)

NOUNS = (
    "asteroid", "comet", "crater", "galaxy", "meteor", "moon", "nebula",
    "orbit", "planet", "pulsar", "quasar", "rocket", "satellite", "star",
)


def generate_project_name(rng: Optional[random.Random] = None) -> str:
    """Random `adjective-noun` directory name, e.g. ./stellar-orbit."""
    rng = rng or random.Random()
    return f"./{rng.choice(ADJECTIVES)}-{rng.choice(NOUNS)}"


def show_welcome(reporter: Reporter, username: Optional[str] = None) -> None:
    greeting = f"Welcome to [brand]fluide[/] v{__version__}"
    if username:
        greeting += f", {escape(username)}!"
    reporter.print(Panel.fit(
        f"{greeting}\n[text.dim]{random.choice(WELCOME)}[/]",
        border_style="brand",
    ))


def show_typescript_help(reporter: Reporter) -> None:
    """Explain the TypeScript presets when the user asks for help choosing."""
    reporter.print(Panel.fit(
        "TypeScript is supported in every fluide project, even when you write\n"
        "plain JavaScript. The preset only controls how strict type checking is.\n\n"
        "  [bold]strict[/]     recommended for TypeScript code\n"
        "  [bold]strictest[/]  maximum type safety\n"
        "  [bold]base[/]       relaxed, good for JavaScript projects\n\n"
        "We'll start you off with [bold]base[/]; you can change the "
        "[accent]extends[/] field of tsconfig.json any time.",
        title="TypeScript",
        border_style="accent",
    ))


def not_empty_message(directory: object) -> str:
    return f'"{directory}" is not empty!'


def show_next_steps(reporter: Reporter, project_dir: str, dev_command: str) -> None:
    reporter.print("\n[bold]Next steps:[/]")
    if project_dir not in ("", "."):
        reporter.print(f"  cd {escape(project_dir)}")
    reporter.print(f"  {escape(dev_command)}")


def show_goodbye(reporter: Reporter) -> None:
    reporter.print("\n[brand]Good luck out there, astronaut![/]")

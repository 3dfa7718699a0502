"""Interactive prompts with cancellation as a value.

Prompt methods return either the answer or CANCELLED; they never exit the
process. Ctrl-C and end-of-input both count as cancellation.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Union

import click


class _Cancelled:
    """Sentinel returned when the user aborts a prompt."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "CANCELLED"


CANCELLED = _Cancelled()

# Returns an error message for invalid input, None when the input is fine
Validator = Callable[[str], Optional[str]]


@dataclass(frozen=True)
class Choice:
    value: str
    title: str
    description: str = ""


class Prompter:
    """Interface of the question/answer steps used by the workflow."""

    def text(
        self, message: str, default: Optional[str] = None, validate: Optional[Validator] = None
    ) -> Union[str, _Cancelled]:
        raise NotImplementedError

    def confirm(self, message: str, default: bool = True) -> Union[bool, _Cancelled]:
        raise NotImplementedError

    def select(self, message: str, choices: Sequence[Choice]) -> Union[str, _Cancelled]:
        raise NotImplementedError


class ClickPrompter(Prompter):
    """Prompter backed by click's terminal prompts."""

    def text(self, message, default=None, validate=None):
        def convert(value: str) -> str:
            value = value.strip()
            if validate is not None:
                problem = validate(value)
                if problem:
                    raise click.BadParameter(problem)
            return value

        try:
            return click.prompt(message, default=default, value_proc=convert)
        except click.Abort:
            return CANCELLED

    def confirm(self, message, default=True):
        try:
            return click.confirm(message, default=default)
        except click.Abort:
            return CANCELLED

    def select(self, message, choices):
        values = [c.value for c in choices]
        for index, choice in enumerate(choices, 1):
            line = f"  {index}) {choice.title}"
            if choice.description:
                line += click.style(f"  {choice.description}", dim=True)
            click.echo(line)

        def convert(value: str) -> str:
            value = value.strip()
            if value.isdigit() and 1 <= int(value) <= len(values):
                return values[int(value) - 1]
            if value in values:
                return value
            raise click.BadParameter(f"Choose 1-{len(values)} or one of: {', '.join(values)}")

        try:
            return click.prompt(message, default="1", value_proc=convert)
        except click.Abort:
            return CANCELLED

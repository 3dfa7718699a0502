"""Workflow inputs and results."""

import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class ProjectRequest:
    """What the user asked for.

    Built once from the command line. Prompts fill in missing fields by
    producing a new request with dataclasses.replace().
    """
    directory: Optional[Path] = None
    template: Optional[str] = None
    ref: Optional[str] = None
    typescript: Optional[str] = None
    dry_run: bool = False
    yes: bool = False
    skip_intro: bool = False
    fancy: bool = False

    @classmethod
    def from_options(
        cls,
        directory: Optional[str] = None,
        template: Optional[str] = None,
        commit: Optional[str] = None,
        typescript: Optional[str] = None,
        dry_run: bool = False,
        yes: bool = False,
        skip_intro: bool = False,
        fancy: bool = False,
        platform: str = sys.platform,
    ) -> "ProjectRequest":
        return cls(
            directory=Path(directory) if directory else None,
            template=template or None,
            ref=commit or None,
            typescript=typescript or None,
            dry_run=dry_run,
            yes=yes,
            # The intro is never shown on Windows
            skip_intro=skip_intro or platform == "win32",
            fancy=fancy,
        )


class Step(Enum):
    RESOLVE_DIRECTORY = "resolve_directory"
    RESOLVE_TEMPLATE = "resolve_template"
    FETCH_TEMPLATE = "fetch_template"
    CLEAN_FILES = "clean_files"
    RESOLVE_INSTALL = "resolve_install"
    INSTALL_DEPS = "install_deps"
    RESOLVE_VCS = "resolve_vcs"
    INIT_VCS = "init_vcs"
    RESOLVE_TOOLCHAIN = "resolve_toolchain"
    RECONCILE_CONFIG = "reconcile_config"
    DONE = "done"
    CANCELLED = "cancelled"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in (Step.DONE, Step.CANCELLED, Step.ABORTED)

    @property
    def exit_code(self) -> int:
        return 0 if self is Step.DONE else 1


@dataclass
class WorkflowResult:
    """Outcome of a create run."""
    state: Step
    request: ProjectRequest
    visited: List[Step] = field(default_factory=list)
    decisions: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        return self.state.exit_code

    @property
    def ok(self) -> bool:
        return self.state is Step.DONE

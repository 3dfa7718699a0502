"""The `fluide create` workflow.

A linear state machine:

    RESOLVE_DIRECTORY -> RESOLVE_TEMPLATE -> FETCH_TEMPLATE -> CLEAN_FILES
    -> RESOLVE_INSTALL -> (INSTALL_DEPS) -> RESOLVE_VCS -> (INIT_VCS)
    -> RESOLVE_TOOLCHAIN -> RECONCILE_CONFIG -> DONE

Any prompt may end the run in CANCELLED; a missing directory or template,
or a failed template download, ends it in ABORTED. Only a failed download
rolls anything back (the target directory, if this run created it). Install,
git and tsconfig failures are reported and the run carries on.

In dry-run mode every decision is still made and reported, but nothing is
written to disk and no command is spawned.
"""

import asyncio
import logging
import os
import shutil
from dataclasses import replace
from pathlib import Path
from typing import Awaitable, Callable, Dict, Optional

import httpx

from fluide.core.config import CreateSettings
from fluide.core.directory import validate_directory
from fluide.core.errors import CleanupError, FluideError, ProcessError
from fluide.core.fetch import FetchOutcome, FetchStatus, download_template, remove_stale_files
from fluide.core.installer import detect_package_manager, dev_command, install_dependencies
from fluide.core.prompts import CANCELLED, Choice, Prompter
from fluide.core.request import ProjectRequest, Step, WorkflowResult
from fluide.core.templates import TEMPLATES, TemplateReference, resolve_template
from fluide.core.tsconfig import (
    DEFAULT_PRESET,
    FALLBACK_PRESET,
    UNSURE,
    ReconcileStatus,
    reconcile_tsconfig,
)
from fluide.git.utils import GitError, RepoOutcome, ensure_repo, get_user_name
from fluide.ui import messages
from fluide.ui.reporter import Reporter
from fluide.ui.theme import Symbols, emoji_with_fallback

logger = logging.getLogger(__name__)

Fetcher = Callable[..., Awaitable[FetchOutcome]]

GOODBYE = "See you later, astronaut!"

TYPESCRIPT_CHOICES = (
    Choice("strict", "Strict", "(recommended)"),
    Choice("strictest", "Strictest"),
    Choice("base", "Relaxed"),
    Choice(UNSURE, "Help me choose"),
)


class CreateWorkflow:
    """Drives one project creation run."""

    def __init__(
        self,
        request: ProjectRequest,
        prompter: Prompter,
        reporter: Optional[Reporter] = None,
        settings: Optional[CreateSettings] = None,
        package_manager: Optional[str] = None,
        fetcher: Fetcher = download_template,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.request = request
        self.prompter = prompter
        self.reporter = reporter or Reporter()
        self.settings = settings or CreateSettings()
        self.package_manager = package_manager or detect_package_manager()
        self.fetcher = fetcher
        self.http_client = http_client

        self.reference: Optional[TemplateReference] = None
        self.visited = []
        self._handlers: Dict[Step, Callable[[], Awaitable[Step]]] = {
            Step.RESOLVE_DIRECTORY: self._resolve_directory,
            Step.RESOLVE_TEMPLATE: self._resolve_template,
            Step.FETCH_TEMPLATE: self._fetch_template,
            Step.CLEAN_FILES: self._clean_files,
            Step.RESOLVE_INSTALL: self._resolve_install,
            Step.INSTALL_DEPS: self._install_deps,
            Step.RESOLVE_VCS: self._resolve_vcs,
            Step.INIT_VCS: self._init_vcs,
            Step.RESOLVE_TOOLCHAIN: self._resolve_toolchain,
            Step.RECONCILE_CONFIG: self._reconcile_config,
        }

    @property
    def directory(self) -> Path:
        if self.request.directory is None:
            raise FluideError("Project directory has not been resolved")
        return self.request.directory

    @property
    def template_reference(self) -> TemplateReference:
        if self.reference is None:
            raise FluideError("Template has not been resolved")
        return self.reference

    async def run(self) -> WorkflowResult:
        if not self.request.skip_intro:
            username = await asyncio.to_thread(get_user_name)
            messages.show_welcome(self.reporter, username)

        step = Step.RESOLVE_DIRECTORY
        while not step.is_terminal:
            self.visited.append(step)
            logger.debug("Entering %s", step.name)
            step = await self._handlers[step]()
        self.visited.append(step)

        if step is Step.DONE:
            self._finish()

        return WorkflowResult(
            state=step,
            request=self.request,
            visited=list(self.visited),
            decisions=self.reporter.decisions(),
        )

    # -- Terminal transitions ----------------------------------------------

    def _cancel(self, message: str) -> Step:
        self.reporter.info(f"Operation cancelled. {message}")
        return Step.CANCELLED

    def _abort(self, message: str) -> Step:
        self.reporter.info(message)
        return Step.ABORTED

    def _finish(self) -> None:
        try:
            project_dir = os.path.relpath(self.directory, Path.cwd())
        except ValueError:
            project_dir = str(self.directory)
        messages.show_next_steps(self.reporter, project_dir, dev_command(self.package_manager))
        if not self.request.skip_intro:
            messages.show_goodbye(self.reporter)

    # -- Steps -------------------------------------------------------------

    async def _resolve_directory(self) -> Step:
        supplied = self.request.directory
        if supplied is not None:
            verdict = validate_directory(supplied)
            if verdict.is_valid:
                self.reporter.success(f"Using {supplied} as project directory.")
                return Step.RESOLVE_TEMPLATE
            logger.debug("Conflicting entries in %s: %s", supplied, verdict.conflicts)
            self.reporter.fail(messages.not_empty_message(supplied))

        def check(value: str) -> Optional[str]:
            if value and not validate_directory(value).is_valid:
                return messages.not_empty_message(value)
            return None

        answer = self.prompter.text(
            "Where would you like to create your new Fluide project?",
            default=messages.generate_project_name(),
            validate=check,
        )
        if answer is CANCELLED:
            return self._cancel(GOODBYE)
        if not answer:
            return self._abort(f"No directory provided. {GOODBYE}")

        self.request = replace(self.request, directory=Path(answer))
        return Step.RESOLVE_TEMPLATE

    async def _resolve_template(self) -> Step:
        template = self.request.template
        if not template:
            answer = self.prompter.select(
                "How would you like to set up your theme project?",
                [Choice(t.name, t.title, t.description) for t in TEMPLATES],
            )
            if answer is CANCELLED:
                return self._cancel(GOODBYE)
            template = answer
        if not template:
            return self._abort(f"No template provided. {GOODBYE}")

        self.request = replace(self.request, template=template)
        try:
            self.reference = resolve_template(template, self.request.ref, self.settings)
        except ValueError as e:
            self.reporter.error(str(e))
            return Step.ABORTED
        return Step.FETCH_TEMPLATE

    async def _fetch_template(self) -> Step:
        locator = self.template_reference.locator
        if self.request.dry_run:
            self.reporter.info(
                f"--dry-run enabled, skipping copying {locator} into {self.directory}."
            )
            return Step.RESOLVE_INSTALL

        existed = self.directory.exists()
        rocket = emoji_with_fallback(Symbols.ROCKET, ">", self.request.fancy)
        with self.reporter.status(f"{rocket} Copying theme files and folders..."):
            outcome = await self.fetcher(
                locator,
                self.directory,
                force=True,
                settings=self.settings,
                client=self.http_client,
            )

        if outcome.ok:
            self.reporter.success("Theme copied!")
            return Step.CLEAN_FILES

        if not existed:
            self._remove_directory()
        self._report_fetch_failure(outcome)
        return Step.ABORTED

    def _remove_directory(self) -> None:
        if not self.directory.exists():
            return
        try:
            shutil.rmtree(self.directory)
        except OSError as e:
            logger.warning("Could not remove %s: %s", self.directory, e)

    def _report_fetch_failure(self, outcome: FetchOutcome) -> None:
        reference = self.template_reference
        if outcome.status is not FetchStatus.NOT_FOUND:
            self.reporter.error(outcome.message)
            return

        template = self.request.template
        self.reporter.error(f"Could not find template {template}!")
        if not reference.is_third_party:
            return
        if reference.has_ref:
            self.reporter.error("Are you sure this GitHub repo and branch exist?")
        else:
            self.reporter.error(
                "Are you sure this GitHub repo exists? "
                f"This command uses the {self.settings.default_ref} branch by default.\n"
                "If the repo doesn't have that branch, specify a custom branch name:\n"
                f"{template}#branch-name"
            )

    async def _clean_files(self) -> Step:
        try:
            await remove_stale_files(self.directory, self.settings.files_to_remove)
        except CleanupError as e:
            self.reporter.warn(str(e))
        return Step.RESOLVE_INSTALL

    async def _resolve_install(self) -> Step:
        pm = self.package_manager
        if self.request.yes:
            install = True
        else:
            install = self.prompter.confirm(
                f"Would you like to install {pm} dependencies? (recommended)", default=True
            )
            if install is CANCELLED:
                return self._cancel(
                    "Your project folder has already been created, "
                    "however no dependencies have been installed."
                )

        if self.request.dry_run:
            self.reporter.info("--dry-run enabled, skipping installing dependencies.")
        elif install:
            return Step.INSTALL_DEPS
        else:
            self.reporter.info("No problem astronaut! Remember to install dependencies after setup.")
        return Step.RESOLVE_VCS

    async def _install_deps(self) -> Step:
        pm = self.package_manager
        package = emoji_with_fallback(f" {Symbols.PACKAGE}", "...", self.request.fancy)
        with self.reporter.status(f"Installing packages{package}") as status:
            try:
                await install_dependencies(
                    pm, self.directory, on_output=lambda line: status.update(f"[{pm}] {line}")
                )
            except ProcessError as e:
                self.reporter.error(str(e))
                return Step.RESOLVE_VCS
        self.reporter.success("Packages installed!")
        return Step.RESOLVE_VCS

    async def _resolve_vcs(self) -> Step:
        if self.request.yes:
            init = True
        else:
            init = self.prompter.confirm(
                "Would you like to initialize a new git repository? (optional)", default=True
            )
            if init is CANCELLED:
                return self._cancel("No worries, your project folder has already been created.")

        if self.request.dry_run:
            self.reporter.info("--dry-run enabled, skipping initializing a git repository.")
        elif init:
            return Step.INIT_VCS
        else:
            self.reporter.info("Sounds good! You can come back and run git init later.")
        return Step.RESOLVE_TOOLCHAIN

    async def _init_vcs(self) -> Step:
        try:
            outcome = await asyncio.to_thread(ensure_repo, self.directory)
        except GitError as e:
            self.reporter.error(str(e))
            return Step.RESOLVE_TOOLCHAIN

        if outcome is RepoOutcome.ALREADY_EXISTS:
            self.reporter.info(
                "A .git directory already exists. Skipping creating a new Git repository."
            )
        else:
            self.reporter.success("Git repository created!")
        return Step.RESOLVE_TOOLCHAIN

    async def _resolve_toolchain(self) -> Step:
        preset = self.request.typescript
        if self.request.yes and not preset:
            self.reporter.warn(
                f'--typescript <choice> missing. Defaulting to "{DEFAULT_PRESET}"'
            )
            preset = DEFAULT_PRESET

        if not preset:
            answer = self.prompter.select(
                "How would you like to set up TypeScript?", TYPESCRIPT_CHOICES
            )
            if answer is CANCELLED:
                return self._cancel(
                    "Your project folder has been created but no TypeScript "
                    "configuration file was created."
                )
            preset = answer

        if preset == UNSURE:
            messages.show_typescript_help(self.reporter)
            preset = FALLBACK_PRESET

        self.request = replace(self.request, typescript=preset)
        return Step.RECONCILE_CONFIG

    async def _reconcile_config(self) -> Step:
        preset = self.request.typescript
        if self.request.dry_run:
            self.reporter.info(
                f"--dry-run enabled, skipping applying TypeScript settings ({preset})."
            )
            return Step.DONE

        try:
            result = await asyncio.to_thread(
                reconcile_tsconfig, self.directory, preset, self.settings
            )
        except (OSError, ValueError) as e:
            self.reporter.error(f"Could not apply TypeScript settings: {e}")
            return Step.DONE

        if result.status is ReconcileStatus.MALFORMED:
            self.reporter.warn(
                "There was an error applying the requested TypeScript settings. "
                "This could be because the template's tsconfig.json is malformed."
            )
        else:
            self.reporter.success("TypeScript settings applied!")
        return Step.DONE


async def run_workflow(
    request: ProjectRequest,
    prompter: Prompter,
    reporter: Optional[Reporter] = None,
    **kwargs,
) -> WorkflowResult:
    """Convenience wrapper around CreateWorkflow.run()."""
    return await CreateWorkflow(request, prompter, reporter, **kwargs).run()

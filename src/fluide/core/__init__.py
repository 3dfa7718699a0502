"""Core modules for fluide.

This package contains the project creation workflow and its components:
- directory: target directory validation
- templates: template catalogue and locator resolution
- fetch: template download and post-fetch cleanup
- installer: package manager detection and dependency install
- tsconfig / jsonc: format-preserving tsconfig.json reconciliation
- workflow: the state machine tying them together
"""

from fluide.core.config import CreateSettings, ProjectSettings
from fluide.core.directory import DirectoryVerdict, validate_directory
from fluide.core.errors import CleanupError, ConfigParseError, FluideError, ProcessError
from fluide.core.fetch import FetchOutcome, FetchStatus, download_template, remove_stale_files
from fluide.core.installer import detect_package_manager, install_dependencies
from fluide.core.jsonc import JsoncDocument
from fluide.core.prompts import CANCELLED, Choice, ClickPrompter, Prompter
from fluide.core.request import ProjectRequest, Step, WorkflowResult
from fluide.core.templates import TemplateReference, resolve_template
from fluide.core.tsconfig import ReconcileStatus, reconcile_tsconfig
from fluide.core.workflow import CreateWorkflow, run_workflow

__all__ = [
    # Config
    "CreateSettings",
    "ProjectSettings",
    # Directory
    "DirectoryVerdict",
    "validate_directory",
    # Errors
    "CleanupError",
    "ConfigParseError",
    "FluideError",
    "ProcessError",
    # Fetch
    "FetchOutcome",
    "FetchStatus",
    "download_template",
    "remove_stale_files",
    # Install
    "detect_package_manager",
    "install_dependencies",
    # tsconfig
    "JsoncDocument",
    "ReconcileStatus",
    "reconcile_tsconfig",
    # Prompts
    "CANCELLED",
    "Choice",
    "ClickPrompter",
    "Prompter",
    # Workflow
    "ProjectRequest",
    "Step",
    "WorkflowResult",
    "TemplateReference",
    "resolve_template",
    "CreateWorkflow",
    "run_workflow",
]

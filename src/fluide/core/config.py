"""Configuration for fluide.

Two layers:
- CreateSettings: knobs for `fluide create`, overridable from the environment
- ProjectSettings: per-project build layout, stored in fluide.config.json
"""

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, List, Tuple

logger = logging.getLogger(__name__)

PROJECT_CONFIG_FILE = "fluide.config.json"


# =============================================================================
# Creation settings
# =============================================================================

@dataclass(frozen=True)
class CreateSettings:
    """Settings used while bootstrapping a project."""

    # First-party templates live under <owner>/<repo>/<subdir>
    template_repo: str = "fluide-dev/fluide/examples"
    default_ref: str = "main"
    tsconfig_root: str = "fluide/tsconfigs"
    download_host: str = "https://codeload.github.com"
    http_timeout: float = 60.0
    # Only needed by the online editor, removed after every fetch
    files_to_remove: Tuple[str, ...] = (".theme-check.yml", "CHANGELOG.md")

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_env(cls) -> "CreateSettings":
        """Build settings from environment variables.

        Recognised variables (all optional):
            FLUIDE_TEMPLATE_REPO, FLUIDE_DEFAULT_REF, FLUIDE_TSCONFIG_ROOT,
            FLUIDE_DOWNLOAD_HOST, FLUIDE_HTTP_TIMEOUT
        """
        kwargs: Dict[str, Any] = {}
        if os.environ.get("FLUIDE_TEMPLATE_REPO"):
            kwargs["template_repo"] = os.environ["FLUIDE_TEMPLATE_REPO"].strip("/")
        if os.environ.get("FLUIDE_DEFAULT_REF"):
            kwargs["default_ref"] = os.environ["FLUIDE_DEFAULT_REF"]
        if os.environ.get("FLUIDE_TSCONFIG_ROOT"):
            kwargs["tsconfig_root"] = os.environ["FLUIDE_TSCONFIG_ROOT"].rstrip("/")
        if os.environ.get("FLUIDE_DOWNLOAD_HOST"):
            kwargs["download_host"] = os.environ["FLUIDE_DOWNLOAD_HOST"].rstrip("/")
        if os.environ.get("FLUIDE_HTTP_TIMEOUT"):
            kwargs["http_timeout"] = float(os.environ["FLUIDE_HTTP_TIMEOUT"])
        return cls(**kwargs)


# =============================================================================
# Project settings
# =============================================================================

@dataclass
class ProjectSettings:
    """Build layout of a fluide project (stored in fluide.config.json).

    Paths are relative to the project root unless absolute.
    """
    root: Path = field(default_factory=Path.cwd)
    entrypoints_dir: str = "frontend/entrypoints"
    source_dir: str = "frontend"
    snippet_name: str = "vite-tag"
    # User overrides for the generated build configuration
    vite: Dict[str, Any] = field(default_factory=dict)

    @property
    def entrypoints_path(self) -> Path:
        return self.root / self.entrypoints_dir

    @property
    def source_path(self) -> Path:
        return self.root / self.source_dir

    @property
    def config_file(self) -> Path:
        return self.root / PROJECT_CONFIG_FILE

    def to_dict(self) -> dict:
        data = asdict(self)
        data["root"] = str(self.root)
        return data

    @classmethod
    def from_dict(cls, data: dict, root: Path) -> "ProjectSettings":
        known = {
            k: v for k, v in data.items()
            if k in cls.__dataclass_fields__ and k != "root"
        }
        ignored: List[str] = sorted(set(data) - set(known) - {"root"})
        if ignored:
            logger.debug("Ignoring unknown project settings: %s", ", ".join(ignored))
        return cls(root=root, **known)

    @classmethod
    def load(cls, root: Path) -> "ProjectSettings":
        """Load settings for the project at `root`, falling back to defaults."""
        root = Path(root).resolve()
        config_file = root / PROJECT_CONFIG_FILE
        if not config_file.exists():
            return cls(root=root)
        try:
            data = json.loads(config_file.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.warning("%s is malformed: %s. Using defaults.", config_file, e)
            return cls(root=root)
        if not isinstance(data, dict):
            logger.warning("%s must contain an object. Using defaults.", config_file)
            return cls(root=root)
        return cls.from_dict(data, root)

"""TypeScript configuration reconciliation.

Points the project's tsconfig.json at one of the shipped presets by setting
its `extends` key, creating the file when the template has none.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from fluide.core.config import CreateSettings
from fluide.core.errors import ConfigParseError
from fluide.core.jsonc import JsoncDocument

logger = logging.getLogger(__name__)

TSCONFIG_FILE = "tsconfig.json"

PRESETS = ("strict", "strictest", "base")
UNSURE = "unsure"
DEFAULT_PRESET = "strict"
FALLBACK_PRESET = "base"


class ReconcileStatus(Enum):
    CREATED = "created"
    UPDATED = "updated"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class ReconcileResult:
    status: ReconcileStatus
    path: Path
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status is not ReconcileStatus.MALFORMED


def preset_path(preset: str, settings: Optional[CreateSettings] = None) -> str:
    """Reference string written into `extends` for a preset."""
    settings = settings or CreateSettings()
    return f"{settings.tsconfig_root}/{preset}"


def reconcile_tsconfig(
    cwd: Union[str, Path],
    preset: str,
    settings: Optional[CreateSettings] = None,
) -> ReconcileResult:
    """Make tsconfig.json in cwd extend the given preset.

    A missing file is created as `{"extends": <preset path>}`. An existing
    object document gets its `extends` key set while keeping every other
    key and comment. Anything else is reported as MALFORMED and the file
    is left untouched.

    Raises:
        ValueError: If preset is "unsure" or not a known preset
    """
    if preset not in PRESETS:
        raise ValueError(f"Unknown TypeScript preset: {preset!r}. Available: {list(PRESETS)}")

    path = Path(cwd) / TSCONFIG_FILE
    extends = preset_path(preset, settings)

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        document = JsoncDocument.from_mapping({"extends": extends})
        path.write_text(document.dumps(), encoding="utf-8")
        logger.debug("Created %s extending %s", path, extends)
        return ReconcileResult(ReconcileStatus.CREATED, path)
    except UnicodeDecodeError as e:
        logger.debug("Could not decode %s: %s", path, e)
        return ReconcileResult(ReconcileStatus.MALFORMED, path, "not valid UTF-8")

    try:
        document = JsoncDocument.parse(text)
    except ConfigParseError as e:
        logger.debug("Could not parse %s: %s", path, e)
        return ReconcileResult(ReconcileStatus.MALFORMED, path, str(e))

    if not document.is_mapping:
        return ReconcileResult(
            ReconcileStatus.MALFORMED, path, "top-level value is not an object"
        )

    document.set("extends", extends)
    path.write_text(document.dumps(), encoding="utf-8")
    logger.debug("Updated %s to extend %s", path, extends)
    return ReconcileResult(ReconcileStatus.UPDATED, path)

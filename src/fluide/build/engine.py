"""Build engine adapter.

The bundler itself is opaque: it receives the resolved configuration and a
log sink. ViteEngine writes the configuration to .fluide/vite.config.mjs and
runs `vite build` against it.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Mapping, Sequence

from fluide.build.logger import BuildLogger
from fluide.core.errors import ProcessError
from fluide.core.installer import read_lines, terminate

logger = logging.getLogger(__name__)

GENERATED_DIR = ".fluide"
GENERATED_CONFIG = "vite.config.mjs"
DEFAULT_COMMAND = ("npx", "vite", "build")


class BuildEngine:
    """Interface of a bundler invocation."""

    async def build(self, config: Mapping[str, Any], log: BuildLogger) -> None:
        raise NotImplementedError


def write_config_module(config: Mapping[str, Any], root: Path) -> Path:
    """Write the configuration as an ES module Vite can load."""
    target = Path(root) / GENERATED_DIR / GENERATED_CONFIG
    target.parent.mkdir(parents=True, exist_ok=True)
    body = json.dumps(config, indent=2, default=str)
    target.write_text(
        "// Generated by fluide. Edit fluide.config.json instead.\n"
        f"export default {body};\n",
        encoding="utf-8",
    )
    return target


class ViteEngine(BuildEngine):
    """Runs Vite as a subprocess in the project root."""

    def __init__(self, root: Path, command: Sequence[str] = DEFAULT_COMMAND):
        self.root = Path(root)
        self.command = list(command)

    async def build(self, config: Mapping[str, Any], log: BuildLogger) -> None:
        """Build the project.

        Raises:
            ProcessError: If the bundler cannot be started or fails
        """
        config_path = write_config_module(config, self.root)
        cmd = self.command + ["--config", str(config_path), "--logLevel", "silent"]
        logger.debug("Running %s", " ".join(cmd))

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=str(self.root),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ProcessError(self.command[0], e) from e

        async def pump(stream: asyncio.StreamReader, emit) -> None:
            async for text in read_lines(stream):
                if text:
                    emit(text)

        try:
            await asyncio.gather(
                pump(process.stdout, log.info),
                pump(process.stderr, log.error),
            )
            returncode = await process.wait()
        except (OSError, ValueError) as e:
            raise ProcessError(self.command[0], e) from e
        finally:
            await terminate(process)

        if returncode != 0:
            raise ProcessError(self.command[0], f"exit code {returncode}", returncode=returncode)

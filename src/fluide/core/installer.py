"""Package manager detection and dependency installation."""

import asyncio
import logging
import os
from pathlib import Path
from typing import AsyncIterator, Callable, Optional, Union

from fluide.core.errors import ProcessError

logger = logging.getLogger(__name__)

DEFAULT_PACKAGE_MANAGER = "npm"
CHUNK_SIZE = 64 * 1024

OutputCallback = Callable[[str], None]


def detect_package_manager(user_agent: Optional[str] = None) -> str:
    """Detect the package manager that launched us.

    npm, pnpm, yarn and bun all export npm_config_user_agent, e.g.
    "pnpm/8.6.0 npm/? node/v20.3.0 linux x64".
    """
    if user_agent is None:
        user_agent = os.environ.get("npm_config_user_agent", "")
    first = user_agent.strip().split(" ", 1)[0]
    name = first.split("/", 1)[0]
    return name or DEFAULT_PACKAGE_MANAGER


def dev_command(manager: str) -> str:
    """Command that starts the dev server for a given package manager."""
    return "npm run dev" if manager == "npm" else f"{manager} dev"


async def read_lines(stream: asyncio.StreamReader) -> AsyncIterator[str]:
    """Yield decoded lines from a subprocess stream.

    Reads fixed-size chunks so a single line may be of any length.
    """
    pending = bytearray()
    while True:
        chunk = await stream.read(CHUNK_SIZE)
        if not chunk:
            break
        pending.extend(chunk)
        *complete, rest = pending.split(b"\n")
        for line in complete:
            yield line.decode("utf-8", errors="replace").rstrip()
        pending = bytearray(rest)
    if pending:
        yield pending.decode("utf-8", errors="replace").rstrip()


async def terminate(process: asyncio.subprocess.Process) -> None:
    """Kill a process that is still running and reap it."""
    if process.returncode is None:
        logger.debug("Killing process %s", process.pid)
        process.kill()
        await process.wait()


async def install_dependencies(
    manager: str,
    cwd: Union[str, Path],
    on_output: Optional[OutputCallback] = None,
) -> None:
    """Run `<manager> install` in cwd.

    stdout is streamed line by line to `on_output` while the process runs.
    The callback is for progress display only; completion is signalled by
    this coroutine returning.

    Raises:
        ProcessError: If the manager cannot be spawned, its output cannot be
            read, or it exits non-zero
    """
    logger.debug("Running %s install in %s", manager, cwd)
    try:
        process = await asyncio.create_subprocess_exec(
            manager,
            "install",
            cwd=str(cwd),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise ProcessError(manager, e) from e

    stderr_task = asyncio.ensure_future(process.stderr.read())
    try:
        async for line in read_lines(process.stdout):
            if line and on_output is not None:
                on_output(line)
        returncode = await process.wait()
        stderr = (await stderr_task).decode("utf-8", errors="replace").strip()
    except (OSError, ValueError) as e:
        raise ProcessError(manager, e) from e
    finally:
        stderr_task.cancel()
        await terminate(process)

    if returncode != 0:
        detail = stderr.splitlines()[-1] if stderr else f"exit code {returncode}"
        raise ProcessError(manager, detail, returncode=returncode)

"""Remote template download and post-fetch cleanup.

Templates are fetched as a GitHub tarball (codeload) and the requested
subdirectory is unpacked over the target directory.
"""

import asyncio
import io
import logging
import tarfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Iterable, Optional, Union

import httpx

from fluide.core.config import CreateSettings
from fluide.core.errors import CleanupError
from fluide.core.templates import TemplateReference, parse_locator

logger = logging.getLogger(__name__)


# =============================================================================
# Fetch outcome
# =============================================================================

class FetchStatus(Enum):
    SUCCESS = "success"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True)
class FetchOutcome:
    """Result of a template download."""
    status: FetchStatus
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status is FetchStatus.SUCCESS

    @classmethod
    def success(cls) -> "FetchOutcome":
        return cls(FetchStatus.SUCCESS)

    @classmethod
    def not_found(cls, message: str = "404 Not Found") -> "FetchOutcome":
        return cls(FetchStatus.NOT_FOUND, message)

    @classmethod
    def failed(cls, message: str) -> "FetchOutcome":
        if _indicates_missing(message):
            return cls.not_found(message)
        return cls(FetchStatus.FAILED, message)


def _indicates_missing(message: str) -> bool:
    text = message.lower()
    return "404" in text or "not found" in text


class TemplateMissingError(Exception):
    """Requested subdirectory is absent from the downloaded archive."""


# =============================================================================
# Download
# =============================================================================

def tarball_url(reference: TemplateReference, settings: CreateSettings) -> str:
    ref = reference.ref or settings.default_ref
    return f"{settings.download_host}/{reference.owner}/{reference.repo}/tar.gz/{ref}"


async def download_template(
    locator: str,
    target_dir: Union[str, Path],
    force: bool = True,
    settings: Optional[CreateSettings] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> FetchOutcome:
    """Copy a remote template into `target_dir`.

    Args:
        locator: Template locator (owner/repo/subpath#ref)
        target_dir: Directory to populate (created if missing)
        force: Overwrite files that already exist in target_dir
        settings: Creation settings
        client: HTTP client to use (a new one is created when omitted)

    Returns:
        FetchOutcome; never raises for network, HTTP or archive failures
    """
    settings = settings or CreateSettings()
    try:
        reference = parse_locator(locator)
    except ValueError as e:
        return FetchOutcome.failed(str(e))

    url = tarball_url(reference, settings)
    logger.debug("Downloading %s from %s", locator, url)

    try:
        if client is None:
            async with httpx.AsyncClient(
                follow_redirects=True, timeout=settings.http_timeout
            ) as own_client:
                response = await own_client.get(url)
        else:
            response = await client.get(url)
    except httpx.HTTPError as e:
        return FetchOutcome.failed(f"Failed to download {url}: {e}")

    if response.status_code == 404:
        return FetchOutcome.not_found(f"404 Not Found: {url}")
    if response.status_code >= 400:
        return FetchOutcome.failed(
            f"Failed to download {url}: {response.status_code} {response.reason_phrase}"
        )

    try:
        written = await asyncio.to_thread(
            extract_template, response.content, reference.subpath, Path(target_dir), force
        )
    except TemplateMissingError as e:
        return FetchOutcome.not_found(str(e))
    except (tarfile.TarError, OSError) as e:
        return FetchOutcome.failed(f"Could not unpack template: {e}")

    logger.debug("Wrote %d files to %s", written, target_dir)
    return FetchOutcome.success()


def extract_template(archive: bytes, subpath: str, target_dir: Path, force: bool = True) -> int:
    """Unpack the `subpath` directory of a repository tarball into target_dir.

    The archive's single top-level directory (repo-ref/) is stripped.

    Returns:
        Number of files written

    Raises:
        TemplateMissingError: If nothing in the archive lives under subpath
    """
    prefix = PurePosixPath(subpath) if subpath else None
    target_dir.mkdir(parents=True, exist_ok=True)
    root = target_dir.resolve()
    matched = False
    written = 0

    with tarfile.open(fileobj=io.BytesIO(archive), mode="r:*") as tar:
        for member in tar.getmembers():
            parts = PurePosixPath(member.name).parts[1:]
            if not parts:
                continue
            rel = PurePosixPath(*parts)
            if prefix is not None:
                if rel == prefix:
                    matched = True
                    continue
                try:
                    rel = rel.relative_to(prefix)
                except ValueError:
                    continue
            matched = True

            dest = (root / rel).resolve()
            if root not in dest.parents:
                logger.warning("Skipping unsafe archive entry: %s", member.name)
                continue

            if member.isdir():
                dest.mkdir(parents=True, exist_ok=True)
            elif member.isfile():
                if dest.exists() and not force:
                    continue
                source = tar.extractfile(member)
                if source is None:
                    continue
                dest.parent.mkdir(parents=True, exist_ok=True)
                dest.write_bytes(source.read())
                written += 1

    if not matched:
        raise TemplateMissingError(f"404 Not Found: {subpath or '/'} is not in the archive")
    return written


# =============================================================================
# Post-fetch cleanup
# =============================================================================

def _remove_file(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        return
    logger.debug("Removed %s", path)


async def remove_stale_files(target_dir: Union[str, Path], names: Iterable[str]) -> None:
    """Remove `names` from target_dir concurrently.

    Missing files are ignored. Every removal is attempted; the first
    failure is raised once all of them have finished.

    Raises:
        CleanupError: If any removal failed
    """
    paths = [Path(target_dir) / name for name in names]
    results = await asyncio.gather(
        *(asyncio.to_thread(_remove_file, p) for p in paths),
        return_exceptions=True,
    )
    for path, result in zip(paths, results):
        if isinstance(result, BaseException):
            raise CleanupError(str(path), result)

"""Shared test fixtures for fluide.

Provides:
- git_workspace: Temporary directory that is a real git repo
- cli_runner: Click CliRunner
- prompter: Scripted prompter answering workflow questions from a queue
- reporter: Reporter writing to an in-memory console
- make_tarball: Build a GitHub-style repository tarball in memory
- fake_fetcher: Fetcher stand-in that writes template files locally
- snapshot_tree: Capture a directory tree to check for mutations
"""

import io
import subprocess
import tarfile
from pathlib import Path

import pytest
from click.testing import CliRunner
from rich.console import Console

from fluide.core.fetch import FetchOutcome
from fluide.core.prompts import CANCELLED, Prompter
from fluide.ui.reporter import Reporter
from fluide.ui.theme import THEME


class ScriptedPrompter(Prompter):
    """Answers prompts from a list; records every question asked."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.asked = []

    def _next(self, kind, message):
        self.asked.append((kind, message))
        if not self.answers:
            raise AssertionError(f"Unexpected {kind} prompt: {message}")
        return self.answers.pop(0)

    def text(self, message, default=None, validate=None):
        answer = self._next("text", message)
        if answer is not CANCELLED and validate is not None:
            # Mimic the terminal: invalid answers are rejected and re-asked
            while answer and validate(answer):
                answer = self._next("text", message)
        return answer

    def confirm(self, message, default=True):
        return self._next("confirm", message)

    def select(self, message, choices):
        answer = self._next("select", message)
        if answer is not CANCELLED:
            assert answer in [c.value for c in choices]
        return answer


@pytest.fixture
def git_workspace(tmp_path):
    """Create a temporary workspace that is a real git repo."""
    subprocess.run(["git", "init"], cwd=tmp_path, capture_output=True)
    subprocess.run(
        ["git", "config", "user.email", "test@test.com"],
        cwd=tmp_path,
        capture_output=True,
    )
    subprocess.run(
        ["git", "config", "user.name", "Test User"],
        cwd=tmp_path,
        capture_output=True,
    )
    return tmp_path


@pytest.fixture
def cli_runner():
    """Click CliRunner for testing CLI commands."""
    return CliRunner()


@pytest.fixture
def prompter():
    """Factory for scripted prompters: prompter("answer", True, ...)."""
    return ScriptedPrompter


@pytest.fixture
def reporter():
    """Reporter printing to an in-memory console."""
    return Reporter(Console(file=io.StringIO(), width=120, color_system=None, theme=THEME))


def _make_tarball(files, top="repo-main"):
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        root = tarfile.TarInfo(top)
        root.type = tarfile.DIRTYPE
        tar.addfile(root)
        for name, content in files.items():
            data = content.encode("utf-8")
            info = tarfile.TarInfo(f"{top}/{name}")
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


@pytest.fixture
def make_tarball():
    """Build a repository tarball: make_tarball({"path/in/repo": "content"})."""
    return _make_tarball


class FakeFetcher:
    """Records calls and populates the target like a real download."""

    def __init__(self, files=None, outcome=None):
        self.files = files if files is not None else {"package.json": "{}\n"}
        self.outcome = outcome or FetchOutcome.success()
        self.calls = []

    async def __call__(self, locator, target_dir, force=True, settings=None, client=None):
        self.calls.append((locator, Path(target_dir), force))
        if not self.outcome.ok:
            return self.outcome
        target = Path(target_dir)
        target.mkdir(parents=True, exist_ok=True)
        for name, content in self.files.items():
            path = target / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return self.outcome


@pytest.fixture
def fake_fetcher():
    """Factory for fetch stand-ins: fake_fetcher(files=..., outcome=...)."""
    return FakeFetcher


def snapshot(path: Path):
    """Every path under `path` with its contents, for mutation checks."""
    if not path.exists():
        return None
    return {
        str(p.relative_to(path)): (p.read_bytes() if p.is_file() else None)
        for p in sorted(path.rglob("*"))
    }


@pytest.fixture
def snapshot_tree():
    """Snapshot function: every path under a directory with its contents."""
    return snapshot

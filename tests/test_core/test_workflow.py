"""Tests for fluide.core.workflow module.

Runs the create workflow end to end with scripted answers and a local
stand-in for the template download. Package installation is patched out;
git runs for real where a test needs it.
"""

import json
from io import StringIO
from pathlib import Path

import pytest
from rich.console import Console

from fluide.core.errors import FluideError, ProcessError
from fluide.core.fetch import FetchOutcome
from fluide.core.prompts import CANCELLED, Prompter
from fluide.core.request import ProjectRequest, Step
from fluide.core.workflow import CreateWorkflow, run_workflow
from fluide.git.utils import RepoOutcome
from fluide.ui.reporter import Reporter
from fluide.ui.theme import THEME


TEMPLATE_FILES = {
    "package.json": '{"name": "theme"}\n',
    "tsconfig.json": '{\n  // theme settings\n  "include": ["frontend"]\n}\n',
    "CHANGELOG.md": "# Changes\n",
    ".theme-check.yml": "root: .\n",
    "layout/theme.liquid": "<html></html>\n",
}


@pytest.fixture
def no_install(monkeypatch):
    """Replace dependency installation with a recorder."""
    calls = []

    async def fake_install(manager, cwd, on_output=None):
        calls.append((manager, Path(cwd)))
        if on_output:
            on_output("added 1 package")

    monkeypatch.setattr("fluide.core.workflow.install_dependencies", fake_install)
    return calls


@pytest.fixture
def no_git(monkeypatch):
    """Replace repository initialization with a recorder."""
    calls = []

    def fake_ensure_repo(cwd):
        calls.append(Path(cwd))
        return RepoOutcome.INITIALIZED

    monkeypatch.setattr("fluide.core.workflow.ensure_repo", fake_ensure_repo)
    return calls


def make_request(**kwargs):
    kwargs.setdefault("skip_intro", True)
    return ProjectRequest(**kwargs)


async def run(request, prompter, reporter, fetcher, **kwargs):
    kwargs.setdefault("package_manager", "npm")
    return await run_workflow(request, prompter, reporter, fetcher=fetcher, **kwargs)


def messages_of(result, level=None):
    return [msg for lvl, msg in result.decisions if level is None or lvl == level]


class TestDryRun:
    """Dry-run reports every decision but writes nothing."""

    @pytest.mark.asyncio
    async def test_nothing_written(self, tmp_path, prompter, reporter, fake_fetcher, snapshot_tree):
        target = tmp_path / "new-theme"
        fetcher = fake_fetcher()
        before = snapshot_tree(tmp_path)

        result = await run(
            make_request(directory=target, template="starter", typescript="strict", dry_run=True, yes=True),
            prompter(), reporter, fetcher,
        )

        assert result.state is Step.DONE
        assert result.exit_code == 0
        assert fetcher.calls == []
        assert not target.exists()
        assert snapshot_tree(tmp_path) == before

        info = messages_of(result, "info")
        assert any(m.startswith("--dry-run enabled, skipping copying fluide-dev/fluide/examples/starter") for m in info)
        assert "--dry-run enabled, skipping installing dependencies." in info
        assert "--dry-run enabled, skipping initializing a git repository." in info
        assert any("skipping applying TypeScript settings (strict)" in m for m in info)

    @pytest.mark.asyncio
    async def test_skips_install_and_git_steps(self, tmp_path, prompter, reporter, fake_fetcher):
        result = await run(
            make_request(directory=tmp_path / "t", template="starter", typescript="base", dry_run=True),
            prompter(True, True), reporter, fake_fetcher(),
        )
        assert Step.INSTALL_DEPS not in result.visited
        assert Step.INIT_VCS not in result.visited
        assert Step.FETCH_TEMPLATE in result.visited
        assert Step.CLEAN_FILES not in result.visited

    @pytest.mark.asyncio
    async def test_repeated_runs_report_the_same(self, tmp_path, prompter, fake_fetcher, snapshot_tree):
        (tmp_path / "existing").mkdir()
        (tmp_path / "existing" / "README.md").write_text("hi")
        request = make_request(
            directory=tmp_path / "existing", template="acct/repo#dev", dry_run=True, yes=True
        )
        before = snapshot_tree(tmp_path)

        first = await run(request, prompter(), Reporter(Console(file=StringIO(), theme=THEME)), fake_fetcher())
        second = await run(request, prompter(), Reporter(Console(file=StringIO(), theme=THEME)), fake_fetcher())

        assert first.decisions == second.decisions
        assert first.visited == second.visited
        assert snapshot_tree(tmp_path) == before


class TestFullRun:
    """Non-dry runs against a local template."""

    @pytest.mark.asyncio
    async def test_creates_project(self, tmp_path, prompter, reporter, fake_fetcher, no_install, no_git):
        target = tmp_path / "theme"
        fetcher = fake_fetcher(TEMPLATE_FILES)

        result = await run(
            make_request(directory=target, template="starter", typescript="strictest"),
            prompter(True, True), reporter, fetcher,
        )

        assert result.ok
        assert result.visited == [
            Step.RESOLVE_DIRECTORY,
            Step.RESOLVE_TEMPLATE,
            Step.FETCH_TEMPLATE,
            Step.CLEAN_FILES,
            Step.RESOLVE_INSTALL,
            Step.INSTALL_DEPS,
            Step.RESOLVE_VCS,
            Step.INIT_VCS,
            Step.RESOLVE_TOOLCHAIN,
            Step.RECONCILE_CONFIG,
            Step.DONE,
        ]
        assert fetcher.calls == [("fluide-dev/fluide/examples/starter", target, True)]
        assert no_install == [("npm", target)]
        assert no_git == [target]

        # Stale files removed, the rest kept
        assert not (target / "CHANGELOG.md").exists()
        assert not (target / ".theme-check.yml").exists()
        assert (target / "layout" / "theme.liquid").exists()

        tsconfig = (target / "tsconfig.json").read_text()
        assert '"extends": "fluide/tsconfigs/strictest"' in tsconfig
        assert "// theme settings" in tsconfig

        successes = messages_of(result, "success")
        assert f"Using {target} as project directory." in successes
        assert "Packages installed!" in successes
        assert "Git repository created!" in successes
        assert "TypeScript settings applied!" in successes

    @pytest.mark.asyncio
    async def test_real_git_init(self, tmp_path, prompter, reporter, fake_fetcher, no_install):
        target = tmp_path / "theme"
        result = await run(
            make_request(directory=target, template="starter", typescript="base", yes=True),
            prompter(), reporter, fake_fetcher(),
        )
        assert result.ok
        assert (target / ".git").exists()

    @pytest.mark.asyncio
    async def test_existing_git_repo_is_kept(self, tmp_path, prompter, reporter, fake_fetcher, no_install):
        target = tmp_path / "theme"
        (target / ".git").mkdir(parents=True)
        (target / ".git" / "marker").write_text("keep me")

        result = await run(
            make_request(directory=target, template="starter", typescript="base", yes=True),
            prompter(), reporter, fake_fetcher(),
        )

        assert result.ok
        assert (target / ".git" / "marker").read_text() == "keep me"
        assert any("A .git directory already exists" in m for m in messages_of(result, "info"))

    @pytest.mark.asyncio
    async def test_declining_install_and_git(self, tmp_path, prompter, reporter, fake_fetcher, no_install, no_git):
        result = await run(
            make_request(directory=tmp_path / "theme", template="starter", typescript="base"),
            prompter(False, False), reporter, fake_fetcher(),
        )

        assert result.ok
        assert no_install == []
        assert no_git == []
        info = messages_of(result, "info")
        assert "No problem astronaut! Remember to install dependencies after setup." in info
        assert "Sounds good! You can come back and run git init later." in info

    @pytest.mark.asyncio
    async def test_install_failure_continues(self, tmp_path, prompter, reporter, fake_fetcher, monkeypatch, no_git):
        async def failing_install(manager, cwd, on_output=None):
            raise ProcessError(manager, "ERR! network timeout", 1)

        monkeypatch.setattr("fluide.core.workflow.install_dependencies", failing_install)

        result = await run(
            make_request(directory=tmp_path / "theme", template="starter", typescript="base", yes=True),
            prompter(), reporter, fake_fetcher(),
        )

        assert result.state is Step.DONE
        assert "npm failed: ERR! network timeout" in messages_of(result, "error")
        assert result.visited.index(Step.INIT_VCS) > result.visited.index(Step.INSTALL_DEPS)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["{oops", '{"baseUrl": "\\q"}', "[" * 5000 + "]" * 5000])
    async def test_malformed_tsconfig_warns(
        self, tmp_path, prompter, reporter, fake_fetcher, no_install, no_git, content
    ):
        target = tmp_path / "theme"
        result = await run(
            make_request(directory=target, template="starter", typescript="strict", yes=True),
            prompter(), reporter, fake_fetcher({"tsconfig.json": content}),
        )

        assert result.state is Step.DONE
        assert (target / "tsconfig.json").read_text() == content
        assert messages_of(result, "error") == []
        assert any("tsconfig.json is malformed" in m for m in messages_of(result, "warn"))

    @pytest.mark.asyncio
    async def test_next_steps(self, tmp_path, prompter, reporter, fake_fetcher, no_install, no_git, monkeypatch):
        monkeypatch.chdir(tmp_path)
        await run(
            make_request(directory=tmp_path / "theme", template="starter", typescript="base", yes=True),
            prompter(), reporter, fake_fetcher(), package_manager="pnpm",
        )
        output = reporter.console.file.getvalue()
        assert "cd theme" in output
        assert "pnpm dev" in output


class TestDirectory:
    """Directory resolution."""

    @pytest.mark.asyncio
    async def test_conflicting_directory_reprompts(self, tmp_path, prompter, reporter, fake_fetcher):
        busy = tmp_path / "busy"
        busy.mkdir()
        (busy / "package.json").write_text("{}")
        also_busy = tmp_path / "also-busy"
        also_busy.mkdir()
        (also_busy / "src").mkdir()
        free = tmp_path / "free"

        ask = prompter(str(also_busy), str(free))
        result = await run(
            make_request(directory=busy, template="starter", typescript="base", dry_run=True, yes=True),
            ask, reporter, fake_fetcher(),
        )

        assert result.ok
        assert result.request.directory == free
        assert f'"{busy}" is not empty!' in messages_of(result, "fail")
        assert [kind for kind, _ in ask.asked] == ["text", "text"]

    @pytest.mark.asyncio
    async def test_prompted_when_missing(self, tmp_path, prompter, reporter, fake_fetcher):
        ask = prompter(str(tmp_path / "picked"))
        result = await run(
            make_request(template="starter", typescript="base", dry_run=True, yes=True),
            ask, reporter, fake_fetcher(),
        )
        assert result.request.directory == tmp_path / "picked"
        assert ask.asked[0] == ("text", "Where would you like to create your new Fluide project?")

    @pytest.mark.asyncio
    async def test_empty_answer_aborts(self, prompter, reporter, fake_fetcher):
        result = await run(make_request(template="starter"), prompter(""), reporter, fake_fetcher())
        assert result.state is Step.ABORTED
        assert result.exit_code == 1
        assert "No directory provided. See you later, astronaut!" in messages_of(result, "info")


class TestTemplate:
    """Template resolution and download failures."""

    @pytest.mark.asyncio
    async def test_prompted_when_missing(self, tmp_path, prompter, reporter, fake_fetcher):
        ask = prompter("minimal")
        result = await run(
            make_request(directory=tmp_path / "t", typescript="base", dry_run=True, yes=True),
            ask, reporter, fake_fetcher(),
        )
        assert result.request.template == "minimal"
        assert ask.asked == [("select", "How would you like to set up your theme project?")]

    @pytest.mark.asyncio
    async def test_empty_selection_aborts(self, tmp_path, reporter, fake_fetcher):
        class EmptySelect(Prompter):
            def select(self, message, choices):
                return ""

        result = await run(make_request(directory=tmp_path / "t"), EmptySelect(), reporter, fake_fetcher())
        assert result.state is Step.ABORTED
        assert "No template provided. See you later, astronaut!" in messages_of(result, "info")

    @pytest.mark.asyncio
    async def test_commit_is_appended(self, tmp_path, prompter, reporter, fake_fetcher, no_install, no_git):
        fetcher = fake_fetcher()
        await run(
            make_request(directory=tmp_path / "t", template="starter", ref="v2", typescript="base", yes=True),
            prompter(), reporter, fetcher,
        )
        assert fetcher.calls[0][0] == "fluide-dev/fluide/examples/starter#v2"

    @pytest.mark.asyncio
    async def test_not_found_removes_created_directory(self, tmp_path, prompter, reporter):
        target = tmp_path / "theme"

        async def partial_fetch(locator, target_dir, **kwargs):
            Path(target_dir).mkdir()
            (Path(target_dir) / "half.txt").write_text("")
            return FetchOutcome.not_found()

        result = await run(make_request(directory=target, template="nope"), prompter(), reporter, partial_fetch)

        assert result.state is Step.ABORTED
        assert not target.exists()
        assert "Could not find template nope!" in messages_of(result, "error")
        assert Step.RESOLVE_INSTALL not in result.visited

    @pytest.mark.asyncio
    async def test_not_found_keeps_existing_directory(self, tmp_path, prompter, reporter):
        target = tmp_path / "theme"
        target.mkdir()
        (target / "README.md").write_text("mine")

        async def partial_fetch(locator, target_dir, **kwargs):
            (Path(target_dir) / "half.txt").write_text("")
            return FetchOutcome.not_found()

        result = await run(make_request(directory=target, template="nope"), prompter(), reporter, partial_fetch)

        assert result.state is Step.ABORTED
        assert (target / "README.md").read_text() == "mine"

    @pytest.mark.asyncio
    async def test_third_party_without_branch(self, tmp_path, prompter, reporter, fake_fetcher):
        result = await run(
            make_request(directory=tmp_path / "t", template="acct/repo"),
            prompter(), reporter, fake_fetcher(outcome=FetchOutcome.not_found()),
        )
        errors = messages_of(result, "error")
        assert errors[0] == "Could not find template acct/repo!"
        assert "uses the main branch by default" in errors[1]
        assert "acct/repo#branch-name" in errors[1]

    @pytest.mark.asyncio
    async def test_third_party_with_branch(self, tmp_path, prompter, reporter, fake_fetcher):
        result = await run(
            make_request(directory=tmp_path / "t", template="acct/repo#dev"),
            prompter(), reporter, fake_fetcher(outcome=FetchOutcome.not_found()),
        )
        assert "Are you sure this GitHub repo and branch exist?" in messages_of(result, "error")

    @pytest.mark.asyncio
    async def test_other_failures_report_message(self, tmp_path, prompter, reporter, fake_fetcher):
        result = await run(
            make_request(directory=tmp_path / "t", template="starter"),
            prompter(), reporter, fake_fetcher(outcome=FetchOutcome.failed("connection reset")),
        )
        assert result.state is Step.ABORTED
        assert messages_of(result, "error") == ["connection reset"]


class TestCancellation:
    """Cancelling any prompt ends the run without rolling back."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("request_kwargs,answers,message", [
        ({"template": "starter"}, [CANCELLED], "See you later, astronaut!"),
        ({"directory": "DIR"}, [CANCELLED], "See you later, astronaut!"),
        ({"directory": "DIR", "template": "starter"}, [CANCELLED], "no dependencies have been installed"),
        ({"directory": "DIR", "template": "starter"}, [False, CANCELLED], "already been created"),
        ({"directory": "DIR", "template": "starter"}, [False, False, CANCELLED], "no TypeScript"),
    ])
    async def test_cancel_at_prompt(
        self, tmp_path, prompter, reporter, fake_fetcher, request_kwargs, answers, message
    ):
        if request_kwargs.get("directory") == "DIR":
            request_kwargs = dict(request_kwargs, directory=tmp_path / "theme")

        result = await run(make_request(**request_kwargs), prompter(*answers), reporter, fake_fetcher())

        assert result.state is Step.CANCELLED
        assert result.exit_code == 1
        info = messages_of(result, "info")
        assert info[-1].startswith("Operation cancelled.")
        assert message in info[-1]
        if result.request.directory and Step.FETCH_TEMPLATE in result.visited:
            assert (tmp_path / "theme" / "package.json").exists()


class TestToolchain:
    """TypeScript preset selection."""

    @pytest.mark.asyncio
    async def test_yes_defaults_to_strict(self, tmp_path, prompter, reporter, fake_fetcher):
        result = await run(
            make_request(directory=tmp_path / "t", template="starter", dry_run=True, yes=True),
            prompter(), reporter, fake_fetcher(),
        )
        assert result.request.typescript == "strict"
        assert '--typescript <choice> missing. Defaulting to "strict"' in messages_of(result, "warn")

    @pytest.mark.asyncio
    async def test_unsure_becomes_base(self, tmp_path, prompter, reporter, fake_fetcher, no_install, no_git):
        target = tmp_path / "t"
        result = await run(
            make_request(directory=target, template="starter"),
            prompter(False, False, "unsure"), reporter, fake_fetcher(),
        )
        assert result.request.typescript == "base"
        assert json.loads((target / "tsconfig.json").read_text()) == {"extends": "fluide/tsconfigs/base"}
        assert "maximum type safety" in reporter.console.file.getvalue()

    @pytest.mark.asyncio
    async def test_preset_prompted(self, tmp_path, prompter, reporter, fake_fetcher):
        ask = prompter(True, True, "strictest")
        result = await run(
            make_request(directory=tmp_path / "t", template="starter", dry_run=True),
            ask, reporter, fake_fetcher(),
        )
        assert result.request.typescript == "strictest"
        assert ask.asked[-1] == ("select", "How would you like to set up TypeScript?")


class TestIntro:
    """Welcome banner."""

    @pytest.mark.asyncio
    async def test_greets_git_user(self, tmp_path, prompter, reporter, fake_fetcher, monkeypatch):
        monkeypatch.setattr("fluide.core.workflow.get_user_name", lambda: "Ada")
        workflow = CreateWorkflow(
            make_request(directory=tmp_path / "t", template="starter", dry_run=True, yes=True, skip_intro=False),
            prompter(), reporter, package_manager="npm", fetcher=fake_fetcher(),
        )
        result = await workflow.run()

        output = reporter.console.file.getvalue()
        assert "Welcome to fluide" in output
        assert "Ada" in output
        assert "Good luck out there, astronaut!" in output
        # Banners are decoration, not decisions
        assert all("Welcome" not in msg for _, msg in result.decisions)

    @pytest.mark.asyncio
    async def test_markup_characters_in_names(self, tmp_path, prompter, reporter, fake_fetcher, monkeypatch):
        monkeypatch.setattr("fluide.core.workflow.get_user_name", lambda: "Ada [/]")
        monkeypatch.chdir(tmp_path)
        workflow = CreateWorkflow(
            make_request(directory=tmp_path / "my[/]theme", template="starter", dry_run=True, yes=True, skip_intro=False),
            prompter(), reporter, package_manager="npm", fetcher=fake_fetcher(),
        )
        result = await workflow.run()

        assert result.ok
        output = reporter.console.file.getvalue()
        assert "Ada [/]" in output
        assert "cd my[/]theme" in output


class TestUnresolvedState:
    """Reading state a step has not produced yet."""

    def test_directory_before_resolution(self, prompter, reporter):
        workflow = CreateWorkflow(make_request(), prompter(), reporter)
        with pytest.raises(FluideError, match="directory"):
            workflow.directory

    def test_template_before_resolution(self, prompter, reporter):
        workflow = CreateWorkflow(make_request(), prompter(), reporter)
        with pytest.raises(FluideError, match="Template"):
            workflow.template_reference

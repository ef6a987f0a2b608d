"""Tests for the Playbook facade."""

import asyncio
import json
import sys
from pathlib import Path

import pytest

from playbook import Playbook
from playbook.core.config import PlaybookConfig, load_config
from playbook.core.exceptions import PlayAlreadyExistsError, PlayNotFoundError, RunFailedError
from playbook.core.models import Project
from playbook.orchestrator.state import RunOutcome


class TestPlaybookSetup:
    """Construction wires config and store together."""

    def test_store_lives_in_cwd(self, tmp_path: Path):
        book = Playbook(cwd=tmp_path)
        book.create("dev")

        assert (tmp_path / "playbook.yaml").exists()

    def test_line_limit_argument_is_stored(self, tmp_path: Path):
        book = Playbook(cwd=tmp_path, line_limit=50)

        assert book.line_limit == 50
        assert Playbook(cwd=tmp_path).line_limit == 50

    def test_line_limit_from_config(self, tmp_path: Path):
        book = Playbook(cwd=tmp_path, config=PlaybookConfig(line_limit=25))

        assert book.line_limit == 25

    def test_default_line_limit(self, tmp_path: Path):
        assert Playbook(cwd=tmp_path).line_limit == 1

    def test_config_reaches_orchestrator(self, tmp_path: Path):
        load_config({"default_command": "yarn", "termination_grace_seconds": 0.5})

        book = Playbook(cwd=tmp_path)

        assert book.orchestrator.default_command == "yarn"
        assert book.orchestrator.runner.termination_grace_seconds == 0.5


class TestPlaybookPlays:
    """CRUD delegates to the play service."""

    def test_crud_round(self, tmp_path: Path):
        book = Playbook(cwd=tmp_path)
        play = book.create("dev")
        play.projects.append(Project(cwd="web"))
        book.save(play)

        assert [p.name for p in book.get_all()] == ["dev"]
        assert book.get("dev").projects[0].cwd == "web"

        book.delete("dev")
        assert book.get("dev") is None

    def test_create_duplicate(self, tmp_path: Path):
        book = Playbook(cwd=tmp_path)
        book.create("dev")

        with pytest.raises(PlayAlreadyExistsError):
            book.create("dev")


class TestPlaybookDiscovery:
    """discover()/find_projects() scan the working root by default."""

    def test_find_projects(self, tmp_path: Path):
        web = tmp_path / "web"
        web.mkdir()
        (web / "package.json").write_text(json.dumps({"name": "web", "scripts": {"start": "x"}}))

        projects = Playbook(cwd=tmp_path).find_projects()

        assert [(p.cwd, p.name) for p in projects] == [("web", "web:start")]

    def test_discover_other_directory(self, tmp_path: Path):
        sub = tmp_path / "apps"
        (sub / "api").mkdir(parents=True)
        (sub / "api" / "package.json").write_text("{oops")

        result = Playbook(cwd=tmp_path).discover(sub)

        assert result.projects == []
        assert len(result.errors) == 1

    def test_excluded_dirs_from_config(self, tmp_path: Path):
        vendor = tmp_path / "vendor"
        vendor.mkdir()
        (vendor / "package.json").write_text(json.dumps({"scripts": {"start": "x"}}))

        book = Playbook(cwd=tmp_path, config=PlaybookConfig(excluded_dirs=["vendor"]))

        assert book.find_projects() == []


class TestPlaybookRun:
    """run()/cancel() go through the orchestrator."""

    def _python(self, script: str, **kwargs) -> Project:
        return Project(command=sys.executable, args=["-c", script], **kwargs)

    @pytest.mark.asyncio
    async def test_run_by_name(self, tmp_path: Path):
        book = Playbook(cwd=tmp_path, line_limit=10)
        play = book.create("dev")
        play.projects.append(self._python("print('hi')", name="py"))
        book.save(play)
        lines: list[str] = []

        result = await book.run("dev", lines.append)

        assert result.outcome == RunOutcome.COMPLETED
        assert lines == ["[py] hi"]
        assert book.orchestrator.lines == ["[py] hi"]

    @pytest.mark.asyncio
    async def test_run_uses_stored_line_limit(self, tmp_path: Path):
        book = Playbook(cwd=tmp_path)
        book.line_limit = 2
        play = book.create("dev")
        play.projects.append(self._python("for i in range(4): print(i)", name="n"))
        book.save(play)

        await book.run(play, lambda line: None)

        assert book.orchestrator.lines == ["[n] 2", "[n] 3"]

    @pytest.mark.asyncio
    async def test_run_unknown_name(self, tmp_path: Path):
        with pytest.raises(PlayNotFoundError):
            await Playbook(cwd=tmp_path).run("ghost", print)

    @pytest.mark.asyncio
    async def test_run_failure_propagates(self, tmp_path: Path):
        book = Playbook(cwd=tmp_path)
        play = book.create("dev")
        play.projects.append(self._python("raise SystemExit(4)"))
        book.save(play)

        with pytest.raises(RunFailedError):
            await book.run("dev", print)

    @pytest.mark.asyncio
    async def test_cancel_resolves_run(self, tmp_path: Path):
        book = Playbook(cwd=tmp_path)
        play = book.create("dev")
        play.projects.append(self._python("import time; print('up', flush=True); time.sleep(60)"))
        book.save(play)
        lines: list[str] = []

        running = asyncio.create_task(book.run("dev", lines.append))
        while not lines:
            await asyncio.sleep(0.02)
        await asyncio.wait_for(book.cancel(), timeout=10)

        assert (await running).outcome == RunOutcome.CANCELLED


class TestPlaybookFindProjects:
    """find_projects() returns cwds ready to store under the working root."""

    def test_subdirectory_cwds_relative_to_working_root(self, tmp_path: Path):
        shop = tmp_path / "apps" / "shop"
        shop.mkdir(parents=True)
        (shop / "package.json").write_text(json.dumps({"name": "shop", "scripts": {"start": "x"}}))
        book = Playbook(cwd=tmp_path)

        play = book.create("dev")
        play.projects.extend(book.find_projects(tmp_path / "apps"))
        book.save(play)

        assert [p.cwd for p in book.get("dev").projects] == ["apps/shop"]
        assert [p.cwd for p in book.discover(tmp_path / "apps").projects] == ["shop"]

    def test_rebase(self, tmp_path: Path):
        book = Playbook(cwd=tmp_path)

        rebased = book.rebase([Project(cwd="."), Project(cwd="api")], tmp_path / "services")

        assert [p.cwd for p in rebased] == ["services", "services/api"]

"""
Integration tests for shipline CLI.
"""

import json
import shutil
import subprocess

import pytest
from click.testing import CliRunner

from shipline.cli import cli
from shipline.cli.service_helpers import set_factory
from shipline.repository import LocalFileRepository
from shipline.services import ServiceFactory
from tests.mocks.fakes import FakeCollaborators


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def no_config_files(mocker):
    """Keep config files on this machine out of CLI runs."""
    mocker.patch("shipline.core.config.get_config_locations", return_value=[])


@pytest.fixture
def fakes():
    return FakeCollaborators()


@pytest.fixture
def factory(mock_repository, shipline_config, fakes):
    """Install a service factory over the in-memory repository."""
    service_factory = ServiceFactory(
        file_repository=mock_repository,
        config=shipline_config,
        release_collaborators=fakes.as_collaborators(),
    )
    set_factory(service_factory)
    return service_factory


CHAIN = {
    "steps": [
        {"id": "tag", "type": "git.tag", "needs": ["bump"]},
        {"id": "bump", "type": "version", "needs": ["build"]},
        {"id": "build", "type": "build"},
    ]
}


class TestCLIBasic:
    """Basic CLI tests."""

    def test_cli_help(self, runner):
        """Test that CLI help works."""
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "release" in result.output
        assert "component" in result.output

    def test_version_option(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "shipline" in result.output

    def test_release_help_shows_examples(self, runner):
        result = runner.invoke(cli, ["release", "--help"])

        assert result.exit_code == 0
        assert "plan" in result.output
        assert "run" in result.output
        assert "shipline release plan storefront" in result.output


class TestReleasePlanCommand:
    """Tests for 'shipline release plan'."""

    def test_plan_table(self, runner, factory, write_component):
        write_component("api", release=CHAIN)

        result = runner.invoke(cli, ["release", "plan", "api"])

        assert result.exit_code == 0, result.output
        assert "Release plan: api" in result.output
        assert result.output.index("build") < result.output.index("bump")
        assert "Steps reordered based on dependencies" in result.output

    def test_plan_json(self, runner, factory, write_component):
        write_component("api", release={"steps": [{"id": "n", "type": "custom.notify"}]})

        result = runner.invoke(cli, ["release", "plan", "api", "--json"])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["componentId"] == "api"
        assert payload["steps"][0]["status"] == "missing"
        assert payload["steps"][0]["missing"] == ["Missing action 'release.custom.notify'"]

    def test_plan_json_from_config_file(self, runner, factory, write_component, tmp_path):
        write_component("api", release=CHAIN)
        config_file = tmp_path / "shipline.toml"
        config_file.write_text('[output]\nformat = "json"\n')

        result = runner.invoke(cli, ["--config", str(config_file), "release", "plan", "api"])

        assert result.exit_code == 0, result.output
        assert [s["id"] for s in json.loads(result.output)["steps"]] == ["build", "bump", "tag"]

    def test_plan_unknown_component_suggests(self, runner, factory, write_component):
        write_component("api")

        result = runner.invoke(cli, ["release", "plan", "apj"])

        assert result.exit_code == 1
        assert "Error: Component 'apj' not found" in result.output
        assert "Hint: Did you mean: api" in result.output

    def test_plan_cycle(self, runner, factory, write_component):
        write_component(
            "api",
            release={
                "steps": [
                    {"id": "a", "type": "build", "needs": ["b"]},
                    {"id": "b", "type": "build", "needs": ["a"]},
                ]
            },
        )

        result = runner.invoke(cli, ["release", "plan", "api"])

        assert result.exit_code == 1
        assert "Steps contain a cycle" in result.output


class TestReleaseRunCommand:
    """Tests for 'shipline release run'."""

    def test_run_success(self, runner, factory, fakes, write_component):
        write_component("api", release=CHAIN)

        result = runner.invoke(cli, ["release", "run", "api"])

        assert result.exit_code == 0, result.output
        assert "[1/3] build: success" in result.output
        assert "Release succeeded" in result.output
        assert fakes.calls[0] == ("build", "api")

    def test_run_failure_exits_nonzero(self, runner, factory, fakes, write_component):
        fakes.build_exit_code = 3
        write_component("api", release=CHAIN)

        result = runner.invoke(cli, ["release", "run", "api", "--json"])

        assert result.exit_code == 1
        payload = json.loads(result.output)
        assert payload["result"]["overall"] == "failed"
        assert payload["result"]["steps"][0]["error"] == "Build exited with code 3"
        assert [s["status"] for s in payload["result"]["steps"]] == ["failed", "skipped", "skipped"]

    def test_run_quiet(self, runner, factory, write_component):
        write_component("api", release=CHAIN)

        result = runner.invoke(cli, ["release", "run", "api", "--quiet"])

        assert result.exit_code == 0
        assert "[1/3]" not in result.output

    def test_run_missing_release(self, runner, factory, write_component):
        write_component("api")

        result = runner.invoke(cli, ["release", "run", "api"])

        assert result.exit_code == 1
        assert "Release configuration is missing" in result.output
        assert "shipline component set api --json" in result.output


class TestComponentCommands:
    """Tests for 'shipline component'."""

    def test_list(self, runner, factory, write_component):
        write_component("api", release=CHAIN)

        result = runner.invoke(cli, ["component", "list", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output)[0]["id"] == "api"

    def test_set_release(self, runner, factory, write_component, mock_repository, shipline_config):
        write_component("api")

        result = runner.invoke(cli, ["component", "set", "api", "--json", json.dumps({"release": CHAIN})])

        assert result.exit_code == 0, result.output
        stored = mock_repository.read_json(shipline_config.components_dir / "api.json")
        assert len(stored["release"]["steps"]) == 3

    def test_set_from_stdin(self, runner, factory, write_component, mock_repository, shipline_config):
        write_component("api")

        result = runner.invoke(
            cli, ["component", "set", "api", "--json", "-"], input='{"buildCommand": "make dist"}'
        )

        assert result.exit_code == 0, result.output
        stored = mock_repository.read_json(shipline_config.components_dir / "api.json")
        assert stored["buildCommand"] == "make dist"

    def test_set_invalid_json(self, runner, factory, write_component):
        write_component("api")

        result = runner.invoke(cli, ["component", "set", "api", "--json", "{release"])

        assert result.exit_code == 1
        assert "Invalid JSON" in result.output


class TestModuleAndConfigCommands:
    """Tests for 'shipline module' and 'shipline config'."""

    def test_module_list_json(self, runner, factory, write_module):
        write_module("slack", "release.notify")

        result = runner.invoke(cli, ["module", "list", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output)[0]["actions"][0]["id"] == "release.notify"

    def test_module_show_unknown(self, runner, factory):
        result = runner.invoke(cli, ["module", "show", "slack"])

        assert result.exit_code == 1
        assert "Module 'slack' not found" in result.output

    def test_config_show_json(self, runner, factory):
        result = runner.invoke(cli, ["config", "show", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output)["git"]["remote"] == "origin"

    def test_config_path_without_files(self, runner, factory):
        result = runner.invoke(cli, ["config", "path"])

        assert result.exit_code == 0
        assert "No config file found" in result.output


def _git(cwd, *args):
    subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True)


@pytest.mark.integration
@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
class TestReleaseEndToEnd:
    """Runs a real release against a throwaway git repository."""

    @pytest.fixture
    def workdir(self, tmp_path, monkeypatch):
        for var in ("GIT_AUTHOR_NAME", "GIT_COMMITTER_NAME"):
            monkeypatch.setenv(var, "Release Bot")
        for var in ("GIT_AUTHOR_EMAIL", "GIT_COMMITTER_EMAIL"):
            monkeypatch.setenv(var, "bot@example.com")

        work = tmp_path / "work"
        work.mkdir()
        (work / "pyproject.toml").write_text('[project]\nversion = "1.0.0"\n')
        _git(work, "init", "-q")
        _git(work, "add", ".")
        _git(work, "commit", "-q", "-m", "Initial commit")
        return work

    def test_build_bump_tag(self, runner, workdir, shipline_config):
        set_factory(ServiceFactory(file_repository=LocalFileRepository(), config=shipline_config))
        shipline_config.components_dir.mkdir(parents=True)
        record = {
            "name": "Work",
            "localPath": str(workdir),
            "buildCommand": "echo built > build.txt",
            "versionTargets": [{"file": "pyproject.toml"}],
            "release": {
                "steps": [
                    {"id": "changes", "type": "changes", "needs": ["tag"]},
                    {"id": "tag", "type": "git.tag", "needs": ["bump"]},
                    {"id": "bump", "type": "version", "needs": ["build"]},
                    {"id": "build", "type": "build"},
                ]
            },
        }
        (shipline_config.components_dir / "work.json").write_text(json.dumps(record))

        result = runner.invoke(cli, ["release", "run", "work", "--json"])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["result"]["overall"] == "success"
        assert (workdir / "build.txt").exists()
        assert 'version = "1.0.1"' in (workdir / "pyproject.toml").read_text()
        tags = subprocess.run(
            ["git", "tag"], cwd=workdir, check=True, capture_output=True, text=True
        ).stdout.split()
        assert tags == ["1.0.1"]
        changes = payload["result"]["steps"][-1]["data"]
        assert changes["latestTag"] == "1.0.1"
        assert changes["commits"] == []

"""
Unit tests for shipline.core.git module.
"""

import pytest

from shipline.core import git
from shipline.core.components import Component
from shipline.core.errors import CommandError
from shipline.core.process import CommandOutput


@pytest.fixture
def component(tmp_path):
    return Component(id="api", local_path=str(tmp_path))


def fake_git(responses):
    """Build a run_command replacement answering by git subcommand."""
    calls = []

    def _run(argv, cwd=None, **kwargs):
        calls.append(argv)
        exit_code, stdout = responses.get(argv[1], (0, ""))
        return CommandOutput(argv, exit_code, stdout, "fatal: boom\n" if exit_code else "")

    _run.calls = calls
    return _run


class TestTag:
    """Tests for git.tag."""

    def test_lightweight(self, mocker, component):
        run = fake_git({})
        mocker.patch("shipline.core.git.run_command", side_effect=run)

        result = git.tag(component, "1.2.3")

        assert run.calls == [["git", "tag", "1.2.3"]]
        assert result["annotated"] is False

    def test_annotated(self, mocker, component):
        run = fake_git({})
        mocker.patch("shipline.core.git.run_command", side_effect=run)

        git.tag(component, "v2", "Release 2")

        assert run.calls == [["git", "tag", "-a", "v2", "-m", "Release 2"]]

    def test_failure_raises(self, mocker, component):
        mocker.patch("shipline.core.git.run_command", side_effect=fake_git({"tag": (128, "")}))

        with pytest.raises(CommandError) as exc_info:
            git.tag(component, "v1")

        assert "fatal: boom" in exc_info.value.message


class TestPush:
    """Tests for git.push."""

    def test_push_with_tags_to_configured_remote(self, mocker, component, shipline_config):
        shipline_config.set("git", "remote", "upstream")
        run = fake_git({})
        mocker.patch("shipline.core.git.run_command", side_effect=run)

        result = git.push(component, tags=True)

        assert run.calls == [["git", "push", "upstream", "--tags"]]
        assert result["remote"] == "upstream"


class TestChanges:
    """Tests for git.changes."""

    def test_since_latest_tag(self, mocker, component):
        run = fake_git({"describe": (0, "v1.0.0\n"), "log": (0, "abc123\tFix bug\ndef456\tAdd feature\n")})
        mocker.patch("shipline.core.git.run_command", side_effect=run)

        summary = git.changes(component)

        assert summary["latestTag"] == "v1.0.0"
        assert summary["commits"] == [
            {"hash": "abc123", "subject": "Fix bug"},
            {"hash": "def456", "subject": "Add feature"},
        ]
        assert run.calls[1][-1] == "v1.0.0..HEAD"
        assert "diff" not in summary

    def test_untagged_with_diff(self, mocker, component):
        run = fake_git({"describe": (128, ""), "log": (0, "abc\tInitial\n"), "show": (0, "diff text")})
        mocker.patch("shipline.core.git.run_command", side_effect=run)

        summary = git.changes(component, include_diff=True)

        assert summary["latestTag"] is None
        assert run.calls[1][-1] == "HEAD"
        assert summary["diff"] == "diff text"

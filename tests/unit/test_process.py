"""
Unit tests for shipline.core.process module.
"""

import subprocess

import pytest

from shipline.core.errors import CommandError
from shipline.core.process import CommandOutput, run_command, split_command


class TestRunCommand:
    """Tests for the subprocess wrapper."""

    def test_captures_output(self, mocker):
        run = mocker.patch(
            "shipline.core.process.subprocess.run",
            return_value=subprocess.CompletedProcess(["echo", "hi"], 0, "hi\n", ""),
        )

        output = run_command("echo hi", cwd="/tmp")

        assert output.ok
        assert output.stdout == "hi\n"
        args, kwargs = run.call_args
        assert args[0] == ["echo", "hi"]
        assert kwargs["cwd"] == "/tmp"
        assert kwargs["timeout"] == 30.0

    def test_non_zero_exit_is_returned(self, mocker):
        mocker.patch(
            "shipline.core.process.subprocess.run",
            return_value=subprocess.CompletedProcess(["false"], 1, "", "nope"),
        )

        output = run_command(["false"])

        assert output.exit_code == 1
        assert not output.ok

    def test_env_merged_over_environment(self, mocker, monkeypatch):
        monkeypatch.setenv("EXISTING", "1")
        run = mocker.patch(
            "shipline.core.process.subprocess.run",
            return_value=subprocess.CompletedProcess(["x"], 0, "", ""),
        )

        run_command(["x"], env={"EXTRA": "2"})

        env = run.call_args[1]["env"]
        assert env["EXISTING"] == "1"
        assert env["EXTRA"] == "2"

    def test_spawn_failure(self, mocker):
        mocker.patch("shipline.core.process.subprocess.run", side_effect=FileNotFoundError("no such file"))

        with pytest.raises(CommandError) as exc_info:
            run_command(["missing-tool"])

        assert "missing-tool" in exc_info.value.message

    def test_timeout(self, mocker):
        mocker.patch(
            "shipline.core.process.subprocess.run",
            side_effect=subprocess.TimeoutExpired(["slow"], 5),
        )

        with pytest.raises(CommandError) as exc_info:
            run_command(["slow"], timeout=5)

        assert "timed out" in exc_info.value.message

    def test_decodes_invalid_bytes_with_replacement(self, mocker):
        run = mocker.patch(
            "shipline.core.process.subprocess.run",
            return_value=subprocess.CompletedProcess(["x"], 0, "", ""),
        )

        run_command(["x"])

        kwargs = run.call_args[1]
        assert kwargs["encoding"] == "utf-8"
        assert kwargs["errors"] == "replace"

    def test_unbalanced_quotes(self, mocker):
        run = mocker.patch("shipline.core.process.subprocess.run")

        with pytest.raises(CommandError) as exc_info:
            run_command("./notify.sh 'oops")

        assert "Cannot parse command" in exc_info.value.message
        run.assert_not_called()

    def test_empty_command(self):
        with pytest.raises(CommandError):
            run_command("")


class TestCommandOutput:
    """Tests for CommandOutput helpers."""

    def test_check_passes_on_success(self):
        output = CommandOutput(["git", "tag", "v1"], 0)

        assert output.check("git tag") is output

    def test_check_raises_with_stderr(self):
        output = CommandOutput(["git", "tag", "v1"], 128, "", "fatal: tag 'v1' already exists\n")

        with pytest.raises(CommandError) as exc_info:
            output.check("git tag v1")

        assert exc_info.value.message == "git tag v1 exited with code 128: fatal: tag 'v1' already exists"
        assert exc_info.value.exit_code == 128

    def test_split_command(self):
        assert split_command("make 'dist all'") == ["make", "dist all"]
        assert split_command(["a", "b"]) == ["a", "b"]

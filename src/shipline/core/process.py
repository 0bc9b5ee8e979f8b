"""
External Commands
=================

Thin wrapper around ``subprocess.run`` shared by the build, git and module
collaborators. Commands that cannot be started or that time out raise
CommandError; a non-zero exit is returned to the caller, who decides
whether it is a failure.
"""

import os
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from shipline.core.config import get_config
from shipline.core.errors import CommandError
from shipline.core.logger import get_logger

logger = get_logger(__name__)

__all__ = [
    "CommandOutput",
    "run_command",
    "split_command",
]


@dataclass
class CommandOutput:
    """Captured result of an external command."""

    command: List[str]
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def check(self, what: str) -> "CommandOutput":
        """
        Raise CommandError unless the command exited with code 0.

        Args:
            what: Short description used in the error message

        Returns:
            self, for chaining
        """
        if not self.ok:
            detail = self.stderr.strip() or self.stdout.strip()
            message = f"{what} exited with code {self.exit_code}"
            if detail:
                message = f"{message}: {detail.splitlines()[-1]}"
            raise CommandError(message, self.command, self.exit_code, self.stderr)
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "command": " ".join(shlex.quote(part) for part in self.command),
            "exitCode": self.exit_code,
            "stdout": self.stdout,
            "stderr": self.stderr,
        }


def split_command(command: Union[str, Sequence[str]]) -> List[str]:
    """
    Split a command string into argv, leaving lists untouched.

    Raises:
        CommandError: If the string cannot be parsed (e.g. unbalanced quotes)
    """
    if isinstance(command, str):
        try:
            return shlex.split(command)
        except ValueError as e:
            raise CommandError(f"Cannot parse command '{command}': {e}") from e
    return list(command)


def run_command(
    command: Union[str, Sequence[str]],
    cwd: Optional[Union[str, Path]] = None,
    input_text: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    timeout: Optional[float] = None,
) -> CommandOutput:
    """
    Run an external command and capture its output.

    Args:
        command: Command string (split with shlex) or argv list
        cwd: Working directory
        input_text: Text written to the command's stdin
        env: Extra environment variables merged over os.environ
        timeout: Timeout in seconds (defaults to [commands] timeout)

    Returns:
        CommandOutput with exit code and captured streams

    Raises:
        CommandError: If the command is empty, cannot be parsed, cannot be
            started or times out
    """
    argv = split_command(command)
    if not argv:
        raise CommandError("Command is empty")

    if timeout is None:
        timeout = get_config().command_timeout

    full_env = None
    if env:
        full_env = dict(os.environ)
        full_env.update(env)

    logger.debug(f"Running {argv} in {cwd or os.getcwd()}")
    try:
        result = subprocess.run(
            argv,
            cwd=str(cwd) if cwd else None,
            input=input_text,
            env=full_env,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise CommandError(f"Command timed out after {e.timeout}s: {argv[0]}", argv) from e
    except OSError as e:
        raise CommandError(f"Failed to start '{argv[0]}': {e}", argv) from e

    if result.returncode != 0:
        logger.debug(f"{argv[0]} exited with code {result.returncode}")

    return CommandOutput(
        command=argv,
        exit_code=result.returncode,
        stdout=result.stdout or "",
        stderr=result.stderr or "",
    )

"""
Component Build
===============

Runs a component's ``buildCommand`` inside its local working copy.

The command is split with shlex and executed directly, or handed to
``/bin/sh -c`` when ``[commands] shell`` is enabled (the default), so
pipelines and ``&&`` work in build commands.
"""

from typing import Any, Dict, List, Optional, Tuple

from shipline.core.components import Component
from shipline.core.config import get_config
from shipline.core.errors import ExecutionError
from shipline.core.logger import get_logger
from shipline.core.process import run_command, split_command

logger = get_logger(__name__)

__all__ = ["run_build"]


def _build_argv(command: str, shell: bool) -> List[str]:
    if shell:
        return ["/bin/sh", "-c", command]
    return split_command(command)


def run_build(component: Component, shell: Optional[bool] = None) -> Tuple[Dict[str, Any], int]:
    """
    Build a component.

    Args:
        component: Component to build
        shell: Run through /bin/sh (defaults to [commands] shell)

    Returns:
        Tuple of (build output, exit code). A non-zero exit code is returned,
        not raised.

    Raises:
        ExecutionError: If the component has no build command
        CommandError: If the command cannot be started or times out
    """
    if not component.build_command:
        raise ExecutionError(
            f"Component '{component.id}' has no buildCommand",
            field="buildCommand",
            hints=[f"Set one with: shipline component set {component.id} --json"],
        )

    if shell is None:
        shell = bool(get_config().get("commands", "shell", True))

    logger.info(f"Building '{component.id}': {component.build_command}")
    output = run_command(_build_argv(component.build_command, shell), cwd=component.path)

    artifact = component.build_artifact
    data = {
        "component": component.id,
        "command": component.build_command,
        "exitCode": output.exit_code,
        "stdout": output.stdout,
        "stderr": output.stderr,
        "artifact": artifact or None,
        "artifactExists": bool(artifact) and (component.path / artifact).exists(),
    }
    return data, output.exit_code

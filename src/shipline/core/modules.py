"""
Modules
=======

A module is an externally supplied extension declaring named actions. Each
module lives in its own directory under the configured modules directory,
with a manifest named after the module:

    <modules_dir>/
        slack/
            slack.json
            notify.sh

```json
{
  "name": "Slack",
  "version": "1.0.0",
  "actions": [
    {"id": "release.notify", "label": "Post release note", "command": "./notify.sh"}
  ]
}
```

Actions are run by ModuleActionDispatcher as subprocesses inside the module
directory. The dispatcher passes context through environment variables:

- SHIPLINE_MODULE: module id
- SHIPLINE_ACTION: action id
- SHIPLINE_TARGET: target (component id) when given
- SHIPLINE_PAYLOAD: JSON payload when given (also written to stdin)

If the action prints a JSON object on stdout it becomes the response data.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from shipline.core.components import suggest_ids
from shipline.core.errors import (
    CommandError,
    ExecutionError,
    InvalidRecordError,
    ModuleManifestNotFoundError,
    NoMatchingModuleError,
)
from shipline.core.logger import get_logger
from shipline.core.process import run_command
from shipline.repository.protocol import FileRepositoryProtocol

logger = get_logger(__name__)

__all__ = [
    "ModuleAction",
    "ModuleManifest",
    "ModuleRegistry",
    "ModuleActionDispatcher",
]


@dataclass
class ModuleAction:
    """A named action declared by a module."""

    id: str
    label: str = ""
    command: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "label": self.label, "command": self.command}


@dataclass
class ModuleManifest:
    """Parsed module manifest."""

    id: str
    name: str = ""
    version: str = ""
    description: str = ""
    actions: List[ModuleAction] = field(default_factory=list)
    path: Optional[Path] = None

    def get_action(self, action_id: str) -> Optional[ModuleAction]:
        for action in self.actions:
            if action.id == action_id:
                return action
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "actions": [a.to_dict() for a in self.actions],
            "path": str(self.path) if self.path else None,
        }

    @classmethod
    def from_dict(
        cls, module_id: str, data: Dict[str, Any], path: Optional[Path] = None
    ) -> "ModuleManifest":
        """
        Create from a parsed manifest.

        Raises:
            ValueError: If actions are malformed
        """
        raw_actions = data.get("actions") or []
        if not isinstance(raw_actions, list):
            raise ValueError("'actions' must be a list")

        actions = []
        for raw in raw_actions:
            if not isinstance(raw, dict) or not isinstance(raw.get("id"), str):
                raise ValueError("Each action needs a string 'id'")
            actions.append(
                ModuleAction(
                    id=raw["id"],
                    label=str(raw.get("label") or raw["id"]),
                    command=str(raw.get("command") or ""),
                )
            )

        return cls(
            id=module_id,
            name=str(data.get("name") or module_id),
            version=str(data.get("version") or ""),
            description=str(data.get("description") or ""),
            actions=actions,
            path=path,
        )


class ModuleRegistry:
    """
    Module manifests stored on disk.

    Args:
        repository: File repository used for all I/O
        directory: Directory holding one sub-directory per module
    """

    def __init__(self, repository: FileRepositoryProtocol, directory: Union[str, Path]) -> None:
        self.repository = repository
        self.directory = Path(directory)

    def manifest_path(self, module_id: str) -> Path:
        return self.directory / module_id / f"{module_id}.json"

    def available_module_ids(self) -> List[str]:
        """Ids of all modules that have a manifest, sorted."""
        ids = []
        for module_dir in self.repository.list_dirs(self.directory):
            module_id = Path(module_dir).name
            if self.repository.is_file(self.manifest_path(module_id)):
                ids.append(module_id)
        return sorted(ids)

    def load_module(self, module_id: str) -> Optional[ModuleManifest]:
        """
        Load a module manifest.

        Returns:
            The manifest, or None if the module does not exist

        Raises:
            InvalidRecordError: If the manifest exists but cannot be parsed
        """
        path = self.manifest_path(module_id)
        if not self.repository.is_file(path):
            return None

        try:
            data = json.loads(self.repository.read_text(path))
        except json.JSONDecodeError as e:
            raise InvalidRecordError(str(path), e.msg, field="modules") from e
        if not isinstance(data, dict):
            raise InvalidRecordError(str(path), "expected a JSON object", field="modules")

        try:
            return ModuleManifest.from_dict(module_id, data, path=path.parent)
        except ValueError as e:
            raise InvalidRecordError(str(path), str(e), field="modules") from e

    def require_module(self, module_id: str) -> ModuleManifest:
        """
        Load a module manifest or fail with suggestions.

        Raises:
            ModuleManifestNotFoundError: If the module does not exist
        """
        manifest = self.load_module(module_id)
        if manifest is None:
            raise ModuleManifestNotFoundError(
                module_id, suggest_ids(module_id, self.available_module_ids())
            )
        return manifest


class ModuleActionDispatcher:
    """Runs module actions as subprocesses."""

    def __init__(self, registry: ModuleRegistry) -> None:
        self.registry = registry

    def run_action(
        self,
        module_id: str,
        action_id: str,
        target: Optional[str] = None,
        payload: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Run one module action.

        Args:
            module_id: Module declaring the action
            action_id: Action id, e.g. "release.notify"
            target: Optional target passed to the action (component id)
            payload: Optional JSON payload

        Returns:
            Response dict with module, action, exitCode, stdout, stderr and,
            when the action printed a JSON object, its parsed ``data``

        Raises:
            ModuleManifestNotFoundError: If the module does not exist
            NoMatchingModuleError: If the module does not declare the action
            ExecutionError: If the action has no command, cannot start or
                exits non-zero
        """
        manifest = self.registry.require_module(module_id)
        action = manifest.get_action(action_id)
        if action is None:
            raise NoMatchingModuleError(action_id)
        if not action.command:
            raise ExecutionError(
                f"Action '{action_id}' in module '{module_id}' has no command",
                field="modules",
            )

        env = {"SHIPLINE_MODULE": module_id, "SHIPLINE_ACTION": action_id}
        if target:
            env["SHIPLINE_TARGET"] = target
        if payload is not None:
            env["SHIPLINE_PAYLOAD"] = payload

        logger.debug(f"Dispatching {action_id} to module '{module_id}'")
        try:
            output = run_command(action.command, cwd=manifest.path, input_text=payload, env=env)
        except CommandError as e:
            raise ExecutionError(f"Module '{module_id}' action '{action_id}': {e.message}") from e

        if not output.ok:
            detail = output.stderr.strip()
            message = f"Module '{module_id}' action '{action_id}' exited with code {output.exit_code}"
            if detail:
                message = f"{message}: {detail.splitlines()[-1]}"
            raise ExecutionError(message, field="modules")

        response: Dict[str, Any] = {
            "module": module_id,
            "action": action_id,
            "exitCode": output.exit_code,
            "stdout": output.stdout,
            "stderr": output.stderr,
        }
        parsed = _parse_json_object(output.stdout)
        if parsed is not None:
            response["data"] = parsed
        return response


def _parse_json_object(text: str) -> Optional[Dict[str, Any]]:
    text = text.strip()
    if not text.startswith("{"):
        return None
    try:
        value = json.loads(text)
    except json.JSONDecodeError:
        return None
    return value if isinstance(value, dict) else None

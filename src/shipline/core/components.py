"""
Component Records
=================

A component is a releasable unit of software: where it lives, how it is
built, which files carry its version, which modules are bound to it and how
it is released. Each component is stored as one JSON file named after its
id inside the configured components directory:

```json
{
  "name": "Storefront API",
  "localPath": "~/src/storefront",
  "buildCommand": "make dist",
  "buildArtifact": "dist/storefront.tar.gz",
  "versionTargets": [{"file": "pyproject.toml"}],
  "modules": {"slack": {}},
  "release": {
    "steps": [
      {"id": "build", "type": "build"},
      {"id": "tag", "type": "git.tag", "needs": ["build"]},
      {"id": "notify", "type": "notify", "needs": ["tag"]}
    ]
  }
}
```

The record id always comes from the file name.
"""

import difflib
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from shipline.core.errors import (
    ComponentNotFoundError,
    InvalidRecordError,
    PipelineValidationError,
)
from shipline.core.logger import get_logger
from shipline.core.pipeline.step import Step
from shipline.repository.protocol import FileRepositoryProtocol

logger = get_logger(__name__)

__all__ = [
    "VersionTarget",
    "ReleaseConfig",
    "Component",
    "ComponentStore",
    "suggest_ids",
]

RECORD_SUFFIX = ".json"


def suggest_ids(wanted: str, known: List[str], limit: int = 3) -> List[str]:
    """Return the known ids closest to ``wanted``."""
    return difflib.get_close_matches(wanted, known, n=limit, cutoff=0.5)


@dataclass
class VersionTarget:
    """A file that carries the component's version string."""

    file: str
    pattern: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"file": self.file}
        if self.pattern:
            d["pattern"] = self.pattern
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VersionTarget":
        if not isinstance(data, dict) or not isinstance(data.get("file"), str):
            raise ValueError("versionTargets entries need a string 'file'")
        pattern = data.get("pattern")
        return cls(file=data["file"], pattern=pattern if isinstance(pattern, str) else None)


@dataclass
class ReleaseConfig:
    """
    Release block of a component.

    Attributes:
        enabled: Pipeline switch; None means enabled
        steps: Declared release steps, unordered
        settings: Free-form settings, kept for round-tripping
    """

    enabled: Optional[bool] = None
    steps: List[Step] = field(default_factory=list)
    settings: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_enabled(self) -> bool:
        return self.enabled is not False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        d: Dict[str, Any] = {}
        if self.enabled is not None:
            d["enabled"] = self.enabled
        if self.steps:
            d["steps"] = [step.to_dict() for step in self.steps]
        if self.settings:
            d["settings"] = dict(self.settings)
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReleaseConfig":
        """
        Create from dictionary.

        Raises:
            PipelineValidationError: If the block or one of its steps is malformed
        """
        if not isinstance(data, dict):
            raise PipelineValidationError("Release block must be a JSON object", field="release")

        enabled = data.get("enabled")
        if enabled is not None and not isinstance(enabled, bool):
            raise PipelineValidationError("'enabled' must be true or false", field="release.enabled")

        raw_steps = data.get("steps") or []
        if not isinstance(raw_steps, list):
            raise PipelineValidationError("'steps' must be a list", field="release.steps")

        steps = []
        for raw in raw_steps:
            if not isinstance(raw, dict):
                raise PipelineValidationError("Each step must be a JSON object", field="release.steps")
            try:
                steps.append(Step.from_dict(raw))
            except ValueError as e:
                raise PipelineValidationError(str(e), field="release.steps") from e

        settings = data.get("settings") or {}
        if not isinstance(settings, dict):
            raise PipelineValidationError("'settings' must be a JSON object", field="release.settings")

        return cls(enabled=enabled, steps=steps, settings=dict(settings))


@dataclass
class Component:
    """A releasable component record."""

    id: str
    name: str = ""
    local_path: str = ""
    remote_path: str = ""
    build_artifact: str = ""
    build_command: Optional[str] = None
    version_targets: List[VersionTarget] = field(default_factory=list)
    modules: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    release: Optional[ReleaseConfig] = None

    @property
    def path(self) -> Path:
        """Local working copy, with ``~`` expanded."""
        return Path(self.local_path or ".").expanduser()

    @property
    def module_ids(self) -> List[str]:
        """Ids of the modules bound to this component, in record order."""
        return list(self.modules.keys())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the on-disk JSON shape (without the id)."""
        d: Dict[str, Any] = {
            "name": self.name,
            "localPath": self.local_path,
            "remotePath": self.remote_path,
            "buildArtifact": self.build_artifact,
        }
        if self.build_command:
            d["buildCommand"] = self.build_command
        if self.version_targets:
            d["versionTargets"] = [t.to_dict() for t in self.version_targets]
        if self.modules:
            d["modules"] = {k: dict(v) for k, v in self.modules.items()}
        if self.release is not None:
            d["release"] = self.release.to_dict()
        return d

    @classmethod
    def from_dict(cls, component_id: str, data: Dict[str, Any]) -> "Component":
        """
        Create from a parsed JSON record.

        Raises:
            ValueError: If a field has the wrong shape
            PipelineValidationError: If the release block is malformed
        """
        targets = data.get("versionTargets") or []
        if not isinstance(targets, list):
            raise ValueError("'versionTargets' must be a list")

        modules = data.get("modules") or {}
        if isinstance(modules, list):
            modules = {str(m): {} for m in modules}
        if not isinstance(modules, dict):
            raise ValueError("'modules' must be an object keyed by module id")

        release = data.get("release")
        return cls(
            id=component_id,
            name=str(data.get("name") or component_id),
            local_path=str(data.get("localPath") or ""),
            remote_path=str(data.get("remotePath") or ""),
            build_artifact=str(data.get("buildArtifact") or ""),
            build_command=data.get("buildCommand") or None,
            version_targets=[VersionTarget.from_dict(t) for t in targets],
            modules={str(k): (v if isinstance(v, dict) else {}) for k, v in modules.items()},
            release=ReleaseConfig.from_dict(release) if release is not None else None,
        )


class ComponentStore:
    """
    Component records stored as JSON files.

    Args:
        repository: File repository used for all I/O
        directory: Directory holding ``<id>.json`` records
    """

    def __init__(self, repository: FileRepositoryProtocol, directory: Union[str, Path]) -> None:
        self.repository = repository
        self.directory = Path(directory)

    def record_path(self, component_id: str) -> Path:
        return self.directory / f"{component_id}{RECORD_SUFFIX}"

    def list_ids(self) -> List[str]:
        """Ids of all stored components, sorted."""
        files = self.repository.list_files(self.directory, f"*{RECORD_SUFFIX}")
        return sorted(Path(f).stem for f in files)

    def load(self, component_id: str) -> Component:
        """
        Load a component record.

        Raises:
            ComponentNotFoundError: If no record exists (with nearest ids)
            InvalidRecordError: If the record is not valid JSON or has bad fields
            PipelineValidationError: If the release block is malformed
        """
        path = self.record_path(component_id)
        if not self.repository.is_file(path):
            raise ComponentNotFoundError(component_id, suggest_ids(component_id, self.list_ids()))

        try:
            data = json.loads(self.repository.read_text(path))
        except json.JSONDecodeError as e:
            raise InvalidRecordError(str(path), e.msg) from e
        if not isinstance(data, dict):
            raise InvalidRecordError(str(path), "expected a JSON object")

        try:
            return Component.from_dict(component_id, data)
        except ValueError as e:
            raise InvalidRecordError(str(path), str(e)) from e

    def list(self) -> List[Component]:
        """Load every stored component, skipping unreadable records."""
        components = []
        for component_id in self.list_ids():
            try:
                components.append(self.load(component_id))
            except (InvalidRecordError, PipelineValidationError) as e:
                logger.warning(f"Skipping component '{component_id}': {e.message}")
        return components

    def save(self, component: Component) -> Path:
        """Write a component record, returning its path."""
        path = self.record_path(component.id)
        self.repository.write_text(path, json.dumps(component.to_dict(), indent=2) + "\n")
        logger.info(f"Saved component '{component.id}' to {path}")
        return path

    def update(self, component_id: str, patch: Dict[str, Any]) -> Component:
        """
        Replace top-level fields of an existing record.

        Keys are the record's camelCase JSON keys; nested objects are
        replaced, not merged.

        Raises:
            ComponentNotFoundError: If no record exists
            InvalidRecordError: If the patched record is invalid
            PipelineValidationError: If the patched release block is malformed
        """
        current = self.load(component_id).to_dict()
        current.update(patch)
        current.pop("id", None)
        try:
            component = Component.from_dict(component_id, current)
        except ValueError as e:
            raise InvalidRecordError(str(self.record_path(component_id)), str(e)) from e
        self.save(component)
        return component

    def set_release(self, component_id: str, release: Dict[str, Any]) -> Component:
        """Replace the release block of an existing record."""
        return self.update(component_id, {"release": release})

"""
Version Targets
===============

Reads and bumps the semantic version stored in a component's
``versionTargets``. Each target names a file (relative to the component's
local path) and an optional regular expression whose first capture group is
the version. Targets without a pattern use ``[version] default_pattern``.

The first target is authoritative when reading; a bump rewrites every
target and fails if any of them disagrees with the first.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from shipline.core.components import Component, VersionTarget
from shipline.core.config import DEFAULT_VERSION_PATTERN, get_config
from shipline.core.errors import ExecutionError
from shipline.core.logger import get_logger
from shipline.repository import FileRepositoryProtocol, LocalFileRepository

logger = get_logger(__name__)

__all__ = [
    "BUMP_TYPES",
    "VersionInfo",
    "increment_version",
    "read_version",
    "bump_version",
]

BUMP_TYPES = ("patch", "minor", "major")

_SEMVER = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")


@dataclass
class VersionInfo:
    """Version found in a target file."""

    version: str
    file: str
    pattern: str

    def to_dict(self) -> Dict[str, Any]:
        return {"version": self.version, "file": self.file, "pattern": self.pattern}


def increment_version(version: str, bump: str) -> Optional[str]:
    """
    Increment a MAJOR.MINOR.PATCH version.

    Returns:
        The new version, or None if ``version`` or ``bump`` is invalid

    Example:
        >>> increment_version("1.4.2", "minor")
        '1.5.0'
    """
    match = _SEMVER.match(version)
    if not match or bump not in BUMP_TYPES:
        return None
    major, minor, patch = (int(p) for p in match.groups())
    if bump == "major":
        return f"{major + 1}.0.0"
    if bump == "minor":
        return f"{major}.{minor + 1}.0"
    return f"{major}.{minor}.{patch + 1}"


def _pattern_for(target: VersionTarget) -> str:
    if target.pattern:
        return target.pattern
    return get_config().get("version", "default_pattern") or DEFAULT_VERSION_PATTERN


def _find(
    component: Component, target: VersionTarget, repository: FileRepositoryProtocol
) -> Tuple[Path, str, "re.Match[str]", str]:
    path = component.path / target.file
    if not repository.is_file(path):
        raise ExecutionError(f"Version file not found: {path}", field="versionTargets")

    pattern = _pattern_for(target)
    try:
        regex = re.compile(pattern, re.MULTILINE)
    except re.error as e:
        raise ExecutionError(f"Invalid version pattern '{pattern}': {e}", field="versionTargets") from e

    try:
        content = repository.read_text(path)
    except (OSError, UnicodeDecodeError) as e:
        raise ExecutionError(f"Cannot read version file {path}: {e}", field="versionTargets") from e
    match = regex.search(content)
    if match is None or match.lastindex is None:
        raise ExecutionError(f"No version matching '{pattern}' in {path}", field="versionTargets")
    return path, content, match, pattern


def _targets(component: Component) -> List[VersionTarget]:
    if not component.version_targets:
        raise ExecutionError(
            f"Component '{component.id}' has no versionTargets",
            field="versionTargets",
            hints=[f"Add versionTargets with: shipline component set {component.id} --json"],
        )
    return component.version_targets


def read_version(
    component: Component, repository: Optional[FileRepositoryProtocol] = None
) -> VersionInfo:
    """
    Read the current version from the component's first version target.

    Raises:
        ExecutionError: If there are no targets or no version can be found
    """
    repository = repository or LocalFileRepository()
    target = _targets(component)[0]
    _, _, match, pattern = _find(component, target, repository)
    return VersionInfo(version=match.group(1), file=target.file, pattern=pattern)


def bump_version(
    component: Component,
    bump: str = "patch",
    repository: Optional[FileRepositoryProtocol] = None,
) -> Dict[str, Any]:
    """
    Bump the version in every version target.

    Args:
        component: Component whose version is bumped
        bump: "patch", "minor" or "major"
        repository: File repository (defaults to the local filesystem)

    Returns:
        Dict with oldVersion, newVersion, bump and the updated files

    Raises:
        ExecutionError: On invalid bump type, missing or inconsistent targets,
            or when a version file cannot be read or written
    """
    repository = repository or LocalFileRepository()
    targets = _targets(component)

    found = [(target, _find(component, target, repository)) for target in targets]
    old_version = found[0][1][2].group(1)

    for target, (_, _, match, _) in found[1:]:
        if match.group(1) != old_version:
            raise ExecutionError(
                f"Version mismatch: {targets[0].file} has {old_version}, "
                f"{target.file} has {match.group(1)}",
                field="versionTargets",
            )

    new_version = increment_version(old_version, bump)
    if new_version is None:
        raise ExecutionError(
            f"Cannot bump '{old_version}' with '{bump}'",
            field="bump",
            hints=[f"Use one of: {', '.join(BUMP_TYPES)}"],
        )

    files = []
    for target, (path, content, match, _) in found:
        start, end = match.span(1)
        try:
            repository.write_text(path, content[:start] + new_version + content[end:])
        except OSError as e:
            raise ExecutionError(
                f"Cannot write version file {path}: {e}", field="versionTargets"
            ) from e
        files.append(target.file)

    logger.info(f"Bumped '{component.id}' {old_version} -> {new_version}")
    return {
        "component": component.id,
        "oldVersion": old_version,
        "newVersion": new_version,
        "bump": bump,
        "files": files,
    }

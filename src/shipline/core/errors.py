"""
Exception Classes for Release Pipelines
=======================================

This module defines the exception hierarchy used throughout shipline.

Every error carries a human-readable message, the configuration field it
relates to (e.g. "release.steps"), a list of remediation hints and an
optional list of detail strings (ids involved in a cycle, suggested ids,
candidate modules).

Two families matter to callers:

- Structural errors (PipelineValidationError, NotFoundError and
  AmbiguousModuleError when raised before execution) reject a whole
  plan or run before any step executes.
- ExecutionError and its subclasses describe a single step failing. The
  run orchestrator converts them into Failed step results.
"""

from typing import Any, Dict, List, Optional, Sequence


class ShiplineError(Exception):
    """
    Base class for all shipline errors.

    Attributes:
        message: Explanation of the error
        field: Configuration field the error relates to
        hints: Remediation hints shown to the user
        details: Extra diagnostic values (ids, suggestions)
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        hints: Optional[Sequence[str]] = None,
        details: Optional[Sequence[str]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.hints: List[str] = list(hints or [])
        self.details: List[str] = list(details or [])

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "field": self.field,
            "hints": self.hints,
            "details": self.details,
        }


# =============================================================================
# Structural errors
# =============================================================================


class PipelineValidationError(ShiplineError):
    """A step list or release configuration is structurally invalid."""


class DuplicateStepIdError(PipelineValidationError):
    """Two steps in the same list share an id."""

    def __init__(self, step_id: str, field: Optional[str] = None) -> None:
        super().__init__(f"Duplicate step id '{step_id}'", field=field)
        self.step_id = step_id


class UnknownDependencyError(PipelineValidationError):
    """A step lists a dependency that is not present in the same list."""

    def __init__(self, step_id: str, need: str, field: Optional[str] = None) -> None:
        super().__init__(
            f"Step '{step_id}' depends on unknown step '{need}'",
            field=field,
        )
        self.step_id = step_id
        self.need = need


class DependencyCycleError(PipelineValidationError):
    """The dependency graph contains at least one cycle."""

    def __init__(self, pending: Sequence[str], field: Optional[str] = None) -> None:
        super().__init__("Steps contain a cycle", field=field, details=pending)

    @property
    def pending(self) -> List[str]:
        """Ids of the steps that could not be ordered."""
        return self.details


class MissingReleaseConfigError(PipelineValidationError):
    """A component has no release block."""

    def __init__(self, component_id: str) -> None:
        super().__init__(
            "Release configuration is missing",
            field="release",
            hints=[
                f"Use 'shipline component set {component_id} --json' to add a release block",
                "See 'shipline release --help' for examples",
            ],
            details=[component_id],
        )
        self.component_id = component_id


class UnsupportedCoreStepTypeError(PipelineValidationError):
    """A built-in step type has no handler in the executor."""

    def __init__(self, step_type: str, field: Optional[str] = "release.steps") -> None:
        super().__init__(f"Unsupported core step '{step_type}'", field=field)
        self.step_type = step_type


# =============================================================================
# Lookup errors
# =============================================================================


class NotFoundError(ShiplineError):
    """A configuration record could not be found."""

    entity = "record"

    def __init__(self, record_id: str, suggestions: Optional[Sequence[str]] = None) -> None:
        suggestions = list(suggestions or [])
        hints = []
        if suggestions:
            hints.append("Did you mean: " + ", ".join(suggestions))
        super().__init__(
            f"{self.entity.capitalize()} '{record_id}' not found",
            field=self.entity,
            hints=hints,
            details=suggestions,
        )
        self.record_id = record_id

    @property
    def suggestions(self) -> List[str]:
        """Nearest known ids."""
        return self.details


class InvalidRecordError(ShiplineError):
    """A stored record exists but cannot be parsed."""

    def __init__(self, path: str, reason: str, field: Optional[str] = None) -> None:
        super().__init__(f"Invalid record {path}: {reason}", field=field, details=[path])
        self.path = path


class ComponentNotFoundError(NotFoundError):
    """No component record exists for the requested id."""

    entity = "component"


class ModuleManifestNotFoundError(NotFoundError):
    """No module manifest exists for the requested id."""

    entity = "module"


# =============================================================================
# Execution errors
# =============================================================================


class ExecutionError(ShiplineError):
    """A single step failed while executing."""


class NoMatchingModuleError(ExecutionError):
    """No bound module advertises the requested action."""

    def __init__(self, action_id: str) -> None:
        super().__init__(
            f"No module provides action '{action_id}'",
            field="modules",
            hints=[f"Add an action named '{action_id}' to one of the component's modules"],
        )
        self.action_id = action_id


class AmbiguousModuleError(ExecutionError):
    """More than one bound module advertises the same action.

    Raised by the release adapter before execution when it can be
    detected, and by the executor at dispatch time otherwise.
    """

    def __init__(self, action_id: str, candidates: Sequence[str]) -> None:
        candidates = list(candidates)
        super().__init__(
            f"Action '{action_id}' is provided by multiple modules: {', '.join(candidates)}",
            field="modules",
            hints=["Bind exactly one module that provides each release action"],
            details=candidates,
        )
        self.action_id = action_id

    @property
    def candidates(self) -> List[str]:
        """Module ids that declare the action."""
        return self.details


class CommandError(ExecutionError):
    """An external command could not be started or exited unsuccessfully."""

    def __init__(
        self,
        message: str,
        command: Optional[Sequence[str]] = None,
        exit_code: Optional[int] = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message, field="command")
        self.command = list(command or [])
        self.exit_code = exit_code
        self.stderr = stderr


__all__ = [
    "ShiplineError",
    "PipelineValidationError",
    "DuplicateStepIdError",
    "UnknownDependencyError",
    "DependencyCycleError",
    "MissingReleaseConfigError",
    "UnsupportedCoreStepTypeError",
    "NotFoundError",
    "InvalidRecordError",
    "ComponentNotFoundError",
    "ModuleManifestNotFoundError",
    "ExecutionError",
    "NoMatchingModuleError",
    "AmbiguousModuleError",
    "CommandError",
]

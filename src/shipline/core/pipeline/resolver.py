"""
Capability Resolvers
====================

A capability resolver answers two questions for the planner:

- is this step type supported?
- if not, what is missing?

ModuleActionResolver combines a fixed set of built-in step types with the
actions advertised by externally supplied modules. A step type ``T`` is
provided by a module when the module declares an action whose id is the
namespaced form ``<namespace>.T`` (``release.T`` for release pipelines).
"""

from typing import Iterable, List, Protocol, Sequence

__all__ = [
    "CapabilityResolver",
    "ActionProvider",
    "ModuleActionResolver",
]


class CapabilityResolver(Protocol):
    """Protocol deciding which step types a pipeline can execute."""

    def is_supported(self, step_type: str) -> bool:
        """Return True if steps of this type can be executed."""
        ...

    def missing(self, step_type: str) -> List[str]:
        """Describe what is missing for an unsupported step type."""
        ...


class ActionSpec(Protocol):
    id: str


class ActionProvider(Protocol):
    """Anything that declares actions, e.g. a module manifest."""

    id: str
    actions: Sequence[ActionSpec]


class ModuleActionResolver:
    """
    Resolver backed by built-in step types plus module actions.

    Args:
        modules: Modules whose actions can supply step types
        core_types: Step types that are always supported
        namespace: Prefix joined to the step type to form action ids
    """

    def __init__(
        self,
        modules: Iterable[ActionProvider] = (),
        core_types: Iterable[str] = (),
        namespace: str = "release",
    ) -> None:
        self._modules = list(modules)
        self._core_types = frozenset(core_types)
        self.namespace = namespace

    def action_id(self, step_type: str) -> str:
        """Namespaced action id for a step type."""
        return f"{self.namespace}.{step_type}"

    def is_core(self, step_type: str) -> bool:
        return step_type in self._core_types

    def providers(self, step_type: str) -> List[str]:
        """Ids of the modules declaring the action for a step type."""
        action_id = self.action_id(step_type)
        return [
            module.id
            for module in self._modules
            if any(action.id == action_id for action in module.actions)
        ]

    def is_supported(self, step_type: str) -> bool:
        return self.is_core(step_type) or bool(self.providers(step_type))

    def missing(self, step_type: str) -> List[str]:
        return [f"Missing action '{self.action_id(step_type)}'"]

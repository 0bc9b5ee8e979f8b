"""
Pipeline Planner
================

Orders a step list by its declared dependencies and classifies every step
against a capability resolver.

Example:
    from shipline.core.pipeline import Step, plan
    from shipline.core.pipeline.resolver import ModuleActionResolver

    steps = [
        Step(id="tag", type="git.tag", needs=["build"]),
        Step(id="build", type="build"),
    ]
    result = plan(steps, ModuleActionResolver(), enabled=True)

    [s.id for s in result.steps]   # ["build", "tag"]
    result.warnings                # ["Steps reordered based on dependencies"]
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Deque, Dict, List, Optional, Sequence, Tuple

from shipline.core.errors import (
    DependencyCycleError,
    DuplicateStepIdError,
    UnknownDependencyError,
)
from shipline.core.logger import get_logger

from .resolver import CapabilityResolver
from .step import Step

logger = get_logger(__name__)

__all__ = [
    "PlanStatus",
    "PlanStep",
    "Plan",
    "REORDER_WARNING",
    "order_steps",
    "classify_step",
    "plan",
]

REORDER_WARNING = "Steps reordered based on dependencies"


class PlanStatus(Enum):
    """Classification of a step at planning time."""

    READY = "ready"
    MISSING = "missing"
    DISABLED = "disabled"


@dataclass(frozen=True)
class PlanStep:
    """A step enriched with its planning status."""

    step: Step
    status: PlanStatus
    missing: List[str] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.step.id

    @property
    def type(self) -> str:
        return self.step.type

    @property
    def label(self) -> Optional[str]:
        return self.step.label

    @property
    def needs(self) -> List[str]:
        return self.step.needs

    @property
    def config(self) -> Dict[str, Any]:
        return self.step.config

    @property
    def ready(self) -> bool:
        return self.status == PlanStatus.READY

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        d = self.step.to_dict()
        d["status"] = self.status.value
        if self.missing:
            d["missing"] = list(self.missing)
        return d


@dataclass(frozen=True)
class Plan:
    """Topologically ordered, capability-classified view of a step list."""

    steps: List[PlanStep] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def get_step(self, step_id: str) -> Optional[PlanStep]:
        """Get a planned step by id."""
        for step in self.steps:
            if step.id == step_id:
                return step
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "steps": [s.to_dict() for s in self.steps],
            "warnings": list(self.warnings),
        }


def order_steps(
    steps: Sequence[Step],
    field_name: str = "steps",
) -> Tuple[List[Step], List[str]]:
    """
    Order steps so that every step comes after the steps it needs.

    Uses Kahn's algorithm. Ties are broken by the original list order, so
    the result is deterministic and a list without dependencies comes back
    unchanged. Lists with zero or one step are returned as-is without any
    validation.

    Args:
        steps: Unordered steps
        field_name: Field name used to label errors

    Returns:
        Tuple of (ordered steps, warnings)

    Raises:
        DuplicateStepIdError: If two steps share an id
        UnknownDependencyError: If a step needs an id not in the list
        DependencyCycleError: If the dependencies contain a cycle
    """
    if len(steps) <= 1:
        return list(steps), []

    index: Dict[str, int] = {}
    for idx, step in enumerate(steps):
        if step.id in index:
            raise DuplicateStepIdError(step.id, field=field_name)
        index[step.id] = idx

    indegree = [0] * len(steps)
    dependents: List[List[int]] = [[] for _ in steps]

    for idx, step in enumerate(steps):
        for need in step.needs:
            parent = index.get(need)
            if parent is None:
                raise UnknownDependencyError(step.id, need, field=field_name)
            indegree[idx] += 1
            dependents[parent].append(idx)

    queue: Deque[int] = deque(idx for idx, count in enumerate(indegree) if count == 0)
    ordered: List[Step] = []

    while queue:
        idx = queue.popleft()
        ordered.append(steps[idx])
        for child in dependents[idx]:
            indegree[child] -= 1
            if indegree[child] == 0:
                queue.append(child)

    if len(ordered) != len(steps):
        pending = [step.id for idx, step in enumerate(steps) if indegree[idx] > 0]
        raise DependencyCycleError(pending, field=field_name)

    warnings: List[str] = []
    if any(step.needs for step in steps):
        warnings.append(REORDER_WARNING)

    return ordered, warnings


def classify_step(
    step: Step,
    resolver: CapabilityResolver,
    enabled: bool,
) -> PlanStep:
    """Classify one step as Disabled, Ready or Missing."""
    if not enabled:
        return PlanStep(step=step, status=PlanStatus.DISABLED)
    if resolver.is_supported(step.type):
        return PlanStep(step=step, status=PlanStatus.READY)
    return PlanStep(step=step, status=PlanStatus.MISSING, missing=resolver.missing(step.type))


def plan(
    steps: Sequence[Step],
    resolver: CapabilityResolver,
    enabled: bool = True,
    field_name: str = "steps",
) -> Plan:
    """
    Build a plan for a step list.

    Args:
        steps: Unordered steps
        resolver: Capability resolver deciding which step types can run
        enabled: Pipeline-level switch; when False every step is Disabled
        field_name: Field name used to label structural errors

    Returns:
        Plan with one PlanStep per input step, in execution order
    """
    ordered, warnings = order_steps(steps, field_name)
    planned = [classify_step(step, resolver, enabled) for step in ordered]

    missing = sum(1 for s in planned if s.status == PlanStatus.MISSING)
    logger.debug(f"Planned {len(planned)} steps ({missing} missing, enabled={enabled})")

    return Plan(steps=planned, warnings=warnings)

"""
Pipeline Run Orchestrator
=========================

Executes a step list in dependency order with fail-soft semantics:

- steps that are Disabled or Missing at plan time are skipped;
- steps whose dependencies did not succeed are skipped, never attempted;
- a failing step does not stop the run, so the report always shows the
  fate of every step.

Execution is strictly sequential: one step's handler returns before the
next step is considered.

Example:
    from shipline.core.pipeline import run_pipeline

    result = run_pipeline(steps, executor, resolver, enabled=True)
    for step in result.steps:
        print(step.id, step.status.value, step.error or "")
    result.overall   # RunStatus.SUCCESS or RunStatus.FAILED
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence

from shipline.core.errors import ShiplineError
from shipline.core.logger import get_logger

from .planner import PlanStatus, PlanStep, plan
from .resolver import CapabilityResolver
from .step import Step

logger = get_logger(__name__)

__all__ = [
    "RunStatus",
    "StepResult",
    "RunResult",
    "StepExecutor",
    "ProgressCallback",
    "run_pipeline",
]


class RunStatus(Enum):
    """Outcome of a step (or a whole run) at execution time."""

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class StepResult:
    """Result of executing (or skipping) a single step."""

    id: str
    type: str
    status: RunStatus
    missing: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    hints: List[str] = field(default_factory=list)
    data: Any = None
    error: Optional[str] = None

    @classmethod
    def success(cls, step: Step, data: Any = None) -> "StepResult":
        """Create a successful result."""
        return cls(id=step.id, type=step.type, status=RunStatus.SUCCESS, data=data)

    @classmethod
    def failed(
        cls,
        step: Step,
        error: str,
        data: Any = None,
        hints: Optional[List[str]] = None,
    ) -> "StepResult":
        """Create a failed result."""
        return cls(
            id=step.id,
            type=step.type,
            status=RunStatus.FAILED,
            data=data,
            error=error,
            hints=list(hints or []),
        )

    @classmethod
    def skipped(
        cls,
        step: Step,
        missing: Optional[List[str]] = None,
        warnings: Optional[List[str]] = None,
    ) -> "StepResult":
        """Create a skipped result."""
        return cls(
            id=step.id,
            type=step.type,
            status=RunStatus.SKIPPED,
            missing=list(missing or []),
            warnings=list(warnings or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "type": self.type,
            "status": self.status.value,
            "missing": self.missing,
            "warnings": self.warnings,
            "hints": self.hints,
            "data": self.data,
            "error": self.error,
        }


@dataclass
class RunResult:
    """Aggregate result of a pipeline run."""

    steps: List[StepResult] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def overall(self) -> RunStatus:
        """FAILED iff at least one step failed, otherwise SUCCESS."""
        if any(r.status == RunStatus.FAILED for r in self.steps):
            return RunStatus.FAILED
        return RunStatus.SUCCESS

    @property
    def succeeded(self) -> int:
        """Number of successful steps."""
        return sum(1 for r in self.steps if r.status == RunStatus.SUCCESS)

    @property
    def failed(self) -> int:
        """Number of failed steps."""
        return sum(1 for r in self.steps if r.status == RunStatus.FAILED)

    @property
    def skipped(self) -> int:
        """Number of skipped steps."""
        return sum(1 for r in self.steps if r.status == RunStatus.SKIPPED)

    def get_step(self, step_id: str) -> Optional[StepResult]:
        """Get result for a specific step."""
        for result in self.steps:
            if result.id == step_id:
                return result
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "overall": self.overall.value,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "warnings": self.warnings,
            "steps": [r.to_dict() for r in self.steps],
        }


class StepExecutor(Protocol):
    """Protocol for performing the effect of a single step."""

    def execute_step(self, step: Step) -> StepResult:
        """
        Execute one step.

        Raises:
            ShiplineError: If the step cannot be executed
        """
        ...


# Callback signature: (step_id, current, total, status) -> None
ProgressCallback = Callable[[str, int, int, str], None]


def run_pipeline(
    steps: Sequence[Step],
    executor: StepExecutor,
    resolver: CapabilityResolver,
    enabled: bool = True,
    field_name: str = "steps",
    progress_callback: Optional[ProgressCallback] = None,
) -> RunResult:
    """
    Plan and execute a step list.

    Structural errors from planning (duplicate ids, unknown dependencies,
    cycles) propagate to the caller. Errors raised by the executor are
    recorded as Failed step results.

    Args:
        steps: Unordered steps
        executor: Executor performing each Ready step
        resolver: Capability resolver used for classification
        enabled: Pipeline-level switch; when False every step is skipped
        field_name: Field name used to label structural errors
        progress_callback: Optional callback receiving per-step progress

    Returns:
        RunResult with one StepResult per step, in execution order
    """
    pipeline_plan = plan(steps, resolver, enabled, field_name)
    total = len(pipeline_plan.steps)
    results: List[StepResult] = []
    outcomes: Dict[str, RunStatus] = {}

    for idx, planned in enumerate(pipeline_plan.steps, start=1):
        if progress_callback:
            progress_callback(planned.id, idx, total, "running")

        result = _run_step(planned, executor, outcomes)
        results.append(result)
        outcomes[result.id] = result.status

        if progress_callback:
            progress_callback(planned.id, idx, total, result.status.value)

    run_result = RunResult(steps=results, warnings=list(pipeline_plan.warnings))
    logger.info(
        f"Pipeline finished: {run_result.overall.value} "
        f"({run_result.succeeded} succeeded, {run_result.failed} failed, "
        f"{run_result.skipped} skipped)"
    )
    return run_result


def _run_step(
    planned: PlanStep,
    executor: StepExecutor,
    outcomes: Dict[str, RunStatus],
) -> StepResult:
    """Decide whether a planned step runs, and run it."""
    step = planned.step

    if planned.status != PlanStatus.READY:
        logger.info(f"Skipping step '{step.id}': {planned.status.value}")
        return StepResult.skipped(step, missing=planned.missing)

    blocked = [need for need in step.needs if outcomes.get(need) != RunStatus.SUCCESS]
    if blocked:
        logger.warning(f"Skipping step '{step.id}': dependencies not satisfied: {blocked}")
        return StepResult.skipped(
            step,
            warnings=[f"Dependency '{need}' did not succeed" for need in blocked],
        )

    logger.debug(f"Executing step '{step.id}' ({step.type})")
    try:
        return executor.execute_step(step)
    except ShiplineError as e:
        logger.warning(f"Step '{step.id}' failed: {e.message}")
        return StepResult.failed(step, e.message, hints=e.hints)

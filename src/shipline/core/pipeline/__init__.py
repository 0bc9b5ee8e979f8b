"""
Pipeline Package
================

Domain-agnostic dependency-ordered step engine.

This package provides:
- Step: Declarative step data type
- Planner: Topological ordering and capability classification
- Resolvers: Capability resolver protocol and the module-action resolver
- Engine: Fail-soft sequential run orchestrator
"""

from .engine import (
    ProgressCallback,
    RunResult,
    RunStatus,
    StepExecutor,
    StepResult,
    run_pipeline,
)
from .planner import (
    REORDER_WARNING,
    Plan,
    PlanStatus,
    PlanStep,
    classify_step,
    order_steps,
    plan,
)
from .resolver import (
    ActionProvider,
    CapabilityResolver,
    ModuleActionResolver,
)
from .step import Step

__all__ = [
    # Step model
    "Step",
    # Planner
    "Plan",
    "PlanStep",
    "PlanStatus",
    "REORDER_WARNING",
    "order_steps",
    "classify_step",
    "plan",
    # Resolvers
    "CapabilityResolver",
    "ActionProvider",
    "ModuleActionResolver",
    # Engine
    "RunStatus",
    "StepResult",
    "RunResult",
    "StepExecutor",
    "ProgressCallback",
    "run_pipeline",
]

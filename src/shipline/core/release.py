"""
Release Pipelines
=================

Binds the generic pipeline engine to components and modules.

A component's ``release`` block declares its steps. Built-in step types are
handled here; every other type ``T`` is dispatched to the bound module that
declares the action ``release.T``.

Built-in step types and their config keys:

    build      runs the component's buildCommand
    changes    summarizes commits since the latest tag (includeDiff: bool)
    version    bumps the version targets (bump: "patch" | "minor" | "major")
    git.tag    tags HEAD (name | versionTag, else the current version; message)
    git.push   pushes to the configured remote (tags: bool)
    changelog  reserved; no handler yet

Example:
    from shipline.core.release import plan_release, run_release

    release_plan = plan_release("storefront", store, registry)
    for step in release_plan.steps:
        print(step.id, step.status.value, step.missing)

    release_run = run_release("storefront", store, registry, dispatcher)
    release_run.result.overall   # RunStatus.FAILED if any step failed
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from shipline.core import build, git, version
from shipline.core.components import Component, ComponentStore, ReleaseConfig
from shipline.core.config import get_config
from shipline.core.errors import (
    AmbiguousModuleError,
    MissingReleaseConfigError,
    NoMatchingModuleError,
    UnsupportedCoreStepTypeError,
)
from shipline.core.logger import get_logger
from shipline.core.modules import ModuleActionDispatcher, ModuleManifest, ModuleRegistry
from shipline.core.pipeline import (
    ModuleActionResolver,
    PlanStatus,
    PlanStep,
    ProgressCallback,
    RunResult,
    RunStatus,
    Step,
    StepResult,
    plan,
    run_pipeline,
)

logger = get_logger(__name__)

__all__ = [
    "CoreStepType",
    "CORE_STEP_TYPES",
    "RELEASE_FIELD",
    "ReleaseCollaborators",
    "ReleaseStepExecutor",
    "ReleasePlan",
    "ReleaseRun",
    "build_resolver",
    "build_plan_hints",
    "plan_release",
    "run_release",
]

RELEASE_FIELD = "release.steps"
ACTION_NAMESPACE = "release"


class CoreStepType(Enum):
    """Built-in release step types."""

    BUILD = "build"
    CHANGELOG = "changelog"
    VERSION = "version"
    GIT_TAG = "git.tag"
    GIT_PUSH = "git.push"
    CHANGES = "changes"


CORE_STEP_TYPES = frozenset(t.value for t in CoreStepType)


@dataclass
class ReleaseCollaborators:
    """Functions performing the effects of built-in steps."""

    run_build: Callable[[Component], Tuple[Dict[str, Any], int]] = build.run_build
    bump_version: Callable[[Component, str], Dict[str, Any]] = version.bump_version
    read_version: Callable[[Component], version.VersionInfo] = version.read_version
    tag: Callable[[Component, str, Optional[str]], Dict[str, Any]] = git.tag
    push: Callable[[Component, bool], Dict[str, Any]] = git.push
    changes: Callable[[Component, bool], Dict[str, Any]] = git.changes


def _config_bool(step: Step, key: str, default: bool) -> bool:
    value = step.config.get(key)
    return value if isinstance(value, bool) else default


def _config_str(step: Step, key: str) -> Optional[str]:
    value = step.config.get(key)
    return value if isinstance(value, str) and value else None


class ReleaseStepExecutor:
    """
    Executes release steps for one component.

    Args:
        component: Component being released
        modules: Modules bound for this run
        dispatcher: Runs module actions
        collaborators: Built-in step effects (defaults to the real ones)
    """

    def __init__(
        self,
        component: Component,
        modules: Sequence[ModuleManifest] = (),
        dispatcher: Optional[ModuleActionDispatcher] = None,
        collaborators: Optional[ReleaseCollaborators] = None,
    ) -> None:
        self.component = component
        self.modules = list(modules)
        self.dispatcher = dispatcher
        self.collaborators = collaborators or ReleaseCollaborators()
        self._handlers: Dict[str, Callable[[Step], StepResult]] = {
            CoreStepType.BUILD.value: self._run_build,
            CoreStepType.CHANGES.value: self._run_changes,
            CoreStepType.VERSION.value: self._run_version,
            CoreStepType.GIT_TAG.value: self._run_git_tag,
            CoreStepType.GIT_PUSH.value: self._run_git_push,
        }

    def has_handler(self, step_type: str) -> bool:
        """True for built-in types this executor can run."""
        return step_type in self._handlers

    def execute_step(self, step: Step) -> StepResult:
        if step.type in CORE_STEP_TYPES:
            handler = self._handlers.get(step.type)
            if handler is None:
                raise UnsupportedCoreStepTypeError(step.type)
            return handler(step)
        return self._run_module_action(step)

    def _run_build(self, step: Step) -> StepResult:
        output, exit_code = self.collaborators.run_build(self.component)
        if exit_code != 0:
            return StepResult.failed(step, f"Build exited with code {exit_code}", data=output)
        return StepResult.success(step, output)

    def _run_changes(self, step: Step) -> StepResult:
        include_diff = _config_bool(step, "includeDiff", False)
        return StepResult.success(step, self.collaborators.changes(self.component, include_diff))

    def _run_version(self, step: Step) -> StepResult:
        bump = _config_str(step, "bump") or "patch"
        return StepResult.success(step, self.collaborators.bump_version(self.component, bump))

    def _run_git_tag(self, step: Step) -> StepResult:
        name = _config_str(step, "name") or _config_str(step, "versionTag")
        if name is None:
            # Read fresh so a preceding version step is picked up
            current = self.collaborators.read_version(self.component)
            name = f"{get_config().get('git', 'tag_prefix') or ''}{current.version}"
        message = _config_str(step, "message")
        return StepResult.success(step, self.collaborators.tag(self.component, name, message))

    def _run_git_push(self, step: Step) -> StepResult:
        tags = _config_bool(step, "tags", False)
        return StepResult.success(step, self.collaborators.push(self.component, tags))

    def _run_module_action(self, step: Step) -> StepResult:
        action_id = f"{ACTION_NAMESPACE}.{step.type}"
        candidates = [m.id for m in self.modules if m.get_action(action_id) is not None]
        if not candidates:
            raise NoMatchingModuleError(action_id)
        if len(candidates) > 1:
            raise AmbiguousModuleError(action_id, candidates)
        if self.dispatcher is None:
            raise NoMatchingModuleError(action_id)

        payload = json.dumps(step.config) if step.config else None
        response = self.dispatcher.run_action(candidates[0], action_id, self.component.id, payload)
        return StepResult.success(step, response)


@dataclass
class ReleasePlan:
    """Plan for a component's release pipeline."""

    component_id: str
    enabled: bool
    steps: List[PlanStep] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    hints: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "componentId": self.component_id,
            "enabled": self.enabled,
            "steps": [s.to_dict() for s in self.steps],
            "warnings": list(self.warnings),
            "hints": list(self.hints),
        }


@dataclass
class ReleaseRun:
    """Result of running a component's release pipeline."""

    component_id: str
    enabled: bool
    result: RunResult

    @property
    def overall(self) -> RunStatus:
        return self.result.overall

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "componentId": self.component_id,
            "enabled": self.enabled,
            "result": self.result.to_dict(),
        }


def build_resolver(modules: Sequence[ModuleManifest]) -> ModuleActionResolver:
    """Resolver for release steps over the given modules."""
    return ModuleActionResolver(modules, core_types=CORE_STEP_TYPES, namespace=ACTION_NAMESPACE)


def build_plan_hints(
    component_id: str,
    steps: Sequence[PlanStep],
    module_ids: Sequence[str],
) -> List[str]:
    """Remediation hints for a release plan."""
    hints = []
    if not steps:
        hints.append("Release plan has no steps")

    if any(step.status == PlanStatus.MISSING for step in steps):
        if module_ids:
            hints.append(
                f"Add module actions named '{ACTION_NAMESPACE}.<step_type>' in {', '.join(module_ids)}"
            )
        else:
            hints.append(
                "Bind a module to the component (modules) or pass --module to resolve release actions"
            )

    if hints:
        hints.append(f"Update release config with: shipline component set {component_id} --json")
    return hints


def _release_config(component: Component) -> ReleaseConfig:
    if component.release is None:
        raise MissingReleaseConfigError(component.id)
    return component.release


def _resolve_modules(
    component: Component,
    registry: ModuleRegistry,
    module_id: Optional[str],
) -> List[ModuleManifest]:
    """Modules bound to the component, plus an explicit one."""
    module_ids = component.module_ids
    if module_id and module_id not in module_ids:
        module_ids.append(module_id)
    return [registry.require_module(mid) for mid in module_ids]


def _ensure_unambiguous(steps: Sequence[Step], resolver: ModuleActionResolver) -> None:
    for step in steps:
        if resolver.is_core(step.type):
            continue
        providers = resolver.providers(step.type)
        if len(providers) > 1:
            raise AmbiguousModuleError(resolver.action_id(step.type), providers)


def _prepare(
    component_id: str,
    store: ComponentStore,
    registry: ModuleRegistry,
    module_id: Optional[str],
) -> Tuple[Component, ReleaseConfig, List[ModuleManifest], ModuleActionResolver]:
    component = store.load(component_id)
    release = _release_config(component)
    modules = _resolve_modules(component, registry, module_id)
    resolver = build_resolver(modules)
    _ensure_unambiguous(release.steps, resolver)
    return component, release, modules, resolver


def plan_release(
    component_id: str,
    store: ComponentStore,
    registry: ModuleRegistry,
    module_id: Optional[str] = None,
) -> ReleasePlan:
    """
    Plan a component's release without executing anything.

    Args:
        component_id: Component to plan
        store: Component store
        registry: Module registry
        module_id: Extra module to bind for this plan

    Returns:
        ReleasePlan with ordered, classified steps and hints

    Raises:
        ComponentNotFoundError: If the component does not exist
        MissingReleaseConfigError: If the component has no release block
        ModuleManifestNotFoundError: If a bound module does not exist
        AmbiguousModuleError: If several modules provide one step's action
        PipelineValidationError: On duplicate ids, unknown dependencies or cycles
    """
    component, release, modules, resolver = _prepare(component_id, store, registry, module_id)
    enabled = release.is_enabled

    pipeline_plan = plan(release.steps, resolver, enabled, RELEASE_FIELD)
    hints = build_plan_hints(component.id, pipeline_plan.steps, [m.id for m in modules])

    return ReleasePlan(
        component_id=component.id,
        enabled=enabled,
        steps=pipeline_plan.steps,
        warnings=pipeline_plan.warnings,
        hints=hints,
    )


def run_release(
    component_id: str,
    store: ComponentStore,
    registry: ModuleRegistry,
    dispatcher: Optional[ModuleActionDispatcher] = None,
    module_id: Optional[str] = None,
    collaborators: Optional[ReleaseCollaborators] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> ReleaseRun:
    """
    Run a component's release pipeline.

    Step failures do not raise; they are reported in the returned run.

    Args:
        component_id: Component to release
        store: Component store
        registry: Module registry
        dispatcher: Module action dispatcher (defaults to one over ``registry``)
        module_id: Extra module to bind for this run
        collaborators: Built-in step effects (defaults to the real ones)
        progress_callback: Optional per-step progress callback

    Returns:
        ReleaseRun wrapping the pipeline RunResult

    Raises:
        UnsupportedCoreStepTypeError: If an enabled pipeline uses a built-in
            type without a handler
        (plus everything plan_release raises)
    """
    component, release, modules, resolver = _prepare(component_id, store, registry, module_id)
    enabled = release.is_enabled

    executor = ReleaseStepExecutor(
        component,
        modules,
        dispatcher=dispatcher or ModuleActionDispatcher(registry),
        collaborators=collaborators,
    )

    if enabled:
        for step in release.steps:
            if resolver.is_core(step.type) and not executor.has_handler(step.type):
                raise UnsupportedCoreStepTypeError(step.type, field=RELEASE_FIELD)

    logger.info(f"Running release for '{component.id}' ({len(release.steps)} steps)")
    result = run_pipeline(
        release.steps,
        executor,
        resolver,
        enabled=enabled,
        field_name=RELEASE_FIELD,
        progress_callback=progress_callback,
    )
    return ReleaseRun(component_id=component.id, enabled=enabled, result=result)

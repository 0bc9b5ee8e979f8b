# services/release.py
"""
Service for planning and running release pipelines.

Structural problems (unknown component, missing release block, cycles,
ambiguous modules) produce a failed ServiceResult. A run that completes
returns a successful ServiceResult even when steps failed; callers check
``result.data.overall``.
"""

from typing import Optional

from shipline.core.components import ComponentStore
from shipline.core.config import Config, get_config
from shipline.core.errors import ShiplineError
from shipline.core.logger import get_logger
from shipline.core.modules import ModuleActionDispatcher, ModuleRegistry
from shipline.core.pipeline import ProgressCallback, RunStatus
from shipline.core.release import (
    ReleaseCollaborators,
    ReleasePlan,
    ReleaseRun,
    plan_release,
    run_release,
)

from .base import BaseService, ServiceResult

logger = get_logger(__name__)


class ReleaseService(BaseService):
    """
    Service for release pipelines.

    Args:
        file_repository: File repository for component and module records
        config: Configuration (defaults to the global config)
        collaborators: Built-in step effects (defaults to the real ones)
    """

    def __init__(
        self,
        file_repository=None,
        config: Optional[Config] = None,
        collaborators: Optional[ReleaseCollaborators] = None,
    ) -> None:
        super().__init__(file_repository)
        self._config = config
        self.collaborators = collaborators

    @property
    def config(self) -> Config:
        return self._config or get_config()

    def _store(self) -> ComponentStore:
        return ComponentStore(self.file_repository, self.config.components_dir)

    def _registry(self) -> ModuleRegistry:
        return ModuleRegistry(self.file_repository, self.config.modules_dir)

    def plan(self, component_id: str, module_id: Optional[str] = None) -> ServiceResult[ReleasePlan]:
        """
        Plan a component's release.

        Args:
            component_id: Component to plan
            module_id: Extra module to bind

        Returns:
            ServiceResult containing the ReleasePlan
        """
        try:
            release_plan = plan_release(component_id, self._store(), self._registry(), module_id)
        except ShiplineError as e:
            logger.debug(f"Release plan for '{component_id}' rejected: {e.message}")
            return ServiceResult.from_error(e)

        ready = sum(1 for step in release_plan.steps if step.ready)
        return ServiceResult.ok(
            data=release_plan,
            message=f"{ready}/{len(release_plan.steps)} steps ready",
            warnings=release_plan.warnings,
            hints=release_plan.hints,
        )

    def run(
        self,
        component_id: str,
        module_id: Optional[str] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> ServiceResult[ReleaseRun]:
        """
        Run a component's release.

        Args:
            component_id: Component to release
            module_id: Extra module to bind
            progress_callback: Optional per-step progress callback

        Returns:
            ServiceResult containing the ReleaseRun
        """
        registry = self._registry()
        try:
            release_run = run_release(
                component_id,
                self._store(),
                registry,
                dispatcher=ModuleActionDispatcher(registry),
                module_id=module_id,
                collaborators=self.collaborators,
                progress_callback=progress_callback,
            )
        except ShiplineError as e:
            logger.debug(f"Release run for '{component_id}' rejected: {e.message}")
            return ServiceResult.from_error(e)

        result = release_run.result
        message = (
            f"Release {result.overall.value}: {result.succeeded} succeeded, "
            f"{result.failed} failed, {result.skipped} skipped"
        )
        if result.overall == RunStatus.FAILED:
            logger.warning(f"Release for '{component_id}' failed")
        return ServiceResult.ok(data=release_run, message=message, warnings=result.warnings)

# services/module.py
"""
Service for inspecting module manifests.
"""

from typing import List, Optional

from shipline.core.config import Config, get_config
from shipline.core.errors import ShiplineError
from shipline.core.modules import ModuleManifest, ModuleRegistry

from .base import BaseService, ServiceResult


class ModuleService(BaseService):
    """Service for module manifests."""

    def __init__(self, file_repository=None, config: Optional[Config] = None) -> None:
        super().__init__(file_repository)
        self._config = config

    @property
    def config(self) -> Config:
        return self._config or get_config()

    @property
    def registry(self) -> ModuleRegistry:
        return ModuleRegistry(self.file_repository, self.config.modules_dir)

    def list_modules(self) -> ServiceResult[List[ModuleManifest]]:
        """
        List all installed modules.

        Manifests that fail to parse are reported as warnings.
        """
        registry = self.registry
        modules = []
        warnings = []
        for module_id in registry.available_module_ids():
            try:
                manifest = registry.load_module(module_id)
            except ShiplineError as e:
                warnings.append(e.message)
                continue
            if manifest is not None:
                modules.append(manifest)
        return ServiceResult.ok(
            data=modules,
            message=f"Found {len(modules)} modules",
            warnings=warnings,
            directory=str(self.config.modules_dir),
        )

    def get_module(self, module_id: str) -> ServiceResult[ModuleManifest]:
        """Load one module manifest."""
        try:
            return ServiceResult.ok(data=self.registry.require_module(module_id))
        except ShiplineError as e:
            return ServiceResult.from_error(e)

# services/component.py
"""
Service for reading and updating component records.
"""

from typing import Any, Dict, List, Optional

from shipline.core.components import Component, ComponentStore
from shipline.core.config import Config, get_config
from shipline.core.errors import ShiplineError
from shipline.core.logger import get_logger

from .base import BaseService, ServiceResult

logger = get_logger(__name__)


class ComponentService(BaseService):
    """
    Service for component records.

    Args:
        file_repository: File repository for record I/O
        config: Configuration (defaults to the global config)
    """

    def __init__(self, file_repository=None, config: Optional[Config] = None) -> None:
        super().__init__(file_repository)
        self._config = config

    @property
    def config(self) -> Config:
        return self._config or get_config()

    @property
    def store(self) -> ComponentStore:
        return ComponentStore(self.file_repository, self.config.components_dir)

    def list_components(self) -> ServiceResult[List[Component]]:
        """
        List all stored components.

        Returns:
            ServiceResult containing the components, sorted by id
        """
        try:
            components = self.store.list()
        except (ShiplineError, OSError) as e:
            return ServiceResult.fail(f"Failed to list components: {e}")
        return ServiceResult.ok(
            data=components,
            message=f"Found {len(components)} components",
            directory=str(self.config.components_dir),
        )

    def get_component(self, component_id: str) -> ServiceResult[Component]:
        """Load one component."""
        try:
            return ServiceResult.ok(data=self.store.load(component_id))
        except ShiplineError as e:
            return ServiceResult.from_error(e)

    def update_component(self, component_id: str, patch: Dict[str, Any]) -> ServiceResult[Component]:
        """
        Replace top-level fields of a component record.

        Args:
            component_id: Component to update
            patch: Object of camelCase record keys to replace

        Returns:
            ServiceResult containing the updated component
        """
        if not isinstance(patch, dict):
            return ServiceResult.fail("Component update must be a JSON object")
        try:
            component = self.store.update(component_id, patch)
        except ShiplineError as e:
            return ServiceResult.from_error(e)
        except OSError as e:
            return ServiceResult.fail(f"Failed to write component '{component_id}': {e}")
        return ServiceResult.ok(
            data=component,
            message=f"Updated {', '.join(sorted(patch))} on '{component_id}'",
        )

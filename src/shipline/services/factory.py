"""
Service Factory
===============

Factory for instantiating services with dependency injection.

Usage:
    from shipline.services.factory import ServiceFactory

    factory = ServiceFactory()
    release_svc = factory.create_release_service()

    # Tests inject an in-memory repository
    factory = ServiceFactory(file_repository=MockFileRepository())
"""

from typing import Optional

from shipline.core.config import Config
from shipline.core.release import ReleaseCollaborators
from shipline.repository import LocalFileRepository
from shipline.repository.protocol import FileRepositoryProtocol

from .component import ComponentService
from .config import ConfigService
from .module import ModuleService
from .release import ReleaseService


class ServiceFactory:
    """
    Factory for creating service instances.

    Attributes:
        file_repository: File repository shared by all services
        config: Configuration passed to services (None means the global config)
        release_collaborators: Built-in release step effects (None means the real ones)
    """

    def __init__(
        self,
        file_repository: Optional[FileRepositoryProtocol] = None,
        config: Optional[Config] = None,
        release_collaborators: Optional[ReleaseCollaborators] = None,
    ):
        self.file_repository = file_repository or LocalFileRepository()
        self.config = config
        self.release_collaborators = release_collaborators

    def create_release_service(self) -> ReleaseService:
        """Create ReleaseService with file repository."""
        return ReleaseService(
            file_repository=self.file_repository,
            config=self.config,
            collaborators=self.release_collaborators,
        )

    def create_component_service(self) -> ComponentService:
        """Create ComponentService with file repository."""
        return ComponentService(file_repository=self.file_repository, config=self.config)

    def create_module_service(self) -> ModuleService:
        """Create ModuleService with file repository."""
        return ModuleService(file_repository=self.file_repository, config=self.config)

    def create_config_service(self) -> ConfigService:
        """Create ConfigService."""
        return ConfigService()

    # ========================================================================
    # Property accessors used by the CLI service helpers
    # ========================================================================

    @property
    def release(self) -> ReleaseService:
        return self.create_release_service()

    @property
    def component(self) -> ComponentService:
        return self.create_component_service()

    @property
    def module(self) -> ModuleService:
        return self.create_module_service()

    @property
    def config_service(self) -> ConfigService:
        return self.create_config_service()

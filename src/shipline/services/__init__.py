"""
Services Layer
==============

ServiceResult-wrapped operations used by the CLI (and any other front end).
"""

from .base import BaseService, ServiceResult
from .component import ComponentService
from .config import ConfigService
from .factory import ServiceFactory
from .module import ModuleService
from .release import ReleaseService

__all__ = [
    "BaseService",
    "ServiceResult",
    "ServiceFactory",
    "ReleaseService",
    "ComponentService",
    "ModuleService",
    "ConfigService",
]

# services/config.py
"""
Service for configuration management operations.
"""

from typing import Any, List, Optional

from shipline.core.config import find_config_file, get_config, get_config_locations

from .base import BaseService, ServiceResult


class ConfigService(BaseService):
    """
    Service for configuration management operations.

    Provides ServiceResult-wrapped methods for configuration access.
    """

    def get_config(self) -> ServiceResult[Any]:
        """
        Get the current configuration.

        Returns:
            ServiceResult containing the Config object
        """
        config = get_config()
        return ServiceResult.ok(
            data=config,
            message=f"Loaded config from {config._source or 'defaults'}",
            source=config._source,
        )

    def find_config_file(self, config_path: Optional[str] = None) -> ServiceResult[Optional[str]]:
        """
        Find the highest priority configuration file.

        Args:
            config_path: Explicit path to check first

        Returns:
            ServiceResult containing the config file path or None
        """
        result = find_config_file(config_path)
        if result:
            return ServiceResult.ok(data=str(result), message=f"Found config file: {result}")
        return ServiceResult.ok(data=None, message="No config file found")

    def get_config_locations(self) -> ServiceResult[List[str]]:
        """Configuration file search locations, highest priority first."""
        paths = [str(loc) for loc in get_config_locations()]
        return ServiceResult.ok(data=paths, message=f"Found {len(paths)} config locations")

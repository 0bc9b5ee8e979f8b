"""
Configuration Management
========================

This module provides TOML-based configuration file support for shipline.

Configuration files are merged in the following order (highest to lowest priority):
1. Path specified via --config option
2. ./shipline.toml (current directory)
3. ~/.config/shipline/config.toml (user config)
4. /etc/shipline/config.toml (system config)
5. Built-in defaults

Example configuration file (shipline.toml):

    [paths]
    config_dir = "~/.config/shipline"
    components_dir = ""   # defaults to <config_dir>/components
    modules_dir = ""      # defaults to <config_dir>/modules

    [commands]
    timeout = 600
    shell = true

    [git]
    remote = "origin"
    tag_prefix = ""      # prepended to tags named after the current version

    [version]
    default_pattern = "(?:[Vv]ersion)[\\"']?\\s*[:=]\\s*[\\"']?(\\d+\\.\\d+\\.\\d+)"

    [logging]
    level = "WARNING"

    [output]
    format = "table"
"""

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from shipline.core.logger import get_logger

logger = get_logger(__name__)

# Use tomli for Python < 3.11, tomllib for Python >= 3.11
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


DEFAULT_VERSION_PATTERN = r"(?:[Vv]ersion)[\"']?\s*[:=]\s*[\"']?(\d+\.\d+\.\d+)"

# Default configuration values
DEFAULT_CONFIG: Dict[str, Any] = {
    "paths": {
        "config_dir": "~/.config/shipline",
        "components_dir": "",
        "modules_dir": "",
    },
    "commands": {
        "timeout": 600,
        "shell": True,
    },
    "git": {
        "remote": "origin",
        "tag_prefix": "",
    },
    "version": {
        "default_pattern": DEFAULT_VERSION_PATTERN,
    },
    "logging": {
        "level": "WARNING",
    },
    "output": {
        "format": "table",  # "table" or "json"
    },
}

# Standard config file locations, highest priority first
CONFIG_LOCATIONS = [
    Path("shipline.toml"),
    Path("~/.config/shipline/config.toml").expanduser(),
    Path("/etc/shipline/config.toml"),
]


@dataclass
class Config:
    """
    Configuration container for shipline settings.

    Attributes:
        paths: Where component records and module manifests live
        commands: Subprocess settings for build and module actions
        git: Git remote and tag naming
        version: Version detection settings
        logging: Logging settings
        output: CLI output settings
        _source: Path to the highest priority config file that was loaded
    """

    paths: Dict[str, Any] = field(default_factory=dict)
    commands: Dict[str, Any] = field(default_factory=dict)
    git: Dict[str, Any] = field(default_factory=dict)
    version: Dict[str, Any] = field(default_factory=dict)
    logging: Dict[str, Any] = field(default_factory=dict)
    output: Dict[str, Any] = field(default_factory=dict)
    _source: Optional[str] = None

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        section_dict = getattr(self, section, {})
        if section_dict is None:
            return default
        return section_dict.get(key, default)

    def set(self, section: str, key: str, value: Any) -> None:
        """Set a configuration value."""
        section_dict = getattr(self, section, None)
        if section_dict is not None:
            section_dict[key] = value

    @property
    def config_dir(self) -> Path:
        """Root directory for shipline records."""
        return Path(self.get("paths", "config_dir") or DEFAULT_CONFIG["paths"]["config_dir"]).expanduser()

    @property
    def components_dir(self) -> Path:
        """Directory holding one JSON record per component."""
        configured = self.get("paths", "components_dir")
        if configured:
            return Path(configured).expanduser()
        return self.config_dir / "components"

    @property
    def modules_dir(self) -> Path:
        """Directory holding one sub-directory per module."""
        configured = self.get("paths", "modules_dir")
        if configured:
            return Path(configured).expanduser()
        return self.config_dir / "modules"

    @property
    def command_timeout(self) -> Optional[float]:
        """Timeout for external commands in seconds (None disables it)."""
        timeout = self.get("commands", "timeout")
        return float(timeout) if timeout else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "paths": self.paths,
            "commands": self.commands,
            "git": self.git,
            "version": self.version,
            "logging": self.logging,
            "output": self.output,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: Optional[str] = None) -> "Config":
        """Create Config from dictionary."""
        return cls(
            paths=data.get("paths", {}),
            commands=data.get("commands", {}),
            git=data.get("git", {}),
            version=data.get("version", {}),
            logging=data.get("logging", {}),
            output=data.get("output", {}),
            _source=source,
        )


def load_toml(filepath: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a TOML configuration file.

    Args:
        filepath: Path to the TOML file

    Returns:
        Dictionary with configuration values

    Raises:
        FileNotFoundError: If file doesn't exist
        tomllib.TOMLDecodeError: If TOML parsing fails
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {filepath}")

    with open(path, "rb") as f:
        return tomllib.load(f)


def find_config_file(config_path: Optional[str] = None) -> Optional[Path]:
    """
    Find the highest priority configuration file.

    Args:
        config_path: Explicit path to config file (highest priority)

    Returns:
        Path to config file, or None if not found
    """
    if config_path:
        path = Path(config_path)
        if path.exists():
            return path
        logger.warning(f"Specified config file not found: {config_path}")
        return None

    for location in get_config_locations():
        if location.exists():
            return location

    return None


def get_default_config() -> Config:
    """Get the default configuration."""
    return Config.from_dict(_deep_copy_dict(DEFAULT_CONFIG))


def get_config_locations() -> List[Path]:
    """
    Get configuration file search locations in priority order.

    Returns:
        List of paths to search, in priority order (highest first)
    """
    return CONFIG_LOCATIONS.copy()


def load_config(explicit_path: Optional[str] = None) -> Config:
    """
    Load configuration with full cascade support.

    Merges configs from all levels in priority order:
    defaults -> system -> user -> current dir -> explicit

    Higher priority configs override lower priority ones. Files that fail
    to parse are logged and skipped.

    Args:
        explicit_path: Explicit config file path (highest priority)

    Returns:
        Config object with merged settings from all sources
    """
    config_data = _deep_copy_dict(DEFAULT_CONFIG)
    source = None

    # Load in reverse order (lowest to highest priority) so higher overrides lower
    for location in reversed(get_config_locations()):
        if location.exists():
            try:
                config_data = _merge_dicts(config_data, load_toml(location))
                source = str(location)
                logger.debug(f"Merged configuration from {location}")
            except (OSError, tomllib.TOMLDecodeError) as e:
                logger.warning(f"Error loading {location}: {e}")

    if explicit_path:
        path = Path(explicit_path)
        if path.exists():
            try:
                config_data = _merge_dicts(config_data, load_toml(path))
                source = str(path)
                logger.info(f"Loaded configuration from {path}")
            except (OSError, tomllib.TOMLDecodeError) as e:
                logger.warning(f"Error loading {path}: {e}")
        else:
            logger.warning(f"Specified config file not found: {explicit_path}")

    return Config.from_dict(config_data, source=source)


def _deep_copy_dict(d: Dict[str, Any]) -> Dict[str, Any]:
    """Create a deep copy of a dictionary."""
    result = {}
    for key, value in d.items():
        if isinstance(value, dict):
            result[key] = _deep_copy_dict(value)
        elif isinstance(value, list):
            result[key] = value.copy()
        else:
            result[key] = value
    return result


def _merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge two dictionaries, with override taking precedence."""
    result = _deep_copy_dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


# Global configuration instance
_global_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _global_config
    if _global_config is None:
        _global_config = load_config()
    return _global_config


def set_config(config: Config) -> None:
    """Set the global configuration instance."""
    global _global_config
    _global_config = config


def reset_config() -> None:
    """Reset the global configuration to None (will reload on next access)."""
    global _global_config
    _global_config = None


__all__ = [
    "Config",
    "DEFAULT_CONFIG",
    "DEFAULT_VERSION_PATTERN",
    "CONFIG_LOCATIONS",
    "load_toml",
    "find_config_file",
    "get_default_config",
    "get_config_locations",
    "load_config",
    "get_config",
    "set_config",
    "reset_config",
]

"""CLI command modules for shipline."""

from .component import component
from .config import config
from .module import module
from .release import release

__all__ = [
    "component",
    "config",
    "module",
    "release",
]

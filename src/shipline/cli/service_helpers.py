"""
CLI Service Helpers
===================

CLI-specific utilities for working with services and the ServiceFactory.

This module provides convenience functions for CLI commands to:
1. Access a singleton ServiceFactory instance
2. Handle service result errors consistently, including remediation hints

Usage:
    from shipline.cli.service_helpers import services, handle_result

    release_plan = handle_result(services.release.plan("storefront"))
"""

from typing import TYPE_CHECKING, Optional, TypeVar

import click

if TYPE_CHECKING:
    from shipline.services import ServiceFactory
    from shipline.services.base import ServiceResult
    from shipline.services.component import ComponentService
    from shipline.services.config import ConfigService
    from shipline.services.module import ModuleService
    from shipline.services.release import ReleaseService

T = TypeVar("T")


# ============================================================================
# Singleton Factory Instance
# ============================================================================

_factory: "Optional[ServiceFactory]" = None


def get_factory() -> "ServiceFactory":
    """
    Get the singleton ServiceFactory instance for CLI.

    This is lazily initialized on first access. For testing, use
    set_factory() to inject a factory over a mock repository.
    """
    global _factory
    if _factory is None:
        from shipline.services import ServiceFactory

        _factory = ServiceFactory()
    return _factory


def set_factory(factory: "ServiceFactory") -> None:
    """Set a custom ServiceFactory instance."""
    global _factory
    _factory = factory


def reset_factory() -> None:
    """Reset the singleton factory instance."""
    global _factory
    _factory = None


class _ServiceAccessor:
    """Lazy property access to services through the singleton factory."""

    @property
    def release(self) -> "ReleaseService":
        return get_factory().release

    @property
    def component(self) -> "ComponentService":
        return get_factory().component

    @property
    def module(self) -> "ModuleService":
        return get_factory().module

    @property
    def config(self) -> "ConfigService":
        return get_factory().config_service


services = _ServiceAccessor()


# ============================================================================
# Result Handling Utilities
# ============================================================================


def handle_result(result: "ServiceResult[T]") -> T:
    """
    Handle a service result, exiting with error if failed.

    Hints attached to a failed result are printed below the error.

    Raises:
        SystemExit: If result indicates failure (exits with code 1)
    """
    if not result.success:
        exit_with_error(result.error or "Unknown error", hints=result.hints)
    return result.data


def exit_with_error(message: str, code: int = 1, hints: Optional[list] = None) -> None:
    """
    Print error message (and hints) to stderr and exit.

    Raises:
        SystemExit: Always exits with specified code
    """
    click.echo(f"Error: {message}", err=True)
    for hint in hints or []:
        click.echo(f"  Hint: {hint}", err=True)
    raise SystemExit(code)


__all__ = [
    "services",
    "get_factory",
    "set_factory",
    "reset_factory",
    "handle_result",
    "exit_with_error",
]

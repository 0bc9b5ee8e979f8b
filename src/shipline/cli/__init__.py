"""Command-line interface for shipline."""

from .cli import cli

__all__ = ["cli"]

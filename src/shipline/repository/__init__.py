"""File repository layer for dependency injection."""

from shipline.repository.local import LocalFileRepository
from shipline.repository.protocol import FileRepositoryProtocol

__all__ = [
    "FileRepositoryProtocol",
    "LocalFileRepository",
]

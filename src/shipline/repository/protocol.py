"""Abstract protocol for record storage operations."""

from pathlib import Path
from typing import List, Protocol, Union


class FileRepositoryProtocol(Protocol):
    """Protocol defining the file operations used by the record stores.

    Component records and module manifests are read and written through
    this interface so stores can be exercised against an in-memory fake.
    """

    def is_file(self, path: Union[str, Path]) -> bool:
        """Check if path is a file."""
        ...

    def read_text(self, path: Union[str, Path], encoding: str = "utf-8") -> str:
        """Read file contents as text."""
        ...

    def write_text(self, path: Union[str, Path], content: str, encoding: str = "utf-8") -> None:
        """Write text to file, creating parent directories."""
        ...

    def list_files(self, directory: Union[str, Path], pattern: str = "*") -> List[Path]:
        """List files directly inside a directory matching pattern."""
        ...

    def list_dirs(self, directory: Union[str, Path], pattern: str = "*") -> List[Path]:
        """List directories directly inside a directory matching pattern."""
        ...

"""Local filesystem implementation of FileRepositoryProtocol."""

from pathlib import Path
from typing import List, Union


class LocalFileRepository:
    """Implementation of FileRepositoryProtocol using local filesystem."""

    def is_file(self, path: Union[str, Path]) -> bool:
        return Path(path).is_file()

    def read_text(self, path: Union[str, Path], encoding: str = "utf-8") -> str:
        return Path(path).read_text(encoding=encoding)

    def write_text(self, path: Union[str, Path], content: str, encoding: str = "utf-8") -> None:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(content, encoding=encoding)

    def list_files(self, directory: Union[str, Path], pattern: str = "*") -> List[Path]:
        dir_path = Path(directory)
        if not dir_path.is_dir():
            return []
        return sorted(p for p in dir_path.glob(pattern) if p.is_file())

    def list_dirs(self, directory: Union[str, Path], pattern: str = "*") -> List[Path]:
        dir_path = Path(directory)
        if not dir_path.is_dir():
            return []
        return sorted(p for p in dir_path.glob(pattern) if p.is_dir())

"""Filesystem access used by the walker"""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Union
from .types import DirEntry, RootError

logger = logging.getLogger(__name__)


class FileSystem(ABC):
    """The three filesystem capabilities the classification engine needs."""

    @abstractmethod
    def list_directory(self, path: str) -> List[DirEntry]:
        """List the immediate children of a directory.

        Raises:
            OSError: if the directory cannot be read
        """
        pass

    @abstractmethod
    def read_text(self, path: str) -> Optional[str]:
        """Read a regular file as UTF-8, or return None if that is not possible."""
        pass

    @abstractmethod
    def exists(self, path: str) -> bool:
        pass

    def resolve_root(self, path: Union[str, Path, None]) -> str:
        """Validate a walk root and return it normalized.

        Default implementation only checks existence; listing the root
        catches the rest.

        Raises:
            RootError: if the path is empty or does not exist
        """
        if path is None or not str(path).strip():
            raise RootError("The root directory path is empty")
        text = normalize_path(str(path).strip())
        if not self.exists(text):
            raise RootError(f"The root directory path ({text}) does not exist")
        return text


class LocalFileSystem(FileSystem):
    """FileSystem backed by the local disk.

    Children are listed sorted by name so repeated walks are identical.
    Symbolic links are reported as files, so the walker never descends
    through them.
    """

    def list_directory(self, path: str) -> List[DirEntry]:
        children = []
        with os.scandir(path) as it:
            for child in it:
                try:
                    is_dir = child.is_dir(follow_symlinks=False)
                except OSError:
                    is_dir = False
                children.append(DirEntry(child.name, is_dir))
        children.sort(key=lambda c: c.name)
        return children

    def read_text(self, path: str) -> Optional[str]:
        file_path = Path(path)
        if not file_path.is_file():
            return None
        try:
            return file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Cannot read {path}: {e}")
            return None

    def exists(self, path: str) -> bool:
        return Path(path).exists()

    def resolve_root(self, path: Union[str, Path, None]) -> str:
        return normalize_path(resolve_root(path).as_posix())


def normalize_path(path: Union[str, Path]) -> str:
    """Return a path with forward slashes and no trailing slash.

    Backslashes are only separators on Windows.
    """
    text = str(path)
    if os.sep == "\\":
        text = text.replace("\\", "/")
    if len(text) > 1 and not text.endswith(":/"):
        text = text.rstrip("/") or "/"
    return text


def join_path(directory: str, name: str) -> str:
    if directory.endswith("/"):
        return directory + name
    return f"{directory}/{name}"


def resolve_root(path: Union[str, Path, None], kind: str = "root directory") -> Path:
    """Resolve and validate the directory a walk starts from.

    Raises:
        RootError: if the path is empty, missing or not a directory
    """
    if path is None or not str(path).strip():
        raise RootError(f"The {kind} path is empty")
    given = Path(str(path).strip()).expanduser()
    try:
        resolved = given.resolve(strict=True)
    except (OSError, RuntimeError):
        raise RootError(f"The {kind} path ({given}) does not exist")
    if not resolved.is_dir():
        raise RootError(f"The {kind} path ({resolved}) is not a directory")
    return resolved

import logging
from pathlib import Path
from typing import Dict, Optional

import pytest

from xparse_ignore.fs import FileSystem
from xparse_ignore.types import DirEntry


class MemoryFileSystem(FileSystem):
    """In-memory tree keyed by absolute forward-slash paths.

    ``files`` maps file paths to their text; directories are implied by the
    file paths plus any path listed in ``dirs``. Listing a path in ``fail``
    raises PermissionError.
    """

    def __init__(self, files: Dict[str, str], dirs=(), fail=()):
        self.files = dict(files)
        self.dirs = set(dirs)
        for path in list(self.files) + list(dirs):
            parent = path.rsplit("/", 1)[0]
            while parent:
                self.dirs.add(parent)
                parent = parent.rsplit("/", 1)[0]
        self.fail = set(fail)
        self.listed = []

    def list_directory(self, path):
        if path in self.fail:
            raise PermissionError(13, "Permission denied", path)
        if path not in self.dirs:
            raise FileNotFoundError(2, "No such file or directory", path)
        self.listed.append(path)
        children = {}
        prefix = path + "/"
        for candidate in list(self.files) + list(self.dirs):
            if not candidate.startswith(prefix):
                continue
            name = candidate[len(prefix) :].split("/", 1)[0]
            children[name] = f"{prefix}{name}" in self.dirs
        return [DirEntry(name, is_dir) for name, is_dir in sorted(children.items())]

    def read_text(self, path):
        return self.files.get(path)

    def exists(self, path):
        return path in self.files or path in self.dirs


@pytest.fixture
def memory_fs():
    return MemoryFileSystem


@pytest.fixture
def make_tree(tmp_path):
    """Create files (str content) and directories (None) under tmp_path."""

    def build(layout: Dict[str, Optional[str]]) -> Path:
        root = tmp_path / "root"
        root.mkdir(exist_ok=True)
        for rel, content in layout.items():
            path = root / rel
            if content is None:
                path.mkdir(parents=True, exist_ok=True)
            else:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(content)
        return root

    return build


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers the CLI installs so they do not outlive a test's capture."""
    yield
    logger = logging.getLogger("xparse_ignore")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)

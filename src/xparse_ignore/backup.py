"""Backup copy of the kept files of a directory tree"""

import hashlib
import json
import logging
import shutil
import stat
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple, Union
from .fs import normalize_path, resolve_root
from .reporter import report
from .types import RootError
from .walker import TreeWalker

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 8
HASH_CHUNK_SIZE = 65536


class BackupStatus(Enum):
    PENDING = 0
    COPIED = 1
    SKIPPED = 2  # Destination already has the same content
    FAILED = 3
    CANCELLED = 4


@dataclass
class BackupItem:
    """One regular file to copy, relative to both roots."""

    path: str
    size: int
    status: BackupStatus = BackupStatus.PENDING
    error: str = ""


@dataclass
class BackupReport:
    source: str
    destination: str
    items: List[BackupItem] = field(default_factory=list)

    def count(self, status: BackupStatus) -> int:
        return sum(1 for item in self.items if item.status is status)

    @property
    def copied(self) -> int:
        return self.count(BackupStatus.COPIED)

    @property
    def skipped(self) -> int:
        return self.count(BackupStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self.count(BackupStatus.FAILED)

    @property
    def cancelled(self) -> int:
        return self.count(BackupStatus.CANCELLED)

    @property
    def total_bytes(self) -> int:
        return sum(item.size for item in self.items)

    @property
    def copied_bytes(self) -> int:
        return sum(
            item.size for item in self.items if item.status is BackupStatus.COPIED
        )

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def copies(self) -> dict:
        """Source to destination path of every copied file."""
        return {
            f"{self.source}/{item.path}": f"{self.destination}/{item.path}"
            for item in self.items
            if item.status is BackupStatus.COPIED
        }


def sha256_file(path: Path) -> str:
    """Hash a file in chunks so large files do not load into memory."""
    sha256_hash = hashlib.sha256()
    with open(path, "rb") as f:
        for byte_block in iter(lambda: f.read(HASH_CHUNK_SIZE), b""):
            sha256_hash.update(byte_block)
    return sha256_hash.hexdigest()


def prepare_destination(destination: Union[str, Path, None]) -> Path:
    """Create the destination directory if needed.

    Raises:
        RootError: if the path is empty, is not a directory, or cannot be created
    """
    if destination is None or not str(destination).strip():
        raise RootError("The backup destination directory path is empty")
    path = Path(str(destination).strip()).expanduser()
    if path.exists() or path.is_symlink():
        if not path.is_dir():
            raise RootError(
                f"The backup destination path ({path}) is not a directory"
            )
        return path.resolve()
    logger.info(f"Creating destination directory {path}")
    try:
        path.mkdir(parents=True)
    except OSError as e:
        raise RootError(f"Failed to create backup destination ({path}): {e}") from e
    return path.resolve()


def collect_items(source: Path, paths: List[str]) -> List[BackupItem]:
    """Keep the regular files among kept relative paths. Links are skipped."""
    items = []
    for path in paths:
        try:
            info = (source / path).lstat()
        except OSError as e:
            logger.warning(f"Cannot stat {path}, not backed up: {e}")
            continue
        if not stat.S_ISREG(info.st_mode):
            continue
        items.append(BackupItem(path=path, size=info.st_size))
    return items


def exclude_subtree(paths: List[str], subtree: str) -> List[str]:
    """Drop ``subtree`` and everything below it from relative paths."""
    logger.info(f"Backup destination {subtree} is inside the source, not backed up")
    return [p for p in paths if p != subtree and not p.startswith(subtree + "/")]


def copy_item(
    source: Path, destination: Path, item: BackupItem
) -> Tuple[BackupStatus, str]:
    """Copy one file unless the destination already holds identical content."""
    copy_from = source / item.path
    copy_to = destination / item.path
    try:
        if copy_to.exists() or copy_to.is_symlink():
            to_info = copy_to.lstat()
            if not stat.S_ISREG(to_info.st_mode):
                return BackupStatus.FAILED, f"Copy destination is not a file ({copy_to})"
            if sha256_file(copy_from) == sha256_file(copy_to):
                return BackupStatus.SKIPPED, ""
        copy_to.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(copy_from, copy_to)
    except OSError as e:
        return BackupStatus.FAILED, f"Copy failure! {e}"
    return BackupStatus.COPIED, ""


def backup(
    source: Union[str, Path],
    destination: Union[str, Path],
    out: Optional[Union[str, Path]] = None,
    workers: int = DEFAULT_WORKERS,
    cancel_event: Optional[threading.Event] = None,
) -> BackupReport:
    """Copy the kept files of ``source`` into ``destination``.

    The whole tree is classified before the first copy starts. Files whose
    destination already has the same sha256 are left alone.

    Args:
        source: Directory to back up
        destination: Directory to copy into, created if missing
        out: Optional JSON file receiving ``{source_path: destination_path}``
            for every copied file
        workers: Maximum number of concurrent copies
        cancel_event: When set, pending copies are cancelled

    Returns:
        BackupReport with one item per file

    Raises:
        RootError: if the source or destination is unusable
    """
    source_root = resolve_root(source, "backup source directory")
    destination_root = prepare_destination(destination)
    if destination_root == source_root:
        raise RootError(
            f"The backup destination ({destination_root}) is the source directory"
        )

    walker = TreeWalker(cancel_event=cancel_event)
    paths = report(walker.walk(source_root), relative=True, separator="/")
    if source_root in destination_root.parents:
        paths = exclude_subtree(
            paths, destination_root.relative_to(source_root).as_posix()
        )
    items = collect_items(source_root, paths)
    result = BackupReport(
        source=normalize_path(source_root.as_posix()),
        destination=normalize_path(destination_root.as_posix()),
        items=items,
    )
    logger.info(
        f"Backup copy {len(items)} file(s), {result.total_bytes} bytes: "
        f"{result.source} => {result.destination}"
    )

    def run(item: BackupItem) -> Tuple[BackupStatus, str]:
        if cancel_event is not None and cancel_event.is_set():
            return BackupStatus.CANCELLED, ""
        return copy_item(source_root, destination_root, item)

    with ThreadPoolExecutor(max_workers=max(1, workers)) as executor:
        futures = {executor.submit(run, item): item for item in items}
        for future in as_completed(futures):
            item = futures[future]
            item.status, item.error = future.result()
            if item.status is BackupStatus.FAILED:
                logger.warning(f"[E] {item.path} ~ {item.error}")
            else:
                logger.debug(f"{item.status.name.lower()}: {item.path}")

    if out:
        out_path = Path(out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        with out_path.open("w", encoding="utf-8") as f:
            json.dump(result.copies(), f, indent=2)

    logger.info(
        f"Backup complete: copied {result.copied} ({result.copied_bytes} bytes), "
        f"unchanged {result.skipped}, "
        f"failed {result.failed}, cancelled {result.cancelled}"
    )
    return result

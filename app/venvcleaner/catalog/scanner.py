"""Catalog builder for .venv directories.

Walks a directory tree, identifies directories named ``.venv``,
measures their size and captures their timestamps. Scanning is pure
and synchronous: it only reads the filesystem and never keeps state
between calls, so it is safe to run on a background worker.
"""

import logging
import os
import stat
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from venvcleaner.catalog.models import MAX_SIZE_BYTES, VENV_DIR_NAME, VenvInfo
from venvcleaner.core.errors import NoVenvFoundError, PathError, VenvIoError

logger = logging.getLogger(__name__)

# Children commonly found in a virtual environment; two or more means "looks real"
_VENV_MARKERS: tuple[str, ...] = (
    "bin",
    "Scripts",
    "lib",
    "include",
    "pyvenv.cfg",
)


@dataclass(frozen=True, slots=True)
class SizeReport:
    """Result of measuring a directory tree.

    Attributes:
        total_bytes: Sum of regular file sizes (saturating).
        error_count: Entries that could not be read.
    """

    total_bytes: int
    error_count: int


@dataclass(frozen=True, slots=True)
class ScanReport:
    """Result of a successful scan.

    Attributes:
        entries: Discovered .venv directories, in discovery order.
        error_count: .venv directories that could not be analyzed.
    """

    entries: tuple[VenvInfo, ...]
    error_count: int = 0

    @property
    def size_error_count(self) -> int:
        """Unreadable entries inside the found directories, summed."""
        return sum(e.unreadable_count for e in self.entries)


def calculate_directory_size(path: Path) -> SizeReport:
    """Calculate the total size of a directory and all its contents.

    Symbolic links are not followed and contribute nothing. Entries
    that cannot be read are logged, counted and skipped.

    Args:
        path: Directory to measure.

    Returns:
        SizeReport with the byte total and number of failures.

    Raises:
        PathError: If the path does not exist or is not a directory.
    """
    if not path.exists():
        raise PathError(str(path), "Directory does not exist")
    if not path.is_dir():
        raise PathError(str(path), "Path is not a directory")

    total = 0
    errors = 0

    def _on_error(error: OSError) -> None:
        nonlocal errors
        logger.warning("Error walking directory %s: %s", error.filename or path, error)
        errors += 1

    logger.debug("Calculating size for directory: %s", path)

    for dirpath, _dirnames, filenames in os.walk(path, onerror=_on_error, followlinks=False):
        for name in filenames:
            file_path = os.path.join(dirpath, name)
            try:
                st = os.lstat(file_path)
            except OSError as e:
                logger.warning("Failed to get metadata for %s: %s", file_path, e)
                errors += 1
                continue
            if not stat.S_ISREG(st.st_mode):
                continue
            total = min(total + st.st_size, MAX_SIZE_BYTES)

    if errors:
        logger.debug("Encountered %d errors while calculating size of %s", errors, path)

    return SizeReport(total_bytes=total, error_count=errors)


def is_valid_venv_directory(path: Path) -> bool:
    """Check whether a path looks like a real virtual environment.

    Args:
        path: Path to check.

    Returns:
        True if it is a directory named .venv holding at least two of
        the usual venv children (bin, Scripts, lib, include, pyvenv.cfg).
    """
    if path.name != VENV_DIR_NAME or not path.is_dir():
        return False
    found = sum(1 for item in _VENV_MARKERS if (path / item).exists())
    return found >= 2


def count_items(path: Path) -> tuple[int, int]:
    """Count files and directories below a path.

    The root directory itself is not counted.

    Args:
        path: Directory to count.

    Returns:
        Tuple of (file_count, directory_count).
    """
    files = 0
    dirs = 0
    for _dirpath, dirnames, filenames in os.walk(path, followlinks=False):
        files += len(filenames)
        dirs += len(dirnames)
    return files, dirs


def _timestamp(value: float | None) -> datetime:
    if value is None:
        return datetime.now(UTC)
    return datetime.fromtimestamp(value, tz=UTC)


class VenvScanner:
    """Finds and measures .venv directories below a root directory.

    Args:
        root: Directory to start searching from.
        recursive: If True, walk the whole tree; otherwise only check
            ``root/.venv``.
    """

    def __init__(self, root: Path, *, recursive: bool = False) -> None:
        self._root = root
        self._recursive = recursive

    @property
    def root(self) -> Path:
        """Directory the scan starts from."""
        return self._root

    @property
    def recursive(self) -> bool:
        """Whether the scan walks the whole tree."""
        return self._recursive

    def scan(self) -> ScanReport:
        """Find all .venv directories in the configured root.

        Returns:
            ScanReport with the discovered entries and the number of
            entries that failed analysis.

        Raises:
            NoVenvFoundError: If nothing was found and nothing failed.
            VenvIoError: If the root directory itself cannot be read.
        """
        logger.info("Searching for .venv directories in: %s", self._root)

        try:
            with os.scandir(self._root):
                pass
        except OSError as e:
            raise VenvIoError(f"Cannot read {self._root}: {e.strerror or e}") from e

        candidates = self._walk() if self._recursive else self._direct_child()

        entries: list[VenvInfo] = []
        errors = 0
        for candidate in candidates:
            try:
                info = self.analyze(candidate)
            except (OSError, PathError) as e:
                logger.warning("Error analyzing .venv at %s: %s", candidate, e)
                errors += 1
                continue
            logger.debug("Found .venv at: %s", candidate)
            entries.append(info)

        if not entries and not errors:
            raise NoVenvFoundError()

        if errors:
            logger.warning("Encountered %d errors while searching", errors)

        return ScanReport(entries=tuple(entries), error_count=errors)

    def analyze(self, path: Path) -> VenvInfo:
        """Build a VenvInfo record for a single .venv directory.

        Args:
            path: Path to the .venv directory.

        Returns:
            Record with size, timestamps and validity flag.

        Raises:
            OSError: If the directory metadata cannot be read.
            PathError: If the directory vanished before measuring.
        """
        st = path.lstat()
        created = _timestamp(getattr(st, "st_birthtime", None))
        modified = _timestamp(st.st_mtime)
        size = calculate_directory_size(path)
        if size.error_count:
            logger.debug("%d entries below %s could not be read", size.error_count, path)

        verified = is_valid_venv_directory(path)
        if not verified:
            logger.debug("%s does not look like a virtual environment", path)

        return VenvInfo(
            path=path,
            size_bytes=size.total_bytes,
            created=created,
            last_modified=modified,
            verified=verified,
            unreadable_count=size.error_count,
        )

    def _direct_child(self) -> list[Path]:
        """Return root/.venv if it is a real directory."""
        venv = self._root / VENV_DIR_NAME
        if venv.is_dir() and not venv.is_symlink():
            return [venv]
        return []

    def _walk(self) -> list[Path]:
        """Walk the tree and collect every .venv directory.

        Matched directories are leaves of the search: their contents
        are never searched for nested .venv directories.
        """
        matches: list[Path] = []

        def _on_error(error: OSError) -> None:
            logger.debug("Skipping unreadable directory %s: %s", error.filename, error)

        for dirpath, dirnames, _filenames in os.walk(
            self._root, onerror=_on_error, followlinks=False
        ):
            keep: list[str] = []
            for name in sorted(dirnames):
                full = os.path.join(dirpath, name)
                if os.path.islink(full):
                    continue
                if name == VENV_DIR_NAME:
                    matches.append(Path(full))
                    continue
                keep.append(name)
            dirnames[:] = keep

        return matches

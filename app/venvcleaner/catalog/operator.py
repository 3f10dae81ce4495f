"""Deletion operator for .venv directories.

Handles permission pre-checks, simulated (dry-run) deletion and
recursive removal of .venv directories. Every target in a batch is
handled independently: one failure never stops the rest.
"""

import logging
import os
import shutil
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from venvcleaner.catalog.models import VENV_DIR_NAME, VenvInfo
from venvcleaner.core.errors import (
    InvalidArgumentError,
    PermissionDeniedError,
    VenvCleanerError,
    VenvIoError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DeletionOutcome:
    """Result of a single deletion attempt.

    Attributes:
        entry: The .venv directory that was operated on.
        error: Typed failure, None on success.
        simulated: Whether this was a dry-run (no actual deletion).
    """

    entry: VenvInfo
    error: VenvCleanerError | None = None
    simulated: bool = False

    @property
    def success(self) -> bool:
        """Whether the deletion succeeded (or would have, in a dry-run)."""
        return self.error is None


@dataclass(frozen=True, slots=True)
class DeletionReport:
    """Aggregated result of a batch of deletions.

    Attributes:
        outcomes: One outcome per requested entry, in request order.
        simulated: Whether the batch ran in dry-run mode.
    """

    outcomes: tuple[DeletionOutcome, ...]
    simulated: bool = False

    @property
    def deleted_count(self) -> int:
        """Number of successful deletions."""
        return sum(1 for o in self.outcomes if o.success)

    @property
    def failed_count(self) -> int:
        """Number of failed deletions."""
        return sum(1 for o in self.outcomes if not o.success)

    @property
    def freed_bytes(self) -> int:
        """Bytes freed (or that would be freed) by successful deletions."""
        return sum(o.entry.size_bytes for o in self.outcomes if o.success)

    @property
    def failures(self) -> tuple[DeletionOutcome, ...]:
        """Outcomes that failed."""
        return tuple(o for o in self.outcomes if not o.success)


def _check_write_permission(path: Path) -> bool:
    """Check that entries can be removed from a directory.

    Raises:
        OSError: For failures other than missing permissions.
    """
    try:
        path.stat()
    except PermissionError:
        return False
    return os.access(path, os.W_OK | os.X_OK)


def can_delete(path: Path) -> bool:
    """Check whether a directory can be deleted.

    Args:
        path: Directory to check.

    Returns:
        False if the path no longer exists, the parent directory is not
        writable, or the directory itself cannot be read.

    Raises:
        OSError: For I/O failures other than missing permissions.
    """
    if not os.path.lexists(path):
        return False

    parent = path.parent
    if parent != path and not _check_write_permission(parent):
        return False

    try:
        with os.scandir(path):
            pass
    except PermissionError:
        return False

    return True


class VenvOperator:
    """Handles deletion of .venv directories.

    Attributes:
        _dry_run: If True, simulate deletions without modifying the filesystem.
    """

    def __init__(self, dry_run: bool = False) -> None:
        """Initialize the VenvOperator.

        Args:
            dry_run: If True, report what would be deleted without deleting.
        """
        self._dry_run = dry_run

    @property
    def dry_run(self) -> bool:
        """Whether deletions are simulated."""
        return self._dry_run

    def delete(self, entry: VenvInfo) -> None:
        """Delete a single .venv directory.

        In dry-run mode nothing is touched and the call always succeeds.
        Otherwise the directory is re-validated and removed as a whole.

        Args:
            entry: The .venv directory to delete.

        Raises:
            InvalidArgumentError: If the path is not a .venv directory.
            PermissionDeniedError: If the directory cannot be deleted.
            VenvIoError: If removal fails.
        """
        path = entry.path

        if self._dry_run:
            logger.info("Dry-run: would delete %s", path)
            return

        if path.name != VENV_DIR_NAME:
            raise InvalidArgumentError(f"Refusing to delete non-.venv path: {path}")

        logger.info("Deleting .venv directory: %s", path)

        try:
            allowed = can_delete(path)
        except OSError as e:
            raise VenvIoError(str(e)) from e
        if not allowed:
            raise PermissionDeniedError(str(path))

        if path.is_symlink() or not path.is_dir():
            raise InvalidArgumentError(f"Not a directory: {path}")

        try:
            shutil.rmtree(path)
        except PermissionError as e:
            raise PermissionDeniedError(str(path)) from e
        except OSError as e:
            raise VenvIoError(str(e)) from e

        logger.info("Successfully deleted: %s", path)

    def delete_many(self, entries: Iterable[VenvInfo]) -> DeletionReport:
        """Delete multiple .venv directories and report the outcome.

        Args:
            entries: Directories to delete.

        Returns:
            DeletionReport with one outcome per entry.
        """
        outcomes: list[DeletionOutcome] = []
        for entry in entries:
            try:
                self.delete(entry)
            except VenvCleanerError as e:
                logger.warning("Failed to delete %s: %s", entry.path, e)
                outcomes.append(DeletionOutcome(entry=entry, error=e, simulated=self._dry_run))
                continue
            outcomes.append(DeletionOutcome(entry=entry, simulated=self._dry_run))
        return DeletionReport(outcomes=tuple(outcomes), simulated=self._dry_run)

"""Catalog domain models for .venv directories.

This module defines the immutable record describing one discovered
.venv directory, the classifications derived from it, and the sort
orders used by every front-end.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path

# Directory name that identifies a managed virtual environment
VENV_DIR_NAME = ".venv"

# Sizes are reported as unsigned 64-bit quantities
MAX_SIZE_BYTES = 2**64 - 1

KB = 1024
MB = KB * 1024
GB = MB * 1024

RECENT_DAYS = 30
OLD_DAYS = 90

MEDIUM_SIZE_BYTES = 100 * MB
LARGE_SIZE_BYTES = GB
# Threshold used for "taking significant space" recommendations
RECOMMEND_SIZE_BYTES = 500 * MB

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_size(size_bytes: int) -> str:
    """Format a byte count as a human-readable string.

    Args:
        size_bytes: Number of bytes.

    Returns:
        Size as bytes, KB, MB or GB with two decimals.
    """
    if size_bytes >= GB:
        return f"{size_bytes / GB:.2f} GB"
    if size_bytes >= MB:
        return f"{size_bytes / MB:.2f} MB"
    if size_bytes >= KB:
        return f"{size_bytes / KB:.2f} KB"
    return f"{size_bytes} bytes"


class AgeCategory(str, Enum):
    """How recently a .venv directory was used.

    Attributes:
        RECENT: Modified within the last 30 days.
        MODERATE: Modified between 30 and 90 days ago.
        OLD: Not modified for more than 90 days.
    """

    RECENT = "recent"
    MODERATE = "moderate"
    OLD = "old"


class SizeCategory(str, Enum):
    """Size bucket of a .venv directory.

    Attributes:
        SMALL: Up to 100 MB.
        MEDIUM: Larger than 100 MB.
        LARGE: Larger than 1 GB.
    """

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class SortKey(str, Enum):
    """Sort orders for lists of .venv directories.

    Attributes:
        PATH: Alphabetical by path.
        SIZE: Largest first.
        CREATED: Newest first.
        LAST_MODIFIED: Most recently used first.
    """

    PATH = "path"
    SIZE = "size"
    CREATED = "created"
    LAST_MODIFIED = "last_modified"

    def next(self) -> "SortKey":
        """Get the next sort option in sequence."""
        members = list(SortKey)
        return members[(members.index(self) + 1) % len(members)]

    def previous(self) -> "SortKey":
        """Get the previous sort option in sequence."""
        members = list(SortKey)
        return members[(members.index(self) - 1) % len(members)]

    @property
    def display_name(self) -> str:
        """Human-readable label for this sort option."""
        return _SORT_DISPLAY_NAMES[self]


_SORT_DISPLAY_NAMES: dict[SortKey, str] = {
    SortKey.PATH: "Path",
    SortKey.SIZE: "Size",
    SortKey.CREATED: "Created",
    SortKey.LAST_MODIFIED: "Last Used",
}


@dataclass(frozen=True, slots=True)
class VenvInfo:
    """Snapshot of one .venv directory discovered during a scan.

    Records are created once per scan and never mutated; a re-scan
    replaces them wholesale.

    Attributes:
        path: Absolute path to the .venv directory.
        size_bytes: Total size of all regular files below the directory.
        created: Creation time (timezone-aware, "now" if the OS has none).
        last_modified: Last modification time (timezone-aware).
        verified: Whether the directory looks like a real virtual environment.
        unreadable_count: Entries below the directory that could not be read.
            Their bytes are missing from size_bytes.
    """

    path: Path
    size_bytes: int
    created: datetime
    last_modified: datetime
    verified: bool = True
    unreadable_count: int = 0

    def __post_init__(self) -> None:
        """Validate record data after initialization."""
        if not str(self.path):
            msg = "Path cannot be empty"
            raise ValueError(msg)
        if self.size_bytes < 0:
            msg = f"Size cannot be negative, got {self.size_bytes}"
            raise ValueError(msg)
        if self.created.tzinfo is None or self.last_modified.tzinfo is None:
            msg = "Timestamps must be timezone-aware"
            raise ValueError(msg)

    @property
    def parent_path(self) -> Path | None:
        """Directory containing the .venv folder."""
        parent = self.path.parent
        return None if parent == self.path else parent

    @property
    def location(self) -> str:
        """Parent directory as a string, or "Unknown"."""
        parent = self.parent_path
        return str(parent) if parent is not None else "Unknown"

    @property
    def project_name(self) -> str | None:
        """Name of the project directory that owns this .venv."""
        parent = self.parent_path
        if parent is None or not parent.name:
            return None
        return parent.name

    @property
    def size_formatted(self) -> str:
        """Size as a human-readable string."""
        return format_size(self.size_bytes)

    @property
    def created_formatted(self) -> str:
        """Creation date in local time."""
        return self.created.astimezone().strftime(_DATE_FORMAT)

    @property
    def last_modified_formatted(self) -> str:
        """Last modification date in local time."""
        return self.last_modified.astimezone().strftime(_DATE_FORMAT)

    @property
    def size_category(self) -> SizeCategory:
        """Size bucket of this directory."""
        if self.size_bytes > LARGE_SIZE_BYTES:
            return SizeCategory.LARGE
        if self.size_bytes > MEDIUM_SIZE_BYTES:
            return SizeCategory.MEDIUM
        return SizeCategory.SMALL

    def is_recently_used(self, now: datetime | None = None) -> bool:
        """Check whether the .venv was modified within the last 30 days."""
        now = now or datetime.now().astimezone()
        return self.last_modified > now - timedelta(days=RECENT_DAYS)

    def is_old(self, now: datetime | None = None) -> bool:
        """Check whether the .venv was not modified in the last 90 days."""
        now = now or datetime.now().astimezone()
        return self.last_modified < now - timedelta(days=OLD_DAYS)

    def age_in_days(self, now: datetime | None = None) -> int:
        """Whole days since the last modification."""
        now = now or datetime.now().astimezone()
        return (now - self.last_modified).days

    def age_category(self, now: datetime | None = None) -> AgeCategory:
        """Age bucket of this directory."""
        if self.is_recently_used(now):
            return AgeCategory.RECENT
        if self.is_old(now):
            return AgeCategory.OLD
        return AgeCategory.MODERATE

    def summary(self) -> str:
        """One-line description for logs and plain output."""
        return (
            f"{self.path} | {self.size_formatted} | Created: {self.created_formatted} "
            f"| Last used: {self.last_modified_formatted}"
        )


def _sort_value(entry: VenvInfo, key: SortKey) -> tuple[object, str]:
    path = str(entry.path)
    if key == SortKey.SIZE:
        return (-entry.size_bytes, path)
    if key == SortKey.CREATED:
        return (-entry.created.timestamp(), path)
    if key == SortKey.LAST_MODIFIED:
        return (-entry.last_modified.timestamp(), path)
    return (path, path)


def sort_entries(
    entries: Iterable[VenvInfo],
    key: SortKey,
    reverse: bool = False,
) -> list[VenvInfo]:
    """Sort entries by the given key.

    Ties on the primary key are broken by path (ascending). Reversing
    yields exactly the reversed forward order, ties included.

    Args:
        entries: Records to sort.
        key: Sort order to apply.
        reverse: Whether to reverse the resulting order.

    Returns:
        New sorted list.
    """
    ordered = sorted(entries, key=lambda e: _sort_value(e, key))
    if reverse:
        ordered.reverse()
    return ordered


@dataclass(frozen=True, slots=True)
class ScanSummary:
    """Aggregate statistics for a set of .venv directories.

    Attributes:
        total_count: Number of directories.
        total_size: Exact sum of their sizes in bytes.
        recent_count: Directories used within 30 days.
        moderate_count: Directories used 30 to 90 days ago.
        old_count: Directories unused for over 90 days.
        large_count: Directories larger than 500 MB.
    """

    total_count: int
    total_size: int
    recent_count: int
    moderate_count: int
    old_count: int
    large_count: int


def summarize(entries: Iterable[VenvInfo], now: datetime | None = None) -> ScanSummary:
    """Compute summary statistics for a collection of records.

    Args:
        entries: Records to summarize.
        now: Reference time for age classification (defaults to now).

    Returns:
        ScanSummary for the records.
    """
    now = now or datetime.now().astimezone()
    items = list(entries)
    ages = [e.age_category(now) for e in items]
    return ScanSummary(
        total_count=len(items),
        total_size=sum(e.size_bytes for e in items),
        recent_count=ages.count(AgeCategory.RECENT),
        moderate_count=ages.count(AgeCategory.MODERATE),
        old_count=ages.count(AgeCategory.OLD),
        large_count=sum(1 for e in items if e.size_bytes > RECOMMEND_SIZE_BYTES),
    )

"""Catalog of .venv directories.

This module provides the record model for discovered .venv
directories, the scanner that finds and measures them, and the
operator that deletes them.
"""

from venvcleaner.catalog.models import (
    VENV_DIR_NAME,
    AgeCategory,
    ScanSummary,
    SizeCategory,
    SortKey,
    VenvInfo,
    format_size,
    sort_entries,
    summarize,
)
from venvcleaner.catalog.operator import (
    DeletionOutcome,
    DeletionReport,
    VenvOperator,
    can_delete,
)
from venvcleaner.catalog.scanner import (
    ScanReport,
    SizeReport,
    VenvScanner,
    calculate_directory_size,
    count_items,
    is_valid_venv_directory,
)

__all__ = [
    "VENV_DIR_NAME",
    "AgeCategory",
    "DeletionOutcome",
    "DeletionReport",
    "ScanReport",
    "ScanSummary",
    "SizeCategory",
    "SizeReport",
    "SortKey",
    "VenvInfo",
    "VenvOperator",
    "VenvScanner",
    "calculate_directory_size",
    "can_delete",
    "count_items",
    "format_size",
    "is_valid_venv_directory",
    "sort_entries",
    "summarize",
]

"""Utility modules for venvcleaner.

This module exports commonly used utility functions.
"""

from venvcleaner.utils.formatting import (
    console,
    create_venv_table,
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from venvcleaner.utils.shell import open_in_file_manager

__all__ = [
    "console",
    "create_venv_table",
    "err_console",
    "open_in_file_manager",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
]

"""Error types for venvcleaner operations.

Every failure raised by the scanner, the deletion operator, or the
configuration layer derives from VenvCleanerError so callers can
handle the whole family in one place.
"""


class VenvCleanerError(Exception):
    """Base exception for all venvcleaner errors."""


class VenvIoError(VenvCleanerError):
    """Generic I/O failure surfaced to the caller."""

    def __init__(self, message: str) -> None:
        super().__init__(f"IO error: {message}")
        self.message = message


class PathError(VenvCleanerError):
    """Raised when a path is missing or has the wrong type.

    Attributes:
        path: The offending path.
        message: Human-readable reason.
    """

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"Path error: {path} - {message}")
        self.path = path
        self.message = message


class PermissionDeniedError(VenvCleanerError):
    """Raised when a .venv directory cannot be deleted due to permissions."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Permission denied: {path}")
        self.path = path


class NoVenvFoundError(VenvCleanerError):
    """Raised when a scan finds no .venv directories and hit no errors."""

    def __init__(self) -> None:
        super().__init__("No .venv folders found in the specified directory")


class InvalidArgumentError(VenvCleanerError):
    """Raised when an operation receives an argument it refuses to act on."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Invalid argument: {message}")
        self.message = message

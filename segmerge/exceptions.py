"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class SegmergeError(Exception):
    """Base exception for all application-specific errors."""


class IOFailure(SegmergeError):
    """Raised when reading, writing or creating a file fails mid-operation."""


class PartMissing(SegmergeError):
    """Raised when a part file listed for a merge does not exist."""

    def __init__(self, path: str):
        super().__init__(f"Part file not found: '{path}'")
        self.path = path


class NoWritableVolume(SegmergeError):
    """Raised when a destination root is required but no writable volume exists."""


class ConfigurationError(SegmergeError):
    """Raised for issues related to configuration loading or validation."""

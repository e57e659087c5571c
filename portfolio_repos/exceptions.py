"""Errors raised by the repository cache."""

from pathlib import Path
from typing import Optional


class RepoCacheError(Exception):
    """Base exception for all repository cache errors."""


class UpstreamError(RepoCacheError):
    """Raised when the GitHub API call fails or returns a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class PersistenceError(RepoCacheError):
    """Raised when the cache file cannot be created, read or written."""

    def __init__(self, message: str, path: Path) -> None:
        self.path = path
        super().__init__(f"{message}: {path}")


class ValidationError(RepoCacheError):
    """Raised for malformed requests before the cache is touched."""

"""Exceptions raised by the file token registry."""

from __future__ import annotations


class FileTokenError(Exception):
    """Base class for file token failures."""


class FileTokenNotFoundError(FileTokenError, LookupError):
    """Raised when a token identity is not present in the registry."""

    def __init__(self, identity: str) -> None:
        super().__init__(f"file token {identity!r} not found")
        self.identity = identity


__all__ = [
    "FileTokenError",
    "FileTokenNotFoundError",
]

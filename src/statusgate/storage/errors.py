"""Exceptions raised by the persistence layer."""

from __future__ import annotations


class StorageError(Exception):
    """Unrecoverable failure while reading or writing durable state."""


class StorageNotFoundError(StorageError):
    """Raised when the requested file does not exist."""


class StoragePermissionError(StorageError):
    """Raised when the process lacks read or write permission."""


class StorageCorruptedError(StorageError):
    """Raised when a stored document cannot be decoded."""

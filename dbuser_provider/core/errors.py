"""Error taxonomy for configuration, credential, and storage failures."""

from __future__ import annotations


class DirectoryError(Exception):
    """Base class for all errors raised by the user directory."""


class ConfigurationError(DirectoryError, ValueError):
    """Provider configuration is invalid (algorithm, RDBMS, URL, mapping)."""


class MalformedHashError(DirectoryError, ValueError):
    """A stored password hash does not match its algorithm's format."""


class StorageError(DirectoryError, RuntimeError):
    """A write against the backing database failed."""


class UnsupportedOperationError(DirectoryError, NotImplementedError):
    """The requested operation is disabled by the current configuration."""

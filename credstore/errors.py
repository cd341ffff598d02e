"""
credstore - Error types

Every failure the library reports is a subclass of CredentialStoreError,
so callers can catch the whole family in one place. None of them is
retried internally.
"""

from typing import Optional


class CredentialStoreError(Exception):
    """Base class for all credstore failures."""


class WeakPasswordError(CredentialStoreError, ValueError):
    """Password does not meet the minimum-strength policy."""


class ServiceNotFoundError(CredentialStoreError, LookupError):
    """No record exists for the requested service name."""

    def __init__(self, service_name: str):
        super().__init__(f"Service not found: {service_name!r}")
        self.service_name = service_name


class FileAccessError(CredentialStoreError):
    """
    A file could not be opened, read or written.

    Attributes:
        path: File that failed
        mode: "read" or "write"
    """

    def __init__(self, path: str, mode: str, reason: str = ""):
        message = f"Unable to open '{path}' for {'reading' if mode == 'read' else 'writing'}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.path = path
        self.mode = mode


class MissingFileError(FileAccessError):
    """The file does not exist (e.g. a first-time user)."""


class FilePermissionError(FileAccessError):
    """The file exists but the process may not access it."""


class CodecError(CredentialStoreError):
    """The compression codec reported a failure."""


class InvalidRecordFormat(CredentialStoreError, ValueError):
    """
    A record cannot be serialized, or a stored line cannot be parsed.

    Attributes:
        path: File the line came from (None for in-memory validation)
        line_number: 1-based line number (None for in-memory validation)
    """

    def __init__(self, message: str, path: Optional[str] = None,
                 line_number: Optional[int] = None):
        if path is not None and line_number is not None:
            message = f"{path}, line {line_number}: {message}"
        super().__init__(message)
        self.path = path
        self.line_number = line_number


class TamperedFileError(CredentialStoreError):
    """A sealed credential file failed authentication (wrong key or modified)."""


class VaultLockedError(CredentialStoreError):
    """Operation needs an unlocked vault."""


class UserExistsError(CredentialStoreError):
    """A master entry for this username is already registered."""


def from_os_error(path: str, mode: str, error: OSError) -> FileAccessError:
    """Map an OSError onto the matching FileAccessError subclass."""
    reason = error.strerror or str(error)
    if isinstance(error, FileNotFoundError):
        return MissingFileError(path, mode, reason)
    if isinstance(error, PermissionError):
        return FilePermissionError(path, mode, reason)
    return FileAccessError(path, mode, reason)

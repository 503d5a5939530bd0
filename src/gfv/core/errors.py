"""
Exceptions for gfv.

Every error the core raises derives from VaultError, so the CLI can catch a
single type and still show the specific message, context and hint.

Exception Hierarchy:
    VaultError (base)
    ├── NotInitializedError
    ├── AlreadyExistsError
    │   └── AlreadyManagedError
    ├── VaultFileNotFoundError
    ├── NotInManifestError
    ├── InvalidVaultPathError
    ├── UnknownVaultError
    ├── ActiveVaultError
    ├── BackendError (git failures)
    │   ├── ConflictError (non-fast-forward pull)
    │   ├── NoRemoteError
    │   └── AuthenticationError
    ├── VaultIOError
    ├── ParseError
    └── ConfigKeyError

Example:
    >>> try:
    ...     raise ConflictError("Local and remote have diverged", branch="main")
    ... except VaultError as e:
    ...     print(e, e.context)
"""

from __future__ import annotations


class VaultError(Exception):
    """
    Base exception for all gfv errors.

    Attributes:
        message: Human-readable error message
        hint: Optional remediation shown to the user
        context: Additional context as keyword arguments
    """

    def __init__(self, message: str, *, hint: str | None = None, **context: object) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint
        self.context = context

    def __str__(self) -> str:
        return self.message


class NotInitializedError(VaultError):
    """Raised when a vault directory or repository has not been set up."""


class AlreadyExistsError(VaultError):
    """Raised when creating something that is already there."""


class AlreadyManagedError(AlreadyExistsError):
    """Raised when linking a vault path that is already tracked."""


class VaultFileNotFoundError(VaultError):
    """Raised when neither the source nor the stored copy of a file exists."""


class NotInManifestError(VaultError):
    """Raised when a vault path is not tracked by the manifest."""


class InvalidVaultPathError(VaultError):
    """Raised when a vault path is absolute, climbs out with `..` or names git internals."""


class UnknownVaultError(VaultError):
    """Raised when a vault name is not registered in the global config."""


class ActiveVaultError(VaultError):
    """Raised when an operation is not allowed on the active vault."""


class BackendError(VaultError):
    """
    Raised when a git operation fails.

    Attributes:
        stderr: Captured stderr of the failing git command, if any
    """

    def __init__(
        self,
        message: str,
        *,
        stderr: str = "",
        hint: str | None = None,
        **context: object,
    ) -> None:
        super().__init__(message, hint=hint, **context)
        self.stderr = stderr


class ConflictError(BackendError):
    """Raised when local and remote history have diverged."""


class NoRemoteError(BackendError):
    """Raised when a remote operation is requested without a remote."""


class AuthenticationError(BackendError):
    """Raised when every credential method failed to authenticate."""


class VaultIOError(VaultError):
    """
    Raised when copying a tracked entry fails.

    Attributes:
        path: The path that could not be read or written
    """

    def __init__(self, message: str, *, path: str, **context: object) -> None:
        super().__init__(message, path=path, **context)
        self.path = path


class ParseError(VaultError):
    """Raised when the manifest or the global config cannot be parsed."""


class ConfigKeyError(VaultError):
    """Raised for unknown or unsupported configuration keys."""

"""
Standardized error handling and exit codes for the gfv CLI.

Every command catches VaultError and hands it to `exit_with_error`, which
prints the message with its hint and exits with the matching code.
"""

from enum import IntEnum
from typing import NoReturn

import typer
from rich.console import Console

from gfv.core.errors import (
    ActiveVaultError,
    AlreadyExistsError,
    AuthenticationError,
    ConfigKeyError,
    ConflictError,
    InvalidVaultPathError,
    NotInitializedError,
    NotInManifestError,
    UnknownVaultError,
    VaultError,
    VaultFileNotFoundError,
)

console = Console(stderr=True)


class ExitCode(IntEnum):
    """Standard exit codes for gfv CLI operations."""

    SUCCESS = 0
    """Operation completed successfully."""

    GENERAL_ERROR = 1
    """Git, filesystem or parse failure."""

    USER_ERROR = 2
    """Input or state the user can fix (unknown vault, bad key, ...)."""

    SIGINT = 130
    """Terminated by SIGINT (Ctrl+C) - Unix standard."""


# Errors caused by what the user asked for rather than by the environment
USER_ERRORS = (
    ActiveVaultError,
    AlreadyExistsError,
    ConfigKeyError,
    InvalidVaultPathError,
    NotInitializedError,
    NotInManifestError,
    UnknownVaultError,
    VaultFileNotFoundError,
)


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print a standardized error message with actionable guidance.

    Args:
        problem: Brief description of what went wrong
        reason: Optional explanation of why it happened
        solution: Optional command or action to fix it

    Example:
        >>> print_error(
        ...     "Vault 'work' not found",
        ...     solution="gfv vault list",
        ... )
    """
    console.print(f"[red]Error:[/red] {problem}")

    if reason:
        console.print(f"[dim]{reason}[/dim]")

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {solution}")


def exit_code_for(error: VaultError) -> ExitCode:
    if isinstance(error, USER_ERRORS):
        return ExitCode.USER_ERROR
    return ExitCode.GENERAL_ERROR


def exit_with_error(error: VaultError) -> NoReturn:
    """Print a VaultError and exit with its code."""
    reason = None
    if isinstance(error, ConflictError):
        reason = "Local and remote history have diverged; gfv only fast-forwards"
    elif isinstance(error, AuthenticationError):
        tried = error.context.get("tried") or []
        reason = f"Tried: {', '.join(map(str, tried))}"

    stderr = getattr(error, "stderr", "")
    if stderr and reason is None:
        reason = stderr

    print_error(str(error), reason=reason, solution=error.hint)
    raise typer.Exit(exit_code_for(error))


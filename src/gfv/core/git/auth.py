"""
Credential fallback chain for git network operations.

Network operations (clone, fetch, pull, push) are attempted once per
credential method, in a fixed order:

1. credential-helper: whatever `credential.helper` git is configured with
   (OS keychain, libsecret, Windows credential manager...)
2. ssh-agent: keys held by the running SSH agent
3. key-file: the default private key under ~/.ssh

Each method is a predicate (is it usable here?) and the environment it
contributes to the git subprocess. The chain is passed explicitly to the
store; there is no global credential state.
"""

from __future__ import annotations

import logging
import os
import shlex
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar

from git import GitCommandError

from gfv.core.errors import AuthenticationError, BackendError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Never block on an interactive username/password prompt
_BASE_ENV = {"GIT_TERMINAL_PROMPT": "0"}

DEFAULT_KEY_FILES = ("id_ed25519", "id_ecdsa", "id_rsa")

AUTH_FAILURE_MARKERS = (
    "authentication failed",
    "permission denied",
    "could not read username",
    "could not read password",
    "terminal prompts disabled",
    "invalid username or password",
    "access denied",
    "http basic: access denied",
    "no supported authentication methods",
    "returned error: 401",
    "returned error: 403",
)


@dataclass(frozen=True)
class AuthMethod:
    """
    One way of authenticating a git network operation.

    Attributes:
        name: Short identifier used in logs and errors
        is_available: Returns True if the method can be tried on this machine
        environment: Returns env vars to pass to the git subprocess
    """

    name: str
    is_available: Callable[[], bool]
    environment: Callable[[], dict[str, str]]


def credential_helper_method() -> AuthMethod:
    """Stored credentials through git's configured credential helper."""

    def environment() -> dict[str, str]:
        # Keys are left to the ssh-agent and key-file methods
        return {
            **_BASE_ENV,
            "GIT_SSH_COMMAND": "ssh -o BatchMode=yes -o PubkeyAuthentication=no",
        }

    return AuthMethod("credential-helper", lambda: True, environment)


def ssh_agent_method(environ: Mapping[str, str] | None = None) -> AuthMethod:
    """Keys loaded into a running SSH agent."""
    env_source = os.environ if environ is None else environ

    def is_available() -> bool:
        return bool(env_source.get("SSH_AUTH_SOCK"))

    def environment() -> dict[str, str]:
        return {
            **_BASE_ENV,
            "SSH_AUTH_SOCK": env_source.get("SSH_AUTH_SOCK", ""),
            "GIT_SSH_COMMAND": "ssh -o BatchMode=yes",
        }

    return AuthMethod("ssh-agent", is_available, environment)


def find_default_key(home: Path | None = None) -> Path | None:
    """First default private key that exists under ~/.ssh, if any."""
    ssh_dir = (home or Path.home()) / ".ssh"
    for name in DEFAULT_KEY_FILES:
        candidate = ssh_dir / name
        if candidate.is_file():
            return candidate
    return None


def key_file_method(home: Path | None = None) -> AuthMethod:
    """The default private key file, bypassing the agent."""

    def environment() -> dict[str, str]:
        key = find_default_key(home)
        command = "ssh -o BatchMode=yes -o IdentityAgent=none -o IdentitiesOnly=yes"
        if key is not None:
            command += f" -i {shlex.quote(str(key))}"
        return {**_BASE_ENV, "GIT_SSH_COMMAND": command}

    return AuthMethod("key-file", lambda: find_default_key(home) is not None, environment)


def default_auth_chain(
    home: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> list[AuthMethod]:
    """The fixed credential order: helper, agent, key file."""
    return [
        credential_helper_method(),
        ssh_agent_method(environ),
        key_file_method(home),
    ]


def stderr_of(error: GitCommandError) -> str:
    """Captured stderr of a failed git command as text."""
    stderr = error.stderr
    if isinstance(stderr, bytes):
        stderr = stderr.decode("utf-8", errors="replace")
    return str(stderr or "").strip()


def is_auth_failure(stderr: str) -> bool:
    """Check if git stderr describes an authentication failure."""
    lowered = stderr.lower()
    return any(marker in lowered for marker in AUTH_FAILURE_MARKERS)


def run_with_auth(
    chain: Sequence[AuthMethod],
    description: str,
    operation: Callable[[dict[str, str]], T],
) -> T:
    """
    Run a network operation with each available credential method in turn.

    Args:
        chain: Ordered credential methods
        description: What is being attempted, for logs and errors
        operation: Callable receiving the env vars of the current method

    Returns:
        Whatever the first successful attempt returned.

    Raises:
        BackendError: On a failure that is not about authentication
        AuthenticationError: If every available method failed to authenticate
    """
    tried: list[str] = []
    last_stderr = ""

    for method in chain:
        if not method.is_available():
            logger.debug("Skipping %s for %s: not available", method.name, description)
            continue

        tried.append(method.name)
        logger.debug("Trying %s with %s", description, method.name)
        try:
            return operation(method.environment())
        except GitCommandError as e:
            stderr = stderr_of(e)
            if not is_auth_failure(stderr):
                raise BackendError(
                    f"Failed to {description}: {stderr or e}",
                    stderr=stderr,
                    auth_method=method.name,
                ) from e
            logger.info("Authentication with %s failed for %s", method.name, description)
            last_stderr = stderr

    raise AuthenticationError(
        f"Authentication failed for {description} (tried: {', '.join(tried) or 'none'})",
        stderr=last_stderr,
        hint="Check your git credential helper, ssh-agent or ~/.ssh keys",
        tried=tried,
    )

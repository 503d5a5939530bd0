"""
Git-backed versioned store.

Example:
    >>> from gfv.core.git import VersionedStore
    >>> store = VersionedStore.open(vault.repo_path)
    >>> store.pull("origin", "main")
    <PullOutcome.UP_TO_DATE: 'up_to_date'>
"""

from gfv.core.git.auth import (
    AuthMethod,
    credential_helper_method,
    default_auth_chain,
    find_default_key,
    is_auth_failure,
    key_file_method,
    run_with_auth,
    ssh_agent_method,
)
from gfv.core.git.models import COMMIT_IDENTITY, REMOTE_NAME, PullOutcome
from gfv.core.git.store import VersionedStore

__all__ = [
    "AuthMethod",
    "COMMIT_IDENTITY",
    "PullOutcome",
    "REMOTE_NAME",
    "VersionedStore",
    "credential_helper_method",
    "default_auth_chain",
    "find_default_key",
    "is_auth_failure",
    "key_file_method",
    "run_with_auth",
    "ssh_agent_method",
]

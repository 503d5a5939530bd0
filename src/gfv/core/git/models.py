"""
Data models for the versioned store.
"""

from __future__ import annotations

from enum import Enum

from git import Actor

REMOTE_NAME = "origin"

# Every commit gfv makes uses this identity, regardless of user git config
COMMIT_IDENTITY = Actor("gfv", "gfv@local")


class PullOutcome(str, Enum):
    """
    Successful end states of a pull.

    A pull that fails to fetch raises a BackendError (or AuthenticationError);
    one whose histories diverged raises a ConflictError.
    """

    UP_TO_DATE = "up_to_date"
    FAST_FORWARD = "fast_forward"

"""
AI-assisted commit messages.
"""

from gfv.core.ai.provider import (
    CommitMessageError,
    CommitMessageProvider,
    provider_from_config,
)

__all__ = [
    "CommitMessageError",
    "CommitMessageProvider",
    "provider_from_config",
]

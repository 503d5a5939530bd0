"""
Named vaults and the active vault.
"""

from gfv.core.registry.models import CreateResult, VaultInfo, VaultSummary
from gfv.core.registry.registry import GITIGNORE_CONTENT, INITIAL_COMMIT_MESSAGE, VaultRegistry

__all__ = [
    "CreateResult",
    "GITIGNORE_CONTENT",
    "INITIAL_COMMIT_MESSAGE",
    "VaultInfo",
    "VaultRegistry",
    "VaultSummary",
]

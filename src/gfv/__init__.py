"""
gfv - git file vault

Tracks configuration files across machines in git-backed vaults.
"""

__version__ = "0.1.0"

# Re-export core models for convenience
from gfv.core.config.models import GfvConfig
from gfv.core.manifest.models import FileEntry, Manifest

__all__ = ["FileEntry", "GfvConfig", "Manifest", "__version__"]

"""
Shared helpers for CLI commands: logging setup, registry and engine wiring,
and interactive confirmations.
"""

import logging
import sys

import typer
from rich.console import Console

from gfv.core.ai import provider_from_config
from gfv.core.config import load_config
from gfv.core.registry import VaultRegistry
from gfv.core.sync import SyncEngine

console = Console()


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for all commands.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def load_registry() -> VaultRegistry:
    """Registry backed by the global config on disk."""
    return VaultRegistry(load_config())


def open_engine(
    registry: VaultRegistry,
    vault_name: str | None = None,
    *,
    with_provider: bool = False,
) -> SyncEngine:
    """
    Load a vault and build a sync engine for it.

    Args:
        registry: Registry to resolve the vault name with
        vault_name: Vault to open, the active one if None
        with_provider: Attach the AI commit message provider if configured
    """
    vault = registry.resolve(vault_name)
    store = registry.open_store(vault)
    provider = provider_from_config(registry.config.ai) if with_provider else None
    return SyncEngine(vault, store, provider=provider, confirm=confirm_overwrite)


def confirm_overwrite(paths: list[str]) -> bool:
    """Ask before restore overwrites locally modified files."""
    console.print("\n[yellow bold]Warning:[/yellow bold] You have local changes that will be overwritten:")
    for path in paths:
        console.print(f"  {path} (modified)")
    return typer.confirm("\nContinue?", default=False)

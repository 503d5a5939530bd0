"""
gfv init command - create (or clone) a vault.
"""

from typing import Optional

import typer
from rich.console import Console

from gfv.cli.common import load_registry, open_engine
from gfv.cli.errors import exit_with_error
from gfv.core.errors import VaultError

console = Console()


def main(
    path: Optional[str] = typer.Argument(
        None,
        help="Vault directory (default: $GFV_HOME/<name>)",
    ),
    remote: Optional[str] = typer.Option(
        None,
        "--remote",
        "-r",
        help="Remote repository URL",
    ),
    branch: Optional[str] = typer.Option(
        None,
        "--branch",
        "-b",
        help="Branch name (default: the remote's branch, else sync.default_branch)",
    ),
    name: str = typer.Option(
        "default",
        "--name",
        "-n",
        help="Vault name for multi-vault support",
    ),
    no_sync: bool = typer.Option(
        False,
        "--no-sync",
        help="Don't restore files after cloning from remote",
    ),
) -> None:
    """
    Initialize a new vault.

    With --remote, an existing vault is cloned and its files restored;
    an empty remote gets a fresh vault pushed to it.

    Examples:
        gfv init
        gfv init --remote git@github.com:me/dotfiles.git
        gfv init --name work --branch work ~/vaults/work
    """
    try:
        registry = load_registry()

        console.print(f"[green bold]==>[/green bold] Initializing vault '{name}'...")
        result = registry.create(name, path=path, remote_url=remote, branch=branch)

        console.print(f"  Vault dir: {result.vault_dir}")
        if result.cloned:
            console.print("[green]✓[/green] Cloned existing vault from remote")
            console.print(f"  Remote: {result.remote_url} ({result.branch})")
            console.print(f"  Files: {result.file_count}")
        elif result.remote_url:
            if result.pushed:
                console.print(f"[green]✓[/green] Created vault and pushed to {result.remote_url}")
            else:
                console.print(f"[yellow]⚠[/yellow] Failed to push to remote: {result.push_error}")
                console.print("  You can push later with: gfv backup")
        else:
            console.print("  Mode: local-only (no remote)")

        console.print(f"[green]✓[/green] Vault '{name}' initialized on branch {result.branch}")
        if result.active:
            console.print(f"\n[blue]→[/blue] '{name}' is now the active vault")

        if result.cloned and not no_sync and result.file_count:
            console.print("\n[green bold]==>[/green bold] Restoring files...")
            engine = open_engine(registry, name)
            restored = engine.restore()
            if restored.cancelled:
                console.print("Restore cancelled. Run 'gfv restore' when ready.")
            else:
                console.print(
                    f"[green]✓[/green] Restored {len(restored.restored)} files "
                    f"(skipped {len(restored.skipped)})"
                )
    except VaultError as e:
        exit_with_error(e)

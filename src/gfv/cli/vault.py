"""
gfv vault - create, switch and manage named vaults.
"""

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from gfv.cli.common import load_registry
from gfv.cli.errors import exit_with_error
from gfv.core.errors import VaultError

console = Console()
app = typer.Typer(
    name="vault",
    help="Manage multiple vaults",
    no_args_is_help=True,
)


@app.command("list")
def list_vaults() -> None:
    """
    List registered vaults. The active vault is marked with *.
    """
    try:
        vaults = load_registry().list_vaults()
    except VaultError as e:
        exit_with_error(e)

    if not vaults:
        console.print("No vaults found.")
        console.print("\nCreate a vault with:\n  gfv init")
        return

    table = Table(show_header=True, header_style="bold", box=None)
    table.add_column("", width=1)
    table.add_column("Name")
    table.add_column("Path")
    table.add_column("")

    for summary in vaults:
        marker = "[green bold]*[/green bold]" if summary.active else ""
        state = "[green](active)[/green]" if summary.active else ""
        if not summary.initialized:
            state = f"{state} [yellow](not initialized)[/yellow]".strip()
        table.add_row(marker, summary.name, summary.path, state)

    console.print(table)


@app.command()
def create(
    name: str = typer.Argument(..., help="Vault name"),
    path: Optional[str] = typer.Option(None, "--path", help="Vault directory"),
    remote: Optional[str] = typer.Option(None, "--remote", "-r", help="Remote repository URL"),
    branch: Optional[str] = typer.Option(None, "--branch", "-b", help="Branch name"),
) -> None:
    """
    Create a new vault.

    Examples:
        gfv vault create work
        gfv vault create work --remote git@github.com:me/work-dotfiles.git
    """
    try:
        result = load_registry().create(name, path=path, remote_url=remote, branch=branch)
    except VaultError as e:
        exit_with_error(e)

    if result.remote_url and not result.cloned:
        if result.pushed:
            console.print("[green bold]✓[/green bold] Pushed to remote")
        else:
            console.print(f"[yellow bold]⚠[/yellow bold] Failed to push to remote: {result.push_error}")
            console.print("You can push later with: gfv backup")

    console.print(f"[green bold]✓[/green bold] Created vault '{name}'")
    console.print(f"  Path: {result.vault_dir}")
    console.print(f"  Branch: {result.branch}")
    if result.remote_url:
        console.print(f"  Remote: {result.remote_url}")
    if result.cloned:
        console.print(f"  Cloned {result.file_count} managed files (run 'gfv restore' to apply)")
    if result.active:
        console.print("\n[blue]→[/blue] This is now the active vault")


@app.command()
def switch(name: str = typer.Argument(..., help="Vault to make active")) -> None:
    """
    Make a vault the active one.
    """
    try:
        load_registry().switch(name)
    except VaultError as e:
        exit_with_error(e)

    console.print(f"[green bold]✓[/green bold] Switched to vault '{name}'")


@app.command()
def remove(
    name: str = typer.Argument(..., help="Vault to remove"),
    delete_files: bool = typer.Option(
        False,
        "--delete-files",
        help="Also delete the vault directory",
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Don't ask for confirmation"),
) -> None:
    """
    Unregister a vault. The directory is kept unless --delete-files is given.
    """
    try:
        registry = load_registry()
        vault_dir = registry.vault_dir(name)

        console.print(f"[yellow bold]![/yellow bold] Removing vault '{name}'")
        console.print(f"  Path: {vault_dir}")
        if delete_files:
            console.print("\n[yellow bold]⚠[/yellow bold] --delete-files specified")
            console.print("This will PERMANENTLY DELETE the vault directory.")
        else:
            console.print("\nThe vault directory will NOT be deleted.")

        if not yes and not typer.confirm("Continue?", default=False):
            console.print("Cancelled.")
            return

        registry.remove(name, delete_directory=delete_files)
    except VaultError as e:
        exit_with_error(e)

    console.print(f"[green bold]✓[/green bold] Removed vault '{name}' from config")
    if delete_files:
        console.print("[green bold]✓[/green bold] Deleted vault directory")
    else:
        console.print(f"\nVault directory preserved at: {vault_dir}")


@app.command()
def info(name: Optional[str] = typer.Argument(None, help="Vault name (default: active)")) -> None:
    """
    Show details of a vault.
    """
    try:
        details = load_registry().info(name)
    except VaultError as e:
        exit_with_error(e)

    active = " [green](active)[/green]" if details.active else ""
    console.print(f"Vault: [cyan bold]{details.name}[/cyan bold]{active}")
    console.print(f"Path: {details.path}")

    if not details.initialized:
        console.print("[yellow bold]⚠[/yellow bold] Vault not initialized")
        return

    console.print(f"Remote: {details.remote_url or '(none)'}")
    if details.branch:
        console.print(f"Branch: {details.branch}")
    console.print(f"Files: {details.file_count} managed")


@app.command("set-remote")
def set_remote(
    url: str = typer.Argument(..., help="Remote repository URL"),
    name: Optional[str] = typer.Option(None, "--vault", help="Vault (default: active)"),
    branch: Optional[str] = typer.Option(None, "--branch", "-b", help="Remote branch"),
) -> None:
    """
    Set (or change) the remote of a vault.
    """
    try:
        remote = load_registry().set_remote(url, name=name, branch=branch)
    except VaultError as e:
        exit_with_error(e)

    console.print("[green bold]✓[/green bold] Set remote")
    console.print(f"  URL: {remote.url}")
    console.print(f"  Branch: {remote.branch}")


@app.command("set-branch")
def set_branch(
    branch: str = typer.Argument(..., help="New branch name"),
    name: Optional[str] = typer.Option(None, "--vault", help="Vault (default: active)"),
) -> None:
    """
    Rename the vault's branch.
    """
    try:
        load_registry().set_branch(branch, name=name)
    except VaultError as e:
        exit_with_error(e)

    console.print(f"[green bold]✓[/green bold] Branch set to {branch}")


@app.command("remove-remote")
def remove_remote(
    name: Optional[str] = typer.Option(None, "--vault", help="Vault (default: active)"),
) -> None:
    """
    Switch a vault to local-only mode.
    """
    try:
        removed = load_registry().clear_remote(name)
    except VaultError as e:
        exit_with_error(e)

    if removed:
        console.print("[green bold]✓[/green bold] Removed remote")
    else:
        console.print("No remote configured")

"""
gfv backup / restore / status - move files between their locations and the
vault, and keep the vault in sync with its remote.
"""

from typing import Optional

import typer
from rich.console import Console

from gfv.cli.common import load_registry, open_engine
from gfv.cli.errors import exit_with_error
from gfv.core.errors import VaultError
from gfv.core.git import PullOutcome
from gfv.core.sync import SkipReason

console = Console()

_SKIP_LABELS = {
    SkipReason.SOURCE_MISSING: "source not found",
    SkipReason.NOT_IN_VAULT: "not in vault",
    SkipReason.PLATFORM_MISMATCH: "platform",
}


def backup(
    message: Optional[str] = typer.Option(
        None,
        "--message",
        "-m",
        help="Commit message (default: AI-generated if configured, else 'Update vault')",
    ),
    vault: Optional[str] = typer.Option(None, "--vault", help="Vault to use (default: active)"),
) -> None:
    """
    Copy tracked files into the vault, commit, and push.

    With a remote, the vault is fast-forwarded to the remote first. If local
    and remote history have diverged the commit stays local and nothing is
    pushed.

    Examples:
        gfv backup
        gfv backup -m "Tweak prompt colors"
    """
    try:
        engine = open_engine(load_registry(), vault, with_provider=True)
        if not engine.manifest.files:
            console.print("No files to backup. Add files with 'gfv link <file>'.")
            return

        console.print("[green bold]==>[/green bold] Backing up changes...")
        result = engine.backup(message)
    except VaultError as e:
        exit_with_error(e)

    for skipped in result.skipped:
        console.print(
            f"  [yellow]⚠[/yellow] Skipping {skipped.vault_path} ({_SKIP_LABELS[skipped.reason]})"
        )
    console.print(f"  [green]✓[/green] Copied {len(result.copied)} files/directories")

    if result.committed:
        console.print(f"  [green]✓[/green] Committed locally: \"{result.message}\"")

    if result.pushed:
        if result.first_push:
            console.print("    [blue]→[/blue] First push to remote (skipping pull)")
        elif result.pull_outcome == PullOutcome.FAST_FORWARD:
            console.print(f"    [green]✓[/green] Pulled from origin/{result.branch}")
        console.print(f"    [green]✓[/green] Pushed to origin/{result.branch}")
        console.print("\n[green bold]✓[/green bold] Your files are backed up to remote!")
    elif result.committed:
        console.print("\n[green bold]✓[/green bold] Your files are backed up locally!")
        console.print("(No remote configured - local-only mode)")
    else:
        console.print("\n[green bold]✓[/green bold] Everything up to date")


def restore(
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show what would be updated without doing it",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Skip warning and overwrite local changes",
    ),
    vault: Optional[str] = typer.Option(None, "--vault", help="Vault to use (default: active)"),
) -> None:
    """
    Copy files from the vault back to their locations.

    With a remote, the vault is pulled first (fast-forward only).

    Examples:
        gfv restore --dry-run
        gfv restore
        gfv restore --force
    """
    try:
        engine = open_engine(load_registry(), vault)
        console.print("[green bold]==>[/green bold] Restoring from vault...")
        result = engine.restore(dry_run=dry_run, force=force)
    except VaultError as e:
        exit_with_error(e)

    if result.pull_outcome is not None:
        console.print(f"  [green]✓[/green] Pulled from origin/{result.branch}")

    if result.cancelled:
        console.print("Cancelled.")
        return

    for skipped in result.skipped:
        label = _SKIP_LABELS[skipped.reason]
        if skipped.detail:
            label = f"{label}: {skipped.detail}"
        console.print(f"  [yellow]⚠[/yellow] Skipping {skipped.vault_path} ({label})")

    entries = engine.manifest.files
    for vault_path in result.restored:
        source = entries[vault_path].source_path
        if dry_run:
            console.print(f"  Would restore: {vault_path} -> {source}")
        else:
            console.print(f"  [green]✓[/green] Restored: {source}")

    console.print()
    if dry_run:
        console.print(
            f"[green bold]✓[/green bold] Would restore {len(result.restored)} files "
            f"(skipped {len(result.skipped)})"
        )
        console.print("Run without --dry-run to apply changes.")
    else:
        console.print(
            f"[green bold]✓[/green bold] Restored {len(result.restored)} files "
            f"(skipped {len(result.skipped)})"
        )


def status(
    vault: Optional[str] = typer.Option(None, "--vault", help="Vault to use (default: active)"),
) -> None:
    """
    Show vault status and which tracked files changed.

    Examples:
        gfv status
        gfv status --vault work
    """
    try:
        engine = open_engine(load_registry(), vault)
        report = engine.status()
    except VaultError as e:
        exit_with_error(e)

    console.print("[bold]Vault Status[/bold]")
    console.print(f"  Path: {report.vault_dir}")
    if report.remote_url:
        console.print(f"  Remote: {report.remote_url} ({report.remote_branch})")
    else:
        console.print("  Remote: [yellow]None[/yellow] (local-only mode)")
    console.print(f"  Managed files: {len(report.entries)}")

    if report.has_uncommitted_changes:
        console.print("\n[yellow bold]●[/yellow bold] Uncommitted changes in vault")
        console.print("  Run 'gfv backup' to commit changes")
    else:
        console.print("\n[green bold]✓[/green bold] Vault is clean")

    console.print("\n[bold]File Status:[/bold]")

    if report.modified:
        console.print("\n[yellow bold]●[/yellow bold] Modified files:")
        for vault_path in report.modified:
            console.print(f"  [yellow]M[/yellow] {vault_path}")
        console.print("\n  Run 'gfv backup' to save changes")

    if report.missing_source:
        console.print("\n[red bold]![/red bold] Missing source files:")
        for vault_path in report.missing_source:
            console.print(f"  [red]?[/red] {vault_path}")

    if report.all_up_to_date:
        console.print("\n[green bold]✓[/green bold] All files are up to date")

"""
gfv link / unlink / list - manage which files a vault tracks.
"""

from typing import Optional

import typer
from rich.console import Console

from gfv.cli.common import load_registry, open_engine
from gfv.cli.errors import exit_with_error
from gfv.core.errors import VaultError
from gfv.core.manifest import Platform
from gfv.core.sync import is_sensitive_file

console = Console()

_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def link(
    source: str = typer.Argument(..., help="File or directory to track"),
    name: Optional[str] = typer.Option(
        None,
        "--name",
        "-n",
        help="Path inside the vault (inferred if omitted)",
    ),
    platform: Optional[Platform] = typer.Option(
        None,
        "--platform",
        "-p",
        case_sensitive=False,
        help="Only restore on this platform",
    ),
    vault: Optional[str] = typer.Option(None, "--vault", help="Vault to use (default: active)"),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Don't ask for confirmation on sensitive-looking files",
    ),
) -> None:
    """
    Start tracking a file or directory.

    The file may exist locally, in the vault, or both. Content is copied on
    the next backup (local -> vault) or restore (vault -> local).

    Examples:
        gfv link ~/.zshrc
        gfv link ~/.config/nvim
        gfv link ~/Library/Application\\ Support/Code/User/settings.json -p macos
    """
    try:
        engine = open_engine(load_registry(), vault)
        source_path = engine.resolve_source(source)

        if source_path.exists() and is_sensitive_file(source_path) and not yes:
            console.print("[yellow bold]Warning:[/yellow bold] Potentially sensitive file detected")
            console.print(f"  {source_path}")
            console.print("\nThis file may contain secrets or credentials.")
            if not typer.confirm("Are you sure you want to add it to version control?"):
                console.print("Cancelled.")
                raise typer.Exit(0)

        result = engine.link(source, vault_path=name, platform=platform)
    except VaultError as e:
        exit_with_error(e)

    suffix = " (directory)" if result.file_type.value == "directory" else ""
    console.print(f"[green bold]==>[/green bold] Linking {result.source_path}{suffix}")
    console.print(f"  Vault path: {result.vault_path}")
    console.print(f"  Platform: {result.platform or 'all'}")

    if result.exists_locally and not result.exists_in_vault:
        console.print("[blue]→[/blue] File exists locally but not in vault")
        console.print("   Use 'gfv backup' to upload it")
    elif result.exists_in_vault and not result.exists_locally:
        console.print("[blue]→[/blue] File exists in vault but not locally")
        console.print("   Use 'gfv restore' to download it")
    else:
        console.print("[blue]→[/blue] File exists in both locations")

    console.print("[green]✓[/green] Updated manifest")


def unlink(
    file: str = typer.Argument(..., help="Path inside the vault"),
    delete_files: bool = typer.Option(
        False,
        "--delete-files",
        help="Also delete the stored copy from the vault",
    ),
    vault: Optional[str] = typer.Option(None, "--vault", help="Vault to use (default: active)"),
) -> None:
    """
    Stop tracking a file. The local file is never touched.

    Examples:
        gfv unlink zsh/zshrc
        gfv unlink nvim --delete-files
    """
    try:
        engine = open_engine(load_registry(), vault)
        entry = engine.unlink(file, delete_stored_copy=delete_files)
    except VaultError as e:
        exit_with_error(e)

    console.print(f"[green]✓[/green] Unlinked {file}")
    console.print(f"  Local file kept at: {entry.source_path}")
    if delete_files:
        console.print("  Stored copy deleted from vault")


def list_files(
    long: bool = typer.Option(False, "--long", "-l", help="Show detailed information"),
    vault: Optional[str] = typer.Option(None, "--vault", help="Vault to use (default: active)"),
) -> None:
    """
    List files managed by the vault.

    Examples:
        gfv list
        gfv list --long
    """
    try:
        manifest = load_registry().resolve(vault).manifest
    except VaultError as e:
        exit_with_error(e)

    if not manifest.files:
        console.print("No files managed by gfv yet.")
        console.print("\nAdd files with: gfv link <file>")
        return

    console.print(f"{len(manifest.files)} managed files:\n")

    if long:
        for vault_path, entry in manifest.sorted_items():
            console.print(f"[green bold]{vault_path}[/green bold]")
            console.print(f"  Source: {entry.source_path}")
            console.print(f"  Type: {entry.file_type.value}")
            if entry.platform:
                console.print(f"  Platform: {entry.platform.value}")
            console.print(f"  Added: {entry.added_at.strftime(_TIME_FORMAT)}")
            if entry.last_sync:
                console.print(f"  Last sync: {entry.last_sync.strftime(_TIME_FORMAT)}")
            console.print()
        return

    for vault_path, entry in manifest.sorted_items():
        icon = "📁" if entry.is_directory else "📄"
        tag = f" [yellow]\\[{entry.platform.value}][/yellow]" if entry.platform else ""
        console.print(f"  {icon} {vault_path}{tag}")

    console.print("\nUse 'gfv list --long' for detailed information.")

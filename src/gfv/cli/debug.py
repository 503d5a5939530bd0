"""
gfv debug - development and troubleshooting helpers.
"""

import shutil

import typer
from rich.console import Console

from gfv.cli.errors import ExitCode, print_error
from gfv.core.config import get_config_path, get_gfv_home

console = Console()
app = typer.Typer(
    name="debug",
    help="Debug and troubleshooting helpers",
    no_args_is_help=True,
)


def _exists_label(exists: bool) -> str:
    return "[green]EXISTS[/green]" if exists else "[yellow]NOT FOUND[/yellow]"


@app.command()
def paths() -> None:
    """
    Show where gfv keeps its configuration and vaults.
    """
    config_path = get_config_path()
    gfv_home = get_gfv_home()

    console.print("[cyan bold]GFV Paths:[/cyan bold]\n")
    console.print("Config file:")
    console.print(f"  {config_path}")
    console.print(f"  Status: {_exists_label(config_path.exists())}\n")

    console.print("Vault directory:")
    console.print(f"  {gfv_home}")
    console.print(f"  Status: {_exists_label(gfv_home.exists())}")
    if gfv_home.is_dir():
        vaults = sorted(p.name for p in gfv_home.iterdir() if p.is_dir())
        if vaults:
            console.print(f"  Vaults found: {', '.join(vaults)}")


@app.command()
def clean(
    force: bool = typer.Option(False, "--force", "-f", help="Skip the confirmation prompt"),
) -> None:
    """
    Delete the gfv home directory: every vault, manifest and the config.

    Source files (your dotfiles) are NOT deleted.
    """
    gfv_home = get_gfv_home()
    if not gfv_home.exists():
        console.print(f"Nothing to clean - {gfv_home} does not exist")
        return

    console.print("[yellow bold]⚠[/yellow bold] This will delete:")
    console.print(f"  {gfv_home}\n")
    console.print("[yellow]This includes:[/yellow]")
    console.print("  - All vaults and their Git repositories")
    console.print("  - All configuration")
    console.print("  - All manifests\n")
    console.print("[blue]→[/blue] Source files (dotfiles, etc.) will NOT be deleted\n")

    if not force:
        answer = typer.prompt("Are you sure? Type 'yes' to confirm", default="", show_default=False)
        if answer.strip() != "yes":
            console.print("Cancelled.")
            return

    try:
        shutil.rmtree(gfv_home)
    except OSError as e:
        print_error(f"Failed to delete {gfv_home}", reason=str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR) from e

    console.print(f"[green bold]✓[/green bold] Deleted {gfv_home}")

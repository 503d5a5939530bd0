"""
gfv alias - shortcuts for longer commands.
"""

import shlex

import typer
from rich.console import Console

from gfv.cli.errors import exit_with_error
from gfv.core.config import add_alias, load_config, remove_alias, save_config
from gfv.core.errors import VaultError

console = Console()
app = typer.Typer(
    name="alias",
    help="Manage command aliases",
    no_args_is_help=True,
)


@app.command(
    "add",
    context_settings={"ignore_unknown_options": True, "allow_extra_args": False},
)
def add(
    name: str = typer.Argument(..., help="Alias name"),
    command: list[str] = typer.Argument(..., help="Command the alias expands to"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing alias"),
) -> None:
    """
    Create an alias.

    Examples:
        gfv alias add use vault switch
        gfv alias add st status
        gfv alias add save backup -m "Quick save"
    """
    expansion = shlex.join(command)
    try:
        cfg = load_config()

        existing = cfg.aliases.get(name)
        if existing is not None and not force:
            console.print(
                f"[yellow bold]Warning:[/yellow bold] Alias '{name}' already exists: {existing}"
            )
            if not typer.confirm("Do you want to overwrite it?", default=False):
                console.print("Cancelled.")
                return

        add_alias(cfg, name, expansion)
        save_config(cfg)
    except VaultError as e:
        exit_with_error(e)

    console.print(f"[green bold]✓[/green bold] Alias '{name}' → '{expansion}' created")
    console.print(f"\nYou can now use: gfv {name}")


@app.command()
def remove(name: str = typer.Argument(..., help="Alias to remove")) -> None:
    """
    Remove an alias.
    """
    try:
        cfg = load_config()
        removed = remove_alias(cfg, name)
        save_config(cfg)
    except VaultError as e:
        exit_with_error(e)

    console.print(f"[green bold]✓[/green bold] Alias '{name}' → '{removed}' removed")


@app.command("list")
def list_aliases() -> None:
    """
    List configured aliases.
    """
    try:
        cfg = load_config()
    except VaultError as e:
        exit_with_error(e)

    if not cfg.aliases:
        console.print("No aliases configured.")
        console.print("\nCreate an alias with:\n  gfv alias add <name> <command>")
        console.print("\nExample:\n  gfv alias add use vault switch")
        return

    console.print("[bold]Command Aliases:[/bold]\n")
    for name, expansion in sorted(cfg.aliases.items()):
        console.print(f"  [green bold]{name}[/green bold] [dim]→[/dim] [cyan]{expansion}[/cyan]")
    console.print(f"\n{len(cfg.aliases)} aliases configured")

"""
gfv config - read and write global configuration keys.
"""

from typing import Optional

import typer
from rich.console import Console

from gfv.cli.errors import exit_with_error
from gfv.core.config import (
    SUPPORTED_KEYS,
    get_config_path,
    get_value,
    list_values,
    load_config,
    save_config,
    set_value,
    unset_value,
)
from gfv.core.errors import VaultError

console = Console()

_SECRET_KEYS = {"ai.api_key"}


def mask_secret(value: str) -> str:
    """Show only the first four characters of a secret."""
    if len(value) <= 4:
        return "****"
    return f"{value[:4]}****"


def config(
    key: Optional[str] = typer.Argument(None, help="Configuration key (e.g. ai.model)"),
    value: Optional[str] = typer.Argument(None, help="Value to set"),
    list_all: bool = typer.Option(False, "--list", "-l", help="List all configuration"),
    unset: Optional[str] = typer.Option(None, "--unset", help="Unset a configuration key"),
) -> None:
    """
    Manage global configuration.

    Examples:
        gfv config --list
        gfv config ai.model
        gfv config ai.endpoint https://api.openai.com/v1/chat/completions
        gfv config --unset ai.api_key
    """
    try:
        cfg = load_config()

        if list_all:
            console.print(f"[bold]Configuration[/bold] ({get_config_path()})\n")
            values = list_values(cfg)
            if not values:
                console.print("  (no values set)")
            for k, v in values:
                shown = mask_secret(v) if k in _SECRET_KEYS else v
                console.print(f"  {k} = {shown}")
            return

        if unset is not None:
            unset_value(cfg, unset)
            save_config(cfg)
            console.print(f"[green]✓[/green] Unset {unset}")
            return

        if key is not None and value is not None:
            set_value(cfg, key, value)
            save_config(cfg)
            shown = mask_secret(value) if key in _SECRET_KEYS else value
            console.print(f"[green]✓[/green] Set {key} = {shown}")
            return

        if key is not None:
            current = get_value(cfg, key)
            if current is None:
                console.print("[yellow]Not configured[/yellow]")
            else:
                console.print(current)
            return
    except VaultError as e:
        exit_with_error(e)

    console.print("[bold]Usage:[/bold]")
    console.print("  gfv config --list              # List all configuration")
    console.print("  gfv config <key>               # Get a configuration value")
    console.print("  gfv config <key> <value>       # Set a configuration value")
    console.print("  gfv config --unset <key>       # Unset a configuration value")
    console.print(f"\nKeys: {', '.join(SUPPORTED_KEYS)}")

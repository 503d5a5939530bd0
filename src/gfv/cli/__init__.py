"""
gfv CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import logging
import sys

import typer
from rich.console import Console

from gfv import __version__
from gfv.cli import alias, config_cmd, debug, files, init_cmd, sync, vault
from gfv.cli.argv import preprocess_argv
from gfv.cli.common import setup_logging
from gfv.core.config import load_config
from gfv.core.errors import ParseError

logger = logging.getLogger(__name__)

# Help panel names for command grouping
PANEL_FILES = "Track Files"
PANEL_SYNC = "Sync"
PANEL_MANAGE = "Manage gfv"

app = typer.Typer(
    name="gfv",
    help="Keep your dotfiles in git-backed vaults",
    no_args_is_help=True,
    add_completion=True,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
) -> None:
    """
    gfv - git file vault.

    Tracks configuration files in a manifest, mirrors them into a git
    repository and syncs that repository with a remote.

    Quick Start:
        1. gfv init --remote <url>    # Create or clone a vault
        2. gfv link ~/.zshrc          # Track a file
        3. gfv backup                 # Copy, commit and push

    On a new machine:
        gfv init --remote <url>       # Clone and restore everything
    """
    setup_logging(debug)
    ctx.obj = {"debug": debug}


app.command(name="init", rich_help_panel=PANEL_FILES)(init_cmd.main)
app.command(name="link", rich_help_panel=PANEL_FILES)(files.link)
app.command(name="unlink", rich_help_panel=PANEL_FILES)(files.unlink)
app.command(name="list", rich_help_panel=PANEL_FILES)(files.list_files)

app.command(name="status", rich_help_panel=PANEL_SYNC)(sync.status)
app.command(name="backup", rich_help_panel=PANEL_SYNC)(sync.backup)
app.command(name="restore", rich_help_panel=PANEL_SYNC)(sync.restore)

app.add_typer(vault.app, name="vault", rich_help_panel=PANEL_MANAGE)
app.command(name="config", rich_help_panel=PANEL_MANAGE)(config_cmd.config)
app.add_typer(alias.app, name="alias", rich_help_panel=PANEL_MANAGE)
app.add_typer(debug.app, name="debug", rich_help_panel=PANEL_MANAGE)


@app.command(rich_help_panel=PANEL_MANAGE)
def version() -> None:
    """Show gfv version and exit."""
    console.print(f"gfv version {__version__}")
    raise typer.Exit(0)


def _load_aliases() -> dict[str, str]:
    try:
        return load_config().aliases
    except ParseError as e:
        # The command itself reports the broken config
        logger.debug("Aliases unavailable: %s", e)
        return {}


def cli_main() -> None:
    """
    Main CLI entry point.

    Aliases from the global config are expanded and common flag patterns
    normalized before Typer parses the arguments (e.g. ``gfv --version``,
    ``gfv help vault``, ``gfv status --debug``).
    """
    sys.argv[1:] = preprocess_argv(sys.argv[1:], _load_aliases())
    app()


__all__ = ["app", "cli_main"]

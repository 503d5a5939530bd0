"""
Argv preprocessor for aliases and forgiving flag handling.

Normalizes sys.argv before Typer parses it:
- ``gfv --version`` → ``gfv version``
- ``gfv help vault`` → ``gfv vault --help``
- ``gfv status --debug`` → ``gfv --debug status``
- ``gfv <alias> ...`` → ``gfv <expansion> ...``
"""

from gfv.core.config import expand_aliases

_GLOBAL_FLAGS = {"--debug"}


def preprocess_argv(argv: list[str], aliases: dict[str, str] | None = None) -> list[str]:
    """Normalize CLI arguments for Typer compatibility.

    Applied rules (in order):
    1. ``--version`` / ``-V`` as first arg → ``version`` subcommand
    2. ``help`` pseudo-command → ``--help`` appended to subcommands
    3. Global flags hoisted before the subcommand
    4. The command word replaced by its alias expansion
    """
    if not argv:
        return argv

    if argv[0] in ("--version", "-V"):
        return ["version"]

    if argv[0] == "help":
        return _rewrite_help(argv[1:])

    hoisted = _hoist_global_flags(argv)
    if aliases:
        hoisted = expand_aliases(hoisted, aliases)
    return hoisted


def _rewrite_help(rest: list[str]) -> list[str]:
    """Rewrite ``help [subcmd...]`` into ``[subcmd...] --help``."""
    subcmds: list[str] = []
    for token in rest:
        if token.startswith("-") or token == "help":
            continue
        subcmds.append(token)
        if len(subcmds) >= 2:
            break
    return [*subcmds, "--help"]


def _hoist_global_flags(argv: list[str]) -> list[str]:
    """Move global flags (e.g. ``--debug``) before the subcommand."""
    hoisted: list[str] = []
    rest: list[str] = []
    for token in argv:
        if token in _GLOBAL_FLAGS:
            if token not in hoisted:
                hoisted.append(token)
        else:
            rest.append(token)
    return [*hoisted, *rest]

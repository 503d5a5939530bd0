"""
Seed gfv's environment overrides from .env files.

The GFV_AI_* and GFV_DEFAULT_BRANCH overrides are read from the process
environment. Before that happens, two optional .env files are loaded, later
files replacing earlier ones:

    $GFV_HOME/.env   per-user defaults (API key, endpoint)
    ./.env           per-directory overrides

A variable already exported in the shell is never replaced by either file.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import dotenv_values

logger = logging.getLogger(__name__)

ENV_FILENAME = ".env"
GFV_PREFIX = "GFV_"


def env_files(gfv_home: Path, project_dir: Path | None = None) -> list[Path]:
    """.env files in load order, lowest precedence first."""
    return [gfv_home / ENV_FILENAME, (project_dir or Path.cwd()) / ENV_FILENAME]


def _read_env(path: Path) -> dict[str, str]:
    if not path.is_file():
        return {}
    return {
        str(key): str(value)
        for key, value in dotenv_values(path).items()
        if key is not None and value is not None
    }


def load_layered_env(*, gfv_home: Path, project_dir: Path | None = None) -> dict[str, Path]:
    """
    Copy variables from the gfv .env files into os.environ.

    Args:
        gfv_home: gfv home directory holding the user .env
        project_dir: Directory whose .env overrides the user one (defaults to cwd)

    Returns:
        Variable name -> the .env file whose value ended up in os.environ
    """
    supplied: dict[str, Path] = {}

    for env_file in env_files(gfv_home, project_dir):
        for key, value in _read_env(env_file).items():
            # Shell exports win; values from an earlier .env do not
            if key in os.environ and key not in supplied:
                continue
            os.environ[key] = value
            supplied[key] = env_file

    for key, env_file in sorted(supplied.items()):
        if key.startswith(GFV_PREFIX):
            logger.debug("%s taken from %s", key, env_file)

    return supplied

"""Locate the repository root and its ``pagesctl.toml``.

The config file belongs to the repository being deployed, so the walk-up
search stops at the first directory holding ``.git`` (a directory, or a
file for worktrees and submodules). ``PAGESCTL_CONFIG`` overrides the search.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

CONFIG_FILENAME = "pagesctl.toml"
CONFIG_ENV_VAR = "PAGESCTL_CONFIG"
GIT_MARKER = ".git"


def _walk_to_repo_top(start: Path | None) -> Iterator[Path]:
    """Yield *start* and its parents, ending at the enclosing repository top."""
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        yield directory
        if (directory / GIT_MARKER).exists():
            return


def find_repo_root(start: Path | None = None) -> Path | None:
    """Return the nearest directory at or above *start* that contains ``.git``."""
    for directory in _walk_to_repo_top(start):
        if (directory / GIT_MARKER).exists():
            return directory
    return None


def find_config(start: Path | None = None) -> Path | None:
    """Find ``pagesctl.toml`` between *start* (default: cwd) and the repository top.

    Outside any repository the search continues to the filesystem root.
    Returns None when nothing is found, or when ``PAGESCTL_CONFIG`` names a
    missing file.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    for directory in _walk_to_repo_top(start):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None

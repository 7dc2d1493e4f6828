"""Filesystem operations for staging and publishing build output.

All helpers work on the top level of a directory: entries are copied or
removed whole (files, symlinks, and directory trees alike). Dot-files are
included, so ``.nojekyll`` or ``.well-known/`` survive the trip to the
deploy branch.
"""

from __future__ import annotations

import shutil
from collections.abc import Iterable
from pathlib import Path


def ensure_dir(path: Path) -> Path:
    """Create *path* (and parents) if absent. Idempotent."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def remove_entry(path: Path) -> None:
    """Delete a file, symlink, or directory tree."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def remove_dir(path: Path) -> None:
    """Delete *path* recursively. No-op if it does not exist."""
    if path.exists() or path.is_symlink():
        remove_entry(path)


def copy_contents(src: Path, dest: Path) -> list[str]:
    """Recursively copy every entry of *src* into *dest*.

    Existing files in *dest* are overwritten. Returns the sorted names of
    the copied top-level entries.
    """
    ensure_dir(dest)
    names: list[str] = []
    for entry in sorted(src.iterdir()):
        target = dest / entry.name
        if entry.is_dir() and not entry.is_symlink():
            shutil.copytree(entry, target, symlinks=True, dirs_exist_ok=True)
        else:
            shutil.copy2(entry, target, follow_symlinks=False)
        names.append(entry.name)
    return names


def clean_tree(root: Path, keep: Iterable[str]) -> list[str]:
    """Delete every top-level entry of *root* whose name is not in *keep*.

    Returns the sorted names of the removed entries.
    """
    protected = frozenset(keep)
    removed: list[str] = []
    for entry in sorted(root.iterdir()):
        if entry.name in protected:
            continue
        remove_entry(entry)
        removed.append(entry.name)
    return removed

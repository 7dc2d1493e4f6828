"""Run the project's build command and locate its output."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


class BuildError(Exception):
    """The build command failed or produced no usable output."""

    def __init__(self, message: str, *, returncode: int | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


def run_build(command: list[str], cwd: Path) -> None:
    """Run *command* in *cwd*, raising :class:`BuildError` on a non-zero exit.

    Output is captured and replayed at DEBUG level so a successful build
    stays quiet unless ``--verbose`` is set.
    """
    logger.debug("Running build: %s", " ".join(command))
    try:
        result = subprocess.run(
            command,
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except OSError as exc:
        msg = f"could not run build command {command[0]!r}: {exc}"
        raise BuildError(msg) from exc

    for line in result.stdout.splitlines():
        logger.debug("build: %s", line)

    if result.returncode != 0:
        stderr = result.stderr.strip()
        msg = f"build command exited with status {result.returncode}"
        if stderr:
            msg = f"{msg}: {stderr.splitlines()[-1]}"
        raise BuildError(msg, returncode=result.returncode, stderr=stderr)


def require_build_output(output_dir: Path) -> list[Path]:
    """Return the top-level entries of *output_dir*.

    Raises :class:`BuildError` when the directory is missing or empty, since
    publishing it would wipe the deployed site.
    """
    if not output_dir.is_dir():
        msg = f"build output directory not found: {output_dir}"
        raise BuildError(msg)
    entries = sorted(output_dir.iterdir())
    if not entries:
        msg = f"build output directory is empty: {output_dir}"
        raise BuildError(msg)
    return entries

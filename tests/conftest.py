"""Shared pytest fixtures and test helpers for pagesctl tests."""

from __future__ import annotations

import logging
import subprocess
import sys
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from pagesctl.config.models import DeployConfig
from pagesctl.config.settings import PagesSettings
from pagesctl.services.telemetry import disable_step_timings

# Writes dist/index.html containing "hello", like a minimal static build.
BUILD_HELLO = [
    sys.executable,
    "-c",
    "import pathlib; d = pathlib.Path('dist'); d.mkdir(exist_ok=True); "
    "(d / 'index.html').write_text('hello'); (d / '.nojekyll').write_text('')",
]
BUILD_FAILS = [sys.executable, "-c", "import sys; sys.stderr.write('boom\\n'); sys.exit(3)"]
BUILD_NOTHING = [sys.executable, "-c", "pass"]


def git(cwd: Path, *args: str) -> str:
    """Run git in *cwd*, returning stripped stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def current_branch(repo: Path) -> str:
    return git(repo, "rev-parse", "--abbrev-ref", "HEAD")


def branch_files(repo: Path, branch: str) -> list[str]:
    """Top-level names tracked on *branch*."""
    return sorted(git(repo, "ls-tree", "--name-only", branch).splitlines())


def make_settings(repo: Path, **deploy: Any) -> PagesSettings:
    """Settings for *repo* with the test build command and *deploy* overrides."""
    deploy.setdefault("build_command", BUILD_HELLO)
    return PagesSettings.from_cli(repo_root=repo, deploy=DeployConfig(**deploy))


@pytest.fixture(autouse=True)
def _restore_global_state() -> Generator[None]:
    """Undo logging and step-timing changes made by the CLI between tests."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    pages = logging.getLogger("pagesctl")
    pages_level = pages.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    pages.setLevel(pages_level)
    disable_step_timings()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def remote_repo(tmp_path: Path) -> Path:
    """Bare repository standing in for ``origin``."""
    remote = tmp_path / "remote.git"
    remote.mkdir()
    git(remote, "init", "--bare")
    return remote


@pytest.fixture
def repo(tmp_path: Path, remote_repo: Path) -> Path:
    """Working repository with ``main`` and a previously published ``gh-pages``.

    ``main`` holds the project sources and ignores ``dist/`` and ``.deploy/``.
    ``gh-pages`` holds a stale ``old.html``. Both branches are pushed.
    """
    work = tmp_path / "site"
    work.mkdir()
    git(work, "init")
    git(work, "symbolic-ref", "HEAD", "refs/heads/main")
    git(work, "config", "user.email", "test@test.com")
    git(work, "config", "user.name", "Test")
    git(work, "config", "commit.gpgsign", "false")

    (work / "README.md").write_text("# site\n", encoding="utf-8")
    (work / ".gitignore").write_text("dist/\n.deploy/\n", encoding="utf-8")
    git(work, "add", ".")
    git(work, "commit", "-m", "init")

    git(work, "checkout", "--orphan", "gh-pages")
    git(work, "rm", "-rf", "--quiet", ".")
    (work / "old.html").write_text("stale", encoding="utf-8")
    git(work, "add", ".")
    git(work, "commit", "-m", "old site")
    git(work, "checkout", "main")

    git(work, "remote", "add", "origin", str(remote_repo))
    git(work, "push", "--quiet", "origin", "main", "gh-pages")
    return work

"""Subcommand modules for pagesctl.

Provides register_commands() which uses deferred imports to keep
``pagesctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from pagesctl.commands.deploy import deploy

    cli.add_command(deploy)

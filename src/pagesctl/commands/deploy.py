"""Command: build the site and publish it to the deploy branch."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click
from pydantic import ValidationError

if TYPE_CHECKING:
    from pagesctl.commands._context import AppContext


@click.command(
    epilog="""\
\b
Examples:
  pagesctl deploy
  pagesctl deploy --skip-build
  pagesctl deploy --branch site --remote upstream
  pagesctl deploy --build-dir build --message "Publish docs"
  pagesctl --json deploy""",
)
@click.option("--branch", "deploy_branch", default=None, help="Deploy branch (default: gh-pages).")
@click.option("--remote", default=None, help="Remote to push to (default: origin).")
@click.option("-m", "--message", "commit_message", default=None, help="Commit message.")
@click.option("--build-dir", "build_output_dir", default=None, help="Build output directory.")
@click.option("--skip-build", is_flag=True, help="Publish the existing build output as-is.")
@click.pass_obj
def deploy(
    app: AppContext,
    deploy_branch: str | None,
    remote: str | None,
    commit_message: str | None,
    build_output_dir: str | None,
    skip_build: bool,
) -> None:
    """Build the project and publish its output to the deploy branch."""
    from pagesctl.services.deploy import DeployService

    try:
        settings = app.settings.with_deploy_overrides(
            deploy_branch=deploy_branch,
            remote=remote,
            commit_message=commit_message,
            build_output_dir=build_output_dir,
        )
    except ValidationError as exc:
        raise click.UsageError(str(exc)) from exc

    svc = DeployService(settings, plugins=app.plugins)
    app.emit(svc.deploy(skip_build=skip_build))

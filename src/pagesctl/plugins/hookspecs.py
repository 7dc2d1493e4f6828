"""Pluggy hook specifications for pagesctl deploy lifecycle events.

Hooks are called synchronously by the deploy service. A raising hook is
logged and reported as a warning on the result; it never aborts a deploy.
"""

from __future__ import annotations

import pluggy

hookspec = pluggy.HookspecMarker("pagesctl")
hookimpl = pluggy.HookimplMarker("pagesctl")


class PagesctlHookSpec:
    """Hook specifications for the pagesctl plugin system."""

    @hookspec
    def pre_deploy(self, repo_root: str, deploy_branch: str) -> None:
        """Called after preflight, before the build command runs."""

    @hookspec
    def post_deploy(self, deploy_branch: str, remote: str, commit: str | None) -> None:
        """Called after a successful push and branch restore.

        *commit* is the short sha of the new deploy commit, or None when the
        commit step found nothing to commit.
        """

    @hookspec
    def deploy_failed(self, step: str, message: str) -> None:
        """Called once when a deploy step fails, after the restore attempt."""

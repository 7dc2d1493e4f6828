"""DeployService: publish build output to the deploy branch.

The sequence is fixed and strictly ordered::

    preflight -> build -> stage -> checkout -> clean -> publish
              -> unstage -> commit -> push -> restore

Each step runs inside :meth:`DeployService._step`, which times it and
converts any error into a :class:`DeployStepError` naming the step. The
first failure aborts the rest of the sequence. The one tolerated outcome is
a commit with nothing staged, which becomes a warning.

Preflight refuses to start unless the repository root is the top of a clean
work tree and the branch to return to exists, since the clean step deletes
whatever the deploy branch checkout leaves behind.

After a failure that happened on the deploy branch, the original branch is
checked out again (best effort) and the staging directory removed. A failed
restore is logged at ERROR: every later git command would otherwise run
against the deploy branch.
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pagesctl.config.logging import step_logging
from pagesctl.infrastructure.build import BuildError, require_build_output, run_build
from pagesctl.infrastructure.filesystem import clean_tree, copy_contents, ensure_dir, remove_dir
from pagesctl.infrastructure.git import GitClient, GitError
from pagesctl.services.result import ServiceError, ServiceResult
from pagesctl.services.telemetry import DeployTimeline, StepTiming, step_timings_enabled

if TYPE_CHECKING:
    from pagesctl.config.settings import PagesSettings
    from pagesctl.plugins.manager import PluginManager

logger = logging.getLogger(__name__)

STEPS: tuple[str, ...] = (
    "preflight",
    "build",
    "stage",
    "checkout",
    "clean",
    "publish",
    "unstage",
    "commit",
    "push",
    "restore",
)

COMPLETION_MESSAGE = "Deployment completed!"
NOTHING_TO_COMMIT = "Nothing to commit; deploy branch already matches the build output"


class DeployStepError(Exception):
    """A deploy step failed. Carries the step name and error detail."""

    def __init__(self, step: str, message: str, *, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.step = step
        self.detail = detail or {}


@dataclass
class DeployContext:
    """Explicit state threaded through one deploy run.

    Attributes:
        repo_root: Working tree the sequence operates on.
        original_branch: Branch checked out when the run started.
        restore_branch: Branch to check out at the end.
        switched: True while the deploy branch is checked out.
        staged: True once the staging directory may exist.
        completed: Names of the steps that finished successfully.
        timeline: Per-step timings, surfaced in verbose results.
    """

    repo_root: Path
    original_branch: str = ""
    restore_branch: str = ""
    switched: bool = False
    staged: bool = False
    completed: list[str] = field(default_factory=list)
    timeline: DeployTimeline = field(default_factory=DeployTimeline)


class DeployService:
    """Run the deploy sequence against the repository in ``settings.repo_root``."""

    def __init__(
        self,
        settings: PagesSettings,
        *,
        plugins: PluginManager | None = None,
        git: GitClient | None = None,
    ) -> None:
        self._config = settings.deploy
        self._root = settings.repo_root
        self._plugins = plugins
        self._git = git or GitClient(self._root)

    @property
    def staging_path(self) -> Path:
        return self._root / self._config.staging_dir

    @property
    def build_output_path(self) -> Path:
        return self._root / self._config.build_output_dir

    def deploy(self, *, skip_build: bool = False) -> ServiceResult:
        """Build, publish to the deploy branch, push, and return to the original branch."""
        cfg = self._config
        ctx = DeployContext(repo_root=self._root)
        warnings: list[str] = []
        data: dict[str, Any] = {
            "deploy_branch": cfg.deploy_branch,
            "remote": cfg.remote,
        }

        try:
            with self._step(ctx, "preflight"):
                self._preflight(ctx)
            self._dispatch(
                "pre_deploy",
                warnings,
                repo_root=str(self._root),
                deploy_branch=cfg.deploy_branch,
            )

            with self._step(ctx, "build"):
                if skip_build:
                    logger.debug("Skipping build command; publishing existing output")
                else:
                    run_build(cfg.build_command, self._root)
                require_build_output(self.build_output_path)

            with self._step(ctx, "stage"):
                ctx.staged = True
                remove_dir(self.staging_path)
                ensure_dir(self.staging_path)
                copy_contents(self.build_output_path, self.staging_path)

            with self._step(ctx, "checkout"):
                self._git.checkout(cfg.deploy_branch)
                ctx.switched = True

            with self._step(ctx, "clean") as timing:
                removed = clean_tree(self._root, cfg.protected_names())
                timing.count("removed", len(removed))

            with self._step(ctx, "publish") as timing:
                published = copy_contents(self.staging_path, self._root)
                data["files"] = len(published)
                timing.count("published", len(published))

            with self._step(ctx, "unstage"):
                remove_dir(self.staging_path)
                ctx.staged = False

            with self._step(ctx, "commit"):
                self._git.add_all()
                committed = self._git.commit(cfg.commit_message)
                data["committed"] = committed
                data["commit"] = self._git.head_sha() if committed else None
                if not committed:
                    logger.info(NOTHING_TO_COMMIT)
                    warnings.append(NOTHING_TO_COMMIT)

            with self._step(ctx, "push"):
                self._git.push(cfg.remote, cfg.deploy_branch)

            with self._step(ctx, "restore"):
                self._git.checkout(ctx.restore_branch)
                ctx.switched = False
                data["restored_branch"] = ctx.restore_branch
        except DeployStepError as exc:
            return self._fail(ctx, exc, warnings)

        self._dispatch(
            "post_deploy",
            warnings,
            deploy_branch=cfg.deploy_branch,
            remote=cfg.remote,
            commit=data["commit"],
        )
        logger.debug(COMPLETION_MESSAGE)
        return ServiceResult(
            ok=True, op="deploy", data=data, warnings=warnings, meta=self._meta(ctx)
        )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _preflight(self, ctx: DeployContext) -> None:
        if not self._root.is_dir():
            msg = f"repository root does not exist: {self._root}"
            raise DeployStepError("preflight", msg)
        self._git.version()
        if not self._git.is_work_tree():
            msg = f"not a git repository: {self._root}"
            raise DeployStepError("preflight", msg)

        toplevel = self._git.toplevel()
        if toplevel != self._root.resolve():
            msg = f"{self._root} is not the top of its git work tree; run from {toplevel}"
            raise DeployStepError("preflight", msg, detail={"toplevel": str(toplevel)})

        ctx.original_branch = self._git.current_branch()
        ctx.restore_branch = self._config.main_branch or ctx.original_branch
        if ctx.original_branch == self._config.deploy_branch:
            msg = (
                f"already on deploy branch {self._config.deploy_branch!r}; "
                "check out the source branch first"
            )
            raise DeployStepError("preflight", msg)
        if not self._git.branch_exists(ctx.restore_branch):
            msg = (
                f"branch to return to, {ctx.restore_branch!r}, does not exist; "
                "set main_branch in pagesctl.toml"
            )
            raise DeployStepError("preflight", msg)

        dirty = self._uncommitted_paths()
        if dirty:
            msg = (
                f"working tree has {len(dirty)} uncommitted or untracked path(s); "
                "commit or stash them before deploying"
            )
            raise DeployStepError("preflight", msg, detail={"dirty": dirty})

    def _uncommitted_paths(self) -> list[str]:
        """``git status`` entries outside the build output and staging directories.

        Anything else would be carried onto the deploy branch and deleted by
        the clean step.
        """
        owned = (self._config.build_output_dir, self._config.staging_dir)
        paths = []
        for entry in self._git.dirty_paths():
            path = entry[3:]
            if any(path == d or path.startswith(f"{d}/") for d in owned):
                continue
            paths.append(path)
        return paths

    @contextmanager
    def _step(self, ctx: DeployContext, name: str) -> Generator[StepTiming]:
        """Run one timed step, turning any error into a :class:`DeployStepError`."""
        with step_logging(name), ctx.timeline.step(name) as timing:
            logger.debug("step.start %s", name)
            try:
                yield timing
            except DeployStepError:
                raise
            except (GitError, BuildError) as exc:
                detail: dict[str, Any] = {}
                if exc.returncode is not None:
                    detail["returncode"] = exc.returncode
                if exc.stderr:
                    detail["stderr"] = exc.stderr
                raise DeployStepError(name, str(exc), detail=detail) from exc
            except OSError as exc:
                raise DeployStepError(name, str(exc)) from exc
            except Exception as exc:
                logger.debug("Unexpected error in step %s", name, exc_info=True)
                msg = f"unexpected {type(exc).__name__}: {exc}"
                raise DeployStepError(name, msg) from exc
        ctx.completed.append(name)

    def _meta(self, ctx: DeployContext) -> dict[str, Any] | None:
        if not step_timings_enabled():
            return None
        return {"timings": ctx.timeline.summary()}

    # ------------------------------------------------------------------
    # Failure handling
    # ------------------------------------------------------------------

    def _fail(
        self,
        ctx: DeployContext,
        exc: DeployStepError,
        warnings: list[str],
    ) -> ServiceResult:
        logger.warning("Deploy step %s failed: %s", exc.step, exc)

        restored = not ctx.switched
        if ctx.switched and exc.step != "restore":
            restored = self._restore_after_failure(ctx, warnings)
        if ctx.staged:
            self._remove_staging(warnings)

        if not restored:
            logger.error(
                "Repository left on branch %r; run 'git checkout %s' before anything else",
                self._config.deploy_branch,
                ctx.restore_branch,
            )
            warnings.append(
                f"Repository is still on {self._config.deploy_branch!r}; "
                f"check out {ctx.restore_branch!r} manually"
            )

        self._dispatch("deploy_failed", warnings, step=exc.step, message=str(exc))

        detail = {"step": exc.step, "restored": restored, **exc.detail}
        return ServiceResult(
            ok=False,
            op="deploy",
            warnings=warnings,
            error=ServiceError(code=f"{exc.step}_failed", message=str(exc), detail=detail),
            meta=self._meta(ctx),
        )

    def _restore_after_failure(self, ctx: DeployContext, warnings: list[str]) -> bool:
        """Check out the restore branch again. Returns whether it worked.

        Once the clean step has touched the tree, the only local changes are
        the sequencer's own, so they are discarded with a forced checkout.
        """
        force = "checkout" in ctx.completed
        try:
            self._git.checkout(ctx.restore_branch, force=force)
        except GitError as err:
            logger.error("Could not restore branch %s: %s", ctx.restore_branch, err)
            warnings.append(f"Restore of {ctx.restore_branch!r} failed: {err}")
            return False
        ctx.switched = False
        logger.info("Restored branch %s after failure", ctx.restore_branch)
        return True

    def _remove_staging(self, warnings: list[str]) -> None:
        try:
            remove_dir(self.staging_path)
        except OSError as err:
            logger.warning("Could not remove staging directory %s: %s", self.staging_path, err)
            warnings.append(f"Staging directory {self.staging_path} was left behind")

    def _dispatch(self, hook_name: str, warnings: list[str], **kwargs: Any) -> None:
        """Dispatch a lifecycle hook. No-op without a plugin manager."""
        if self._plugins is None:
            return
        self._plugins.dispatch(hook_name, warnings, **kwargs)

"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, pagesctl.toml only contains
overrides. A typical Vite/webpack project needs no config file at all.
"""

from __future__ import annotations

from pathlib import PurePosixPath

from pydantic import BaseModel, Field, field_validator, model_validator

# Never removed by the clean step, whatever ``preserve`` says.
GIT_DIR = ".git"


def _plain_relative(value: str, field_name: str) -> str:
    path = PurePosixPath(value.replace("\\", "/"))
    if not path.parts or path.is_absolute() or ".." in path.parts:
        msg = f"{field_name} must be a relative path inside the repository: {value!r}"
        raise ValueError(msg)
    if path.parts and path.parts[0] == GIT_DIR:
        msg = f"{field_name} must not point into {GIT_DIR}: {value!r}"
        raise ValueError(msg)
    return value


class DeployConfig(BaseModel):
    """[deploy] section."""

    model_config = {"frozen": True}

    build_command: list[str] = Field(default_factory=lambda: ["npm", "run", "build"])
    build_output_dir: str = "dist"
    staging_dir: str = ".deploy"
    deploy_branch: str = "gh-pages"
    # Empty string restores whatever branch was checked out when the run started.
    main_branch: str = "main"
    remote: str = "origin"
    commit_message: str = "Updated GitHub Pages"
    preserve: list[str] = Field(default_factory=list)

    @field_validator("build_output_dir")
    @classmethod
    def _check_build_output_dir(cls, value: str) -> str:
        return _plain_relative(value, "build_output_dir")

    @field_validator("staging_dir")
    @classmethod
    def _check_staging_dir(cls, value: str) -> str:
        value = _plain_relative(value, "staging_dir")
        if len(PurePosixPath(value).parts) != 1:
            msg = f"staging_dir must be a top-level directory name: {value!r}"
            raise ValueError(msg)
        return value

    @field_validator("build_command")
    @classmethod
    def _check_build_command(cls, value: list[str]) -> list[str]:
        if not value:
            msg = "build_command must not be empty"
            raise ValueError(msg)
        return value

    @field_validator("deploy_branch", "remote", "commit_message")
    @classmethod
    def _check_not_blank(cls, value: str) -> str:
        if not value.strip():
            msg = "value must not be blank"
            raise ValueError(msg)
        return value

    @model_validator(mode="after")
    def _check_consistency(self) -> DeployConfig:
        first = PurePosixPath(self.build_output_dir.replace("\\", "/")).parts[0]
        if first == self.staging_dir:
            msg = "build_output_dir must not live inside staging_dir"
            raise ValueError(msg)
        if self.main_branch == self.deploy_branch:
            msg = f"main_branch and deploy_branch are both {self.deploy_branch!r}"
            raise ValueError(msg)
        return self

    def protected_names(self) -> frozenset[str]:
        """Top-level names the clean step must never delete."""
        return frozenset({GIT_DIR, self.staging_dir, *self.preserve})


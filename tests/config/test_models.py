"""Tests for the [deploy] configuration model."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from pagesctl.config.models import DeployConfig


class TestDefaults:
    def test_documented_defaults(self) -> None:
        cfg = DeployConfig()
        assert cfg.build_command == ["npm", "run", "build"]
        assert cfg.build_output_dir == "dist"
        assert cfg.staging_dir == ".deploy"
        assert cfg.deploy_branch == "gh-pages"
        assert cfg.main_branch == "main"
        assert cfg.remote == "origin"
        assert cfg.commit_message == "Updated GitHub Pages"
        assert cfg.preserve == []

    def test_frozen(self) -> None:
        cfg = DeployConfig()
        with pytest.raises(ValidationError):
            cfg.remote = "upstream"  # type: ignore[misc]


class TestProtectedNames:
    def test_git_and_staging_always_protected(self) -> None:
        assert DeployConfig().protected_names() == frozenset({".git", ".deploy"})

    def test_custom_staging_and_preserve(self) -> None:
        cfg = DeployConfig(staging_dir="_stage", preserve=["CNAME"])
        assert cfg.protected_names() == frozenset({".git", "_stage", "CNAME"})

    def test_preserve_cannot_drop_git(self) -> None:
        cfg = DeployConfig(preserve=[])
        assert ".git" in cfg.protected_names()


class TestValidation:
    @pytest.mark.parametrize("value", ["/abs/dist", "../dist", "", ".", ".git/dist"])
    def test_rejects_bad_build_output_dir(self, value: str) -> None:
        with pytest.raises(ValidationError):
            DeployConfig(build_output_dir=value)

    def test_nested_build_output_dir_ok(self) -> None:
        assert DeployConfig(build_output_dir="web/dist").build_output_dir == "web/dist"

    @pytest.mark.parametrize("value", ["a/b", ".git", "../x", ""])
    def test_rejects_bad_staging_dir(self, value: str) -> None:
        with pytest.raises(ValidationError):
            DeployConfig(staging_dir=value)

    def test_build_output_inside_staging(self) -> None:
        with pytest.raises(ValidationError, match="inside staging_dir"):
            DeployConfig(build_output_dir=".deploy/dist")

    def test_same_main_and_deploy_branch(self) -> None:
        with pytest.raises(ValidationError, match="both"):
            DeployConfig(main_branch="gh-pages")

    def test_empty_build_command(self) -> None:
        with pytest.raises(ValidationError):
            DeployConfig(build_command=[])

    @pytest.mark.parametrize("field", ["deploy_branch", "remote", "commit_message"])
    def test_blank_strings(self, field: str) -> None:
        with pytest.raises(ValidationError):
            DeployConfig(**{field: "  "})

    def test_empty_main_branch_allowed(self) -> None:
        assert DeployConfig(main_branch="").main_branch == ""

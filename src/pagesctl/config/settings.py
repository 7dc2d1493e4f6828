"""Unified settings: CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs: CLI flags passed by Click
  2. Env vars: ``PAGESCTL_*`` prefix
  3. TOML file: ``pagesctl.toml`` discovered via walk-up
  4. Code defaults: baked into :class:`DeployConfig`

Uses Pydantic Settings v2 with a custom :class:`TomlSettingsSource` that
reuses the ``find_config`` walk-up discovery from
:mod:`pagesctl.config.discovery`.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from pagesctl.config.discovery import find_config, find_repo_root
from pagesctl.config.models import DeployConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``pagesctl.toml`` file discovered via walk-up."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class PagesSettings(BaseSettings):
    """Unified settings for the pagesctl CLI.

    Merges CLI flags, environment variables, the ``[deploy]`` TOML section,
    and code-baked defaults into a single frozen object. Stored on the
    :class:`~pagesctl.commands._context.AppContext` at the CLI root level.

    Attributes:
        repo_root: Directory the deploy runs in (parent of ``pagesctl.toml``,
            or CWD if no config found).
        config_path: The TOML file that was loaded, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "PAGESCTL_",
        "env_nested_delimiter": "__",
    }

    repo_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    deploy: DeployConfig = Field(default_factory=DeployConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        repo_root: Path | None = None,
        **cli_flags: Any,
    ) -> PagesSettings:
        """Construct settings from CLI invocation.

        Discovers ``pagesctl.toml`` via walk-up (or explicit *config_path*) and
        merges CLI flags as highest-priority overrides. Without an explicit
        *repo_root*, the root is the enclosing git work tree, then the config
        file's directory, then the cwd.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(repo_root)

        resolved_root = repo_root or find_repo_root()
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else Path.cwd()

        _tls.toml_path = toml_path
        try:
            return cls(
                repo_root=resolved_root,
                config_path=toml_path,
                **cli_flags,
            )
        finally:
            _tls.toml_path = None

    def with_deploy_overrides(self, **overrides: Any) -> PagesSettings:
        """Return a copy whose ``[deploy]`` section has *overrides* applied.

        ``None`` values are ignored so unset CLI options keep the configured
        value. The merged section is re-validated.
        """
        changes = {k: v for k, v in overrides.items() if v is not None}
        if not changes:
            return self
        merged = DeployConfig.model_validate({**self.deploy.model_dump(), **changes})
        return self.model_copy(update={"deploy": merged})

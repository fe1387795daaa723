"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags or explicit overrides
  2. Env vars     — ``CQBUS_*`` prefix, ``__`` between nested keys
                    (``CQBUS_RETRY__ALGORITHM=exponential``)
  3. TOML file    — ``cqbus.toml`` discovered via walk-up
  4. Code defaults — baked into the section models

Uses Pydantic Settings v2 with a custom :class:`TomlSettingsSource` that
reuses the ``find_config`` walk-up discovery from
:mod:`cqbus.config.discovery`.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from cqbus.config.discovery import find_config, read_toml
from cqbus.config.models import BackoffPolicy, LoggingConfig, PluginsConfig
from cqbus.domain.errors import ConfigurationError


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``cqbus.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            self._data = read_toml(toml_path)

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class CqbusSettings(BaseSettings):
    """Settings consumed by :func:`cqbus.bootstrap.add_cqrs` and the CLI.

    Attributes:
        config_path: The TOML file the settings were read from, if any.
        retry: Backoff policy shared by the command and query buses.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "CQBUS_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False

    # --- TOML sections ---
    retry: BackoffPolicy = Field(default_factory=BackoffPolicy)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

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
    def load(
        cls,
        *,
        config_path: str | Path | None = None,
        search_from: Path | None = None,
        **overrides: Any,
    ) -> CqbusSettings:
        """Build settings from every source.

        Uses *config_path* when given, otherwise discovers ``cqbus.toml`` by
        walking up from *search_from* (default: cwd). *overrides* take
        priority over everything else.

        Raises:
            ConfigurationError: the TOML is malformed or a value has the
                wrong type. Policy rule violations are not checked here.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if not p.is_file():
                raise ConfigurationError([f"Config file not found: {p}"], header="Invalid configuration.")
            toml_path = p
        else:
            toml_path = find_config(search_from)

        _tls.toml_path = toml_path
        try:
            return cls(config_path=toml_path, **overrides)
        except ValidationError as exc:
            violations = [
                f"'{'.'.join(str(part) for part in err['loc'])}' {err['msg']}"
                for err in exc.errors()
            ]
            raise ConfigurationError(violations, header="Invalid configuration.") from exc
        finally:
            _tls.toml_path = None

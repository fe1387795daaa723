"""Config file discovery and loading.

Walk-up finder locates cqbus.toml, similar to how git finds .git/.
Supports CQBUS_CONFIG env var and --config CLI flag overrides.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from cqbus.config.models import CqbusConfig
from cqbus.domain.errors import ConfigurationError

CONFIG_FILENAME = "cqbus.toml"
CONFIG_ENV_VAR = "CQBUS_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for cqbus.toml.

    Returns the path to the config file, or None if not found.
    Checks CQBUS_CONFIG env var first.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        if p.is_file():
            return p
        return None

    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def read_toml(path: Path) -> dict[str, Any]:
    """Parse *path* as TOML, raising ConfigurationError on syntax errors."""
    raw = path.read_text(encoding="utf-8")
    try:
        return tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(
            [f"Invalid TOML in {path}: {exc}"], header="Invalid configuration."
        ) from exc


def load_config(path: Path | None = None, cwd: Path | None = None) -> CqbusConfig:
    """Load config from a TOML file without consulting the environment.

    If *path* is None, uses find_config(*cwd*) to discover the file.
    Returns default CqbusConfig if no file is found.
    """
    if path is None:
        path = find_config(cwd)

    if path is None:
        return CqbusConfig()

    return CqbusConfig.model_validate(read_toml(path))

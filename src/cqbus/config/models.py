"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, cqbus.toml only contains overrides.
A fresh project needs no config file at all: the default policy never retries.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class RetryAlgorithm(IntEnum):
    """How the delay between two attempts is computed."""

    NONE = 0
    EXPONENTIAL = 1
    FIXED = 2
    LINEAR = 3
    RANDOM = 4


# --- cqbus.toml sections ---


class BackoffPolicy(BaseModel):
    """[retry] section.

    Delays are milliseconds. ``maximum_retries`` and ``maximum_delay`` use 0
    for "unbounded". Field combinations are NOT checked here: an invalid
    policy must still load so that dispatch can report every violation at
    once (see :func:`cqbus.services.backoff.validate`).
    """

    model_config = {"frozen": True}

    algorithm: RetryAlgorithm | int = Field(
        default=RetryAlgorithm.NONE, union_mode="left_to_right"
    )
    delay: int = 0
    exponential_base: int = 0
    random_variation: int = 0
    maximum_retries: int = 0
    maximum_delay: int = 0

    @field_validator("algorithm", mode="before")
    @classmethod
    def _coerce_algorithm(cls, value: Any) -> Any:
        """Accept algorithm names (any case) and numeric strings from config sources."""
        if isinstance(value, str):
            text = value.strip()
            if text.lstrip("-").isdigit():
                return int(text)
            member = RetryAlgorithm.__members__.get(text.upper())
            if member is not None:
                return member
        return value

    @property
    def algorithm_name(self) -> str:
        """Display name of the algorithm, e.g. ``"Linear"``."""
        if isinstance(self.algorithm, RetryAlgorithm):
            return self.algorithm.name.capitalize()
        return str(self.algorithm)


class LoggingConfig(BaseModel):
    """[logging] section."""

    model_config = {"frozen": True}

    verbose: bool = False
    log_json: bool = False


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    entry_point_group: str = "cqbus.handlers"


class CqbusConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    retry: BackoffPolicy = Field(default_factory=BackoffPolicy)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

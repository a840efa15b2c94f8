# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Runtime settings for the CLI invocation and the controller dial."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

DEFAULT_JUJU_BINARY: Final[str] = "juju"
DEFAULT_DIAL_TIMEOUT: Final[float] = 5 * 60.0
DEFAULT_RETRY_DELAY: Final[float] = 1.0

BINARY_ENV: Final[str] = "JUJU_CONNECT_BINARY"
CLI_TIMEOUT_ENV: Final[str] = "JUJU_CONNECT_CLI_TIMEOUT"
DIAL_TIMEOUT_ENV: Final[str] = "JUJU_CONNECT_DIAL_TIMEOUT"
RETRY_DELAY_ENV: Final[str] = "JUJU_CONNECT_RETRY_DELAY"


class ConfigError(Exception):
    """Raised when settings cannot be resolved."""


class DialOptions(BaseModel):
    """Timing policy applied while dialling a controller.

    ``timeout`` bounds the whole dial across every address and retry round;
    ``retry_delay`` is the pause between rounds. Both are seconds.
    """

    model_config = ConfigDict(frozen=True)

    timeout: float = Field(default=DEFAULT_DIAL_TIMEOUT, gt=0)
    retry_delay: float = Field(default=DEFAULT_RETRY_DELAY, gt=0)


class ClientSettings(BaseModel):
    """Settings used when invoking the ``juju`` CLI and dialling the controller."""

    model_config = ConfigDict(frozen=True)

    juju_binary: str = DEFAULT_JUJU_BINARY
    cli_timeout: float | None = Field(default=None, gt=0)
    dial: DialOptions = Field(default_factory=DialOptions)

    @field_validator("juju_binary")
    @classmethod
    def _require_binary(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("juju binary must not be empty")
        return stripped


def load_settings(environ: Mapping[str, str] | None = None) -> ClientSettings:
    """Return :class:`ClientSettings` overlaid with environment overrides.

    Args:
        environ: Environment mapping to read; defaults to ``os.environ``.

    Returns:
        ClientSettings: Validated settings.

    Raises:
        ConfigError: If an override is present but invalid.
    """

    env = os.environ if environ is None else environ
    top: dict[str, object] = {}
    dial: dict[str, object] = {}
    if value := env.get(BINARY_ENV):
        top["juju_binary"] = value
    if value := env.get(CLI_TIMEOUT_ENV):
        top["cli_timeout"] = value
    if value := env.get(DIAL_TIMEOUT_ENV):
        dial["timeout"] = value
    if value := env.get(RETRY_DELAY_ENV):
        dial["retry_delay"] = value
    if dial:
        top["dial"] = dial
    try:
        return ClientSettings.model_validate(top)
    except ValidationError as exc:
        raise ConfigError(f"Invalid juju-connect settings: {exc}") from exc


__all__ = [
    "ClientSettings",
    "ConfigError",
    "DEFAULT_DIAL_TIMEOUT",
    "DEFAULT_RETRY_DELAY",
    "DialOptions",
    "load_settings",
]

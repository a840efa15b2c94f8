# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Client for the ``Application`` API facade."""

from __future__ import annotations

from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import RPCError
from .rpc import Connection

APPLICATION_FACADE: Final[str] = "Application"
SUPPORTED_VERSIONS: Final[tuple[int, ...]] = tuple(range(13, 21))
DEFAULT_BRANCH: Final[str] = "master"


class ConfigEntry(BaseModel):
    """One charm option as reported by ``Application.Get``."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    value: Any = None
    default: Any = None
    type: str | None = None
    source: str | None = None
    description: str | None = None

    @property
    def effective(self) -> Any:
        return self.default if self.value is None else self.value


class ApplicationSettings(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    application: str = ""
    charm: str = ""
    channel: str = ""
    config: dict[str, ConfigEntry] = Field(default_factory=dict)
    constraints: dict[str, Any] = Field(default_factory=dict)
    application_config: dict[str, Any] = Field(default_factory=dict, alias="application-config")

    def options(self) -> dict[str, Any]:
        """Return ``{option name: value}`` for every charm option."""

        return {name: entry.effective for name, entry in sorted(self.config.items())}


def _coerce_entry(raw: Any) -> Any:
    # Older controllers report bare values instead of option descriptors.
    if isinstance(raw, dict):
        return raw
    return {"value": raw}


class ApplicationClient:
    """Query application details over a model :class:`Connection`.

    The client owns the connection it wraps; closing one closes the other.
    """

    def __init__(self, connection: Connection) -> None:
        self.connection = connection

    def __enter__(self) -> ApplicationClient:
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def close(self) -> None:
        self.connection.close()

    def get(self, application: str, branch: str = DEFAULT_BRANCH) -> ApplicationSettings:
        """Return the configuration of ``application`` on ``branch``.

        Args:
            application: Application name within the connected model.
            branch: Model generation branch; ``master`` is the live configuration.

        Returns:
            ApplicationSettings: Charm, options, and constraints of the application.

        Raises:
            RPCError: If the controller reports an error or an unreadable result.
            ControllerConnectionError: If the connection fails.
        """

        version = self.connection.best_facade_version(APPLICATION_FACADE, SUPPORTED_VERSIONS)
        result = self.connection.call(
            APPLICATION_FACADE,
            "Get",
            {"application": application, "branch": branch},
            version=version,
        )
        raw_config = result.get("config") or {}
        payload = {key: value for key, value in result.items() if value is not None}
        if isinstance(raw_config, dict):
            payload["config"] = {name: _coerce_entry(value) for name, value in raw_config.items()}
        try:
            return ApplicationSettings.model_validate(payload)
        except ValidationError as exc:
            raise RPCError(f"unexpected Application.Get result for {application}: {exc}", code="malformed") from exc


__all__ = ["ApplicationClient", "ApplicationSettings", "ConfigEntry", "DEFAULT_BRANCH"]

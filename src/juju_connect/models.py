# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Typed views over ``juju show-controller`` output and the derived connection config."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class _ControllerRecord(BaseModel):
    """Base for records decoded from the CLI's JSON output.

    Missing keys and JSON ``null`` both decode to the field default, as do
    ``null`` items inside endpoint lists and model maps; a value of the
    wrong JSON type is rejected.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            return {key: value for key, value in data.items() if value is not None}
        return data


class ProviderDetails(_ControllerRecord):
    """The ``details`` block describing the controller's provider and endpoints."""

    uuid: str = ""
    api_endpoints: list[str] = Field(default_factory=list, alias="api-endpoints")
    cloud: str = ""
    region: str = ""
    agent_version: str = Field(default="", alias="agent-version")
    agent_git_commit: str = Field(default="", alias="agent-git-commit")
    controller_model_version: str = Field(default="", alias="controller-model-version")
    mongo_version: str = Field(default="", alias="mongo-version")
    ca_fingerprint: str = Field(default="", alias="ca-fingerprint")
    ca_cert: str = Field(default="", alias="ca-cert")

    @field_validator("api_endpoints", mode="before")
    @classmethod
    def _null_endpoints(cls, value: Any) -> Any:
        if isinstance(value, list):
            return ["" if item is None else item for item in value]
        return value


class ModelSummary(_ControllerRecord):
    uuid: str = ""
    unit_count: int = Field(default=0, ge=0, alias="unit-count")


class Account(_ControllerRecord):
    user: str = ""
    password: str = Field(default="", repr=False)
    access: str = ""


class RawControllerDocument(_ControllerRecord):
    """One controller entry as printed by ``juju show-controller --show-password``."""

    details: ProviderDetails = Field(default_factory=ProviderDetails)
    current_model: str = Field(default="", alias="current-model")
    models: dict[str, ModelSummary] = Field(default_factory=dict)
    account: Account = Field(default_factory=Account)

    @field_validator("models", mode="before")
    @classmethod
    def _null_models(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return {name: {} if entry is None else entry for name, entry in value.items()}
        return value


class ControllerConfig(BaseModel):
    """Connection parameters distilled from a :class:`RawControllerDocument`.

    ``model_uuid`` is never populated by the credential loader; the target
    model is chosen per connection.
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    ca_cert: str = ""
    addresses: tuple[str, ...] = ()
    username: str = ""
    password: str = Field(default="", repr=False)
    model_uuid: str | None = None

    def redacted(self) -> dict[str, Any]:
        """Return a JSON-friendly mapping with the password masked."""

        data = self.model_dump(mode="json")
        data["password"] = "********" if self.password else ""
        return data


__all__ = [
    "Account",
    "ControllerConfig",
    "ModelSummary",
    "ProviderDetails",
    "RawControllerDocument",
]

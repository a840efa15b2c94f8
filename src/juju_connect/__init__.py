# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Juju controller connection helpers driven by the local ``juju`` CLI."""

from __future__ import annotations

from importlib import metadata

from .application import ApplicationClient, ApplicationSettings
from .config import ClientSettings, DialOptions, load_settings
from .connector import ControllerConnector, DialRequest, WebsocketDialer
from .credentials import ControllerConfigHolder, load_controller_config
from .errors import (
    ControllerConnectionError,
    ExternalToolError,
    JujuConnectError,
    MalformedOutputError,
    NotConfiguredError,
    RPCError,
)
from .models import ControllerConfig, RawControllerDocument

__all__ = [
    "ApplicationClient",
    "ApplicationSettings",
    "ClientSettings",
    "ControllerConfig",
    "ControllerConfigHolder",
    "ControllerConnectionError",
    "ControllerConnector",
    "DialOptions",
    "DialRequest",
    "ExternalToolError",
    "JujuConnectError",
    "MalformedOutputError",
    "NotConfiguredError",
    "RPCError",
    "RawControllerDocument",
    "WebsocketDialer",
    "__version__",
    "load_controller_config",
    "load_settings",
]

try:
    __version__ = metadata.version("juju-connect")
except metadata.PackageNotFoundError:  # pragma: no cover - local development fallback
    __version__ = "0.0.0"

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy shared by the credential loader and the connector."""

from __future__ import annotations

import builtins
from typing import Final

UNAUTHORIZED_CODE: Final[str] = "unauthorized access"


class JujuConnectError(RuntimeError):
    """Base class for every error raised by :mod:`juju_connect`."""


class ExternalToolError(JujuConnectError):
    """Raised when the ``juju`` CLI is missing, fails, or prints nothing."""

    def __init__(self, message: str, *, returncode: int | None = None, stderr: str | None = None) -> None:
        """Initialise the error with the process outcome.

        Args:
            message: Human-readable description of the failure.
            returncode: Exit status reported by the tool, when it ran at all.
            stderr: Captured standard error, when available.
        """

        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class MalformedOutputError(JujuConnectError):
    """Raised when the CLI output cannot be decoded into a controller document."""


class NotConfiguredError(JujuConnectError):
    """Raised when a connection is requested before a configuration is held."""


class ControllerConnectionError(JujuConnectError, builtins.ConnectionError):
    """Raised when dialling or logging in to the controller fails."""


class RPCError(JujuConnectError):
    """Error response returned by the Juju API server."""

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(f"{message} ({code})" if code else message)
        self.message = message
        self.code = code

    @property
    def is_unauthorized(self) -> bool:
        return self.code == UNAUTHORIZED_CODE


__all__ = [
    "ControllerConnectionError",
    "ExternalToolError",
    "JujuConnectError",
    "MalformedOutputError",
    "NotConfiguredError",
    "RPCError",
]

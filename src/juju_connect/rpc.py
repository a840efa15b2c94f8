# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""JSON-RPC session over a Juju API websocket."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any, Final, Protocol

from websockets.exceptions import WebSocketException

from .errors import ControllerConnectionError, RPCError

LOGGER = logging.getLogger(__name__)

ADMIN_FACADE: Final[str] = "Admin"
ADMIN_FACADE_VERSION: Final[int] = 3
LOGIN_REQUEST: Final[str] = "Login"
CLIENT_VERSION: Final[str] = "3.5.0"
USER_TAG_PREFIX: Final[str] = "user-"


class Transport(Protocol):
    """Minimal text-frame transport; satisfied by ``websockets`` sync connections."""

    def send(self, message: str) -> None: ...

    def recv(self, timeout: float | None = None) -> str | bytes: ...

    def close(self) -> None: ...


def user_tag(username: str) -> str:
    """Return the Juju entity tag for ``username``."""

    if username.startswith(USER_TAG_PREFIX):
        return username
    return f"{USER_TAG_PREFIX}{username}"


class Connection:
    """A Juju API session bound to the controller or to one model.

    Instances are returned by :class:`~juju_connect.connector.ControllerConnector`
    already logged in. Close them explicitly or use them as context managers.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        address: str,
        model_uuid: str = "",
        request_timeout: float | None = None,
    ) -> None:
        self._transport = transport
        self._request_id = 0
        self._closed = False
        self._request_timeout = request_timeout
        self.address = address
        self.model_uuid = model_uuid
        self.facades: dict[str, tuple[int, ...]] = {}
        self.server_version: str | None = None
        self.user_info: dict[str, Any] = {}

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> Connection:
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def __repr__(self) -> str:
        target = self.model_uuid or "controller"
        return f"Connection(address={self.address!r}, target={target!r}, closed={self._closed})"

    def close(self) -> None:
        """Release the underlying transport; safe to call more than once."""

        if self._closed:
            return
        self._closed = True
        try:
            self._transport.close()
        except (OSError, WebSocketException) as exc:
            LOGGER.debug("error while closing connection to %s: %s", self.address, exc)

    def login(self, username: str, password: str, *, timeout: float | None = None) -> dict[str, Any]:
        """Authenticate the session and record the advertised facades.

        Args:
            username: Juju user name, with or without the ``user-`` prefix.
            password: Plain-text password for the user.
            timeout: Seconds to wait for the reply; defaults to the session timeout.

        Returns:
            dict[str, Any]: The raw login result.

        Raises:
            RPCError: If the controller rejects the credentials.
            ControllerConnectionError: If the transport fails mid-request.
        """

        result = self.call(
            ADMIN_FACADE,
            LOGIN_REQUEST,
            {
                "auth-tag": user_tag(username),
                "credentials": password,
                "client-version": CLIENT_VERSION,
            },
            version=ADMIN_FACADE_VERSION,
            timeout=timeout,
        )
        self.facades = _parse_facades(result.get("facades") or ())
        self.server_version = result.get("server-version")
        self.user_info = dict(result.get("user-info") or {})
        LOGGER.debug(
            "logged in to %s (server %s, %d facades)",
            self.address,
            self.server_version or "unknown",
            len(self.facades),
        )
        return result

    def best_facade_version(self, facade: str, supported: Iterable[int]) -> int:
        """Return the highest version of ``facade`` both sides support.

        Raises:
            RPCError: If the server advertises ``facade`` with no overlapping version.
        """

        client_versions = set(supported)
        if not client_versions:
            raise ValueError(f"no client versions given for facade {facade}")
        if not self.facades:
            return max(client_versions)
        common = client_versions.intersection(self.facades.get(facade, ()))
        if not common:
            raise RPCError(f"no compatible version of facade {facade}", code="not supported")
        return max(common)

    def call(
        self,
        facade: str,
        request: str,
        params: Mapping[str, Any] | None = None,
        *,
        version: int,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """Issue one RPC request and wait for the matching response.

        Args:
            facade: API facade name, for example ``"Application"``.
            request: Method name on the facade.
            params: JSON-serialisable request parameters.
            version: Facade version to address.
            timeout: Seconds to wait for the reply; defaults to the session timeout.

        Returns:
            dict[str, Any]: The ``response`` body of the reply.

        Raises:
            RPCError: If the server answers with an error.
            ControllerConnectionError: If the connection is closed or the transport fails.
        """

        if self._closed:
            raise ControllerConnectionError(f"connection to {self.address} is closed")
        self._request_id += 1
        request_id = self._request_id
        wait = self._request_timeout if timeout is None else timeout
        message = {
            "request-id": request_id,
            "type": facade,
            "version": version,
            "request": request,
            "params": dict(params or {}),
        }
        try:
            self._transport.send(json.dumps(message))
            while True:
                reply = _decode_frame(self._transport.recv(timeout=wait))
                if reply.get("request-id") == request_id:
                    break
                LOGGER.debug("skipping unexpected frame for request %s", reply.get("request-id"))
        except (OSError, TimeoutError, WebSocketException) as exc:
            raise ControllerConnectionError(f"{facade}.{request} failed on {self.address}: {exc}") from exc

        error = reply.get("error")
        if error:
            raise RPCError(str(error), code=reply.get("error-code") or None)
        response = reply.get("response")
        return response if isinstance(response, dict) else {}


def _decode_frame(frame: str | bytes) -> dict[str, Any]:
    try:
        decoded = json.loads(frame)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise RPCError(f"malformed frame from controller: {exc}", code="malformed") from exc
    if not isinstance(decoded, dict):
        raise RPCError("malformed frame from controller: expected an object", code="malformed")
    return decoded


def _parse_facades(entries: Iterable[Any]) -> dict[str, tuple[int, ...]]:
    facades: dict[str, tuple[int, ...]] = {}
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        name = entry.get("name")
        versions = entry.get("versions") or ()
        if isinstance(name, str):
            facades[name] = tuple(sorted(int(version) for version in versions))
    return facades


__all__ = ["CLIENT_VERSION", "Connection", "Transport", "user_tag"]

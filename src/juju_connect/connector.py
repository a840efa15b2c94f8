# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Establish authenticated API connections to a Juju controller."""

from __future__ import annotations

import logging
import ssl
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Final, Protocol

from websockets.exceptions import WebSocketException
from websockets.sync.client import connect as websocket_connect

from .config import DialOptions
from .credentials import ControllerConfigHolder
from .errors import ControllerConnectionError, RPCError
from .rpc import Connection, Transport

LOGGER = logging.getLogger(__name__)

# Juju controllers present certificates issued for this name regardless of address.
CONTROLLER_SERVER_NAME: Final[str] = "juju-apiserver"

TransportOpener = Callable[[str, ssl.SSLContext, float], Transport]


@dataclass(slots=True, frozen=True)
class DialRequest:
    """Everything needed to dial one controller session."""

    addresses: tuple[str, ...]
    username: str
    password: str = field(repr=False)
    ca_cert: str
    model_uuid: str = ""
    options: DialOptions = field(default_factory=DialOptions)

    def url_for(self, address: str) -> str:
        if self.model_uuid:
            return f"wss://{address}/model/{self.model_uuid}/api"
        return f"wss://{address}/api"


class Dialer(Protocol):
    def __call__(self, request: DialRequest) -> Connection: ...


def build_ssl_context(ca_cert: str) -> ssl.SSLContext:
    """Return a TLS context trusting ``ca_cert`` (system roots when empty)."""

    if not ca_cert:
        return ssl.create_default_context()
    try:
        return ssl.create_default_context(cadata=ca_cert)
    except (ssl.SSLError, ValueError) as exc:
        raise ControllerConnectionError(f"controller CA certificate is invalid: {exc}") from exc


def open_websocket(url: str, context: ssl.SSLContext, timeout: float) -> Transport:
    return websocket_connect(
        url,
        ssl=context,
        server_hostname=CONTROLLER_SERVER_NAME,
        open_timeout=timeout,
        max_size=None,
    )


class WebsocketDialer:
    """Dial controller addresses until one accepts a login or the timeout expires.

    Each round tries every address in order; rounds are separated by
    ``retry_delay``. A rejected login is final and is not retried.
    """

    def __init__(
        self,
        *,
        opener: TransportOpener = open_websocket,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._opener = opener
        self._clock = clock
        self._sleep = sleep

    def __call__(self, request: DialRequest) -> Connection:
        if not request.addresses:
            raise ControllerConnectionError("no controller addresses configured")
        context = build_ssl_context(request.ca_cert)
        options = request.options
        deadline = self._clock() + options.timeout
        last_error: Exception | None = None
        attempts = 0

        while True:
            for address in request.addresses:
                remaining = deadline - self._clock()
                if remaining <= 0:
                    break
                attempts += 1
                connection = self._attempt(request, address, context, deadline)
                if isinstance(connection, Connection):
                    return connection
                last_error = connection
            remaining = deadline - self._clock()
            if remaining <= 0:
                break
            self._sleep(min(options.retry_delay, remaining))

        target = request.model_uuid or "controller"
        message = (
            f"unable to connect to {target} after {attempts} attempt(s) within {options.timeout:g}s"
            f": {last_error or 'timed out'}"
        )
        raise ControllerConnectionError(message) from last_error

    def _attempt(
        self,
        request: DialRequest,
        address: str,
        context: ssl.SSLContext,
        deadline: float,
    ) -> Connection | Exception:
        url = request.url_for(address)
        LOGGER.debug("dialling %s", url)
        try:
            transport = self._opener(url, context, deadline - self._clock())
        except (OSError, TimeoutError, WebSocketException) as exc:
            LOGGER.debug("dial to %s failed: %s", address, exc)
            return exc

        connection = Connection(
            transport,
            address=address,
            model_uuid=request.model_uuid,
            request_timeout=request.options.timeout,
        )
        login_timeout = deadline - self._clock()
        if login_timeout <= 0:
            connection.close()
            return TimeoutError(f"no time left to log in to {address}")
        try:
            connection.login(request.username, request.password, timeout=login_timeout)
        except RPCError as exc:
            connection.close()
            outcome = "rejected" if exc.is_unauthorized else "failed"
            raise ControllerConnectionError(f"login to {address} {outcome}: {exc}") from exc
        except ControllerConnectionError as exc:
            connection.close()
            LOGGER.debug("login on %s interrupted: %s", address, exc)
            return exc
        return connection


class ControllerConnector:
    """Open connections using the configuration held by a :class:`ControllerConfigHolder`."""

    def __init__(
        self,
        holder: ControllerConfigHolder,
        *,
        options: DialOptions | None = None,
        dialer: Dialer | None = None,
    ) -> None:
        self.holder = holder
        self.options = options or DialOptions()
        self._dialer: Dialer = dialer or WebsocketDialer()

    def build_request(self, model_uuid: str = "") -> DialRequest:
        """Return the dial request for ``model_uuid`` (empty for the controller).

        Raises:
            NotConfiguredError: If the holder has no configuration.
        """

        config = self.holder.require()
        return DialRequest(
            addresses=config.addresses,
            username=config.username,
            password=config.password,
            ca_cert=config.ca_cert,
            model_uuid=model_uuid,
            options=self.options,
        )

    def connect(self) -> Connection:
        """Return a controller-level connection."""

        return self.connect_with_model("")

    def connect_with_model(self, model_uuid: str) -> Connection:
        """Return a connection bound to ``model_uuid``.

        Args:
            model_uuid: Target model UUID; an empty string targets the controller.

        Returns:
            Connection: A logged-in session owned by the caller.

        Raises:
            NotConfiguredError: If the holder has no configuration; nothing is dialled.
            ControllerConnectionError: If every dial attempt fails or login is rejected.
        """

        request = self.build_request(model_uuid)
        LOGGER.debug(
            "connecting to %s via %d address(es), timeout=%gs retry-delay=%gs",
            model_uuid or "controller",
            len(request.addresses),
            request.options.timeout,
            request.options.retry_delay,
        )
        return self._dialer(request)

    @contextmanager
    def session(self, model_uuid: str = "") -> Iterator[Connection]:
        """Yield a connection that is closed on every exit path."""

        connection = self.connect_with_model(model_uuid)
        try:
            yield connection
        finally:
            connection.close()


__all__ = [
    "CONTROLLER_SERVER_NAME",
    "ControllerConnector",
    "DialRequest",
    "Dialer",
    "WebsocketDialer",
    "build_ssl_context",
    "open_websocket",
]

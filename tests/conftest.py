# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import json
import subprocess
from collections import deque
from collections.abc import Callable, Sequence
from typing import Any

import pytest

from juju_connect.process import SubprocessExecutionError

SAMPLE_CONTROLLER: dict[str, Any] = {
    "details": {
        "uuid": "0f5a1ac6-4b0c-4e2c-8d7b-4f3c0a2f6a11",
        "api-endpoints": ["10.0.0.1:17070", "10.0.0.2:17070"],
        "cloud": "localhost",
        "region": "localhost",
        "agent-version": "3.5.4",
        "agent-git-commit": "1d3e0a5c",
        "controller-model-version": "3.5.4",
        "mongo-version": "4.4.24",
        "ca-fingerprint": "AB:CD:EF",
        "ca-cert": "-----BEGIN CERTIFICATE-----\nMIIB\n-----END CERTIFICATE-----\n",
    },
    "current-model": "admin/default",
    "models": {
        "controller": {"uuid": "7a1c2b3d-0000-4000-8000-000000000001", "unit-count": 1},
        "default": {"uuid": "f72ef260-3f4d-4f29-8e2a-32fc2bbfea60", "unit-count": 3},
    },
    "account": {"user": "admin", "password": "s3cr3t", "access": "superuser"},
}


class FakeRunner:
    """Stand-in for :func:`juju_connect.process.run_command`."""

    def __init__(
        self,
        stdout: str | bytes = "",
        *,
        returncode: int = 0,
        stderr: str = "",
        error: Exception | None = None,
    ) -> None:
        self.stdout = stdout
        self.returncode = returncode
        self.stderr = stderr
        self.error = error
        self.calls: list[tuple[tuple[str, ...], dict[str, Any]]] = []

    def __call__(self, args: Sequence[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        self.calls.append((tuple(args), kwargs))
        if self.error is not None:
            raise self.error
        if kwargs.get("check", True) and self.returncode != 0:
            raise SubprocessExecutionError(args, self.returncode, self.stdout, self.stderr)
        return subprocess.CompletedProcess(list(args), self.returncode, self.stdout, self.stderr)


class FakeTransport:
    """Scripted websocket transport answering requests through ``responder``."""

    def __init__(self, responder: Callable[[dict[str, Any]], list[Any]] | None = None) -> None:
        self.responder = responder or (lambda message: [{"request-id": message["request-id"], "response": {}}])
        self.sent: list[dict[str, Any]] = []
        self.pending: deque[str] = deque()
        self.closed = False

    def send(self, message: str) -> None:
        decoded = json.loads(message)
        self.sent.append(decoded)
        for frame in self.responder(decoded):
            self.pending.append(frame if isinstance(frame, str) else json.dumps(frame))

    def recv(self, timeout: float | None = None) -> str:
        if not self.pending:
            raise TimeoutError("no frame available")
        return self.pending.popleft()

    def close(self) -> None:
        self.closed = True


def login_responder(
    facades: dict[str, list[int]] | None = None,
    responses: dict[tuple[str, str], Any] | None = None,
) -> Callable[[dict[str, Any]], list[Any]]:
    """Return a responder that accepts logins and serves canned facade results."""

    advertised = facades if facades is not None else {"Application": [17, 18, 19], "Admin": [3]}
    canned = responses or {}

    def respond(message: dict[str, Any]) -> list[Any]:
        key = (message["type"], message["request"])
        if key == ("Admin", "Login"):
            body = {
                "server-version": "3.5.4",
                "facades": [{"name": name, "versions": versions} for name, versions in advertised.items()],
                "user-info": {"identity": message["params"]["auth-tag"]},
            }
            return [{"request-id": message["request-id"], "response": body}]
        reply = canned.get(key, {})
        if isinstance(reply, Exception):
            return [{"request-id": message["request-id"], "error": str(reply), "error-code": "not found"}]
        return [{"request-id": message["request-id"], "response": reply}]

    return respond


@pytest.fixture
def controller_document() -> dict[str, Any]:
    return json.loads(json.dumps(SAMPLE_CONTROLLER))


@pytest.fixture
def show_controller_json(controller_document: dict[str, Any]) -> str:
    return json.dumps({"dev": controller_document})


@pytest.fixture
def fake_runner() -> type[FakeRunner]:
    return FakeRunner


@pytest.fixture
def fake_transport() -> type[FakeTransport]:
    return FakeTransport


@pytest.fixture
def make_login_responder() -> Callable[..., Callable[[dict[str, Any]], list[Any]]]:
    return login_responder

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the juju-connect command line."""

from __future__ import annotations

import json
from typing import Any

import pytest
from typer.testing import CliRunner

from juju_connect.cli import commands as cli_app
from juju_connect.cli.commands import app
from juju_connect.connector import DialRequest
from juju_connect.errors import RPCError
from juju_connect.rpc import Connection

MODEL_UUID = "f72ef260-3f4d-4f29-8e2a-32fc2bbfea60"

GET_RESULT = {
    "application": "tiny-bash",
    "charm": "tiny-bash",
    "config": {"greeting": {"value": "hello", "source": "user"}, "count": {"default": 3}},
}


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "JUJU_CONNECT_BINARY",
        "JUJU_CONNECT_CLI_TIMEOUT",
        "JUJU_CONNECT_DIAL_TIMEOUT",
        "JUJU_CONNECT_RETRY_DELAY",
    ):
        monkeypatch.delenv(name, raising=False)


class DialerStub:
    def __init__(self, transport) -> None:
        self.transport = transport
        self.requests: list[DialRequest] = []
        self.connections: list[Connection] = []

    def __call__(self, request: DialRequest) -> Connection:
        self.requests.append(request)
        connection = Connection(self.transport, address=request.addresses[0], model_uuid=request.model_uuid)
        connection.login(request.username, request.password)
        self.connections.append(connection)
        return connection


def _install_dialer(monkeypatch: pytest.MonkeyPatch, stub: DialerStub) -> None:
    monkeypatch.setattr(cli_app, "WebsocketDialer", lambda: stub)


def test_app_config_prints_json(
    monkeypatch: pytest.MonkeyPatch,
    fake_runner,
    fake_transport,
    make_login_responder,
    show_controller_json: str,
) -> None:
    runner = fake_runner(show_controller_json)
    monkeypatch.setattr(cli_app, "run_command", runner)
    stub = DialerStub(fake_transport(make_login_responder(responses={("Application", "Get"): GET_RESULT})))
    _install_dialer(monkeypatch, stub)

    result = CliRunner().invoke(app, ["--no-emoji", "app-config", "tiny-bash", "--model", MODEL_UUID, "--json"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {"count": 3, "greeting": "hello"}
    request = stub.requests[0]
    assert request.model_uuid == MODEL_UUID
    assert request.options.timeout == 300
    assert request.options.retry_delay == 1
    assert stub.connections[0].closed
    assert stub.transport.sent[-1]["params"] == {"application": "tiny-bash", "branch": "master"}


def test_app_config_renders_table(
    monkeypatch: pytest.MonkeyPatch,
    fake_runner,
    fake_transport,
    make_login_responder,
    show_controller_json: str,
) -> None:
    monkeypatch.setattr(cli_app, "run_command", fake_runner(show_controller_json))
    stub = DialerStub(fake_transport(make_login_responder(responses={("Application", "Get"): GET_RESULT})))
    _install_dialer(monkeypatch, stub)

    result = CliRunner().invoke(
        app,
        ["--no-emoji", "app-config", "tiny-bash", "-m", MODEL_UUID, "--branch", "blue"],
    )

    assert result.exit_code == 0, result.output
    assert "greeting" in result.output
    assert "Loaded controller credentials for admin (2 address(es))" in result.output
    assert "tiny-bash config (2 options)" in result.output
    assert stub.transport.sent[-1]["params"]["branch"] == "blue"


def test_app_config_stops_when_credentials_fail(
    monkeypatch: pytest.MonkeyPatch,
    fake_runner,
    fake_transport,
) -> None:
    monkeypatch.setattr(cli_app, "run_command", fake_runner("", returncode=1, stderr="no controllers"))
    stub = DialerStub(fake_transport())
    _install_dialer(monkeypatch, stub)

    result = CliRunner().invoke(app, ["--no-emoji", "app-config", "tiny-bash", "--model", MODEL_UUID])

    assert result.exit_code == 1
    assert "Failed to configure connection" in result.output
    assert stub.requests == []


def test_app_config_reports_query_errors(
    monkeypatch: pytest.MonkeyPatch,
    fake_runner,
    fake_transport,
    make_login_responder,
    show_controller_json: str,
) -> None:
    monkeypatch.setattr(cli_app, "run_command", fake_runner(show_controller_json))
    responder = make_login_responder(responses={("Application", "Get"): RPCError("application not found")})
    stub = DialerStub(fake_transport(responder))
    _install_dialer(monkeypatch, stub)

    result = CliRunner().invoke(app, ["--no-emoji", "app-config", "missing", "--model", MODEL_UUID])

    assert result.exit_code == 1
    assert "Failed to read configuration of missing" in result.output
    assert stub.connections[0].closed


def test_controller_command_masks_password(
    monkeypatch: pytest.MonkeyPatch,
    fake_runner,
    show_controller_json: str,
) -> None:
    runner = fake_runner(show_controller_json)
    monkeypatch.setattr(cli_app, "run_command", runner)

    result = CliRunner().invoke(app, ["--no-emoji", "controller", "--controller", "dev", "--json"])

    assert result.exit_code == 0, result.output
    payload: dict[str, Any] = json.loads(result.stdout)
    assert payload["username"] == "admin"
    assert payload["password"] == "********"
    assert payload["addresses"] == ["10.0.0.1:17070", "10.0.0.2:17070"]
    assert "s3cr3t" not in result.output
    assert runner.calls[0][0][2] == "dev"


def test_controller_command_table(monkeypatch: pytest.MonkeyPatch, fake_runner, show_controller_json: str) -> None:
    monkeypatch.setattr(cli_app, "run_command", fake_runner(show_controller_json))

    result = CliRunner().invoke(app, ["--no-emoji", "controller"])

    assert result.exit_code == 0, result.output
    assert "10.0.0.1:17070" in result.output
    assert "s3cr3t" not in result.output


def test_invalid_settings_exit(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("JUJU_CONNECT_DIAL_TIMEOUT", "-5")

    result = CliRunner().invoke(app, ["--no-emoji", "controller"])

    assert result.exit_code == 1
    assert "Invalid juju-connect settings" in result.output

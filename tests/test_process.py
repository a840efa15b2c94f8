# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the subprocess wrapper."""

from __future__ import annotations

import subprocess
from typing import Any

import pytest

from juju_connect import process
from juju_connect.process import TIMEOUT_RETURNCODE, SubprocessExecutionError, run_command


def _patch_run(monkeypatch: pytest.MonkeyPatch, outcome: Any) -> list[list[str]]:
    calls: list[list[str]] = []

    def fake_run(args: list[str], **_kwargs: Any) -> subprocess.CompletedProcess[str]:
        calls.append(args)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    monkeypatch.setattr(process.shutil, "which", lambda name: f"/usr/bin/{name}")
    monkeypatch.setattr(process.subprocess, "run", fake_run)
    return calls


def test_run_command_resolves_executable(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = _patch_run(monkeypatch, subprocess.CompletedProcess(["juju"], 0, "{}", ""))

    result = run_command(["juju", "version"], capture_output=True)

    assert result.stdout == "{}"
    assert calls == [["/usr/bin/juju", "version"]]


def test_run_command_missing_executable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(process.shutil, "which", lambda _name: None)

    with pytest.raises(FileNotFoundError, match="juju"):
        run_command(["juju", "version"])


def test_run_command_rejects_empty_args() -> None:
    with pytest.raises(ValueError):
        run_command([])


def test_run_command_raises_on_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_run(monkeypatch, subprocess.CompletedProcess(["juju"], 2, "partial", "boom"))

    with pytest.raises(SubprocessExecutionError) as excinfo:
        run_command(["juju", "status"], capture_output=True)

    assert excinfo.value.returncode == 2
    assert excinfo.value.stdout == "partial"
    assert "boom" in str(excinfo.value)


def test_run_command_check_disabled_returns_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_run(monkeypatch, subprocess.CompletedProcess(["juju"], 1, "", "nope"))

    result = run_command(["juju", "status"], check=False, capture_output=True)

    assert result.returncode == 1


def test_run_command_timeout_maps_to_status(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_run(monkeypatch, subprocess.TimeoutExpired(["juju"], 5, output=b"", stderr=b"slow"))

    result = run_command(["juju", "status"], check=False, capture_output=True, timeout=5)

    assert result.returncode == TIMEOUT_RETURNCODE
    assert "slow" in result.stderr
    assert "timed out after 5.0s" in result.stderr


def test_run_command_can_return_raw_bytes(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, Any] = {}

    def fake_run(args: list[str], **kwargs: Any) -> subprocess.CompletedProcess[bytes]:
        seen.update(kwargs)
        return subprocess.CompletedProcess(args, 0, b"\xff", b"")

    monkeypatch.setattr(process.shutil, "which", lambda name: f"/usr/bin/{name}")
    monkeypatch.setattr(process.subprocess, "run", fake_run)

    result = run_command(["juju", "version"], capture_output=True, text=False)

    assert result.stdout == b"\xff"
    assert seen["text"] is False
    assert seen["encoding"] is None


def test_run_command_timeout_keeps_bytes_when_not_text(monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_run(monkeypatch, subprocess.TimeoutExpired(["juju"], 5, output=None, stderr=None))

    result = run_command(["juju", "status"], check=False, capture_output=True, text=False, timeout=5)

    assert result.returncode == TIMEOUT_RETURNCODE
    assert result.stdout == b""
    assert result.stderr == b"Command timed out after 5.0s"

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Safe wrappers around ``subprocess`` execution."""

from __future__ import annotations

import shutil

# Bandit: subprocess usage is intentional; the wrapper normalises the
# executable path and never enables ``shell=True``.
import subprocess  # nosec B404
from collections.abc import Callable, Sequence
from pathlib import Path
from subprocess import CompletedProcess
from typing import Any, Final

TIMEOUT_RETURNCODE: Final[int] = 124

CommandRunner = Callable[..., CompletedProcess[Any]]


class SubprocessExecutionError(RuntimeError):
    """Raised when a subprocess exits with a non-zero status while ``check`` is true."""

    def __init__(
        self,
        command: Sequence[str],
        returncode: int,
        stdout: str | None,
        stderr: str | None,
    ) -> None:
        super().__init__(
            f"Command '{command[0]}' exited with status {returncode}. stderr: {stderr or '<none>'}",
        )
        self.command = tuple(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


def _normalize_args(args: Sequence[str]) -> list[str]:
    if not args:
        msg = "subprocess command requires at least one argument"
        raise ValueError(msg)

    head, *rest = args
    head_path = Path(head)
    if head_path.is_absolute():
        return [str(head_path), *rest]

    resolved = shutil.which(head)
    if resolved is None:
        msg = f"Executable '{head}' was not found on PATH"
        raise FileNotFoundError(msg)
    return [resolved, *rest]


def _ensure_text(value: str | bytes | None) -> str | None:
    if value is None or isinstance(value, str):
        return value
    return value.decode(errors="ignore")


def run_command(
    args: Sequence[str],
    *,
    check: bool = True,
    capture_output: bool = False,
    text: bool = True,
    timeout: float | None = None,
) -> CompletedProcess[Any]:
    """Execute *args* after normalising the executable path.

    Args:
        args: Command line; the first element is resolved against ``PATH``.
        check: Raise :class:`SubprocessExecutionError` on a non-zero exit.
        capture_output: Capture stdout and stderr.
        text: Decode captured output as UTF-8; ``False`` leaves raw bytes.
        timeout: Seconds to wait before the process is killed.

    Returns:
        CompletedProcess[Any]: Result of the finished process. A timeout is
        reported as exit status ``124`` with an explanatory stderr line.

    Raises:
        FileNotFoundError: If the executable cannot be located on ``PATH``.
        SubprocessExecutionError: If ``check`` is true and the command fails.
    """

    normalized = _normalize_args(args)

    try:
        # Bandit: argument lists are passed directly without shell expansion.
        completed: CompletedProcess[Any] = subprocess.run(  # nosec B603
            normalized,
            check=False,
            capture_output=capture_output,
            text=text,
            encoding="utf-8" if text else None,
            timeout=timeout,
            stdin=subprocess.DEVNULL,
        )
    except subprocess.TimeoutExpired as exc:
        stdout: str | bytes = (_ensure_text(exc.stdout) or "") if text else (exc.stdout or b"")
        stderr = _ensure_text(exc.stderr)
        timeout_msg = f"Command timed out after {timeout:.1f}s" if timeout is not None else "Command timed out"
        combined_stderr = f"{stderr}\n{timeout_msg}" if stderr else timeout_msg
        completed = subprocess.CompletedProcess(
            args=list(normalized),
            returncode=TIMEOUT_RETURNCODE,
            stdout=stdout,
            stderr=combined_stderr if text else combined_stderr.encode(),
        )

    if check and completed.returncode != 0:
        raise SubprocessExecutionError(
            normalized,
            completed.returncode,
            _ensure_text(completed.stdout),
            _ensure_text(completed.stderr),
        )

    return completed


__all__ = ["CommandRunner", "SubprocessExecutionError", "TIMEOUT_RETURNCODE", "run_command"]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Load controller credentials from the locally installed ``juju`` CLI."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Final, cast

from pydantic import ValidationError

from .config import ClientSettings
from .errors import ExternalToolError, MalformedOutputError, NotConfiguredError
from .models import ControllerConfig, RawControllerDocument
from .process import CommandRunner, SubprocessExecutionError, run_command

LOGGER = logging.getLogger(__name__)

SHOW_CONTROLLER_COMMAND: Final[str] = "show-controller"
SHOW_CONTROLLER_FLAGS: Final[tuple[str, ...]] = ("--show-password", "--format=json")


def build_show_controller_args(settings: ClientSettings, controller: str | None = None) -> list[str]:
    """Return the argument vector used to query controller details."""

    args = [settings.juju_binary, SHOW_CONTROLLER_COMMAND]
    if controller:
        args.append(controller)
    args.extend(SHOW_CONTROLLER_FLAGS)
    return args


def fetch_show_controller_output(
    settings: ClientSettings,
    controller: str | None = None,
    *,
    runner: CommandRunner = run_command,
) -> str:
    """Run ``juju show-controller`` and return its standard output.

    Args:
        settings: Settings naming the ``juju`` binary and CLI timeout.
        controller: Optional controller name; the CLI's current controller
            is reported when omitted.
        runner: Command runner compatible with :func:`run_command`.

    Returns:
        str: The complete, non-empty standard output of the command.

    Raises:
        ExternalToolError: If the binary is missing, cannot be executed,
            exits with a non-zero status, or prints nothing.
        MalformedOutputError: If the output is not valid UTF-8.
    """

    args = build_show_controller_args(settings, controller)
    LOGGER.debug("invoking juju CLI: %s", " ".join(args))
    try:
        completed = runner(args, capture_output=True, check=True, text=False, timeout=settings.cli_timeout)
    except FileNotFoundError as exc:
        raise ExternalToolError(f"juju CLI not available: {exc}") from exc
    except SubprocessExecutionError as exc:
        raise ExternalToolError(
            f"juju CLI exited with status {exc.returncode}",
            returncode=exc.returncode,
            stderr=exc.stderr,
        ) from exc
    except OSError as exc:
        raise ExternalToolError(f"unable to execute juju CLI: {exc}") from exc

    raw = completed.stdout or b""
    try:
        stdout = raw.decode("utf-8") if isinstance(raw, bytes) else raw
    except UnicodeDecodeError as exc:
        raise MalformedOutputError(f"juju CLI output is not valid UTF-8: {exc}") from exc
    if not stdout.strip():
        stderr = completed.stderr
        raise ExternalToolError(
            "juju CLI produced no output",
            returncode=completed.returncode,
            stderr=stderr.decode(errors="replace") if isinstance(stderr, bytes) else stderr,
        )
    return stdout


def _select_entry(controllers: Mapping[str, object], controller: str | None) -> tuple[str, object]:
    if controller:
        if controller not in controllers:
            known = ", ".join(sorted(controllers)) or "<none>"
            raise MalformedOutputError(f"controller '{controller}' missing from juju output (found: {known})")
        return controller, controllers[controller]
    name = sorted(controllers)[0]
    if len(controllers) > 1:
        LOGGER.debug("juju reported %d controllers; using '%s'", len(controllers), name)
    return name, controllers[name]


def parse_show_controller(stdout: str | bytes, controller: str | None = None) -> RawControllerDocument:
    """Decode ``show-controller`` JSON into a :class:`RawControllerDocument`.

    The top-level keys are controller names, so the payload is decoded
    generically first and one entry is then validated against the fixed
    record shape. Without an explicit ``controller`` the first name in
    sorted order is used.

    Args:
        stdout: Raw output of the CLI.
        controller: Optional controller name to select.

    Returns:
        RawControllerDocument: The selected controller's record.

    Raises:
        MalformedOutputError: If the payload is not a non-empty JSON object,
            the requested controller is absent, or the entry has the wrong shape.
    """

    try:
        payload = json.loads(stdout)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MalformedOutputError(f"juju CLI output is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise MalformedOutputError(f"expected a JSON object of controllers, got {type(payload).__name__}")
    controllers = cast(dict[str, object], payload)
    if not controllers:
        raise MalformedOutputError("juju CLI reported no controllers")

    name, entry = _select_entry(controllers, controller)
    try:
        document = RawControllerDocument.model_validate(entry)
    except ValidationError as exc:
        raise MalformedOutputError(f"unexpected structure for controller '{name}': {exc}") from exc
    LOGGER.debug("decoded controller '%s' (uuid=%s)", name, document.details.uuid or "<unknown>")
    return document


def project_controller_config(document: RawControllerDocument) -> ControllerConfig:
    """Return the connection parameters carried by ``document``."""

    return ControllerConfig(
        ca_cert=document.details.ca_cert,
        addresses=tuple(document.details.api_endpoints),
        username=document.account.user,
        password=document.account.password,
    )


def load_controller_config(
    settings: ClientSettings | None = None,
    controller: str | None = None,
    *,
    runner: CommandRunner = run_command,
) -> ControllerConfig:
    """Fetch, decode, and project the local controller credentials."""

    resolved = settings or ClientSettings()
    stdout = fetch_show_controller_output(resolved, controller, runner=runner)
    return project_controller_config(parse_show_controller(stdout, controller))


class ControllerConfigHolder:
    """Hold the controller configuration used by :class:`ControllerConnector`.

    The holder starts empty. A successful load replaces whatever it held;
    a failed load leaves it unchanged.
    """

    def __init__(
        self,
        config: ControllerConfig | None = None,
        *,
        settings: ClientSettings | None = None,
        runner: CommandRunner = run_command,
    ) -> None:
        self._config = config
        self._settings = settings or ClientSettings()
        self._runner = runner

    @property
    def config(self) -> ControllerConfig | None:
        return self._config

    @property
    def is_configured(self) -> bool:
        return self._config is not None

    def configure(self, config: ControllerConfig) -> None:
        self._config = config

    def configure_with_local_juju(self, controller: str | None = None) -> ControllerConfig:
        """Populate the holder from ``juju show-controller``.

        Args:
            controller: Optional controller name passed to the CLI.

        Returns:
            ControllerConfig: The configuration now held.

        Raises:
            ExternalToolError: If the CLI cannot be run successfully.
            MalformedOutputError: If the CLI output cannot be decoded.
        """

        config = load_controller_config(self._settings, controller, runner=self._runner)
        self._config = config
        LOGGER.debug(
            "controller configured using juju CLI: user=%s addresses=%s",
            config.username,
            ", ".join(config.addresses),
        )
        return config

    def require(self) -> ControllerConfig:
        """Return the held configuration.

        Raises:
            NotConfiguredError: If nothing has been configured yet.
        """

        if self._config is None:
            raise NotConfiguredError("controller configuration missing; configure the holder first")
        return self._config


__all__ = [
    "ControllerConfigHolder",
    "build_show_controller_args",
    "fetch_show_controller_output",
    "load_controller_config",
    "parse_show_controller",
    "project_controller_config",
]

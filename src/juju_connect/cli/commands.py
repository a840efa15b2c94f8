# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""CLI application entry point wiring the controller commands."""

from __future__ import annotations

import json
from typing import Any, NoReturn

import typer
from rich import box
from rich.pretty import Pretty
from rich.table import Table

from ..application import ApplicationClient, ApplicationSettings
from ..config import ConfigError, load_settings
from ..connector import ControllerConnector, WebsocketDialer
from ..console import get_console_manager
from ..credentials import ControllerConfigHolder
from ..errors import JujuConnectError
from ..logging import configure_logging, fail, info, ok
from ..models import ControllerConfig
from ..process import run_command
from .options import (
    APPLICATION_ARGUMENT,
    BRANCH_OPTION,
    CONTROLLER_OPTION,
    DEFAULT_BRANCH,
    EMOJI_OPTION,
    JSON_OPTION,
    MODEL_OPTION,
    VERBOSE_OPTION,
    CLIState,
)

app = typer.Typer(
    name="juju-connect",
    help="Connect to a Juju controller using the local juju CLI credentials.",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: VERBOSE_OPTION = False,
    emoji: EMOJI_OPTION = True,
) -> None:
    """Resolve settings and logging shared by every command."""

    configure_logging(verbose)
    try:
        settings = load_settings()
    except ConfigError as exc:
        fail(str(exc), use_emoji=emoji)
        raise typer.Exit(code=1) from exc
    ctx.obj = CLIState(settings=settings, use_emoji=emoji, verbose=verbose)


def _state(ctx: typer.Context) -> CLIState:
    state = ctx.find_object(CLIState)
    if state is None:  # pragma: no cover - callback always runs first
        raise typer.Exit(code=2)
    return state


def _abort(state: CLIState, message: str, exc: BaseException) -> NoReturn:
    fail(message, use_emoji=state.use_emoji)
    raise typer.Exit(code=1) from exc


def _configured_holder(state: CLIState, controller: str | None) -> ControllerConfigHolder:
    """Return a holder populated from the local juju CLI, exiting on failure."""

    holder = ControllerConfigHolder(settings=state.settings, runner=run_command)
    try:
        holder.configure_with_local_juju(controller)
    except JujuConnectError as exc:
        _abort(state, f"Failed to configure connection: {exc}", exc)
    return holder


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, sort_keys=True, default=str))


def _render_controller(state: CLIState, config: ControllerConfig) -> None:
    console = get_console_manager().get(color=True, emoji=state.use_emoji)
    table = Table(title="Controller", box=box.SIMPLE, show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value", overflow="fold")
    table.add_row("User", config.username or "<unset>")
    table.add_row("Password", "********" if config.password else "<unset>")
    table.add_row("Addresses", "\n".join(config.addresses) or "<none>")
    table.add_row("CA certificate", "present" if config.ca_cert else "<none>")
    console.print(table)


def _render_application(state: CLIState, settings: ApplicationSettings) -> None:
    console = get_console_manager().get(color=True, emoji=state.use_emoji)
    title = f"{settings.application or 'application'} ({settings.charm})" if settings.charm else settings.application
    table = Table(title=title, box=box.SIMPLE, expand=True)
    table.add_column("Option", style="bold")
    table.add_column("Value", overflow="fold")
    table.add_column("Source")
    for name, entry in sorted(settings.config.items()):
        table.add_row(name, Pretty(entry.effective), entry.source or "")
    console.print(table)


@app.command("controller")
def controller_command(
    ctx: typer.Context,
    controller: CONTROLLER_OPTION = None,
    json_output: JSON_OPTION = False,
) -> None:
    """Show the connection details derived from 'juju show-controller'."""

    state = _state(ctx)
    config = _configured_holder(state, controller).require()
    if json_output:
        _echo_json(config.redacted())
        return
    _render_controller(state, config)


@app.command("app-config")
def app_config_command(
    ctx: typer.Context,
    application: APPLICATION_ARGUMENT,
    model: MODEL_OPTION,
    branch: BRANCH_OPTION = DEFAULT_BRANCH,
    controller: CONTROLLER_OPTION = None,
    json_output: JSON_OPTION = False,
) -> None:
    """Print the configuration of APPLICATION in the given model."""

    state = _state(ctx)
    holder = _configured_holder(state, controller)
    if not json_output:
        loaded = holder.require()
        info(
            f"Loaded controller credentials for {loaded.username} ({len(loaded.addresses)} address(es))",
            use_emoji=state.use_emoji,
        )
    connector = ControllerConnector(holder, options=state.settings.dial, dialer=WebsocketDialer())
    try:
        with connector.session(model) as connection:
            settings = ApplicationClient(connection).get(application, branch)
    except JujuConnectError as exc:
        _abort(state, f"Failed to read configuration of {application}: {exc}", exc)

    if json_output:
        _echo_json(settings.options())
        return
    _render_application(state, settings)
    ok(f"{application} config ({len(settings.config)} options)", use_emoji=state.use_emoji)


def main() -> None:
    """Console-script entry point."""

    app()


__all__ = ["app", "main"]

# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Typer option declarations and the shared CLI state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

import typer

from ..application import DEFAULT_BRANCH
from ..config import ClientSettings

VERBOSE_OPTION = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Show debug logging on stderr."),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]
CONTROLLER_OPTION = Annotated[
    str | None,
    typer.Option(
        "--controller",
        "-c",
        help="Controller name passed to 'juju show-controller' (defaults to the current controller).",
    ),
]
JSON_OPTION = Annotated[
    bool,
    typer.Option("--json", help="Print machine-readable JSON instead of a table."),
]
MODEL_OPTION = Annotated[
    str,
    typer.Option("--model", "-m", help="UUID of the model hosting the application."),
]
BRANCH_OPTION = Annotated[
    str,
    typer.Option("--branch", "-b", help="Model generation branch to read."),
]
APPLICATION_ARGUMENT = Annotated[
    str,
    typer.Argument(help="Application name within the model."),
]


@dataclass(slots=True)
class CLIState:
    """Options shared by every subcommand."""

    settings: ClientSettings
    use_emoji: bool
    verbose: bool


__all__ = [
    "APPLICATION_ARGUMENT",
    "BRANCH_OPTION",
    "CLIState",
    "CONTROLLER_OPTION",
    "DEFAULT_BRANCH",
    "EMOJI_OPTION",
    "JSON_OPTION",
    "MODEL_OPTION",
    "VERBOSE_OPTION",
]

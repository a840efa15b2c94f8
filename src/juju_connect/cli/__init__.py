# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""juju-connect CLI package exports."""

from __future__ import annotations

from .commands import app, main

__all__ = ["app", "main"]

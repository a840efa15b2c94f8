# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Allow ``python -m juju_connect``."""

from __future__ import annotations

from .cli.commands import main

if __name__ == "__main__":  # pragma: no cover - module execution
    main()

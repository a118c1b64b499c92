#!/usr/bin/env python3
from __future__ import annotations

import typer

from .commands import (
    config as config_command,
    run as run_command,
    snapshots as snapshots_command,
)


def register(app: typer.Typer) -> None:
    run_command.register(app)
    snapshots_command.register(app)
    config_command.register(app)

#!/usr/bin/env python3
# Copyright (C) 2026 Alex Stoyanov
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with this program.
# If not, see <https://www.gnu.org/licenses/>.

from __future__ import annotations

import importlib.metadata
from collections.abc import Callable

import typer
from rich.traceback import install as install_rich_traceback

from ...layout.spec import PAPER_SIZES_MM
from ..ui import console_err

# InvalidGeometry and load errors are ValueErrors; MeasurementFailure is a RuntimeError.
REPORTED_ERRORS: tuple[type[Exception], ...] = (OSError, RuntimeError, ValueError)


def _run_cli(func: Callable[[], int | None], *, debug: bool) -> None:
    """Run a command body; reported errors become ``Error: ...`` and exit code 2."""
    if debug:
        install_rich_traceback(show_locals=True)
    try:
        status = func()
    except REPORTED_ERRORS as exc:
        if debug:
            raise
        console_err.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=2)
    if status:
        raise typer.Exit(code=status)


def _ctx_value(ctx: typer.Context, key: str) -> object:
    if ctx.obj is None:
        return None
    return ctx.obj.get(key)


def _config_source(ctx: typer.Context) -> tuple[str | None, str | None]:
    """The root ``--config`` path and ``--paper`` size; at most one is set."""
    config = _ctx_value(ctx, "config")
    paper = _ctx_value(ctx, "paper")
    if config and paper:
        raise typer.BadParameter("use either --config or --paper, not both")
    return (str(config) if config else None), (str(paper) if paper else None)


def _paper_callback(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = value.strip().upper()
    if normalized not in PAPER_SIZES_MM:
        choices = " or ".join(sorted(PAPER_SIZES_MM))
        raise typer.BadParameter(f"paper must be {choices}")
    return normalized


def _get_version() -> str:
    try:
        return importlib.metadata.version("pagewright")
    except importlib.metadata.PackageNotFoundError:
        return "0.0.0"

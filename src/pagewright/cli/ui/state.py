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

import sys
from dataclasses import dataclass, field

from rich.console import Console
from rich.theme import Theme

THEME = Theme(
    {
        "panel": "cyan",
        "muted": "dim",
        "page": "bold",
    }
)


def stream_is_tty(stream) -> bool:
    try:
        return bool(stream is not None and stream.isatty())
    except (OSError, ValueError, AttributeError):
        return False


def _console(*, stderr: bool) -> Console:
    stream = sys.__stderr__ if stderr else sys.__stdout__
    return Console(stderr=stderr, theme=THEME, force_terminal=stream_is_tty(stream))


@dataclass
class UIContext:
    """The pair of consoles every command prints through."""

    theme: Theme = THEME
    console: Console = field(default_factory=lambda: _console(stderr=False))
    console_err: Console = field(default_factory=lambda: _console(stderr=True))

    def configure(self, *, no_color: bool) -> None:
        for target in (self.console, self.console_err):
            target.no_color = no_color


DEFAULT_CONTEXT = UIContext()

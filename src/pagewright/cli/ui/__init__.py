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

from .state import DEFAULT_CONTEXT, THEME, UIContext, stream_is_tty
from .tables import build_kv_table, panel

console = DEFAULT_CONTEXT.console
console_err = DEFAULT_CONTEXT.console_err


def configure_ui(*, no_color: bool, context: UIContext | None = None) -> None:
    (context or DEFAULT_CONTEXT).configure(no_color=no_color)


__all__ = [
    "THEME",
    "UIContext",
    "build_kv_table",
    "configure_ui",
    "console",
    "console_err",
    "panel",
    "stream_is_tty",
]

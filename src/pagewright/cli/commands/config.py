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

import typer

from ...config import init_user_config, load_app_config, resolve_config_path
from ..core.common import _config_source, _ctx_value, _run_cli
from ..ui import build_kv_table, configure_ui, console, panel

_CONFIG_HELP = (
    "Show the active TOML config and the layout it produces.\n\n"
    "The config is picked from --config, $PAGEWRIGHT_CONFIG, the user config\n"
    "directory, then the packaged default for the paper size.\n\n"
    "Examples:\n"
    "  pagewright config\n"
    "  pagewright config --print-path\n"
    "  pagewright --paper letter config --init\n"
)


def register(app: typer.Typer) -> None:
    app.command(help=_CONFIG_HELP)(config)


def config(
    ctx: typer.Context,
    print_path: bool = typer.Option(
        False,
        "--print-path",
        help="Print the resolved config path and exit.",
        rich_help_panel="Behavior",
    ),
    init: bool = typer.Option(
        False,
        "--init",
        help="Copy the packaged defaults to the user config directory.",
        rich_help_panel="Behavior",
    ),
) -> None:
    quiet_value = bool(_ctx_value(ctx, "quiet"))
    debug_value = bool(_ctx_value(ctx, "debug"))

    def _run() -> None:
        config_value, paper_value = _config_source(ctx)
        if init:
            path = init_user_config(paper_value)
            if not quiet_value:
                console.print(f"User config ready at {path}")
            return
        if print_path:
            console.print(str(resolve_config_path(config_value, paper_size=paper_value)))
            return
        app_config = load_app_config(config_value, paper_size=paper_value)
        if app_config.ui.no_color:
            configure_ui(no_color=True)
        if quiet_value:
            return
        layout = app_config.layout
        page = layout.page
        pagination = layout.pagination
        faces = ", ".join(
            f"{font.name} (rtl)" if font.rtl else font.name for font in app_config.fonts
        )
        rows = [
            ("Config", str(app_config.path)),
            ("Paper", f"{page.size} {page.width_mm:g} x {page.height_mm:g} mm"),
            ("Margin", f"{page.margin_mm:g} mm"),
            ("Minimum fragment", f"{pagination.minimum_fragment_mm:g} mm"),
            ("Max pages", str(pagination.max_pages)),
            ("Fonts", faces),
            ("Alternate face", app_config.alternate_face or "-"),
        ]
        console.print(panel("Configuration", build_kv_table(rows)))

    _run_cli(_run, debug=debug_value)

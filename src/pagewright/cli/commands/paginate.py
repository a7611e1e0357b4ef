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

from pathlib import Path

import typer

from ...config import build_font_table, load_app_config
from ...core.document_io import load_document
from ...layout.paginate import Paginator
from ...render.json_render import result_to_json
from ...render.pdf_render import render_pdf
from ..core.common import _config_source, _ctx_value, _run_cli
from ..core.log import _warn
from ..ui import configure_ui, console
from ..ui.summary import print_page_table, print_pagination_summary

_PAGINATE_HELP = (
    "Lay out a JSON report document onto fixed-size pages.\n\n"
    "Writes a PDF next to the document unless --output is given. With --json the\n"
    "placements are printed instead, and a PDF is only written when --output is set.\n\n"
    "Examples:\n"
    "  pagewright paginate report.json\n"
    "  pagewright paginate report.json -o out/report.pdf\n"
    "  pagewright --paper letter paginate report.json --max-pages 10\n"
    "  pagewright paginate report.json --json > placements.json\n"
)


def register(app: typer.Typer) -> None:
    app.command(help=_PAGINATE_HELP)(paginate)


def paginate(
    ctx: typer.Context,
    document: Path = typer.Argument(..., help="Report document (JSON)."),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="PDF output path (defaults to the document name with .pdf).",
        rich_help_panel="Outputs",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Print placement instructions as JSON.",
        rich_help_panel="Outputs",
    ),
    max_pages: int | None = typer.Option(
        None,
        "--max-pages",
        min=1,
        help="Stop after this many pages and report the rest as truncated.",
        rich_help_panel="Layout",
    ),
    min_fragment: float | None = typer.Option(
        None,
        "--min-fragment",
        min=0.0,
        help="Smallest piece of a split section allowed at a page edge (mm).",
        rich_help_panel="Layout",
    ),
) -> None:
    quiet_flag = bool(_ctx_value(ctx, "quiet"))
    debug_value = bool(_ctx_value(ctx, "debug"))

    def _run() -> None:
        config_value, paper_value = _config_source(ctx)
        app_config = load_app_config(config_value, paper_size=paper_value)
        quiet_value = quiet_flag or app_config.ui.quiet
        if app_config.ui.no_color:
            configure_ui(no_color=True)
        layout = app_config.layout
        overrides: dict[str, object] = {}
        if max_pages is not None:
            overrides["max_pages"] = max_pages
        if min_fragment is not None:
            overrides["minimum_fragment_mm"] = min_fragment
        if overrides:
            layout = layout.with_pagination(**overrides)

        fonts = build_font_table(app_config)
        content = load_document(document)
        result = Paginator(layout, fonts).paginate(content)

        output_path: Path | None = output
        if output_path is None and not json_output:
            output_path = document.with_suffix(".pdf")
        if output_path is not None:
            render_pdf(result, layout, fonts, output_path)

        if result.truncated is not None:
            _warn(result.truncated.message(), quiet=quiet_value)
        if json_output:
            console.print(result_to_json(result), markup=False, highlight=False, soft_wrap=True)
            return
        print_pagination_summary(result, content, output_path, quiet=quiet_value)
        if debug_value and not quiet_value:
            print_page_table(result)

    _run_cli(_run, debug=debug_value)

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

from collections import Counter
from pathlib import Path

from rich import box
from rich.table import Table

from ...core.models import ContentDocument
from ...layout.types import ImageRun, PaginationResult, Rect, TextRun
from . import console
from .tables import build_kv_table, panel


def print_pagination_summary(
    result: PaginationResult,
    document: ContentDocument,
    output_path: Path | None,
    *,
    quiet: bool,
) -> None:
    if quiet:
        return
    rows = [
        ("Title", document.title),
        ("Sections", str(len(document.renderable_sections()))),
        ("Pages", str(result.page_count)),
        ("Placements", str(len(result.instructions))),
        ("Continuations", str(len(result.continuation_headers))),
    ]
    if result.truncated is not None:
        rows.append(("Truncated", f"{result.truncated.sections_remaining} sections"))
    if output_path is not None:
        rows.append(("Output", str(output_path)))
    console.print(panel("Pagination summary", build_kv_table(rows)))


def _kind(drawable: object) -> str:
    if isinstance(drawable, TextRun):
        return "text"
    if isinstance(drawable, Rect):
        return "rect"
    if isinstance(drawable, ImageRun):
        return "image"
    return type(drawable).__name__


def build_page_table(result: PaginationResult) -> Table:
    """One row per page: placement counts and the lowest point drawn."""
    continued = {header.page_index: header for header in result.continuation_headers}
    table = Table(title="Pages", box=box.SIMPLE, show_lines=False)
    table.add_column("Page", style="page", justify="right", no_wrap=True)
    table.add_column("Text", justify="right")
    table.add_column("Rects", justify="right")
    table.add_column("Images", justify="right")
    table.add_column("Bottom (mm)", justify="right")
    table.add_column("Continues", style="muted")
    for page_index in range(result.page_count):
        placements = result.for_page(page_index)
        counts = Counter(_kind(item.drawable) for item in placements)
        lowest = max(
            (item.drawable.y + item.drawable.height for item in placements),
            default=0.0,
        )
        header = continued.get(page_index)
        table.add_row(
            str(page_index + 1),
            str(counts["text"]),
            str(counts["rect"]),
            str(counts["image"]),
            f"{lowest:.1f}",
            (header.section_title or "") if header is not None else "",
        )
    return table


def print_page_table(result: PaginationResult) -> None:
    console.print(build_page_table(result))

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

import hashlib
import json
from typing import Any

from ..layout.types import PaginationResult
from .pdf_render import render_placements


def _mm(value: float) -> float:
    return round(value, 3)


class JsonRenderSink:
    """Collect placements as plain dicts grouped by page."""

    def __init__(self, page_count: int) -> None:
        self.pages: list[list[dict[str, Any]]] = [[] for _ in range(page_count)]

    def _page(self, page_index: int) -> list[dict[str, Any]]:
        while len(self.pages) <= page_index:
            self.pages.append([])
        return self.pages[page_index]

    def draw_text_run(
        self,
        text: str,
        x: float,
        y: float,
        style: str,
        *,
        page_index: int,
        height: float,
        face: str | None = None,
    ) -> None:
        item: dict[str, Any] = {
            "kind": "text",
            "x": _mm(x),
            "y": _mm(y),
            "height": _mm(height),
            "style": style,
            "text": text,
        }
        if face is not None:
            item["face"] = face
        self._page(page_index).append(item)

    def draw_rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        fill: str | None,
        *,
        page_index: int,
        stroke: str | None = None,
        line_width: float = 0.0,
    ) -> None:
        self._page(page_index).append(
            {
                "kind": "rect",
                "x": _mm(x),
                "y": _mm(y),
                "width": _mm(width),
                "height": _mm(height),
                "fill": fill,
                "stroke": stroke,
                "line_width": _mm(line_width),
            }
        )

    def draw_image(
        self,
        data: bytes,
        x: float,
        y: float,
        width: float,
        height: float,
        *,
        page_index: int,
    ) -> None:
        self._page(page_index).append(
            {
                "kind": "image",
                "x": _mm(x),
                "y": _mm(y),
                "width": _mm(width),
                "height": _mm(height),
                "bytes": len(data),
                "sha256": hashlib.sha256(data).hexdigest(),
            }
        )


def result_to_dict(result: PaginationResult) -> dict[str, Any]:
    sink = JsonRenderSink(result.page_count)
    render_placements(result, sink)
    truncated = result.truncated
    return {
        "page_count": result.page_count,
        "truncated": None
        if truncated is None
        else {
            "max_pages": truncated.max_pages,
            "section_index": truncated.section_index,
            "sections_remaining": truncated.sections_remaining,
        },
        "continuation_headers": [
            {
                "page_index": header.page_index,
                "title": header.title,
                "page_label": header.page_label,
                "section_title": header.section_title,
                "height": _mm(header.height),
            }
            for header in result.continuation_headers
        ],
        "pages": [
            {"page_index": index, "placements": placements}
            for index, placements in enumerate(sink.pages)
        ],
    }


def result_to_json(result: PaginationResult, *, indent: int | None = 2) -> str:
    return json.dumps(result_to_dict(result), indent=indent, ensure_ascii=False)


__all__ = ["JsonRenderSink", "result_to_dict", "result_to_json"]

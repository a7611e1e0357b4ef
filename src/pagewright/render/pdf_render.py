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

import io
from pathlib import Path
from typing import Any, Protocol, cast

from fpdf import FPDF
from fpdf.errors import FPDFException

from ..layout.spec import LayoutSpec
from ..layout.types import ImageRun, PaginationResult, Rect, TextRun
from ..text.metrics import FontTable, MeasurementFailure


class RenderSink(Protocol):
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
    ) -> None: ...

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
    ) -> None: ...

    def draw_image(
        self,
        data: bytes,
        x: float,
        y: float,
        width: float,
        height: float,
        *,
        page_index: int,
    ) -> None: ...


def render_placements(result: PaginationResult, sink: RenderSink) -> None:
    """Hand every placement to ``sink`` in order; no layout decisions happen here."""
    for instruction in result.instructions:
        drawable = instruction.drawable
        page_index = instruction.page_index
        if isinstance(drawable, TextRun):
            sink.draw_text_run(
                drawable.text,
                drawable.x,
                drawable.y,
                drawable.style,
                page_index=page_index,
                height=drawable.height,
                face=drawable.face,
            )
        elif isinstance(drawable, Rect):
            sink.draw_rect(
                drawable.x,
                drawable.y,
                drawable.width,
                drawable.height,
                drawable.fill,
                page_index=page_index,
                stroke=drawable.stroke,
                line_width=drawable.line_width,
            )
        elif isinstance(drawable, ImageRun):
            sink.draw_image(
                drawable.data,
                drawable.x,
                drawable.y,
                drawable.width,
                drawable.height,
                page_index=page_index,
            )
        else:
            raise TypeError(f"unsupported drawable: {type(drawable).__name__}")


class FpdfRenderSink:
    """Paint placements onto an fpdf2 document, one page per page index."""

    def __init__(self, spec: LayoutSpec, fonts: FontTable) -> None:
        self._spec = spec
        self._fonts = fonts
        page = spec.page
        self._pdf = FPDF(unit="mm", format=cast(Any, (page.width_mm, page.height_mm)))
        self._pdf.set_auto_page_break(False)
        self._pdf.set_margin(0)
        self._pdf.c_margin = 0
        self._page_count = 0
        self._families: dict[str, str] = {}
        for name in fonts.names():
            self._families[name] = self._register_face(name)

    @property
    def page_count(self) -> int:
        return self._page_count

    def _register_face(self, name: str) -> str:
        backend = self._fonts.get(name)
        family = getattr(backend, "family", None)
        if not isinstance(family, str):
            raise MeasurementFailure(f"font {name} cannot be drawn with fpdf2")
        font_files: dict[str, Path] = getattr(backend, "font_files", {})
        for style, path in font_files.items():
            self._pdf.add_font(family, style=style, fname=str(path))
        return family

    def _ensure_page(self, page_index: int) -> None:
        while self._page_count <= page_index:
            self._pdf.add_page()
            self._page_count += 1
        if self._pdf.page != page_index + 1:
            self._pdf.page = page_index + 1

    def _rgb(self, token: str) -> tuple[int, int, int]:
        try:
            return self._spec.colors[token]
        except KeyError:
            raise ValueError(f"unknown color: {token}") from None

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
        self._ensure_page(page_index)
        style_spec = self._spec.styles[style]
        family = self._families[face or style_spec.face]
        try:
            self._pdf.set_font(
                family,
                style="B" if style_spec.weight == "bold" else "",
                size=style_spec.size_pt,
            )
            self._pdf.set_text_color(*self._rgb(style_spec.color))
            self._pdf.set_xy(x, y)
            width = self._pdf.get_string_width(text)
            self._pdf.cell(w=width, h=height, text=text)
        except FPDFException as exc:
            raise MeasurementFailure(f"cannot draw text with font {family}: {exc}") from exc

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
        self._ensure_page(page_index)
        mode = ""
        if fill is not None:
            self._pdf.set_fill_color(*self._rgb(fill))
            mode += "F"
        if stroke is not None and line_width > 0:
            self._pdf.set_draw_color(*self._rgb(stroke))
            self._pdf.set_line_width(line_width)
            mode = "DF" if mode else "D"
        if not mode:
            return
        self._pdf.rect(x, y, width, height, style=mode)

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
        self._ensure_page(page_index)
        self._pdf.image(io.BytesIO(data), x=x, y=y, w=width, h=height)

    def output(self, path: str | Path) -> Path:
        if self._page_count == 0:
            self._ensure_page(0)
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        self._pdf.output(str(target))
        return target


def render_pdf(
    result: PaginationResult,
    spec: LayoutSpec,
    fonts: FontTable,
    output_path: str | Path,
) -> Path:
    sink = FpdfRenderSink(spec, fonts)
    render_placements(result, sink)
    return sink.output(output_path)


__all__ = ["FpdfRenderSink", "RenderSink", "render_pdf", "render_placements"]

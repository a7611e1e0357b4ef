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

from dataclasses import dataclass
from typing import Callable, Literal

from ..core.bounds import LAYOUT_EPSILON_MM
from ..core.models import ContentDocument
from ..text.bidi import visual_line
from ..text.metrics import TextMetrics
from ..text.sanitize import sanitize
from .geometry import PageGeometry
from .spec import LayoutSpec
from .types import Drawable, Rect, TextRun

ELLIPSIS = "..."


@dataclass(frozen=True)
class HeaderBand:
    """Header drawables in page coordinates; ``height`` is measured from the content top."""

    height: float
    drawables: tuple[Drawable, ...]
    title: str = ""
    page_label: str = ""
    section_title: str | None = None


def shorten(text: str, max_width: float, width_of: Callable[[str], float]) -> str:
    """Trim ``text`` at a word boundary until it fits, marking the cut with an ellipsis."""
    if width_of(text) <= max_width:
        return text
    words = text.split(" ")
    while len(words) > 1:
        words.pop()
        candidate = " ".join(words).rstrip() + ELLIPSIS
        if width_of(candidate) <= max_width:
            return candidate
    chars = text
    while chars and width_of(chars + ELLIPSIS) > max_width:
        chars = chars[:-1]
    return chars + ELLIPSIS if chars else ""


class HeaderBuilder:
    def __init__(self, metrics: TextMetrics, spec: LayoutSpec, geometry: PageGeometry) -> None:
        self._metrics = metrics
        self._spec = spec
        self._geometry = geometry

    def _run(
        self,
        text: str,
        style_name: str,
        y: float,
        *,
        align: Literal["left", "right"] = "left",
    ) -> TextRun:
        geometry = self._geometry
        face = self._metrics.fonts.face_for(text, self._metrics.style(style_name).face)
        visual = visual_line(text, supports_rtl=face.supports_rtl)
        width = self._metrics.text_width(text, style_name, face=face.name)
        if align == "right" or visual.align == "right":
            x = geometry.content_left + geometry.content_width - width
        else:
            x = geometry.content_left
        return TextRun(
            x=x,
            y=y,
            text=visual.text,
            style=style_name,
            width=width,
            height=self._metrics.line_height(style_name),
            face=face.name,
        )

    def _rule(self, y: float) -> Rect:
        header = self._spec.header
        return Rect(
            x=self._geometry.content_left,
            y=y,
            width=self._geometry.content_width,
            height=header.rule_thickness_mm,
            fill=header.rule_color,
        )

    def _close(
        self,
        drawables: list[Drawable],
        y: float,
        *,
        title: str,
        page_label: str,
        section_title: str | None = None,
    ) -> HeaderBand:
        header = self._spec.header
        rule_y = y + header.rule_gap_mm
        drawables.append(self._rule(rule_y))
        bottom = rule_y + header.rule_thickness_mm + header.content_gap_mm
        return HeaderBand(
            height=bottom - self._geometry.content_top,
            drawables=tuple(drawables),
            title=title,
            page_label=page_label,
            section_title=section_title,
        )

    def first_page(self, document: ContentDocument) -> HeaderBand:
        """Title and subtitle band of page one.

        The band never grows past the point where less than the minimum
        fragment of content would fit below it. A title cut short ends with an
        ellipsis; subtitles that no longer fit are dropped.
        """
        header = self._spec.header
        limit = self._first_band_limit()
        drawables: list[Drawable] = []
        y = self._geometry.content_top
        title = sanitize(document.title).strip()
        complete = True
        if title:
            y, complete = self._stack(drawables, title, header.title_style, y, limit)
        for subtitle in document.subtitle_lines:
            text = sanitize(subtitle).strip()
            if not text:
                continue
            if not complete or y + header.stack_gap_mm > limit:
                break
            y, complete = self._stack(
                drawables, text, header.subtitle_style, y + header.stack_gap_mm, limit
            )
        return self._close(drawables, y, title=title, page_label=self._page_label(1))

    def _first_band_limit(self) -> float:
        header = self._spec.header
        return (
            self._geometry.content_bottom
            - self._spec.pagination.minimum_fragment_mm
            - header.rule_gap_mm
            - header.rule_thickness_mm
            - header.content_gap_mm
        )

    def _stack(
        self,
        drawables: list[Drawable],
        text: str,
        style_name: str,
        y: float,
        limit: float,
    ) -> tuple[float, bool]:
        """Append the wrapped lines of ``text`` that end above ``limit``."""
        width = self._geometry.content_width
        measured = self._metrics.measure_style(text, style_name, width)
        lines = list(measured.lines)
        room = max(0, int((limit - y + LAYOUT_EPSILON_MM) // measured.line_height))
        complete = room >= len(lines)
        if not complete:
            kept = lines[:room]
            if kept:
                rest = " ".join(line for line in lines[room - 1 :] if line)
                kept[-1] = shorten(
                    rest, width, lambda value: self._metrics.text_width(value, style_name)
                )
            lines = kept
        for line in lines:
            if line:
                drawables.append(self._run(line, style_name, y))
            y += measured.line_height
        return y, complete

    def continuation(
        self, title: str, page_number: int, section_title: str | None = None
    ) -> HeaderBand:
        header = self._spec.header
        width = self._geometry.content_width
        y = self._geometry.content_top

        page_label = self._page_label(page_number)
        meta = self._run(page_label, header.continuation_meta_style, y, align="right")
        title_room = width - meta.width - header.column_gap_mm
        title_line = self._fit_label(
            header.title_page_label,
            "title",
            sanitize(title).strip(),
            header.continuation_style,
            title_room,
            page=page_number,
        )
        drawables: list[Drawable] = [meta]
        if title_line:
            drawables.insert(0, self._run(title_line, header.continuation_style, y))
        y += max(
            self._metrics.line_height(header.continuation_style),
            self._metrics.line_height(header.continuation_meta_style),
        )

        section_line = None
        if section_title is not None:
            y += header.stack_gap_mm
            section_line = self._fit_label(
                header.continued_label,
                "section",
                sanitize(section_title).strip(),
                header.continuation_section_style,
                width,
            )
            if section_line:
                drawables.append(self._run(section_line, header.continuation_section_style, y))
            y += self._metrics.line_height(header.continuation_section_style)
        return self._close(
            drawables,
            y,
            title=title_line,
            page_label=page_label,
            section_title=section_line,
        )

    def continuation_height(self, with_section: bool) -> float:
        return self.continuation("", 2, "" if with_section else None).height

    def _page_label(self, page_number: int) -> str:
        return self._spec.header.page_label.format(page=page_number)

    def _fit_label(
        self,
        template: str,
        field: str,
        value: str,
        style_name: str,
        max_width: float,
        **extra: object,
    ) -> str:
        def width_of(text: str) -> float:
            return self._metrics.text_width(text, style_name)

        fixed = template.format(**{field: ""}, **extra)
        if not value:
            return shorten(fixed.strip(" -"), max_width, width_of)
        room = max_width - width_of(fixed)
        fitted = shorten(value, room, width_of) if room > 0 else ""
        if not fitted:
            return shorten(fixed.strip(" -"), max_width, width_of)
        return template.format(**{field: fitted}, **extra)


__all__ = ["ELLIPSIS", "HeaderBand", "HeaderBuilder", "shorten"]

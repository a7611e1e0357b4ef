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

from dataclasses import dataclass, field, replace
from typing import Literal

from ..core.bounds import DEFAULT_MAX_PAGES

Color = tuple[int, int, int]

PAPER_SIZES_MM: dict[str, tuple[float, float]] = {
    "A4": (210.0, 297.0),
    "LETTER": (215.9, 279.4),
}


@dataclass(frozen=True)
class StyleSpec:
    size_pt: float
    weight: Literal["normal", "bold"] = "normal"
    face: str = "default"
    color: str = "dark_text"


@dataclass(frozen=True)
class PageSpec:
    size: str = "A4"
    width_mm: float = 210.0
    height_mm: float = 297.0
    margin_mm: float = 20.0


@dataclass(frozen=True)
class PaginationSpec:
    minimum_fragment_mm: float = 15.0
    max_pages: int = DEFAULT_MAX_PAGES
    keep_together_ratio: float = 0.9
    prefer_together_ratio: float = 0.75
    preferred_break_slack_mm: float = 12.0


@dataclass(frozen=True)
class SpacingSpec:
    section_gap_mm: float = 6.0
    label_gap_mm: float = 1.5
    item_gap_mm: float = 1.0
    bullet_indent_mm: float = 4.0
    bullet_size_mm: float = 1.2
    heading_rule_gap_mm: float = 1.0
    heading_rule_thickness_mm: float = 0.5
    caption_gap_mm: float = 1.5


@dataclass(frozen=True)
class BoxSpec:
    grid_gutter_mm: float = 5.0
    grid_row_gap_mm: float = 3.0
    box_padding_x_mm: float = 2.0
    box_padding_top_mm: float = 2.0
    box_padding_bottom_mm: float = 2.0
    box_label_gap_mm: float = 1.0
    min_box_height_mm: float = 20.0
    box_fill: str = "light_gray"
    box_label_style: str = "box_label"
    accent_width_mm: float = 1.0
    embedded_inset_mm: float = 3.0
    embedded_padding_x_mm: float = 3.0
    embedded_padding_top_mm: float = 2.0
    embedded_padding_bottom_mm: float = 3.0
    embedded_label_gap_mm: float = 2.0
    embedded_field_gap_mm: float = 2.0
    embedded_border_mm: float = 0.3
    embedded_fill: str = "embedded_fill"
    embedded_stroke: str = "gray"
    field_label_style: str = "field_label"
    table_cell_padding_mm: float = 2.0
    table_border_mm: float = 0.2
    table_header_fill: str = "primary"
    table_stroke: str = "rule"


@dataclass(frozen=True)
class HeaderSpec:
    title_style: str = "title"
    subtitle_style: str = "subtitle"
    stack_gap_mm: float = 1.5
    rule_gap_mm: float = 2.0
    rule_thickness_mm: float = 0.5
    rule_color: str = "rule"
    content_gap_mm: float = 5.0
    column_gap_mm: float = 4.0
    continuation_style: str = "page_header"
    continuation_meta_style: str = "page_meta"
    continuation_section_style: str = "page_section"
    page_label: str = "Page {page}"
    title_page_label: str = "{title} - Page {page}"
    continued_label: str = "{section} (continued)"


def _default_styles() -> dict[str, StyleSpec]:
    return {
        "title": StyleSpec(24.0, "bold"),
        "subtitle": StyleSpec(13.0, color="gray"),
        "heading": StyleSpec(14.0, "bold", color="primary"),
        "subheading": StyleSpec(12.0, "bold", color="primary"),
        "body": StyleSpec(10.0),
        "small": StyleSpec(9.0),
        "table_header": StyleSpec(10.0, "bold", color="white"),
        "caption": StyleSpec(9.0, color="gray"),
        "box_label": StyleSpec(10.0, "bold", color="primary"),
        "field_label": StyleSpec(10.0, "bold"),
        "page_header": StyleSpec(12.0, color="gray"),
        "page_meta": StyleSpec(10.0, color="gray"),
        "page_section": StyleSpec(9.0, color="gray"),
    }


def _default_colors() -> dict[str, Color]:
    return {
        "primary": (30, 58, 138),
        "dark_text": (30, 41, 59),
        "gray": (107, 114, 128),
        "light_gray": (249, 250, 251),
        "rule": (203, 213, 225),
        "white": (255, 255, 255),
        "red": (220, 38, 38),
        "orange": (234, 88, 12),
        "green": (22, 163, 74),
        "blue": (59, 130, 246),
        "purple": (147, 51, 234),
        "embedded_fill": (250, 251, 255),
    }


@dataclass(frozen=True)
class LayoutSpec:
    page: PageSpec = field(default_factory=PageSpec)
    pagination: PaginationSpec = field(default_factory=PaginationSpec)
    spacing: SpacingSpec = field(default_factory=SpacingSpec)
    box: BoxSpec = field(default_factory=BoxSpec)
    header: HeaderSpec = field(default_factory=HeaderSpec)
    styles: dict[str, StyleSpec] = field(default_factory=_default_styles)
    colors: dict[str, Color] = field(default_factory=_default_colors)

    def with_pagination(self, **overrides: object) -> "LayoutSpec":
        return replace(self, pagination=replace(self.pagination, **overrides))

    def with_page(self, **overrides: object) -> "LayoutSpec":
        return replace(self, page=replace(self.page, **overrides))

    def color(self, name: str | None) -> Color | None:
        if name is None:
            return None
        try:
            return self.colors[name]
        except KeyError:
            raise ValueError(f"unknown color: {name}") from None


def default_layout_spec(paper_size: str = "A4") -> LayoutSpec:
    normalized = paper_size.strip().upper()
    if normalized not in PAPER_SIZES_MM:
        raise ValueError(f"unknown paper size: {paper_size}")
    width_mm, height_mm = PAPER_SIZES_MM[normalized]
    return LayoutSpec(page=PageSpec(size=normalized, width_mm=width_mm, height_mm=height_mm))


__all__ = [
    "BoxSpec",
    "Color",
    "HeaderSpec",
    "LayoutSpec",
    "PAPER_SIZES_MM",
    "PageSpec",
    "PaginationSpec",
    "SpacingSpec",
    "StyleSpec",
    "default_layout_spec",
]

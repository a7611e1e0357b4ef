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

from dataclasses import dataclass, fields

from ..core.bounds import MAX_COLUMNS
from ..text.metrics import FontTable, MeasurementFailure, font_line_height
from .spec import LayoutSpec


class InvalidGeometry(ValueError):
    """The configured page cannot hold any content."""


@dataclass(frozen=True)
class PageGeometry:
    page_width: float
    page_height: float
    margin: float

    @property
    def content_left(self) -> float:
        return self.margin

    @property
    def content_top(self) -> float:
        return self.margin

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def content_height(self) -> float:
        return self.page_height - 2 * self.margin

    @property
    def content_bottom(self) -> float:
        return self.page_height - self.margin


def column_width(total_width: float, columns: int, gutter: float) -> float:
    if columns < 1:
        raise InvalidGeometry("column count must be at least 1")
    width = (total_width - gutter * (columns - 1)) / columns
    if width <= 0:
        raise InvalidGeometry(
            f"{columns} columns with a {gutter} mm gutter do not fit in {total_width} mm"
        )
    return width


def _require_non_negative(section: object, prefix: str) -> None:
    for item in fields(section):
        value = getattr(section, item.name)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        if value < 0:
            raise InvalidGeometry(f"{prefix}.{item.name} must be non-negative")


def validate_layout(spec: LayoutSpec, fonts: FontTable) -> PageGeometry:
    """Reject a layout before any text is measured."""
    page = spec.page
    if page.width_mm <= 0 or page.height_mm <= 0:
        raise InvalidGeometry("page width and height must be positive")
    if page.margin_mm < 0:
        raise InvalidGeometry("page.margin_mm must be non-negative")
    geometry = PageGeometry(page.width_mm, page.height_mm, page.margin_mm)
    if geometry.content_width <= 0:
        raise InvalidGeometry(
            f"content width is {geometry.content_width:.2f} mm after margins; must be positive"
        )
    if geometry.content_height <= 0:
        raise InvalidGeometry(
            f"content height is {geometry.content_height:.2f} mm after margins; must be positive"
        )

    pagination = spec.pagination
    if pagination.max_pages < 1:
        raise InvalidGeometry("pagination.max_pages must be at least 1")
    _require_non_negative(pagination, "pagination")
    for name in ("keep_together_ratio", "prefer_together_ratio"):
        ratio = getattr(pagination, name)
        if not 0 < ratio <= 1:
            raise InvalidGeometry(f"pagination.{name} must be in (0, 1]")
    if pagination.minimum_fragment_mm >= geometry.content_height:
        raise InvalidGeometry("pagination.minimum_fragment_mm must be smaller than a page")
    _require_non_negative(spec.spacing, "spacing")
    _require_non_negative(spec.box, "box")
    _require_non_negative(spec.header, "header")
    column_width(geometry.content_width, MAX_COLUMNS, spec.box.grid_gutter_mm)

    header = spec.header
    for name in (
        header.title_style,
        header.subtitle_style,
        header.continuation_style,
        header.continuation_meta_style,
        header.continuation_section_style,
    ):
        if name not in spec.styles:
            raise InvalidGeometry(f"header style not configured: {name}")

    for name, style in spec.styles.items():
        if style.size_pt <= 0:
            raise InvalidGeometry(f"styles.{name}.size_pt must be positive")
        if style.color not in spec.colors:
            raise InvalidGeometry(f"styles.{name}.color is not in the palette: {style.color}")
        try:
            backend = fonts.get(style.face)
        except MeasurementFailure as exc:
            raise InvalidGeometry(f"styles.{name}: {exc}") from exc
        line_height = font_line_height(style.size_pt, backend.line_height_factor)
        if line_height > geometry.content_height:
            raise InvalidGeometry(f"styles.{name}: one line is taller than the page content area")
    return geometry


__all__ = ["InvalidGeometry", "PageGeometry", "column_width", "validate_layout"]

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

"""Box Layout Engine: size a section and place its interior in one pass.

Every ``_layout_*`` function returns the block height together with the
relative drawables, so the height used for pagination is, by construction,
the height of what gets painted.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Sequence

from ..core.models import (
    BulletList,
    EmbeddedBlock,
    Figure,
    GridBox,
    Heading,
    KeyValueGrid,
    Paragraph,
    Section,
    Table,
    TableColumn,
)
from ..text.bidi import visual_line
from ..text.metrics import TextMetrics, px_to_mm
from ..text.sanitize import has_text
from .geometry import column_width as split_columns
from .spec import LayoutSpec
from .types import Drawable, ImageRun, LineUnit, MeasuredBlock, Rect, TextRun


def _count_lines(units: Sequence[LineUnit]) -> int:
    return sum(1 for unit in units for item in unit.drawables if isinstance(item, TextRun))


def _content_bottom(units: Sequence[LineUnit], default: float) -> float:
    return max((unit.bottom for unit in units), default=default)


class BoxLayoutEngine:
    def __init__(
        self,
        metrics: TextMetrics,
        spec: LayoutSpec,
        *,
        figure_max_height: float | None = None,
    ) -> None:
        self._metrics = metrics
        self._spec = spec
        self._figure_max_height = figure_max_height

    @property
    def metrics(self) -> TextMetrics:
        return self._metrics

    def layout_block(
        self,
        section: Section,
        column_width: float,
        column_count: int | None = None,
    ) -> MeasuredBlock:
        """Measure ``section`` for a region ``column_width`` mm wide.

        ``column_count`` overrides the section's own column hint for bullet
        lists and grids; other kinds always use a single column.
        """
        if column_width <= 0:
            raise ValueError("column_width must be positive")
        if isinstance(section, Heading):
            return self._layout_heading(section, column_width)
        if isinstance(section, Paragraph):
            return self._layout_paragraph(section, column_width)
        if isinstance(section, BulletList):
            return self._layout_bullets(section, column_width, column_count or section.columns)
        if isinstance(section, KeyValueGrid):
            return self._layout_grid(section, column_width, column_count or section.columns)
        if isinstance(section, Table):
            return self._layout_table(section, column_width)
        if isinstance(section, EmbeddedBlock):
            return self._layout_embedded(section, column_width)
        if isinstance(section, Figure):
            return self._layout_figure(section, column_width)
        raise TypeError(f"unsupported section type: {type(section).__name__}")

    # Shared pieces

    def _lines(
        self,
        text: str,
        style_name: str,
        x: float,
        y: float,
        width: float,
        *,
        keep: bool = False,
    ) -> tuple[list[LineUnit], float]:
        measured = self._metrics.measure_style(text, style_name, width)
        units: list[LineUnit] = []
        top = y
        for line in measured.lines:
            drawables: tuple[Drawable, ...] = ()
            if line:
                visual = visual_line(line, supports_rtl=measured.supports_rtl)
                run_width = self._metrics.text_width(line, style_name, face=measured.face)
                run_x = x + width - run_width if visual.align == "right" else x
                drawables = (
                    TextRun(
                        x=run_x,
                        y=top,
                        text=visual.text,
                        style=style_name,
                        width=run_width,
                        height=measured.line_height,
                        face=measured.face,
                    ),
                )
            units.append(
                LineUnit(
                    top=top,
                    bottom=top + measured.line_height,
                    drawables=drawables,
                    keep_with_next=keep,
                )
            )
            top += measured.line_height
        return units, top - y

    def _label(
        self, label: str | None, style_name: str, width: float, y: float = 0.0
    ) -> tuple[list[LineUnit], float]:
        if not has_text(label):
            return [], y
        units, height = self._lines(label or "", style_name, 0.0, y, width, keep=True)
        return units, y + height + self._spec.spacing.label_gap_mm

    def _bullet_item(
        self,
        text: str,
        style_name: str,
        x: float,
        y: float,
        width: float,
    ) -> tuple[list[LineUnit], float]:
        spacing = self._spec.spacing
        units, height = self._lines(
            text, style_name, x + spacing.bullet_indent_mm, y, width - spacing.bullet_indent_mm
        )
        first = units[0]
        line_height = first.bottom - first.top
        bullet = Rect(
            x=x + (spacing.bullet_indent_mm - spacing.bullet_size_mm) / 2,
            y=first.top + (line_height - spacing.bullet_size_mm) / 2,
            width=spacing.bullet_size_mm,
            height=spacing.bullet_size_mm,
            fill=self._metrics.style(style_name).color,
        )
        units[0] = replace(first, drawables=(bullet, *first.drawables))
        return units, height

    # Section kinds

    def _layout_heading(self, section: Heading, width: float) -> MeasuredBlock:
        spacing = self._spec.spacing
        units, text_height = self._lines(section.text, section.style, 0.0, 0.0, width, keep=True)
        widest = max(
            (item.width for unit in units for item in unit.drawables if isinstance(item, TextRun)),
            default=width,
        )
        rule = Rect(
            x=0.0,
            y=text_height + spacing.heading_rule_gap_mm,
            width=min(widest, width),
            height=spacing.heading_rule_thickness_mm,
            fill=self._metrics.style(section.style).color,
        )
        height = rule.y + rule.height
        last = units[-1]
        units[-1] = replace(last, bottom=height, drawables=(*last.drawables, rule))
        return MeasuredBlock(
            section=section,
            line_count=_count_lines(units),
            height=height,
            units=tuple(units),
        )

    def _layout_paragraph(self, section: Paragraph, width: float) -> MeasuredBlock:
        units, y = self._label(section.label, section.label_style, width)
        body, _ = self._lines(section.text, section.style, 0.0, y, width)
        # Blank lines from hard breaks separate paragraphs.
        preferred = [unit.bottom for unit in body if not unit.drawables]
        units.extend(body)
        return MeasuredBlock(
            section=section,
            line_count=_count_lines(units),
            height=_content_bottom(units, y),
            column_assignments=(0,) * len(body),
            units=tuple(units),
            preferred_breaks=tuple(preferred),
        )

    def _layout_bullets(self, section: BulletList, width: float, columns: int) -> MeasuredBlock:
        spacing = self._spec.spacing
        gutter = self._spec.box.grid_gutter_mm
        col_w = split_columns(width, columns, gutter)
        units, y = self._label(section.label, section.label_style, width)
        items = [item for item in section.items if has_text(item)]
        assignments: list[int] = []
        preferred: list[float] = []
        row_top = y
        for row_start in range(0, len(items), columns):
            row_height = 0.0
            for col, item in enumerate(items[row_start : row_start + columns]):
                x = col * (col_w + gutter)
                item_units, height = self._bullet_item(item, section.style, x, row_top, col_w)
                units.extend(item_units)
                assignments.append(col)
                row_height = max(row_height, height)
            preferred.append(row_top + row_height)
            row_top += row_height + spacing.item_gap_mm
        return MeasuredBlock(
            section=section,
            line_count=_count_lines(units),
            height=_content_bottom(units, y),
            column_assignments=tuple(assignments),
            units=tuple(units),
            preferred_breaks=tuple(preferred),
        )

    def _grid_box_content(
        self,
        box: GridBox,
        style_name: str,
        x: float,
        y: float,
        width: float,
    ) -> list[LineUnit]:
        spec = self._spec
        units: list[LineUnit] = []
        cursor = y
        if has_text(box.label):
            label_units, height = self._lines(
                box.label, spec.box.box_label_style, x, cursor, width, keep=True
            )
            units.extend(label_units)
            cursor += height + spec.box.box_label_gap_mm
        for fragment in box.fragments:
            if not has_text(fragment):
                continue
            fragment_units, height = self._lines(fragment, style_name, x, cursor, width)
            units.extend(fragment_units)
            cursor += height + spec.spacing.item_gap_mm
        for item in box.items:
            if not has_text(item):
                continue
            item_units, height = self._bullet_item(item, style_name, x, cursor, width)
            units.extend(item_units)
            cursor += height + spec.spacing.item_gap_mm
        return units

    def _layout_grid(self, section: KeyValueGrid, width: float, columns: int) -> MeasuredBlock:
        box_spec = self._spec.box
        col_w = split_columns(width, columns, box_spec.grid_gutter_mm)
        inner_w = col_w - 2 * box_spec.box_padding_x_mm
        if inner_w <= 0:
            inner_w = col_w
        min_height = (
            section.min_box_height_mm
            if section.min_box_height_mm is not None
            else box_spec.min_box_height_mm
        )
        units, y = self._label(section.label, section.label_style, width)
        boxes = [box for box in section.boxes if not box.is_empty()]
        frames: list[Rect] = []
        assignments: list[int] = []
        preferred: list[float] = []
        row_top = y
        for row_start in range(0, len(boxes), columns):
            row_boxes = boxes[row_start : row_start + columns]
            row_units: list[list[LineUnit]] = []
            content_heights: list[float] = []
            for col, box in enumerate(row_boxes):
                x = col * (col_w + box_spec.grid_gutter_mm)
                inner_x = x + box_spec.box_padding_x_mm
                content_top = row_top + box_spec.box_padding_top_mm
                box_units = self._grid_box_content(
                    box, section.style, inner_x, content_top, inner_w
                )
                row_units.append(box_units)
                bottom = _content_bottom(box_units, content_top)
                content_heights.append(bottom - row_top + box_spec.box_padding_bottom_mm)
                assignments.append(col)
            # Shorter boxes get blank space below their content, never stretched text.
            row_height = max(max(content_heights), min_height)
            for col, box in enumerate(row_boxes):
                x = col * (col_w + box_spec.grid_gutter_mm)
                frames.append(Rect(x, row_top, col_w, row_height, fill=box_spec.box_fill))
                if box.accent:
                    frames.append(
                        Rect(x, row_top, box_spec.accent_width_mm, row_height, fill=box.accent)
                    )
                units.extend(row_units[col])
            preferred.append(row_top + row_height)
            row_top += row_height + box_spec.grid_row_gap_mm
        height = preferred[-1] if preferred else y
        return MeasuredBlock(
            section=section,
            line_count=_count_lines(units),
            height=height,
            column_assignments=tuple(assignments),
            units=tuple(sorted(units, key=lambda unit: (unit.top, unit.bottom))),
            frames=tuple(frames),
            preferred_breaks=tuple(preferred),
        )

    def _layout_table(self, section: Table, width: float) -> MeasuredBlock:
        box_spec = self._spec.box
        pad = box_spec.table_cell_padding_mm
        widths = table_column_widths(section.columns, width)
        offsets = [sum(widths[:index]) for index in range(len(widths))]
        units, y = self._label(section.label, section.label_style, width)
        frames: list[Rect] = []
        preferred: list[float] = []

        def row(
            cells: Sequence[str], style_name: str, top: float, *, keep: bool
        ) -> tuple[list[LineUnit], float]:
            row_units: list[LineUnit] = []
            tallest = self._metrics.line_height(style_name)
            for text, x, cell_w in zip(cells, offsets, widths):
                if not has_text(text):
                    continue
                inner_w = cell_w - 2 * pad if cell_w > 2 * pad else cell_w
                cell_units, height = self._lines(
                    text, style_name, x + pad, top + pad, inner_w, keep=keep
                )
                row_units.extend(cell_units)
                tallest = max(tallest, height)
            return row_units, tallest + 2 * pad

        header_top = y
        header_units, header_h = row(
            [column.title for column in section.columns],
            section.header_style,
            header_top,
            keep=True,
        )
        header_frames = [
            Rect(0.0, header_top, sum(widths), header_h, fill=box_spec.table_header_fill)
        ]
        header_frames.extend(
            Rect(
                x,
                header_top,
                cell_w,
                header_h,
                stroke=box_spec.table_stroke,
                line_width=box_spec.table_border_mm,
            )
            for x, cell_w in zip(offsets, widths)
        )
        frames.extend(header_frames)
        units.extend(header_units)

        row_top = header_top + header_h
        for cells in section.rows:
            body_units, row_h = row(cells, section.style, row_top, keep=False)
            units.extend(body_units)
            frames.extend(
                Rect(
                    x,
                    row_top,
                    cell_w,
                    row_h,
                    stroke=box_spec.table_stroke,
                    line_width=box_spec.table_border_mm,
                )
                for x, cell_w in zip(offsets, widths)
            )
            row_top += row_h
            preferred.append(row_top)

        repeat = section.repeat_header and bool(section.rows)
        return MeasuredBlock(
            section=section,
            line_count=_count_lines(units),
            height=row_top,
            column_assignments=tuple(range(len(widths))),
            units=tuple(sorted(units, key=lambda unit: (unit.top, unit.bottom))),
            frames=tuple(frames),
            preferred_breaks=tuple(preferred),
            header_units=tuple(unit.shifted(-header_top) for unit in header_units)
            if repeat
            else (),
            header_frames=tuple(replace(rect, y=rect.y - header_top) for rect in header_frames)
            if repeat
            else (),
            header_height=header_h if repeat else 0.0,
            header_end=header_top + header_h if repeat else 0.0,
        )

    def _layout_embedded(self, section: EmbeddedBlock, width: float) -> MeasuredBlock:
        box_spec = self._spec.box
        inset = box_spec.embedded_inset_mm
        frame_w = width - 2 * inset
        inner_x = inset + box_spec.embedded_padding_x_mm
        inner_w = frame_w - 2 * box_spec.embedded_padding_x_mm
        if frame_w <= 0 or inner_w <= 0:
            inset, frame_w, inner_x, inner_w = 0.0, width, 0.0, width

        units: list[LineUnit] = []
        preferred: list[float] = []
        cursor = box_spec.embedded_padding_top_mm
        label_units, label_h = self._lines(
            section.label, section.label_style, inner_x, cursor, inner_w, keep=True
        )
        units.extend(label_units)
        cursor += label_h + box_spec.embedded_label_gap_mm

        fields = [field for field in section.fields if has_text(field.text)]
        for index, field in enumerate(fields):
            if has_text(field.label):
                field_label_units, field_label_h = self._lines(
                    field.label or "",
                    box_spec.field_label_style,
                    inner_x,
                    cursor,
                    inner_w,
                    keep=True,
                )
                units.extend(field_label_units)
                cursor += field_label_h
            field_units, field_h = self._lines(field.text, section.style, inner_x, cursor, inner_w)
            units.extend(field_units)
            cursor += field_h
            if index < len(fields) - 1:
                preferred.append(cursor)
                cursor += box_spec.embedded_field_gap_mm

        height = cursor + box_spec.embedded_padding_bottom_mm
        frame = Rect(
            inset,
            0.0,
            frame_w,
            height,
            fill=box_spec.embedded_fill,
            stroke=box_spec.embedded_stroke,
            line_width=box_spec.embedded_border_mm,
        )
        return MeasuredBlock(
            section=section,
            line_count=_count_lines(units),
            height=height,
            units=tuple(units),
            frames=(frame,),
            preferred_breaks=tuple(preferred),
        )

    def _layout_figure(self, section: Figure, width: float) -> MeasuredBlock:
        spacing = self._spec.spacing
        natural_w = px_to_mm(section.width_px, section.dpi)
        natural_h = px_to_mm(section.height_px, section.dpi)
        image_w = min(width, natural_w)
        image_h = natural_h * image_w / natural_w

        caption_units: list[LineUnit] = []
        caption_h = 0.0
        if has_text(section.caption):
            caption_units, caption_h = self._lines(
                section.caption or "", section.caption_style, 0.0, 0.0, width
            )
            caption_h += spacing.caption_gap_mm
        if self._figure_max_height is not None:
            room = self._figure_max_height - caption_h
            if 0 < room < image_h:
                image_w = image_w * room / image_h
                image_h = room

        image = ImageRun(
            x=(width - image_w) / 2,
            y=0.0,
            width=image_w,
            height=image_h,
            data=section.data,
        )
        units = [LineUnit(0.0, image_h, (image,), keep_with_next=bool(caption_units))]
        units.extend(
            unit.shifted(image_h + spacing.caption_gap_mm) for unit in caption_units
        )
        return MeasuredBlock(
            section=section,
            line_count=_count_lines(units),
            height=_content_bottom(units, image_h),
            units=tuple(units),
        )


def table_column_widths(columns: Sequence[TableColumn], width: float) -> tuple[float, ...]:
    """Explicit widths are honored; the rest of the row is shared evenly."""
    explicit = sum(column.width_mm or 0.0 for column in columns)
    flexible = sum(1 for column in columns if column.width_mm is None)
    if flexible:
        remaining = width - explicit
        if remaining <= 0:
            return tuple(width / len(columns) for _ in columns)
        share = remaining / flexible
        return tuple(column.width_mm if column.width_mm is not None else share for column in columns)
    scale = width / explicit if explicit > width else 1.0
    return tuple((column.width_mm or 0.0) * scale for column in columns)


__all__ = ["BoxLayoutEngine", "table_column_widths"]

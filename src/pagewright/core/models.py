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
from enum import Enum
from typing import Union

from ..text.sanitize import has_text, sanitize
from .bounds import MAX_COLUMNS, MIN_COLUMNS


class KeepPolicy(str, Enum):
    MUST_KEEP_TOGETHER = "must-keep-together"
    PREFER_TOGETHER = "prefer-together"
    SPLITTABLE = "splittable"


def _check_columns(columns: int, *, label: str) -> None:
    if not MIN_COLUMNS <= columns <= MAX_COLUMNS:
        raise ValueError(f"{label} columns must be between {MIN_COLUMNS} and {MAX_COLUMNS}")


@dataclass(frozen=True)
class Heading:
    text: str
    style: str = "heading"

    def is_empty(self) -> bool:
        return not has_text(self.text)

    @property
    def title(self) -> str:
        return sanitize(self.text).strip()


@dataclass(frozen=True)
class Paragraph:
    text: str
    label: str | None = None
    style: str = "body"
    label_style: str = "subheading"
    keep: KeepPolicy = KeepPolicy.SPLITTABLE

    def is_empty(self) -> bool:
        return not has_text(self.text)

    @property
    def title(self) -> str | None:
        return self.label


@dataclass(frozen=True)
class BulletList:
    items: tuple[str, ...]
    label: str | None = None
    columns: int = 1
    style: str = "body"
    label_style: str = "subheading"
    keep: KeepPolicy = KeepPolicy.SPLITTABLE

    def __post_init__(self) -> None:
        _check_columns(self.columns, label="bullet list")

    def is_empty(self) -> bool:
        return not any(has_text(item) for item in self.items)

    @property
    def title(self) -> str | None:
        return self.label


@dataclass(frozen=True)
class GridBox:
    label: str = ""
    fragments: tuple[str, ...] = ()
    items: tuple[str, ...] = ()
    accent: str | None = None

    def is_empty(self) -> bool:
        return not any(has_text(text) for text in (*self.fragments, *self.items))


@dataclass(frozen=True)
class KeyValueGrid:
    """Labeled boxes arranged row-major over two or three columns."""

    boxes: tuple[GridBox, ...]
    columns: int = 2
    label: str | None = None
    style: str = "small"
    label_style: str = "subheading"
    min_box_height_mm: float | None = None
    keep: KeepPolicy = KeepPolicy.SPLITTABLE

    def __post_init__(self) -> None:
        _check_columns(self.columns, label="grid")
        if self.min_box_height_mm is not None and self.min_box_height_mm < 0:
            raise ValueError("grid min_box_height_mm must be non-negative")

    def is_empty(self) -> bool:
        return all(box.is_empty() for box in self.boxes)

    @property
    def title(self) -> str | None:
        return self.label


@dataclass(frozen=True)
class TableColumn:
    title: str
    width_mm: float | None = None

    def __post_init__(self) -> None:
        if self.width_mm is not None and self.width_mm <= 0:
            raise ValueError("table column width_mm must be positive")


@dataclass(frozen=True)
class Table:
    columns: tuple[TableColumn, ...]
    rows: tuple[tuple[str, ...], ...]
    label: str | None = None
    style: str = "small"
    header_style: str = "table_header"
    label_style: str = "subheading"
    repeat_header: bool = True
    keep: KeepPolicy = KeepPolicy.SPLITTABLE

    def __post_init__(self) -> None:
        if not self.columns:
            raise ValueError("table requires at least one column")
        for index, row in enumerate(self.rows):
            if len(row) != len(self.columns):
                raise ValueError(
                    f"table row {index} has {len(row)} cells, expected {len(self.columns)}"
                )

    def is_empty(self) -> bool:
        return not any(has_text(cell) for row in self.rows for cell in row)

    @property
    def title(self) -> str | None:
        return self.label


@dataclass(frozen=True)
class EmbeddedField:
    text: str
    label: str | None = None


@dataclass(frozen=True)
class EmbeddedBlock:
    """Excerpt (e.g. an email template) drawn inside a bordered sub-box."""

    label: str
    fields: tuple[EmbeddedField, ...]
    style: str = "body"
    label_style: str = "subheading"
    keep: KeepPolicy = KeepPolicy.PREFER_TOGETHER

    def is_empty(self) -> bool:
        return not any(has_text(field.text) for field in self.fields)

    @property
    def title(self) -> str | None:
        return self.label


@dataclass(frozen=True)
class Figure:
    data: bytes
    width_px: int
    height_px: int
    dpi: float = 96.0
    caption: str | None = None
    caption_style: str = "small"

    def __post_init__(self) -> None:
        if self.width_px < 0 or self.height_px < 0:
            raise ValueError("figure pixel size must be non-negative")
        if self.dpi <= 0:
            raise ValueError("figure dpi must be positive")

    def is_empty(self) -> bool:
        return not self.data or self.width_px == 0 or self.height_px == 0

    @property
    def title(self) -> str | None:
        return self.caption


Section = Union[Heading, Paragraph, BulletList, KeyValueGrid, Table, EmbeddedBlock, Figure]


@dataclass(frozen=True)
class ContentDocument:
    title: str
    sections: tuple[Section, ...]
    subtitle_lines: tuple[str, ...] = ()

    def renderable_sections(self) -> tuple[tuple[int, Section], ...]:
        """Non-empty sections with their index in the original sequence."""
        return tuple(
            (index, section)
            for index, section in enumerate(self.sections)
            if not section.is_empty()
        )


__all__ = [
    "BulletList",
    "ContentDocument",
    "EmbeddedBlock",
    "EmbeddedField",
    "Figure",
    "GridBox",
    "Heading",
    "KeepPolicy",
    "KeyValueGrid",
    "Paragraph",
    "Section",
    "Table",
    "TableColumn",
]

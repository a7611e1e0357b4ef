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

"""Load a ``ContentDocument`` from JSON.

The report assembler upstream writes one object per document::

    {"title": "...", "subtitle_lines": ["..."],
     "sections": [{"type": "paragraph", "label": "...", "text": "..."}, ...]}

Section types: ``heading``, ``paragraph``, ``bullets``, ``grid``, ``table``,
``embedded`` and ``figure``.
"""

from __future__ import annotations

import base64
import binascii
import io
import json
from pathlib import Path
from typing import Any, Callable

from PIL import Image, UnidentifiedImageError

from .bounds import MAX_COLUMNS, MAX_DOCUMENT_SECTIONS, MAX_FIGURE_BYTES, MIN_COLUMNS
from .models import (
    BulletList,
    ContentDocument,
    EmbeddedBlock,
    EmbeddedField,
    Figure,
    GridBox,
    Heading,
    KeepPolicy,
    KeyValueGrid,
    Paragraph,
    Section,
    Table,
    TableColumn,
)
from .validation import (
    optional_str,
    require_bool,
    require_dict,
    require_int_range,
    require_keys,
    require_list,
    require_number,
    require_positive_int,
    require_str,
    require_str_list,
)


def load_document(path: str | Path) -> ContentDocument:
    source = Path(path)
    try:
        data = json.loads(source.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"{source}: invalid JSON: {exc.msg} (line {exc.lineno})") from exc
    return document_from_dict(data, base_dir=source.parent)


def document_from_dict(data: object, *, base_dir: Path | None = None) -> ContentDocument:
    doc = require_dict(data, label="document")
    require_keys(doc, ("title", "sections"), label="document")
    sections_raw = require_list(doc["sections"], 0, label="sections")
    if len(sections_raw) > MAX_DOCUMENT_SECTIONS:
        raise ValueError(f"sections exceeds MAX_DOCUMENT_SECTIONS ({MAX_DOCUMENT_SECTIONS})")
    sections = tuple(
        _parse_section(item, label=f"sections[{index}]", base_dir=base_dir)
        for index, item in enumerate(sections_raw)
    )
    return ContentDocument(
        title=require_str(doc["title"], label="title"),
        sections=sections,
        subtitle_lines=require_str_list(doc.get("subtitle_lines", []), label="subtitle_lines"),
    )


def _parse_section(value: object, *, label: str, base_dir: Path | None) -> Section:
    raw = require_dict(value, label=label)
    require_keys(raw, ("type",), label=label)
    kind = require_str(raw["type"], label=f"{label}.type").strip().lower()
    parser = _SECTION_PARSERS.get(kind)
    if parser is None:
        raise ValueError(f"{label}.type is unknown: {kind}")
    try:
        return parser(raw, label, base_dir)
    except (TypeError, ValueError) as exc:
        message = str(exc)
        if message.startswith(label):
            raise
        raise ValueError(f"{label}: {message}") from exc


def _style_kwargs(raw: dict[str, Any], label: str, *names: str) -> dict[str, Any]:
    kwargs: dict[str, Any] = {}
    for name in names:
        if name in raw:
            kwargs[name] = require_str(raw[name], label=f"{label}.{name}")
    if "keep" in raw:
        kwargs["keep"] = _parse_keep(raw["keep"], label=f"{label}.keep")
    return kwargs


def _parse_keep(value: object, *, label: str) -> KeepPolicy:
    text = require_str(value, label=label).strip().lower().replace("_", "-")
    try:
        return KeepPolicy(text)
    except ValueError:
        choices = ", ".join(policy.value for policy in KeepPolicy)
        raise ValueError(f"{label} must be one of: {choices}") from None


def _parse_columns(raw: dict[str, Any], label: str, default: int) -> int:
    if "columns" not in raw:
        return default
    columns = require_positive_int(raw["columns"], label=f"{label}.columns")
    return require_int_range(
        columns, min_val=MIN_COLUMNS, max_val=MAX_COLUMNS, label=f"{label}.columns"
    )


def _heading(raw: dict[str, Any], label: str, base_dir: Path | None) -> Section:
    require_keys(raw, ("text",), label=label)
    return Heading(
        text=require_str(raw["text"], label=f"{label}.text"),
        **_style_kwargs(raw, label, "style"),
    )


def _paragraph(raw: dict[str, Any], label: str, base_dir: Path | None) -> Section:
    require_keys(raw, ("text",), label=label)
    return Paragraph(
        text=require_str(raw["text"], label=f"{label}.text"),
        label=optional_str(raw.get("label"), label=f"{label}.label"),
        **_style_kwargs(raw, label, "style", "label_style"),
    )


def _bullets(raw: dict[str, Any], label: str, base_dir: Path | None) -> Section:
    require_keys(raw, ("items",), label=label)
    return BulletList(
        items=require_str_list(raw["items"], label=f"{label}.items"),
        label=optional_str(raw.get("label"), label=f"{label}.label"),
        columns=_parse_columns(raw, label, 1),
        **_style_kwargs(raw, label, "style", "label_style"),
    )


def _grid_box(value: object, label: str) -> GridBox:
    raw = require_dict(value, label=label)
    fragments = raw.get("fragments", [])
    if isinstance(fragments, str):
        fragments = [fragments]
    return GridBox(
        label=optional_str(raw.get("label"), label=f"{label}.label") or "",
        fragments=require_str_list(fragments, label=f"{label}.fragments"),
        items=require_str_list(raw.get("items", []), label=f"{label}.items"),
        accent=optional_str(raw.get("accent"), label=f"{label}.accent"),
    )


def _grid(raw: dict[str, Any], label: str, base_dir: Path | None) -> Section:
    require_keys(raw, ("boxes",), label=label)
    boxes = require_list(raw["boxes"], 0, label=f"{label}.boxes")
    min_height = raw.get("min_box_height_mm")
    return KeyValueGrid(
        boxes=tuple(_grid_box(box, f"{label}.boxes[{index}]") for index, box in enumerate(boxes)),
        columns=_parse_columns(raw, label, 2),
        label=optional_str(raw.get("label"), label=f"{label}.label"),
        min_box_height_mm=None
        if min_height is None
        else require_number(min_height, label=f"{label}.min_box_height_mm"),
        **_style_kwargs(raw, label, "style", "label_style"),
    )


def _table_column(value: object, label: str) -> TableColumn:
    if isinstance(value, str):
        return TableColumn(title=value)
    raw = require_dict(value, label=label)
    require_keys(raw, ("title",), label=label)
    width = raw.get("width_mm")
    return TableColumn(
        title=require_str(raw["title"], label=f"{label}.title"),
        width_mm=None if width is None else require_number(width, label=f"{label}.width_mm"),
    )


def _table(raw: dict[str, Any], label: str, base_dir: Path | None) -> Section:
    require_keys(raw, ("columns", "rows"), label=label)
    columns = require_list(raw["columns"], 1, label=f"{label}.columns")
    rows = require_list(raw["rows"], 0, label=f"{label}.rows")
    kwargs = _style_kwargs(raw, label, "style", "header_style", "label_style")
    if "repeat_header" in raw:
        kwargs["repeat_header"] = require_bool(
            raw["repeat_header"], label=f"{label}.repeat_header"
        )
    return Table(
        columns=tuple(
            _table_column(column, f"{label}.columns[{index}]")
            for index, column in enumerate(columns)
        ),
        rows=tuple(
            require_str_list(row, label=f"{label}.rows[{index}]") for index, row in enumerate(rows)
        ),
        label=optional_str(raw.get("label"), label=f"{label}.label"),
        **kwargs,
    )


def _embedded(raw: dict[str, Any], label: str, base_dir: Path | None) -> Section:
    require_keys(raw, ("label", "fields"), label=label)
    fields_raw = require_list(raw["fields"], 0, label=f"{label}.fields")
    fields: list[EmbeddedField] = []
    for index, item in enumerate(fields_raw):
        field_label = f"{label}.fields[{index}]"
        if isinstance(item, str):
            fields.append(EmbeddedField(text=item))
            continue
        field_raw = require_dict(item, label=field_label)
        require_keys(field_raw, ("text",), label=field_label)
        fields.append(
            EmbeddedField(
                text=require_str(field_raw["text"], label=f"{field_label}.text"),
                label=optional_str(field_raw.get("label"), label=f"{field_label}.label"),
            )
        )
    return EmbeddedBlock(
        label=require_str(raw["label"], label=f"{label}.label"),
        fields=tuple(fields),
        **_style_kwargs(raw, label, "style", "label_style"),
    )


def _figure_bytes(raw: dict[str, Any], label: str, base_dir: Path | None) -> bytes:
    if "data_base64" in raw:
        encoded = require_str(raw["data_base64"], label=f"{label}.data_base64")
        try:
            data = base64.b64decode(encoded, validate=True)
        except binascii.Error as exc:
            raise ValueError(f"{label}.data_base64 is not valid base64") from exc
    elif "path" in raw:
        path = Path(require_str(raw["path"], label=f"{label}.path"))
        if not path.is_absolute() and base_dir is not None:
            path = base_dir / path
        data = path.read_bytes()
    else:
        raise ValueError(f"{label} path or data_base64 is required")
    if len(data) > MAX_FIGURE_BYTES:
        raise ValueError(f"{label} exceeds MAX_FIGURE_BYTES ({MAX_FIGURE_BYTES} bytes)")
    return data


def _figure(raw: dict[str, Any], label: str, base_dir: Path | None) -> Section:
    data = _figure_bytes(raw, label, base_dir)
    width_px = raw.get("width_px")
    height_px = raw.get("height_px")
    dpi = raw.get("dpi")
    if width_px is None or height_px is None:
        width_px, height_px, image_dpi = image_size(data, label=label)
        dpi = dpi if dpi is not None else image_dpi
    kwargs: dict[str, Any] = {}
    if "caption_style" in raw:
        kwargs["caption_style"] = require_str(raw["caption_style"], label=f"{label}.caption_style")
    return Figure(
        data=data,
        width_px=require_positive_int(width_px, label=f"{label}.width_px"),
        height_px=require_positive_int(height_px, label=f"{label}.height_px"),
        dpi=96.0 if dpi is None else require_number(dpi, label=f"{label}.dpi"),
        caption=optional_str(raw.get("caption"), label=f"{label}.caption"),
        **kwargs,
    )


def image_size(data: bytes, *, label: str = "figure") -> tuple[int, int, float | None]:
    """Pixel size and horizontal DPI of an encoded raster image."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            width, height = image.size
            dpi = image.info.get("dpi")
    except UnidentifiedImageError as exc:
        raise ValueError(f"{label} is not a supported image") from exc
    if isinstance(dpi, tuple) and dpi and float(dpi[0]) > 0:
        return width, height, float(dpi[0])
    return width, height, None


_SECTION_PARSERS: dict[str, Callable[[dict[str, Any], str, Path | None], Section]] = {
    "heading": _heading,
    "paragraph": _paragraph,
    "bullets": _bullets,
    "grid": _grid,
    "table": _table,
    "embedded": _embedded,
    "figure": _figure,
}


__all__ = ["document_from_dict", "image_size", "load_document"]

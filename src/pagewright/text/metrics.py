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

import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Protocol

from fpdf import FPDF
from fpdf.errors import FPDFException

from ..layout.spec import StyleSpec
from .bidi import contains_rtl
from .sanitize import sanitize

Weight = Literal["normal", "bold"]

MM_PER_INCH = 25.4
PT_TO_MM = MM_PER_INCH / 72.0
DEFAULT_DPI = 96.0
PX_TO_MM = MM_PER_INCH / DEFAULT_DPI
DEFAULT_LINE_HEIGHT_FACTOR = 1.2


class MeasurementFailure(RuntimeError):
    """A style or face cannot be measured; the run must not continue."""


def font_line_height(size_pt: float, factor: float = DEFAULT_LINE_HEIGHT_FACTOR) -> float:
    return float(size_pt) * PT_TO_MM * float(factor)


def px_to_mm(px: float, dpi: float = DEFAULT_DPI) -> float:
    return float(px) * MM_PER_INCH / float(dpi)


class FontBackend(Protocol):
    name: str
    supports_rtl: bool
    line_height_factor: float

    def string_width(self, text: str, size_pt: float, weight: Weight) -> float: ...


class FpdfFontBackend:
    """Measure strings with fpdf2, using a core font or TTF files.

    The fpdf2 document is private to the back end and only used for metrics;
    calls are serialized because fpdf2 keeps the current font on the document.
    """

    def __init__(
        self,
        name: str,
        *,
        family: str = "helvetica",
        regular: str | Path | None = None,
        bold: str | Path | None = None,
        supports_rtl: bool = False,
        line_height_factor: float = DEFAULT_LINE_HEIGHT_FACTOR,
    ) -> None:
        if line_height_factor <= 0:
            raise ValueError(f"font {name}: line_height_factor must be positive")
        self.name = name
        self.supports_rtl = bool(supports_rtl)
        self.line_height_factor = float(line_height_factor)
        self.font_files: dict[str, Path] = {}
        self._pdf = FPDF(unit="mm")
        self._lock = threading.Lock()
        if regular is None:
            self.family = family.lower()
            return
        self.family = name
        self._register(regular, style="")
        if bold is not None:
            self._register(bold, style="B")

    def _register(self, path: str | Path, *, style: str) -> None:
        font_path = Path(path)
        if not font_path.is_file():
            raise MeasurementFailure(f"font {self.name}: file not found: {font_path}")
        try:
            self._pdf.add_font(self.family, style=style, fname=str(font_path))
        except FPDFException as exc:
            raise MeasurementFailure(f"font {self.name}: {exc}") from exc
        self.font_files[style] = font_path

    def string_width(self, text: str, size_pt: float, weight: Weight) -> float:
        style = "B" if weight == "bold" else ""
        with self._lock:
            try:
                self._pdf.set_font(self.family, style=style, size=size_pt)
                return float(self._pdf.get_string_width(text))
            except FPDFException as exc:
                raise MeasurementFailure(f"font {self.name}: cannot measure text: {exc}") from exc


class FontTable:
    def __init__(self, default: FontBackend, *, alternate: FontBackend | None = None) -> None:
        self._faces: dict[str, FontBackend] = {default.name: default}
        self._default = default.name
        self._alternate: str | None = None
        self._frozen = False
        if alternate is not None:
            self.register(alternate, alternate=True)

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def default_face(self) -> str:
        return self._default

    @property
    def alternate_face(self) -> str | None:
        return self._alternate

    def register(self, backend: FontBackend, *, alternate: bool = False) -> None:
        if self._frozen:
            raise RuntimeError("font table is frozen; register fonts before paginating")
        self._faces[backend.name] = backend
        if alternate:
            self._alternate = backend.name

    def freeze(self) -> FontTable:
        self._frozen = True
        return self

    def names(self) -> tuple[str, ...]:
        return tuple(self._faces)

    def get(self, name: str) -> FontBackend:
        try:
            return self._faces[name]
        except KeyError:
            raise MeasurementFailure(f"font face not registered: {name}") from None

    def face_for(self, text: str, preferred: str | None = None) -> FontBackend:
        """Pick the face used for both measuring and drawing text."""
        backend = self.get(preferred or self._default)
        if self._alternate is None or backend.supports_rtl or not contains_rtl(text):
            return backend
        return self._faces[self._alternate]


@dataclass(frozen=True)
class MeasuredText:
    lines: tuple[str, ...]
    line_height: float
    face: str
    supports_rtl: bool = False

    @property
    def height(self) -> float:
        return len(self.lines) * self.line_height


def wrap_text(text: str, max_width: float, width_of: Callable[[str], float]) -> list[str]:
    wrapped: list[str] = []
    for line in text.split("\n"):
        if not line.strip():
            wrapped.append("")
            continue
        words = line.split(" ")
        current = ""
        for word in words:
            candidate = word if not current else f"{current} {word}"
            if width_of(candidate) <= max_width:
                current = candidate
                continue
            if current:
                wrapped.append(current)
                current = ""
            if width_of(word) <= max_width:
                current = word
                continue
            parts: list[str] = []
            chunk = ""
            for ch in word:
                next_chunk = f"{chunk}{ch}"
                if chunk and width_of(next_chunk) > max_width:
                    parts.append(chunk)
                    chunk = ch
                else:
                    chunk = next_chunk
            if chunk:
                parts.append(chunk)
            wrapped.extend(parts[:-1])
            current = parts[-1] if parts else ""
        if current:
            wrapped.append(current)
    return wrapped


class TextMetrics:
    """Wrap and size text with the fonts that will later paint it."""

    def __init__(self, fonts: FontTable, styles: Mapping[str, StyleSpec]) -> None:
        self._fonts = fonts
        self._styles = dict(styles)

    @property
    def fonts(self) -> FontTable:
        return self._fonts

    def style(self, name: str) -> StyleSpec:
        try:
            return self._styles[name]
        except KeyError:
            raise MeasurementFailure(f"style not configured: {name}") from None

    def line_height(self, style_name: str) -> float:
        style = self.style(style_name)
        backend = self._fonts.get(style.face)
        return font_line_height(style.size_pt, backend.line_height_factor)

    def measure(
        self,
        text: str,
        font_size: float,
        weight: Weight,
        max_width: float,
        *,
        face: str | None = None,
    ) -> MeasuredText:
        if max_width <= 0:
            raise ValueError("max_width must be positive")
        clean = sanitize(text).strip()
        backend = self._fonts.face_for(clean, face)
        lines = wrap_text(
            clean,
            max_width,
            lambda value: backend.string_width(value, font_size, weight),
        )
        return MeasuredText(
            lines=tuple(lines),
            line_height=font_line_height(font_size, backend.line_height_factor),
            face=backend.name,
            supports_rtl=backend.supports_rtl,
        )

    def measure_style(self, text: str, style_name: str, max_width: float) -> MeasuredText:
        style = self.style(style_name)
        return self.measure(text, style.size_pt, style.weight, max_width, face=style.face)

    def text_width(self, text: str, style_name: str, *, face: str | None = None) -> float:
        style = self.style(style_name)
        clean = sanitize(text)
        if face is None:
            backend = self._fonts.face_for(clean, style.face)
        else:
            backend = self._fonts.get(face)
        return backend.string_width(clean, style.size_pt, style.weight)


__all__ = [
    "DEFAULT_DPI",
    "DEFAULT_LINE_HEIGHT_FACTOR",
    "FontBackend",
    "FontTable",
    "FpdfFontBackend",
    "MeasuredText",
    "MeasurementFailure",
    "PT_TO_MM",
    "PX_TO_MM",
    "TextMetrics",
    "font_line_height",
    "px_to_mm",
    "wrap_text",
]

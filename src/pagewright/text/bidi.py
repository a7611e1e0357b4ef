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

import unicodedata
from dataclasses import dataclass
from typing import Literal

from bidi.algorithm import get_display

Align = Literal["left", "right"]

_RTL_CLASSES = frozenset({"R", "AL"})
_LTR_CLASSES = frozenset({"L", "EN", "AN"})


@dataclass(frozen=True)
class VisualLine:
    text: str
    align: Align = "left"


def contains_rtl(text: str) -> bool:
    return any(unicodedata.bidirectional(ch) in _RTL_CLASSES for ch in text)


def contains_ltr(text: str) -> bool:
    """True when text has a left-to-right letter or a digit."""
    return any(unicodedata.bidirectional(ch) in _LTR_CLASSES for ch in text)


def needs_bidi(text: str) -> bool:
    """Mixed right-to-left and left-to-right/digit runs need visual reordering."""
    return contains_rtl(text) and contains_ltr(text)


def is_rtl_only(text: str) -> bool:
    return contains_rtl(text) and not contains_ltr(text)


def reorder(line: str) -> str:
    """Return the visual order of one wrapped line, anchored left-to-right.

    Only call this on lines that already went through wrapping: the reordered
    string must never be measured or split again.
    """
    if not needs_bidi(line):
        return line
    return get_display(line, base_dir="L")


def mirror(line: str) -> str:
    """Visual order of a purely right-to-left line, drawn from the right edge."""
    if not contains_rtl(line):
        return line
    return get_display(line, base_dir="R")


def visual_line(line: str, *, supports_rtl: bool) -> VisualLine:
    if not supports_rtl or not contains_rtl(line):
        return VisualLine(text=line)
    if is_rtl_only(line):
        return VisualLine(text=mirror(line), align="right")
    return VisualLine(text=reorder(line))


__all__ = [
    "Align",
    "VisualLine",
    "contains_ltr",
    "contains_rtl",
    "is_rtl_only",
    "mirror",
    "needs_bidi",
    "reorder",
    "visual_line",
]

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

import re

# C0/C1 controls except newline, zero-width characters, BOM, soft hyphen,
# directional marks, embeddings, overrides and isolates.
_STRIP_RE = re.compile(
    "[\u0000-\u0009\u000b-\u001f\u007f-\u009f\u00ad\u200b-\u200f\u202a-\u202e\u2060-\u2069\ufeff]"
)

_REPLACEMENTS = str.maketrans(
    {
        "\u2018": "'",
        "\u2019": "'",
        "\u201a": "'",
        "\u201b": "'",
        "\u2032": "'",
        "\u201c": '"',
        "\u201d": '"',
        "\u201e": '"',
        "\u201f": '"',
        "\u2033": '"',
        "\u2012": "-",
        "\u2013": "-",
        "\u2014": "-",
        "\u2015": "-",
        "\u2212": "-",
        "\u2026": "...",
        "\u00a0": " ",
        "\u2007": " ",
        "\u202f": " ",
    }
)


def sanitize(text: str | None) -> str:
    """Normalize text before it is measured or drawn.

    Every measurement and placement path goes through this one function so the
    wrap points computed while sizing match the strings handed to the sink.
    Newlines are kept as hard line breaks; tabs become spaces.
    """
    if not text:
        return ""
    normalized = text.replace("\r\n", "\n").replace("\r", "\n").replace("\t", " ")
    normalized = _STRIP_RE.sub("", normalized)
    return normalized.translate(_REPLACEMENTS)


def has_text(text: str | None) -> bool:
    """True when something visible is left after sanitizing."""
    return bool(sanitize(text).strip())


__all__ = ["has_text", "sanitize"]

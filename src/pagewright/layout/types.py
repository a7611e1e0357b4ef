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

from bisect import bisect_left, bisect_right
from dataclasses import dataclass, field, replace
from enum import Enum
from functools import cached_property
from itertools import accumulate
from typing import Union

from ..core.bounds import LAYOUT_EPSILON_MM
from ..core.models import Section


@dataclass(frozen=True)
class TextRun:
    """One already-wrapped line, in visual order; y is the top of the line box."""

    x: float
    y: float
    text: str
    style: str
    width: float
    height: float
    face: str | None = None


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    fill: str | None = None
    stroke: str | None = None
    line_width: float = 0.0


@dataclass(frozen=True)
class ImageRun:
    x: float
    y: float
    width: float
    height: float
    data: bytes = field(repr=False)


Drawable = Union[TextRun, Rect, ImageRun]


def shift(drawable: Drawable, dx: float, dy: float) -> Drawable:
    return replace(drawable, x=drawable.x + dx, y=drawable.y + dy)


def bottom_of(drawable: Drawable) -> float:
    return drawable.y + drawable.height


@dataclass(frozen=True)
class LineUnit:
    """Smallest piece of a block that moves between pages as a whole.

    ``keep_with_next`` forbids a page break directly below the unit (labels,
    table headers, heading lines).
    """

    top: float
    bottom: float
    drawables: tuple[Drawable, ...]
    keep_with_next: bool = False

    def shifted(self, dy: float) -> LineUnit:
        return LineUnit(
            top=self.top + dy,
            bottom=self.bottom + dy,
            drawables=tuple(shift(item, 0.0, dy) for item in self.drawables),
            keep_with_next=self.keep_with_next,
        )


def _clip(rect: Rect, top: float, bottom: float, dy: float = 0.0) -> Rect | None:
    start = max(rect.y, top)
    end = min(rect.y + rect.height, bottom)
    if end - start <= LAYOUT_EPSILON_MM:
        return None
    return replace(rect, y=start + dy, height=end - start)


@dataclass(frozen=True)
class MeasuredBlock:
    """A section sized for one column width; relative to the block's top-left corner."""

    section: Section
    line_count: int
    height: float
    column_assignments: tuple[int, ...] = ()
    units: tuple[LineUnit, ...] = ()
    frames: tuple[Rect, ...] = ()
    preferred_breaks: tuple[float, ...] = ()
    header_units: tuple[LineUnit, ...] = ()
    header_frames: tuple[Rect, ...] = ()
    header_height: float = 0.0
    header_end: float = 0.0

    @cached_property
    def breaks(self) -> tuple[float, ...]:
        """Offsets where the block may be cut without splitting a unit."""
        by_top = sorted(self.units, key=lambda unit: unit.top)
        tops = [unit.top for unit in by_top]
        # reach[i] is the lowest bottom among the first i + 1 units by top.
        reach = list(accumulate((unit.bottom for unit in by_top), max))
        kept = sorted(unit.bottom for unit in self.units if unit.keep_with_next)
        candidates = {unit.bottom for unit in self.units if not unit.keep_with_next}
        candidates.update(self.preferred_breaks)
        safe: list[float] = []
        for cut in sorted(candidates):
            if cut <= LAYOUT_EPSILON_MM or cut >= self.height - LAYOUT_EPSILON_MM:
                continue
            if not tops or tops[-1] < cut - LAYOUT_EPSILON_MM:
                continue
            above = bisect_left(tops, cut - LAYOUT_EPSILON_MM)
            if above and reach[above - 1] > cut + LAYOUT_EPSILON_MM:
                continue
            nearest = bisect_left(kept, cut - LAYOUT_EPSILON_MM)
            if nearest < len(kept) and kept[nearest] <= cut + LAYOUT_EPSILON_MM:
                continue
            safe.append(cut)
        return tuple(safe)

    @cached_property
    def _preferred_sorted(self) -> tuple[float, ...]:
        return tuple(sorted(self.preferred_breaks))

    @cached_property
    def _tail_tops(self) -> tuple[tuple[float, ...], tuple[float, ...]]:
        """Unit bottoms in order, with the highest top among units from there on."""
        by_bottom = sorted(self.units, key=lambda unit: unit.bottom)
        highest = list(accumulate((unit.top for unit in reversed(by_bottom)), min))
        highest.reverse()
        return tuple(unit.bottom for unit in by_bottom), tuple(highest)

    def is_preferred(self, cut: float) -> bool:
        preferred = self._preferred_sorted
        index = bisect_left(preferred, cut - LAYOUT_EPSILON_MM)
        return index < len(preferred) and preferred[index] <= cut + LAYOUT_EPSILON_MM

    def resume_offset(self, cut: float) -> float:
        """Where the tail starts: the cut, or higher when a unit straddles it."""
        bottoms, highest = self._tail_tops
        index = bisect_right(bottoms, cut + LAYOUT_EPSILON_MM)
        if index == len(bottoms):
            return self.height
        return min(cut, highest[index])

    def remainder(self, cut: float) -> float:
        resume = self.resume_offset(cut)
        if resume >= self.height:
            return 0.0
        return self.height - resume + self._repeat_header_height(resume)

    def drawables(self) -> tuple[Drawable, ...]:
        items: list[Drawable] = list(self.frames)
        for unit in self.units:
            items.extend(unit.drawables)
        return tuple(items)

    def split(self, cut: float) -> tuple[MeasuredBlock, MeasuredBlock | None]:
        """Cut the block; units crossing the cut move to the tail, frames are clipped."""
        head_units = tuple(u for u in self.units if u.bottom <= cut + LAYOUT_EPSILON_MM)
        tail_units = tuple(u for u in self.units if u.bottom > cut + LAYOUT_EPSILON_MM)
        head_frames = tuple(
            clipped for rect in self.frames if (clipped := _clip(rect, 0.0, cut)) is not None
        )
        head = replace(
            self,
            line_count=sum(1 for u in head_units for d in u.drawables if isinstance(d, TextRun)),
            height=cut,
            units=head_units,
            frames=head_frames,
            preferred_breaks=tuple(p for p in self.preferred_breaks if p < cut),
        )
        if not tail_units:
            return head, None
        resume = self.resume_offset(cut)
        header_height = self._repeat_header_height(resume)
        dy = header_height - resume
        tail_frames = [
            clipped
            for rect in self.frames
            if (clipped := _clip(rect, resume, self.height, dy)) is not None
        ]
        moved = [unit.shifted(dy) for unit in tail_units]
        if header_height:
            tail_frames = [*self.header_frames, *tail_frames]
            moved = [*self.header_units, *moved]
        tail = replace(
            self,
            line_count=sum(1 for u in moved for d in u.drawables if isinstance(d, TextRun)),
            height=self.height + dy,
            units=tuple(moved),
            frames=tuple(tail_frames),
            preferred_breaks=tuple(p + dy for p in self.preferred_breaks if p > resume),
            header_end=header_height if header_height else max(0.0, self.header_end + dy),
        )
        return head, tail

    def _repeat_header_height(self, resume: float) -> float:
        if not self.header_units or resume < self.header_end - LAYOUT_EPSILON_MM:
            return 0.0
        return self.header_height


@dataclass
class PageCursor:
    """Per-run write position; the offset never moves up within a page."""

    page_index: int = 0
    vertical_offset: float = 0.0
    continuation_title: str = ""
    page_top: float = 0.0

    def advance_to(self, offset: float) -> None:
        if offset < self.vertical_offset - LAYOUT_EPSILON_MM:
            raise RuntimeError(
                f"cursor moved up on page {self.page_index}: "
                f"{offset:.3f} < {self.vertical_offset:.3f}"
            )
        self.vertical_offset = max(self.vertical_offset, offset)

    def next_page(self, top: float, continuation_title: str = "") -> None:
        self.page_index += 1
        self.page_top = top
        self.vertical_offset = top
        self.continuation_title = continuation_title

    @property
    def at_page_top(self) -> bool:
        return self.vertical_offset <= self.page_top + LAYOUT_EPSILON_MM


@dataclass(frozen=True)
class PlacementInstruction:
    page_index: int
    drawable: Drawable


@dataclass(frozen=True)
class ContinuationHeader:
    page_index: int
    title: str
    page_label: str
    section_title: str | None
    height: float


@dataclass(frozen=True)
class ContentTruncated:
    max_pages: int
    section_index: int
    sections_remaining: int

    def message(self) -> str:
        return (
            f"page limit of {self.max_pages} reached; section {self.section_index} and "
            f"{self.sections_remaining - 1} later section(s) were not placed"
        )


class Phase(str, Enum):
    IDLE = "idle"
    PLACING = "placing"
    PAGE_BREAK = "page-break"
    DONE = "done"


@dataclass(frozen=True)
class PaginationResult:
    instructions: tuple[PlacementInstruction, ...]
    page_count: int
    continuation_headers: tuple[ContinuationHeader, ...] = ()
    truncated: ContentTruncated | None = None

    def for_page(self, page_index: int) -> tuple[PlacementInstruction, ...]:
        return tuple(item for item in self.instructions if item.page_index == page_index)


__all__ = [
    "ContentTruncated",
    "ContinuationHeader",
    "Drawable",
    "ImageRun",
    "LineUnit",
    "MeasuredBlock",
    "PageCursor",
    "PaginationResult",
    "Phase",
    "PlacementInstruction",
    "Rect",
    "TextRun",
    "bottom_of",
    "shift",
]

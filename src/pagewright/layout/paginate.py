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

from typing import Sequence

from ..core.bounds import LAYOUT_EPSILON_MM
from ..core.models import ContentDocument, Figure, Heading, KeepPolicy, Section
from ..text.metrics import FontTable, TextMetrics
from .boxes import BoxLayoutEngine
from .geometry import InvalidGeometry, PageGeometry, validate_layout
from .header import HeaderBand, HeaderBuilder
from .spec import LayoutSpec
from .types import (
    ContentTruncated,
    ContinuationHeader,
    Drawable,
    MeasuredBlock,
    PageCursor,
    PaginationResult,
    Phase,
    PlacementInstruction,
    bottom_of,
    shift,
)


def keep_policy(section: Section) -> KeepPolicy:
    if isinstance(section, (Heading, Figure)):
        return KeepPolicy.MUST_KEEP_TOGETHER
    return section.keep


class Paginator:
    """Lay a document onto pages.

    Geometry, thresholds and style faces are checked here, once; a constructed
    paginator can run any number of documents, each with its own cursor.
    """

    def __init__(self, spec: LayoutSpec, fonts: FontTable) -> None:
        self._geometry = validate_layout(spec, fonts)
        fonts.freeze()
        self._spec = spec
        self._metrics = TextMetrics(fonts, spec.styles)
        self._headers = HeaderBuilder(self._metrics, spec, self._geometry)
        self._fresh_capacity = self._geometry.content_height - self._headers.continuation_height(
            with_section=False
        )
        split_capacity = self._geometry.content_height - self._headers.continuation_height(
            with_section=True
        )
        if split_capacity <= spec.pagination.minimum_fragment_mm:
            raise InvalidGeometry("the continuation header leaves no room for content")
        self._engine = BoxLayoutEngine(self._metrics, spec, figure_max_height=split_capacity)

    @property
    def spec(self) -> LayoutSpec:
        return self._spec

    @property
    def geometry(self) -> PageGeometry:
        return self._geometry

    @property
    def metrics(self) -> TextMetrics:
        return self._metrics

    @property
    def engine(self) -> BoxLayoutEngine:
        return self._engine

    @property
    def headers(self) -> HeaderBuilder:
        return self._headers

    @property
    def fresh_page_capacity(self) -> float:
        """Content height of a continuation page that does not continue a section."""
        return self._fresh_capacity

    def paginate(self, document: ContentDocument) -> PaginationResult:
        return _Run(self, document).execute()


class _Run:
    def __init__(self, paginator: Paginator, document: ContentDocument) -> None:
        self._paginator = paginator
        self._spec = paginator.spec
        self._geometry = paginator.geometry
        self._document = document
        self._cursor = PageCursor()
        self._instructions: list[PlacementInstruction] = []
        self._continuations: list[ContinuationHeader] = []
        self._heading_title: str | None = None
        self.phase = Phase.IDLE

    def execute(self) -> PaginationResult:
        if self.phase is not Phase.IDLE:
            raise RuntimeError("a pagination run can only execute once")
        sections = self._document.renderable_sections()
        self._start_first_page()
        truncated: ContentTruncated | None = None
        for position, (index, section) in enumerate(sections):
            following = sections[position + 1][1] if position + 1 < len(sections) else None
            if not self._place_section(section, following):
                truncated = ContentTruncated(
                    max_pages=self._spec.pagination.max_pages,
                    section_index=index,
                    sections_remaining=len(sections) - position,
                )
                break
        self.phase = Phase.DONE
        return PaginationResult(
            instructions=tuple(self._instructions),
            page_count=self._cursor.page_index + 1,
            continuation_headers=tuple(self._continuations),
            truncated=truncated,
        )

    # Pages

    def _start_first_page(self) -> None:
        band = self._paginator.headers.first_page(self._document)
        top = self._geometry.content_top + band.height
        self._cursor = PageCursor(page_index=0, vertical_offset=top, page_top=top)
        self.phase = Phase.PLACING
        self._emit_header(band)

    def _break_page(self, section_title: str | None) -> bool:
        if self._cursor.page_index + 1 >= self._spec.pagination.max_pages:
            return False
        self.phase = Phase.PAGE_BREAK
        page_number = self._cursor.page_index + 2
        band = self._paginator.headers.continuation(
            self._document.title, page_number, section_title
        )
        self._cursor.next_page(self._geometry.content_top + band.height, section_title or "")
        self._continuations.append(
            ContinuationHeader(
                page_index=self._cursor.page_index,
                title=band.title,
                page_label=band.page_label,
                section_title=section_title,
                height=band.height,
            )
        )
        self.phase = Phase.PLACING
        self._emit_header(band)
        return True

    def _emit_header(self, band: HeaderBand) -> None:
        for drawable in band.drawables:
            self._append(drawable)
        # Header drawables never sit below the reserved band.
        self._cursor.advance_to(self._cursor.page_top)

    # Placement

    def _gap(self) -> float:
        if self._cursor.at_page_top:
            return 0.0
        return self._spec.spacing.section_gap_mm

    def _append(self, drawable: Drawable) -> None:
        if self.phase is not Phase.PLACING:
            raise RuntimeError(f"cannot place content while {self.phase.value}")
        self._instructions.append(PlacementInstruction(self._cursor.page_index, drawable))

    def _emit(self, block: MeasuredBlock, top: float) -> None:
        left = self._geometry.content_left
        for drawable in block.drawables():
            placed = shift(drawable, left, top)
            self._append(placed)
            self._cursor.advance_to(max(self._cursor.vertical_offset, bottom_of(placed)))
        self._cursor.advance_to(max(self._cursor.vertical_offset, top + block.height))

    def _measure(self, section: Section) -> MeasuredBlock:
        return self._paginator.engine.layout_block(section, self._geometry.content_width)

    def _place_section(self, section: Section, following: Section | None) -> bool:
        block = self._measure(section)
        if isinstance(section, Heading):
            if not self._keep_with_next(block, following):
                return False
            self._heading_title = section.title
            return self._place_block(block, section.title)
        return self._place_block(block, section.title or self._heading_title)

    def _keep_with_next(self, heading: MeasuredBlock, following: Section | None) -> bool:
        """Move a heading to a new page if the start of the next block cannot follow it."""
        if following is None or self._cursor.at_page_top:
            return True
        next_block = self._measure(following)
        needed = (
            self._gap()
            + heading.height
            + self._spec.spacing.section_gap_mm
            + self._first_fragment(next_block)
        )
        if self._cursor.vertical_offset + needed <= self._geometry.content_bottom + LAYOUT_EPSILON_MM:
            return True
        return self._break_page(None)

    def _first_fragment(self, block: MeasuredBlock) -> float:
        if self._keeps_whole(block):
            return min(block.height, self._paginator.fresh_page_capacity)
        minimum = min(self._spec.pagination.minimum_fragment_mm, block.height)
        for cut in block.breaks:
            if cut >= minimum - LAYOUT_EPSILON_MM:
                return cut
        return min(block.height, self._paginator.fresh_page_capacity)

    def _keeps_whole(self, block: MeasuredBlock) -> bool:
        pagination = self._spec.pagination
        policy = keep_policy(block.section)
        if policy is KeepPolicy.MUST_KEEP_TOGETHER:
            ratio = pagination.keep_together_ratio
        elif policy is KeepPolicy.PREFER_TOGETHER:
            ratio = pagination.prefer_together_ratio
        else:
            return False
        return block.height <= ratio * self._paginator.fresh_page_capacity + LAYOUT_EPSILON_MM

    def _place_block(self, block: MeasuredBlock, title: str | None) -> bool:
        while True:
            top = self._cursor.vertical_offset + self._gap()
            available = self._geometry.content_bottom - top
            if block.height <= available + LAYOUT_EPSILON_MM:
                self._emit(block, top)
                return True
            fresh = self._cursor.at_page_top
            if not fresh and self._keeps_whole(block):
                if not self._break_page(None):
                    return False
                continue
            cut = choose_cut(block, available, fresh, self._spec)
            if cut is None:
                if not self._break_page(None):
                    return False
                continue
            head, tail = block.split(cut)
            if not head.units:
                # Nothing fits above the page bottom; retry on an empty page.
                if not self._break_page(None):
                    return False
                continue
            self._emit(head, top)
            if tail is None:
                return True
            if not self._break_page(title):
                return False
            block = tail


def choose_cut(
    block: MeasuredBlock,
    available: float,
    fresh: bool,
    spec: LayoutSpec,
) -> float | None:
    """Pick where to cut ``block`` given ``available`` mm on the current page.

    ``None`` means the block should start on the next page instead.
    """
    pagination = spec.pagination
    minimum = pagination.minimum_fragment_mm
    fitting = [cut for cut in block.breaks if cut <= available + LAYOUT_EPSILON_MM]
    acceptable = [
        cut for cut in fitting if block.remainder(cut) >= minimum - LAYOUT_EPSILON_MM
    ]
    if acceptable:
        best = max(acceptable)
        # A semantic break may pull the cut up, never below the minimum fragment.
        sizable = [cut for cut in acceptable if cut >= minimum - LAYOUT_EPSILON_MM]
        preferred = _preferred_near(block, sizable, best, pagination.preferred_break_slack_mm)
        if preferred is not None:
            best = preferred
        if not fresh and best < minimum - LAYOUT_EPSILON_MM:
            return None
        return best
    if not fresh:
        return None
    if fitting:
        return max(fitting)
    return available


def _preferred_near(
    block: MeasuredBlock, cuts: Sequence[float], best: float, slack: float
) -> float | None:
    near = [
        cut
        for cut in cuts
        if block.is_preferred(cut) and best - cut <= slack + LAYOUT_EPSILON_MM
    ]
    return max(near) if near else None


__all__ = ["Paginator", "choose_cut", "keep_policy"]

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

import tempfile
import unittest
from collections import Counter
from pathlib import Path

from pagewright.core.models import Figure, GridBox, Heading, KeyValueGrid
from pagewright.layout.paginate import Paginator
from pagewright.layout.types import (
    ImageRun,
    PaginationResult,
    PlacementInstruction,
    Rect,
    TextRun,
)
from pagewright.render.pdf_render import FpdfRenderSink, render_pdf, render_placements
from pagewright.text.metrics import FontTable, FpdfFontBackend, MeasurementFailure
from tests.test_support import long_paragraph, make_document, make_paginator, make_spec, png_bytes


class RecordingSink:
    def __init__(self) -> None:
        self.calls: list[tuple[str, int]] = []
        self.texts: list[str] = []

    def draw_text_run(self, text, x, y, style, *, page_index, height, face=None) -> None:
        self.calls.append(("text", page_index))
        self.texts.append(text)

    def draw_rect(
        self, x, y, width, height, fill, *, page_index, stroke=None, line_width=0.0
    ) -> None:
        self.calls.append(("rect", page_index))

    def draw_image(self, data, x, y, width, height, *, page_index) -> None:
        self.calls.append(("image", page_index))


def _pdf_fonts() -> FontTable:
    return FontTable(FpdfFontBackend("default"))


def _kind(drawable: object) -> str:
    if isinstance(drawable, TextRun):
        return "text"
    if isinstance(drawable, Rect):
        return "rect"
    return "image"


class TestRenderPlacements(unittest.TestCase):
    def test_every_instruction_reaches_the_sink_in_order(self) -> None:
        document = make_document(
            Heading("Summary"),
            long_paragraph(80),
            Figure(data=png_bytes(), width_px=40, height_px=20, caption="Chart"),
        )
        result = make_paginator().paginate(document)
        sink = RecordingSink()
        render_placements(result, sink)

        self.assertEqual(len(sink.calls), len(result.instructions))
        kinds = Counter(kind for kind, _ in sink.calls)
        expected = Counter(_kind(item.drawable) for item in result.instructions)
        self.assertEqual(kinds, expected)
        self.assertEqual(kinds["image"], 1)
        self.assertEqual(
            [page for _, page in sink.calls], [item.page_index for item in result.instructions]
        )
        self.assertIn("Line 079", sink.texts)

    def test_unknown_drawable_rejected(self) -> None:
        result = PaginationResult(
            instructions=(PlacementInstruction(0, object()),),  # type: ignore[arg-type]
            page_count=1,
        )
        with self.assertRaises(TypeError):
            render_placements(result, RecordingSink())


class TestFpdfRenderSink(unittest.TestCase):
    def test_writes_pdf_with_one_page_per_index(self) -> None:
        fonts = _pdf_fonts()
        spec = make_spec()
        paginator = Paginator(spec, fonts)
        document = make_document(
            Heading("Pipeline review"),
            long_paragraph(90, label="Notes"),
            KeyValueGrid(
                boxes=(
                    GridBox(label="Owner", fragments=("Dana",), accent="green"),
                    GridBox(label="Stage", items=("Discovery", "Proposal")),
                )
            ),
            Figure(data=png_bytes(60, 30, dpi=72), width_px=60, height_px=30, dpi=72.0),
        )
        result = paginator.paginate(document)
        self.assertGreaterEqual(result.page_count, 2)

        with tempfile.TemporaryDirectory() as tmpdir:
            sink = FpdfRenderSink(spec, fonts)
            render_placements(result, sink)
            self.assertEqual(sink.page_count, result.page_count)
            target = sink.output(Path(tmpdir) / "nested" / "report.pdf")
            data = target.read_bytes()
        self.assertTrue(data.startswith(b"%PDF"))

    def test_render_pdf_helper(self) -> None:
        fonts = _pdf_fonts()
        spec = make_spec("LETTER")
        result = Paginator(spec, fonts).paginate(make_document(long_paragraph(5)))
        with tempfile.TemporaryDirectory() as tmpdir:
            path = render_pdf(result, spec, fonts, Path(tmpdir) / "letter.pdf")
            self.assertTrue(path.is_file())
            self.assertTrue(path.read_bytes().startswith(b"%PDF"))

    def test_empty_result_still_has_a_page(self) -> None:
        fonts = _pdf_fonts()
        sink = FpdfRenderSink(make_spec(), fonts)
        with tempfile.TemporaryDirectory() as tmpdir:
            sink.output(Path(tmpdir) / "empty.pdf")
        self.assertEqual(sink.page_count, 1)

    def test_measurement_only_backend_cannot_draw(self) -> None:
        paginator = make_paginator()
        with self.assertRaises(MeasurementFailure):
            FpdfRenderSink(paginator.spec, paginator.metrics.fonts)

    def test_rect_without_fill_or_stroke_is_skipped(self) -> None:
        sink = FpdfRenderSink(make_spec(), _pdf_fonts())
        sink.draw_rect(10.0, 10.0, 5.0, 5.0, None, page_index=0)
        self.assertEqual(sink.page_count, 1)
        with self.assertRaisesRegex(ValueError, "unknown color: teal"):
            sink.draw_rect(10.0, 10.0, 5.0, 5.0, "teal", page_index=0)

    def test_unknown_stroke_color_is_a_value_error(self) -> None:
        sink = FpdfRenderSink(make_spec(), _pdf_fonts())
        with self.assertRaisesRegex(ValueError, "unknown color: plum"):
            sink.draw_rect(
                10.0, 10.0, 5.0, 5.0, None, page_index=0, stroke="plum", line_width=0.2
            )

    def test_image_run_is_drawn(self) -> None:
        sink = FpdfRenderSink(make_spec(), _pdf_fonts())
        image = ImageRun(x=20.0, y=20.0, width=40.0, height=20.0, data=png_bytes())
        result = PaginationResult(instructions=(PlacementInstruction(2, image),), page_count=3)
        render_placements(result, sink)
        self.assertEqual(sink.page_count, 3)


if __name__ == "__main__":
    unittest.main()

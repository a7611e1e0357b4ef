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

import unittest
from pathlib import Path
from unittest import mock

from rich.console import Console

from pagewright.cli.ui import THEME
from pagewright.cli.ui import summary as summary_module
from tests.test_support import long_paragraph, make_document, make_paginator, make_spec


def _result(max_pages: int = 50):
    document = make_document(long_paragraph(70, label="Notes"), long_paragraph(70))
    return document, make_paginator(make_spec(max_pages=max_pages)).paginate(document)


class TestUISummary(unittest.TestCase):
    def test_print_pagination_summary_quiet_noop(self) -> None:
        document, result = _result()
        with mock.patch("pagewright.cli.ui.summary.console.print") as print_mock:
            summary_module.print_pagination_summary(result, document, None, quiet=True)
        print_mock.assert_not_called()

    @mock.patch("pagewright.cli.ui.summary.panel", return_value="PANEL")
    @mock.patch("pagewright.cli.ui.summary.build_kv_table", return_value="TABLE")
    def test_print_pagination_summary_rows(
        self,
        build_kv_table: mock.MagicMock,
        panel: mock.MagicMock,
    ) -> None:
        document, result = _result(max_pages=2)
        with mock.patch("pagewright.cli.ui.summary.console.print") as print_mock:
            summary_module.print_pagination_summary(
                result, document, Path("out/report.pdf"), quiet=False
            )
        rows = dict(build_kv_table.call_args.args[0])
        self.assertEqual(rows["Title"], "Report")
        self.assertEqual(rows["Sections"], "2")
        self.assertEqual(rows["Pages"], "2")
        self.assertEqual(rows["Truncated"], "1 sections")
        self.assertEqual(rows["Output"], str(Path("out/report.pdf")))
        panel.assert_called_once_with("Pagination summary", "TABLE")
        print_mock.assert_called_once_with("PANEL")

    def test_page_table_has_a_row_per_page(self) -> None:
        _, result = _result()
        table = summary_module.build_page_table(result)
        self.assertEqual(table.row_count, result.page_count)
        self.assertEqual(
            [column.header for column in table.columns],
            ["Page", "Text", "Rects", "Images", "Bottom (mm)", "Continues"],
        )
        console = Console(record=True, width=120, color_system=None, theme=THEME)
        console.print(table)
        text = console.export_text()
        self.assertIn("Notes", text)


if __name__ == "__main__":
    unittest.main()

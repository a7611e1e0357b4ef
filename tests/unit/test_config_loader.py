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

import tempfile
import unittest
from pathlib import Path

from pagewright.config import AppConfig, FontConfig, build_font_table, load_app_config, parse_layout
from pagewright.config.installer import PAPER_CONFIGS
from pagewright.layout.spec import StyleSpec, default_layout_spec
from pagewright.text.metrics import MeasurementFailure

_CUSTOM_CONFIG = """
[page]
size = "LETTER"
margin_mm = 12.5

[pagination]
max_pages = 3

[styles.body]
size_pt = 11

[colors]
brand = [12, 34, 56]

[fonts.default]
family = "Times"

[fonts.hebrew]
regular = "fonts/Hebrew-Regular.ttf"
bold = "/opt/fonts/Hebrew-Bold.ttf"
rtl = true
line_height_factor = 1.3

[fonts]
alternate = "hebrew"

[ui]
quiet = "yes"
"""


class TestParseLayout(unittest.TestCase):
    def test_empty_config_is_a4_defaults(self) -> None:
        self.assertEqual(parse_layout({}), default_layout_spec("A4"))

    def test_page_size_from_file(self) -> None:
        spec = parse_layout({"page": {"size": "letter", "margin_mm": 19}})
        self.assertEqual(spec.page.size, "LETTER")
        self.assertEqual(spec.page.width_mm, 215.9)
        self.assertEqual(spec.page.margin_mm, 19.0)

    def test_explicit_paper_size_wins(self) -> None:
        spec = parse_layout(
            {"page": {"size": "A4", "width_mm": 100.0, "height_mm": 100.0}},
            paper_size="LETTER",
        )
        self.assertEqual((spec.page.width_mm, spec.page.height_mm), (215.9, 279.4))

    def test_unknown_paper_size(self) -> None:
        with self.assertRaisesRegex(ValueError, "unknown paper size"):
            parse_layout({"page": {"size": "A5"}})

    def test_page_size_must_be_string(self) -> None:
        with self.assertRaisesRegex(ValueError, "page.size must be a string"):
            parse_layout({"page": {"size": 4}})

    def test_section_overrides_keep_field_types(self) -> None:
        spec = parse_layout(
            {
                "pagination": {"max_pages": 7, "minimum_fragment_mm": 20},
                "spacing": {"section_gap_mm": 4},
                "header": {"page_label": "p. {page}", "column_gap_mm": 6},
            }
        )
        self.assertEqual(spec.pagination.max_pages, 7)
        self.assertIsInstance(spec.pagination.minimum_fragment_mm, float)
        self.assertEqual(spec.pagination.minimum_fragment_mm, 20.0)
        self.assertEqual(spec.spacing.section_gap_mm, 4.0)
        self.assertEqual(spec.header.page_label, "p. {page}")
        self.assertEqual(spec.header.column_gap_mm, 6.0)

    def test_bad_values(self) -> None:
        cases = (
            ({"pagination": {"max_page": 3}}, "pagination.max_page is not a recognized option"),
            ({"pagination": {"max_pages": 2.5}}, "pagination.max_pages must be an integer"),
            ({"pagination": {"max_pages": True}}, "pagination.max_pages must be an integer"),
            ({"spacing": {"item_gap_mm": "wide"}}, "spacing.item_gap_mm must be a number"),
            ({"header": {"page_label": 3}}, "header.page_label must be a string"),
            ({"box": {"box_fill": None}}, "box.box_fill must be a string"),
        )
        for data, message in cases:
            with self.subTest(data=data):
                with self.assertRaisesRegex(ValueError, message):
                    parse_layout(data)

    def test_styles(self) -> None:
        spec = parse_layout(
            {
                "styles": {
                    "body": {"size_pt": 11},
                    "callout": {"size_pt": 9.5, "weight": "bold", "color": "red"},
                }
            }
        )
        self.assertEqual(spec.styles["body"], StyleSpec(11.0))
        self.assertEqual(spec.styles["callout"], StyleSpec(9.5, "bold", color="red"))
        self.assertEqual(spec.styles["title"], default_layout_spec().styles["title"])

    def test_style_errors(self) -> None:
        cases = (
            ({"callout": {"weight": "bold"}}, "styles.callout.size_pt is required"),
            ({"body": {"weight": "heavy"}}, "styles.body.weight must be 'normal' or 'bold'"),
            ({"body": 10}, "styles.body must be a table"),
            ({"body": {"slant": "italic"}}, "styles.body.slant is not a recognized option"),
        )
        for styles, message in cases:
            with self.subTest(styles=styles):
                with self.assertRaisesRegex(ValueError, message):
                    parse_layout({"styles": styles})

    def test_colors(self) -> None:
        spec = parse_layout({"colors": {"brand": [1, 2, 3], "primary": [0, 0, 0]}})
        self.assertEqual(spec.colors["brand"], (1, 2, 3))
        self.assertEqual(spec.colors["primary"], (0, 0, 0))
        for value, message in (
            ([1, 2], "three integers"),
            ([1, 2, 300], "between 0 and 255"),
            ("red", "three integers"),
            ([1, 2, "x"], "must be an integer"),
        ):
            with self.subTest(value=value):
                with self.assertRaisesRegex(ValueError, message):
                    parse_layout({"colors": {"brand": value}})


class TestLoadAppConfig(unittest.TestCase):
    def test_packaged_configs_load(self) -> None:
        a4 = load_app_config(PAPER_CONFIGS["A4"])
        self.assertEqual(a4.layout.page.size, "A4")
        self.assertEqual(a4.layout, default_layout_spec("A4"))
        self.assertEqual(a4.fonts, (FontConfig("default"),))
        self.assertIsNone(a4.alternate_face)
        self.assertFalse(a4.ui.quiet)

        letter = load_app_config(PAPER_CONFIGS["LETTER"])
        self.assertEqual(letter.layout.page.size, "LETTER")
        self.assertEqual(letter.layout.page.margin_mm, 19.0)

    def test_paper_option_overrides_packaged_file(self) -> None:
        config = load_app_config(PAPER_CONFIGS["A4"], paper_size="letter")
        self.assertEqual(config.layout.page.size, "LETTER")
        self.assertEqual(config.layout.page.height_mm, 279.4)

    def test_custom_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "custom.toml"
            path.write_text(_CUSTOM_CONFIG, encoding="utf-8")
            config = load_app_config(path)

        self.assertEqual(config.path, path)
        self.assertEqual(config.layout.page.size, "LETTER")
        self.assertEqual(config.layout.page.margin_mm, 12.5)
        self.assertEqual(config.layout.pagination.max_pages, 3)
        self.assertEqual(config.layout.styles["body"].size_pt, 11.0)
        self.assertEqual(config.layout.colors["brand"], (12, 34, 56))
        self.assertTrue(config.ui.quiet)
        self.assertFalse(config.ui.no_color)
        self.assertEqual(config.alternate_face, "hebrew")

        default, hebrew = config.fonts
        self.assertEqual(default, FontConfig("default", family="Times"))
        self.assertEqual(hebrew.regular, Path(tmpdir) / "fonts" / "Hebrew-Regular.ttf")
        self.assertEqual(hebrew.bold, Path("/opt/fonts/Hebrew-Bold.ttf"))
        self.assertTrue(hebrew.rtl)
        self.assertEqual(hebrew.line_height_factor, 1.3)

    def test_invalid_toml(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "broken.toml"
            path.write_text("[page\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_app_config(path)

    def test_missing_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            with self.assertRaises(FileNotFoundError):
                load_app_config(Path(tmpdir) / "missing.toml")

    def test_bad_ui_value(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "ui.toml"
            path.write_text("[ui]\nquiet = 3\n", encoding="utf-8")
            with self.assertRaisesRegex(ValueError, "ui.quiet must be a boolean"):
                load_app_config(path)


class TestBuildFontTable(unittest.TestCase):
    def _config(self, fonts: tuple[FontConfig, ...], alternate: str | None = None) -> AppConfig:
        return AppConfig(
            path=Path("config.toml"),
            layout=default_layout_spec(),
            fonts=fonts,
            alternate_face=alternate,
        )

    def test_default_face_only(self) -> None:
        table = build_font_table(self._config((FontConfig("default"),)))
        self.assertEqual(table.names(), ("default",))
        self.assertEqual(table.default_face, "default")
        self.assertIsNone(table.alternate_face)
        self.assertFalse(table.frozen)
        self.assertGreater(table.get("default").string_width("Revenue", 10.0, "normal"), 0)

    def test_default_face_added_when_missing(self) -> None:
        table = build_font_table(self._config((FontConfig("serif", family="times"),)))
        self.assertEqual(table.default_face, "default")
        self.assertEqual(set(table.names()), {"default", "serif"})

    def test_core_font_as_alternate(self) -> None:
        fonts = (FontConfig("default"), FontConfig("wide", family="courier"))
        table = build_font_table(self._config(fonts, alternate="wide"))
        self.assertEqual(table.alternate_face, "wide")

    def test_unknown_alternate(self) -> None:
        with self.assertRaisesRegex(ValueError, "unknown face: hebrew"):
            build_font_table(self._config((FontConfig("default"),), alternate="hebrew"))

    def test_missing_font_file(self) -> None:
        fonts = (
            FontConfig("default"),
            FontConfig("hebrew", regular=Path("/nonexistent/Hebrew.ttf"), rtl=True),
        )
        with self.assertRaises(MeasurementFailure):
            build_font_table(self._config(fonts))


if __name__ == "__main__":
    unittest.main()

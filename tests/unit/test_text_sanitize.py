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

from pagewright.text.sanitize import has_text, sanitize


class TestSanitize(unittest.TestCase):
    def test_strips_invisible_and_directional_marks(self) -> None:
        raw = "A\u200bB\u200e C\u202bD\u202c\u2067E\u2069\ufeff\u00adF"
        self.assertEqual(sanitize(raw), "AB CDEF")

    def test_normalizes_punctuation_to_ascii(self) -> None:
        raw = "“Quoted” ‘it’s’ – done… ok"
        self.assertEqual(sanitize(raw), "\"Quoted\" 'it's' - done... ok")

    def test_line_breaks_are_normalized(self) -> None:
        self.assertEqual(sanitize("a\r\nb\rc\td"), "a\nb\nc d")

    def test_control_characters_removed_newline_kept(self) -> None:
        self.assertEqual(sanitize("x\x00y\x07\nz\x1b"), "xy\nz")

    def test_other_symbols_preserved(self) -> None:
        for text in ("€ 100", "50% ✓", "עברית", "a → b"):
            with self.subTest(text=text):
                self.assertEqual(sanitize(text), text)

    def test_empty_input(self) -> None:
        self.assertEqual(sanitize(None), "")
        self.assertEqual(sanitize(""), "")

    def test_idempotent(self) -> None:
        samples = (
            "plain text",
            "\u201cmixed\u201d \u2014 \u200bmarks\u200f\r\nnext\tline",
            "Deal: \u05e2\u05d1\u05e8\u05d9\u05ea text\u2026",
            "\u00ad \u2026\u2026",
        )
        for text in samples:
            with self.subTest(text=text):
                once = sanitize(text)
                self.assertEqual(sanitize(once), once)

    def test_has_text_ignores_invisible_characters(self) -> None:
        for text in (None, "", "   ", "\u200b\u200b", "\ufeff\u200e\n\t", "\x00\x07"):
            with self.subTest(text=text):
                self.assertFalse(has_text(text))
        self.assertTrue(has_text("\u200bAfter"))
        self.assertTrue(has_text("\u2026"))


if __name__ == "__main__":
    unittest.main()

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

import json
import re
import tempfile
import unittest
from pathlib import Path

from typer.testing import CliRunner

from pagewright.cli import app
from pagewright.config.installer import CONFIG_ENV, PAPER_CONFIGS, XDG_CONFIG_ENV
from tests.test_support import numbered_lines, temp_env

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]")


def _strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)


def _write_document(root: Path, *, paragraphs: int = 2) -> Path:
    sections: list[dict] = [{"type": "heading", "text": "Account overview"}]
    sections.extend(
        {"type": "paragraph", "label": f"Notes {index}", "text": numbered_lines(70)}
        for index in range(paragraphs)
    )
    sections.append(
        {
            "type": "table",
            "label": "Pipeline",
            "columns": ["Stage", {"title": "Amount", "width_mm": 40}],
            "rows": [[f"Deal {index}", str(index * 10)] for index in range(30)],
        }
    )
    path = root / "report.json"
    path.write_text(
        json.dumps({"title": "Acme renewal", "subtitle_lines": ["Q3"], "sections": sections}),
        encoding="utf-8",
    )
    return path


class TestCliPaginate(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = CliRunner()
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self._env = temp_env({XDG_CONFIG_ENV: str(self.root / "xdg"), CONFIG_ENV: ""})
        self._env.__enter__()

    def tearDown(self) -> None:
        self._env.__exit__(None, None, None)
        self._tmp.cleanup()

    def test_paginate_writes_pdf(self) -> None:
        document = _write_document(self.root)
        output = self.root / "out" / "report.pdf"
        result = self.runner.invoke(
            app,
            ["--config", str(PAPER_CONFIGS["A4"]), "paginate", str(document), "-o", str(output)],
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertTrue(output.read_bytes().startswith(b"%PDF"))
        self.assertIn("Pagination summary", _strip_ansi(result.output))

    def test_default_output_next_to_document(self) -> None:
        document = _write_document(self.root, paragraphs=1)
        result = self.runner.invoke(app, ["--quiet", "paginate", str(document)])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertTrue(document.with_suffix(".pdf").is_file())
        self.assertEqual(result.output.strip(), "")

    def test_json_output(self) -> None:
        document = _write_document(self.root)
        result = self.runner.invoke(app, ["--paper", "letter", "paginate", str(document), "--json"])
        self.assertEqual(result.exit_code, 0, result.output)
        data = json.loads(result.stdout)
        self.assertGreaterEqual(data["page_count"], 3)
        self.assertIsNone(data["truncated"])
        self.assertEqual(len(data["pages"]), data["page_count"])
        self.assertIn(
            "Notes 0",
            [header["section_title"] for header in data["continuation_headers"]],
        )
        self.assertFalse(document.with_suffix(".pdf").exists())

    def test_page_limit_warning(self) -> None:
        document = _write_document(self.root)
        output = self.root / "report.pdf"
        result = self.runner.invoke(
            app, ["paginate", str(document), "-o", str(output), "--max-pages", "1"]
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("page limit of 1", _strip_ansi(result.output))
        self.assertTrue(output.is_file())

    def test_debug_prints_page_table(self) -> None:
        document = _write_document(self.root, paragraphs=1)
        result = self.runner.invoke(
            app, ["--debug", "paginate", str(document), "-o", str(self.root / "r.pdf")]
        )
        self.assertEqual(result.exit_code, 0, result.output)
        output = _strip_ansi(result.output)
        self.assertIn("Pages", output)
        self.assertIn("Bottom (mm)", output)

    def test_invalid_document_reports_error(self) -> None:
        path = self.root / "bad.json"
        path.write_text(
            json.dumps({"title": "x", "sections": [{"type": "chart"}]}), encoding="utf-8"
        )
        result = self.runner.invoke(app, ["paginate", str(path)])
        self.assertEqual(result.exit_code, 2)
        self.assertIn("sections[0].type is unknown: chart", _strip_ansi(result.output))

    def test_config_and_paper_conflict(self) -> None:
        document = _write_document(self.root, paragraphs=1)
        result = self.runner.invoke(
            app,
            ["--config", str(PAPER_CONFIGS["A4"]), "--paper", "A4", "paginate", str(document)],
        )
        self.assertEqual(result.exit_code, 2)
        self.assertIn("--config or --paper", _strip_ansi(result.output))


class TestCliConfig(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = CliRunner()

    def test_print_path_uses_environment(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            custom = Path(tmpdir) / "custom.toml"
            with temp_env({CONFIG_ENV: str(custom), XDG_CONFIG_ENV: tmpdir}):
                result = self.runner.invoke(app, ["config", "--print-path"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(_strip_ansi(result.stdout).strip(), str(custom))

    def test_init_then_show(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            with temp_env({XDG_CONFIG_ENV: tmpdir, CONFIG_ENV: ""}):
                init = self.runner.invoke(app, ["--paper", "letter", "config", "--init"])
                self.assertEqual(init.exit_code, 0, init.output)
                user_path = Path(tmpdir) / "pagewright" / "config.toml"
                self.assertTrue(user_path.is_file())

                shown = self.runner.invoke(app, ["config"])
        self.assertEqual(shown.exit_code, 0, shown.output)
        output = _strip_ansi(shown.output)
        self.assertIn("Configuration", output)
        self.assertIn("LETTER", output)


if __name__ == "__main__":
    unittest.main()

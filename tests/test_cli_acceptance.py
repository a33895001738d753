from __future__ import annotations

import io
import json
import sys
import tempfile
import unittest
import xml.etree.ElementTree as ET
from pathlib import Path
from unittest import mock

TESTS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = TESTS_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from smartsvg import cli

SVG = {"svg": "http://www.w3.org/2000/svg"}
TWO_SERIES = "x,price,volume\n0,0,1\n1,5,2\n2,2,3\n3,8,4\n"


class CLIAcceptanceTests(unittest.TestCase):
    def run_cli(self, argv: list[str], stdin_text: str = "") -> tuple[int, str, str]:
        stdout = io.StringIO()
        stderr = io.StringIO()
        stdin = io.StringIO(stdin_text)
        with mock.patch("sys.stdout", stdout), mock.patch("sys.stderr", stderr), mock.patch("sys.stdin", stdin):
            code = cli.main(argv)
        return code, stdout.getvalue(), stderr.getvalue()

    def test_requires_subcommand(self) -> None:
        code, _out, err = self.run_cli([])
        self.assertEqual(code, 2)
        self.assertIn("E_ARGS", err)
        self.assertIn("subcommand", err)

    def test_plot_file_writes_svg(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            src = Path(td) / "prices.csv"
            src.write_text("x,price\n0,0\n1,5\n2,2\n3,8\n")
            code, out, err = self.run_cli(["plot", str(src)])
            self.assertEqual(code, 0, err)
            target = Path(td) / "prices.svg"
            self.assertTrue(target.exists())
            self.assertIn("Wrote", out)
            root = ET.fromstring(target.read_text())
            self.assertEqual(len(root.findall(".//svg:polyline", SVG)), 1)
            title = root.find(".//svg:text[@id='title']", SVG)
            self.assertEqual(title.text, "prices")

    def test_plot_output_path(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            src = Path(td) / "prices.csv"
            src.write_text("x,price\n0,0\n1,5\n")
            out_path = Path(td) / "chart.svg"
            code, _out, err = self.run_cli(["plot", str(src), "-o", str(out_path), "--title", "Prices"])
            self.assertEqual(code, 0, err)
            self.assertIn(">Prices</text>", out_path.read_text())

    def test_plot_text_with_legend_to_stdout(self) -> None:
        code, out, err = self.run_cli(
            ["plot", "--text", TWO_SERIES, "--stdout", "--legend", "--color-offset", "0", "--title", "Market"]
        )
        self.assertEqual(code, 0, err)
        root = ET.fromstring(out)
        self.assertEqual(len(root.findall(".//svg:polyline", SVG)), 2)
        legend = root.find(".//svg:g[@id='legend']", SVG)
        self.assertIsNotNone(legend)
        fills = [use.get("fill") for use in legend.findall("svg:use", SVG)]
        self.assertEqual(fills, ["antiquewhite", "aqua"])
        labels = [text.text for text in legend.findall("svg:text", SVG)]
        self.assertEqual(labels, ["price", "volume"])

    def test_plot_column_display(self) -> None:
        code, out, err = self.run_cli(["plot", "--text", TWO_SERIES, "--display", "column", "--color-offset", "0"])
        self.assertEqual(code, 0, err)
        self.assertIn('id="column-marker"', out)
        self.assertIn('marker-mid="url(#column-marker)"', out)

    def test_plot_reads_stdin(self) -> None:
        code, out, err = self.run_cli(["plot"], stdin_text=TWO_SERIES)
        self.assertEqual(code, 0, err)
        self.assertTrue(out.startswith('<?xml version="1.0"?>'))

    def test_unsorted_data_maps_to_diagram_error(self) -> None:
        code, out, err = self.run_cli(["plot", "--text", "x,a\n2,1\n1,2\n"])
        self.assertEqual(code, 3)
        self.assertEqual(out, "")
        self.assertIn("error[E_DATA_UNSORTED]", err)
        self.assertIn("hint:", err)

    def test_small_page_is_rejected(self) -> None:
        code, _out, err = self.run_cli(["plot", "--text", TWO_SERIES, "--width", "50"])
        self.assertEqual(code, 3)
        self.assertIn("E_DIMENSIONS", err)

    def test_bad_cell_reports_line_in_json(self) -> None:
        code, _out, err = self.run_cli(["--error-format", "json", "plot", "--text", "x,a\n0,1\n1,oops\n"])
        self.assertEqual(code, 2)
        payload = json.loads(err)
        self.assertFalse(payload["ok"])
        self.assertEqual(payload["code"], "E_PARSE_DATA")
        self.assertEqual(payload["line"], 3)
        self.assertEqual(payload["file"], "<text>")
        self.assertIn("oops", payload["message"])

    def test_header_needs_series_column(self) -> None:
        code, _out, err = self.run_cli(["plot", "--text", "x\n1\n"])
        self.assertEqual(code, 2)
        self.assertIn("E_PARSE_DATA", err)

    def test_stdout_and_output_are_exclusive(self) -> None:
        code, _out, err = self.run_cli(["plot", "--text", TWO_SERIES, "--stdout", "-o", "x.svg"])
        self.assertEqual(code, 2)
        self.assertIn("mutually exclusive", err)

    def test_missing_input_file(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            code, _out, err = self.run_cli(["plot", str(Path(td) / "nope.csv")])
        self.assertEqual(code, 2)
        self.assertIn("E_IO_READ", err)

    def test_unwritable_output(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            src = Path(td) / "prices.csv"
            src.write_text("x,price\n0,0\n1,5\n")
            target = Path(td) / "missing-dir" / "out.svg"
            code, _out, err = self.run_cli(["plot", str(src), "-o", str(target)])
        self.assertEqual(code, 4)
        self.assertIn("E_IO_WRITE", err)

    def test_unknown_display_is_usage_error(self) -> None:
        code, _out, err = self.run_cli(["plot", "--text", TWO_SERIES, "--display", "bar"])
        self.assertEqual(code, 2)
        self.assertIn("E_ARGS", err)

    def test_error_format_json_shape(self) -> None:
        code, _out, err = self.run_cli(["--error-format", "json"])
        self.assertEqual(code, 2)
        payload = json.loads(err)
        self.assertEqual(payload["code"], "E_ARGS")
        self.assertFalse(payload["ok"])

    def test_colors_lists_palette(self) -> None:
        code, out, err = self.run_cli(["colors"])
        self.assertEqual(code, 0, err)
        lines = out.splitlines()
        self.assertEqual(len(lines), 146)
        self.assertTrue(lines[0].startswith("aliceblue"))
        self.assertIn("rgb(", lines[0])

    def test_cheatsheet_command(self) -> None:
        code, out, err = self.run_cli(["cheatsheet"])
        self.assertEqual(code, 0, err)
        self.assertIn("smartsvg quick reference", out)

    def test_debug_traceback_gate(self) -> None:
        with mock.patch("smartsvg.cli.new_document", side_effect=RuntimeError("boom")):
            code, _out, err = self.run_cli(["plot", "--text", TWO_SERIES])
            self.assertEqual(code, 1)
            self.assertIn("E_INTERNAL", err)
            self.assertNotIn("Traceback", err)

        with mock.patch("smartsvg.cli.new_document", side_effect=RuntimeError("boom")):
            code, _out, err = self.run_cli(["--debug", "plot", "--text", TWO_SERIES])
            self.assertEqual(code, 1)
            self.assertIn("Traceback", err)


if __name__ == "__main__":
    unittest.main()

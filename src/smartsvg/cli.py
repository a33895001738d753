"""Command-line interface: plot CSV data as an SVG diagram."""
from __future__ import annotations

import argparse
import csv
import io
import json
import logging
import os
import sys
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from .colors import NAMED_COLORS, ColorCycle, rgb
from .element import new_document
from .errors import SmartSVGError
from .layout import Display
from .resources import load_cheatsheet

DEBUG_ENV = "SMARTSVG_DEBUG"
SUBCOMMANDS = "plot, colors, cheatsheet"

logger = logging.getLogger(__name__)


@dataclass
class CliError(Exception):
    code: str
    message: str
    hint: Optional[str] = None
    exit_code: int = 1
    file: Optional[str] = None
    line: Optional[int] = None
    retryable: bool = True


class UsageError(Exception):
    pass


class FriendlyArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # pragma: no cover - argparse callback
        raise UsageError(message)


@dataclass
class _Table:
    names: List[str]
    x_values: List[float]
    series: List[List[float]]


def _build_parser() -> argparse.ArgumentParser:
    parser = FriendlyArgumentParser(
        prog="smartsvg",
        description="Plot CSV columns as an SVG diagram.",
    )
    parser.add_argument("--error-format", choices=["text", "json"], default="text")
    parser.add_argument("--debug", action="store_true")

    subparsers = parser.add_subparsers(dest="command")

    plot_parser = subparsers.add_parser("plot", help="Plot a CSV file to SVG")
    plot_parser.add_argument("input", nargs="?", help="Input .csv file (header row, X column first)")
    plot_parser.add_argument("--text", help="Raw CSV source")
    plot_parser.add_argument("--stdout", action="store_true", help="Write SVG to stdout")
    plot_parser.add_argument("-o", "--output", help="Output .svg path")
    plot_parser.add_argument("--title", help="Diagram title (defaults to the input file name)")
    plot_parser.add_argument("--width", type=int, default=500)
    plot_parser.add_argument("--height", type=int, default=300)
    plot_parser.add_argument(
        "--display",
        choices=[mode.value for mode in Display],
        default=Display.CONTINUOUS.value,
    )
    plot_parser.add_argument("--legend", action="store_true", help="Add a legend from the CSV header")
    plot_parser.add_argument(
        "--color-offset",
        type=int,
        metavar="N",
        help="Start the series palette at index N for reproducible colors",
    )

    subparsers.add_parser("colors", help="Print the series color palette")
    subparsers.add_parser("cheatsheet", help="Print the smartsvg quick reference")

    return parser


def _read_input(path: Optional[str], text: Optional[str]) -> Tuple[str, str, Optional[Path]]:
    if path and text is not None:
        raise CliError(
            "E_ARGS",
            "--text cannot be combined with file input",
            hint="Use either FILE or --text.",
            exit_code=2,
        )

    if text is not None:
        return text, "<text>", None

    if path:
        input_path = Path(path)
        if not input_path.exists():
            raise CliError(
                "E_IO_READ",
                f"input file not found: {input_path}",
                exit_code=2,
                file=str(input_path),
            )
        try:
            return input_path.read_text(), str(input_path), input_path
        except OSError as exc:
            raise CliError(
                "E_IO_READ",
                f"failed to read input file: {input_path}",
                hint=str(exc),
                exit_code=2,
                file=str(input_path),
            )

    if sys.stdin.isatty():
        raise CliError(
            "E_ARGS",
            "no input provided",
            hint="Use a subcommand with FILE, --text, or pipe stdin.",
            exit_code=2,
        )

    data = sys.stdin.read()
    if not data.strip():
        raise CliError(
            "E_ARGS",
            "stdin was empty",
            hint="Pipe CSV content into stdin.",
            exit_code=2,
        )
    return data, "<stdin>", None


def _parse_table(source: str, source_name: str) -> _Table:
    reader = csv.reader(io.StringIO(source))
    header: Optional[List[str]] = None
    columns: List[List[float]] = []
    for row in reader:
        if not any(cell.strip() for cell in row):
            continue
        if header is None:
            header = [cell.strip() for cell in row]
            if len(header) < 2:
                raise CliError(
                    "E_PARSE_DATA",
                    "CSV header needs an X column and at least one series column",
                    hint="Example header: x,price,volume",
                    exit_code=2,
                    file=source_name,
                    line=reader.line_num,
                )
            columns = [[] for _ in header]
            continue
        if len(row) != len(header):
            raise CliError(
                "E_PARSE_DATA",
                f"expected {len(header)} columns, got {len(row)}",
                exit_code=2,
                file=source_name,
                line=reader.line_num,
            )
        for column, cell in zip(columns, row):
            try:
                column.append(float(cell))
            except ValueError:
                raise CliError(
                    "E_PARSE_DATA",
                    f"not a number: {cell.strip()!r}",
                    hint="Every cell below the header must be numeric.",
                    exit_code=2,
                    file=source_name,
                    line=reader.line_num,
                )
    if header is None or not columns[0]:
        raise CliError(
            "E_PARSE_DATA",
            "CSV needs a header row and at least one data row",
            exit_code=2,
            file=source_name,
        )
    return _Table(names=header, x_values=columns[0], series=columns[1:])


def _write_text(path: Path, content: str) -> None:
    try:
        path.write_text(content)
    except OSError as exc:
        raise CliError(
            "E_IO_WRITE",
            f"failed to write output file: {path}",
            hint=str(exc),
            exit_code=4,
            file=str(path),
        )


def _error_from_exception(exc: Exception) -> CliError:
    if isinstance(exc, CliError):
        return exc
    if isinstance(exc, SmartSVGError):
        return CliError(
            exc.code,
            str(exc),
            hint="Check the data (sorted X, equal column lengths) and diagram options.",
            exit_code=3,
            retryable=True,
        )
    return CliError(
        "E_INTERNAL",
        str(exc) or exc.__class__.__name__,
        hint="Re-run with --debug to see traceback.",
        exit_code=1,
        retryable=False,
    )


def _emit_error(err: CliError, *, error_format: str) -> None:
    if error_format == "json":
        payload = {
            "ok": False,
            "code": err.code,
            "message": err.message,
            "file": err.file,
            "line": err.line,
            "hint": err.hint,
            "retryable": err.retryable,
        }
        sys.stderr.write(json.dumps(payload) + "\n")
        return

    sys.stderr.write(f"error[{err.code}]: {err.message}\n")
    if err.hint:
        sys.stderr.write(f"hint: {err.hint}\n")


def _handle_plot(args: argparse.Namespace) -> int:
    if args.stdout and args.output:
        raise CliError(
            "E_ARGS",
            "--stdout and --output are mutually exclusive",
            hint="Choose either --stdout or --output.",
            exit_code=2,
        )

    source, source_name, source_path = _read_input(args.input, args.text)
    table = _parse_table(source, source_name)
    title = args.title if args.title is not None else (source_path.stem if source_path else "")
    colors = ColorCycle(offset=args.color_offset) if args.color_offset is not None else None

    doc = new_document(args.width, args.height)
    chart = doc.diagram(
        args.width,
        args.height,
        table.x_values,
        table.series[0],
        title,
        args.display,
        colors=colors,
    )
    for y_values in table.series[1:]:
        chart.add_plot(table.x_values, y_values, colors=colors)
    if args.legend:
        chart.legend(*table.names[1:])
    logger.debug("plotted %d series from %s", len(table.series), source_name)
    svg_text = str(doc)

    if args.stdout or source_path is None:
        sys.stdout.write(svg_text)
        return 0

    output_path = Path(args.output) if args.output else source_path.with_suffix(".svg")
    _write_text(output_path, svg_text)
    print(f"Wrote {output_path}")
    return 0


def _handle_colors() -> int:
    for name, value in NAMED_COLORS:
        print(f"{name:<22}{rgb(*value)}")
    return 0


def main(argv: Optional[Iterable[str]] = None) -> int:
    raw_argv = list(argv) if argv is not None else sys.argv[1:]
    parser = _build_parser()

    if not raw_argv:
        err = CliError(
            "E_ARGS",
            "missing subcommand",
            hint=f"Use one of: {SUBCOMMANDS}.",
            exit_code=2,
        )
        _emit_error(err, error_format="text")
        return err.exit_code

    debug_enabled = "--debug" in raw_argv or os.getenv(DEBUG_ENV) == "1"
    if debug_enabled:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(levelname)s %(name)s: %(message)s",
        )
    error_format = "text"
    if "--error-format" in raw_argv:
        idx = raw_argv.index("--error-format")
        if idx + 1 < len(raw_argv):
            error_format = raw_argv[idx + 1]

    try:
        args = parser.parse_args(raw_argv)
        error_format = args.error_format

        if args.command == "plot":
            return _handle_plot(args)
        if args.command == "colors":
            return _handle_colors()
        if args.command == "cheatsheet":
            print(load_cheatsheet())
            return 0

        raise CliError(
            "E_ARGS",
            "missing subcommand",
            hint=f"Use one of: {SUBCOMMANDS}.",
            exit_code=2,
        )
    except UsageError as exc:
        err = CliError(
            "E_ARGS",
            str(exc),
            hint=f"Use subcommands: {SUBCOMMANDS}.",
            exit_code=2,
        )
        _emit_error(err, error_format=error_format)
        return err.exit_code
    except Exception as exc:  # pragma: no cover - exercised in acceptance tests
        err = _error_from_exception(exc)
        _emit_error(err, error_format=error_format)
        if debug_enabled:
            traceback.print_exc(file=sys.stderr)
        return err.exit_code


if __name__ == "__main__":
    raise SystemExit(main())

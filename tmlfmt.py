"""CLI for parsing TML files and writing normalized TML or JSON outputs."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Iterable, Optional, Sequence

from typedml import (
    Point,
    TMLDocument,
    TMLFormatter,
    find_node_at_position_with_index,
    node_to_dict,
    parse_file,
)

DEFAULT_OUTPUT_DIR = Path("out/")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Parse TML files and write normalized TML (or JSON syntax trees) to an output directory."
    )
    parser.add_argument("input", help="Path to a .tml file or a directory of .tml files.")
    parser.add_argument(
        "-o",
        "--output-dir",
        default=str(DEFAULT_OUTPUT_DIR),
        help="Directory where normalized files should be written (defaults to out/).",
    )
    parser.add_argument("--indent-size", type=int, default=2, help="Spaces per indentation level (default: 2).")
    parser.add_argument(
        "--pretty",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Spread multi-line objects and arrays over several lines (default: enabled).",
    )
    parser.add_argument("--json", action="store_true", help="Write the syntax tree as JSON instead of TML.")
    parser.add_argument(
        "--include-positions",
        action="store_true",
        help="Keep source positions in JSON output.",
    )
    parser.add_argument(
        "--query",
        metavar="LINE:COL",
        type=parse_point,
        help="Print the node under LINE:COL (1-based line, 0-based column) instead of writing files.",
    )
    parser.add_argument("--strip-comments", action="store_true", help="Drop all comments while parsing.")
    return parser.parse_args(argv)


def collect_inputs(path: Path) -> list[Path]:
    if path.is_dir():
        files = sorted(p for p in path.glob("*.tml") if p.is_file())
        if not files:
            raise FileNotFoundError(f"No .tml files found in directory: {path}")
        return files
    if path.is_file():
        return [path]
    raise FileNotFoundError(f"Input path does not exist: {path}")


def parse_point(text: str) -> Point:
    line, sep, column = text.partition(":")
    if not sep or not line.isdigit() or not column.isdigit():
        raise argparse.ArgumentTypeError(f"Expected LINE:COL, got {text!r}")
    return Point(line=int(line), column=int(column))


def format_document(document: TMLDocument, formatter: TMLFormatter, as_json: bool) -> str:
    if as_json:
        return formatter.format_json(document.nodes) + "\n"
    return formatter.format(document.nodes).rstrip() + "\n"


def generate(files: Iterable[Path], output_dir: Path, formatter: TMLFormatter, as_json: bool, strip: bool) -> None:
    output_dir.mkdir(parents=True, exist_ok=True)
    for source in files:
        document = parse_file(source, config={"strip_comments": strip})
        destination = output_dir / (source.with_suffix(".json").name if as_json else source.name)
        destination.write_text(format_document(document, formatter, as_json), encoding="utf-8")
        try:
            display_path = destination.relative_to(Path.cwd())
        except ValueError:
            display_path = destination
        print(f"Wrote {display_path}")


def query(path: Path, point: Point, include_positions: bool) -> None:
    document = parse_file(path)
    node = find_node_at_position_with_index(document.nodes, point)
    if node is None:
        print(f"No node at {point.line}:{point.column}")
        return
    parent = document.parent_of(node)
    parent_label = getattr(parent, "name", None) or getattr(parent, "type", None)
    print(f"{node.type} at {point.line}:{point.column}" + (f" (in {parent_label})" if parent_label else ""))
    print(json.dumps(node_to_dict(node, include_positions=include_positions), indent=2))


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    input_path = Path(args.input)
    if args.query:
        query(input_path, args.query, include_positions=args.include_positions)
        return
    files = collect_inputs(input_path)
    formatter = TMLFormatter(
        indent_size=args.indent_size, pretty=args.pretty, include_positions=args.include_positions
    )
    generate(files, Path(args.output_dir), formatter, as_json=args.json, strip=args.strip_comments)


if __name__ == "__main__":
    main()

"""Command-line front end for inspecting Agal files."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING

from agaltypes.backend import CommandBackend
from agaltypes.config import Settings, load_settings
from agaltypes.errors import BackendStructuredFailure
from agaltypes.formats.json import to_json
from agaltypes.index import TokenIndex
from agaltypes.literals import describe_literal
from agaltypes.locations import Position
from agaltypes.printer import RenderOptions
from agaltypes.queries import definition_at, hover, inline_hints
from agaltypes.tokens import Document

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agaltypes", description="Inspect inferred types of Agal files"
    )
    parser.add_argument("--config", type=Path, help="YAML settings file")
    parser.add_argument("--exe", help="Path of the agal executable")
    parser.add_argument("--max-length", type=int, help="Character budget for types")
    parser.add_argument("--verbose", action="store_true", help="Log debug output")

    subparsers = parser.add_subparsers(dest="command", required=True)

    tokens = subparsers.add_parser("tokens", help="List semantic tokens")
    tokens.add_argument("file", type=Path)

    hints = subparsers.add_parser("hints", help="List inline type hints")
    hints.add_argument("file", type=Path)

    for name, help_text in (
        ("hover", "Describe the symbol or literal at a position"),
        ("definition", "Show where the symbol at a position is declared"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("file", type=Path)
        sub.add_argument("line", type=int, help="Zero-based line")
        sub.add_argument("column", type=int, help="Zero-based column")

    return parser


def _settings(args: argparse.Namespace) -> Settings:
    settings = load_settings(args.config) if args.config else Settings()
    if args.exe:
        settings = replace(settings, executable=args.exe)
    if args.max_length is not None:
        settings = replace(settings, max_length=args.max_length)
    return settings


def _cmd_tokens(index: TokenIndex, doc: Document) -> int:
    for token in index.read(doc):
        start, end = token.location.start, token.location.end
        print(
            f"{start}-{end}\t{token.kind.name}\t{doc.text_at(token.location)}\t"
            f"{to_json(token.data_type)}"
        )
    return 0


def _cmd_hints(index: TokenIndex, doc: Document, options: RenderOptions) -> int:
    for hint in inline_hints(doc, index, options):
        print(f"{hint.location.start}\t{doc.text_at(hint.location)}{hint.label}")
    return 0


def _report_compile_error(index: TokenIndex, doc: Document) -> bool:
    """Print the compile error recorded for doc, if the last read failed."""
    if diagnostic := index.last_error(doc.path):
        print(diagnostic.format(), file=sys.stderr)
        return True
    return False


def _cmd_hover(
    index: TokenIndex, doc: Document, position: Position, options: RenderOptions
) -> int:
    if result := hover(doc, index, position, options):
        print(result.text)
        return 0
    # Point lookups read a file that does not compile as empty
    if _report_compile_error(index, doc):
        return 1
    if literal := describe_literal(doc.line_text(position.line), position.column):
        details = [f"base {literal.base}"] if literal.base else []
        if literal.value is not None:
            details.append(f"value {literal.value}")
        suffix = f" ({', '.join(details)})" if details else ""
        print(f"{literal.kind.value}: {literal.text}{suffix}")
        return 0
    print("Nothing at this position", file=sys.stderr)
    return 1


def _cmd_definition(index: TokenIndex, doc: Document, position: Position) -> int:
    definition = definition_at(doc, index, position)
    if definition is None:
        if not _report_compile_error(index, doc):
            print("No symbol at this position", file=sys.stderr)
        return 1
    print(definition)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = _settings(args)
        doc = Document.from_path(args.file)
        position = (
            Position(args.line, args.column) if hasattr(args, "line") else None
        )
    except (OSError, ValueError) as exc:
        print(f"agaltypes: {exc}", file=sys.stderr)
        return 2

    logger.debug("Using backend %s", settings.executable)
    index = TokenIndex(CommandBackend(settings.executable, settings.timeout))
    options = RenderOptions(
        max_length=args.max_length if args.max_length is not None else float("inf"),
        show_string_contents=settings.show_string,
    )

    try:
        if args.command == "tokens":
            return _cmd_tokens(index, doc)
        if args.command == "hints":
            return _cmd_hints(index, doc, settings.render_options())
        if args.command == "hover" and position is not None:
            return _cmd_hover(index, doc, position, options)
        if args.command == "definition" and position is not None:
            return _cmd_definition(index, doc, position)
    except BackendStructuredFailure as exc:
        print(exc.diagnostic.format(), file=sys.stderr)
        return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())

"""Hover descriptions for literals in source text.

Literals carry no semantic token, so they are recognized from the line
text around the cursor, in the order below; the first match wins.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class LiteralKind(Enum):
    COMMENT = "comment"
    STRING = "string"
    BYTE = "byte"
    NUMBER = "number"


@dataclass(frozen=True)
class LiteralHover:
    """A literal found at a position.

    Attributes:
        kind: What the literal is
        text: The literal as written
        base: Numeric base, for number and byte literals written in one
        value: Numeric value, when it can be computed

    """

    kind: LiteralKind
    text: str
    base: int | None = None
    value: int | float | None = None


_COMMENT = re.compile(r"#.*$")
_STRING = re.compile(r"([\"'])(?:\\.|[^\\])*?\1")
_BYTE = re.compile(r"(?<![\w$])0by[01](?:_?[01]){0,7}")
_BASE_N = re.compile(r"(?<![\w$])0n(\d{1,2})\|([0-9a-zA-Z]+(?:_[0-9a-zA-Z]+)*)")
_PREFIXED = re.compile(
    r"(?<![\w$])(?:0b[01](?:_?[01])*|0o[0-7]+|0d[0-9]+|0x[0-9a-fA-F]+)",
)
_DECIMAL = re.compile(r"(?<![\w$.])[0-9][0-9_]*(?:\.[0-9][0-9_]*)?")

_PREFIX_BASES = {"0b": 2, "0o": 8, "0d": 10, "0x": 16}
_MIN_BASE = 2
_MAX_BASE = 36


def _match_at(pattern: re.Pattern[str], line: str, column: int) -> re.Match[str] | None:
    for match in pattern.finditer(line):
        if match.start() <= column <= match.end():
            return match
    return None


def _parse_digits(digits: str, base: int) -> int | None:
    try:
        return int(digits.replace("_", ""), base)
    except ValueError:
        return None


def _base_n(match: re.Match[str]) -> LiteralHover | None:
    base = int(match.group(1))
    if not _MIN_BASE <= base <= _MAX_BASE:
        return None
    value = _parse_digits(match.group(2), base)
    if value is None:
        return None
    return LiteralHover(LiteralKind.NUMBER, match.group(0), base, value)


def describe_literal(line: str, column: int) -> LiteralHover | None:  # noqa: PLR0911
    """Describe the literal covering column in a line of source, if any.

    Example:
        describe_literal("x = 0n16|ff", 6)
        -> LiteralHover(NUMBER, "0n16|ff", base=16, value=255)

    """
    if match := _match_at(_COMMENT, line, column):
        return LiteralHover(LiteralKind.COMMENT, match.group(0))
    if match := _match_at(_STRING, line, column):
        return LiteralHover(LiteralKind.STRING, match.group(0))
    if match := _match_at(_BYTE, line, column):
        text = match.group(0)
        return LiteralHover(LiteralKind.BYTE, text, 2, _parse_digits(text[3:], 2))
    if (match := _match_at(_BASE_N, line, column)) and (hover := _base_n(match)):
        return hover
    if match := _match_at(_PREFIXED, line, column):
        text = match.group(0)
        base = _PREFIX_BASES[text[:2]]
        return LiteralHover(LiteralKind.NUMBER, text, base, _parse_digits(text[2:], base))
    if match := _match_at(_DECIMAL, line, column):
        text = match.group(0)
        digits = text.replace("_", "")
        value = float(digits) if "." in digits else int(digits)
        return LiteralHover(LiteralKind.NUMBER, text, 10, value)
    return None

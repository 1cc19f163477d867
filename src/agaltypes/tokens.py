"""Semantic tokens and the documents they belong to."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from pathlib import Path

from agaltypes.locations import Location, Position
from agaltypes.types import (
    ConstructorFunctionType,
    DataType,
    FunctionType,
    ModuleType,
)


class TokenKind(Enum):
    """Token kinds, valued by their semantic-token legend names."""

    CLASS = "class"
    FUNCTION = "function"
    VARIABLE = "variable"
    PARAMETER = "parameter"
    MODULE = "namespace"
    KEYWORD_CONTROL = "control"


class TokenModifier(Enum):
    """Token modifiers, valued by their semantic-token legend names."""

    CONSTANT = "readonly"
    ITERABLE = "iterable"


TOKEN_TYPES_LEGEND = tuple(kind.value for kind in TokenKind)
TOKEN_MODIFIERS_LEGEND = tuple(modifier.value for modifier in TokenModifier)

_ORIGINAL_DECLARATION_TYPES: dict[TokenKind, tuple[type[DataType], ...]] = {
    TokenKind.FUNCTION: (FunctionType, ConstructorFunctionType),
    TokenKind.MODULE: (ModuleType,),
}


@dataclass(frozen=True)
class SemanticToken:
    """A symbol occurrence reported by the backend.

    Attributes:
        definition: Where the symbol is declared
        location: Span of this occurrence
        kind: Token kind
        modifiers: Token modifiers
        data_type: Inferred type, None when unknown
        is_original_declaration: True for the declaring occurrence of a
            function or module, whose data_type is then always present

    """

    definition: Position
    location: Location
    kind: TokenKind
    modifiers: frozenset[TokenModifier] = frozenset()
    data_type: DataType | None = None
    is_original_declaration: bool = False

    def __post_init__(self) -> None:
        if not self.is_original_declaration:
            return
        expected = _ORIGINAL_DECLARATION_TYPES.get(self.kind)
        if expected is None:
            msg = (
                f"Original declarations must be functions or modules, "
                f"got {self.kind.name}"
            )
            raise ValueError(msg)
        if not isinstance(self.data_type, expected):
            names = [t.__name__ for t in expected]
            msg = (
                f"Original {self.kind.name} declaration requires one of {names}, "
                f"got {type(self.data_type).__name__}"
            )
            raise ValueError(msg)

    @property
    def is_declaration(self) -> bool:
        """Return True if this occurrence is where its symbol is declared."""
        return self.definition == self.location.start


@dataclass(frozen=True)
class Document:
    """A document snapshot, identified by its path.

    The version is optional; editors without monotonic versions fall back
    to comparing content hashes.
    """

    path: str
    text: str = field(default="", repr=False)
    version: int | None = None

    @classmethod
    def from_path(cls, path: str | Path, version: int | None = None) -> Document:
        """Read a document from disk."""
        file_path = Path(path)
        return cls(str(file_path), file_path.read_text(encoding="utf-8"), version)

    @cached_property
    def content_hash(self) -> str:
        """SHA-256 hex digest of the text, computed on first access."""
        return hashlib.sha256(self.text.encode()).hexdigest()

    @cached_property
    def lines(self) -> list[str]:
        return self.text.split("\n")

    def line_text(self, line: int) -> str:
        """Return the text of a line, or an empty string past the end."""
        if 0 <= line < len(self.lines):
            return self.lines[line]
        return ""

    def text_at(self, location: Location) -> str:
        """Return the text covered by a location, end column exclusive."""
        start, end = location.start, location.end
        if start.line == end.line:
            return self.line_text(start.line)[start.column : end.column]
        parts = [self.line_text(start.line)[start.column :]]
        parts.extend(self.line_text(n) for n in range(start.line + 1, end.line))
        parts.append(self.line_text(end.line)[: end.column])
        return "\n".join(parts)

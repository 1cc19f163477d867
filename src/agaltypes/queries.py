"""Editor-facing queries built on the token index.

These are the operations an editor integration calls: type descriptions
for hovers and inline hints, go-to-definition, and the locations a rename
has to touch. They only compute; applying results is up to the editor.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from agaltypes.formats.json import to_json
from agaltypes.printer import RenderOptions, render
from agaltypes.resolver import resolve
from agaltypes.simplifier import simplify
from agaltypes.tokens import TokenKind
from agaltypes.types import ConstructorFunctionType, FunctionType

if TYPE_CHECKING:
    from agaltypes.index import TokenIndex
    from agaltypes.locations import Location, Position
    from agaltypes.tokens import Document, SemanticToken
    from agaltypes.types import DataType

# Inline hints show single-line strings in a tight budget
INLINE_OPTIONS = RenderOptions(max_length=15, multiline_strings=False)


@dataclass(frozen=True)
class TypeHover:
    """Hover contents for a symbol: its rendered type and raw JSON."""

    token: SemanticToken
    text: str
    raw: str


@dataclass(frozen=True)
class InlineHint:
    """Text to show after a declaration."""

    location: Location
    label: str


def normalize(
    doc: Document,
    index: TokenIndex,
    data_type: DataType | None,
) -> DataType | None:
    """Resolve then simplify a type."""
    return simplify(resolve(doc, index, data_type))


def describe(
    doc: Document,
    index: TokenIndex,
    data_type: DataType | None,
    options: RenderOptions | None = None,
) -> str:
    """Resolve, simplify and render a type."""
    return render(normalize(doc, index, data_type), options)


def hover(
    doc: Document,
    index: TokenIndex,
    position: Position,
    options: RenderOptions | None = None,
) -> TypeHover | None:
    """Describe the type of the symbol at position, None if there is none."""
    token = index.find_at(doc, position)
    if token is None:
        return None
    data_type = normalize(doc, index, token.data_type)
    return TypeHover(
        token=token,
        text=render(data_type, options),
        raw=to_json(data_type),
    )


def _wants_hint(token: SemanticToken) -> bool:
    if token.location.start.column == 0 or not token.is_declaration:
        return False
    return not token.is_original_declaration or token.kind is TokenKind.FUNCTION


def inline_hints(
    doc: Document,
    index: TokenIndex,
    options: RenderOptions = INLINE_OPTIONS,
) -> list[InlineHint]:
    """Return type hints for the declarations in a document.

    Declarations at column 0 are skipped, as are original declarations
    other than functions. A function declaration is labelled with its
    return type, anything else with ": <type>".

    Raises:
        BackendStructuredFailure: If the document does not compile

    """
    hints = []
    for token in index.read(doc):
        if not _wants_hint(token):
            continue
        data_type = normalize(doc, index, token.data_type)
        if token.is_original_declaration and isinstance(
            data_type, FunctionType | ConstructorFunctionType
        ):
            label = f" {render(data_type.return_type, options)} "
        else:
            label = f": {render(data_type, options)}"
        hints.append(InlineHint(token.location, label))
    return hints


def definition_at(
    doc: Document,
    index: TokenIndex,
    position: Position,
) -> Position | None:
    """Return where the symbol at position is declared."""
    token = index.find_at(doc, position)
    return token.definition if token is not None else None


def rename_locations(
    doc: Document,
    index: TokenIndex,
    position: Position,
) -> list[Location]:
    """Return every occurrence of the symbol at position, in document order.

    Raises:
        LookupError: If there is no symbol at position

    """
    symbol = index.find_at(doc, position)
    if symbol is None:
        msg = f"No symbol to rename at {position}"
        raise LookupError(msg)
    return [
        token.location
        for token in index.read(doc)
        if token.definition == symbol.definition
    ]

"""Dereference identifier types through the token index.

The backend leaves forward references in type trees as IdentifierType
nodes pointing at the declaring occurrence of a symbol. Resolution replaces
each of them with the type of the token found there, recursively.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from agaltypes.types import (
    ConstructorFunctionType,
    ConstructorValueType,
    DataType,
    ElementType,
    FunctionType,
    IdentifierType,
    IterableType,
    ListType,
    PromiseType,
    ReferenceType,
    ReturnValueType,
    UnionType,
)

if TYPE_CHECKING:
    from agaltypes.index import TokenIndex
    from agaltypes.locations import Position
    from agaltypes.tokens import Document


def resolve(
    doc: Document,
    index: TokenIndex,
    data_type: DataType | None,
) -> DataType | None:
    """Replace identifier types in a tree with the types they refer to.

    Identifiers whose location has no token, or whose token has no type,
    become None. So does an identifier that refers back to itself through
    a chain of declarations.

    Args:
        doc: Document the identifier locations belong to
        index: Token index used to look up declarations
        data_type: The type to resolve

    Returns:
        A new tree without identifier types, or None

    """
    return _resolve(doc, index, data_type, frozenset())


def _resolve(  # noqa: PLR0911
    doc: Document,
    index: TokenIndex,
    data_type: DataType | None,
    path: frozenset[Position],
) -> DataType | None:
    def recurse(child: DataType | None) -> DataType | None:
        return _resolve(doc, index, child, path)

    match data_type:
        case None:
            return None
        case IdentifierType(location=location):
            start = location.start
            if start in path:
                return None
            token = index.find_at(doc, start)
            if token is None or token.data_type is None:
                return None
            return _resolve(doc, index, token.data_type, path | {start})
        case ReferenceType(inner=inner) | ListType(inner=inner) | IterableType(
            inner=inner
        ):
            return replace(data_type, inner=recurse(inner))
        case (
            ReturnValueType(value=value)
            | ConstructorValueType(value=value)
            | ElementType(value=value)
            | PromiseType(value=value)
        ):
            return replace(data_type, value=recurse(value))
        case FunctionType() | ConstructorFunctionType():
            return replace(
                data_type,
                parameters=tuple(recurse(p) for p in data_type.parameters),
                return_type=recurse(data_type.return_type),
            )
        case UnionType(alternatives=alternatives):
            return UnionType(tuple(recurse(alt) for alt in alternatives))
        case _:
            # Member, call, instance and class types keep their identifiers
            return data_type

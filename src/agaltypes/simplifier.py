"""Canonicalize resolved type trees."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import replace

from agaltypes.codecs import canonical_key
from agaltypes.types import (
    ClassType,
    ConstructorFunctionType,
    ConstructorValueType,
    DataType,
    ElementType,
    FunctionType,
    InstanceType,
    IterableType,
    ListType,
    ReferenceType,
    ReturnValueType,
    UnionType,
)


def simplify(data_type: DataType | None) -> DataType | None:  # noqa: PLR0911
    """Return a canonical copy of a resolved type tree.

    Unions are flattened of unknown and duplicate alternatives: none left
    gives None, one left gives that alternative. The input is not modified.
    Identifier types are not followed, so resolve first.

    Example:
        simplify(UnionType((StringType("hi"), StringType("hi"), None)))
        -> StringType("hi")

    """
    match data_type:
        case None:
            return None
        case UnionType(alternatives=alternatives):
            unique = _unique(simplify(alt) for alt in alternatives)
            if not unique:
                return None
            if len(unique) == 1:
                return unique[0]
            return UnionType(tuple(unique))
        case ReferenceType(inner=inner) | ListType(inner=inner) | IterableType(
            inner=inner
        ):
            return replace(data_type, inner=simplify(inner))
        case InstanceType(properties=properties):
            return replace(data_type, properties=_simplify_props(properties))
        case ClassType(
            static_properties=static_properties,
            instance_properties=instance_properties,
        ):
            return replace(
                data_type,
                static_properties=_simplify_props(static_properties),
                instance_properties=_simplify_props(instance_properties),
            )
        case (
            ReturnValueType(value=value)
            | ConstructorValueType(value=value)
            | ElementType(value=value)
        ):
            return replace(data_type, value=simplify(value))
        case FunctionType() | ConstructorFunctionType():
            return replace(
                data_type,
                parameters=tuple(simplify(p) for p in data_type.parameters),
                return_type=simplify(data_type.return_type),
            )
        case _:
            return data_type


def _simplify_props(
    props: Mapping[str, DataType | None],
) -> dict[str, DataType | None]:
    return {name: simplify(value) for name, value in props.items()}


def _unique(types: Iterable[DataType | None]) -> list[DataType]:
    """Drop None and structural duplicates, keeping first occurrences."""
    seen: set[str] = set()
    result: list[DataType] = []
    for data_type in types:
        if data_type is None:
            continue
        key = canonical_key(data_type)
        if key not in seen:
            seen.add(key)
            result.append(data_type)
    return result

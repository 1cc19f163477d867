"""Render type trees as length-bounded text.

Every variant has a fixed template. The caller's budget is threaded down
the tree: each template subtracts the width of its own syntax before
rendering its children, and any render that still exceeds its budget
collapses to an ellipsis. A render is therefore never longer than
max(budget, 3) characters.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from agaltypes.formats.json import to_json
from agaltypes.types import (
    CallType,
    ClassType,
    ConstructorFunctionType,
    ConstructorValueType,
    DataType,
    ElementType,
    FunctionType,
    IdentifierType,
    InstanceType,
    IterableType,
    ListType,
    MemberType,
    ModuleType,
    ParamsType,
    ParamType,
    PrimitiveType,
    PromiseType,
    ReferenceType,
    ReturnValueType,
    StringType,
    UnionType,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

UNKNOWN = "Desconocido"
ELLIPSIS = "..."

_MIN_TRUNCATED_STRING = len("'...'")
_STRING_ESCAPES = (
    ("\\", "\\\\"),
    ("'", "\\'"),
    ("\r", "\\r"),
    ("\t", "\\t"),
    ("\0", "\\0"),
)
_MULTILINE_JOIN = "\\n' +\n'"
_FUNCTION_SYNTAX = len("fn (){  }")


@dataclass(frozen=True)
class RenderOptions:
    """How to render a type.

    Attributes:
        max_length: Character budget for the whole render (default unbounded)
        show_string_contents: Render known string values instead of "Cadena"
        multiline_strings: Split string values on newlines, joining the
            pieces with a continuation; otherwise escape newlines inline

    """

    max_length: float = math.inf
    show_string_contents: bool = True
    multiline_strings: bool = True


def render(data_type: DataType | None, options: RenderOptions | None = None) -> str:
    """Render a resolved and simplified type as text.

    Example:
        render(FunctionType((PrimitiveType(NUMBER),), PrimitiveType(BOOLEAN)))
        -> "fn (Numero){ Buleano }"

    """
    options = options or RenderOptions()
    return _render(data_type, options.max_length, options)


def _render(data_type: DataType | None, budget: float, options: RenderOptions) -> str:
    budget = max(budget, 0)
    text = _render_variant(data_type, budget, options)
    if len(text) > budget:
        return ELLIPSIS
    return text


def _render_variant(  # noqa: C901, PLR0911
    data_type: DataType | None,
    budget: float,
    options: RenderOptions,
) -> str:
    def child(inner: DataType | None, syntax: str) -> str:
        return _render(inner, budget - len(syntax), options)

    match data_type:
        case None:
            return UNKNOWN
        case PrimitiveType(kind=kind):
            return kind.value.capitalize()
        case ReferenceType():
            return "Referencia"
        case StringType(value=value):
            return _render_string(value, budget, options)
        case ListType(inner=inner):
            content = child(inner, "[]")
            return content and f"[{content}]"
        case IterableType(inner=inner):
            content = child(inner, "@")
            return content and f"@{content}"
        case FunctionType(parameters=parameters, return_type=return_type):
            return _render_function(parameters, return_type, budget, options)
        case ConstructorFunctionType(return_type=return_type):
            return f"clase {child(return_type, 'clase ')}"
        case ConstructorValueType(value=value):
            return f"clase {child(value, 'clase ')}"
        case ClassType(name=name):
            return f"clase {name}"
        case UnionType(alternatives=alternatives):
            return _fit(alternatives, budget, " | ", options)
        case CallType(callee=callee, args=args):
            return _render_call(callee, args, budget, options)
        case MemberType(object=obj, member=member, is_instance_access=is_instance):
            return _render_member(obj, member, is_instance, budget, options)
        case InstanceType(name=name):
            return name
        case ModuleType(path=path):
            return f"importa '{path}'"
        case ParamType(index=index):
            return f"Param_{index}?"
        case ParamsType():
            return "@Params?"
        case ElementType(value=value):
            return f"Elemento<{child(value, 'Elemento<>')}>"
        case PromiseType(value=value):
            return f"asinc {child(value, 'asinc ')}"
        case ReturnValueType(value=value):
            return f"ret {child(value, 'ret ')}"
        case IdentifierType(location=location):
            return str(location.start)
        case _:
            return to_json(data_type)


def _render_string(value: str | None, budget: float, options: RenderOptions) -> str:
    if value is None or not options.show_string_contents:
        return "Cadena"
    for old, new in _STRING_ESCAPES:
        value = value.replace(old, new)
    if options.multiline_strings:
        text = _MULTILINE_JOIN.join(value.split("\n"))
    else:
        text = value.replace("\n", "\\n")

    if len(text) + 2 <= budget:
        return f"'{text}'"
    if budget >= _MIN_TRUNCATED_STRING:
        kept = text[: int(budget) - _MIN_TRUNCATED_STRING].rstrip()
        return f"'{kept}{ELLIPSIS}'"
    return f"'{ELLIPSIS}'"


def _render_function(
    parameters: Sequence[DataType | None],
    return_type: DataType | None,
    budget: float,
    options: RenderOptions,
) -> str:
    # Keep room for at least an ellipsis in the parameter list
    reserve = len(ELLIPSIS) if parameters else 0
    ret = _render(return_type, budget - _FUNCTION_SYNTAX - reserve, options)
    params = _fit(parameters, budget - _FUNCTION_SYNTAX - len(ret), ", ", options)
    return f"fn ({params}){{ {ret} }}"


def _render_call(
    callee: DataType | None,
    args: Sequence[DataType | None],
    budget: float,
    options: RenderOptions,
) -> str:
    reserve = len(ELLIPSIS) if args else 0
    name = _render(callee, budget - len("()") - reserve, options)
    arguments = _fit(args, budget - len(name) - len("()"), ", ", options)
    return f"{name}({arguments})"


def _render_member(
    obj: DataType | None,
    member: DataType | None,
    is_instance: bool,  # noqa: FBT001
    budget: float,
    options: RenderOptions,
) -> str:
    if isinstance(member, StringType) and member.value:
        suffix = f"{'::' if is_instance else '.'}{member.value}"
    else:
        sigil = "::" if is_instance else ""
        key = _render(member, budget - len(sigil) - len("[]"), options)
        suffix = f"{sigil}[{key}]"
    target = _render(obj, budget - len(suffix) - len("()"), options)
    return f"({target}){suffix}"


def _fit(
    items: Sequence[DataType | None],
    budget: float,
    separator: str,
    options: RenderOptions,
) -> str:
    """Join renders of items while they fit, ending with an ellipsis if not.

    On overflow, trailing renders are dropped until the ellipsis fits too.
    """
    parts: list[str] = []
    used = 0
    for item in items:
        gap = len(separator) if parts else 0
        room = max(budget - used - gap, 0)
        part = _render_variant(item, room, options)
        if len(part) > room:
            break
        parts.append(part)
        used += gap + len(part)
    else:
        return separator.join(parts)

    while parts and used + len(separator) + len(ELLIPSIS) > budget:
        dropped = parts.pop()
        used -= len(dropped) + (len(separator) if parts else 0)
    parts.append(ELLIPSIS)
    return separator.join(parts)

"""Conversion between the backend wire format and Python objects.

The backend speaks JSON in which every type is an object keyed by "class"
(and, for the "agal" class, by "type"). These functions convert that shape
to and from DataType trees and SemanticTokens.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, TypeVar

from agaltypes.locations import Location, Position
from agaltypes.tokens import SemanticToken, TokenKind, TokenModifier
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
    PrimitiveKind,
    PrimitiveType,
    PromiseType,
    ReferenceType,
    ReturnValueType,
    StringType,
    UnionType,
)

_CLASS_KEY = "class"
_TYPE_KEY = "type"
_VAL_KEY = "val"

# "agal" class: scalar and container types share a discriminator
_AGAL_CONTAINERS: dict[str, type[ReferenceType | ListType | IterableType]] = {
    "referencia": ReferenceType,
    "lista": ListType,
    "iterable": IterableType,
}
_WRAPPERS: dict[
    str,
    type[ReturnValueType | ConstructorValueType | ElementType | PromiseType],
] = {
    "ret": ReturnValueType,
    "constructor": ConstructorValueType,
    "item": ElementType,
    "promesa": PromiseType,
}
_CALLABLES: dict[str, type[FunctionType | ConstructorFunctionType]] = {
    "fn": FunctionType,
    "constructor_fn": ConstructorFunctionType,
}


K = TypeVar("K")
V = TypeVar("V")


def _invert(mapping: Mapping[K, V]) -> dict[V, K]:
    return {v: k for k, v in mapping.items()}


_AGAL_CONTAINER_NAMES = _invert(_AGAL_CONTAINERS)
_WRAPPER_NAMES = _invert(_WRAPPERS)
_CALLABLE_NAMES = _invert(_CALLABLES)


# =============================================================================
# Positions
# =============================================================================


def position_to_builtins(position: Position) -> dict[str, int]:
    return {"line": position.line, "column": position.column}


def position_from_builtins(data: Mapping[str, Any]) -> Position:
    return Position(line=int(data["line"]), column=int(data["column"]))


def location_to_builtins(location: Location) -> dict[str, dict[str, int]]:
    return {
        "start": position_to_builtins(location.start),
        "end": position_to_builtins(location.end),
    }


def location_from_builtins(data: Mapping[str, Any]) -> Location:
    return Location(
        start=position_from_builtins(data["start"]),
        end=position_from_builtins(data["end"]),
    )


# =============================================================================
# Data types: DataType -> builtins
# =============================================================================


def _props_to_builtins(
    props: Mapping[str, DataType | None],
) -> dict[str, dict[str, Any] | None]:
    return {name: to_builtins(value) for name, value in props.items()}


def to_builtins(data_type: DataType | None) -> dict[str, Any] | None:  # noqa: PLR0911
    """Convert a data type tree to the backend's JSON-compatible shape.

    Args:
        data_type: The type to convert, None for an unknown type

    Returns:
        A dict keyed by "class", or None for an unknown type

    Raises:
        ValueError: If the object is not a known data type

    """
    match data_type:
        case None:
            return None
        case PrimitiveType(kind=kind):
            return {_CLASS_KEY: "agal", _TYPE_KEY: kind.value}
        case ReferenceType() | ListType() | IterableType():
            return {
                _CLASS_KEY: "agal",
                _TYPE_KEY: _AGAL_CONTAINER_NAMES[type(data_type)],
                _VAL_KEY: to_builtins(data_type.inner),
            }
        case StringType(value=value):
            result: dict[str, Any] = {_CLASS_KEY: "agal", _TYPE_KEY: "cadena"}
            if value is not None:
                result[_VAL_KEY] = value
            return result
        case IdentifierType(location=location):
            return {_CLASS_KEY: "id", "location": location_to_builtins(location)}
        case ParamsType():
            return {_CLASS_KEY: "params"}
        case ParamType(index=index):
            return {_CLASS_KEY: "param", "index": index}
        case InstanceType(name=name, properties=properties):
            return {
                _CLASS_KEY: "instancia",
                "name": name,
                "props": _props_to_builtins(properties),
            }
        case ReturnValueType() | ConstructorValueType() | ElementType() | PromiseType():
            return {
                _CLASS_KEY: _WRAPPER_NAMES[type(data_type)],
                _VAL_KEY: to_builtins(data_type.value),
            }
        case MemberType(object=obj, member=member, is_instance_access=is_instance):
            return {
                _CLASS_KEY: "member",
                "object": to_builtins(obj),
                "member": to_builtins(member),
                "is_instance": is_instance,
            }
        case UnionType(alternatives=alternatives):
            return {
                _CLASS_KEY: "multiple",
                _VAL_KEY: [to_builtins(alt) for alt in alternatives],
            }
        case CallType(callee=callee, args=args):
            return {
                _CLASS_KEY: "llamada",
                "callee": to_builtins(callee),
                "args": [to_builtins(arg) for arg in args],
            }
        case FunctionType() | ConstructorFunctionType():
            return {
                _CLASS_KEY: _CALLABLE_NAMES[type(data_type)],
                "params": [to_builtins(p) for p in data_type.parameters],
                "ret": to_builtins(data_type.return_type),
            }
        case ModuleType(path=path):
            return {_CLASS_KEY: "mod", "path": path}
        case ClassType(
            name=name,
            static_properties=static_properties,
            instance_properties=instance_properties,
        ):
            return {
                _CLASS_KEY: "clase",
                "name": name,
                "static_props": _props_to_builtins(static_properties),
                "instance_props": _props_to_builtins(instance_properties),
            }
        case DataType():
            # Registered outside this module: dump its tag and fields
            return {_CLASS_KEY: data_type.tag, **vars(data_type)}
    msg = f"Cannot serialize object of type {type(data_type).__name__}"
    raise ValueError(msg)


# =============================================================================
# Data types: builtins -> DataType
# =============================================================================


def _require(data: Mapping[str, Any], key: str) -> Any:
    if key not in data:
        msg = f"Missing required '{key}' field"
        raise KeyError(msg)
    return data[key]


def _require_str(data: Mapping[str, Any], key: str) -> str:
    value = _require(data, key)
    if not isinstance(value, str):
        msg = f"Field '{key}' must be a string, got {type(value).__name__}"
        raise ValueError(msg)
    return value


def _props_from_builtins(data: Any) -> dict[str, DataType | None]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        msg = f"Properties must be an object, got {type(data).__name__}"
        raise ValueError(msg)
    return {str(name): from_builtins(value) for name, value in data.items()}


def _from_agal(data: Mapping[str, Any]) -> DataType:
    kind = _require(data, _TYPE_KEY)
    if kind == "cadena":
        value = data.get(_VAL_KEY)
        return StringType(value=value if isinstance(value, str) else None)
    if container := _AGAL_CONTAINERS.get(kind):
        return container(inner=from_builtins(data.get(_VAL_KEY)))
    try:
        return PrimitiveType(kind=PrimitiveKind(kind))
    except ValueError:
        msg = f"Unknown agal type '{kind}'"
        raise ValueError(msg) from None


def from_builtins(data: Mapping[str, Any] | None) -> DataType | None:  # noqa: PLR0911
    """Build a data type tree from the backend's JSON-compatible shape.

    Unknown keys are ignored.

    Args:
        data: A dict keyed by "class", or None for an unknown type

    Returns:
        The data type, or None

    Raises:
        KeyError: If a required field is missing
        ValueError: If the class is not recognized

    """
    if data is None:
        return None
    cls = _require(data, _CLASS_KEY)

    if cls == "agal":
        return _from_agal(data)
    if wrapper := _WRAPPERS.get(cls):
        return wrapper(value=from_builtins(data.get(_VAL_KEY)))
    if callable_cls := _CALLABLES.get(cls):
        return callable_cls(
            parameters=tuple(from_builtins(p) for p in data.get("params") or ()),
            return_type=from_builtins(data.get("ret")),
        )

    match cls:
        case "id":
            return IdentifierType(location_from_builtins(_require(data, "location")))
        case "params":
            return ParamsType()
        case "param":
            return ParamType(index=int(_require(data, "index")))
        case "instancia":
            return InstanceType(
                name=_require_str(data, "name"),
                properties=_props_from_builtins(data.get("props")),
            )
        case "member":
            return MemberType(
                object=from_builtins(data.get("object")),
                member=from_builtins(data.get("member")),
                is_instance_access=bool(data.get("is_instance", False)),
            )
        case "multiple":
            return UnionType(
                alternatives=tuple(from_builtins(v) for v in data.get(_VAL_KEY) or ()),
            )
        case "llamada":
            return CallType(
                callee=from_builtins(data.get("callee")),
                args=tuple(from_builtins(a) for a in data.get("args") or ()),
            )
        case "mod":
            return ModuleType(path=_require_str(data, "path"))
        case "clase":
            return ClassType(
                name=_require_str(data, "name"),
                static_properties=_props_from_builtins(data.get("static_props")),
                instance_properties=_props_from_builtins(data.get("instance_props")),
            )

    msg = f"Unknown type class '{cls}'"
    raise ValueError(msg)


def canonical_key(data_type: DataType | None) -> str:
    """Return a string that is equal for structurally equal type trees."""
    return json.dumps(
        to_builtins(data_type), sort_keys=True, separators=(",", ":"), default=str
    )


# =============================================================================
# Tokens
# =============================================================================


def token_to_builtins(token: SemanticToken) -> dict[str, Any]:
    """Convert a token to the backend's JSON-compatible shape."""
    return {
        "definition": position_to_builtins(token.definition),
        "location": location_to_builtins(token.location),
        "token_type": _kind_key(token.kind),
        "token_modifier": sorted(_modifier_key(m) for m in token.modifiers),
        "data_type": to_builtins(token.data_type),
        "is_original_decl": token.is_original_declaration,
    }


def token_from_builtins(data: Mapping[str, Any]) -> SemanticToken:
    """Build a token from the backend's JSON-compatible shape.

    Raises:
        KeyError: If a required field or a token kind/modifier is unknown
        ValueError: If the token violates the original-declaration rule

    """
    return SemanticToken(
        definition=position_from_builtins(_require(data, "definition")),
        location=location_from_builtins(_require(data, "location")),
        kind=_kind_from_key(_require(data, "token_type")),
        modifiers=frozenset(
            _modifier_from_key(m) for m in data.get("token_modifier") or ()
        ),
        data_type=from_builtins(data.get("data_type")),
        is_original_declaration=bool(data.get("is_original_decl", False)),
    )


# The wire uses PascalCase member names: "KeywordControl" <-> KEYWORD_CONTROL
def _kind_key(kind: TokenKind) -> str:
    return "".join(part.capitalize() for part in kind.name.split("_"))


def _modifier_key(modifier: TokenModifier) -> str:
    return modifier.name.capitalize()


_KINDS_BY_KEY = {_kind_key(kind): kind for kind in TokenKind}
_MODIFIERS_BY_KEY = {_modifier_key(mod): mod for mod in TokenModifier}


def _kind_from_key(key: str) -> TokenKind:
    if key not in _KINDS_BY_KEY:
        msg = f"Unknown token type '{key}'. Available: {list(_KINDS_BY_KEY)}"
        raise KeyError(msg)
    return _KINDS_BY_KEY[key]


def _modifier_from_key(key: str) -> TokenModifier:
    if key not in _MODIFIERS_BY_KEY:
        msg = f"Unknown token modifier '{key}'. Available: {list(_MODIFIERS_BY_KEY)}"
        raise KeyError(msg)
    return _MODIFIERS_BY_KEY[key]

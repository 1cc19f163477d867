"""Type representation for inferred Agal types."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import ClassVar, dataclass_transform

from agaltypes.locations import Location


@dataclass(frozen=True)
@dataclass_transform(frozen_default=True)
class DataType:
    """Base for inferred data types.

    Subclasses become frozen dataclasses and are registered under a tag,
    by default their class name lowercased without the "Type" suffix
    (ListType -> "list"). Tags are internal names; the backend's "class"
    keys are mapped in agaltypes.codecs.
    """

    tag: ClassVar[str]
    registry: ClassVar[dict[str, type[DataType]]] = {}

    def __init_subclass__(cls, tag: str | None = None) -> None:
        dataclass(frozen=True)(cls)
        cls.tag = tag or cls.__name__.lower().removesuffix("type")

        previous = DataType.registry.setdefault(cls.tag, cls)
        if previous is not cls:
            msg = (
                f"Data type tag '{cls.tag}' is already registered "
                f"by {previous.__qualname__}"
            )
            raise ValueError(msg)


class PrimitiveKind(StrEnum):
    """Scalar kinds, valued by their Agal names."""

    NUMBER = "numero"
    BYTE = "byte"
    NOTHING = "nada"
    BOOLEAN = "buleano"
    CHAR = "caracter"


class PrimitiveType(DataType, tag="primitive"):
    """Scalar leaf: PrimitiveType(PrimitiveKind.NUMBER)."""

    kind: PrimitiveKind


class ReferenceType(DataType, tag="reference"):
    """Reference to another type."""

    inner: DataType | None = None


class ListType(DataType, tag="list"):
    """List type: [Numero] -> ListType(inner=PrimitiveType(NUMBER))."""

    inner: DataType | None = None


class IterableType(DataType, tag="iterable"):
    """Iterable type: @Numero -> IterableType(inner=PrimitiveType(NUMBER))."""

    inner: DataType | None = None


class StringType(DataType, tag="string"):
    """String type, carrying the literal value when statically known."""

    value: str | None = None


class IdentifierType(DataType, tag="identifier"):
    """Unresolved reference to the type of the symbol at a location."""

    location: Location


class ParamsType(DataType, tag="params"):
    """Variadic parameters placeholder."""


class ParamType(DataType, tag="param"):
    """Positional parameter placeholder."""

    index: int


class InstanceType(DataType, tag="instance"):
    """Instance of a class."""

    name: str
    properties: Mapping[str, DataType | None] = field(default_factory=dict)


class ReturnValueType(DataType, tag="return"):
    """Value produced by a return statement."""

    value: DataType | None = None


class ConstructorValueType(DataType, tag="constructor_value"):
    """Value built by a constructor."""

    value: DataType | None = None


class ElementType(DataType, tag="element"):
    """Element yielded by an iterable."""

    value: DataType | None = None


class PromiseType(DataType, tag="promise"):
    """Value of an async computation."""

    value: DataType | None = None


class MemberType(DataType, tag="member"):
    """Member access: object.member, or object::member for instance access."""

    object: DataType | None
    member: DataType | None
    is_instance_access: bool = False


class UnionType(DataType, tag="union"):
    """One of several possible types, in order."""

    alternatives: tuple[DataType | None, ...] = ()


class CallType(DataType, tag="call"):
    """Result of invoking a callable."""

    callee: DataType | None
    args: tuple[DataType | None, ...] = ()


class FunctionType(DataType, tag="function"):
    """Callable signature."""

    parameters: tuple[DataType | None, ...] = ()
    return_type: DataType | None = None


class ConstructorFunctionType(DataType, tag="constructor_function"):
    """Callable that constructs instances."""

    parameters: tuple[DataType | None, ...] = ()
    return_type: DataType | None = None


class ModuleType(DataType, tag="module"):
    """Imported module, identified by its path."""

    path: str


class ClassType(DataType, tag="class"):
    """Class declaration, also used as the module descriptor of a file."""

    name: str
    static_properties: Mapping[str, DataType | None] = field(default_factory=dict)
    instance_properties: Mapping[str, DataType | None] = field(default_factory=dict)


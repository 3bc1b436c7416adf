"""Closed type-system model compared by the diff engine.

Every definition the engine sees is one of a fixed set of frozen dataclasses.
Rules dispatch on these variants with ``match``; a definition of any other
class is rejected with a TypeError.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TypeAlias

# GraphQL line terminators
LINE_BREAK = re.compile(r"\r\n|[\r\n]")


class TypeRefKind(Enum):
    """Wrapper kind of a type reference."""

    NAMED = "named"
    LIST = "list"
    NON_NULL = "non_null"


@dataclass(frozen=True)
class TypeRef:
    """A (possibly wrapped) reference to a named type, e.g. ``[Post!]!``."""

    kind: TypeRefKind
    name: str | None = None
    of_type: TypeRef | None = None

    @classmethod
    def named(cls, name: str) -> TypeRef:
        return cls(TypeRefKind.NAMED, name=name)

    @classmethod
    def list_of(cls, of_type: TypeRef) -> TypeRef:
        return cls(TypeRefKind.LIST, of_type=of_type)

    @classmethod
    def non_null(cls, of_type: TypeRef) -> TypeRef:
        return cls(TypeRefKind.NON_NULL, of_type=of_type)

    @property
    def is_non_null(self) -> bool:
        return self.kind == TypeRefKind.NON_NULL

    @property
    def named_type(self) -> str:
        """Name of the innermost named type."""
        ref: TypeRef = self
        while ref.of_type is not None:
            ref = ref.of_type
        return ref.name or ""

    @property
    def list_depth(self) -> int:
        """Number of list wrappers around the named type."""
        depth = 0
        ref: TypeRef | None = self
        while ref is not None:
            if ref.kind == TypeRefKind.LIST:
                depth += 1
            ref = ref.of_type
        return depth

    def nullability(self) -> tuple[bool, ...]:
        """Non-null flag per nesting level, outermost first.

        ``[Int!]`` yields ``(False, True)``: the list is nullable, its items
        are not.
        """
        flags: list[bool] = []
        ref: TypeRef | None = self
        while ref is not None:
            non_null = ref.kind == TypeRefKind.NON_NULL
            if non_null and ref.of_type is not None:
                ref = ref.of_type
            flags.append(non_null)
            ref = ref.of_type if ref.kind == TypeRefKind.LIST else None
        return tuple(flags)

    def __str__(self) -> str:
        match self.kind:
            case TypeRefKind.NAMED:
                return self.name or ""
            case TypeRefKind.LIST:
                return f"[{self.of_type}]"
            case TypeRefKind.NON_NULL:
                return f"{self.of_type}!"


@dataclass(frozen=True)
class Argument:
    """Argument of a field or directive definition."""

    name: str
    type: TypeRef
    default_value: str | None = None  # Printed SDL literal, None if absent
    description: str | None = None

    @property
    def is_required(self) -> bool:
        return self.type.is_non_null and self.default_value is None


@dataclass(frozen=True)
class Field:
    """Output field of an object or interface type."""

    name: str
    type: TypeRef
    args: tuple[Argument, ...] = ()
    description: str | None = None
    deprecation_reason: str | None = None

    @property
    def is_deprecated(self) -> bool:
        return self.deprecation_reason is not None


@dataclass(frozen=True)
class InputField:
    """Field of an input object type."""

    name: str
    type: TypeRef
    default_value: str | None = None
    description: str | None = None

    @property
    def is_required(self) -> bool:
        return self.type.is_non_null and self.default_value is None


@dataclass(frozen=True)
class EnumValue:
    """Single value of an enum type."""

    name: str
    description: str | None = None
    deprecation_reason: str | None = None

    @property
    def is_deprecated(self) -> bool:
        return self.deprecation_reason is not None


@dataclass(frozen=True)
class ObjectType:
    name: str
    fields: tuple[Field, ...] = ()
    interfaces: tuple[str, ...] = ()
    description: str | None = None

    kind_label = "object type"


@dataclass(frozen=True)
class InterfaceType:
    name: str
    fields: tuple[Field, ...] = ()
    interfaces: tuple[str, ...] = ()
    description: str | None = None

    kind_label = "interface type"


@dataclass(frozen=True)
class UnionType:
    name: str
    members: tuple[str, ...] = ()
    description: str | None = None

    kind_label = "union type"


@dataclass(frozen=True)
class EnumType:
    name: str
    values: tuple[EnumValue, ...] = ()
    description: str | None = None

    kind_label = "enum type"


@dataclass(frozen=True)
class InputObjectType:
    name: str
    fields: tuple[InputField, ...] = ()
    description: str | None = None

    kind_label = "input object type"


@dataclass(frozen=True)
class ScalarType:
    name: str
    specified_by_url: str | None = None
    description: str | None = None

    kind_label = "scalar type"


@dataclass(frozen=True)
class DirectiveDefinition:
    name: str
    locations: tuple[str, ...] = ()
    args: tuple[Argument, ...] = ()
    repeatable: bool = False
    description: str | None = None

    kind_label = "directive"

    @property
    def key(self) -> str:
        """Key of this directive inside a TypeMap (``@name``)."""
        return f"@{self.name}"


NamedType: TypeAlias = (
    ObjectType | InterfaceType | UnionType | EnumType | InputObjectType | ScalarType
)
Definition: TypeAlias = NamedType | DirectiveDefinition

# Ordered mapping: types by name, directives by "@name", in declaration order.
TypeMap: TypeAlias = Mapping[str, Definition]


def definition_key(definition: Definition) -> str:
    """Return the TypeMap key for a definition."""
    if isinstance(definition, DirectiveDefinition):
        return definition.key
    return definition.name


def build_type_map(definitions: list[Definition]) -> dict[str, Definition]:
    """Build a TypeMap preserving the given declaration order."""
    return {definition_key(d): d for d in definitions}


@dataclass(frozen=True)
class TypeSystemSnapshot:
    """Immutable pair of old/new type maps."""

    old: TypeMap = field(default_factory=dict)
    new: TypeMap = field(default_factory=dict)

    def lookup(self, key: str) -> tuple[Definition | None, Definition | None]:
        """Return the (old, new) definitions registered under ``key``."""
        return self.old.get(key), self.new.get(key)


@dataclass(frozen=True)
class SchemaSource:
    """Original SDL text of one schema version."""

    body: str
    name: str = "schema.graphql"

    @property
    def lines(self) -> list[str]:
        return LINE_BREAK.split(self.body)


@dataclass(frozen=True)
class SourcePair:
    old: SchemaSource
    new: SchemaSource

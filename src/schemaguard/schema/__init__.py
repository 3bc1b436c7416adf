"""schemaguard Schema - Type-system model and SDL loading."""

from __future__ import annotations

from schemaguard.schema.loader import build_inputs, load_schema, type_map_from_schema
from schemaguard.schema.model import (
    Argument,
    Definition,
    DirectiveDefinition,
    EnumType,
    EnumValue,
    Field,
    InputField,
    InputObjectType,
    InterfaceType,
    NamedType,
    ObjectType,
    ScalarType,
    SchemaSource,
    SourcePair,
    TypeMap,
    TypeRef,
    TypeSystemSnapshot,
    UnionType,
)

__all__ = [
    "Argument",
    "Definition",
    "DirectiveDefinition",
    "EnumType",
    "EnumValue",
    "Field",
    "InputField",
    "InputObjectType",
    "InterfaceType",
    "NamedType",
    "ObjectType",
    "ScalarType",
    "SchemaSource",
    "SourcePair",
    "TypeMap",
    "TypeRef",
    "TypeSystemSnapshot",
    "UnionType",
    "build_inputs",
    "load_schema",
    "type_map_from_schema",
]

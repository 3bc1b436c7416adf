"""Build engine snapshots from SDL text using graphql-core.

graphql-core is the schema-language front end: it parses and validates SDL
and produces a ``GraphQLSchema``. This module converts that schema into the
closed model in :mod:`schemaguard.schema.model`; nothing else in the package
imports graphql-core.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from graphql import (
    GraphQLArgument,
    GraphQLDirective,
    GraphQLEnumType,
    GraphQLError,
    GraphQLField,
    GraphQLInputField,
    GraphQLInputObjectType,
    GraphQLInterfaceType,
    GraphQLList,
    GraphQLNamedType,
    GraphQLNonNull,
    GraphQLObjectType,
    GraphQLScalarType,
    GraphQLSchema,
    GraphQLUnionType,
    Source,
    ast_from_value,
    build_schema,
    is_introspection_type,
    is_specified_directive,
    is_specified_scalar_type,
    print_ast,
)
from graphql.pyutils import Undefined

from schemaguard.errors import SchemaLoadError
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
    ObjectType,
    ScalarType,
    SchemaSource,
    SourcePair,
    TypeRef,
    TypeSystemSnapshot,
    UnionType,
    build_type_map,
)

logger = logging.getLogger(__name__)


def load_schema(source: SchemaSource) -> GraphQLSchema:
    """Parse and validate SDL into a graphql-core schema.

    Raises:
        SchemaLoadError: If the SDL is syntactically or semantically invalid.
    """
    try:
        return build_schema(Source(source.body, source.name))
    except GraphQLError as e:
        line = e.locations[0].line if e.locations else None
        raise SchemaLoadError(e.message, file_path=source.name, line=line) from e
    except TypeError as e:
        # graphql-core reports SDL validation errors as TypeError
        raise SchemaLoadError(str(e), file_path=source.name) from e


def type_map_from_schema(schema: GraphQLSchema) -> dict[str, Definition]:
    """Convert a graphql-core schema into an ordered TypeMap.

    Built-in scalars, introspection types and specified directives are left
    out. User definitions keep their SDL declaration order.
    """
    named_types = [
        t
        for t in schema.type_map.values()
        if not is_introspection_type(t) and not is_specified_scalar_type(t)
    ]
    named_types.sort(key=_declaration_position)

    directives = [d for d in schema.directives if not is_specified_directive(d)]
    directives.sort(key=_declaration_position)

    definitions: list[Definition] = [_convert_named_type(t) for t in named_types]
    definitions.extend(_convert_directive(d) for d in directives)
    return build_type_map(definitions)


def build_inputs(
    old_sdl: str,
    new_sdl: str,
    old_name: str = "old.graphql",
    new_name: str = "new.graphql",
) -> tuple[SourcePair, TypeSystemSnapshot]:
    """Load both schema versions and return the engine's inputs."""
    sources = SourcePair(
        old=SchemaSource(old_sdl, old_name),
        new=SchemaSource(new_sdl, new_name),
    )
    snapshot = TypeSystemSnapshot(
        old=type_map_from_schema(load_schema(sources.old)),
        new=type_map_from_schema(load_schema(sources.new)),
    )
    logger.debug(
        "Loaded snapshots: %d old definitions, %d new definitions",
        len(snapshot.old),
        len(snapshot.new),
    )
    return sources, snapshot


def _declaration_position(node: GraphQLNamedType | GraphQLDirective) -> float:
    ast_node = node.ast_node
    if ast_node is not None and ast_node.loc is not None:
        return ast_node.loc.start
    return math.inf


def _type_ref(gql_type: Any) -> TypeRef:
    if isinstance(gql_type, GraphQLNonNull):
        return TypeRef.non_null(_type_ref(gql_type.of_type))
    if isinstance(gql_type, GraphQLList):
        return TypeRef.list_of(_type_ref(gql_type.of_type))
    return TypeRef.named(gql_type.name)


def _default_value(value: GraphQLArgument | GraphQLInputField) -> str | None:
    ast_node = value.ast_node
    if ast_node is not None and ast_node.default_value is not None:
        return print_ast(ast_node.default_value)
    if value.default_value is Undefined:
        return None
    value_ast = ast_from_value(value.default_value, value.type)
    return print_ast(value_ast) if value_ast is not None else None


def _convert_argument(name: str, arg: GraphQLArgument) -> Argument:
    return Argument(
        name=name,
        type=_type_ref(arg.type),
        default_value=_default_value(arg),
        description=arg.description,
    )


def _convert_field(name: str, gql_field: GraphQLField) -> Field:
    return Field(
        name=name,
        type=_type_ref(gql_field.type),
        args=tuple(_convert_argument(n, a) for n, a in gql_field.args.items()),
        description=gql_field.description,
        deprecation_reason=gql_field.deprecation_reason,
    )


def _convert_named_type(gql_type: GraphQLNamedType) -> Definition:
    if isinstance(gql_type, GraphQLObjectType):
        return ObjectType(
            name=gql_type.name,
            fields=tuple(_convert_field(n, f) for n, f in gql_type.fields.items()),
            interfaces=tuple(i.name for i in gql_type.interfaces),
            description=gql_type.description,
        )
    if isinstance(gql_type, GraphQLInterfaceType):
        return InterfaceType(
            name=gql_type.name,
            fields=tuple(_convert_field(n, f) for n, f in gql_type.fields.items()),
            interfaces=tuple(i.name for i in gql_type.interfaces),
            description=gql_type.description,
        )
    if isinstance(gql_type, GraphQLUnionType):
        return UnionType(
            name=gql_type.name,
            members=tuple(t.name for t in gql_type.types),
            description=gql_type.description,
        )
    if isinstance(gql_type, GraphQLEnumType):
        return EnumType(
            name=gql_type.name,
            values=tuple(
                EnumValue(
                    name=n,
                    description=v.description,
                    deprecation_reason=v.deprecation_reason,
                )
                for n, v in gql_type.values.items()
            ),
            description=gql_type.description,
        )
    if isinstance(gql_type, GraphQLInputObjectType):
        return InputObjectType(
            name=gql_type.name,
            fields=tuple(
                InputField(
                    name=n,
                    type=_type_ref(f.type),
                    default_value=_default_value(f),
                    description=f.description,
                )
                for n, f in gql_type.fields.items()
            ),
            description=gql_type.description,
        )
    if isinstance(gql_type, GraphQLScalarType):
        return ScalarType(
            name=gql_type.name,
            specified_by_url=gql_type.specified_by_url,
            description=gql_type.description,
        )
    raise TypeError(f"Unsupported GraphQL type: {gql_type!r}")


def _convert_directive(directive: GraphQLDirective) -> DirectiveDefinition:
    return DirectiveDefinition(
        name=directive.name,
        locations=tuple(loc.name for loc in directive.locations),
        args=tuple(_convert_argument(n, a) for n, a in directive.args.items()),
        repeatable=directive.is_repeatable,
        description=directive.description,
    )


__all__ = ["load_schema", "type_map_from_schema", "build_inputs"]

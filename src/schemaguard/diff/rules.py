"""Rule catalog - compares two type maps and emits detections.

One rule family per construct kind:

    types          added / removed / kind changed / description
    fields         added / removed / type / description / deprecation
    arguments      added / removed / type / required / default / description
    enum values    added / removed / description / deprecation
    union members  added / removed
    interfaces     implemented / no longer implemented
    input fields   added / removed / type / required / default / description
    scalars        specifiedBy URL
    directives     added / removed / locations / repeatable / description / arguments

Detections are emitted in a fixed order: removed definitions first (old
declaration order), then each definition of the new map in declaration
order. Within a definition, members come before interfaces or union members,
and a member's own changes come before those of its arguments.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Sequence
from enum import Enum
from typing import Protocol, TypeVar

from schemaguard.diff.models import Detection, RuleId
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
    TypeRef,
    TypeSystemSnapshot,
    UnionType,
)

logger = logging.getLogger(__name__)


class TypeChange(Enum):
    """How a wrapped type reference changed."""

    TIGHTENED = "tightened"  # Only non-null markers added
    LOOSENED = "loosened"  # Only non-null markers removed
    LIST_WRAPPING = "list_wrapping"  # Same named type, different list depth
    TYPE = "type"  # Different named type, or mixed nullability change


def classify_type_change(old: TypeRef, new: TypeRef) -> TypeChange | None:
    """Classify the difference between two type references.

    Returns None when the references are identical.
    """
    if old == new:
        return None
    if old.named_type != new.named_type:
        return TypeChange.TYPE
    if old.list_depth != new.list_depth:
        return TypeChange.LIST_WRAPPING

    pairs = list(zip(old.nullability(), new.nullability()))
    tightened = any(n and not o for o, n in pairs)
    loosened = any(o and not n for o, n in pairs)
    if tightened and not loosened:
        return TypeChange.TIGHTENED
    if loosened and not tightened:
        return TypeChange.LOOSENED
    return TypeChange.TYPE


FIELD_TYPE_RULES = {
    TypeChange.TIGHTENED: RuleId.FIELD_NULLABILITY_TIGHTENED,
    TypeChange.LOOSENED: RuleId.FIELD_NULLABILITY_LOOSENED,
    TypeChange.LIST_WRAPPING: RuleId.FIELD_LIST_WRAPPING_CHANGED,
    TypeChange.TYPE: RuleId.FIELD_TYPE_CHANGED,
}

ARGUMENT_TYPE_RULES = {
    TypeChange.TIGHTENED: RuleId.ARGUMENT_NULLABILITY_TIGHTENED,
    TypeChange.LOOSENED: RuleId.ARGUMENT_NULLABILITY_LOOSENED,
    TypeChange.LIST_WRAPPING: RuleId.ARGUMENT_LIST_WRAPPING_CHANGED,
    TypeChange.TYPE: RuleId.ARGUMENT_TYPE_CHANGED,
}

INPUT_FIELD_TYPE_RULES = {
    TypeChange.TIGHTENED: RuleId.INPUT_FIELD_NULLABILITY_TIGHTENED,
    TypeChange.LOOSENED: RuleId.INPUT_FIELD_NULLABILITY_LOOSENED,
    TypeChange.LIST_WRAPPING: RuleId.INPUT_FIELD_LIST_WRAPPING_CHANGED,
    TypeChange.TYPE: RuleId.INPUT_FIELD_TYPE_CHANGED,
}


class _Named(Protocol):
    @property
    def name(self) -> str: ...


T = TypeVar("T", bound=_Named)


def _q(value: str | None) -> str:
    return "none" if value is None else f"'{value}'"


def _pair_by_name(
    old_items: Sequence[T], new_items: Sequence[T]
) -> tuple[list[T], list[T], list[tuple[T, T]]]:
    """Split members into removed (old order), added and mutual (new order)."""
    old_by_name = {item.name: item for item in old_items}
    new_names = {item.name for item in new_items}

    removed = [item for item in old_items if item.name not in new_names]
    added = [item for item in new_items if item.name not in old_by_name]
    mutual = [(old_by_name[item.name], item) for item in new_items if item.name in old_by_name]
    return removed, added, mutual


def _diff_names(old: Sequence[str], new: Sequence[str]) -> tuple[list[str], list[str]]:
    new_set = set(new)
    old_set = set(old)
    return [n for n in old if n not in new_set], [n for n in new if n not in old_set]


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


def type_removed(definition: Definition) -> Detection:
    if isinstance(definition, DirectiveDefinition):
        return Detection(
            RuleId.DIRECTIVE_REMOVED,
            f"Directive '{definition.name}' was removed",
            definition.key,
        )
    return Detection(RuleId.TYPE_REMOVED, f"Type '{definition.name}' was removed", definition.name)


def type_added(definition: Definition) -> Detection:
    if isinstance(definition, DirectiveDefinition):
        return Detection(
            RuleId.DIRECTIVE_ADDED,
            f"Directive '{definition.name}' was added",
            definition.key,
        )
    return Detection(RuleId.TYPE_ADDED, f"Type '{definition.name}' was added", definition.name)


def type_kind_changed(old: NamedType, new: NamedType) -> Detection:
    return Detection(
        RuleId.TYPE_KIND_CHANGED,
        f"'{new.name}' kind changed from '{old.kind_label}' to '{new.kind_label}'",
        new.name,
    )


def type_description(old: NamedType, new: NamedType) -> Iterator[Detection]:
    if old.description == new.description:
        return
    label = f"{new.kind_label} '{new.name}'"
    if old.description is None:
        yield Detection(
            RuleId.TYPE_DESCRIPTION_ADDED,
            f"Description '{new.description}' was added to {label}",
            new.name,
        )
    elif new.description is None:
        yield Detection(
            RuleId.TYPE_DESCRIPTION_REMOVED, f"Description was removed from {label}", new.name
        )
    else:
        yield Detection(
            RuleId.TYPE_DESCRIPTION_CHANGED,
            f"Description of {label} changed from {_q(old.description)} to {_q(new.description)}",
            new.name,
        )


# ---------------------------------------------------------------------------
# Object and interface fields
# ---------------------------------------------------------------------------


def fields(
    old: ObjectType | InterfaceType, new: ObjectType | InterfaceType
) -> Iterator[Detection]:
    label = f"{new.kind_label} '{new.name}'"
    removed, added, mutual = _pair_by_name(old.fields, new.fields)

    for f in removed:
        yield Detection(
            RuleId.FIELD_REMOVED,
            f"Field '{f.name}' was removed from {label}",
            f"{new.name}.{f.name}",
        )
    for f in added:
        yield Detection(
            RuleId.FIELD_ADDED,
            f"Field '{f.name}' was added to {label}",
            f"{new.name}.{f.name}",
        )
    for old_field, new_field in mutual:
        yield from field(new.name, old_field, new_field)


def field(type_name: str, old: Field, new: Field) -> Iterator[Detection]:
    path = f"{type_name}.{new.name}"

    change = classify_type_change(old.type, new.type)
    if change is not None:
        yield Detection(
            FIELD_TYPE_RULES[change],
            f"Field '{path}' changed type from '{old.type}' to '{new.type}'",
            path,
        )

    if old.description != new.description:
        if old.description is None:
            yield Detection(
                RuleId.FIELD_DESCRIPTION_ADDED,
                f"Field '{path}' has description '{new.description}'",
                path,
            )
        elif new.description is None:
            yield Detection(
                RuleId.FIELD_DESCRIPTION_REMOVED,
                f"Description was removed from field '{path}'",
                path,
            )
        else:
            yield Detection(
                RuleId.FIELD_DESCRIPTION_CHANGED,
                f"Field '{path}' description changed from "
                f"{_q(old.description)} to {_q(new.description)}",
                path,
            )

    yield from field_deprecation(path, old, new)
    yield from arguments(f"field '{path}'", path, old.args, new.args)


def field_deprecation(path: str, old: Field, new: Field) -> Iterator[Detection]:
    if old.is_deprecated != new.is_deprecated:
        if new.is_deprecated:
            yield Detection(RuleId.FIELD_DEPRECATION_ADDED, f"Field '{path}' is deprecated", path)
        else:
            yield Detection(
                RuleId.FIELD_DEPRECATION_REMOVED, f"Field '{path}' is no longer deprecated", path
            )

    if old.deprecation_reason == new.deprecation_reason:
        return
    if old.deprecation_reason is None:
        yield Detection(
            RuleId.FIELD_DEPRECATION_REASON_ADDED,
            f"Field '{path}' has deprecation reason '{new.deprecation_reason}'",
            path,
        )
    elif new.deprecation_reason is None:
        yield Detection(
            RuleId.FIELD_DEPRECATION_REASON_REMOVED,
            f"Deprecation reason was removed from field '{path}'",
            path,
        )
    else:
        yield Detection(
            RuleId.FIELD_DEPRECATION_REASON_CHANGED,
            f"Deprecation reason on field '{path}' has changed from "
            f"{_q(old.deprecation_reason)} to {_q(new.deprecation_reason)}",
            path,
        )


# ---------------------------------------------------------------------------
# Arguments
# ---------------------------------------------------------------------------


def _becomes_required(
    old: Argument | InputField, new: Argument | InputField, change: TypeChange | None
) -> bool:
    """True when a value turns required without a breaking type rule reporting it.

    Dropping the default of a non-null value is the usual way this happens.
    Tightened, re-wrapped and retyped values are already reported as breaking.
    """
    if old.is_required or not new.is_required:
        return False
    return change is None or change is TypeChange.LOOSENED


def arguments(
    owner_label: str,
    owner_path: str,
    old_args: Sequence[Argument],
    new_args: Sequence[Argument],
) -> Iterator[Detection]:
    removed, added, mutual = _pair_by_name(old_args, new_args)

    for arg in removed:
        yield Detection(
            RuleId.ARGUMENT_REMOVED,
            f"Argument '{arg.name}' was removed from {owner_label}",
            f"{owner_path}.{arg.name}",
        )
    for arg in added:
        if arg.is_required:
            yield Detection(
                RuleId.REQUIRED_ARGUMENT_ADDED,
                f"Required argument '{arg.name}: {arg.type}' was added to {owner_label}",
                f"{owner_path}.{arg.name}",
            )
        else:
            yield Detection(
                RuleId.OPTIONAL_ARGUMENT_ADDED,
                f"Argument '{arg.name}: {arg.type}' was added to {owner_label}",
                f"{owner_path}.{arg.name}",
            )
    for old_arg, new_arg in mutual:
        yield from argument(owner_label, f"{owner_path}.{new_arg.name}", old_arg, new_arg)


def argument(owner_label: str, path: str, old: Argument, new: Argument) -> Iterator[Detection]:
    change = classify_type_change(old.type, new.type)
    if change is not None:
        yield Detection(
            ARGUMENT_TYPE_RULES[change],
            f"Type for argument '{new.name}' on {owner_label} changed "
            f"from '{old.type}' to '{new.type}'",
            path,
        )
    if _becomes_required(old, new, change):
        yield Detection(
            RuleId.ARGUMENT_REQUIRED_ADDED,
            f"Argument '{new.name}: {new.type}' on {owner_label} is now required",
            path,
        )

    if old.default_value != new.default_value:
        if old.default_value is None:
            message = (
                f"Default value '{new.default_value}' was added to argument "
                f"'{new.name}' on {owner_label}"
            )
        elif new.default_value is None:
            message = f"Default value was removed from argument '{new.name}' on {owner_label}"
        else:
            message = (
                f"Default value for argument '{new.name}' on {owner_label} changed "
                f"from '{old.default_value}' to '{new.default_value}'"
            )
        yield Detection(RuleId.ARGUMENT_DEFAULT_CHANGED, message, path)

    if old.description != new.description:
        yield Detection(
            RuleId.ARGUMENT_DESCRIPTION_CHANGED,
            f"Description for argument '{new.name}' on {owner_label} changed "
            f"from {_q(old.description)} to {_q(new.description)}",
            path,
        )


# ---------------------------------------------------------------------------
# Interfaces, unions and enums
# ---------------------------------------------------------------------------


def interfaces(
    old: ObjectType | InterfaceType, new: ObjectType | InterfaceType
) -> Iterator[Detection]:
    removed, added = _diff_names(old.interfaces, new.interfaces)
    for name in removed:
        yield Detection(
            RuleId.INTERFACE_IMPLEMENTATION_REMOVED,
            f"'{new.name}' {new.kind_label} no longer implements '{name}' interface",
            new.name,
        )
    for name in added:
        yield Detection(
            RuleId.INTERFACE_IMPLEMENTATION_ADDED,
            f"'{new.name}' {new.kind_label} implements '{name}' interface",
            new.name,
        )


def union_members(old: UnionType, new: UnionType) -> Iterator[Detection]:
    removed, added = _diff_names(old.members, new.members)
    for name in removed:
        yield Detection(
            RuleId.UNION_MEMBER_REMOVED,
            f"Member '{name}' was removed from union type '{new.name}'",
            new.name,
        )
    for name in added:
        yield Detection(
            RuleId.UNION_MEMBER_ADDED,
            f"Member '{name}' was added to union type '{new.name}'",
            new.name,
        )


def enum_values(old: EnumType, new: EnumType) -> Iterator[Detection]:
    removed, added, mutual = _pair_by_name(old.values, new.values)
    for value in removed:
        yield Detection(
            RuleId.ENUM_VALUE_REMOVED,
            f"Enum value '{value.name}' was removed from enum '{new.name}'",
            f"{new.name}.{value.name}",
        )
    for value in added:
        yield Detection(
            RuleId.ENUM_VALUE_ADDED,
            f"Enum value '{value.name}' was added to enum '{new.name}'",
            f"{new.name}.{value.name}",
        )
    for old_value, new_value in mutual:
        yield from enum_value(new.name, old_value, new_value)


def enum_value(enum_name: str, old: EnumValue, new: EnumValue) -> Iterator[Detection]:
    path = f"{enum_name}.{new.name}"
    if old.description != new.description:
        yield Detection(
            RuleId.ENUM_VALUE_DESCRIPTION_CHANGED,
            f"Description for enum value '{path}' changed from "
            f"{_q(old.description)} to {_q(new.description)}",
            path,
        )

    if old.is_deprecated != new.is_deprecated:
        if new.is_deprecated:
            yield Detection(
                RuleId.ENUM_VALUE_DEPRECATION_ADDED, f"Enum value '{path}' is deprecated", path
            )
        else:
            yield Detection(
                RuleId.ENUM_VALUE_DEPRECATION_REMOVED,
                f"Enum value '{path}' is no longer deprecated",
                path,
            )

    if old.deprecation_reason == new.deprecation_reason:
        return
    if old.deprecation_reason is None:
        yield Detection(
            RuleId.ENUM_VALUE_DEPRECATION_REASON_ADDED,
            f"Enum value '{path}' has deprecation reason '{new.deprecation_reason}'",
            path,
        )
    elif new.deprecation_reason is None:
        yield Detection(
            RuleId.ENUM_VALUE_DEPRECATION_REASON_REMOVED,
            f"Deprecation reason was removed from enum value '{path}'",
            path,
        )
    else:
        yield Detection(
            RuleId.ENUM_VALUE_DEPRECATION_REASON_CHANGED,
            f"Deprecation reason on enum value '{path}' has changed from "
            f"{_q(old.deprecation_reason)} to {_q(new.deprecation_reason)}",
            path,
        )


# ---------------------------------------------------------------------------
# Input objects and scalars
# ---------------------------------------------------------------------------


def input_fields(old: InputObjectType, new: InputObjectType) -> Iterator[Detection]:
    label = f"input object type '{new.name}'"
    removed, added, mutual = _pair_by_name(old.fields, new.fields)

    for f in removed:
        yield Detection(
            RuleId.INPUT_FIELD_REMOVED,
            f"Input field '{f.name}' was removed from {label}",
            f"{new.name}.{f.name}",
        )
    for f in added:
        if f.is_required:
            yield Detection(
                RuleId.REQUIRED_INPUT_FIELD_ADDED,
                f"Required input field '{f.name}: {f.type}' was added to {label}",
                f"{new.name}.{f.name}",
            )
        else:
            yield Detection(
                RuleId.OPTIONAL_INPUT_FIELD_ADDED,
                f"Input field '{f.name}: {f.type}' was added to {label}",
                f"{new.name}.{f.name}",
            )
    for old_field, new_field in mutual:
        yield from input_field(new.name, old_field, new_field)


def input_field(type_name: str, old: InputField, new: InputField) -> Iterator[Detection]:
    path = f"{type_name}.{new.name}"

    change = classify_type_change(old.type, new.type)
    if change is not None:
        yield Detection(
            INPUT_FIELD_TYPE_RULES[change],
            f"Input field '{path}' changed type from '{old.type}' to '{new.type}'",
            path,
        )
    if _becomes_required(old, new, change):
        yield Detection(
            RuleId.INPUT_FIELD_REQUIRED_ADDED,
            f"Input field '{path}: {new.type}' is now required",
            path,
        )

    if old.default_value != new.default_value:
        if old.default_value is None:
            message = f"Input field '{path}' default value '{new.default_value}' was added"
        elif new.default_value is None:
            message = f"Input field '{path}' default value was removed"
        else:
            message = (
                f"Input field '{path}' default value changed "
                f"from '{old.default_value}' to '{new.default_value}'"
            )
        yield Detection(RuleId.INPUT_FIELD_DEFAULT_CHANGED, message, path)

    if old.description != new.description:
        yield Detection(
            RuleId.INPUT_FIELD_DESCRIPTION_CHANGED,
            f"Input field '{path}' description changed from "
            f"{_q(old.description)} to {_q(new.description)}",
            path,
        )


def scalar(old: ScalarType, new: ScalarType) -> Iterator[Detection]:
    if old.specified_by_url != new.specified_by_url:
        yield Detection(
            RuleId.SCALAR_SPECIFIED_BY_CHANGED,
            f"Scalar '{new.name}' specifiedBy URL changed from "
            f"{_q(old.specified_by_url)} to {_q(new.specified_by_url)}",
            new.name,
        )


# ---------------------------------------------------------------------------
# Directives
# ---------------------------------------------------------------------------


def directive(old: DirectiveDefinition, new: DirectiveDefinition) -> Iterator[Detection]:
    path = new.key
    label = f"directive '{new.name}'"

    if old.description != new.description:
        yield Detection(
            RuleId.DIRECTIVE_DESCRIPTION_CHANGED,
            f"Description of {label} changed from {_q(old.description)} to {_q(new.description)}",
            path,
        )

    yield from arguments(label, path, old.args, new.args)

    removed, added = _diff_names(old.locations, new.locations)
    for location in removed:
        yield Detection(
            RuleId.DIRECTIVE_LOCATION_REMOVED,
            f"Location '{location}' was removed from {label}",
            path,
        )
    for location in added:
        yield Detection(
            RuleId.DIRECTIVE_LOCATION_ADDED,
            f"Location '{location}' was added to {label}",
            path,
        )

    if old.repeatable != new.repeatable:
        if new.repeatable:
            yield Detection(
                RuleId.DIRECTIVE_REPEATABLE_ADDED, f"Directive '{new.name}' is now repeatable", path
            )
        else:
            yield Detection(
                RuleId.DIRECTIVE_REPEATABLE_REMOVED,
                f"Directive '{new.name}' is no longer repeatable",
                path,
            )


# ---------------------------------------------------------------------------
# Detector
# ---------------------------------------------------------------------------


def compare_definitions(old: Definition, new: Definition) -> Iterator[Detection]:
    """Run every rule family that applies to a definition present in both maps."""
    if type(old) is not type(new):
        if isinstance(old, DirectiveDefinition) or isinstance(new, DirectiveDefinition):
            raise TypeError(f"Directive and type share the key '{new.name}'")
        yield type_kind_changed(old, new)
        return

    match old, new:
        case (
            ObjectType() | InterfaceType() as old_type,
            ObjectType() | InterfaceType() as new_type,
        ):
            yield from type_description(old_type, new_type)
            yield from fields(old_type, new_type)
            yield from interfaces(old_type, new_type)
        case (UnionType() as old_union, UnionType() as new_union):
            yield from type_description(old_union, new_union)
            yield from union_members(old_union, new_union)
        case (EnumType() as old_enum, EnumType() as new_enum):
            yield from type_description(old_enum, new_enum)
            yield from enum_values(old_enum, new_enum)
        case (InputObjectType() as old_input, InputObjectType() as new_input):
            yield from type_description(old_input, new_input)
            yield from input_fields(old_input, new_input)
        case (ScalarType() as old_scalar, ScalarType() as new_scalar):
            yield from type_description(old_scalar, new_scalar)
            yield from scalar(old_scalar, new_scalar)
        case (DirectiveDefinition() as old_directive, DirectiveDefinition() as new_directive):
            yield from directive(old_directive, new_directive)
        case _:
            raise TypeError(f"Unsupported definition: {new!r}")


class ChangeDetector:
    """Walk two type maps and collect detections in contract order.

    Example:
        >>> detector = ChangeDetector(snapshot)
        >>> for detection in detector.detect():
        ...     print(detection.rule_id, detection.path)
    """

    def __init__(self, snapshot: TypeSystemSnapshot) -> None:
        self.snapshot = snapshot

    def detect(self) -> list[Detection]:
        old_map = self.snapshot.old
        new_map = self.snapshot.new
        detections: list[Detection] = []

        for key, old_def in old_map.items():
            if key not in new_map:
                detections.extend(self._guarded(key, lambda: [type_removed(old_def)]))

        for key, new_def in new_map.items():
            old_def = old_map.get(key)
            if old_def is None:
                detections.extend(self._guarded(key, lambda: [type_added(new_def)]))
            else:
                detections.extend(
                    self._guarded(key, lambda: compare_definitions(old_def, new_def))
                )

        logger.debug("Detected %d changes", len(detections))
        return detections

    def _guarded(self, key: str, rule: Callable[[], Iterable[Detection]]) -> list[Detection]:
        """Run a rule, dropping everything it produced if the input is malformed."""
        try:
            return list(rule())
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed definition '%s': %s", key, e)
            return []


def detect_changes(snapshot: TypeSystemSnapshot) -> list[Detection]:
    """Convenience function to run the full rule catalog."""
    return ChangeDetector(snapshot).detect()

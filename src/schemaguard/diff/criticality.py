"""Criticality classification for detected schema changes.

Every rule id maps to exactly one level through a fixed table. The
classifier never consults external state; interceptors may rewrite levels
afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass

from schemaguard.diff.models import Change, CriticalityLevel, Detection, RuleId
from schemaguard.errors import UnknownRuleError

BREAKING = CriticalityLevel.BREAKING
DANGEROUS = CriticalityLevel.DANGEROUS
NON_BREAKING = CriticalityLevel.NON_BREAKING


@dataclass(frozen=True)
class Criticality:
    level: CriticalityLevel
    reason: str | None = None


_REMOVAL_REASON = (
    "Removing {what} is a breaking change. "
    "It is preferable to deprecate it before removing it."
)
_TYPE_CHANGE_REASON = "Changing the type of {what} can break clients that rely on its shape."
_OUTPUT_NULL_REASON = (
    "Changing the nullability of a field can break clients with generated "
    "types that depend on it."
)
_INPUT_TIGHTENED_REASON = (
    "Making {what} non-null will break existing requests that omit it or pass null."
)

CRITICALITY_TABLE: dict[RuleId, Criticality] = {
    # Types
    RuleId.TYPE_ADDED: Criticality(NON_BREAKING),
    RuleId.TYPE_REMOVED: Criticality(BREAKING, _REMOVAL_REASON.format(what="a type")),
    RuleId.TYPE_KIND_CHANGED: Criticality(
        BREAKING,
        "Changing the kind of a type is a breaking change because it can cause "
        "existing queries to error.",
    ),
    RuleId.TYPE_DESCRIPTION_ADDED: Criticality(NON_BREAKING),
    RuleId.TYPE_DESCRIPTION_REMOVED: Criticality(NON_BREAKING),
    RuleId.TYPE_DESCRIPTION_CHANGED: Criticality(NON_BREAKING),
    # Object and interface fields
    RuleId.FIELD_ADDED: Criticality(NON_BREAKING),
    RuleId.FIELD_REMOVED: Criticality(BREAKING, _REMOVAL_REASON.format(what="a field")),
    RuleId.FIELD_TYPE_CHANGED: Criticality(BREAKING, _TYPE_CHANGE_REASON.format(what="a field")),
    RuleId.FIELD_NULLABILITY_TIGHTENED: Criticality(BREAKING, _OUTPUT_NULL_REASON),
    RuleId.FIELD_NULLABILITY_LOOSENED: Criticality(
        BREAKING,
        "Making a field nullable can break clients that do not expect null values.",
    ),
    RuleId.FIELD_LIST_WRAPPING_CHANGED: Criticality(
        BREAKING, _TYPE_CHANGE_REASON.format(what="a field")
    ),
    RuleId.FIELD_DESCRIPTION_ADDED: Criticality(NON_BREAKING),
    RuleId.FIELD_DESCRIPTION_REMOVED: Criticality(NON_BREAKING),
    RuleId.FIELD_DESCRIPTION_CHANGED: Criticality(NON_BREAKING),
    RuleId.FIELD_DEPRECATION_ADDED: Criticality(NON_BREAKING),
    RuleId.FIELD_DEPRECATION_REMOVED: Criticality(NON_BREAKING),
    RuleId.FIELD_DEPRECATION_REASON_ADDED: Criticality(NON_BREAKING),
    RuleId.FIELD_DEPRECATION_REASON_REMOVED: Criticality(NON_BREAKING),
    RuleId.FIELD_DEPRECATION_REASON_CHANGED: Criticality(NON_BREAKING),
    # Arguments
    RuleId.ARGUMENT_REMOVED: Criticality(BREAKING, _REMOVAL_REASON.format(what="an argument")),
    RuleId.REQUIRED_ARGUMENT_ADDED: Criticality(
        DANGEROUS,
        "Adding a required argument without a default value will fail requests "
        "that do not provide it.",
    ),
    RuleId.OPTIONAL_ARGUMENT_ADDED: Criticality(NON_BREAKING),
    RuleId.ARGUMENT_REQUIRED_ADDED: Criticality(
        DANGEROUS,
        "Removing the default value of a non-null argument makes it required; "
        "requests that omit it will fail.",
    ),
    RuleId.ARGUMENT_TYPE_CHANGED: Criticality(
        BREAKING, _TYPE_CHANGE_REASON.format(what="an argument")
    ),
    RuleId.ARGUMENT_NULLABILITY_TIGHTENED: Criticality(
        BREAKING, _INPUT_TIGHTENED_REASON.format(what="an argument")
    ),
    RuleId.ARGUMENT_NULLABILITY_LOOSENED: Criticality(NON_BREAKING),
    RuleId.ARGUMENT_LIST_WRAPPING_CHANGED: Criticality(
        BREAKING, _TYPE_CHANGE_REASON.format(what="an argument")
    ),
    RuleId.ARGUMENT_DEFAULT_CHANGED: Criticality(
        DANGEROUS,
        "Changing the default value of an argument may change runtime behaviour "
        "for clients that rely on it.",
    ),
    RuleId.ARGUMENT_DESCRIPTION_CHANGED: Criticality(NON_BREAKING),
    # Enum values
    RuleId.ENUM_VALUE_ADDED: Criticality(NON_BREAKING),
    RuleId.ENUM_VALUE_REMOVED: Criticality(
        BREAKING, _REMOVAL_REASON.format(what="an enum value")
    ),
    RuleId.ENUM_VALUE_DESCRIPTION_CHANGED: Criticality(NON_BREAKING),
    RuleId.ENUM_VALUE_DEPRECATION_ADDED: Criticality(NON_BREAKING),
    RuleId.ENUM_VALUE_DEPRECATION_REMOVED: Criticality(NON_BREAKING),
    RuleId.ENUM_VALUE_DEPRECATION_REASON_ADDED: Criticality(NON_BREAKING),
    RuleId.ENUM_VALUE_DEPRECATION_REASON_REMOVED: Criticality(NON_BREAKING),
    RuleId.ENUM_VALUE_DEPRECATION_REASON_CHANGED: Criticality(NON_BREAKING),
    # Unions and interfaces
    RuleId.UNION_MEMBER_ADDED: Criticality(NON_BREAKING),
    RuleId.UNION_MEMBER_REMOVED: Criticality(
        BREAKING,
        "Removing a union member breaks queries that use it in a fragment spread.",
    ),
    RuleId.INTERFACE_IMPLEMENTATION_ADDED: Criticality(NON_BREAKING),
    RuleId.INTERFACE_IMPLEMENTATION_REMOVED: Criticality(
        BREAKING,
        "Removing an interface implementation breaks queries that use the "
        "interface in a fragment spread.",
    ),
    # Input fields
    RuleId.INPUT_FIELD_REMOVED: Criticality(
        BREAKING, _REMOVAL_REASON.format(what="an input field")
    ),
    RuleId.REQUIRED_INPUT_FIELD_ADDED: Criticality(
        BREAKING,
        "Adding a required input field will fail existing requests that do not provide it.",
    ),
    RuleId.OPTIONAL_INPUT_FIELD_ADDED: Criticality(NON_BREAKING),
    RuleId.INPUT_FIELD_REQUIRED_ADDED: Criticality(
        BREAKING,
        "Removing the default value of a non-null input field makes it required; "
        "existing requests that omit it will fail.",
    ),
    RuleId.INPUT_FIELD_TYPE_CHANGED: Criticality(
        BREAKING, _TYPE_CHANGE_REASON.format(what="an input field")
    ),
    RuleId.INPUT_FIELD_NULLABILITY_TIGHTENED: Criticality(
        BREAKING, _INPUT_TIGHTENED_REASON.format(what="an input field")
    ),
    RuleId.INPUT_FIELD_NULLABILITY_LOOSENED: Criticality(NON_BREAKING),
    RuleId.INPUT_FIELD_LIST_WRAPPING_CHANGED: Criticality(
        BREAKING, _TYPE_CHANGE_REASON.format(what="an input field")
    ),
    RuleId.INPUT_FIELD_DEFAULT_CHANGED: Criticality(
        DANGEROUS,
        "Changing the default value of an input field may change runtime "
        "behaviour for clients that rely on it.",
    ),
    RuleId.INPUT_FIELD_DESCRIPTION_CHANGED: Criticality(NON_BREAKING),
    # Scalars
    RuleId.SCALAR_SPECIFIED_BY_CHANGED: Criticality(NON_BREAKING),
    # Directives
    RuleId.DIRECTIVE_ADDED: Criticality(NON_BREAKING),
    RuleId.DIRECTIVE_REMOVED: Criticality(
        BREAKING, _REMOVAL_REASON.format(what="a directive")
    ),
    RuleId.DIRECTIVE_LOCATION_ADDED: Criticality(NON_BREAKING),
    RuleId.DIRECTIVE_LOCATION_REMOVED: Criticality(
        BREAKING,
        "Removing a directive location breaks documents that use the directive there.",
    ),
    RuleId.DIRECTIVE_REPEATABLE_ADDED: Criticality(NON_BREAKING),
    RuleId.DIRECTIVE_REPEATABLE_REMOVED: Criticality(
        BREAKING,
        "Making a directive non-repeatable breaks documents that apply it more than once.",
    ),
    RuleId.DIRECTIVE_DESCRIPTION_CHANGED: Criticality(NON_BREAKING),
}


class CriticalityClassifier:
    """Assign a criticality level and reason to each detection."""

    def __init__(self, table: dict[RuleId, Criticality] | None = None) -> None:
        self._table = table if table is not None else CRITICALITY_TABLE

    def criticality_for(self, rule_id: RuleId) -> Criticality:
        """Look up the criticality of a rule.

        Raises:
            UnknownRuleError: If the rule has no table entry.
        """
        try:
            return self._table[rule_id]
        except KeyError:
            raise UnknownRuleError(str(rule_id)) from None

    def classify(self, detection: Detection) -> Change:
        criticality = self.criticality_for(detection.rule_id)
        return Change(
            rule_id=detection.rule_id,
            criticality_level=criticality.level,
            criticality_reason=criticality.reason,
            message=detection.message,
            path=detection.path,
        )

    def classify_all(self, detections: list[Detection]) -> list[Change]:
        return [self.classify(d) for d in detections]

"""Data models for schema diff results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class RuleId(StrEnum):
    """Identifier of the rule that produced a change."""

    # Types
    TYPE_ADDED = "TYPE_ADDED"
    TYPE_REMOVED = "TYPE_REMOVED"
    TYPE_KIND_CHANGED = "TYPE_KIND_CHANGED"
    TYPE_DESCRIPTION_ADDED = "TYPE_DESCRIPTION_ADDED"
    TYPE_DESCRIPTION_REMOVED = "TYPE_DESCRIPTION_REMOVED"
    TYPE_DESCRIPTION_CHANGED = "TYPE_DESCRIPTION_CHANGED"

    # Object and interface fields
    FIELD_ADDED = "FIELD_ADDED"
    FIELD_REMOVED = "FIELD_REMOVED"
    FIELD_TYPE_CHANGED = "FIELD_TYPE_CHANGED"
    FIELD_NULLABILITY_TIGHTENED = "FIELD_NULLABILITY_TIGHTENED"
    FIELD_NULLABILITY_LOOSENED = "FIELD_NULLABILITY_LOOSENED"
    FIELD_LIST_WRAPPING_CHANGED = "FIELD_LIST_WRAPPING_CHANGED"
    FIELD_DESCRIPTION_ADDED = "FIELD_DESCRIPTION_ADDED"
    FIELD_DESCRIPTION_REMOVED = "FIELD_DESCRIPTION_REMOVED"
    FIELD_DESCRIPTION_CHANGED = "FIELD_DESCRIPTION_CHANGED"
    FIELD_DEPRECATION_ADDED = "FIELD_DEPRECATION_ADDED"
    FIELD_DEPRECATION_REMOVED = "FIELD_DEPRECATION_REMOVED"
    FIELD_DEPRECATION_REASON_ADDED = "FIELD_DEPRECATION_REASON_ADDED"
    FIELD_DEPRECATION_REASON_REMOVED = "FIELD_DEPRECATION_REASON_REMOVED"
    FIELD_DEPRECATION_REASON_CHANGED = "FIELD_DEPRECATION_REASON_CHANGED"

    # Field and directive arguments
    ARGUMENT_REMOVED = "ARGUMENT_REMOVED"
    REQUIRED_ARGUMENT_ADDED = "REQUIRED_ARGUMENT_ADDED"
    OPTIONAL_ARGUMENT_ADDED = "OPTIONAL_ARGUMENT_ADDED"
    ARGUMENT_REQUIRED_ADDED = "ARGUMENT_REQUIRED_ADDED"
    ARGUMENT_TYPE_CHANGED = "ARGUMENT_TYPE_CHANGED"
    ARGUMENT_NULLABILITY_TIGHTENED = "ARGUMENT_NULLABILITY_TIGHTENED"
    ARGUMENT_NULLABILITY_LOOSENED = "ARGUMENT_NULLABILITY_LOOSENED"
    ARGUMENT_LIST_WRAPPING_CHANGED = "ARGUMENT_LIST_WRAPPING_CHANGED"
    ARGUMENT_DEFAULT_CHANGED = "ARGUMENT_DEFAULT_CHANGED"
    ARGUMENT_DESCRIPTION_CHANGED = "ARGUMENT_DESCRIPTION_CHANGED"

    # Enum values
    ENUM_VALUE_ADDED = "ENUM_VALUE_ADDED"
    ENUM_VALUE_REMOVED = "ENUM_VALUE_REMOVED"
    ENUM_VALUE_DESCRIPTION_CHANGED = "ENUM_VALUE_DESCRIPTION_CHANGED"
    ENUM_VALUE_DEPRECATION_ADDED = "ENUM_VALUE_DEPRECATION_ADDED"
    ENUM_VALUE_DEPRECATION_REMOVED = "ENUM_VALUE_DEPRECATION_REMOVED"
    ENUM_VALUE_DEPRECATION_REASON_ADDED = "ENUM_VALUE_DEPRECATION_REASON_ADDED"
    ENUM_VALUE_DEPRECATION_REASON_REMOVED = "ENUM_VALUE_DEPRECATION_REASON_REMOVED"
    ENUM_VALUE_DEPRECATION_REASON_CHANGED = "ENUM_VALUE_DEPRECATION_REASON_CHANGED"

    # Unions and interfaces
    UNION_MEMBER_ADDED = "UNION_MEMBER_ADDED"
    UNION_MEMBER_REMOVED = "UNION_MEMBER_REMOVED"
    INTERFACE_IMPLEMENTATION_ADDED = "INTERFACE_IMPLEMENTATION_ADDED"
    INTERFACE_IMPLEMENTATION_REMOVED = "INTERFACE_IMPLEMENTATION_REMOVED"

    # Input object fields
    INPUT_FIELD_REMOVED = "INPUT_FIELD_REMOVED"
    REQUIRED_INPUT_FIELD_ADDED = "REQUIRED_INPUT_FIELD_ADDED"
    OPTIONAL_INPUT_FIELD_ADDED = "OPTIONAL_INPUT_FIELD_ADDED"
    INPUT_FIELD_REQUIRED_ADDED = "INPUT_FIELD_REQUIRED_ADDED"
    INPUT_FIELD_TYPE_CHANGED = "INPUT_FIELD_TYPE_CHANGED"
    INPUT_FIELD_NULLABILITY_TIGHTENED = "INPUT_FIELD_NULLABILITY_TIGHTENED"
    INPUT_FIELD_NULLABILITY_LOOSENED = "INPUT_FIELD_NULLABILITY_LOOSENED"
    INPUT_FIELD_LIST_WRAPPING_CHANGED = "INPUT_FIELD_LIST_WRAPPING_CHANGED"
    INPUT_FIELD_DEFAULT_CHANGED = "INPUT_FIELD_DEFAULT_CHANGED"
    INPUT_FIELD_DESCRIPTION_CHANGED = "INPUT_FIELD_DESCRIPTION_CHANGED"

    # Scalars
    SCALAR_SPECIFIED_BY_CHANGED = "SCALAR_SPECIFIED_BY_CHANGED"

    # Directive definitions
    DIRECTIVE_ADDED = "DIRECTIVE_ADDED"
    DIRECTIVE_REMOVED = "DIRECTIVE_REMOVED"
    DIRECTIVE_LOCATION_ADDED = "DIRECTIVE_LOCATION_ADDED"
    DIRECTIVE_LOCATION_REMOVED = "DIRECTIVE_LOCATION_REMOVED"
    DIRECTIVE_REPEATABLE_ADDED = "DIRECTIVE_REPEATABLE_ADDED"
    DIRECTIVE_REPEATABLE_REMOVED = "DIRECTIVE_REPEATABLE_REMOVED"
    DIRECTIVE_DESCRIPTION_CHANGED = "DIRECTIVE_DESCRIPTION_CHANGED"


class CriticalityLevel(StrEnum):
    """Severity of a detected change."""

    BREAKING = "BREAKING"
    DANGEROUS = "DANGEROUS"
    NON_BREAKING = "NON_BREAKING"


class AnnotationLevel(StrEnum):
    """Check-annotation level understood by CI reporting."""

    NOTICE = "notice"
    WARNING = "warning"
    FAILURE = "failure"


class Conclusion(StrEnum):
    """Final verdict of a diff."""

    FAILURE = "failure"
    NEUTRAL = "neutral"
    SUCCESS = "success"


@dataclass(frozen=True)
class Detection:
    """Raw rule outcome, before a criticality is assigned."""

    rule_id: RuleId
    message: str
    path: str


@dataclass(frozen=True)
class Change:
    """A classified schema change.

    ``rule_id`` and ``criticality_level`` are plain strings when the change
    came back from an interceptor with values outside the known enums.
    """

    rule_id: RuleId | str
    criticality_level: CriticalityLevel | str
    message: str
    path: str
    criticality_reason: str | None = None

    @property
    def is_breaking(self) -> bool:
        return self.criticality_level == CriticalityLevel.BREAKING

    @property
    def is_dangerous(self) -> bool:
        return self.criticality_level == CriticalityLevel.DANGEROUS

    def to_dict(self) -> dict[str, Any]:
        return {
            "ruleId": str(self.rule_id),
            "criticalityLevel": str(self.criticality_level),
            "criticalityReason": self.criticality_reason,
            "message": self.message,
            "path": self.path,
        }


@dataclass(frozen=True)
class SourceLocation:
    """Position of a change in schema source (1-based)."""

    line: int
    column: int = 1
    origin: str = "new"  # "new", "old" or "fallback"


@dataclass(frozen=True)
class Annotation:
    """Source-anchored, severity-tagged message derived from a Change."""

    path: str
    start_line: int
    end_line: int
    annotation_level: AnnotationLevel
    title: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "start_line": self.start_line,
            "end_line": self.end_line,
            "annotation_level": self.annotation_level.value,
            "title": self.title,
            "message": self.message,
        }


@dataclass
class DiffStats:
    """Summary statistics for the diff."""

    breaking: int = 0
    dangerous: int = 0
    non_breaking: int = 0

    @classmethod
    def from_changes(cls, changes: tuple[Change, ...] | list[Change]) -> DiffStats:
        stats = cls()
        for change in changes:
            if change.is_breaking:
                stats.breaking += 1
            elif change.is_dangerous:
                stats.dangerous += 1
            else:
                stats.non_breaking += 1
        return stats

    def to_dict(self) -> dict[str, int]:
        return {
            "breaking": self.breaking,
            "dangerous": self.dangerous,
            "non_breaking": self.non_breaking,
        }


@dataclass
class DiffResult:
    """Complete schema diff result."""

    changes: tuple[Change, ...] = ()
    annotations: tuple[Annotation, ...] = ()
    conclusion: Conclusion = Conclusion.SUCCESS
    intercepted: bool = False
    stats: DiffStats = field(default_factory=DiffStats)

    @property
    def has_changes(self) -> bool:
        return len(self.changes) > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "conclusion": self.conclusion.value,
            "intercepted": self.intercepted,
            "has_changes": self.has_changes,
            "stats": self.stats.to_dict(),
            "changes": [c.to_dict() for c in self.changes],
            "annotations": [a.to_dict() for a in self.annotations],
        }

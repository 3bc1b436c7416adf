"""schemaguard Diff - Breaking-change detection between schema versions.

Compares two GraphQL type systems to report:
- Added/removed/kind-changed types and directives
- Field, argument, enum value and input field changes
- Nullability tightening and loosening
- Deprecation and description changes

Every change carries a criticality level (breaking, dangerous, non-breaking),
a path such as ``Post.title``, and a source-anchored annotation. An optional
interceptor may rewrite the changes or override the conclusion.
"""

from __future__ import annotations

from schemaguard.diff.conclusion import resolve_conclusion
from schemaguard.diff.criticality import CRITICALITY_TABLE, Criticality, CriticalityClassifier
from schemaguard.diff.differ import SchemaDiffer, annotation_level_for, diff, diff_sync
from schemaguard.diff.formatters import (
    format_annotations_json,
    format_diff,
    format_diff_json,
    format_diff_markdown,
)
from schemaguard.diff.interceptor import (
    DiffInterceptor,
    HttpInterceptor,
    InterceptorResponse,
    run_interceptor,
)
from schemaguard.diff.locator import LineLocator
from schemaguard.diff.models import (
    Annotation,
    AnnotationLevel,
    Change,
    Conclusion,
    CriticalityLevel,
    Detection,
    DiffResult,
    DiffStats,
    RuleId,
    SourceLocation,
)
from schemaguard.diff.rules import ChangeDetector, detect_changes

__all__ = [
    # Models
    "Annotation",
    "AnnotationLevel",
    "Change",
    "Conclusion",
    "CriticalityLevel",
    "Detection",
    "DiffResult",
    "DiffStats",
    "RuleId",
    "SourceLocation",
    # Engine
    "ChangeDetector",
    "detect_changes",
    "Criticality",
    "CriticalityClassifier",
    "CRITICALITY_TABLE",
    "LineLocator",
    "resolve_conclusion",
    "DiffInterceptor",
    "HttpInterceptor",
    "InterceptorResponse",
    "run_interceptor",
    "SchemaDiffer",
    "annotation_level_for",
    "diff",
    "diff_sync",
    # Formatters
    "format_diff",
    "format_diff_json",
    "format_diff_markdown",
    "format_annotations_json",
]

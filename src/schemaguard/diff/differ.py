"""Schema differ - compares two type-system snapshots and resolves a verdict."""

from __future__ import annotations

import asyncio
import logging

from schemaguard.config import DiffConfig
from schemaguard.diff.conclusion import resolve_conclusion
from schemaguard.diff.criticality import CriticalityClassifier
from schemaguard.diff.interceptor import DiffInterceptor, HttpInterceptor, run_interceptor
from schemaguard.diff.locator import LineLocator
from schemaguard.diff.models import (
    Annotation,
    AnnotationLevel,
    Change,
    CriticalityLevel,
    DiffResult,
    DiffStats,
)
from schemaguard.diff.rules import ChangeDetector
from schemaguard.schema.model import SourcePair, TypeSystemSnapshot

logger = logging.getLogger(__name__)

_ANNOTATION_LEVELS = {
    CriticalityLevel.BREAKING: AnnotationLevel.FAILURE,
    CriticalityLevel.DANGEROUS: AnnotationLevel.WARNING,
    CriticalityLevel.NON_BREAKING: AnnotationLevel.NOTICE,
}


def annotation_level_for(level: CriticalityLevel | str) -> AnnotationLevel:
    """Map a criticality level to an annotation level; unknown levels are notices."""
    return _ANNOTATION_LEVELS.get(level, AnnotationLevel.NOTICE)  # type: ignore[call-overload]


def build_annotations(
    changes: list[Change], sources: SourcePair, path: str
) -> tuple[Annotation, ...]:
    """Create one annotation per change, in the same order."""
    locator = LineLocator(sources)
    annotations = []
    for change in changes:
        location = locator.locate(change.path)
        annotations.append(
            Annotation(
                path=path,
                start_line=location.line,
                end_line=location.line,
                annotation_level=annotation_level_for(change.criticality_level),
                title=change.message,
                message=change.criticality_reason or change.message,
            )
        )
    return tuple(annotations)


class SchemaDiffer:
    """Compares two schema versions to produce a classified diff."""

    def __init__(
        self,
        config: DiffConfig | None = None,
        interceptor: DiffInterceptor | None = None,
        classifier: CriticalityClassifier | None = None,
    ):
        """Initialize differ.

        Args:
            config: Engine configuration. Defaults apply when omitted.
            interceptor: Strategy to call after classification. When omitted,
                an HttpInterceptor is built from ``config.interceptor.url``
                if one is set.
            classifier: Criticality table override, mainly for tests.
        """
        self.config = config or DiffConfig()
        self.classifier = classifier or CriticalityClassifier()
        if interceptor is None and self.config.interceptor.url:
            interceptor = HttpInterceptor(
                endpoint=self.config.interceptor.url,
                timeout=self.config.interceptor.timeout_seconds,
            )
        self.interceptor = interceptor

    async def diff(
        self,
        sources: SourcePair,
        snapshots: TypeSystemSnapshot,
        path: str,
    ) -> DiffResult:
        """Compute the diff between the old and new snapshot.

        Args:
            sources: Original SDL text, used only to locate annotations.
            snapshots: Old and new type maps.
            path: Label attached to every annotation.

        Returns:
            DiffResult with changes, one annotation per change, and the verdict.

        Raises:
            UnknownRuleError: If a detection has no criticality entry.
        """
        detections = ChangeDetector(snapshots).detect()
        changes = self.classifier.classify_all(detections)

        override = None
        intercepted = False
        if self.interceptor is not None:
            outcome = await run_interceptor(
                self.interceptor,
                changes,
                timeout=self.config.interceptor.timeout_seconds,
            )
            changes = outcome.changes
            override = outcome.conclusion
            intercepted = outcome.applied

        conclusion = override or resolve_conclusion(
            changes, fail_on_dangerous=self.config.fail_on_dangerous
        )
        logger.info("Diff concluded %s with %d changes", conclusion.value, len(changes))

        return DiffResult(
            changes=tuple(changes),
            annotations=build_annotations(changes, sources, path),
            conclusion=conclusion,
            intercepted=intercepted,
            stats=DiffStats.from_changes(changes),
        )


async def diff(
    sources: SourcePair,
    snapshots: TypeSystemSnapshot,
    path: str,
    config: DiffConfig | None = None,
    interceptor: DiffInterceptor | None = None,
) -> DiffResult:
    """Diff two schema versions.

    Example:
        >>> sources, snapshots = build_inputs(old_sdl, new_sdl)
        >>> result = await diff(sources, snapshots, "schema.graphql")
        >>> result.conclusion
        <Conclusion.FAILURE: 'failure'>
    """
    return await SchemaDiffer(config, interceptor).diff(sources, snapshots, path)


def diff_sync(
    sources: SourcePair,
    snapshots: TypeSystemSnapshot,
    path: str,
    config: DiffConfig | None = None,
    interceptor: DiffInterceptor | None = None,
) -> DiffResult:
    """Blocking wrapper around :func:`diff` for callers without an event loop."""
    return asyncio.run(diff(sources, snapshots, path, config, interceptor))

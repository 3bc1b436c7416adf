"""Aggregate classified changes into a single verdict."""

from __future__ import annotations

from collections.abc import Iterable

from schemaguard.diff.models import Change, Conclusion


def resolve_conclusion(changes: Iterable[Change], fail_on_dangerous: bool = False) -> Conclusion:
    """Return FAILURE on any breaking change, else SUCCESS.

    With ``fail_on_dangerous`` a dangerous change fails the diff too. NEUTRAL
    is never produced here; only an interceptor override yields it.
    """
    for change in changes:
        if change.is_breaking:
            return Conclusion.FAILURE
        if fail_on_dangerous and change.is_dangerous:
            return Conclusion.FAILURE
    return Conclusion.SUCCESS

"""Output formatters for schema diff results."""

from __future__ import annotations

import json

from schemaguard.diff.models import Change, Conclusion, CriticalityLevel, DiffResult


# ANSI color codes
class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"


def _color(text: str, color: str, no_color: bool = False) -> str:
    """Apply color to text."""
    if no_color:
        return text
    return f"{color}{text}{Colors.RESET}"


def _level_symbol(change: Change, no_color: bool = False) -> str:
    """Get symbol for a criticality level."""
    if change.criticality_level == CriticalityLevel.BREAKING:
        return _color("✖", Colors.RED, no_color)
    elif change.criticality_level == CriticalityLevel.DANGEROUS:
        return _color("⚠", Colors.YELLOW, no_color)
    return _color("✔", Colors.GREEN, no_color)


_CONCLUSION_COLORS = {
    Conclusion.FAILURE: Colors.RED,
    Conclusion.NEUTRAL: Colors.BLUE,
    Conclusion.SUCCESS: Colors.GREEN,
}


def format_diff(
    result: DiffResult,
    old_name: str = "old",
    new_name: str = "new",
    no_color: bool = False,
) -> str:
    """Format diff result for terminal output.

    Args:
        result: The diff result to format.
        old_name: Label of the old schema.
        new_name: Label of the new schema.
        no_color: If True, disable ANSI colors.

    Returns:
        Formatted string for terminal display.
    """
    lines: list[str] = []

    header = f"Schema diff: {old_name} → {new_name}"
    lines.append(_color(header, Colors.BOLD, no_color))
    lines.append(_color("=" * len(header), Colors.DIM, no_color))
    lines.append("")

    if not result.has_changes:
        lines.append(_color("No changes detected.", Colors.DIM, no_color))
    else:
        stats = result.stats
        lines.append(_color("Summary:", Colors.BOLD, no_color))
        parts = []
        if stats.breaking:
            parts.append(_color(f"{stats.breaking} breaking", Colors.RED, no_color))
        if stats.dangerous:
            parts.append(_color(f"{stats.dangerous} dangerous", Colors.YELLOW, no_color))
        if stats.non_breaking:
            parts.append(_color(f"{stats.non_breaking} non-breaking", Colors.GREEN, no_color))
        lines.append(f"  {', '.join(parts)}")
        lines.append("")

        lines.append(_color("Changes:", Colors.BOLD, no_color))
        for change, annotation in zip(result.changes, result.annotations, strict=False):
            lines.append(
                f"  {_level_symbol(change, no_color)} {change.message} "
                f"{_color(f'({change.path}, line {annotation.start_line})', Colors.DIM, no_color)}"
            )
            if change.criticality_reason and change.is_breaking:
                lines.append(f"      {_color(change.criticality_reason, Colors.DIM, no_color)}")
        lines.append("")

    color = _CONCLUSION_COLORS.get(result.conclusion, Colors.BOLD)
    verdict = f"Conclusion: {result.conclusion.value}"
    if result.intercepted:
        verdict += " (intercepted)"
    lines.append(_color(verdict, color + Colors.BOLD, no_color))

    return "\n".join(lines)


def format_diff_json(result: DiffResult, pretty: bool = True) -> str:
    """Format diff result as JSON.

    Args:
        result: The diff result to format.
        pretty: If True, format with indentation.

    Returns:
        JSON string.
    """
    data = result.to_dict()

    if pretty:
        return json.dumps(data, indent=2)
    return json.dumps(data)


def format_annotations_json(result: DiffResult, pretty: bool = True) -> str:
    """Format only the check annotations and conclusion as JSON."""
    data = {
        "conclusion": result.conclusion.value,
        "annotations": [a.to_dict() for a in result.annotations],
    }
    if pretty:
        return json.dumps(data, indent=2)
    return json.dumps(data)


def format_diff_markdown(result: DiffResult, old_name: str = "old", new_name: str = "new") -> str:
    """Format diff result as Markdown.

    Args:
        result: The diff result to format.
        old_name: Label of the old schema.
        new_name: Label of the new schema.

    Returns:
        Markdown formatted string.
    """
    lines: list[str] = []

    lines.append(f"# Schema Diff: `{old_name}` → `{new_name}`")
    lines.append("")
    lines.append(f"**Conclusion:** {result.conclusion.value}")
    lines.append("")

    if not result.has_changes:
        lines.append("*No changes detected.*")
        return "\n".join(lines)

    stats = result.stats
    lines.append("## Summary")
    lines.append("")
    lines.append("| Breaking | Dangerous | Non-breaking |")
    lines.append("|----------|-----------|--------------|")
    lines.append(f"| {stats.breaking} | {stats.dangerous} | {stats.non_breaking} |")
    lines.append("")

    sections = [
        ("🔴 Breaking", [c for c in result.changes if c.is_breaking]),
        ("🟡 Dangerous", [c for c in result.changes if c.is_dangerous]),
        (
            "🟢 Non-breaking",
            [c for c in result.changes if not c.is_breaking and not c.is_dangerous],
        ),
    ]
    for title, changes in sections:
        if not changes:
            continue
        lines.append(f"## {title}")
        lines.append("")
        for change in changes:
            lines.append(f"- {change.message} (`{change.path}`)")
        lines.append("")

    return "\n".join(lines)

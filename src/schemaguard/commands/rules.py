"""schemaguard rules command - List the rule catalog."""

from __future__ import annotations

import click


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option(
    "--level",
    type=click.Choice(["BREAKING", "DANGEROUS", "NON_BREAKING"], case_sensitive=False),
    default=None,
    help="Only show rules with this criticality",
)
def rules(as_json: bool, level: str | None) -> None:
    """List every rule with its criticality level and reason."""
    import json as json_module

    from rich.markup import escape
    from rich.table import Table

    from schemaguard.diff.criticality import CRITICALITY_TABLE
    from schemaguard.logging import console, styled_level

    entries = [
        (rule_id, criticality)
        for rule_id, criticality in CRITICALITY_TABLE.items()
        if level is None or criticality.level == level.upper()
    ]

    if as_json:
        data = [
            {
                "ruleId": str(rule_id),
                "criticalityLevel": str(criticality.level),
                "criticalityReason": criticality.reason,
            }
            for rule_id, criticality in entries
        ]
        click.echo(json_module.dumps(data, indent=2))
        return

    table = Table(title="schemaguard Rules")
    table.add_column("Rule", style="cyan")
    table.add_column("Level")
    table.add_column("Reason", style="dim")

    for rule_id, criticality in entries:
        table.add_row(
            str(rule_id),
            styled_level(str(criticality.level)),
            escape(criticality.reason or ""),
        )

    console.print(table)


__all__ = ["rules"]

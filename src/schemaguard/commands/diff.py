"""schemaguard diff command - Classify changes between two schema files."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from schemaguard.cli import GuardContext


@click.command()
@click.argument("old_schema", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("new_schema", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--path",
    "-p",
    "path_label",
    default=None,
    help="Path reported on annotations (default: NEW_SCHEMA as given)",
)
@click.option(
    "--interceptor",
    "interceptor_url",
    default=None,
    help="Interceptor endpoint (overrides config)",
)
@click.option(
    "--fail-on-dangerous/--no-fail-on-dangerous",
    default=None,
    help="Treat dangerous changes as failures (overrides config)",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["terminal", "json", "markdown", "annotations"]),
    default=None,
    help="Output format (default: from config, else terminal)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    help="Output file (default: stdout)",
)
@click.option(
    "--no-color",
    is_flag=True,
    help="Disable colored output",
)
@click.pass_obj
def diff(
    ctx: GuardContext,
    old_schema: Path,
    new_schema: Path,
    path_label: str | None,
    interceptor_url: str | None,
    fail_on_dangerous: bool | None,
    output_format: str | None,
    output: Path | None,
    no_color: bool,
) -> None:
    """Compare OLD_SCHEMA to NEW_SCHEMA and classify every change.

    Exits with a non-zero code when the diff concludes with failure.

    \b
    Examples:
        schemaguard diff main.graphql schema.graphql
        schemaguard diff old.graphql new.graphql -f annotations -o annotations.json
        schemaguard diff old.graphql new.graphql --fail-on-dangerous
        schemaguard diff old.graphql new.graphql --interceptor https://ci.example.com/hook
    """
    from schemaguard.config import GuardConfig
    from schemaguard.diff import (
        Conclusion,
        diff_sync,
        format_annotations_json,
        format_diff,
        format_diff_json,
        format_diff_markdown,
    )
    from schemaguard.errors import ExitCode, SchemaLoadError
    from schemaguard.logging import print_error, print_schema_error, print_success
    from schemaguard.schema import build_inputs

    if ctx.config_error is not None:
        print_error(ctx.config_error.message)
        sys.exit(ctx.config_error.exit_code)

    config = ctx.config or GuardConfig()

    diff_config = config.diff.model_copy(deep=True)
    if fail_on_dangerous is not None:
        diff_config.fail_on_dangerous = fail_on_dangerous
    if interceptor_url:
        diff_config.interceptor.url = interceptor_url

    try:
        sources, snapshots = build_inputs(
            old_schema.read_text(encoding="utf-8"),
            new_schema.read_text(encoding="utf-8"),
            old_name=str(old_schema),
            new_name=str(new_schema),
        )
    except SchemaLoadError as e:
        print_schema_error(e)
        sys.exit(e.exit_code)

    label = path_label or config.output.path_label or str(new_schema)
    result = diff_sync(sources, snapshots, label, config=diff_config)

    fmt = output_format or config.output.format
    if fmt == "json":
        output_str = format_diff_json(result)
    elif fmt == "markdown":
        output_str = format_diff_markdown(result, str(old_schema), str(new_schema))
    elif fmt == "annotations":
        output_str = format_annotations_json(result)
    else:
        output_str = format_diff(
            result,
            str(old_schema),
            str(new_schema),
            no_color=no_color or output is not None or not sys.stdout.isatty(),
        )

    if output:
        output.write_text(output_str + "\n")
        print_success(f"Diff written to {output}")
    else:
        click.echo(output_str)

    if result.conclusion == Conclusion.FAILURE:
        sys.exit(ExitCode.BREAKING_CHANGES)


__all__ = ["diff"]

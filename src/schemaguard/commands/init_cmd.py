"""schemaguard init command - Write a .schemaguard.toml for a CI pipeline."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from schemaguard.cli import GuardContext


@click.command()
@click.option("--force", "-f", is_flag=True, help="Overwrite existing .schemaguard.toml")
@click.option(
    "--fail-on-dangerous",
    is_flag=True,
    help="Start with dangerous changes failing the diff",
)
@click.option(
    "--interceptor",
    "interceptor_url",
    default=None,
    help="Interceptor endpoint to write into the config",
)
@click.pass_obj
def init(
    ctx: GuardContext,
    force: bool,
    fail_on_dangerous: bool,
    interceptor_url: str | None,
) -> None:
    """Create .schemaguard.toml in the current directory.

    The file sets the dangerous-change policy and the optional interceptor
    endpoint that 'schemaguard diff' picks up. Works even when an existing
    config is broken, so it can be used to replace one.

    \b
    Examples:
        schemaguard init
        schemaguard init --fail-on-dangerous
        schemaguard init --interceptor https://ci.example.com/hook --force
    """
    from schemaguard.config import CONFIG_FILENAME, get_default_config_toml
    from schemaguard.errors import ConfigError, ExitCode
    from schemaguard.logging import print_error, print_info, print_success, print_warning

    config_path = Path.cwd() / CONFIG_FILENAME

    if config_path.exists() and not force:
        print_warning(f"Configuration file already exists: {config_path}")
        print_info("Use --force to overwrite")
        sys.exit(ExitCode.CONFIG_ERROR)

    try:
        content = get_default_config_toml(
            fail_on_dangerous=fail_on_dangerous,
            interceptor_url=interceptor_url,
        )
    except ConfigError as e:
        print_error(e.message)
        sys.exit(e.exit_code)

    try:
        config_path.write_text(content)
    except OSError as e:
        print_error(f"Failed to write {config_path}: {e}")
        sys.exit(ExitCode.CONFIG_ERROR)

    print_success(f"Created {config_path}")
    policy = "fail" if fail_on_dangerous else "pass"
    print_info(f"Dangerous changes will {policy} the diff.")
    if interceptor_url:
        print_info(f"Changes will be sent to {interceptor_url} before the verdict.")
    print_info("Run 'schemaguard diff old.graphql new.graphql' in CI to gate merges.")


__all__ = ["init"]

"""schemaguard CLI - GraphQL schema diff command-line interface."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Literal

from dotenv import load_dotenv

# Load .env file before any other imports that might use env vars
load_dotenv()

import click  # noqa: E402

from schemaguard import __version__  # noqa: E402
from schemaguard.commands.lazy import LazyGroup  # noqa: E402

if TYPE_CHECKING:
    from schemaguard.config import GuardConfig
    from schemaguard.errors import ConfigError

VerbosityLevel = Literal["quiet", "normal", "verbose"]


class GuardContext:
    """Shared context for CLI commands."""

    def __init__(self) -> None:
        self.config: GuardConfig | None = None
        self.config_error: ConfigError | None = None
        self.verbosity: VerbosityLevel = "normal"
        self.debug: bool = False


pass_context = click.make_pass_decorator(GuardContext, ensure=True)


# Define lazy subcommands: name -> (module_path, attribute_name)
LAZY_COMMANDS: dict[str, tuple[str, str]] = {
    "diff": ("schemaguard.commands.diff", "diff"),
    "rules": ("schemaguard.commands.rules", "rules"),
    "init": ("schemaguard.commands.init_cmd", "init"),
}


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_COMMANDS)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-error output")
@click.option("--debug", is_flag=True, help="Show full tracebacks on errors")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.version_option(version=__version__, prog_name="schemaguard")
@pass_context
def cli(
    ctx: GuardContext,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config: Path | None,
) -> None:
    """schemaguard - catch breaking GraphQL schema changes in CI.

    \b
    Commands:
      diff         Compare two schema files and classify every change
      rules        List the rule catalog with criticality levels
      init         Create a default .schemaguard.toml

    Use 'schemaguard <command> --help' for details.
    Use --debug to show full tracebacks on errors.
    """
    # Lazy import for faster startup
    from schemaguard.config import GuardConfig
    from schemaguard.errors import ConfigError
    from schemaguard.logging import print_error, setup_logging

    ctx.debug = debug

    if quiet:
        ctx.verbosity = "quiet"
    elif verbose:
        ctx.verbosity = "verbose"
    else:
        ctx.verbosity = "normal"

    setup_logging(ctx.verbosity)

    try:
        ctx.config = GuardConfig.load(config)
    except ConfigError as e:
        # Don't fail here - init does not need a valid config
        ctx.config_error = e
        if not quiet:
            print_error(f"Failed to load configuration: {e.message}")


def main() -> None:
    """Entry point for the CLI."""
    import sys

    debug_mode = "--debug" in sys.argv

    try:
        cli()
    except click.ClickException:
        raise
    except KeyboardInterrupt:
        sys.exit(130)
    except Exception as e:
        from schemaguard.errors import ExitCode, SchemaGuardError
        from schemaguard.logging import print_error, print_info

        if isinstance(e, SchemaGuardError):
            print_error(e.message)
            exit_code = e.exit_code
        else:
            print_error(f"Error: {e}")
            exit_code = ExitCode.FATAL_ERROR

        if debug_mode:
            print_info("")
            print_info("Full traceback (--debug mode):")
            import traceback

            traceback.print_exc()
        else:
            print_info("")
            print_info("Run with --debug for full traceback.")

        sys.exit(exit_code)


if __name__ == "__main__":
    main()

"""Click group that imports subcommand modules on first use."""

from __future__ import annotations

import importlib
from typing import Any

import click


class LazyGroup(click.Group):
    """A Click group whose subcommands are imported only when invoked.

    ``schemaguard --help`` stays fast because graphql-core, httpx and
    pydantic are pulled in by the command modules, not by the group.
    """

    def __init__(
        self,
        *args: Any,
        lazy_subcommands: dict[str, tuple[str, str]] | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize lazy group.

        Args:
            lazy_subcommands: Command name -> (module path, attribute name),
                e.g. {'diff': ('schemaguard.commands.diff', 'diff')}
        """
        super().__init__(*args, **kwargs)
        self._lazy_subcommands: dict[str, tuple[str, str]] = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        return sorted(set(super().list_commands(ctx)) | set(self._lazy_subcommands))

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        cmd = super().get_command(ctx, cmd_name)
        if cmd is None and cmd_name in self._lazy_subcommands:
            cmd = self._load(cmd_name)
            # Register so later lookups skip the import
            self.add_command(cmd, cmd_name)
        return cmd

    def _load(self, cmd_name: str) -> click.Command:
        module_path, attr_name = self._lazy_subcommands[cmd_name]
        try:
            module = importlib.import_module(module_path)
            loaded: click.Command = getattr(module, attr_name)
        except (ImportError, AttributeError) as e:
            raise click.ClickException(f"Failed to load command '{cmd_name}': {e}") from None
        return loaded


__all__ = ["LazyGroup"]

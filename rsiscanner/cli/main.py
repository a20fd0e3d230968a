"""Main CLI entry point for the RSI scanner.

This module provides the main click group, logging setup and lazy loading
of command modules to keep startup fast.
"""

import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler

# Console for rich output
console = Console()

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LazyGroup(click.Group):
    """Root group whose subcommands are imported on first use.

    Each lazy entry maps a command name to a ``"module:attribute"`` target,
    so ``rsiscanner --help`` lists every command without importing httpx
    or the scanner.
    """

    def __init__(self, *args, lazy_subcommands: dict[str, str] | None = None, **kwargs):
        """Initialize the group.

        Args:
            lazy_subcommands: Mapping of command name to "module:attribute".
        """
        super().__init__(*args, **kwargs)
        self._lazy_subcommands = dict(lazy_subcommands or {})

    def list_commands(self, ctx: click.Context) -> list[str]:
        return sorted(set(self.commands) | set(self._lazy_subcommands))

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        command = self.commands.get(cmd_name)
        if command is None and cmd_name in self._lazy_subcommands:
            command = self._import_command(cmd_name)
            self.add_command(command, cmd_name)
        return command

    def _import_command(self, cmd_name: str) -> click.Command:
        import importlib

        target = self._lazy_subcommands[cmd_name]
        module_path, _, attr_name = target.partition(":")
        command = getattr(importlib.import_module(module_path), attr_name or cmd_name, None)

        if not isinstance(command, click.Command):
            raise click.ClickException(f"{target} is not a click command")
        return command


LAZY_SUBCOMMANDS = {
    "scan": "rsiscanner.cli.scan:scan",
    "watch": "rsiscanner.cli.scan:watch",
    "symbols": "rsiscanner.cli.symbols:symbols",
    "favorite": "rsiscanner.cli.symbols:favorite",
    "alerts": "rsiscanner.cli.alerts:alerts",
}


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def configure_logging(level: str) -> None:
    """Send log records through a rich handler on the shared console."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, rich_tracebacks=True)],
        force=True,
    )


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_SUBCOMMANDS, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="rsiscanner")
@click.option(
    "-c", "--config", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to config.toml (default: ~/.config/rsiscanner/config.toml).",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Override the configured log level.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], log_level: Optional[str]) -> None:
    """RSI Scanner - multi-symbol RSI dashboard for the terminal.

    Polls candle data for your tracked symbols, shows the latest RSI for
    each one and notifies you when a symbol turns overbought or oversold.

    \b
    Quick Start:
      rsiscanner scan            # One-off RSI table
      rsiscanner watch -t 1h     # Live dashboard on 1h candles
      rsiscanner alerts on       # Enable overbought/oversold toasts
    """
    from rsiscanner.config import load_config

    config = load_config(config_path)
    configure_logging((log_level or config.logging.level).upper())

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()

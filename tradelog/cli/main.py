"""Main CLI entry point for TradeLog.

This module provides the main click group, lazy loading of
subcommands and the shared config/service helpers they use.
"""

import importlib
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

# Console for rich output
console = Console()


class LazyGroup(click.Group):
    """Group whose subcommands are imported on first use.

    ``lazy_subcommands`` maps a command name to an ``"module:attribute"``
    reference. Resolved commands are registered on the group so each
    module is imported at most once.
    """

    def __init__(self, *args, lazy_subcommands: dict[str, str] | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.lazy_subcommands = dict(lazy_subcommands or {})

    def list_commands(self, ctx: click.Context) -> list[str]:
        return sorted({*self.commands, *self.lazy_subcommands})

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        command = super().get_command(ctx, cmd_name)
        if command is None and cmd_name in self.lazy_subcommands:
            command = self._resolve(cmd_name)
            self.add_command(command, cmd_name)
        return command

    def _resolve(self, cmd_name: str) -> click.Command:
        module_name, _, attr = self.lazy_subcommands[cmd_name].partition(":")
        command = getattr(importlib.import_module(module_name), attr or cmd_name, None)
        if not isinstance(command, click.Command):
            raise click.ClickException(
                f"'{self.lazy_subcommands[cmd_name]}' is not a command for '{cmd_name}'"
            )
        return command


LAZY_SUBCOMMANDS = {
    "ingest": "tradelog.cli.ingest:ingest",
    "show": "tradelog.cli.ingest:show",
    "diff": "tradelog.cli.compare:diff",
    "merge": "tradelog.cli.compare:merge",
    "verify": "tradelog.cli.compare:verify",
    "notes": "tradelog.cli.compare:notes",
    "replaced": "tradelog.cli.compare:replaced",
    "stats": "tradelog.cli.stats:stats",
    "weeks": "tradelog.cli.stats:weeks",
    "months": "tradelog.cli.stats:months",
    "compare-stats": "tradelog.cli.stats:compare_stats",
}


CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def get_config() -> dict:
    """Load configuration (defaults when no config file exists)."""
    from tradelog.config import load_config

    return load_config()


def get_service(config: dict):
    """Build a JournalService backed by the configured SQLite store."""
    from tradelog.config import get_db_path
    from tradelog.db.store import JournalStore
    from tradelog.journal import JournalService

    return JournalService(JournalStore(get_db_path(config)))


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@click.group(cls=LazyGroup, lazy_subcommands=LAZY_SUBCOMMANDS, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="tradelog")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """TradeLog - journal for trading bot day logs.
    
    Parse bot log output into daily statistics, compare resubmitted
    logs against what is on record, and merge the differences.
    
    \b
    Quick Start:
      tradelog ingest day.log            # Store a day's log
      tradelog ingest --compare new.log  # Store a resubmitted log
      tradelog diff 2025-03-10           # Review differences
    """
    ctx.ensure_object(dict)
    config = get_config()
    _setup_logging("DEBUG" if verbose else config["logging"].get("level", "WARNING"))
    ctx.obj["config"] = config


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()

"""Compare commands for TradeLog CLI.

Reviews a resubmitted (compare) log against the day on record and
merges selected differences back into it.
"""

from datetime import datetime
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tradelog.cli.main import get_service
from tradelog.models import DiffResult, FieldChange, MergeOptions, TradeRecord

console = Console()


def _format_value(value) -> str:
    if isinstance(value, list):
        return f"{len(value)} exit(s)"
    if isinstance(value, datetime):
        return value.strftime("%H:%M:%S")
    if isinstance(value, float):
        return f"{value:,.2f}"
    return str(value)


def _describe_trade(trade: TradeRecord) -> str:
    return (
        f"#{trade.id} {trade.timestamp.strftime('%H:%M:%S')} {trade.direction} "
        f"@ {trade.entry_price:,.2f} x{trade.quantity} (${trade.total_pnl:,.2f})"
    )


def _describe_changes(changes: list[FieldChange]) -> str:
    return "; ".join(
        f"{c.field}: {_format_value(c.old_value)} → {_format_value(c.new_value)}"
        for c in changes
    )


def render_diff(diff: DiffResult) -> Table:
    """Build a table listing every trade-level difference."""
    table = Table(title="Trade Differences", show_header=True, header_style="bold cyan")
    table.add_column("Change", style="bold")
    table.add_column("Trade")
    table.add_column("Details")

    for trade in diff.added:
        table.add_row("[green]added[/green]", _describe_trade(trade), "")
    for trade in diff.removed:
        table.add_row("[red]removed[/red]", _describe_trade(trade), "")
    for pair in diff.modified:
        table.add_row("[yellow]modified[/yellow]", _describe_trade(pair.trade), _describe_changes(pair.changes))
    return table


def render_day_changes(changes: list[FieldChange]) -> Table:
    """Build a table of day-level stat changes."""
    table = Table(title="Day Stats", show_header=True, header_style="bold cyan")
    table.add_column("Field", style="bold")
    table.add_column("Base", justify="right")
    table.add_column("Compare", justify="right")

    for change in changes:
        if hasattr(change.old_value, "model_dump"):
            old, new = "(block)", "(changed)"
        else:
            old, new = _format_value(change.old_value), _format_value(change.new_value)
        table.add_row(change.field, old, new)
    return table


@click.command()
@click.argument("day", type=click.DateTime(formats=["%Y-%m-%d"]))
@click.pass_context
def diff(ctx: click.Context, day: datetime) -> None:
    """Compare a day's compare data against its base.

    \b
    Examples:
      tradelog diff 2025-03-10
    """
    service = get_service(ctx.obj["config"])
    result = service.diff_day(day.date())

    if result is None:
        console.print(Panel(
            f"[dim]No compare data for {day.date()}[/dim]\n\n"
            "Run [cyan]tradelog ingest --compare FILE[/cyan] first.",
            title="[bold]Diff[/bold]",
            border_style="dim",
        ))
        return

    summary = (
        f"[green]+{len(result.added)} added[/green]  "
        f"[red]-{len(result.removed)} removed[/red]  "
        f"[yellow]~{len(result.modified)} modified[/yellow]  "
        f"[dim]{len(result.id_only_changed)} ID-only, {len(result.unchanged)} unchanged[/dim]"
    )
    border = "yellow" if result.has_differences else "green"
    console.print(Panel(summary, title=f"[bold]Diff {day.date()}[/bold]", border_style=border))

    if result.added or result.removed or result.modified:
        console.print(render_diff(result))
    if result.daily_stats:
        console.print(render_day_changes(result.daily_stats))


@click.command()
@click.argument("day", type=click.DateTime(formats=["%Y-%m-%d"]))
@click.option("--all", "merge_all", is_flag=True, help="Replace the base day with the compare data.")
@click.option("--trade-id", "trade_ids", type=int, multiple=True, help="Compare trade ID to merge (repeatable).")
@click.option("--daily-stats", is_flag=True, help="Replace day-level stats with the compare data.")
@click.pass_context
def merge(
    ctx: click.Context,
    day: datetime,
    merge_all: bool,
    trade_ids: tuple[int, ...],
    daily_stats: bool,
) -> None:
    """Merge compare data into the base day.

    \b
    Examples:
      tradelog merge 2025-03-10 --all
      tradelog merge 2025-03-10 --trade-id 5 --trade-id 7
      tradelog merge 2025-03-10 --daily-stats
    """
    if not (merge_all or trade_ids or daily_stats):
        raise click.UsageError("Choose --all, --trade-id or --daily-stats.")

    service = get_service(ctx.obj["config"])
    options = MergeOptions(
        merge_all=merge_all,
        merge_trade_ids=list(trade_ids),
        merge_daily_stats=daily_stats,
    )
    try:
        log = service.merge_day(day.date(), options)
    except ValueError as e:
        raise click.ClickException(str(e))

    console.print(
        f"[green]✓[/green] Merged into [bold]{log.date}[/bold]: "
        f"{len(log.analysis.trades)} trades, P&L ${log.analysis.headline.total_pnl:,.2f}"
    )


@click.command()
@click.argument("day", type=click.DateTime(formats=["%Y-%m-%d"]))
@click.option("--unverify", is_flag=True, help="Clear the verified flag.")
@click.option("--by", "verified_by", default=None, help="Reviewer name.")
@click.pass_context
def verify(ctx: click.Context, day: datetime, unverify: bool, verified_by: Optional[str]) -> None:
    """Mark a day's compare data as reviewed."""
    service = get_service(ctx.obj["config"])
    log = service.verify_day(day.date(), not unverify, verified_by)
    if log is None:
        raise click.ClickException(f"No compare data for {day.date()}")
    state = "verified" if log.verified else "unverified"
    console.print(f"[green]✓[/green] Compare data for [bold]{log.date}[/bold] marked {state}")


@click.command()
@click.argument("day", type=click.DateTime(formats=["%Y-%m-%d"]))
@click.argument("text", required=False)
@click.option("--compare", "on_compare", is_flag=True, help="Attach notes to the compare data.")
@click.pass_context
def notes(ctx: click.Context, day: datetime, text: Optional[str], on_compare: bool) -> None:
    """Show or set notes for a day.

    \b
    Examples:
      tradelog notes 2025-03-10
      tradelog notes 2025-03-10 "Slippage on the open"
    """
    service = get_service(ctx.obj["config"])

    if text is None:
        if on_compare:
            log = service.store.get_compare_day(day.date())
            current = log.notes if log else None
        else:
            current = service.store.get_notes(day.date())
        console.print(current or "[dim]No notes[/dim]")
        return

    if not service.add_notes(day.date(), text, compare=on_compare):
        raise click.ClickException(f"No compare data for {day.date()}")
    console.print(f"[green]✓[/green] Notes saved for [bold]{day.date()}[/bold]")


@click.command()
@click.argument("day", type=click.DateTime(formats=["%Y-%m-%d"]), required=False)
@click.option("--clear", is_flag=True, help="Delete the archived submissions for DAY.")
@click.pass_context
def replaced(ctx: click.Context, day: Optional[datetime], clear: bool) -> None:
    """List compare logs that were superseded by a later submission.

    \b
    Examples:
      tradelog replaced
      tradelog replaced 2025-03-10
      tradelog replaced 2025-03-10 --clear
    """
    service = get_service(ctx.obj["config"])
    target = day.date() if day else None

    if clear:
        if target is None:
            raise click.UsageError("--clear needs a DAY")
        removed = service.clear_replaced_compare_days(target)
        if not removed:
            raise click.ClickException(f"No replaced compare data for {target}")
        console.print(f"[green]✓[/green] Removed {removed} archived compare log(s) for [bold]{target}[/bold]")
        return

    logs = service.get_replaced_compare_days(target)
    if not logs:
        console.print("[dim]No replaced compare data[/dim]")
        return

    table = Table(title="Replaced Compare Logs", show_header=True, header_style="bold cyan")
    table.add_column("Date", style="bold")
    table.add_column("Replaced At")
    table.add_column("Reason")
    table.add_column("Trades", justify="right")
    table.add_column("P&L", justify="right")
    for log in logs:
        pnl = log.analysis.headline.total_pnl
        color = "green" if pnl >= 0 else "red"
        table.add_row(
            str(log.date),
            log.replaced_at.strftime("%Y-%m-%d %H:%M:%S") if log.replaced_at else "-",
            log.replaced_reason or "-",
            str(len(log.analysis.trades)),
            f"[{color}]${pnl:,.2f}[/{color}]",
        )
    console.print(table)

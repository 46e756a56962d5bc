"""Ingest and show commands for TradeLog CLI.

Parses bot log text into the journal and displays stored days.
"""

from datetime import datetime
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tradelog.cli.main import get_service
from tradelog.models import DayAnalysis

console = Console()


def _pnl_text(value: float) -> str:
    color = "green" if value >= 0 else "red"
    sign = "+" if value >= 0 else ""
    return f"[{color}]{sign}${value:,.2f}[/{color}]"


def render_headline(analysis: DayAnalysis, title: str) -> Panel:
    """Build a panel with a day's headline totals."""
    h = analysis.headline
    win_rate = (h.wins / h.total_trades * 100) if h.total_trades else 0.0
    lines = [
        f"[bold]P&L:[/bold] {_pnl_text(h.total_pnl)}",
        f"[bold]Trades:[/bold] {h.total_trades}  "
        f"[bold]Wins:[/bold] {h.wins}  [bold]Losses:[/bold] {h.losses}  "
        f"[bold]Win Rate:[/bold] {win_rate:.1f}%",
        f"[bold]Big Wins:[/bold] {h.big_wins}  [bold]Big Losses:[/bold] {h.big_losses}",
        f"[bold]Trailing Drawdown:[/bold] ${h.trailing_drawdown:,.2f}  "
        f"[bold]Contracts:[/bold] {h.contracts}",
        f"[bold]Max Profit:[/bold] ${h.max_profit:,.2f}  [bold]Max Risk:[/bold] ${h.max_risk:,.2f}",
    ]
    return Panel("\n".join(lines), title=f"[bold]{title}[/bold]", border_style="cyan")


def render_sessions(analysis: DayAnalysis) -> Table:
    """Build a table of per-session statistics."""
    table = Table(title="Sessions", show_header=True, header_style="bold cyan")
    table.add_column("Session", style="bold")
    table.add_column("P&L", justify="right")
    table.add_column("Trades", justify="right")
    table.add_column("Avg / Trade", justify="right")

    for name, stats in analysis.sessions.items():
        table.add_row(
            name.title(),
            _pnl_text(stats.pnl),
            str(stats.trades),
            f"${stats.avg_pnl_per_trade:,.2f}",
        )
    return table


def render_trades(analysis: DayAnalysis) -> Table:
    """Build a table of a day's trades."""
    table = Table(title="Trades", show_header=True, header_style="bold cyan")
    table.add_column("ID", justify="right")
    table.add_column("Time")
    table.add_column("Side")
    table.add_column("Entry", justify="right")
    table.add_column("Qty", justify="right")
    table.add_column("Exits")
    table.add_column("P&L", justify="right")

    for trade in analysis.trades:
        side_color = "green" if trade.direction == "LONG" else "red"
        exits = ", ".join(f"{e.exit_reason}@{e.exit_price:g}" for e in trade.exits)
        if trade.is_chase_trade:
            exits += " [yellow](chase)[/yellow]"
        table.add_row(
            str(trade.id),
            trade.timestamp.strftime("%H:%M:%S"),
            f"[{side_color}]{trade.direction}[/{side_color}]",
            f"{trade.entry_price:,.2f}",
            str(trade.quantity),
            exits,
            _pnl_text(trade.total_pnl),
        )
    return table


@click.command()
@click.argument("log_file", type=click.File("r", encoding="utf-8", errors="replace"))
@click.option("--compare", "as_compare", is_flag=True, help="Store as compare data for review.")
@click.option(
    "--date",
    "day",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Trading day (default: first date found in the log).",
)
@click.pass_context
def ingest(ctx: click.Context, log_file, as_compare: bool, day: Optional[datetime]) -> None:
    """Parse a bot log file and store it in the journal.

    Use '-' to read the log from stdin.

    \b
    Examples:
      tradelog ingest day.log
      tradelog ingest --compare resubmitted.log
      cat day.log | tradelog ingest -
    """
    raw_text = log_file.read()
    if not raw_text.strip():
        console.print(Panel(
            "[red]Log input is empty.[/red]",
            title="[bold red]Error[/bold red]",
            border_style="red",
        ))
        raise SystemExit(1)

    service = get_service(ctx.obj["config"])
    target_day = day.date() if day else None

    if as_compare:
        log, replaced = service.ingest_compare(raw_text, target_day)
        console.print(f"[green]✓[/green] Stored compare log for [bold]{log.date}[/bold]")
        if replaced is not None:
            console.print("[dim]Previous compare log archived as replaced.[/dim]")
    else:
        log = service.ingest_base(raw_text, target_day)
        console.print(f"[green]✓[/green] Stored log for [bold]{log.date}[/bold]")

    console.print(
        f"  {len(log.analysis.trades)} trades parsed, "
        f"day P&L {_pnl_text(log.analysis.headline.total_pnl)}"
    )


@click.command()
@click.argument("day", type=click.DateTime(formats=["%Y-%m-%d"]))
@click.option("--compare", "as_compare", is_flag=True, help="Show the compare data instead.")
@click.pass_context
def show(ctx: click.Context, day: datetime, as_compare: bool) -> None:
    """Show a stored day.

    \b
    Examples:
      tradelog show 2025-03-10
      tradelog show 2025-03-10 --compare
    """
    service = get_service(ctx.obj["config"])
    store = service.store
    log = store.get_compare_day(day.date()) if as_compare else store.get_day(day.date())

    if log is None:
        console.print(Panel(
            f"[dim]No {'compare ' if as_compare else ''}data for {day.date()}[/dim]",
            title="[bold]Journal[/bold]",
            border_style="dim",
        ))
        return

    title = f"{'Compare' if as_compare else 'Day'} {log.date}"
    console.print(render_headline(log.analysis, title))
    console.print(render_sessions(log.analysis))
    if log.analysis.trades:
        console.print(render_trades(log.analysis))
    if log.notes:
        console.print(Panel(log.notes, title="[bold]Notes[/bold]", border_style="dim"))

"""Statistics commands for TradeLog CLI."""

from datetime import datetime
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from tradelog.cli.main import get_service
from tradelog.stats import (
    calculate_stats,
    calculate_stats_for_last_n_days,
    group_logs_by_month,
    group_logs_by_week,
)

console = Console()


def _pnl_text(value: float) -> str:
    color = "green" if value >= 0 else "red"
    sign = "+" if value >= 0 else ""
    return f"[{color}]{sign}${value:,.2f}[/{color}]"


def _thresholds(config: dict) -> dict:
    stats_config = config.get("stats", {})
    return {
        "big_day_threshold": stats_config.get("big_day_threshold", 400.0),
        "small_day_threshold": stats_config.get("small_day_threshold", 100.0),
    }


@click.command()
@click.option("--from", "from_date", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.option("--to", "to_date", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.option("--last", "last_n", type=int, default=None, help="Only the N most recent days.")
@click.pass_context
def stats(
    ctx: click.Context,
    from_date: Optional[datetime],
    to_date: Optional[datetime],
    last_n: Optional[int],
) -> None:
    """Show aggregate statistics over stored days.

    \b
    Examples:
      tradelog stats
      tradelog stats --last 20
      tradelog stats --from 2025-03-01 --to 2025-03-31
    """
    config = ctx.obj["config"]
    service = get_service(config)
    days = service.get_days(
        from_date.date() if from_date else None,
        to_date.date() if to_date else None,
    )

    if not days:
        console.print(Panel(
            "[dim]No days stored[/dim]",
            title="[bold]Statistics[/bold]",
            border_style="dim",
        ))
        return

    thresholds = _thresholds(config)
    if last_n is not None:
        result = calculate_stats_for_last_n_days(days, last_n, **thresholds)
    else:
        result = calculate_stats(days, **thresholds)

    wdl = result["win_draw_loss"]
    lines = [
        f"[bold]Days:[/bold] {result['total_days']}  "
        f"[green]{result['green_days']} green[/green] / [red]{result['red_days']} red[/red]",
        f"[bold]Total P&L:[/bold] {_pnl_text(result['total_pnl'])}  "
        f"[bold]Avg/Day:[/bold] {_pnl_text(result['average_pnl'])}",
        f"[bold]Trades:[/bold] {result['total_trades']} ({wdl['breakdown']} W-D-L)  "
        f"[bold]Win Rate:[/bold] {result['win_rate']:.1f}%",
        f"[bold]Avg Win:[/bold] {_pnl_text(result['average_win'])}  "
        f"[bold]Avg Loss:[/bold] {_pnl_text(result['average_loss'])}",
        f"[bold]Fill Rate:[/bold] {result['average_fill_rate']:.1f}%",
        f"[bold]Big Days:[/bold] {result['big_win_days']} wins / {result['big_loss_days']} losses",
    ]
    if result["best_day"]:
        lines.append(
            f"[bold]Best:[/bold] {result['best_day']['date']} {_pnl_text(result['best_day']['pnl'])}  "
            f"[bold]Worst:[/bold] {result['worst_day']['date']} {_pnl_text(result['worst_day']['pnl'])}"
        )
    console.print(Panel("\n".join(lines), title="[bold]Statistics[/bold]", border_style="cyan"))

    table = Table(title="Sessions", show_header=True, header_style="bold cyan")
    table.add_column("Session", style="bold")
    table.add_column("Days", justify="right")
    table.add_column("Trades", justify="right")
    table.add_column("P&L", justify="right")
    table.add_column("Avg/Day", justify="right")
    table.add_column("Green %", justify="right")
    for name, session in result["sessions"].items():
        table.add_row(
            name.title(),
            str(session["total_days"]),
            str(session["total_trades"]),
            _pnl_text(session["total_pnl"]),
            _pnl_text(session["average_pnl"]),
            f"{session['win_rate']:.1f}%",
        )
    console.print(table)


@click.command()
@click.option("--limit", type=int, default=8, help="Number of weeks to show.")
@click.pass_context
def weeks(ctx: click.Context, limit: int) -> None:
    """Show weekly P&L rollups, newest week first."""
    service = get_service(ctx.obj["config"])
    grouped = group_logs_by_week(service.get_days())[:limit]

    if not grouped:
        console.print("[dim]No days stored[/dim]")
        return

    table = Table(title="Weeks", show_header=True, header_style="bold cyan")
    table.add_column("Week", style="bold")
    table.add_column("Days", justify="right")
    table.add_column("Trades", justify="right")
    table.add_column("W/L", justify="right")
    table.add_column("P&L", justify="right")
    for week in grouped:
        headline = week["headline"]
        table.add_row(
            f"{week['week_start']} – {week['week_end']}",
            str(len(week["days"])),
            str(headline["total_trades"]),
            f"{headline['wins']}/{headline['losses']}",
            _pnl_text(headline["total_pnl"]),
        )
    console.print(table)


@click.command()
@click.option("--limit", type=int, default=12, help="Number of months to show.")
@click.pass_context
def months(ctx: click.Context, limit: int) -> None:
    """Show monthly P&L rollups, newest month first."""
    config = ctx.obj["config"]
    service = get_service(config)
    grouped = group_logs_by_month(
        service.get_days(), big_day_threshold=_thresholds(config)["big_day_threshold"]
    )[:limit]

    if not grouped:
        console.print("[dim]No days stored[/dim]")
        return

    table = Table(title="Months", show_header=True, header_style="bold cyan")
    table.add_column("Month", style="bold")
    table.add_column("Days", justify="right")
    table.add_column("Trades", justify="right")
    table.add_column("W-D-L", justify="right")
    table.add_column("Net Win", justify="right")
    table.add_column("G/R", justify="right")
    table.add_column("Big W/L", justify="right")
    table.add_column("P&L", justify="right")
    for month in grouped:
        headline = month["headline"]
        table.add_row(
            month["month_start"].strftime("%Y-%m"),
            str(headline["total_days"]),
            str(headline["total_trades"]),
            f"{headline['wins']}-{headline['draws']}-{headline['losses']}",
            f"{headline['net_win_rate']:.1f}%",
            f"{headline['profitable_days']}/{headline['losing_days']}",
            f"{headline['big_wins']}/{headline['big_losses']}",
            _pnl_text(headline["total_pnl"]),
        )
    console.print(table)


@click.command("compare-stats")
@click.option("--unverified-only", is_flag=True, help="Skip compare days already marked verified.")
@click.pass_context
def compare_stats(ctx: click.Context, unverified_only: bool) -> None:
    """Summarize how stored compare logs differ from the base days.

    \b
    Examples:
      tradelog compare-stats
      tradelog compare-stats --unverified-only
    """
    config = ctx.obj["config"]
    service = get_service(config)
    result = service.comparison_stats(unverified_only=unverified_only, **_thresholds(config))

    if result["total_weeks"] == 0:
        console.print(Panel(
            "[dim]No compare data stored[/dim]",
            title="[bold]Compare vs Base[/bold]",
            border_style="dim",
        ))
        return

    lines = [
        f"[bold]Weeks:[/bold] {result['total_weeks']}  "
        f"[bold]P&L Diff:[/bold] {_pnl_text(result['total_pnl_diff'])}  "
        f"[bold]Per Week:[/bold] {_pnl_text(result['avg_pnl_diff_per_week'])}",
        f"[bold]Trades Diff:[/bold] {result['total_trades_diff']:+d}  "
        f"[bold]Wins Diff:[/bold] {result['total_wins_diff']:+d}  "
        f"[bold]Losses Diff:[/bold] {result['total_losses_diff']:+d}",
        f"[bold]Win Rate Diff:[/bold] {result['win_rate_diff']:+.1f}%  "
        f"[bold]P&L/Trade Diff:[/bold] {_pnl_text(result['pnl_diff_per_trade'])}",
    ]
    console.print(Panel("\n".join(lines), title="[bold]Compare vs Base[/bold]", border_style="cyan"))

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("", style="bold")
    table.add_column("Compare", justify="right")
    table.add_column("Base", justify="right")
    table.add_row("P&L", _pnl_text(result["total_compare_pnl"]), _pnl_text(result["total_base_pnl"]))
    table.add_row("Trades", str(result["total_compare_trades"]), str(result["total_base_trades"]))
    table.add_row(
        "W-D-L",
        result["compare_win_draw_loss"]["breakdown"],
        result["base_win_draw_loss"]["breakdown"],
    )
    table.add_row(
        "Win Rate",
        f"{result['compare_win_rate']:.1f}%",
        f"{result['base_win_rate']:.1f}%",
    )
    table.add_row(
        "Green/Red Days",
        "{green_days}/{red_days}".format(**result["compare_green_red"]),
        "{green_days}/{red_days}".format(**result["base_green_red"]),
    )
    table.add_row(
        "Big Win/Loss Days",
        "{big_wins}/{big_losses}".format(**result["compare_pnl_distribution"]),
        "{big_wins}/{big_losses}".format(**result["base_pnl_distribution"]),
    )
    console.print(table)

"""Statistics aggregation over stored trading days."""

from collections import defaultdict
from datetime import date, timedelta
from typing import Optional

from tradelog.models import DailyLog
from tradelog.models.analysis import SESSION_NAMES

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def _empty_day_of_week() -> dict:
    return {
        "total_days": 0,
        "total_trades": 0,
        "total_pnl": 0.0,
        "wins": 0,
        "losses": 0,
        "draws": 0,
        "green_days": 0,
        "red_days": 0,
    }


def _empty_session() -> dict:
    return {
        "total_days": 0,
        "total_trades": 0,
        "total_pnl": 0.0,
        "green_days": 0,
        "red_days": 0,
    }


def _pct(part: float, whole: float) -> float:
    return round(part / whole * 100, 2) if whole else 0.0


def _avg(total: float, count: int) -> float:
    return round(total / count, 2) if count else 0.0


def calculate_stats(
    days: list[DailyLog],
    big_day_threshold: float = 400.0,
    small_day_threshold: float = 100.0,
) -> dict:
    """Aggregate statistics over a set of days.

    Args:
        days: Stored days to aggregate.
        big_day_threshold: Day P&L magnitude counted as a big win/loss day.
        small_day_threshold: Boundary between low and high profit/loss days.

    Returns:
        Dictionary of aggregate metrics.
    """
    total_pnl = 0.0
    total_trades = 0
    total_wins = 0
    total_losses = 0
    orders_generated = 0
    orders_filled = 0
    profitable_days = 0
    losing_days = 0
    break_even_days = 0
    best_day: Optional[dict] = None
    worst_day: Optional[dict] = None
    max_win_days: list[dict] = []
    max_loss_days: list[dict] = []
    pnl_breakdown = {
        "high_profit_days": 0,
        "low_profit_days": 0,
        "low_loss_days": 0,
        "high_loss_days": 0,
    }
    day_of_week = {name: _empty_day_of_week() for name in WEEKDAYS}
    sessions = {name: _empty_session() for name in SESSION_NAMES}

    for day in days:
        headline = day.analysis.headline
        raw_pnl = headline.total_pnl
        day_pnl = round(raw_pnl, 2)
        summary = {"date": day.date.isoformat(), "pnl": day_pnl, "trades": headline.total_trades}

        total_pnl += day_pnl
        total_trades += headline.total_trades
        total_wins += headline.wins
        total_losses += headline.losses
        orders_generated += day.analysis.trade_breakdown.orders_generated
        orders_filled += day.analysis.trade_breakdown.orders_filled

        if raw_pnl > 0:
            profitable_days += 1
        elif raw_pnl < 0:
            losing_days += 1
        else:
            break_even_days += 1

        if day_pnl > big_day_threshold:
            max_win_days.append(summary)
        elif day_pnl < -big_day_threshold:
            max_loss_days.append(summary)

        if day_pnl > small_day_threshold:
            pnl_breakdown["high_profit_days"] += 1
        elif day_pnl > 0:
            pnl_breakdown["low_profit_days"] += 1
        elif day_pnl >= -small_day_threshold and day_pnl < 0:
            pnl_breakdown["low_loss_days"] += 1
        elif day_pnl < -small_day_threshold:
            pnl_breakdown["high_loss_days"] += 1

        weekday = day_of_week[WEEKDAYS[day.date.weekday()]]
        weekday["total_days"] += 1
        weekday["total_trades"] += headline.total_trades
        weekday["total_pnl"] += day_pnl
        weekday["wins"] += headline.wins
        weekday["losses"] += headline.losses
        weekday["draws"] += headline.total_trades - (headline.wins + headline.losses)
        if raw_pnl > 0:
            weekday["green_days"] += 1
        else:
            weekday["red_days"] += 1

        for name, session in day.analysis.sessions.items():
            bucket = sessions[name]
            bucket["total_trades"] += session.trades
            bucket["total_pnl"] += round(session.pnl, 2)
            if session.trades > 0:
                bucket["total_days"] += 1
                if round(session.pnl, 2) > 0:
                    bucket["green_days"] += 1
                else:
                    bucket["red_days"] += 1

        if best_day is None or day_pnl > best_day["pnl"]:
            best_day = summary
        if worst_day is None or day_pnl < worst_day["pnl"]:
            worst_day = summary

    for stats in day_of_week.values():
        stats["total_pnl"] = round(stats["total_pnl"], 2)
        stats["average_trades"] = _avg(stats["total_trades"], stats["total_days"])
        stats["average_pnl"] = _avg(stats["total_pnl"], stats["total_days"])
        stats["win_rate"] = _pct(stats["wins"], stats["total_trades"])
        stats["net_win_rate"] = _pct(stats["wins"] + stats["draws"], stats["total_trades"])

    for stats in sessions.values():
        stats["total_pnl"] = round(stats["total_pnl"], 2)
        stats["average_trades"] = _avg(stats["total_trades"], stats["total_days"])
        stats["average_pnl"] = _avg(stats["total_pnl"], stats["total_days"])
        stats["win_rate"] = _pct(stats["green_days"], stats["total_days"])

    total_days = len(days)
    total_draws = total_trades - (total_wins + total_losses)
    max_win_days.sort(key=lambda d: d["pnl"], reverse=True)
    max_loss_days.sort(key=lambda d: d["pnl"])
    average_win = total_pnl / total_wins if total_wins and total_pnl > 0 else 0.0
    average_loss = total_pnl / total_losses if total_losses and total_pnl < 0 else 0.0

    return {
        "total_days": total_days,
        "total_pnl": round(total_pnl, 2),
        "total_trades": total_trades,
        "average_pnl": _avg(total_pnl, total_days),
        "average_trades": _avg(total_trades, total_days),
        "total_orders_generated": orders_generated,
        "total_orders_filled": orders_filled,
        "average_fill_rate": _pct(orders_filled, orders_generated),
        "win_rate": _pct(total_wins, total_trades),
        "net_win_rate": _pct(total_wins + total_draws, total_trades),
        "average_win": round(average_win, 2),
        "average_loss": round(average_loss, 2),
        "win_draw_loss": {
            "wins": total_wins,
            "draws": total_draws,
            "losses": total_losses,
            "breakdown": f"{total_wins}-{total_draws}-{total_losses}",
        },
        "best_day": best_day,
        "worst_day": worst_day,
        "profitable_days": profitable_days,
        "losing_days": losing_days,
        "break_even_days": break_even_days,
        "green_days": profitable_days,
        "red_days": losing_days + break_even_days,
        "big_win_days": len(max_win_days),
        "big_loss_days": len(max_loss_days),
        "max_win_days": max_win_days,
        "max_loss_days": max_loss_days,
        "pnl_breakdown": pnl_breakdown,
        "day_of_week": day_of_week,
        "sessions": sessions,
    }


def calculate_stats_for_last_n_days(days: list[DailyLog], n: int, **kwargs) -> dict:
    """Aggregate statistics for the ``n`` most recent days."""
    recent = sorted(days, key=lambda d: d.date, reverse=True)[:n]
    return calculate_stats(recent, **kwargs)


def week_start(day: date) -> date:
    """Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


def group_logs_by_week(days: list[DailyLog]) -> list[dict]:
    """Group days into Monday-to-Sunday weeks, newest week first.

    Returns:
        List of dicts with ``week_start``, ``week_end``, ``days`` (newest
        first) and a ``headline`` of summed P&L, trades, wins and losses.
    """
    weeks: dict[date, list[DailyLog]] = defaultdict(list)
    for day in days:
        weeks[week_start(day.date)].append(day)

    result = []
    for start in sorted(weeks, reverse=True):
        week_days = sorted(weeks[start], key=lambda d: d.date, reverse=True)
        result.append({
            "week_start": start,
            "week_end": start + timedelta(days=6),
            "days": week_days,
            "headline": {
                "total_pnl": round(sum(d.analysis.headline.total_pnl for d in week_days), 2),
                "total_trades": sum(d.analysis.headline.total_trades for d in week_days),
                "wins": sum(d.analysis.headline.wins for d in week_days),
                "losses": sum(d.analysis.headline.losses for d in week_days),
            },
        })
    return result


def group_logs_by_month(
    days: list[DailyLog],
    big_day_threshold: float = 400.0,
) -> list[dict]:
    """Group days into calendar months, newest month first.

    Returns:
        List of dicts with ``month_start``, ``month_end``, ``days`` (newest
        first) and a ``headline`` of month totals.
    """
    months: dict[date, list[DailyLog]] = defaultdict(list)
    for day in days:
        months[day.date.replace(day=1)].append(day)

    result = []
    for start in sorted(months, reverse=True):
        month_days = sorted(months[start], key=lambda d: d.date, reverse=True)
        next_month = (start + timedelta(days=32)).replace(day=1)
        headlines = [d.analysis.headline for d in month_days]
        total_pnl = sum(h.total_pnl for h in headlines)
        total_trades = sum(h.total_trades for h in headlines)
        wins = sum(h.wins for h in headlines)
        losses = sum(h.losses for h in headlines)
        draws = total_trades - (wins + losses)
        result.append({
            "month_start": start,
            "month_end": next_month - timedelta(days=1),
            "days": month_days,
            "headline": {
                "total_days": len(month_days),
                "total_trades": total_trades,
                "total_pnl": round(total_pnl, 2),
                "avg_pnl_per_day": _avg(total_pnl, len(month_days)),
                "wins": wins,
                "losses": losses,
                "draws": draws,
                "net_win_rate": _pct(wins + draws, total_trades),
                "profitable_days": sum(1 for h in headlines if h.total_pnl > 0),
                "losing_days": sum(1 for h in headlines if h.total_pnl < 0),
                "big_wins": sum(1 for h in headlines if round(h.total_pnl, 2) > big_day_threshold),
                "big_losses": sum(1 for h in headlines if round(h.total_pnl, 2) < -big_day_threshold),
            },
        })
    return result


def _headline_totals(days: list[DailyLog]) -> dict:
    totals = {"total_pnl": 0.0, "total_trades": 0, "wins": 0, "losses": 0, "big_wins": 0, "big_losses": 0}
    for day in days:
        headline = day.analysis.headline
        for key in totals:
            totals[key] += getattr(headline, key)
    return totals


def _win_draw_loss(days: list[DailyLog]) -> dict:
    wins = sum(d.analysis.headline.wins for d in days)
    losses = sum(d.analysis.headline.losses for d in days)
    draws = max(0, sum(d.analysis.headline.total_trades for d in days) - wins - losses)
    return {"wins": wins, "draws": draws, "losses": losses, "breakdown": f"{wins}-{draws}-{losses}"}


def _green_red(days: list[DailyLog]) -> dict:
    green = sum(1 for d in days if d.analysis.headline.total_pnl > 0)
    return {"green_days": green, "red_days": len(days) - green}


def _pnl_distribution(days: list[DailyLog], big_day_threshold: float, small_day_threshold: float) -> dict:
    buckets = {
        "big_wins": 0,
        "high_profit_days": 0,
        "low_profit_days": 0,
        "low_loss_days": 0,
        "high_loss_days": 0,
        "big_losses": 0,
    }
    for day in days:
        pnl = round(day.analysis.headline.total_pnl, 2)
        if pnl > big_day_threshold:
            buckets["big_wins"] += 1
        elif pnl > small_day_threshold:
            buckets["high_profit_days"] += 1
        elif pnl > 0:
            buckets["low_profit_days"] += 1
        elif pnl >= -small_day_threshold:
            buckets["low_loss_days"] += 1
        elif pnl >= -big_day_threshold:
            buckets["high_loss_days"] += 1
        else:
            buckets["big_losses"] += 1
    return buckets


def calculate_comparison_stats(
    compare_days: list[DailyLog],
    base_days: list[DailyLog],
    big_day_threshold: float = 400.0,
    small_day_threshold: float = 100.0,
) -> dict:
    """Aggregate how compare submissions differ from the base record.

    Days are grouped into Monday-start weeks. Only weeks holding at least
    one compare day contribute to the totals; base days in other weeks
    are ignored. Differences are compare minus base.

    Args:
        compare_days: Compare records to evaluate.
        base_days: Base records, usually those sharing a date with a
            compare record.
        big_day_threshold: Day P&L magnitude counted as a big win/loss day.
        small_day_threshold: Boundary between low and high profit/loss days.

    Returns:
        Dictionary of totals, per-week averages, per-side win rates and
        per-side day breakdowns.
    """
    if not compare_days:
        base_days = []

    compare_weeks: dict[date, list[DailyLog]] = defaultdict(list)
    for day in compare_days:
        compare_weeks[week_start(day.date)].append(day)
    base_weeks: dict[date, list[DailyLog]] = defaultdict(list)
    for day in base_days:
        base_weeks[week_start(day.date)].append(day)

    compare_totals = _headline_totals([d for w in compare_weeks.values() for d in w])
    base_totals = _headline_totals([d for start in compare_weeks for d in base_weeks.get(start, [])])
    total_weeks = len(compare_weeks)

    pnl_diff = compare_totals["total_pnl"] - base_totals["total_pnl"]
    trades_diff = compare_totals["total_trades"] - base_totals["total_trades"]
    compare_win_rate = _pct(compare_totals["wins"], compare_totals["total_trades"])
    base_win_rate = _pct(base_totals["wins"], base_totals["total_trades"])
    compare_avg = _avg(compare_totals["total_pnl"], compare_totals["total_trades"])
    base_avg = _avg(base_totals["total_pnl"], base_totals["total_trades"])

    return {
        "total_pnl_diff": round(pnl_diff, 2),
        "total_trades_diff": trades_diff,
        "total_wins_diff": compare_totals["wins"] - base_totals["wins"],
        "total_losses_diff": compare_totals["losses"] - base_totals["losses"],
        "total_big_wins_diff": compare_totals["big_wins"] - base_totals["big_wins"],
        "total_big_losses_diff": compare_totals["big_losses"] - base_totals["big_losses"],
        "total_weeks": total_weeks,
        "total_compare_trades": compare_totals["total_trades"],
        "total_base_trades": base_totals["total_trades"],
        "total_compare_pnl": round(compare_totals["total_pnl"], 2),
        "total_base_pnl": round(base_totals["total_pnl"], 2),
        "avg_pnl_diff_per_week": _avg(pnl_diff, total_weeks),
        "avg_trades_diff_per_week": _avg(trades_diff, total_weeks),
        "compare_win_rate": compare_win_rate,
        "base_win_rate": base_win_rate,
        "win_rate_diff": round(compare_win_rate - base_win_rate, 2),
        "compare_avg_pnl_per_trade": compare_avg,
        "base_avg_pnl_per_trade": base_avg,
        "pnl_diff_per_trade": round(compare_avg - base_avg, 2),
        "compare_win_draw_loss": _win_draw_loss(compare_days),
        "base_win_draw_loss": _win_draw_loss(base_days),
        "compare_green_red": _green_red(compare_days),
        "base_green_red": _green_red(base_days),
        "compare_pnl_distribution": _pnl_distribution(compare_days, big_day_threshold, small_day_threshold),
        "base_pnl_distribution": _pnl_distribution(base_days, big_day_threshold, small_day_threshold),
    }

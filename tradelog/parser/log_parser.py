"""Trading bot log parser.

Converts the semi-structured text emitted by the trading bot into a
``DayAnalysis``. Parsing is best-effort: unrecognised lines are skipped
and a recognised marker whose numbers cannot be read contributes nothing.
"""

import logging
import math
import re
from datetime import date, datetime
from typing import Callable, Optional

from tradelog.models import (
    BlockedTrades,
    ChaseMode,
    DayAnalysis,
    ExitRecord,
    FillProtection,
    Headline,
    NearStopEvent,
    ProtectionStats,
    SessionStats,
    Sessions,
    TradeBreakdown,
    TradeRecord,
)
from tradelog.parser.rules import classify_exit_reason

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %I:%M:%S %p"

_MONEY = r"(-?\$?-?[\d,]*\.?\d+)"
_TIMESTAMP_RE = re.compile(r"(\d{4}-\d{2}-\d{2} \d{1,2}:\d{2}:\d{2} [AP]M)")
_DATE_RE = re.compile(r"(\d{4}-\d{2}-\d{2})")

_FILL_RE = re.compile(rf"\[TRADE FILL \(ID: (\d+)\)\] (LONG|SHORT) FILLED: {_MONEY}")
_CLOSE_RE = re.compile(
    rf"\[TRADE CLOSE(?: - (TP|SL))? \(ID: (\d+)\)\] TRADE CLOSED:.*?at Price: {_MONEY}"
)
_REASON_RE = re.compile(r"Reason:\s*([^|\]]+)")
_PNL_UPDATE_RE = re.compile(
    rf"\[PNL UPDATE - (?:GAIN|LOSS|NIL) \(ID: (\d+)\)\] CURRENT TRADE PnL: {_MONEY}"
)
_COMPLETED_RE = re.compile(
    rf"\[PNL UPDATE - (?:GAIN|LOSS|NIL) \(ID: (\d+)\)\] COMPLETED TRADE PnL: {_MONEY}"
)
_QTY_RE = re.compile(r"(?:Qty|Quantity):\s*(\d+)")
_POINTS_RE = re.compile(r"Points:\s*(-?[\d.]+)")
_NEAR_STOP_RE = re.compile(
    rf"\[NEAR STOP \(ID: (\d+)\)\]\s*(?:(LONG|SHORT)\s+)?Price: {_MONEY}"
    rf"\s*\|\s*Stop: {_MONEY}\s*\|\s*Distance: (-?[\d.]+)"
)

_HEADLINE_RE = re.compile(
    r"TOTAL TRADES:\s*(\d+)\s*\|\s*WINS:\s*(\d+)\s*\([\d.]+%\)"
    r"\s*\|\s*LOSSES:\s*(\d+)\s*\([\d.]+%\)"
)
_HEADLINE_PNL_RE = re.compile(rf"PnL:\s*{_MONEY}")
_BIG_WINS_RE = re.compile(r"Big Wins:\s*(\d+)")
_BIG_LOSSES_RE = re.compile(r"Big Losses:\s*(\d+)")
_SESSION_RE = re.compile(
    rf"(Morning|Main|Midday|Afternoon|End) Session - PnL: {_MONEY}"
    rf"\s*\|\s*Trades:\s*(\d+)\s*\|\s*Avg PnL per Trade: {_MONEY}"
)
_ORDERS_GENERATED_RE = re.compile(r"Orders Generated:\s*(\d+)")
_ORDERS_FILLED_RE = re.compile(r"Orders Filled:\s*(\d+)(?:\s*\(([\d.]+)%\))?")
_CHASE_PNL_RE = re.compile(rf"Chase Mode Trades PnL:\s*{_MONEY}")
_CHASE_COUNT_RE = re.compile(r"Chase Mode Trades:\s*(\d+)")
_COUNTER_RE = re.compile(r"^\s*([A-Za-z][A-Za-z ]*?)\s*:\s*(\d+)\s*$")

# (headline field, pattern, caster)
HEADLINE_METRICS: list[tuple[str, re.Pattern, Optional[Callable]]] = [
    ("trailing_drawdown", re.compile(rf"Trailing Drawdown:\s*{_MONEY}"), None),
    ("contracts", re.compile(r"Contracts(?: Traded)?:\s*(\d+)"), int),
    ("max_potential_gain_per_contract",
     re.compile(rf"Max Potential Gain per Contract:\s*{_MONEY}"), None),
    ("pnl_per_trade", re.compile(rf"(?<!Avg )PnL per Trade:\s*{_MONEY}"), None),
    ("max_profit", re.compile(rf"Max Profit:\s*{_MONEY}"), None),
    ("max_risk", re.compile(rf"Max Risk:\s*{_MONEY}"), None),
    ("max_daily_gain", re.compile(rf"Max Daily Gain:\s*{_MONEY}"), None),
    ("max_daily_loss", re.compile(rf"Max Daily Loss:\s*{_MONEY}"), None),
]

BLOCKED_TRADE_LABELS = {
    "protective": "protective",
    "dynamic range": "dynamic_range",
    "bounce protect": "bounce_protect",
    "predictive wick protect": "predictive_wick_protect",
    "bad structure": "bad_structure",
    "atr protect": "atr_protect",
    "vol delta protect": "vol_delta_protect",
    "soft chase protect": "soft_chase_protect",
}

FILL_PROTECTION_LABELS = {
    "fill protect": "fill_protect",
    "max fill protect": "max_fill_protect",
    "chase fill protect": "chase_fill_protect",
    "chop zone fill": "chop_zone_fill",
    "fill proactive": "fill_proactive",
}

CHASE_MODE_LABELS = {
    "trades": "trades",
    "restarts": "restarts",
}


def _to_float(text: str) -> float:
    """Convert a money/number token such as ``-$1,250.50`` to float.

    Raises:
        ValueError: If the token holds no number or one too large for a float.
    """
    cleaned = text.replace("$", "").replace(",", "")
    negative = cleaned.count("-") % 2 == 1
    value = float(cleaned.replace("-", ""))
    if not math.isfinite(value):
        raise ValueError(f"Number out of range: {text[:20]}...")
    return -value if negative else value


def _parse_timestamp(line: str) -> Optional[datetime]:
    match = _TIMESTAMP_RE.search(line)
    if not match:
        return None
    try:
        return datetime.strptime(match.group(1), TIMESTAMP_FORMAT)
    except ValueError:
        return None


def _parse_counters(text: str, labels: dict[str, str]) -> dict[str, int]:
    """Read ``Label: N`` segments separated by ``|`` into field counts."""
    counters: dict[str, int] = {}
    for segment in text.split("|"):
        match = _COUNTER_RE.match(segment)
        if not match:
            continue
        field = labels.get(match.group(1).strip().lower())
        if field:
            counters[field] = int(match.group(2))
    return counters


class _TradeBuilder:
    """Partial trade accumulated across fill, close and PnL lines."""

    def __init__(self, trade_id: int, timestamp: datetime, direction: str, entry_price: float):
        self.id = trade_id
        self.timestamp = timestamp
        self.direction = direction
        self.entry_price = entry_price
        self.exits: list[dict] = []

    def add_exit(
        self,
        exit_price: float,
        exit_reason: str,
        reason_text: Optional[str],
        exit_time: Optional[datetime],
    ) -> None:
        self.exits.append({
            "exit_price": exit_price,
            "quantity": 0,
            "pnl": 0.0,
            "points": 0.0,
            "exit_reason": exit_reason,
            "reason_text": reason_text,
            "exit_time": exit_time,
        })

    def update_latest_exit(self, **values) -> bool:
        if not self.exits:
            return False
        self.exits[-1].update({k: v for k, v in values.items() if v is not None})
        return True

    def is_complete(self) -> bool:
        return (
            self.id is not None
            and self.direction is not None
            and self.entry_price is not None
            and len(self.exits) > 0
        )

    def build(self, total_pnl: float, exit_time: Optional[datetime], is_chase_trade: bool) -> TradeRecord:
        exits = [ExitRecord(**stub) for stub in self.exits]
        return TradeRecord(
            id=self.id,
            timestamp=self.timestamp,
            direction=self.direction,
            entry_price=self.entry_price,
            total_pnl=total_pnl,
            exits=exits,
            quantity=sum(e.quantity for e in exits),
            is_chase_trade=is_chase_trade,
            exit_time=exit_time,
        )


class _ParseState:
    """Mutable state for a single ``parse_trading_log`` call."""

    def __init__(self):
        self.headline: dict = {}
        self.sessions: dict[str, SessionStats] = {}
        self.blocked: dict[str, int] = {}
        self.fill_protection: dict[str, int] = {}
        self.chase_mode: dict[str, int] = {}
        self.breakdown: dict = {}
        self.near_stops: list[NearStopEvent] = []
        self.trades: list[TradeRecord] = []
        self.open_trades: dict[int, _TradeBuilder] = {}

    def to_analysis(self) -> DayAnalysis:
        if self.open_trades:
            logger.debug(
                "Discarding %d unterminated trade(s): %s",
                len(self.open_trades),
                sorted(self.open_trades),
            )
        return DayAnalysis(
            headline=Headline(**self.headline),
            sessions=Sessions(**self.sessions),
            protection_stats=ProtectionStats(
                blocked_trades=BlockedTrades(**self.blocked),
                fill_protection=FillProtection(**self.fill_protection),
                chase_mode=ChaseMode(**self.chase_mode),
            ),
            trade_breakdown=TradeBreakdown(**self.breakdown),
            near_stop_events=list(self.near_stops),
            trades=list(self.trades),
        )


# ==================== Trade lines ====================

def _handle_fill(state: _ParseState, line: str, timestamp: Optional[datetime]) -> bool:
    match = _FILL_RE.search(line)
    if not match or timestamp is None:
        return False
    trade_id = int(match.group(1))
    if trade_id in state.open_trades:
        logger.debug("Trade %d filled again before completing; restarting it", trade_id)
    state.open_trades[trade_id] = _TradeBuilder(
        trade_id, timestamp, match.group(2), _to_float(match.group(3))
    )
    return True


def _handle_close(state: _ParseState, line: str, timestamp: Optional[datetime]) -> bool:
    match = _CLOSE_RE.search(line)
    if not match:
        return False
    builder = state.open_trades.get(int(match.group(2)))
    if builder is None:
        return True
    reason_match = _REASON_RE.search(line)
    reason_text = reason_match.group(1).strip() if reason_match else None
    builder.add_exit(
        exit_price=_to_float(match.group(3)),
        exit_reason=classify_exit_reason(match.group(1), reason_text),
        reason_text=reason_text,
        exit_time=timestamp,
    )
    return True


def _handle_pnl_update(state: _ParseState, line: str, timestamp: Optional[datetime]) -> bool:
    match = _PNL_UPDATE_RE.search(line)
    if not match:
        return False
    builder = state.open_trades.get(int(match.group(1)))
    if builder is None:
        return True
    qty_match = _QTY_RE.search(line)
    points_match = _POINTS_RE.search(line)
    updated = builder.update_latest_exit(
        pnl=_to_float(match.group(2)),
        quantity=int(qty_match.group(1)) if qty_match else None,
        points=_to_float(points_match.group(1)) if points_match else None,
    )
    if not updated:
        logger.debug("PnL update for trade %d has no exit to apply to", builder.id)
    return True


def _handle_completed(state: _ParseState, line: str, timestamp: Optional[datetime]) -> bool:
    match = _COMPLETED_RE.search(line)
    if not match:
        return False
    trade_id = int(match.group(1))
    builder = state.open_trades.get(trade_id)
    if builder is None:
        return True
    total_pnl = _to_float(match.group(2))
    del state.open_trades[trade_id]
    if builder.is_complete():
        state.trades.append(builder.build(total_pnl, timestamp, "Chase Trade" in line))
    else:
        logger.debug("Dropping trade %d: completed without any exit", trade_id)
    return True


def _handle_near_stop(state: _ParseState, line: str, timestamp: Optional[datetime]) -> bool:
    match = _NEAR_STOP_RE.search(line)
    if not match:
        return False
    state.near_stops.append(NearStopEvent(
        trade_id=int(match.group(1)),
        timestamp=timestamp,
        direction=match.group(2),
        price=_to_float(match.group(3)),
        stop_price=_to_float(match.group(4)),
        distance=_to_float(match.group(5)),
    ))
    return True


# ==================== Stat lines ====================

def _handle_headline(state: _ParseState, line: str, timestamp: Optional[datetime]) -> bool:
    match = _HEADLINE_RE.search(line)
    if not match:
        return False
    values = {
        "total_trades": int(match.group(1)),
        "wins": int(match.group(2)),
        "losses": int(match.group(3)),
    }
    pnl_match = _HEADLINE_PNL_RE.search(line[:match.start()])
    if pnl_match:
        values["total_pnl"] = _to_float(pnl_match.group(1))
    big_wins = _BIG_WINS_RE.search(line)
    if big_wins:
        values["big_wins"] = int(big_wins.group(1))
    big_losses = _BIG_LOSSES_RE.search(line)
    if big_losses:
        values["big_losses"] = int(big_losses.group(1))
    state.headline.update(values)
    return True


def _handle_session(state: _ParseState, line: str, timestamp: Optional[datetime]) -> bool:
    match = _SESSION_RE.search(line)
    if not match:
        return False
    state.sessions[match.group(1).lower()] = SessionStats(
        pnl=_to_float(match.group(2)),
        trades=int(match.group(3)),
        avg_pnl_per_trade=_to_float(match.group(4)),
    )
    return True


def _counter_handler(marker: str, labels: dict[str, str], attr: str):
    def handler(state: _ParseState, line: str, timestamp: Optional[datetime]) -> bool:
        counters = _parse_counters(line.split(marker, 1)[1], labels)
        getattr(state, attr).update(counters)
        return bool(counters)
    return handler


def _handle_orders(state: _ParseState, line: str, timestamp: Optional[datetime]) -> bool:
    generated = _ORDERS_GENERATED_RE.search(line)
    filled = _ORDERS_FILLED_RE.search(line)
    if generated:
        state.breakdown["orders_generated"] = int(generated.group(1))
    if filled:
        state.breakdown["orders_filled"] = int(filled.group(1))
        if filled.group(2):
            state.breakdown["fill_rate"] = _to_float(filled.group(2))
    total = state.breakdown.get("orders_generated", 0)
    if filled and not filled.group(2) and total:
        state.breakdown["fill_rate"] = round(state.breakdown["orders_filled"] / total * 100, 2)
    return bool(generated or filled)


def _handle_chase_trades(state: _ParseState, line: str, timestamp: Optional[datetime]) -> bool:
    pnl = _CHASE_PNL_RE.search(line)
    count = _CHASE_COUNT_RE.search(line)
    if pnl:
        state.breakdown["chase_mode_trades_pnl"] = _to_float(pnl.group(1))
    if count:
        state.breakdown["chase_mode_trades"] = int(count.group(1))
    return bool(pnl or count)


def _handle_headline_metrics(state: _ParseState, line: str, timestamp: Optional[datetime]) -> bool:
    found = False
    for field, pattern, caster in HEADLINE_METRICS:
        match = pattern.search(line)
        if match:
            state.headline[field] = (caster or _to_float)(match.group(1))
            found = True
    return found


# Evaluated in order; the first rule whose marker appears in the line owns it.
LINE_RULES: list[tuple[tuple[str, ...], Callable]] = [
    (("[TRADE FILL",), _handle_fill),
    (("[TRADE CLOSE",), _handle_close),
    (("COMPLETED TRADE PnL:",), _handle_completed),
    (("CURRENT TRADE PnL:",), _handle_pnl_update),
    (("[NEAR STOP",), _handle_near_stop),
    (("TOTAL TRADES:",), _handle_headline),
    (("Session - PnL:",), _handle_session),
    (("Blocked Trades -",), _counter_handler("Blocked Trades -", BLOCKED_TRADE_LABELS, "blocked")),
    (("Fill Protection -",), _counter_handler("Fill Protection -", FILL_PROTECTION_LABELS, "fill_protection")),
    (("Chase Mode Trades PnL:",), _handle_chase_trades),
    (("Chase Mode -",), _counter_handler("Chase Mode -", CHASE_MODE_LABELS, "chase_mode")),
    (("Orders Generated:", "Orders Filled:"), _handle_orders),
    (
        (
            "Trailing Drawdown:",
            "Contracts",
            "Max Potential Gain per Contract:",
            "PnL per Trade:",
            "Max Profit:",
            "Max Risk:",
            "Max Daily Gain:",
            "Max Daily Loss:",
        ),
        _handle_headline_metrics,
    ),
]


def _process_line(state: _ParseState, line: str) -> None:
    for markers, handler in LINE_RULES:
        if not any(marker in line for marker in markers):
            continue
        try:
            handler(state, line, _parse_timestamp(line))
        except ValueError as e:
            logger.debug("Skipping malformed line %r: %s", line, e)
        return


def parse_trading_log(raw_text: str) -> DayAnalysis:
    """Parse raw bot log text into a DayAnalysis.

    Lines are processed in order. Trades are assembled from their fill,
    close and PnL lines and emitted when their completed-trade line
    arrives; anything still open at end of input is discarded.

    Args:
        raw_text: Raw multi-line log text.

    Returns:
        The parsed analysis. Never raises for malformed input; unknown or
        unreadable lines simply contribute nothing.
    """
    state = _ParseState()
    for line in (raw_text or "").splitlines():
        _process_line(state, line)
    return state.to_analysis()


def extract_log_date(raw_text: str, today: Optional[date] = None) -> date:
    """Return the first valid ``YYYY-MM-DD`` date in the text.

    Args:
        raw_text: Raw log text.
        today: Fallback date; defaults to ``date.today()``.

    Returns:
        The extracted calendar date, or the fallback when none is found.
    """
    for match in _DATE_RE.finditer(raw_text or ""):
        try:
            return date.fromisoformat(match.group(1))
        except ValueError:
            continue
    return today or date.today()

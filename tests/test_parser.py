"""Tests for the trading log parser.

**Feature: trading-log-journal**
"""

from datetime import date, datetime

from hypothesis import given, settings
from hypothesis import strategies as st

from tradelog.models import DayAnalysis, SessionStats
from tradelog.parser import classify_exit_reason, extract_log_date, parse_trading_log

from conftest import SAMPLE_LOG


class TestTradeAssembly:
    """
    **Feature: trading-log-journal, Property 1: Trade Assembly**

    Fill, close and PnL lines for one ID combine into a single trade
    once its completed-trade line is reached.
    """

    def test_emits_only_completed_trades(self, sample_log: str):
        """Trades 1 and 2 complete; trade 3 never does."""
        analysis = parse_trading_log(sample_log)
        assert [t.id for t in analysis.trades] == [1, 2]

    def test_single_exit_trade(self, sample_log: str):
        trade = parse_trading_log(sample_log).trades[0]

        assert trade.timestamp == datetime(2025, 3, 10, 9, 31, 5)
        assert trade.direction == "LONG"
        assert trade.entry_price == 5012.25
        assert trade.total_pnl == 775.0
        assert trade.quantity == 2
        assert trade.is_chase_trade is False
        assert trade.exit_time == datetime(2025, 3, 10, 9, 35, 11)

        assert len(trade.exits) == 1
        exit_record = trade.exits[0]
        assert exit_record.exit_price == 5020.0
        assert exit_record.quantity == 2
        assert exit_record.pnl == 775.0
        assert exit_record.points == 7.75
        assert exit_record.exit_reason == "TP"
        assert exit_record.reason_text == "Take Profit"
        assert exit_record.exit_time == datetime(2025, 3, 10, 9, 35, 10)

    def test_multi_exit_chase_trade(self, sample_log: str):
        trade = parse_trading_log(sample_log).trades[1]

        assert trade.direction == "SHORT"
        assert trade.total_pnl == -25.0
        assert trade.is_chase_trade is True
        assert trade.quantity == 2
        assert [e.exit_reason for e in trade.exits] == ["MANUAL", "SL"]
        assert [e.pnl for e in trade.exits] == [100.0, -125.0]
        assert trade.exits[1].points == -2.5

    def test_partial_trade_discarded(self):
        """A fill with no close or completion never produces a trade."""
        log = "2025-03-10 9:31:05 AM [TRADE FILL (ID: 7)] LONG FILLED: 5012.25\n"
        analysis = parse_trading_log(log)
        assert all(t.id != 7 for t in analysis.trades)

    def test_completed_without_exit_is_dropped(self):
        log = (
            "2025-03-10 9:31:05 AM [TRADE FILL (ID: 7)] LONG FILLED: 5012.25\n"
            "2025-03-10 9:32:00 AM [PNL UPDATE - NIL (ID: 7)] COMPLETED TRADE PnL: $0.00\n"
        )
        assert parse_trading_log(log).trades == []

    def test_lines_for_unknown_id_are_ignored(self):
        log = (
            "2025-03-10 9:31:05 AM [TRADE CLOSE - TP (ID: 4)] TRADE CLOSED: at Price: 5020.00\n"
            "2025-03-10 9:31:06 AM [PNL UPDATE - GAIN (ID: 4)] COMPLETED TRADE PnL: $50.00\n"
        )
        assert parse_trading_log(log).trades == []

    def test_pnl_updates_overwrite_latest_exit(self):
        """Repeated PnL updates refine the latest exit instead of adding one."""
        log = (
            "2025-03-10 9:31:05 AM [TRADE FILL (ID: 5)] LONG FILLED: 5000.00\n"
            "2025-03-10 9:33:00 AM [TRADE CLOSE - TP (ID: 5)] TRADE CLOSED: at Price: 5004.00\n"
            "2025-03-10 9:33:00 AM [PNL UPDATE - GAIN (ID: 5)] CURRENT TRADE PnL: $100.00 | Qty: 1 | Points: 4.00\n"
            "2025-03-10 9:33:01 AM [PNL UPDATE - GAIN (ID: 5)] CURRENT TRADE PnL: $200.00 | Qty: 1\n"
            "2025-03-10 9:33:02 AM [PNL UPDATE - GAIN (ID: 5)] COMPLETED TRADE PnL: $200.00\n"
        )
        trade = parse_trading_log(log).trades[0]
        assert len(trade.exits) == 1
        assert trade.exits[0].pnl == 200.0
        assert trade.exits[0].points == 4.0

    def test_interleaved_trades(self):
        """Two trades open at once are tracked independently by ID."""
        log = (
            "2025-03-10 9:31:00 AM [TRADE FILL (ID: 1)] LONG FILLED: 5000.00\n"
            "2025-03-10 9:31:30 AM [TRADE FILL (ID: 2)] SHORT FILLED: 5001.00\n"
            "2025-03-10 9:32:00 AM [TRADE CLOSE - SL (ID: 2)] TRADE CLOSED: at Price: 5003.00\n"
            "2025-03-10 9:32:00 AM [PNL UPDATE - LOSS (ID: 2)] CURRENT TRADE PnL: -$100.00 | Qty: 1\n"
            "2025-03-10 9:32:30 AM [TRADE CLOSE - TP (ID: 1)] TRADE CLOSED: at Price: 5004.00\n"
            "2025-03-10 9:32:30 AM [PNL UPDATE - GAIN (ID: 1)] CURRENT TRADE PnL: $200.00 | Qty: 1\n"
            "2025-03-10 9:33:00 AM [PNL UPDATE - LOSS (ID: 2)] COMPLETED TRADE PnL: -$100.00\n"
            "2025-03-10 9:33:10 AM [PNL UPDATE - GAIN (ID: 1)] COMPLETED TRADE PnL: $200.00\n"
        )
        trades = parse_trading_log(log).trades
        assert [(t.id, t.direction, t.total_pnl) for t in trades] == [
            (2, "SHORT", -100.0),
            (1, "LONG", 200.0),
        ]


class TestStatLines:
    """
    **Feature: trading-log-journal, Property 2: Stat Line Extraction**
    """

    def test_session_line(self):
        line = "Morning Session - PnL: $125.50 | Trades: 4 | Avg PnL per Trade: $31.38"
        sessions = parse_trading_log(line).sessions
        assert sessions.morning == SessionStats(pnl=125.50, trades=4, avg_pnl_per_trade=31.38)
        assert sessions.main == SessionStats()

    def test_headline_line(self):
        line = "TOTAL TRADES: 10 | WINS: 6 (60%) | LOSSES: 4 (40%) [Big Wins: 1 | Big Losses: 0]"
        headline = parse_trading_log(line).headline
        assert headline.total_trades == 10
        assert headline.wins == 6
        assert headline.losses == 4
        assert headline.big_wins == 1
        assert headline.big_losses == 0
        assert headline.total_pnl == 0.0

    def test_full_headline(self, sample_log: str):
        headline = parse_trading_log(sample_log).headline
        assert headline.total_pnl == 750.0
        assert headline.trailing_drawdown == 1250.0
        assert headline.contracts == 4
        assert headline.max_potential_gain_per_contract == 412.5
        assert headline.pnl_per_trade == 375.0
        assert headline.max_profit == 775.0
        assert headline.max_risk == 250.0
        assert headline.max_daily_gain == 900.0
        assert headline.max_daily_loss == -150.0

    def test_negative_session_pnl(self, sample_log: str):
        assert parse_trading_log(sample_log).sessions.main.pnl == -25.0

    def test_protection_stats(self, sample_log: str):
        protection = parse_trading_log(sample_log).protection_stats
        assert protection.blocked_trades.protective == 3
        assert protection.blocked_trades.predictive_wick_protect == 2
        assert protection.blocked_trades.vol_delta_protect == 4
        assert protection.blocked_trades.soft_chase_protect == 1
        assert protection.fill_protection.chop_zone_fill == 3
        assert protection.fill_protection.max_fill_protect == 1
        assert protection.chase_mode.trades == 1
        assert protection.chase_mode.restarts == 2

    def test_trade_breakdown(self, sample_log: str):
        breakdown = parse_trading_log(sample_log).trade_breakdown
        assert breakdown.orders_generated == 10
        assert breakdown.orders_filled == 4
        assert breakdown.fill_rate == 40.0
        assert breakdown.chase_mode_trades_pnl == -25.0
        assert breakdown.chase_mode_trades == 1

    def test_fill_rate_computed_when_missing(self):
        breakdown = parse_trading_log("Orders Generated: 8 | Orders Filled: 2").trade_breakdown
        assert breakdown.fill_rate == 25.0

    def test_near_stop_event(self, sample_log: str):
        events = parse_trading_log(sample_log).near_stop_events
        assert len(events) == 1
        assert events[0].trade_id == 2
        assert events[0].direction == "SHORT"
        assert events[0].stop_price == 5033.0
        assert events[0].distance == 0.25

    def test_malformed_marker_contributes_nothing(self):
        line = "TOTAL TRADES: ten | WINS: six"
        assert parse_trading_log(line).headline.total_trades == 0

    def test_oversized_number_contributes_nothing(self):
        analysis = parse_trading_log("Trailing Drawdown: $" + "9" * 400)

        assert analysis.headline.trailing_drawdown == 0.0
        assert DayAnalysis.model_validate_json(analysis.model_dump_json()) == analysis

    def test_oversized_points_leave_pnl_update_unapplied(self, sample_log: str):
        line = (
            "2025-03-10 9:35:10 AM [PNL UPDATE - GAIN (ID: 1)] CURRENT TRADE PnL: $1.00"
            " | Qty: 2 | Points: " + "9" * 400
        )
        lines = sample_log.splitlines()
        completed = next(
            i for i, text in enumerate(lines) if "COMPLETED TRADE PnL" in text and "(ID: 1)" in text
        )
        lines.insert(completed, line)

        trade = parse_trading_log("\n".join(lines)).trades[0]

        assert trade.id == 1
        assert trade.exits[-1].pnl == 775.0
        assert trade.exits[-1].points == 7.75


class TestParserRobustness:
    """
    **Feature: trading-log-journal, Property 3: Best-Effort Parsing**

    *For any* input text the parser returns a DayAnalysis and parsing
    the same text twice yields identical results.
    """

    @given(text=st.text(max_size=500))
    @settings(max_examples=100)
    def test_never_raises(self, text: str):
        assert isinstance(parse_trading_log(text), DayAnalysis)

    @given(
        lines=st.lists(
            st.sampled_from(SAMPLE_LOG.splitlines() + ["garbage", "", "[TRADE FILL (ID: x)]"]),
            max_size=40,
        )
    )
    @settings(max_examples=100)
    def test_idempotent(self, lines: list[str]):
        text = "\n".join(lines)
        assert parse_trading_log(text) == parse_trading_log(text)

    def test_empty_input(self):
        assert parse_trading_log("") == DayAnalysis()


class TestExitReasonRules:
    """
    **Feature: trading-log-journal, Property 4: Exit Reason Precedence**
    """

    def test_explicit_marker_wins(self):
        assert classify_exit_reason("TP", "stop loss") == "TP"
        assert classify_exit_reason("SL", "take profit") == "SL"

    def test_predictive_exit_beats_stop_loss(self):
        assert classify_exit_reason(None, "Predictive Exit before stop loss") == "MANUAL"

    def test_keywords(self):
        assert classify_exit_reason(None, "Stop Loss hit") == "SL"
        assert classify_exit_reason(None, "SL") == "SL"
        assert classify_exit_reason(None, "Take Profit 2") == "TP"
        assert classify_exit_reason(None, "tp reached") == "TP"

    def test_short_tokens_need_word_boundaries(self):
        assert classify_exit_reason(None, "slippage") == "MANUAL"

    def test_default_is_manual(self):
        assert classify_exit_reason(None, None) == "MANUAL"
        assert classify_exit_reason(None, "flatten before close") == "MANUAL"


class TestExtractLogDate:
    """
    **Feature: trading-log-journal, Property 5: Log Date Extraction**
    """

    def test_first_date_wins(self, sample_log: str):
        assert extract_log_date(sample_log) == date(2025, 3, 10)

    def test_fallback_to_today(self):
        assert extract_log_date("no dates here", today=date(2025, 1, 2)) == date(2025, 1, 2)

    def test_skips_invalid_dates(self):
        assert extract_log_date("2025-13-40 then 2025-04-01") == date(2025, 4, 1)

"""Property-based tests for trade comparison and merging.

**Feature: trading-log-journal**
"""

from datetime import datetime, timedelta

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from pydantic import ValidationError

from tradelog.compare import (
    compare_trades,
    compare_trading_logs,
    fuzzy_key,
    merge_trading_logs,
    strict_key,
)
from tradelog.models import (
    DayAnalysis,
    ExitRecord,
    Headline,
    MergeOptions,
    SessionStats,
    Sessions,
    TradeRecord,
)
from tradelog.parser import parse_trading_log


def make_trade(
    trade_id: int,
    timestamp: datetime,
    direction: str = "LONG",
    entry_price: float = 5000.0,
    quantity: int = 1,
    total_pnl: float = 100.0,
    exits: list[ExitRecord] = None,
) -> TradeRecord:
    if exits is None:
        exits = [ExitRecord(exit_price=entry_price + 4, quantity=quantity, pnl=total_pnl, exit_reason="TP")]
    return TradeRecord(
        id=trade_id,
        timestamp=timestamp,
        direction=direction,
        entry_price=entry_price,
        total_pnl=total_pnl,
        exits=exits,
        quantity=quantity,
    )


BASE_TIME = datetime(2025, 3, 10, 9, 30, 0)


@st.composite
def trade_lists(draw, max_size: int = 12):
    """Trades with distinct minutes so every trade has a unique strict key."""
    minutes = draw(st.lists(st.integers(min_value=0, max_value=360), unique=True, max_size=max_size))
    trades = []
    for i, minute in enumerate(minutes, start=1):
        trades.append(make_trade(
            trade_id=i,
            timestamp=BASE_TIME + timedelta(minutes=minute, seconds=draw(st.integers(0, 59))),
            direction=draw(st.sampled_from(["LONG", "SHORT"])),
            entry_price=draw(st.floats(min_value=4000, max_value=6000, allow_nan=False)),
            quantity=draw(st.integers(min_value=1, max_value=5)),
            total_pnl=draw(st.floats(min_value=-1000, max_value=1000, allow_nan=False)),
        ))
    return trades


class TestSelfComparison:
    """
    **Feature: trading-log-journal, Property 6: Self Comparison**

    *For any* trade list compared with itself, every trade is unchanged
    and no differences are reported.
    """

    @given(trades=trade_lists())
    @settings(max_examples=50)
    def test_identical_lists_have_no_differences(self, trades: list[TradeRecord]):
        diff = compare_trades(trades, trades)

        assert diff.added == []
        assert diff.removed == []
        assert diff.modified == []
        assert diff.id_only_changed == []
        assert len(diff.unchanged) == len(trades)
        assert not diff.has_differences

    def test_empty_inputs(self):
        diff = compare_trades(None, [])
        assert not diff.has_differences
        assert diff.unchanged == []


class TestIdRenumbering:
    """
    **Feature: trading-log-journal, Property 7: ID-Only Changes**

    *For any* trade list whose IDs are all shifted, every trade lands in
    ``id_only_changed`` and nothing is added, removed or modified.
    """

    @given(trades=trade_lists(), offset=st.integers(min_value=1, max_value=100))
    @settings(max_examples=50)
    def test_shifted_ids(self, trades: list[TradeRecord], offset: int):
        shifted = [t.model_copy(update={"id": t.id + offset}) for t in trades]
        diff = compare_trades(trades, shifted)

        assert len(diff.id_only_changed) == len(trades)
        assert diff.added == []
        assert diff.removed == []
        assert diff.modified == []
        assert not diff.has_differences
        for pair in diff.id_only_changed:
            assert [c.field for c in pair.changes] == ["id"]


class TestBucketInvariants:
    """
    **Feature: trading-log-journal, Property 8: Complete Classification**

    *For any* two trade lists, each compare trade lands in exactly one
    bucket and each base trade is either removed or matched once.
    """

    @given(base=trade_lists(), compare=trade_lists())
    @settings(max_examples=100)
    def test_bucket_counts(self, base: list[TradeRecord], compare: list[TradeRecord]):
        diff = compare_trades(base, compare)
        matched = diff.modified + diff.id_only_changed + diff.unchanged

        assert len(diff.added) + len(matched) == len(compare)
        assert len(diff.removed) + len(matched) == len(base)

        matched_base = [pair.base.id for pair in matched]
        assert len(matched_base) == len(set(matched_base))


class TestFuzzyMatching:
    """
    **Feature: trading-log-journal, Property 9: Same-Minute Matching**
    """

    def test_same_minute_matches_with_timestamp_change(self):
        base = [make_trade(1, datetime(2025, 3, 10, 10, 0, 10))]
        compare = [make_trade(1, datetime(2025, 3, 10, 10, 0, 40))]

        diff = compare_trades(base, compare)

        assert diff.added == []
        assert diff.removed == []
        assert len(diff.modified) == 1
        assert [c.field for c in diff.modified[0].changes] == ["timestamp"]

    def test_minute_boundary_is_not_matched(self):
        base = [make_trade(1, datetime(2025, 3, 10, 10, 0, 30))]
        compare = [make_trade(1, datetime(2025, 3, 10, 10, 1, 31))]

        diff = compare_trades(base, compare)

        assert len(diff.added) == 1
        assert len(diff.removed) == 1
        assert diff.modified == []

    def test_direction_must_match(self):
        base = [make_trade(1, datetime(2025, 3, 10, 10, 0, 10), direction="LONG")]
        compare = [make_trade(1, datetime(2025, 3, 10, 10, 0, 40), direction="SHORT")]

        diff = compare_trades(base, compare)

        assert len(diff.added) == 1
        assert len(diff.removed) == 1

    def test_strict_match_preferred_over_fuzzy(self):
        """A strict match is not stolen by an earlier same-minute candidate."""
        t1 = datetime(2025, 3, 10, 10, 0, 5)
        t2 = datetime(2025, 3, 10, 10, 0, 45)
        base = [make_trade(1, t1, entry_price=5000.0), make_trade(2, t2, entry_price=5010.0)]
        compare = [make_trade(2, t2, entry_price=5010.0)]

        diff = compare_trades(base, compare)

        assert len(diff.unchanged) == 1
        assert diff.unchanged[0].base.id == 2
        assert [t.id for t in diff.removed] == [1]

    def test_duplicate_strict_keys_pair_in_order(self):
        ts = datetime(2025, 3, 10, 10, 0, 5)
        base = [make_trade(1, ts, total_pnl=10.0), make_trade(2, ts, total_pnl=20.0)]
        compare = [make_trade(1, ts, total_pnl=10.0), make_trade(2, ts, total_pnl=20.0)]

        diff = compare_trades(base, compare)

        assert len(diff.unchanged) == 2
        assert diff.modified == []

    def test_keys(self):
        trade = make_trade(1, datetime(2025, 3, 10, 10, 0, 10, 500), entry_price=5000.004)
        assert strict_key(trade) == (trade.timestamp.isoformat(), "LONG", 5000.0, 1)
        assert fuzzy_key(trade) == (datetime(2025, 3, 10, 10, 0), "LONG")


class TestFieldChanges:
    """
    **Feature: trading-log-journal, Property 10: Field Change Reporting**
    """

    def test_exit_changes_reported_once(self):
        ts = datetime(2025, 3, 10, 10, 0, 5)
        base = make_trade(1, ts, exits=[
            ExitRecord(exit_price=5004.0, quantity=1, pnl=200.0, exit_reason="TP"),
        ])
        compare = make_trade(1, ts, exits=[
            ExitRecord(exit_price=5003.0, quantity=1, pnl=150.0, exit_reason="MANUAL"),
        ])

        diff = compare_trades([base], [compare])

        assert len(diff.modified) == 1
        changes = diff.modified[0].changes
        assert [c.field for c in changes] == ["exits"]
        assert changes[0].old_value == base.exits
        assert changes[0].new_value == compare.exits

    def test_reordered_exits_are_equal(self):
        ts = datetime(2025, 3, 10, 10, 0, 5)
        first = ExitRecord(exit_price=5004.0, quantity=1, pnl=200.0, exit_reason="TP")
        second = ExitRecord(exit_price=4998.0, quantity=1, pnl=-100.0, exit_reason="SL")

        diff = compare_trades(
            [make_trade(1, ts, quantity=2, exits=[first, second])],
            [make_trade(1, ts, quantity=2, exits=[second, first])],
        )

        assert len(diff.unchanged) == 1
        assert diff.modified == []

    def test_pnl_and_id_change_is_modified(self):
        ts = datetime(2025, 3, 10, 10, 0, 5)
        exits = [ExitRecord(exit_price=5004.0, quantity=1, pnl=100.0, exit_reason="TP")]
        diff = compare_trades(
            [make_trade(1, ts, total_pnl=100.0, exits=exits)],
            [make_trade(4, ts, total_pnl=90.0, exits=exits)],
        )

        assert diff.id_only_changed == []
        assert {c.field for c in diff.modified[0].changes} == {"id", "total_pnl"}
        assert diff.has_differences


class TestDayStatDiff:
    """
    **Feature: trading-log-journal, Property 11: Day Stat Differences**
    """

    def test_headline_fields(self):
        diff = compare_trades(
            [], [],
            Headline(total_pnl=500.0, wins=3),
            Headline(total_pnl=450.0, wins=3),
        )

        assert len(diff.daily_stats) == 1
        change = diff.daily_stats[0]
        assert change.field == "total_pnl"
        assert change.old_value == 500.0
        assert change.new_value == 450.0
        assert diff.has_differences

    def test_headline_skipped_without_both_sides(self):
        diff = compare_trades([], [], Headline(total_pnl=500.0), None)
        assert diff.daily_stats == []

    def test_stat_blocks_reported_whole(self):
        base = DayAnalysis(headline=Headline(total_pnl=100.0))
        compare = DayAnalysis(
            headline=Headline(total_pnl=100.0),
            sessions=Sessions(morning=SessionStats(pnl=100.0, trades=1, avg_pnl_per_trade=100.0)),
        )

        diff = compare_trading_logs(base, compare)

        assert [c.field for c in diff.daily_stats] == ["sessions"]
        assert diff.daily_stats[0].new_value == compare.sessions

    def test_parsed_logs(self, sample_log: str):
        analysis = parse_trading_log(sample_log)
        diff = compare_trading_logs(analysis, analysis)

        assert not diff.has_differences
        assert len(diff.unchanged) == 2


class TestMerge:
    """
    **Feature: trading-log-journal, Property 12: Selective Merge**

    Merging never modifies either input and only applies what the
    options select.
    """

    @pytest.fixture
    def days(self):
        ts = datetime(2025, 3, 10, 10, 0, 5)
        base = DayAnalysis(
            headline=Headline(total_pnl=100.0, total_trades=2),
            trades=[make_trade(4, ts, total_pnl=50.0), make_trade(5, ts + timedelta(minutes=5), total_pnl=50.0)],
        )
        compare = DayAnalysis(
            headline=Headline(total_pnl=80.0, total_trades=2),
            sessions=Sessions(main=SessionStats(pnl=80.0, trades=2, avg_pnl_per_trade=40.0)),
            trades=[
                make_trade(5, ts + timedelta(minutes=5), total_pnl=30.0),
                make_trade(6, ts + timedelta(minutes=9), total_pnl=50.0),
            ],
        )
        return base, compare

    def test_replace_trade_by_id(self, days):
        base, compare = days
        merged = merge_trading_logs(base, compare, MergeOptions(merge_trade_ids=[5]))

        assert [t.id for t in merged.trades] == [4, 5]
        assert merged.trades[1].total_pnl == 30.0
        assert merged.headline == base.headline
        assert base.trades[1].total_pnl == 50.0

    def test_append_trade_missing_from_base(self, days):
        base, compare = days
        merged = merge_trading_logs(base, compare, MergeOptions(merge_trade_ids=[6]))

        assert [t.id for t in merged.trades] == [4, 5, 6]

    def test_missing_compare_id_skipped(self, days):
        base, compare = days
        merged = merge_trading_logs(base, compare, MergeOptions(merge_trade_ids=[99]))

        assert merged == base

    def test_merge_all(self, days):
        base, compare = days
        assert merge_trading_logs(base, compare, MergeOptions(merge_all=True)) == compare

    def test_merge_daily_stats(self, days):
        base, compare = days
        merged = merge_trading_logs(base, compare, MergeOptions(merge_daily_stats=True))

        assert merged.headline == compare.headline
        assert merged.sessions == compare.sessions
        assert merged.trades == base.trades

    def test_dict_options(self, days):
        base, compare = days
        merged = merge_trading_logs(base, compare, {"merge_trade_ids": [5], "merge_daily_stats": True})

        assert merged.trades[1].total_pnl == 30.0
        assert merged.headline.total_pnl == 80.0

    def test_camel_case_dict_options(self, days):
        base, compare = days
        merged = merge_trading_logs(base, compare, {"mergeTradeIds": [5], "mergeDailyStats": True})

        assert merged.trades[1].total_pnl == 30.0
        assert merged.headline.total_pnl == 80.0
        assert merge_trading_logs(base, compare, {"mergeAll": True}) == compare

    def test_unknown_option_key_rejected(self, days):
        base, compare = days
        with pytest.raises(ValidationError):
            merge_trading_logs(base, compare, {"merge_trade_id": [5]})

    def test_no_options_returns_base(self, days):
        base, compare = days
        assert merge_trading_logs(base, compare) == base

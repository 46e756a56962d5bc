"""Trade list comparison.

Correlates trades between a base and a compare dataset even though the
bot may renumber trade IDs between submissions. Matching runs in two
tiers, strict then fuzzy; whatever is left over is added or removed.
"""

import logging
from collections import defaultdict, deque
from datetime import datetime
from typing import Hashable, Optional

from pydantic import BaseModel

from tradelog.models import (
    DayAnalysis,
    DiffResult,
    ExitRecord,
    FieldChange,
    Headline,
    ModifiedTrade,
    TradeRecord,
)

logger = logging.getLogger(__name__)

# Day-level blocks reported as a single change entry each
DAY_STAT_BLOCKS = ("sessions", "protection_stats", "trade_breakdown")


def strict_key(trade: TradeRecord) -> tuple:
    """Exact identity of a trade, ignoring its bot-assigned ID."""
    return (
        trade.timestamp.isoformat(),
        trade.direction,
        round(trade.entry_price, 2),
        trade.quantity,
    )


def fuzzy_key(trade: TradeRecord) -> tuple:
    """Loose identity: open time truncated to the minute plus direction."""
    return (trade.timestamp.replace(second=0, microsecond=0), trade.direction)


def _exit_sort_key(exit_record: ExitRecord) -> tuple:
    return (
        exit_record.exit_time or datetime.min,
        exit_record.exit_price,
        exit_record.quantity,
        exit_record.pnl,
        exit_record.points,
        exit_record.exit_reason,
        exit_record.reason_text or "",
    )


def exits_equal(base: list[ExitRecord], compare: list[ExitRecord]) -> bool:
    """Structural equality of two exit lists, independent of list order."""
    if len(base) != len(compare):
        return False
    return sorted(base, key=_exit_sort_key) == sorted(compare, key=_exit_sort_key)


def diff_model_fields(base: BaseModel, compare: BaseModel) -> list[FieldChange]:
    """Field-by-field changes between two models of the same type."""
    changes = []
    for field in type(base).model_fields:
        old_value = getattr(base, field)
        new_value = getattr(compare, field, None)
        if old_value != new_value:
            changes.append(FieldChange(field=field, old_value=old_value, new_value=new_value))
    return changes


def diff_trade_fields(base: TradeRecord, compare: TradeRecord) -> list[FieldChange]:
    """Changes between two matched trades.

    A difference anywhere in the exits list is reported as one ``exits``
    entry rather than per exit.
    """
    changes = []
    for field in TradeRecord.model_fields:
        old_value = getattr(base, field)
        new_value = getattr(compare, field)
        if field == "exits":
            differs = not exits_equal(old_value, new_value)
        else:
            differs = old_value != new_value
        if differs:
            changes.append(FieldChange(field=field, old_value=old_value, new_value=new_value))
    return changes


def _group_indices(trades: list[TradeRecord], indices: list[int], key) -> dict[Hashable, deque]:
    groups: dict[Hashable, deque] = defaultdict(deque)
    for index in indices:
        groups[key(trades[index])].append(index)
    return groups


class _MatchResult:
    """Buckets filled while pairing trades."""

    def __init__(self):
        self.modified: list[ModifiedTrade] = []
        self.id_only_changed: list[ModifiedTrade] = []
        self.unchanged: list[ModifiedTrade] = []

    def record(self, base: TradeRecord, compare: TradeRecord) -> None:
        changes = diff_trade_fields(base, compare)
        pair = ModifiedTrade(base=base, trade=compare, changes=changes)
        if not changes:
            self.unchanged.append(pair)
        elif all(change.field == "id" for change in changes):
            self.id_only_changed.append(pair)
        else:
            self.modified.append(pair)


def compare_trades(
    base_trades: Optional[list[TradeRecord]],
    compare_trades: Optional[list[TradeRecord]],
    base_headline: Optional[Headline] = None,
    compare_headline: Optional[Headline] = None,
) -> DiffResult:
    """Compare two trade lists and, optionally, their headlines.

    Args:
        base_trades: Trades already on record.
        compare_trades: Trades from the resubmitted log.
        base_headline: Base headline totals, if available.
        compare_headline: Compare headline totals, if available.

    Returns:
        DiffResult classifying every trade on both sides.
    """
    base_trades = list(base_trades or [])
    compare_trades = list(compare_trades or [])
    result = _MatchResult()

    # Tier 1: strict composite key, duplicates paired in order
    strict_groups = _group_indices(base_trades, list(range(len(base_trades))), strict_key)
    matched_base: set[int] = set()
    pending_compare: list[int] = []
    for index, trade in enumerate(compare_trades):
        bucket = strict_groups.get(strict_key(trade))
        if bucket:
            base_index = bucket.popleft()
            matched_base.add(base_index)
            result.record(base_trades[base_index], trade)
        else:
            pending_compare.append(index)
    strict_matches = len(matched_base)

    # Tier 2: same minute and direction, paired positionally
    pending_base = [i for i in range(len(base_trades)) if i not in matched_base]
    fuzzy_groups = _group_indices(base_trades, pending_base, fuzzy_key)
    unmatched_compare: list[int] = []
    for index in pending_compare:
        bucket = fuzzy_groups.get(fuzzy_key(compare_trades[index]))
        if bucket:
            base_index = bucket.popleft()
            matched_base.add(base_index)
            result.record(base_trades[base_index], compare_trades[index])
        else:
            unmatched_compare.append(index)

    logger.debug(
        "Matched %d strict, %d fuzzy; %d added, %d removed",
        strict_matches,
        len(matched_base) - strict_matches,
        len(unmatched_compare),
        len(base_trades) - len(matched_base),
    )

    daily_stats: list[FieldChange] = []
    if base_headline is not None and compare_headline is not None:
        daily_stats = diff_model_fields(base_headline, compare_headline)

    return DiffResult(
        added=[compare_trades[i] for i in unmatched_compare],
        removed=[t for i, t in enumerate(base_trades) if i not in matched_base],
        modified=result.modified,
        id_only_changed=result.id_only_changed,
        unchanged=result.unchanged,
        daily_stats=daily_stats,
    )


def compare_trading_logs(base: DayAnalysis, compare: DayAnalysis) -> DiffResult:
    """Compare two parsed days: trades, headline fields and stat blocks."""
    diff = compare_trades(base.trades, compare.trades, base.headline, compare.headline)
    block_changes = [
        FieldChange(field=block, old_value=getattr(base, block), new_value=getattr(compare, block))
        for block in DAY_STAT_BLOCKS
        if getattr(base, block) != getattr(compare, block)
    ]
    if not block_changes:
        return diff
    return diff.model_copy(update={"daily_stats": diff.daily_stats + block_changes})

"""Selective merge of a compare dataset into a base dataset."""

import logging
from typing import Optional, Union

from tradelog.models import DayAnalysis, MergeOptions

logger = logging.getLogger(__name__)


def merge_trading_logs(
    base: DayAnalysis,
    compare: DayAnalysis,
    options: Optional[Union[MergeOptions, dict]] = None,
) -> DayAnalysis:
    """Apply caller-selected parts of ``compare`` onto ``base``.

    Args:
        base: Dataset on record.
        compare: Resubmitted dataset.
        options: What to take from ``compare``. With ``merge_all`` the
            compare dataset is returned as is. Otherwise each id in
            ``merge_trade_ids`` replaces the base trade with that id, or is
            appended when base has none; ids missing from compare are
            skipped. ``merge_daily_stats`` replaces the day-level blocks.
            A dict may use snake_case or camelCase keys.

    Returns:
        The merged dataset. Neither input is modified.

    Raises:
        pydantic.ValidationError: If a dict of options holds an unknown key.
    """
    if options is None:
        options = MergeOptions()
    elif isinstance(options, dict):
        options = MergeOptions.model_validate(options)

    if options.merge_all:
        return compare

    trades = list(base.trades)
    compare_by_id = {trade.id: trade for trade in compare.trades}
    for trade_id in options.merge_trade_ids:
        compare_trade = compare_by_id.get(trade_id)
        if compare_trade is None:
            logger.debug("Trade %d not in compare data; skipping", trade_id)
            continue
        index = next((i for i, t in enumerate(trades) if t.id == trade_id), None)
        if index is None:
            trades.append(compare_trade)
        else:
            trades[index] = compare_trade

    update = {"trades": trades}
    if options.merge_daily_stats:
        update.update(
            headline=compare.headline,
            sessions=compare.sessions,
            protection_stats=compare.protection_stats,
            trade_breakdown=compare.trade_breakdown,
        )
    return base.model_copy(update=update)

"""Comparison and merge of parsed trading logs."""

from tradelog.compare.comparator import (
    compare_trades,
    compare_trading_logs,
    diff_trade_fields,
    fuzzy_key,
    strict_key,
)
from tradelog.compare.merge import merge_trading_logs

__all__ = [
    "compare_trades",
    "compare_trading_logs",
    "diff_trade_fields",
    "fuzzy_key",
    "strict_key",
    "merge_trading_logs",
]

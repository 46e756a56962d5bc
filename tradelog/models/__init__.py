"""Data models for TradeLog."""

from tradelog.models.trade import ExitRecord, TradeRecord
from tradelog.models.analysis import (
    BlockedTrades,
    ChaseMode,
    DayAnalysis,
    FillProtection,
    Headline,
    NearStopEvent,
    ProtectionStats,
    SessionStats,
    Sessions,
    TradeBreakdown,
)
from tradelog.models.diff import DiffResult, FieldChange, MergeOptions, ModifiedTrade
from tradelog.models.journal import DailyLog

__all__ = [
    "ExitRecord",
    "TradeRecord",
    "BlockedTrades",
    "ChaseMode",
    "DayAnalysis",
    "FillProtection",
    "Headline",
    "NearStopEvent",
    "ProtectionStats",
    "SessionStats",
    "Sessions",
    "TradeBreakdown",
    "DiffResult",
    "FieldChange",
    "MergeOptions",
    "ModifiedTrade",
    "DailyLog",
]

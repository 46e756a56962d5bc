"""Trading bot log parsing."""

from tradelog.parser.log_parser import extract_log_date, parse_trading_log
from tradelog.parser.rules import EXIT_REASON_RULES, classify_exit_reason

__all__ = [
    "extract_log_date",
    "parse_trading_log",
    "EXIT_REASON_RULES",
    "classify_exit_reason",
]

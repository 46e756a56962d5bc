"""TradeLog - parse, compare and journal trading-bot day logs."""

__version__ = "0.1.0"

"""CLI commands for TradeLog.

This package provides the command-line interface for ingesting,
reviewing, comparing and merging trading bot logs.
"""

from tradelog.cli.main import cli, main

__all__ = ["cli", "main"]

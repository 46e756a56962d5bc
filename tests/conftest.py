"""Shared fixtures for TradeLog tests."""

import pytest

SAMPLE_LOG = """\
2025-03-10 9:30:00 AM [START] Bot session started
2025-03-10 9:31:05 AM [TRADE FILL (ID: 1)] LONG FILLED: 5012.25
2025-03-10 9:35:10 AM [TRADE CLOSE - TP (ID: 1)] TRADE CLOSED: 2 contracts at Price: 5020.00 | Reason: Take Profit
2025-03-10 9:35:10 AM [PNL UPDATE - GAIN (ID: 1)] CURRENT TRADE PnL: $775.00 | Qty: 2 | Points: 7.75
2025-03-10 9:35:11 AM [PNL UPDATE - GAIN (ID: 1)] COMPLETED TRADE PnL: $775.00
2025-03-10 10:02:00 AM [TRADE FILL (ID: 2)] SHORT FILLED: 5030.50
2025-03-10 10:05:00 AM [TRADE CLOSE (ID: 2)] TRADE CLOSED: 1 contract at Price: 5028.50 | Reason: Predictive Exit
2025-03-10 10:05:00 AM [PNL UPDATE - GAIN (ID: 2)] CURRENT TRADE PnL: $100.00 | Qty: 1 | Points: 2.00
2025-03-10 10:06:30 AM [NEAR STOP (ID: 2)] SHORT Price: 5032.75 | Stop: 5033.00 | Distance: 0.25
2025-03-10 10:08:00 AM [TRADE CLOSE - SL (ID: 2)] TRADE CLOSED: 1 contract at Price: 5033.00
2025-03-10 10:08:00 AM [PNL UPDATE - LOSS (ID: 2)] CURRENT TRADE PnL: -$125.00 | Qty: 1 | Points: -2.50
2025-03-10 10:08:01 AM [PNL UPDATE - LOSS (ID: 2)] COMPLETED TRADE PnL: -$25.00 [Chase Trade]
2025-03-10 10:30:00 AM [TRADE CLOSE (ID: 9)] TRADE CLOSED: 1 contract at Price: 5001.00
2025-03-10 11:15:00 AM [TRADE FILL (ID: 3)] LONG FILLED: 5040.00
2025-03-10 4:00:00 PM END OF DAY STATS - PnL: $750.00 | TOTAL TRADES: 2 | WINS: 1 (50%) | LOSSES: 1 (50%) [Big Wins: 1 | Big Losses: 0]
Trailing Drawdown: $1,250.00
Contracts: 4
Max Potential Gain per Contract: $412.50
PnL per Trade: $375.00
Max Profit: $775.00 | Max Risk: $250.00
Max Daily Gain: $900.00 | Max Daily Loss: -$150.00
Morning Session - PnL: $775.00 | Trades: 1 | Avg PnL per Trade: $775.00
Main Session - PnL: -$25.00 | Trades: 1 | Avg PnL per Trade: -$25.00
Blocked Trades - Protective: 3 | Dynamic Range: 1 | Bounce Protect: 0 | Predictive Wick Protect: 2 | Bad Structure: 1 | ATR Protect: 0 | Vol Delta Protect: 4 | Soft Chase Protect: 1
Fill Protection - Fill Protect: 2 | Max Fill Protect: 1 | Chase Fill Protect: 0 | Chop Zone Fill: 3 | Fill Proactive: 1
Chase Mode - Trades: 1 | Restarts: 2
Orders Generated: 10 | Orders Filled: 4 (40%)
Chase Mode Trades PnL: -$25.00 | Chase Mode Trades: 1
"""


@pytest.fixture
def sample_log() -> str:
    """A full day of bot output covering every recognised line type."""
    return SAMPLE_LOG

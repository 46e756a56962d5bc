"""Day analysis data models."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from tradelog.models.trade import Direction, TradeRecord

SESSION_NAMES = ("morning", "main", "midday", "afternoon", "end")


class Headline(BaseModel):
    """Headline totals for one trading day."""

    total_pnl: float = Field(default=0.0, description="Total P&L for the day")
    total_trades: int = Field(default=0, ge=0, description="Number of trades")
    wins: int = Field(default=0, ge=0, description="Winning trades")
    losses: int = Field(default=0, ge=0, description="Losing trades")
    big_wins: int = Field(default=0, ge=0, description="Wins above the bot's big-trade threshold")
    big_losses: int = Field(default=0, ge=0, description="Losses above the bot's big-trade threshold")
    trailing_drawdown: float = Field(default=0.0, description="Trailing drawdown figure")
    contracts: int = Field(default=0, ge=0, description="Contracts traded")
    max_potential_gain_per_contract: float = Field(default=0.0)
    pnl_per_trade: float = Field(default=0.0)
    max_profit: float = Field(default=0.0, description="Max single-trade profit")
    max_risk: float = Field(default=0.0, description="Max single-trade risk")
    max_daily_gain: float = Field(default=0.0)
    max_daily_loss: float = Field(default=0.0)

    model_config = {"frozen": True}


class SessionStats(BaseModel):
    """Statistics for one trading session."""

    pnl: float = Field(default=0.0, description="Session P&L")
    trades: int = Field(default=0, ge=0, description="Session trade count")
    avg_pnl_per_trade: float = Field(default=0.0, description="Average P&L per trade")

    model_config = {"frozen": True}


class Sessions(BaseModel):
    """The five fixed sessions of a trading day."""

    morning: SessionStats = Field(default_factory=SessionStats)
    main: SessionStats = Field(default_factory=SessionStats)
    midday: SessionStats = Field(default_factory=SessionStats)
    afternoon: SessionStats = Field(default_factory=SessionStats)
    end: SessionStats = Field(default_factory=SessionStats)

    model_config = {"frozen": True}

    def items(self) -> list[tuple[str, SessionStats]]:
        """Return (name, stats) pairs in session order."""
        return [(name, getattr(self, name)) for name in SESSION_NAMES]


class BlockedTrades(BaseModel):
    """Trades blocked by each protective filter."""

    protective: int = 0
    dynamic_range: int = 0
    bounce_protect: int = 0
    predictive_wick_protect: int = 0
    bad_structure: int = 0
    atr_protect: int = 0
    vol_delta_protect: int = 0
    soft_chase_protect: int = 0

    model_config = {"frozen": True}


class FillProtection(BaseModel):
    """Fills affected by each fill-protection mechanism."""

    fill_protect: int = 0
    max_fill_protect: int = 0
    chase_fill_protect: int = 0
    chop_zone_fill: int = 0
    fill_proactive: int = 0

    model_config = {"frozen": True}


class ChaseMode(BaseModel):
    """Chase-mode activity counters."""

    trades: int = 0
    restarts: int = 0

    model_config = {"frozen": True}


class ProtectionStats(BaseModel):
    """Protection and risk-filter counters."""

    blocked_trades: BlockedTrades = Field(default_factory=BlockedTrades)
    fill_protection: FillProtection = Field(default_factory=FillProtection)
    chase_mode: ChaseMode = Field(default_factory=ChaseMode)

    model_config = {"frozen": True}


class TradeBreakdown(BaseModel):
    """Order flow and chase-mode summary."""

    orders_generated: int = Field(default=0, ge=0)
    orders_filled: int = Field(default=0, ge=0)
    fill_rate: float = Field(default=0.0, description="Fill rate percentage")
    chase_mode_trades_pnl: float = Field(default=0.0)
    chase_mode_trades: int = Field(default=0, ge=0)

    model_config = {"frozen": True}


class NearStopEvent(BaseModel):
    """Price came within reach of a trade's stop loss without hitting it."""

    trade_id: int = Field(..., description="Bot-assigned trade ID")
    timestamp: Optional[datetime] = Field(default=None)
    direction: Optional[Direction] = Field(default=None)
    price: float = Field(..., description="Price at the event")
    stop_price: float = Field(..., description="Stop-loss price")
    distance: float = Field(..., description="Distance to the stop in points")

    model_config = {"frozen": True}


class DayAnalysis(BaseModel):
    """Structured analysis of one trading day's log."""

    headline: Headline = Field(default_factory=Headline)
    sessions: Sessions = Field(default_factory=Sessions)
    protection_stats: ProtectionStats = Field(default_factory=ProtectionStats)
    trade_breakdown: TradeBreakdown = Field(default_factory=TradeBreakdown)
    near_stop_events: list[NearStopEvent] = Field(default_factory=list)
    trades: list[TradeRecord] = Field(default_factory=list)

    model_config = {"frozen": True}

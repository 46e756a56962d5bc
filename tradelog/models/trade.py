"""Trade and exit data models."""

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field

Direction = Literal["LONG", "SHORT"]
ExitReason = Literal["TP", "SL", "MANUAL"]


class ExitRecord(BaseModel):
    """A partial or full exit of a trade."""

    exit_price: float = Field(..., description="Exit fill price")
    quantity: int = Field(default=0, ge=0, description="Contracts closed by this exit")
    pnl: float = Field(default=0.0, description="P&L contribution of this exit")
    points: float = Field(default=0.0, description="Point delta from entry")
    exit_reason: ExitReason = Field(default="MANUAL", description="Exit category")
    reason_text: Optional[str] = Field(default=None, description="Free-text reason from the log")
    exit_time: Optional[datetime] = Field(default=None, description="Exit timestamp")

    model_config = {"frozen": True}


class TradeRecord(BaseModel):
    """One logical trade as reported by the bot.

    The ``id`` is assigned by the bot and is not stable across
    resubmissions of the same day's log.
    """

    id: int = Field(..., description="Bot-assigned trade ID")
    timestamp: datetime = Field(..., description="Open timestamp")
    direction: Direction = Field(..., description="Trade direction")
    entry_price: float = Field(..., description="Entry fill price")
    total_pnl: float = Field(default=0.0, description="Total realized P&L")
    exits: list[ExitRecord] = Field(default_factory=list, description="Ordered exits")
    quantity: int = Field(default=0, ge=0, description="Sum of exit quantities")
    is_chase_trade: bool = Field(default=False, description="Opened in chase re-entry mode")
    exit_time: Optional[datetime] = Field(default=None, description="Final exit timestamp")

    model_config = {"frozen": True}

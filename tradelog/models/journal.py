"""DailyLog data model."""

from datetime import date as date_type, datetime
from typing import Optional
from pydantic import BaseModel, Field

from tradelog.models.analysis import DayAnalysis


class DailyLog(BaseModel):
    """A stored day: its parsed analysis plus journal metadata."""

    date: date_type = Field(..., description="Trading day")
    analysis: DayAnalysis = Field(default_factory=DayAnalysis)
    notes: Optional[str] = Field(default=None, description="User notes")
    verified: bool = Field(default=False, description="Compare data reviewed")
    verified_by: Optional[str] = Field(default=None)
    verified_at: Optional[datetime] = Field(default=None)
    replaced_at: Optional[datetime] = Field(default=None, description="When this compare log was superseded")
    replaced_reason: Optional[str] = Field(default=None)

    model_config = {"frozen": True}

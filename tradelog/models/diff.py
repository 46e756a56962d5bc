"""Comparison and merge data models."""

from typing import Any
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from tradelog.models.trade import TradeRecord


class FieldChange(BaseModel):
    """A single field that differs between base and compare."""

    field: str = Field(..., description="Field name")
    old_value: Any = Field(default=None, description="Base-side value")
    new_value: Any = Field(default=None, description="Compare-side value")

    model_config = {"frozen": True}


class ModifiedTrade(BaseModel):
    """A matched base/compare trade pair with its field changes."""

    base: TradeRecord = Field(..., description="Base-side trade")
    trade: TradeRecord = Field(..., description="Compare-side trade")
    changes: list[FieldChange] = Field(default_factory=list)

    model_config = {"frozen": True}


class DiffResult(BaseModel):
    """Structured difference between a base and a compare dataset.

    Every compare trade lands in exactly one of ``added``, ``modified``,
    ``id_only_changed`` or ``unchanged``; every base trade is either
    ``removed`` or the ``base`` side of one matched pair.
    """

    added: list[TradeRecord] = Field(default_factory=list)
    removed: list[TradeRecord] = Field(default_factory=list)
    modified: list[ModifiedTrade] = Field(default_factory=list)
    id_only_changed: list[ModifiedTrade] = Field(default_factory=list)
    unchanged: list[ModifiedTrade] = Field(default_factory=list)
    daily_stats: list[FieldChange] = Field(default_factory=list)

    model_config = {"frozen": True}

    @property
    def has_differences(self) -> bool:
        """True when anything beyond ID renumbering changed."""
        return bool(self.added or self.removed or self.modified or self.daily_stats)


class MergeOptions(BaseModel):
    """Caller-selected parts of a compare dataset to merge into base.

    Accepts both snake_case and camelCase keys; unknown keys are rejected.
    """

    merge_all: bool = Field(default=False, description="Replace base entirely")
    merge_trade_ids: list[int] = Field(default_factory=list, description="Compare trade IDs to merge")
    merge_daily_stats: bool = Field(default=False, description="Replace day-level stats")

    model_config = {
        "frozen": True,
        "extra": "forbid",
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

"""Persistence for TradeLog."""

from tradelog.db.base import BaseJournalStore
from tradelog.db.store import JournalStore

__all__ = ["BaseJournalStore", "JournalStore"]

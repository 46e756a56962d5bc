"""Journal storage interface for TradeLog."""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from tradelog.models import DailyLog


class BaseJournalStore(ABC):
    """Abstract storage for base days, compare days and notes.

    ``JournalService`` receives an implementation at construction time;
    the parser and comparator never touch storage.
    """

    @abstractmethod
    def save_day(self, log: DailyLog) -> None:
        """Save or replace the base record for ``log.date``."""
        pass

    @abstractmethod
    def get_day(self, day: date) -> Optional[DailyLog]:
        """Get the base record for a day, or None."""
        pass

    @abstractmethod
    def get_all_days(
        self, from_date: Optional[date] = None, to_date: Optional[date] = None
    ) -> list[DailyLog]:
        """Get base records, newest first, optionally bounded by date."""
        pass

    @abstractmethod
    def save_compare_day(
        self, log: DailyLog, replaced_reason: str = "Replaced by new submission"
    ) -> Optional[DailyLog]:
        """Save the compare record for a day.

        Returns:
            The previous compare record, archived as replaced, or None.
        """
        pass

    @abstractmethod
    def get_compare_day(self, day: date) -> Optional[DailyLog]:
        """Get the compare record for a day, or None."""
        pass

    @abstractmethod
    def get_all_compare_days(self) -> list[DailyLog]:
        """Get all compare records, newest first."""
        pass

    @abstractmethod
    def delete_compare_day(self, day: date) -> bool:
        """Delete the compare record for a day. Returns True if one existed."""
        pass

    @abstractmethod
    def set_compare_verified(
        self, day: date, verified: bool, verified_by: Optional[str] = None
    ) -> Optional[DailyLog]:
        """Mark a compare record as reviewed or not."""
        pass

    @abstractmethod
    def set_compare_notes(self, day: date, notes: str) -> Optional[DailyLog]:
        """Attach notes to a compare record."""
        pass

    @abstractmethod
    def get_replaced_compare_days(self, day: Optional[date] = None) -> list[DailyLog]:
        """Get archived compare records, most recently replaced first."""
        pass

    @abstractmethod
    def delete_replaced_compare_days(self, day: date) -> int:
        """Delete the archived compare records for a day. Returns the count."""
        pass

    @abstractmethod
    def save_notes(self, day: date, notes: str) -> None:
        """Save notes for a base day."""
        pass

    @abstractmethod
    def get_notes(self, day: date) -> Optional[str]:
        """Get notes for a base day."""
        pass

"""Journal service: ingestion, comparison and merging of stored days.

The service takes its storage as a constructor argument so the parsing
and comparison core stays free of any persistence concerns.
"""

import logging
from datetime import date
from typing import Optional, Union

from tradelog.compare import compare_trading_logs, merge_trading_logs
from tradelog.db.base import BaseJournalStore
from tradelog.models import DailyLog, DayAnalysis, DiffResult, MergeOptions
from tradelog.parser import extract_log_date, parse_trading_log
from tradelog.stats import calculate_comparison_stats

logger = logging.getLogger(__name__)


class JournalService:
    """Coordinates the parser and comparator with a journal store."""

    def __init__(self, store: BaseJournalStore):
        """Initialize the service.

        Args:
            store: Journal storage implementation.
        """
        self.store = store

    def _parse(self, raw_text: str, day: Optional[date]) -> DailyLog:
        analysis = parse_trading_log(raw_text)
        log_date = day or extract_log_date(raw_text)
        logger.info(
            "Parsed log for %s: %d trades, P&L %.2f",
            log_date,
            len(analysis.trades),
            analysis.headline.total_pnl,
        )
        return DailyLog(date=log_date, analysis=analysis)

    def ingest_base(self, raw_text: str, day: Optional[date] = None) -> DailyLog:
        """Parse log text and store it as the base record for its day.

        Args:
            raw_text: Raw bot log text.
            day: Override for the day; defaults to the first date in the text.

        Returns:
            The stored DailyLog.
        """
        log = self._parse(raw_text, day)
        self.store.save_day(log)
        return log

    def ingest_compare(
        self, raw_text: str, day: Optional[date] = None
    ) -> tuple[DailyLog, Optional[DailyLog]]:
        """Parse log text and store it as the compare record for its day.

        Returns:
            Tuple of (stored compare log, archived previous compare log or None).
        """
        log = self._parse(raw_text, day)
        replaced = self.store.save_compare_day(log)
        if replaced is not None:
            logger.info("Archived previous compare log for %s", log.date)
        return log, replaced

    def diff_day(self, day: date) -> Optional[DiffResult]:
        """Compare the stored compare record of a day against its base.

        Returns:
            DiffResult, or None when the day has no compare record. A
            missing base record is treated as an empty day.
        """
        compare = self.store.get_compare_day(day)
        if compare is None:
            return None
        base = self.store.get_day(day)
        base_analysis = base.analysis if base else DayAnalysis()
        return compare_trading_logs(base_analysis, compare.analysis)

    def merge_day(
        self, day: date, options: Union[MergeOptions, dict]
    ) -> DailyLog:
        """Merge selected parts of a day's compare record into its base.

        Raises:
            ValueError: If the day has no compare record.
        """
        compare = self.store.get_compare_day(day)
        if compare is None:
            raise ValueError(f"No compare data stored for {day.isoformat()}")
        base = self.store.get_day(day)
        base_analysis = base.analysis if base else DayAnalysis()
        merged = merge_trading_logs(base_analysis, compare.analysis, options)
        log = DailyLog(date=day, analysis=merged, notes=base.notes if base else None)
        self.store.save_day(log)
        logger.info("Merged compare data into base for %s", day)
        return log

    def merge_compare_to_base(self, day: date) -> DailyLog:
        """Replace a day's base record with its compare record."""
        return self.merge_day(day, MergeOptions(merge_all=True))

    def verify_day(
        self, day: date, verified: bool = True, verified_by: Optional[str] = None
    ) -> Optional[DailyLog]:
        """Mark a day's compare record as reviewed."""
        return self.store.set_compare_verified(day, verified, verified_by)

    def add_notes(self, day: date, notes: str, compare: bool = False) -> bool:
        """Save notes on a base day, or on its compare record.

        Returns:
            False when ``compare`` is set and no compare record exists.
        """
        if compare:
            return self.store.set_compare_notes(day, notes) is not None
        self.store.save_notes(day, notes)
        return True

    def get_days(
        self, from_date: Optional[date] = None, to_date: Optional[date] = None
    ) -> list[DailyLog]:
        """Stored base days, newest first, optionally bounded by date."""
        return self.store.get_all_days(from_date, to_date)

    def get_replaced_compare_days(self, day: Optional[date] = None) -> list[DailyLog]:
        """Compare submissions superseded by a later one, newest first."""
        return self.store.get_replaced_compare_days(day)

    def clear_replaced_compare_days(self, day: date) -> int:
        """Drop the archived compare submissions of a day.

        Returns:
            Number of archived records removed.
        """
        removed = self.store.delete_replaced_compare_days(day)
        logger.info("Removed %d archived compare logs for %s", removed, day)
        return removed

    def comparison_stats(
        self,
        unverified_only: bool = False,
        big_day_threshold: float = 400.0,
        small_day_threshold: float = 100.0,
    ) -> dict:
        """Aggregate differences between stored compare days and their base days.

        Args:
            unverified_only: Skip compare records already marked as reviewed.
            big_day_threshold: Day P&L magnitude counted as a big win/loss day.
            small_day_threshold: Boundary between low and high profit/loss days.
        """
        compare_days = self.store.get_all_compare_days()
        if unverified_only:
            compare_days = [d for d in compare_days if not d.verified]
        compare_dates = {d.date for d in compare_days}
        base_days = [d for d in self.store.get_all_days() if d.date in compare_dates]
        return calculate_comparison_stats(
            compare_days,
            base_days,
            big_day_threshold=big_day_threshold,
            small_day_threshold=small_day_threshold,
        )

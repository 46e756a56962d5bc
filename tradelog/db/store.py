"""SQLite journal store for TradeLog."""

import sqlite3
from datetime import date, datetime
from pathlib import Path
from typing import Optional

from tradelog.db.base import BaseJournalStore
from tradelog.models import DailyLog, DayAnalysis


class JournalStore(BaseJournalStore):
    """SQLite-based journal store.

    Parsed analyses are kept as pydantic JSON documents keyed by date.
    """

    REQUIRED_TABLES = [
        "days",
        "compare_days",
        "replaced_compare_days",
        "notes",
    ]

    def __init__(self, db_path: Path):
        """Initialize the journal store.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self._ensure_db_dir()
        self._init_schema()

    def _ensure_db_dir(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        """Initialize database schema on first run."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS days (
                    date TEXT PRIMARY KEY,
                    analysis TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS compare_days (
                    date TEXT PRIMARY KEY,
                    analysis TEXT NOT NULL,
                    notes TEXT,
                    verified INTEGER NOT NULL DEFAULT 0,
                    verified_by TEXT,
                    verified_at TEXT,
                    updated_at TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS replaced_compare_days (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    date TEXT NOT NULL,
                    analysis TEXT NOT NULL,
                    notes TEXT,
                    replaced_at TEXT NOT NULL,
                    replaced_reason TEXT
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS notes (
                    date TEXT PRIMARY KEY,
                    notes TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            conn.commit()
        finally:
            conn.close()

    def get_tables(self) -> list[str]:
        """Get list of all tables in the database."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%'"
            )
            return [row["name"] for row in cursor.fetchall()]
        finally:
            conn.close()

    @staticmethod
    def _row_to_log(row: sqlite3.Row) -> DailyLog:
        keys = row.keys()
        values = {
            "date": date.fromisoformat(row["date"]),
            "analysis": DayAnalysis.model_validate_json(row["analysis"]),
        }
        if "notes" in keys:
            values["notes"] = row["notes"]
        if "verified" in keys:
            values["verified"] = bool(row["verified"])
            values["verified_by"] = row["verified_by"]
            if row["verified_at"]:
                values["verified_at"] = datetime.fromisoformat(row["verified_at"])
        if "replaced_at" in keys:
            values["replaced_at"] = datetime.fromisoformat(row["replaced_at"])
            values["replaced_reason"] = row["replaced_reason"]
        return DailyLog(**values)

    # ==================== Base days ====================

    def save_day(self, log: DailyLog) -> None:
        """Save or replace the base record for a day.

        Args:
            log: Day to save. Its notes, if any, are saved alongside.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            now = datetime.now().isoformat()
            cursor.execute(
                """
                INSERT OR REPLACE INTO days (date, analysis, updated_at)
                VALUES (?, ?, ?)
                """,
                (log.date.isoformat(), log.analysis.model_dump_json(), now),
            )
            if log.notes is not None:
                cursor.execute(
                    "INSERT OR REPLACE INTO notes (date, notes, updated_at) VALUES (?, ?, ?)",
                    (log.date.isoformat(), log.notes, now),
                )
            conn.commit()
        finally:
            conn.close()

    def get_day(self, day: date) -> Optional[DailyLog]:
        """Get the base record for a day.

        Args:
            day: Trading day.

        Returns:
            DailyLog if stored, None otherwise.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT d.date, d.analysis, n.notes
                FROM days d LEFT JOIN notes n ON n.date = d.date
                WHERE d.date = ?
                """,
                (day.isoformat(),),
            )
            row = cursor.fetchone()
            return self._row_to_log(row) if row else None
        finally:
            conn.close()

    def get_all_days(
        self, from_date: Optional[date] = None, to_date: Optional[date] = None
    ) -> list[DailyLog]:
        """Get base records, newest first.

        Args:
            from_date: Optional inclusive start date.
            to_date: Optional inclusive end date.

        Returns:
            List of stored days.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT d.date, d.analysis, n.notes
                FROM days d LEFT JOIN notes n ON n.date = d.date
                WHERE d.date >= ? AND d.date <= ?
                ORDER BY d.date DESC
                """,
                (
                    from_date.isoformat() if from_date else "0000-01-01",
                    to_date.isoformat() if to_date else "9999-12-31",
                ),
            )
            return [self._row_to_log(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def delete_day(self, day: date) -> bool:
        """Delete the base record for a day.

        Returns:
            True if a record was deleted.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM days WHERE date = ?", (day.isoformat(),))
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    # ==================== Compare days ====================

    def save_compare_day(
        self, log: DailyLog, replaced_reason: str = "Replaced by new submission"
    ) -> Optional[DailyLog]:
        """Save the compare record for a day.

        An existing compare record for the same day is archived in
        ``replaced_compare_days`` before being overwritten.

        Args:
            log: Compare day to save.
            replaced_reason: Reason recorded on the archived record.

        Returns:
            The archived previous record, or None.
        """
        previous = self.get_compare_day(log.date)
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            now = datetime.now()
            if previous is not None:
                cursor.execute(
                    """
                    INSERT INTO replaced_compare_days
                    (date, analysis, notes, replaced_at, replaced_reason)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        previous.date.isoformat(),
                        previous.analysis.model_dump_json(),
                        previous.notes,
                        now.isoformat(),
                        replaced_reason,
                    ),
                )
            cursor.execute(
                """
                INSERT OR REPLACE INTO compare_days
                (date, analysis, notes, verified, verified_by, verified_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    log.date.isoformat(),
                    log.analysis.model_dump_json(),
                    log.notes,
                    1 if log.verified else 0,
                    log.verified_by,
                    log.verified_at.isoformat() if log.verified_at else None,
                    now.isoformat(),
                ),
            )
            conn.commit()
        finally:
            conn.close()

        if previous is None:
            return None
        return previous.model_copy(
            update={"replaced_at": now, "replaced_reason": replaced_reason}
        )

    def get_compare_day(self, day: date) -> Optional[DailyLog]:
        """Get the compare record for a day."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT date, analysis, notes, verified, verified_by, verified_at
                FROM compare_days WHERE date = ?
                """,
                (day.isoformat(),),
            )
            row = cursor.fetchone()
            return self._row_to_log(row) if row else None
        finally:
            conn.close()

    def get_all_compare_days(self) -> list[DailyLog]:
        """Get all compare records, newest first."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT date, analysis, notes, verified, verified_by, verified_at
                FROM compare_days ORDER BY date DESC
                """
            )
            return [self._row_to_log(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def delete_compare_day(self, day: date) -> bool:
        """Delete the compare record for a day."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM compare_days WHERE date = ?", (day.isoformat(),))
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()

    def set_compare_verified(
        self, day: date, verified: bool, verified_by: Optional[str] = None
    ) -> Optional[DailyLog]:
        """Mark a compare record as reviewed or not.

        Returns:
            The updated record, or None if no compare record exists.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE compare_days
                SET verified = ?, verified_by = ?, verified_at = ?
                WHERE date = ?
                """,
                (
                    1 if verified else 0,
                    verified_by if verified else None,
                    datetime.now().isoformat() if verified else None,
                    day.isoformat(),
                ),
            )
            conn.commit()
            updated = cursor.rowcount > 0
        finally:
            conn.close()
        return self.get_compare_day(day) if updated else None

    def set_compare_notes(self, day: date, notes: str) -> Optional[DailyLog]:
        """Attach notes to a compare record."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE compare_days SET notes = ? WHERE date = ?",
                (notes, day.isoformat()),
            )
            conn.commit()
            updated = cursor.rowcount > 0
        finally:
            conn.close()
        return self.get_compare_day(day) if updated else None

    def get_replaced_compare_days(self, day: Optional[date] = None) -> list[DailyLog]:
        """Get archived compare records, most recently replaced first.

        Args:
            day: Optional day filter.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            if day:
                cursor.execute(
                    """
                    SELECT date, analysis, notes, replaced_at, replaced_reason
                    FROM replaced_compare_days WHERE date = ?
                    ORDER BY id DESC
                    """,
                    (day.isoformat(),),
                )
            else:
                cursor.execute(
                    """
                    SELECT date, analysis, notes, replaced_at, replaced_reason
                    FROM replaced_compare_days ORDER BY id DESC
                    """
                )
            return [self._row_to_log(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def delete_replaced_compare_days(self, day: date) -> int:
        """Delete the archived compare records for a day.

        Returns:
            Number of archived records removed.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM replaced_compare_days WHERE date = ?", (day.isoformat(),))
            conn.commit()
            return cursor.rowcount
        finally:
            conn.close()

    # ==================== Notes ====================

    def save_notes(self, day: date, notes: str) -> None:
        """Save notes for a base day."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT OR REPLACE INTO notes (date, notes, updated_at) VALUES (?, ?, ?)",
                (day.isoformat(), notes, datetime.now().isoformat()),
            )
            conn.commit()
        finally:
            conn.close()

    def get_notes(self, day: date) -> Optional[str]:
        """Get notes for a base day."""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT notes FROM notes WHERE date = ?", (day.isoformat(),))
            row = cursor.fetchone()
            return row["notes"] if row else None
        finally:
            conn.close()

    # ==================== Stats ====================

    def get_stats(self) -> dict:
        """Get database statistics.

        Returns:
            Dictionary with table record counts.
        """
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            stats = {}
            for table in self.REQUIRED_TABLES:
                cursor.execute(f"SELECT COUNT(*) as count FROM {table}")
                stats[table] = cursor.fetchone()["count"]
            return stats
        finally:
            conn.close()

# src/first_todo/reminders/reminder_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
from pathlib import Path

from .reminder_models import Reminder, ReminderStatus

logger = logging.getLogger(__name__)


class ReminderStore:
    """
    SQLite reminder queue, one row per task id.

    Lifecycle: pending -> sending (claimed) -> delivered, or back to pending on retry.
    Older databases get missing columns added on open.

    Every method opens its own connection, so the dispatcher thread
    and the console thread never share one.
    """

    def __init__(self, db_path: str | Path = "reminders.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            total = self.count_reminders()
        except Exception:
            total = -1
        logger.info("ReminderStore ready db=%s total=%s", self._db_path, total)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS reminders (
                    task_id TEXT PRIMARY KEY,
                    status TEXT NOT NULL DEFAULT 'pending',
                    fire_at REAL NOT NULL,
                    title TEXT NOT NULL,
                    body TEXT NOT NULL,
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL,
                    attempts INTEGER NOT NULL DEFAULT 0
                )
                """
            )

            cur.execute("PRAGMA table_info(reminders)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE reminders ADD COLUMN {name} {decl}")
                logger.info("ReminderStore migration: added column %s", name)

            add_col("status", "TEXT NOT NULL DEFAULT 'pending'")
            add_col("updated_at", "REAL NOT NULL DEFAULT 0")
            add_col("attempts", "INTEGER NOT NULL DEFAULT 0")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_reminders_due_status ON reminders(status, fire_at)")

            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_reminder(row: sqlite3.Row) -> Reminder:
        return Reminder(
            task_id=str(row["task_id"]),
            status=ReminderStatus.from_db(row["status"]),
            fire_at=float(row["fire_at"] or 0.0),
            title=str(row["title"] or ""),
            body=str(row["body"] or ""),
            created_at=float(row["created_at"] or 0.0),
            updated_at=float(row["updated_at"] or 0.0),
            attempts=int(row["attempts"] or 0),
        )

    # ---- public API ----

    def count_reminders(self, status: ReminderStatus | None = None) -> int:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            if status is None:
                cur.execute("SELECT COUNT(*) FROM reminders")
            else:
                cur.execute("SELECT COUNT(*) FROM reminders WHERE status = ?", (status.value,))
            (n,) = cur.fetchone()
            return int(n)
        finally:
            conn.close()

    def upsert_reminder(self, *, task_id: str, fire_at: float, title: str, body: str) -> None:
        """
        Insert or replace the reminder for task_id.

        Replacing resets status to pending and attempts to 0; created_at is kept.
        """
        if not task_id or not task_id.strip():
            raise ValueError("task_id is required")

        now = time.time()
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO reminders(task_id, status, fire_at, title, body, created_at, updated_at, attempts)
                VALUES (?, 'pending', ?, ?, ?, ?, ?, 0)
                ON CONFLICT(task_id) DO UPDATE SET
                    status = 'pending',
                    fire_at = excluded.fire_at,
                    title = excluded.title,
                    body = excluded.body,
                    updated_at = excluded.updated_at,
                    attempts = 0
                """,
                (task_id, float(fire_at), title, body, now, now),
            )
            conn.commit()
            logger.debug("Reminder upserted task_id=%s fire_at=%s", task_id, fire_at)
        finally:
            conn.close()

    def get_reminder(self, task_id: str) -> Reminder | None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT * FROM reminders WHERE task_id = ?", (task_id,))
            row = cur.fetchone()
            return self._row_to_reminder(row) if row else None
        finally:
            conn.close()

    def list_due_reminders(self, *, now_ts: float, limit: int = 32) -> list[Reminder]:
        """Pending reminders whose fire_at <= now_ts, oldest first."""
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT *
                FROM reminders
                WHERE status = 'pending'
                  AND fire_at <= ?
                ORDER BY fire_at ASC, created_at ASC
                    LIMIT ?
                """,
                (float(now_ts), int(limit)),
            )
            return [self._row_to_reminder(r) for r in cur.fetchall()]
        finally:
            conn.close()

    def try_claim_reminder(self, task_id: str) -> bool:
        """
        Best-effort claim to avoid duplicate delivery.

        Atomically transitions: pending -> sending.
        Returns True if the row was claimed by this caller.
        """
        now = time.time()
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                UPDATE reminders
                SET status = 'sending', updated_at = ?, attempts = attempts + 1
                WHERE task_id = ?
                  AND status = 'pending'
                """,
                (now, task_id),
            )
            conn.commit()
            return cur.rowcount == 1
        finally:
            conn.close()

    def _finish_claim(self, task_id: str, status: ReminderStatus, *, fire_at: float | None = None) -> int:
        # Only a claimed row moves on; a row replaced by upsert_reminder meanwhile is pending again.
        now = time.time()
        conn = self._get_conn()
        try:
            if fire_at is None:
                cur = conn.execute(
                    "UPDATE reminders SET status = ?, updated_at = ? WHERE task_id = ? AND status = 'sending'",
                    (status.value, now, task_id),
                )
            else:
                cur = conn.execute(
                    "UPDATE reminders SET status = ?, fire_at = ?, updated_at = ? "
                    "WHERE task_id = ? AND status = 'sending'",
                    (status.value, float(fire_at), now, task_id),
                )
            conn.commit()
            return cur.rowcount
        finally:
            conn.close()

    def mark_delivered(self, task_id: str) -> bool:
        return self._finish_claim(task_id, ReminderStatus.DELIVERED) == 1

    def reschedule(self, task_id: str, *, fire_at: float) -> bool:
        return self._finish_claim(task_id, ReminderStatus.PENDING, fire_at=fire_at) == 1

    def cancel_reminder(self, task_id: str) -> bool:
        """Cancel a reminder that has not been delivered yet."""
        now = time.time()
        conn = self._get_conn()
        try:
            cur = conn.execute(
                """
                UPDATE reminders
                SET status = 'cancelled', updated_at = ?
                WHERE task_id = ?
                  AND status IN ('pending', 'sending')
                """,
                (now, task_id),
            )
            conn.commit()
            return cur.rowcount == 1
        finally:
            conn.close()

    def requeue_stale_claims(self, *, older_than_ts: float) -> int:
        """Claims left in 'sending' (e.g. by a crashed dispatcher) go back to pending."""
        conn = self._get_conn()
        try:
            cur = conn.execute(
                """
                UPDATE reminders
                SET status = 'pending', updated_at = ?
                WHERE status = 'sending'
                  AND updated_at < ?
                """,
                (time.time(), float(older_than_ts)),
            )
            conn.commit()
            if cur.rowcount:
                logger.info("Requeued %d stale reminder claim(s).", cur.rowcount)
            return cur.rowcount
        finally:
            conn.close()

    def prune_finished(self, *, older_than_ts: float) -> int:
        """Delete delivered/cancelled rows last touched before older_than_ts."""
        conn = self._get_conn()
        try:
            cur = conn.execute(
                """
                DELETE FROM reminders
                WHERE status IN ('delivered', 'cancelled')
                  AND updated_at < ?
                """,
                (float(older_than_ts),),
            )
            conn.commit()
            if cur.rowcount:
                logger.info("Pruned %d finished reminder(s).", cur.rowcount)
            return cur.rowcount
        finally:
            conn.close()

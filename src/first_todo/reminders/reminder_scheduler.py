# src/first_todo/reminders/reminder_scheduler.py

from __future__ import annotations

"""
Reminder scheduling and delivery.

- LocalReminderScheduler: the ReminderScheduler port used by TaskStore.
  schedule() only writes a row (one per task id) and returns.
- run_reminder_dispatcher: a small polling loop that
    * fetches due reminders,
    * claims them (best-effort),
    * delivers them via an injected notifier port,
    * marks them delivered or reschedules on failure.

How a reminder is shown (console line, popup, ...) belongs to the notifier, not the dispatcher.
"""

import asyncio
import contextlib
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from ..core.ports import ReminderNotifier, ReminderRepo
from .reminder_models import Reminder

logger = logging.getLogger(__name__)


class LocalReminderScheduler:
    """One-shot reminders persisted in a ReminderRepo; replace-on-reschedule per task id."""

    def __init__(self, store: ReminderRepo, *, clock: Callable[[], float] | None = None) -> None:
        self._store = store
        self._clock = clock or time.time

    def request_authorization(self) -> bool:
        # Local delivery needs no permission prompt.
        return True

    def schedule(self, task_id: str, delay_minutes: int, title: str, body: str) -> None:
        fire_at = float(self._clock()) + max(0, int(delay_minutes)) * 60
        self._store.upsert_reminder(task_id=task_id, fire_at=fire_at, title=title, body=body)
        logger.info("Reminder for task %s in %s minute(s)", task_id, delay_minutes)

    def cancel(self, task_id: str) -> bool:
        return self._store.cancel_reminder(task_id)


async def dispatch_due_reminders(
        store: ReminderRepo,
        notifier: ReminderNotifier,
        *,
        now_ts: float,
        retry_delay_seconds: float = 60.0,
        batch_limit: int = 32,
) -> int:
    """
    One dispatcher pass. Returns the number of reminders delivered.

    Claimed reminders that fail to deliver go back to pending with fire_at
    pushed forward by retry_delay_seconds.
    """
    try:
        due: list[Reminder] = store.list_due_reminders(now_ts=now_ts, limit=int(batch_limit))
    except Exception:
        logger.exception("list_due_reminders failed")
        return 0

    delivered = 0
    for reminder in due:
        task_id = reminder.task_id

        try:
            claimed = store.try_claim_reminder(task_id)
        except Exception:
            logger.exception("try_claim_reminder failed task_id=%s", task_id)
            continue

        if not claimed:
            continue

        try:
            await notifier.notify(title=reminder.title, body=reminder.body, task_id=task_id)
            if store.mark_delivered(task_id):
                logger.info("Reminder %s -> delivered", task_id)
            else:
                logger.info("Reminder %s delivered, but it was rescheduled meanwhile", task_id)
            delivered += 1
        except Exception:
            logger.exception("reminder delivery failed task_id=%s", task_id)
            try:
                store.reschedule(task_id, fire_at=time.time() + retry_delay_seconds)
            except Exception:
                logger.exception("reschedule(backoff) failed task_id=%s", task_id)

    return delivered


STALE_CLAIM_SECONDS = 300.0
FINISHED_KEEP_SECONDS = 7 * 24 * 3600.0


def housekeep_reminders(
        store: ReminderRepo,
        *,
        now_ts: float,
        stale_claim_seconds: float = STALE_CLAIM_SECONDS,
        keep_seconds: float = FINISHED_KEEP_SECONDS,
) -> None:
    """Requeue claims abandoned by a crashed dispatcher and drop old delivered/cancelled rows."""
    try:
        store.requeue_stale_claims(older_than_ts=now_ts - stale_claim_seconds)
        store.prune_finished(older_than_ts=now_ts - keep_seconds)
    except Exception:
        logger.exception("Reminder housekeeping failed")


async def run_reminder_dispatcher(
        store: ReminderRepo,
        notifier: ReminderNotifier,
        *,
        interval_seconds: float = 5.0,
        retry_delay_seconds: float = 60.0,
        batch_limit: int = 32,
        stop_event: asyncio.Event | None = None,
) -> None:
    """
    Simple polling dispatcher.

    Every interval_seconds, deliver every pending reminder with fire_at <= now.
    To stop the dispatcher, cancel the coroutine/task or set stop_event.
    """
    sleep_s = max(0.01, float(interval_seconds))
    retry_s = max(0.01, float(retry_delay_seconds))

    housekeep_reminders(store, now_ts=time.time())

    while stop_event is None or not stop_event.is_set():
        await dispatch_due_reminders(
            store,
            notifier,
            now_ts=time.time(),
            retry_delay_seconds=retry_s,
            batch_limit=batch_limit,
        )

        if stop_event is None:
            await asyncio.sleep(sleep_s)
            continue

        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(stop_event.wait(), timeout=sleep_s)


@dataclass
class ReminderBackgroundRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except Exception:
            logger.debug("Failed to signal reminder dispatcher stop.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_reminders_in_background(
        store: ReminderRepo,
        notifier: ReminderNotifier,
        *,
        interval_seconds: float = 5.0,
        retry_delay_seconds: float = 60.0,
) -> ReminderBackgroundRunner | None:
    """
    Start the dispatcher in a background thread with its own event loop,
    so the blocking console REPL (input()) can run in the main thread.
    """
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(
                run_reminder_dispatcher(
                    store,
                    notifier,
                    interval_seconds=interval_seconds,
                    retry_delay_seconds=retry_delay_seconds,
                    stop_event=stop_event,
                )
            )
        except Exception:
            logger.exception("Reminder dispatcher crashed.")
        finally:
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="reminder-dispatcher", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Reminder dispatcher thread did not initialize properly.")
        return None

    logger.info("Reminder dispatcher started (interval=%.1fs).", interval_seconds)
    return ReminderBackgroundRunner(thread=t, loop=loop, stop_event=stop_event)

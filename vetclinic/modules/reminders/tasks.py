"""Background entry points for reminder dispatch.

Both run inside their own error boundary: a reminder problem is logged and
never reaches the request or scheduler job that triggered it.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from vetclinic.modules.reminders.dispatcher import ReminderDispatcher

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "reminder_sweep"


async def run_scoped_dispatch(dispatcher: ReminderDispatcher, appointment_id: str) -> None:
    """Re-evaluate reminders for one appointment after it was created or changed."""
    try:
        await dispatcher.dispatch([appointment_id])
    except Exception:  # noqa: BLE001 - must never fail the parent operation
        logger.exception("Reminder check for appointment %s failed", appointment_id)


class ReminderSweeper:
    """Runs the full reminder sweep every ``interval_seconds`` on an AsyncIOScheduler."""

    def __init__(self, dispatcher: ReminderDispatcher, interval_seconds: float):
        self.dispatcher = dispatcher
        self.interval_seconds = interval_seconds
        self.scheduler = AsyncIOScheduler(timezone=timezone.utc)

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def start(self) -> None:
        if self.running:
            return
        logger.info("Starting reminder sweep scheduler...")
        self.scheduler.add_job(
            self.run_once,
            IntervalTrigger(seconds=self.interval_seconds),
            id=SWEEP_JOB_ID,
            name="Send due appointment reminders",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            next_run_time=datetime.now(tz=timezone.utc),
        )
        self.scheduler.start()
        logger.info("Reminder sweep scheduler started (every %ss)", self.interval_seconds)

    def stop(self) -> None:
        if not self.running:
            return
        logger.info("Stopping reminder sweep scheduler...")
        self.scheduler.shutdown(wait=False)
        logger.info("Reminder sweep scheduler stopped")

    async def run_once(self) -> None:
        try:
            result = await self.dispatcher.dispatch()
        except Exception:  # noqa: BLE001 - keep the scheduler job alive
            logger.exception("Reminder sweep failed")
            return
        if result.failures:
            logger.warning("Reminder sweep had %d failed sends", len(result.failures))

import asyncio
from datetime import date
import logging

import pytest

from vetclinic.modules.reminders.dispatcher import DispatchResult
from vetclinic.modules.reminders.tasks import SWEEP_JOB_ID, ReminderSweeper, run_scoped_dispatch


class ExplodingDispatcher:
    async def dispatch(self, appointment_ids=None):
        raise RuntimeError("database is down")


class CountingDispatcher:
    def __init__(self):
        self.calls = 0

    async def dispatch(self, appointment_ids=None):
        self.calls += 1
        return DispatchResult()


@pytest.mark.asyncio
async def test_scoped_dispatch_swallows_and_logs_errors(caplog):
    with caplog.at_level(logging.ERROR):
        await run_scoped_dispatch(ExplodingDispatcher(), "01APPT")

    assert "01APPT" in caplog.text


@pytest.mark.asyncio
async def test_scoped_dispatch_sends_for_one_appointment(dispatcher, fake_gateway, seed_pet, seed_appointment):
    pet = await seed_pet()
    appointment = await seed_appointment(pet, date(2025, 6, 15))

    await run_scoped_dispatch(dispatcher, appointment.appointment_id)

    assert len(fake_gateway.sent) == 1


@pytest.mark.asyncio
async def test_sweep_survives_dispatch_errors(caplog):
    sweeper = ReminderSweeper(ExplodingDispatcher(), interval_seconds=60)

    with caplog.at_level(logging.ERROR):
        await sweeper.run_once()

    assert "Reminder sweep failed" in caplog.text


@pytest.mark.asyncio
async def test_sweeper_schedules_interval_job_and_runs_immediately():
    counting = CountingDispatcher()
    sweeper = ReminderSweeper(counting, interval_seconds=3600)

    sweeper.start()
    try:
        assert sweeper.running
        job = sweeper.scheduler.get_job(SWEEP_JOB_ID)
        assert job is not None
        assert job.trigger.interval.total_seconds() == 3600
        for _ in range(50):
            if counting.calls:
                break
            await asyncio.sleep(0.02)
    finally:
        sweeper.stop()

    assert not sweeper.running
    assert counting.calls == 1
    sweeper.stop()


@pytest.mark.asyncio
async def test_sweeper_start_is_idempotent():
    sweeper = ReminderSweeper(CountingDispatcher(), interval_seconds=60)

    sweeper.start()
    sweeper.start()
    try:
        assert len(sweeper.scheduler.get_jobs()) == 1
    finally:
        sweeper.stop()

from datetime import date, time
import logging

import pytest
from sqlalchemy.exc import OperationalError

from vetclinic.core.exceptions import GatewayError, NotFoundError, ValidationError
from vetclinic.shared.enums import AppointmentStatus, ReminderType

TODAY = date(2025, 6, 15)
TOMORROW = date(2025, 6, 16)


@pytest.mark.asyncio
async def test_sweep_sends_same_day_and_day_before(dispatcher, fake_gateway, seed_pet, seed_appointment,
                                                   reload_appointment):
    pet = await seed_pet()
    today_visit = await seed_appointment(pet, TODAY)
    tomorrow_visit = await seed_appointment(pet, TOMORROW, at=time(9, 0), reason="Vaccination")
    await seed_appointment(pet, date(2025, 6, 20))

    result = await dispatcher.dispatch()

    assert sorted(result.sent) == sorted([today_visit.appointment_id, tomorrow_visit.appointment_id])
    assert result.failures == []
    messages = [message for _, message in fake_gateway.sent]
    assert any("TODAY at 2:30 PM" in message for message in messages)
    assert any("TOMORROW at 9:00 AM. Reason: Vaccination." in message for message in messages)

    stored_today = await reload_appointment(today_visit.appointment_id)
    stored_tomorrow = await reload_appointment(tomorrow_visit.appointment_id)
    assert stored_today.sms_sameday_sent is True
    assert stored_today.sms_1d_sent is False
    assert stored_tomorrow.sms_1d_sent is True
    assert stored_tomorrow.sms_sameday_sent is False


@pytest.mark.asyncio
async def test_second_sweep_sends_nothing(dispatcher, fake_gateway, seed_pet, seed_appointment):
    pet = await seed_pet()
    await seed_appointment(pet, TODAY)

    first = await dispatcher.dispatch()
    second = await dispatcher.dispatch()

    assert first.sent_count == 1
    assert second.sent_count == 0
    assert len(fake_gateway.sent) == 1


@pytest.mark.asyncio
async def test_failed_send_leaves_flag_unset(failing_dispatcher, seed_pet, seed_appointment, reload_appointment):
    pet = await seed_pet()
    appointment = await seed_appointment(pet, TODAY)

    result = await failing_dispatcher.dispatch()

    assert result.sent_count == 0
    assert [failure.appointment_id for failure in result.failures] == [appointment.appointment_id]
    assert result.failures[0].reminder_type == ReminderType.SAME_DAY
    stored = await reload_appointment(appointment.appointment_id)
    assert stored.sms_sameday_sent is False


@pytest.mark.asyncio
async def test_one_failure_does_not_stop_the_batch(failing_dispatcher, failing_gateway, seed_pet, seed_appointment):
    for owner, contact in [("Ana", "0911"), ("Ben", "0922"), ("Cora", "0933")]:
        pet = await seed_pet(owner_name=owner, pet_name=f"{owner}'s dog", contact=contact)
        await seed_appointment(pet, TODAY)

    result = await failing_dispatcher.dispatch()

    assert result.sent_count == 2
    assert len(result.failures) == 1
    assert sorted(failing_gateway.attempts) == ["0911", "0922", "0933"]


@pytest.mark.asyncio
async def test_terminal_and_flagged_appointments_are_ignored(dispatcher, fake_gateway, seed_pet, seed_appointment):
    pet = await seed_pet()
    await seed_appointment(pet, TODAY, status=AppointmentStatus.CANCELLED)
    await seed_appointment(pet, TOMORROW, status=AppointmentStatus.COMPLETED)
    await seed_appointment(pet, TODAY, sms_sameday_sent=True)

    result = await dispatcher.dispatch()

    assert result.sent_count == 0
    assert fake_gateway.attempts == []


@pytest.mark.asyncio
async def test_legacy_pending_status_still_gets_reminders(dispatcher, seed_pet, seed_appointment):
    pet = await seed_pet()
    appointment = await seed_appointment(pet, TODAY, status=AppointmentStatus.PENDING)

    result = await dispatcher.dispatch()

    assert result.sent == [appointment.appointment_id]


@pytest.mark.asyncio
async def test_missing_contact_is_skipped(dispatcher, fake_gateway, seed_pet, seed_appointment, reload_appointment):
    pet = await seed_pet(contact=None)
    appointment = await seed_appointment(pet, TODAY)

    result = await dispatcher.dispatch()

    assert result.skipped == [appointment.appointment_id]
    assert fake_gateway.attempts == []
    assert (await reload_appointment(appointment.appointment_id)).sms_sameday_sent is False


@pytest.mark.asyncio
async def test_scoped_dispatch_only_touches_given_ids(dispatcher, fake_gateway, seed_pet, seed_appointment):
    pet = await seed_pet()
    target = await seed_appointment(pet, TODAY)
    await seed_appointment(pet, TOMORROW)

    result = await dispatcher.dispatch([target.appointment_id])

    assert result.sent == [target.appointment_id]
    assert len(fake_gateway.sent) == 1

    assert (await dispatcher.dispatch([])).sent_count == 0


@pytest.mark.asyncio
async def test_flag_write_is_conditional(dispatcher, seed_pet, seed_appointment):
    pet = await seed_pet()
    appointment = await seed_appointment(pet, TODAY)

    assert await dispatcher._record_sent(appointment.appointment_id, ReminderType.SAME_DAY) is True
    assert await dispatcher._record_sent(appointment.appointment_id, ReminderType.SAME_DAY) is False


@pytest.mark.asyncio
async def test_manual_send_ignores_date_window(dispatcher, fake_gateway, seed_pet, seed_appointment,
                                               reload_appointment):
    pet = await seed_pet()
    appointment = await seed_appointment(pet, date(2025, 7, 1))

    result = await dispatcher.send_manual(appointment.appointment_id, ReminderType.DAY_BEFORE)

    assert result.already_sent is False
    assert len(fake_gateway.sent) == 1
    assert "TOMORROW" in fake_gateway.sent[0][1]
    assert (await reload_appointment(appointment.appointment_id)).sms_1d_sent is True


@pytest.mark.asyncio
async def test_manual_send_respects_existing_flag(dispatcher, fake_gateway, seed_pet, seed_appointment):
    pet = await seed_pet()
    appointment = await seed_appointment(pet, TODAY, sms_sameday_sent=True)

    result = await dispatcher.send_manual(appointment.appointment_id, ReminderType.SAME_DAY)

    assert result.already_sent is True
    assert fake_gateway.attempts == []


@pytest.mark.asyncio
async def test_manual_send_failure_propagates(failing_dispatcher, seed_pet, seed_appointment, reload_appointment):
    pet = await seed_pet()
    appointment = await seed_appointment(pet, TODAY)

    with pytest.raises(GatewayError):
        await failing_dispatcher.send_manual(appointment.appointment_id, ReminderType.SAME_DAY)

    assert (await reload_appointment(appointment.appointment_id)).sms_sameday_sent is False


@pytest.mark.asyncio
async def test_manual_send_rejects_terminal_and_unknown(dispatcher, seed_pet, seed_appointment):
    pet = await seed_pet()
    cancelled = await seed_appointment(pet, TODAY, status=AppointmentStatus.CANCELLED)

    with pytest.raises(ValidationError):
        await dispatcher.send_manual(cancelled.appointment_id, ReminderType.SAME_DAY)
    with pytest.raises(NotFoundError):
        await dispatcher.send_manual("01UNKNOWN00000000000000000", ReminderType.SAME_DAY)


@pytest.mark.asyncio
async def test_manual_send_requires_contact(dispatcher, seed_pet, seed_appointment):
    pet = await seed_pet(contact="")
    appointment = await seed_appointment(pet, TODAY)

    with pytest.raises(ValidationError, match="contact"):
        await dispatcher.send_manual(appointment.appointment_id, ReminderType.SAME_DAY)


class BrokenWriteSession:
    """Session stand-in whose every statement fails like a lost connection."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    async def execute(self, statement):
        raise OperationalError(str(statement), {}, Exception("database is locked"))

    async def commit(self):
        return None


@pytest.mark.asyncio
async def test_flag_write_failure_is_logged_and_not_resent(dispatcher, session_factory, fake_gateway, seed_pet,
                                                           seed_appointment, reload_appointment, caplog):
    pet = await seed_pet()
    appointment = await seed_appointment(pet, TODAY)
    sessions = iter([session_factory(), BrokenWriteSession()])
    dispatcher.session_factory = lambda: next(sessions)

    with caplog.at_level(logging.ERROR):
        result = await dispatcher.dispatch()

    assert result.sent == [appointment.appointment_id]
    assert result.failures == []
    assert len(fake_gateway.attempts) == 1
    assert "needs reconciliation" in caplog.text
    assert (await reload_appointment(appointment.appointment_id)).sms_sameday_sent is False


@pytest.mark.asyncio
async def test_manual_send_reports_send_in_progress(dispatcher, fake_gateway, seed_pet, seed_appointment,
                                                    reload_appointment):
    pet = await seed_pet()
    appointment = await seed_appointment(pet, TODAY)
    dispatcher._in_flight.add((appointment.appointment_id, ReminderType.SAME_DAY))

    result = await dispatcher.send_manual(appointment.appointment_id, ReminderType.SAME_DAY)

    assert result.in_progress is True
    assert result.already_sent is False
    assert fake_gateway.attempts == []
    assert (await reload_appointment(appointment.appointment_id)).sms_sameday_sent is False

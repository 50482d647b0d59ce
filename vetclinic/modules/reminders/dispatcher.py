"""Reminder dispatch: policy + SMS gateway + flag persistence.

A reminder flag is written only after the gateway accepted the message. The
write is conditional (``WHERE flag = false``) so overlapping dispatches never
flip a flag twice; a failed write after a successful send is logged for
reconciliation and the message is not re-sent.
"""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from sqlalchemy import false, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from vetclinic.core.config import settings
from vetclinic.core.exceptions import GatewayError, NotFoundError, ValidationError
from vetclinic.modules.appointments.models import Appointment
from vetclinic.modules.records.models import Owner, Pet
from vetclinic.modules.reminders.gateway import SmsGateway
from vetclinic.modules.reminders.messages import render_reminder
from vetclinic.modules.reminders.policy import clinic_today, decide
from vetclinic.shared.enums import TERMINAL_APPOINTMENT_STATUSES, AppointmentStatus, ReminderType

logger = logging.getLogger(__name__)


def _utcnow() -> dt.datetime:
    return dt.datetime.now(tz=dt.timezone.utc)


@dataclass
class ReminderCandidate:
    appointment_id: str
    date: dt.date
    time: dt.time
    status: AppointmentStatus
    reason: str | None
    sms_1d_sent: bool
    sms_sameday_sent: bool
    pet_name: str
    owner_name: str
    owner_contact: str | None


@dataclass
class DispatchFailure:
    appointment_id: str
    reminder_type: ReminderType
    error: str


@dataclass
class DispatchResult:
    sent: list[str] = field(default_factory=list)
    failures: list[DispatchFailure] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def sent_count(self) -> int:
        return len(self.sent)


@dataclass
class ManualSendResult:
    appointment_id: str
    reminder_type: ReminderType
    already_sent: bool
    in_progress: bool = False


class ReminderDispatcher:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        gateway: SmsGateway,
        clock: Callable[[], dt.datetime] = _utcnow,
        tz_name: str | None = None,
        clinic_name: str | None = None,
    ):
        self.session_factory = session_factory
        self.gateway = gateway
        self.clock = clock
        self.tz_name = tz_name or settings.clinic_timezone
        self.clinic_name = clinic_name or settings.clinic_name
        self._in_flight: set[tuple[str, ReminderType]] = set()

    def today(self) -> dt.date:
        return clinic_today(self.clock(), self.tz_name)

    async def dispatch(self, appointment_ids: Sequence[str] | None = None) -> DispatchResult:
        """Send every due reminder among open appointments.

        With no ids this is the periodic sweep; otherwise only the given
        appointments are considered. One failed send never stops the batch.
        """
        today = self.today()
        result = DispatchResult()
        if appointment_ids is not None and not appointment_ids:
            return result

        async with self.session_factory() as db:
            candidates = await self._load_candidates(db, today, appointment_ids)

        for candidate in candidates:
            decision = decide(candidate, today)
            if decision is None:
                continue
            if not candidate.owner_contact:
                logger.info("Skipping %s reminder for %s: owner has no contact number",
                            decision.reminder_type, candidate.appointment_id)
                result.skipped.append(candidate.appointment_id)
                continue
            try:
                sent = await self._send(candidate, decision.reminder_type)
            except GatewayError as exc:
                logger.warning("Reminder %s for appointment %s failed: %s",
                               decision.reminder_type, candidate.appointment_id, exc.detail)
                result.failures.append(DispatchFailure(candidate.appointment_id, decision.reminder_type, exc.detail))
                continue
            if sent:
                result.sent.append(candidate.appointment_id)
            else:
                result.skipped.append(candidate.appointment_id)

        logger.info("Reminder dispatch finished: sent=%d failed=%d skipped=%d",
                    result.sent_count, len(result.failures), len(result.skipped))
        return result

    async def send_manual(self, appointment_id: str, reminder_type: ReminderType) -> ManualSendResult:
        """Staff "send now": skips the date check, keeps the sent-flag rules.

        Gateway failures propagate so the caller can report them.
        """
        async with self.session_factory() as db:
            candidate = await self._load_one(db, appointment_id)

        if AppointmentStatus(candidate.status).is_terminal:
            raise ValidationError(f"Appointment is {candidate.status}; reminders are disabled")
        if getattr(candidate, reminder_type.flag_name):
            return ManualSendResult(appointment_id, reminder_type, already_sent=True)
        if not candidate.owner_contact:
            raise ValidationError("Owner contact number not found")
        if (appointment_id, reminder_type) in self._in_flight:
            return ManualSendResult(appointment_id, reminder_type, already_sent=False, in_progress=True)

        await self._send(candidate, reminder_type)
        return ManualSendResult(appointment_id, reminder_type, already_sent=False)

    async def _send(self, candidate: ReminderCandidate, reminder_type: ReminderType) -> bool:
        key = (candidate.appointment_id, reminder_type)
        if key in self._in_flight:
            logger.info("Reminder %s for %s already in progress", reminder_type, candidate.appointment_id)
            return False
        self._in_flight.add(key)
        try:
            message = render_reminder(
                reminder_type,
                owner_name=candidate.owner_name,
                pet_name=candidate.pet_name,
                at=candidate.time,
                reason=candidate.reason,
                clinic_name=self.clinic_name,
            )
            await self.gateway.send(candidate.owner_contact, message)
            logger.info("Sent %s reminder for appointment %s", reminder_type, candidate.appointment_id)
            await self._record_sent(candidate.appointment_id, reminder_type)
            return True
        finally:
            self._in_flight.discard(key)

    async def _record_sent(self, appointment_id: str, reminder_type: ReminderType) -> bool:
        flag = getattr(Appointment, reminder_type.flag_name)
        stmt = (
            update(Appointment)
            .where(Appointment.appointment_id == appointment_id, flag == false())
            .values({reminder_type.flag_name: True})
        )
        try:
            async with self.session_factory() as db:
                result = await db.execute(stmt)
                await db.commit()
        except SQLAlchemyError:
            logger.exception(
                "Reminder %s for appointment %s was sent but the flag was not saved; needs reconciliation",
                reminder_type,
                appointment_id,
            )
            return False
        if result.rowcount == 0:
            logger.info("Flag %s for %s was already set by another dispatch", reminder_type.flag_name, appointment_id)
            return False
        return True

    def _candidate_query(self):
        return (
            select(
                Appointment.appointment_id,
                Appointment.date,
                Appointment.time,
                Appointment.status,
                Appointment.reason,
                Appointment.sms_1d_sent,
                Appointment.sms_sameday_sent,
                Pet.name,
                Owner.name,
                Owner.contact,
            )
            .join(Pet, Pet.pet_id == Appointment.pet_id)
            .join(Owner, Owner.owner_id == Pet.owner_id)
        )

    async def _load_candidates(
        self,
        db: AsyncSession,
        today: dt.date,
        appointment_ids: Sequence[str] | None,
    ) -> list[ReminderCandidate]:
        stmt = self._candidate_query().where(
            Appointment.date.in_([today, today + dt.timedelta(days=1)]),
            Appointment.status.not_in(list(TERMINAL_APPOINTMENT_STATUSES)),
        )
        if appointment_ids is not None:
            stmt = stmt.where(Appointment.appointment_id.in_(list(appointment_ids)))
        result = await db.execute(stmt)
        return [ReminderCandidate(*row) for row in result.all()]

    async def _load_one(self, db: AsyncSession, appointment_id: str) -> ReminderCandidate:
        result = await db.execute(self._candidate_query().where(Appointment.appointment_id == appointment_id))
        row = result.one_or_none()
        if row is None:
            raise NotFoundError("Appointment not found")
        return ReminderCandidate(*row)


def build_dispatcher() -> ReminderDispatcher:
    """Dispatcher wired to the application database and the Semaphore gateway."""
    from vetclinic.core.database import get_session_factory
    from vetclinic.modules.reminders.gateway import SemaphoreGateway

    return ReminderDispatcher(get_session_factory(), SemaphoreGateway())

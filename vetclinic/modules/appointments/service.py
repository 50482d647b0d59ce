"""Appointment service layer and status lifecycle."""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Callable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vetclinic.core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from vetclinic.modules.appointments.models import Appointment
from vetclinic.modules.appointments.schemas import AppointmentCreate, AppointmentUpdate
from vetclinic.modules.records.models import Owner, Pet
from vetclinic.modules.users.models import User
from vetclinic.shared.enums import AppointmentStatus, Frequency

logger = logging.getLogger(__name__)

# Changing any of these on an open appointment re-runs the reminder check.
REMINDER_FIELDS = frozenset({"pet_id", "date", "time", "reason"})

ReminderTrigger = Callable[[str], None]


def _ignore_trigger(_: str) -> None:
    return None


class AppointmentService:
    """Create and mutate appointments.

    ``on_reminder_check`` receives an appointment id whenever a committed
    change could make a reminder due; the router hands it to a background task.
    """

    def __init__(self, db: AsyncSession, on_reminder_check: ReminderTrigger | None = None):
        self.db = db
        self.on_reminder_check = on_reminder_check or _ignore_trigger

    async def create(self, payload: AppointmentCreate, user: User | None = None) -> Appointment:
        await self._ensure_pet(payload.pet_id)
        appointment = Appointment(
            pet_id=payload.pet_id,
            date=payload.date,
            time=payload.time,
            frequency=payload.frequency,
            reason=payload.reason,
            status=payload.status.normalized(),
            sms_1d_sent=False,
            sms_sameday_sent=False,
            created_by=user.user_id if user else None,
        )
        self.db.add(appointment)
        await self.db.commit()
        await self.db.refresh(appointment)
        logger.info("Scheduled appointment %s for pet %s on %s", appointment.appointment_id, appointment.pet_id,
                    appointment.date)
        self.on_reminder_check(appointment.appointment_id)
        return appointment

    async def create_follow_up(self, pet_id: str, on_date: dt.date, user: User | None = None) -> Appointment:
        payload = AppointmentCreate(
            pet_id=pet_id,
            date=on_date,
            time=dt.time(9, 0),
            frequency=Frequency.ONCE,
            reason="Follow-up checkup",
        )
        return await self.create(payload, user)

    async def list_appointments(
        self,
        status: AppointmentStatus | None = None,
        on_date: dt.date | None = None,
        pet_id: str | None = None,
        owner_user_id: str | None = None,
    ) -> list[Appointment]:
        stmt = select(Appointment).order_by(Appointment.date, Appointment.time)
        if status is not None:
            stmt = stmt.where(Appointment.status == status)
        if on_date is not None:
            stmt = stmt.where(Appointment.date == on_date)
        if pet_id:
            stmt = stmt.where(Appointment.pet_id == pet_id)
        if owner_user_id:
            stmt = (
                stmt.join(Pet, Pet.pet_id == Appointment.pet_id)
                .join(Owner)
                .where(Owner.user_id == owner_user_id)
            )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get(self, appointment_id: str) -> Appointment:
        appointment = await self.db.get(Appointment, appointment_id)
        if appointment is None:
            raise NotFoundError("Appointment not found")
        return appointment

    async def update(self, appointment_id: str, payload: AppointmentUpdate) -> Appointment:
        appointment = await self.get(appointment_id)
        update_data = payload.model_dump(exclude_unset=True)
        if not update_data:
            return appointment

        current = appointment.status.normalized()
        new_status: AppointmentStatus | None = update_data.pop("status", None)
        changed = {field for field, value in update_data.items() if getattr(appointment, field) != value}

        if current.is_terminal:
            if changed or (new_status is not None and new_status != current):
                raise InvalidTransitionError(f"Appointment is {current} and can no longer change")
            return appointment

        if "pet_id" in changed:
            await self._ensure_pet(update_data["pet_id"])
        for field in changed:
            setattr(appointment, field, update_data[field])
        if new_status is not None:
            appointment.status = new_status
        elif appointment.status != current:
            # Legacy pending/confirmed rows are rewritten on touch.
            appointment.status = current

        await self.db.commit()
        await self.db.refresh(appointment)
        if changed & REMINDER_FIELDS and not appointment.status.is_terminal:
            self.on_reminder_check(appointment.appointment_id)
        return appointment

    async def complete(self, appointment_id: str) -> Appointment:
        return await self.update(appointment_id, AppointmentUpdate(status=AppointmentStatus.COMPLETED))

    async def cancel(self, appointment_id: str) -> Appointment:
        appointment = await self.get(appointment_id)
        if appointment.status == AppointmentStatus.CANCELLED:
            return appointment
        return await self.update(appointment_id, AppointmentUpdate(status=AppointmentStatus.CANCELLED))

    async def _ensure_pet(self, pet_id: str) -> Pet:
        pet = await self.db.get(Pet, pet_id)
        if pet is None:
            raise ValidationError(f"Pet {pet_id} not found")
        return pet

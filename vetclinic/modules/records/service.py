"""Medical record service."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vetclinic.core.exceptions import NotFoundError, ValidationError
from vetclinic.modules.appointments.service import AppointmentService
from vetclinic.modules.records.models import Diagnosis, DiagnosisMedication, InventoryItem, Pet
from vetclinic.modules.records.schemas import DiagnosisCreate
from vetclinic.modules.users.models import User

logger = logging.getLogger(__name__)


class DiagnosisService:
    def __init__(self, db: AsyncSession, appointments: AppointmentService):
        self.db = db
        self.appointments = appointments

    async def create(self, payload: DiagnosisCreate, user: User | None = None) -> Diagnosis:
        """Record a diagnosis; a follow-up date also books a follow-up appointment.

        Prescribed medications do not change inventory stock.
        """
        if await self.db.get(Pet, payload.pet_id) is None:
            raise ValidationError(f"Pet {payload.pet_id} not found")
        inventory_ids = {med.inventory_id for med in payload.medications}
        if inventory_ids:
            result = await self.db.execute(select(InventoryItem.item_id).where(InventoryItem.item_id.in_(inventory_ids)))
            missing = inventory_ids - set(result.scalars().all())
            if missing:
                raise ValidationError(f"Unknown inventory items: {', '.join(sorted(missing))}")

        diagnosis = Diagnosis(
            **payload.model_dump(exclude={"medications"}),
            created_by=user.user_id if user else None,
        )
        diagnosis.medications = [
            DiagnosisMedication(inventory_id=med.inventory_id, quantity=med.quantity) for med in payload.medications
        ]
        self.db.add(diagnosis)
        await self.db.commit()
        await self.db.refresh(diagnosis)

        if payload.follow_up_date is not None:
            follow_up = await self.appointments.create_follow_up(payload.pet_id, payload.follow_up_date, user)
            logger.info("Diagnosis %s booked follow-up appointment %s", diagnosis.diagnosis_id,
                        follow_up.appointment_id)
        return diagnosis

    async def list_diagnoses(self, pet_id: str | None = None) -> list[Diagnosis]:
        stmt = select(Diagnosis).order_by(Diagnosis.date.desc())
        if pet_id:
            stmt = stmt.where(Diagnosis.pet_id == pet_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def delete(self, diagnosis_id: str) -> None:
        diagnosis = await self.db.get(Diagnosis, diagnosis_id)
        if diagnosis is None:
            raise NotFoundError("Diagnosis not found")
        await self.db.delete(diagnosis)
        await self.db.commit()

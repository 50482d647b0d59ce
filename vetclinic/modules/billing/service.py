"""Billing service layer: invoice creation and the unpaid -> paid transition."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from vetclinic.core.config import settings
from vetclinic.core.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from vetclinic.modules.billing.models import Bill, BillItem
from vetclinic.modules.billing.pricing import RequestedItem, compute_bill, load_inventory_prices
from vetclinic.modules.billing.schemas import BillCreate
from vetclinic.modules.records.models import Diagnosis, Owner, Pet
from vetclinic.shared.enums import BillStatus

logger = logging.getLogger(__name__)


class BillingService:
    def __init__(self, db: AsyncSession, allow_unknown_items: bool | None = None):
        self.db = db
        if allow_unknown_items is None:
            allow_unknown_items = settings.allow_unknown_inventory_items
        self.allow_unknown_items = allow_unknown_items

    async def create_bill(self, payload: BillCreate) -> Bill:
        if payload.consultation_fee < 0:
            raise ValidationError("consultation_fee must not be negative")
        if await self.db.get(Pet, payload.pet_id) is None:
            raise ValidationError(f"Pet {payload.pet_id} not found")
        if payload.diagnosis_id and await self.db.get(Diagnosis, payload.diagnosis_id) is None:
            raise ValidationError(f"Diagnosis {payload.diagnosis_id} not found")

        requested = [RequestedItem(item.inventory_id, item.quantity) for item in payload.items]
        prices = await load_inventory_prices(self.db, (item.inventory_id for item in requested))
        priced = compute_bill(
            payload.consultation_fee,
            requested,
            prices,
            allow_unknown=self.allow_unknown_items,
        )

        bill = Bill(
            pet_id=payload.pet_id,
            diagnosis_id=payload.diagnosis_id,
            consultation_fee=priced.consultation_fee,
            total_cost=priced.total,
            status=BillStatus.UNPAID,
        )
        bill.items = [
            BillItem(
                position=index,
                inventory_id=line.inventory_id,
                name=line.name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                subtotal=line.subtotal,
            )
            for index, line in enumerate(priced.lines)
        ]
        # Header and items share one transaction.
        self.db.add(bill)
        try:
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.exception("Failed to persist bill for pet %s", payload.pet_id)
            raise PersistenceError("Failed to save bill") from exc

        logger.info("Created bill %s for pet %s total=%s", bill.bill_id, bill.pet_id, bill.total_cost)
        return await self._load(bill.bill_id, refresh=True)

    async def mark_paid(self, bill_id: str) -> Bill:
        bill = await self.get_bill(bill_id)
        if bill.status == BillStatus.PAID:
            return bill
        bill.status = BillStatus.PAID
        try:
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise PersistenceError("Failed to update bill status") from exc
        logger.info("Bill %s marked paid", bill_id)
        return bill

    async def update_status(self, bill_id: str, new_status: BillStatus) -> Bill:
        if new_status == BillStatus.PAID:
            return await self.mark_paid(bill_id)
        bill = await self.get_bill(bill_id)
        if bill.status != new_status:
            raise InvalidTransitionError("A paid bill cannot be reopened")
        return bill

    async def get_bill(self, bill_id: str) -> Bill:
        return await self._load(bill_id)

    async def _load(self, bill_id: str, refresh: bool = False) -> Bill:
        stmt = select(Bill).options(selectinload(Bill.items)).where(Bill.bill_id == bill_id)
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        bill = result.scalar_one_or_none()
        if bill is None:
            raise NotFoundError("Bill not found")
        return bill

    async def list_bills(
        self,
        pet_id: str | None = None,
        status: BillStatus | None = None,
        owner_user_id: str | None = None,
    ) -> list[Bill]:
        stmt = select(Bill).order_by(Bill.created_at.desc())
        if pet_id:
            stmt = stmt.where(Bill.pet_id == pet_id)
        if status:
            stmt = stmt.where(Bill.status == status)
        if owner_user_id:
            stmt = stmt.join(Pet, Pet.pet_id == Bill.pet_id).join(Owner).where(Owner.user_id == owner_user_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

"""Billing schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from vetclinic.shared.enums import BillStatus


class BillItemRequest(BaseModel):
    inventory_id: str = Field(..., min_length=1)
    quantity: int = Field(1, gt=0)


class BillCreate(BaseModel):
    pet_id: str = Field(..., min_length=1)
    diagnosis_id: str | None = None
    consultation_fee: Decimal
    items: list[BillItemRequest] = Field(default_factory=list)


class BillStatusUpdate(BaseModel):
    status: BillStatus


class BillItemPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    inventory_id: str
    name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


class BillPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    bill_id: str = Field(serialization_alias="id")
    pet_id: str
    diagnosis_id: str | None = None
    consultation_fee: Decimal
    total_cost: Decimal
    status: BillStatus
    created_at: datetime
    items: list[BillItemPublic] = Field(default_factory=list)

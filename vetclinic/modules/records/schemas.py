"""Schemas for owners, pets, inventory and diagnoses."""

import datetime as dt
from decimal import Decimal
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

from vetclinic.shared.schemas import PartialUpdate


class OwnerCreate(BaseModel):
    name: str = Field(..., min_length=1)
    address: str | None = None
    contact: str | None = None
    user_id: str | None = None


class OwnerUpdate(PartialUpdate):
    required_fields: ClassVar[frozenset[str]] = frozenset({"name"})

    name: str | None = Field(None, min_length=1)
    address: str | None = None
    contact: str | None = None
    user_id: str | None = None


class OwnerPublic(OwnerCreate):
    model_config = ConfigDict(from_attributes=True)

    owner_id: str = Field(serialization_alias="id")


class PetCreate(BaseModel):
    owner_id: str
    name: str = Field(..., min_length=1)
    species: str | None = None
    sex: str | None = None
    color: str | None = None
    birthday: dt.date | None = None


class PetUpdate(PartialUpdate):
    required_fields: ClassVar[frozenset[str]] = frozenset({"owner_id", "name"})

    owner_id: str | None = None
    name: str | None = Field(None, min_length=1)
    species: str | None = None
    sex: str | None = None
    color: str | None = None
    birthday: dt.date | None = None


class PetPublic(PetCreate):
    model_config = ConfigDict(from_attributes=True)

    pet_id: str = Field(serialization_alias="id")


class InventoryCreate(BaseModel):
    name: str = Field(..., min_length=1)
    category: str | None = None
    quantity: int = Field(0, ge=0)
    price: Decimal = Field(..., ge=0)
    expiry_date: dt.date | None = None


class InventoryUpdate(PartialUpdate):
    required_fields: ClassVar[frozenset[str]] = frozenset({"name", "quantity", "price"})

    name: str | None = Field(None, min_length=1)
    category: str | None = None
    quantity: int | None = Field(None, ge=0)
    price: Decimal | None = Field(None, ge=0)
    expiry_date: dt.date | None = None


class InventoryPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    item_id: str = Field(serialization_alias="id")
    name: str
    category: str | None = None
    quantity: int
    price: Decimal
    expiry_date: dt.date | None = None


class MedicationEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    inventory_id: str
    quantity: int = Field(1, gt=0)


class DiagnosisCreate(BaseModel):
    pet_id: str
    date: dt.date
    vaccination: str | None = None
    weight: Decimal | None = None
    temperature: Decimal | None = None
    test: str | None = None
    dx: str | None = None
    rx: str | None = None
    remarks: str | None = None
    follow_up_date: dt.date | None = None
    medications: list[MedicationEntry] = Field(default_factory=list)


class DiagnosisPublic(DiagnosisCreate):
    model_config = ConfigDict(from_attributes=True)

    diagnosis_id: str = Field(serialization_alias="id")
    created_by: str | None = None

"""ORM models for owners, pets, inventory and medical records."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Date, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vetclinic.core.database import Base
from vetclinic.shared.models import TimestampMixin, ulid_pk

if TYPE_CHECKING:  # pragma: no cover
    from vetclinic.modules.appointments.models import Appointment


class Owner(Base, TimestampMixin):
    __tablename__ = "owners"

    owner_id: Mapped[str] = ulid_pk()
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    address: Mapped[str | None] = mapped_column(String(255))
    contact: Mapped[str | None] = mapped_column(String(32))
    user_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("users.user_id", ondelete="SET NULL"),
    )

    pets: Mapped[list[Pet]] = relationship(back_populates="owner", cascade="all,delete-orphan")


class Pet(Base, TimestampMixin):
    __tablename__ = "pets"

    pet_id: Mapped[str] = ulid_pk()
    owner_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("owners.owner_id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    species: Mapped[str | None] = mapped_column(String(50))
    sex: Mapped[str | None] = mapped_column(String(10))
    color: Mapped[str | None] = mapped_column(String(50))
    birthday: Mapped[dt.date | None] = mapped_column(Date)

    owner: Mapped[Owner] = relationship(back_populates="pets")
    appointments: Mapped[list[Appointment]] = relationship(back_populates="pet")
    diagnoses: Mapped[list[Diagnosis]] = relationship(back_populates="pet")


class InventoryItem(Base, TimestampMixin):
    __tablename__ = "inventory"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_inventory_price_non_negative"),
    )

    item_id: Mapped[str] = ulid_pk()
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    category: Mapped[str | None] = mapped_column(String(60))
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    expiry_date: Mapped[dt.date | None] = mapped_column(Date)


class Diagnosis(Base, TimestampMixin):
    __tablename__ = "diagnoses"

    diagnosis_id: Mapped[str] = ulid_pk()
    pet_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("pets.pet_id", ondelete="CASCADE"),
        nullable=False,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    vaccination: Mapped[str | None] = mapped_column(String(120))
    weight: Mapped[Decimal | None] = mapped_column(Numeric(6, 2))
    temperature: Mapped[Decimal | None] = mapped_column(Numeric(4, 1))
    test: Mapped[str | None] = mapped_column(Text)
    dx: Mapped[str | None] = mapped_column(Text)
    rx: Mapped[str | None] = mapped_column(Text)
    remarks: Mapped[str | None] = mapped_column(Text)
    follow_up_date: Mapped[dt.date | None] = mapped_column(Date)
    created_by: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("users.user_id", ondelete="SET NULL"),
    )

    pet: Mapped[Pet] = relationship(back_populates="diagnoses")
    medications: Mapped[list[DiagnosisMedication]] = relationship(
        back_populates="diagnosis",
        cascade="all,delete-orphan",
        lazy="selectin",
    )


class DiagnosisMedication(Base):
    __tablename__ = "diagnosis_medications"

    medication_id: Mapped[str] = ulid_pk()
    diagnosis_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("diagnoses.diagnosis_id", ondelete="CASCADE"),
        nullable=False,
    )
    inventory_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("inventory.item_id", ondelete="RESTRICT"),
        nullable=False,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    diagnosis: Mapped[Diagnosis] = relationship(back_populates="medications")


# Late imports for relationship targets.
from vetclinic.modules.appointments.models import Appointment  # noqa: E402

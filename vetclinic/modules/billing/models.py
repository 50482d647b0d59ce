"""Billing ORM models."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Enum, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vetclinic.core.database import Base
from vetclinic.shared.enums import BillStatus, enum_values
from vetclinic.shared.models import TimestampMixin, ulid_pk

if TYPE_CHECKING:  # pragma: no cover
    from vetclinic.modules.records.models import Pet


class Bill(Base, TimestampMixin):
    __tablename__ = "billing"
    __table_args__ = (
        CheckConstraint("consultation_fee >= 0", name="ck_billing_fee_non_negative"),
    )

    bill_id: Mapped[str] = ulid_pk()
    pet_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("pets.pet_id", ondelete="RESTRICT"),
        nullable=False,
    )
    diagnosis_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("diagnoses.diagnosis_id", ondelete="SET NULL"),
    )
    consultation_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[BillStatus] = mapped_column(
        Enum(
            BillStatus,
            values_callable=enum_values,
            validate_strings=True,
            name="billstatus",
        ),
        default=BillStatus.UNPAID,
        nullable=False,
    )

    pet: Mapped[Pet] = relationship()
    items: Mapped[list[BillItem]] = relationship(
        back_populates="bill",
        cascade="all,delete-orphan",
        lazy="selectin",
        order_by="BillItem.position",
    )


class BillItem(Base):
    __tablename__ = "billing_items"

    bill_item_id: Mapped[str] = ulid_pk()
    bill_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("billing.bill_id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Snapshot reference; inventory rows may be edited or removed later.
    inventory_id: Mapped[str] = mapped_column(String(26), nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    bill: Mapped[Bill] = relationship(back_populates="items")


# Late imports for relationship targets.
from vetclinic.modules.records.models import Pet  # noqa: E402

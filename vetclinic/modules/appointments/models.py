"""Appointment ORM model."""

from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Date, Enum, ForeignKey, Index, String, Text, Time
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vetclinic.core.database import Base
from vetclinic.shared.enums import AppointmentStatus, Frequency, enum_values
from vetclinic.shared.models import TimestampMixin, ulid_pk

if TYPE_CHECKING:  # pragma: no cover
    from vetclinic.modules.records.models import Pet


class Appointment(Base, TimestampMixin):
    __tablename__ = "appointments"
    __table_args__ = (Index("ix_appointments_date_status", "date", "status"),)

    appointment_id: Mapped[str] = ulid_pk()
    pet_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("pets.pet_id", ondelete="CASCADE"),
        nullable=False,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    time: Mapped[dt.time] = mapped_column(Time, nullable=False)
    frequency: Mapped[Frequency] = mapped_column(
        Enum(
            Frequency,
            values_callable=enum_values,
            validate_strings=True,
            name="appointmentfrequency",
        ),
        default=Frequency.ONCE,
        nullable=False,
    )
    reason: Mapped[str | None] = mapped_column(Text)
    status: Mapped[AppointmentStatus] = mapped_column(
        Enum(
            AppointmentStatus,
            values_callable=enum_values,
            validate_strings=True,
            name="appointmentstatus",
        ),
        default=AppointmentStatus.SCHEDULED,
        nullable=False,
    )
    sms_1d_sent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    sms_sameday_sent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_by: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("users.user_id", ondelete="SET NULL"),
    )

    pet: Mapped[Pet] = relationship(back_populates="appointments")

    @property
    def display_status(self) -> AppointmentStatus:
        return self.status.normalized()


# Late imports for relationship targets.
from vetclinic.modules.records.models import Pet  # noqa: E402

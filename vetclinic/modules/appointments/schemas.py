"""Appointments schemas."""

import datetime as dt
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vetclinic.shared.enums import AppointmentStatus, Frequency
from vetclinic.shared.schemas import PartialUpdate


class AppointmentPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    appointment_id: str = Field(serialization_alias="id")
    pet_id: str
    date: dt.date
    time: dt.time
    frequency: Frequency
    reason: str | None = None
    status: AppointmentStatus
    display_status: AppointmentStatus
    sms_1d_sent: bool
    sms_sameday_sent: bool
    created_by: str | None = None


class AppointmentCreate(BaseModel):
    pet_id: str = Field(..., min_length=1)
    date: dt.date
    time: dt.time
    frequency: Frequency = Frequency.ONCE
    reason: str | None = None
    status: AppointmentStatus = AppointmentStatus.SCHEDULED

    @field_validator("status")
    @classmethod
    def _only_open_on_create(cls, value: AppointmentStatus) -> AppointmentStatus:
        value = value.normalized()
        if value.is_terminal:
            raise ValueError("New appointments must be Scheduled")
        return value


class AppointmentUpdate(PartialUpdate):
    required_fields: ClassVar[frozenset[str]] = frozenset({"pet_id", "date", "time", "frequency", "status"})

    pet_id: str | None = None
    date: dt.date | None = None
    time: dt.time | None = None
    frequency: Frequency | None = None
    reason: str | None = None
    status: AppointmentStatus | None = None

    @field_validator("status")
    @classmethod
    def _normalize_status(cls, value: AppointmentStatus | None) -> AppointmentStatus | None:
        return value.normalized() if value is not None else None

"""Shared enumerations used across modules."""

from __future__ import annotations

from enum import StrEnum
from typing import Iterable, TypeVar

EnumType = TypeVar("EnumType", bound=StrEnum)


def enum_values(enum_cls: Iterable[EnumType]) -> list[str]:
    """Return the .value for each enum member (used by SQLAlchemy)."""
    return [member.value for member in enum_cls]


class UserRole(StrEnum):
    DOCTOR = "doctor"
    SECRETARY = "secretary"
    CLIENT = "client"


class AppointmentStatus(StrEnum):
    SCHEDULED = "Scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    # Legacy rows written by the first UI; displayed as Scheduled.
    PENDING = "pending"
    CONFIRMED = "confirmed"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_APPOINTMENT_STATUSES

    def normalized(self) -> "AppointmentStatus":
        if self in (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED):
            return AppointmentStatus.SCHEDULED
        return self


TERMINAL_APPOINTMENT_STATUSES = frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED})


class Frequency(StrEnum):
    ONCE = "once"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "3months"
    SEMIANNUAL = "6months"


class ReminderType(StrEnum):
    DAY_BEFORE = "1d"
    SAME_DAY = "sameday"

    @property
    def flag_name(self) -> str:
        if self is ReminderType.SAME_DAY:
            return "sms_sameday_sent"
        return "sms_1d_sent"


class BillStatus(StrEnum):
    UNPAID = "unpaid"
    PAID = "paid"

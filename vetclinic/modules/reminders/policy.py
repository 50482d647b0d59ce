"""Decide which SMS reminder, if any, an appointment is due for.

Everything here is pure. "Today" is the calendar date in the clinic's
timezone, never the host's. Appointment dates are stored as plain
clinic-local dates.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Protocol
from zoneinfo import ZoneInfo

from vetclinic.core.config import settings
from vetclinic.shared.enums import AppointmentStatus, ReminderType


class ReminderSubject(Protocol):
    date: date
    status: AppointmentStatus | str
    sms_1d_sent: bool
    sms_sameday_sent: bool


@dataclass(frozen=True)
class ReminderDecision:
    reminder_type: ReminderType

    @property
    def flag_name(self) -> str:
        return self.reminder_type.flag_name


def clinic_today(now: datetime | None = None, tz_name: str | None = None) -> date:
    """Return the clinic-local calendar date for an aware ``now`` (default: current time)."""
    if now is None:
        now = datetime.now(tz=timezone.utc)
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")
    return now.astimezone(ZoneInfo(tz_name or settings.clinic_timezone)).date()


def decide(appointment: ReminderSubject, today: date) -> ReminderDecision | None:
    if AppointmentStatus(appointment.status).is_terminal:
        return None
    # Same-day wins if both ever matched.
    if appointment.date == today and not appointment.sms_sameday_sent:
        return ReminderDecision(ReminderType.SAME_DAY)
    if appointment.date == today + timedelta(days=1) and not appointment.sms_1d_sent:
        return ReminderDecision(ReminderType.DAY_BEFORE)
    return None

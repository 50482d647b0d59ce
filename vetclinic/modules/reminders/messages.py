"""SMS reminder templates."""

from datetime import time

from vetclinic.core.config import settings
from vetclinic.shared.enums import ReminderType

SAME_DAY_TEMPLATE = (
    "Hi {owner}, this is {clinic} reminding you of {pet}'s scheduled appointment TODAY at {at}. See you!"
)
DAY_BEFORE_TEMPLATE = (
    "Hi {owner}, this is {clinic}. Just a friendly reminder that {pet} has an appointment TOMORROW at {at}."
)


def format_time_12h(value: time) -> str:
    """Render 13:09 as ``1:09 PM``."""
    period = "PM" if value.hour >= 12 else "AM"
    hour = value.hour % 12 or 12
    return f"{hour}:{value.minute:02d} {period}"


def render_reminder(
    reminder_type: ReminderType,
    owner_name: str,
    pet_name: str,
    at: time,
    reason: str | None = None,
    clinic_name: str | None = None,
) -> str:
    template = SAME_DAY_TEMPLATE if reminder_type == ReminderType.SAME_DAY else DAY_BEFORE_TEMPLATE
    message = template.format(
        owner=owner_name,
        clinic=clinic_name or settings.clinic_name,
        pet=pet_name,
        at=format_time_12h(at),
    )
    reason = (reason or "").strip().rstrip(".")
    if reason:
        message = f"{message} Reason: {reason}."
    return message

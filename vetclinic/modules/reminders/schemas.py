"""Reminder request/response schemas."""

from pydantic import BaseModel, Field

from vetclinic.shared.enums import ReminderType


class ManualSmsRequest(BaseModel):
    appointment_id: str = Field(..., min_length=1)
    type: ReminderType


class ManualSmsResponse(BaseModel):
    message: str
    appointment_id: str
    type: ReminderType
    already_sent: bool = False
    in_progress: bool = False


class DispatchFailurePublic(BaseModel):
    appointment_id: str
    type: ReminderType
    error: str


class SweepResponse(BaseModel):
    message: str = "Reminders processed"
    sent_count: int
    failures: list[DispatchFailurePublic] = Field(default_factory=list)

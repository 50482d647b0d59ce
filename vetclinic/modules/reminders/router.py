"""Reminder API routes: manual send and the scheduler hook."""

from fastapi import APIRouter, Depends, Request

from vetclinic.core.deps import require_staff, verify_cron_secret
from vetclinic.modules.reminders.dispatcher import ReminderDispatcher
from vetclinic.modules.reminders.schemas import (
    DispatchFailurePublic,
    ManualSmsRequest,
    ManualSmsResponse,
    SweepResponse,
)
from vetclinic.modules.users.models import User

router = APIRouter(prefix="/api/v1", tags=["reminders"])


def get_dispatcher(request: Request) -> ReminderDispatcher:
    return request.app.state.reminder_dispatcher


@router.post("/send-sms", response_model=ManualSmsResponse)
async def send_sms(
    payload: ManualSmsRequest,
    _: User = Depends(require_staff),
    dispatcher: ReminderDispatcher = Depends(get_dispatcher),
) -> ManualSmsResponse:
    result = await dispatcher.send_manual(payload.appointment_id, payload.type)
    if result.in_progress:
        message = "SMS send already in progress"
    elif result.already_sent:
        message = "SMS already sent"
    else:
        message = "SMS sent successfully"
    return ManualSmsResponse(
        message=message,
        appointment_id=result.appointment_id,
        type=result.reminder_type,
        already_sent=result.already_sent,
        in_progress=result.in_progress,
    )


@router.post("/cron/send-reminders", response_model=SweepResponse, dependencies=[Depends(verify_cron_secret)])
async def send_reminders(dispatcher: ReminderDispatcher = Depends(get_dispatcher)) -> SweepResponse:
    result = await dispatcher.dispatch()
    return SweepResponse(
        sent_count=result.sent_count,
        failures=[
            DispatchFailurePublic(appointment_id=failure.appointment_id, type=failure.reminder_type, error=failure.error)
            for failure in result.failures
        ],
    )

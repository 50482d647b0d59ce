"""Appointments API routes."""

import datetime as dt

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from vetclinic.core.database import get_db
from vetclinic.core.deps import get_current_user, require_staff
from vetclinic.modules.appointments.schemas import AppointmentCreate, AppointmentPublic, AppointmentUpdate
from vetclinic.modules.appointments.service import AppointmentService
from vetclinic.modules.reminders.dispatcher import ReminderDispatcher
from vetclinic.modules.reminders.router import get_dispatcher
from vetclinic.modules.reminders.tasks import run_scoped_dispatch
from vetclinic.modules.users.models import User
from vetclinic.shared.enums import AppointmentStatus

router = APIRouter(prefix="/api/v1/appointments", tags=["appointments"])


def get_service(
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    dispatcher: ReminderDispatcher = Depends(get_dispatcher),
) -> AppointmentService:
    def schedule_reminder_check(appointment_id: str) -> None:
        background_tasks.add_task(run_scoped_dispatch, dispatcher, appointment_id)

    return AppointmentService(db, on_reminder_check=schedule_reminder_check)


@router.get("", response_model=list[AppointmentPublic])
async def list_appointments(
    appointment_status: AppointmentStatus | None = None,
    on_date: dt.date | None = None,
    pet_id: str | None = None,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_service),
) -> list[AppointmentPublic]:
    owner_user_id = None if current_user.is_staff else current_user.user_id
    return await service.list_appointments(
        status=appointment_status,
        on_date=on_date,
        pet_id=pet_id,
        owner_user_id=owner_user_id,
    )


@router.post("", response_model=AppointmentPublic, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    payload: AppointmentCreate,
    current_user: User = Depends(require_staff),
    service: AppointmentService = Depends(get_service),
) -> AppointmentPublic:
    return await service.create(payload, current_user)


@router.get("/{appointment_id}", response_model=AppointmentPublic)
async def get_appointment(
    appointment_id: str,
    _: User = Depends(require_staff),
    service: AppointmentService = Depends(get_service),
) -> AppointmentPublic:
    return await service.get(appointment_id)


@router.put("/{appointment_id}", response_model=AppointmentPublic)
async def update_appointment(
    appointment_id: str,
    payload: AppointmentUpdate,
    _: User = Depends(require_staff),
    service: AppointmentService = Depends(get_service),
) -> AppointmentPublic:
    return await service.update(appointment_id, payload)


@router.delete("/{appointment_id}", response_model=AppointmentPublic)
async def cancel_appointment(
    appointment_id: str,
    _: User = Depends(require_staff),
    service: AppointmentService = Depends(get_service),
) -> AppointmentPublic:
    """Cancel instead of deleting so the record keeps suppressing reminders."""
    return await service.cancel(appointment_id)

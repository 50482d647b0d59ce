"""Staff routes for owners, pets, inventory and diagnoses."""

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vetclinic.core.database import get_db
from vetclinic.core.deps import require_doctor, require_staff
from vetclinic.core.exceptions import BusinessLogicError, NotFoundError, ValidationError
from vetclinic.modules.appointments.service import AppointmentService
from vetclinic.modules.records.models import InventoryItem, Owner, Pet
from vetclinic.modules.records.schemas import (
    DiagnosisCreate,
    DiagnosisPublic,
    InventoryCreate,
    InventoryPublic,
    InventoryUpdate,
    OwnerCreate,
    OwnerPublic,
    OwnerUpdate,
    PetCreate,
    PetPublic,
    PetUpdate,
)
from vetclinic.modules.records.service import DiagnosisService
from vetclinic.modules.reminders.dispatcher import ReminderDispatcher
from vetclinic.modules.reminders.router import get_dispatcher
from vetclinic.modules.reminders.tasks import run_scoped_dispatch
from vetclinic.modules.users.models import User

router = APIRouter(prefix="/api/v1", tags=["records"])


async def _get_entity(db: AsyncSession, model, column, value, not_found: str):
    stmt = select(model).where(column == value)
    result = await db.execute(stmt)
    entity = result.scalar_one_or_none()
    if entity is None:
        raise NotFoundError(not_found)
    return entity


def get_diagnosis_service(
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    dispatcher: ReminderDispatcher = Depends(get_dispatcher),
) -> DiagnosisService:
    def schedule_reminder_check(appointment_id: str) -> None:
        background_tasks.add_task(run_scoped_dispatch, dispatcher, appointment_id)

    return DiagnosisService(db, AppointmentService(db, on_reminder_check=schedule_reminder_check))


@router.post("/owners", response_model=OwnerPublic, status_code=status.HTTP_201_CREATED)
async def create_owner(
    payload: OwnerCreate,
    _: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> OwnerPublic:
    owner = Owner(**payload.model_dump())
    db.add(owner)
    await db.commit()
    await db.refresh(owner)
    return owner


@router.get("/owners", response_model=list[OwnerPublic])
async def list_owners(
    _: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> list[OwnerPublic]:
    result = await db.execute(select(Owner).order_by(Owner.name))
    return list(result.scalars().all())


@router.put("/owners/{owner_id}", response_model=OwnerPublic)
async def update_owner(
    owner_id: str,
    payload: OwnerUpdate,
    _: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> OwnerPublic:
    owner = await _get_entity(db, Owner, Owner.owner_id, owner_id, "Owner not found")
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(owner, field, value)
    await db.commit()
    await db.refresh(owner)
    return owner


@router.post("/pets", response_model=PetPublic, status_code=status.HTTP_201_CREATED)
async def create_pet(
    payload: PetCreate,
    _: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> PetPublic:
    if await db.get(Owner, payload.owner_id) is None:
        raise ValidationError(f"Owner {payload.owner_id} not found")
    pet = Pet(**payload.model_dump())
    db.add(pet)
    await db.commit()
    await db.refresh(pet)
    return pet


@router.get("/pets", response_model=list[PetPublic])
async def list_pets(
    owner_id: str | None = None,
    _: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> list[PetPublic]:
    stmt = select(Pet).order_by(Pet.name)
    if owner_id:
        stmt = stmt.where(Pet.owner_id == owner_id)
    result = await db.execute(stmt)
    return list(result.scalars().all())


@router.put("/pets/{pet_id}", response_model=PetPublic)
async def update_pet(
    pet_id: str,
    payload: PetUpdate,
    _: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> PetPublic:
    pet = await _get_entity(db, Pet, Pet.pet_id, pet_id, "Pet not found")
    update_data = payload.model_dump(exclude_unset=True)
    if "owner_id" in update_data and await db.get(Owner, update_data["owner_id"]) is None:
        raise ValidationError(f"Owner {update_data['owner_id']} not found")
    for field, value in update_data.items():
        setattr(pet, field, value)
    await db.commit()
    await db.refresh(pet)
    return pet


@router.post("/inventory", response_model=InventoryPublic, status_code=status.HTTP_201_CREATED)
async def create_inventory_item(
    payload: InventoryCreate,
    _: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> InventoryPublic:
    item = InventoryItem(**payload.model_dump())
    db.add(item)
    await db.commit()
    await db.refresh(item)
    return item


@router.get("/inventory", response_model=list[InventoryPublic])
async def list_inventory(
    _: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> list[InventoryPublic]:
    result = await db.execute(select(InventoryItem).order_by(InventoryItem.name))
    return list(result.scalars().all())


@router.put("/inventory/{item_id}", response_model=InventoryPublic)
async def update_inventory_item(
    item_id: str,
    payload: InventoryUpdate,
    _: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> InventoryPublic:
    item = await _get_entity(db, InventoryItem, InventoryItem.item_id, item_id, "Inventory item not found")
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(item, field, value)
    await db.commit()
    await db.refresh(item)
    return item


@router.delete("/inventory/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_inventory_item(
    item_id: str,
    _: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> None:
    item = await _get_entity(db, InventoryItem, InventoryItem.item_id, item_id, "Inventory item not found")
    await db.delete(item)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise BusinessLogicError("Inventory item is referenced by medical records", status.HTTP_409_CONFLICT)


@router.post("/diagnoses", response_model=DiagnosisPublic, status_code=status.HTTP_201_CREATED)
async def create_diagnosis(
    payload: DiagnosisCreate,
    current_user: User = Depends(require_doctor),
    service: DiagnosisService = Depends(get_diagnosis_service),
) -> DiagnosisPublic:
    return await service.create(payload, current_user)


@router.get("/diagnoses", response_model=list[DiagnosisPublic])
async def list_diagnoses(
    pet_id: str | None = None,
    _: User = Depends(require_staff),
    service: DiagnosisService = Depends(get_diagnosis_service),
) -> list[DiagnosisPublic]:
    return await service.list_diagnoses(pet_id)


@router.delete("/diagnoses/{diagnosis_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_diagnosis(
    diagnosis_id: str,
    _: User = Depends(require_doctor),
    service: DiagnosisService = Depends(get_diagnosis_service),
) -> None:
    await service.delete(diagnosis_id)

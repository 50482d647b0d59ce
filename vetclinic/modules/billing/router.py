"""Billing API routes."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from vetclinic.core.database import get_db
from vetclinic.core.deps import get_current_user, require_staff
from vetclinic.modules.billing.schemas import BillCreate, BillPublic, BillStatusUpdate
from vetclinic.modules.billing.service import BillingService
from vetclinic.modules.users.models import User
from vetclinic.shared.enums import BillStatus
from vetclinic.shared.schemas import CreatedResponse

router = APIRouter(prefix="/api/v1/billing", tags=["billing"])


def get_service(db: AsyncSession = Depends(get_db)) -> BillingService:
    return BillingService(db)


@router.post("", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_bill(
    payload: BillCreate,
    _: User = Depends(require_staff),
    service: BillingService = Depends(get_service),
) -> CreatedResponse:
    bill = await service.create_bill(payload)
    return CreatedResponse(id=bill.bill_id, message="Billed")


@router.get("", response_model=list[BillPublic])
async def list_bills(
    pet_id: str | None = None,
    bill_status: BillStatus | None = None,
    current_user: User = Depends(get_current_user),
    service: BillingService = Depends(get_service),
) -> list[BillPublic]:
    owner_user_id = None if current_user.is_staff else current_user.user_id
    return await service.list_bills(pet_id=pet_id, status=bill_status, owner_user_id=owner_user_id)


@router.get("/{bill_id}", response_model=BillPublic)
async def get_bill(
    bill_id: str,
    _: User = Depends(require_staff),
    service: BillingService = Depends(get_service),
) -> BillPublic:
    return await service.get_bill(bill_id)


@router.put("/{bill_id}", response_model=BillPublic)
async def update_bill_status(
    bill_id: str,
    payload: BillStatusUpdate,
    _: User = Depends(require_staff),
    service: BillingService = Depends(get_service),
) -> BillPublic:
    return await service.update_status(bill_id, payload.status)

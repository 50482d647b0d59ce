"""Current-user route consumed by the dashboards."""

from fastapi import APIRouter, Depends

from vetclinic.core.deps import get_current_user
from vetclinic.modules.users.models import User
from vetclinic.modules.users.schemas import UserPublic

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("/me", response_model=UserPublic)
async def get_me(current_user: User = Depends(get_current_user)) -> User:
    return current_user

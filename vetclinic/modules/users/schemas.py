"""Pydantic schemas for clinic users."""

from pydantic import BaseModel, ConfigDict, Field

from vetclinic.shared.enums import UserRole


class UserPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    user_id: str = Field(serialization_alias="id")
    email: str
    name: str | None = None
    role: UserRole

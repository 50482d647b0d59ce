"""ORM models for clinic staff and client accounts."""

from __future__ import annotations

from sqlalchemy import Boolean, Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from vetclinic.core.database import Base
from vetclinic.shared.enums import UserRole, enum_values
from vetclinic.shared.models import TimestampMixin, ulid_pk


class User(Base, TimestampMixin):
    __tablename__ = "users"

    user_id: Mapped[str] = ulid_pk()
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    name: Mapped[str | None] = mapped_column(String(100))
    role: Mapped[UserRole] = mapped_column(
        Enum(
            UserRole,
            values_callable=enum_values,
            validate_strings=True,
            name="userrole",
        ),
        nullable=False,
        default=UserRole.CLIENT,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    @property
    def is_staff(self) -> bool:
        return self.role in (UserRole.DOCTOR, UserRole.SECRETARY)

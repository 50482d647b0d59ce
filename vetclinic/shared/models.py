"""Reusable ORM mixins and column helpers."""

from datetime import datetime

import ulid
from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

ULID_LENGTH = 26


def generate_ulid() -> str:
    """Return a string ULID for primary keys."""
    return str(ulid.new())


def ulid_pk() -> Mapped[str]:
    return mapped_column(String(ULID_LENGTH), primary_key=True, default=generate_ulid)


class TimestampMixin:
    """Track creation/update times in UTC."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

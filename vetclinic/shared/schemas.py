"""Common Pydantic schemas."""

from typing import ClassVar

from pydantic import BaseModel, model_validator


class CreatedResponse(BaseModel):
    id: str
    message: str = "Created"


class PartialUpdate(BaseModel):
    """Base for PATCH-like bodies: omitted fields are left alone.

    Fields listed in ``required_fields`` map to NOT NULL columns, so an explicit
    ``null`` for them is rejected instead of reaching the database.
    """

    required_fields: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def reject_null_required(self) -> "PartialUpdate":
        nulls = sorted(
            name for name in self.model_fields_set & self.required_fields if getattr(self, name) is None
        )
        if nulls:
            raise ValueError(f"{', '.join(nulls)} may not be null")
        return self

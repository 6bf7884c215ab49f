# ruff: noqa: TC001, TC003
from __future__ import annotations

import datetime
import uuid

from pydantic import BaseModel, Field, field_validator

from rotadesk.models.enums import ShiftType


class ShiftResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    date: datetime.date
    shift_type: ShiftType
    swapped_with_user_id: uuid.UUID | None


class ShiftListResponse(BaseModel):
    items: list[ShiftResponse]
    total: int


class ShiftImportRow(BaseModel):
    """One parsed cell of a roster upload.

    An empty cell arrives as ``None`` (or an empty string) and leaves any
    existing shift for that user and date untouched.
    """

    user_id: uuid.UUID
    date: datetime.date
    shift_type: ShiftType | None = None

    @field_validator("shift_type", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ShiftImportPayload(BaseModel):
    rows: list[ShiftImportRow] = Field(max_length=10000)


class ShiftImportResult(BaseModel):
    created: int
    updated: int
    skipped: int

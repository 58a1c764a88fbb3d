"""Pydantic schemas for students."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from schooldesk.schemas.common import Money


class StudentCreate(BaseModel):
    """Payload for student:create."""

    student_name: str = Field(..., min_length=1, max_length=255)
    guardian_name: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)
    address: str | None = Field(None, max_length=500)
    date_of_birth: date | None = None
    is_active: bool = True


class StudentUpdate(BaseModel):
    """Payload for student:update. Credit is not editable.

    student_name and is_active may be left out but not sent as null.
    """

    student_name: str = Field(None, min_length=1, max_length=255)
    guardian_name: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)
    address: str | None = Field(None, max_length=500)
    date_of_birth: date | None = None
    is_active: bool = None


class StudentRecord(BaseModel):
    """Student as returned to the UI."""

    id: int
    student_name: str
    guardian_name: str | None = None
    phone: str | None = None
    address: str | None = None
    date_of_birth: date | None = None
    is_active: bool
    credit: Money
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StudentBalance(BaseModel):
    """Money summary for one student."""

    student_id: int
    credit: Decimal
    admission_due: Decimal
    monthly_due: Decimal
    total_due: Decimal
    total_paid: Decimal

"""Pydantic schemas for classes."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from schooldesk.schemas.common import Money


class ClassCreate(BaseModel):
    """Payload for class:create."""

    name: str = Field(..., min_length=1, max_length=100)
    admission_fee: Money = Decimal("0")
    monthly_fee: Money = Decimal("0")
    remark: str | None = None


class ClassUpdate(BaseModel):
    """Payload for class:update. Only fields sent are changed.

    name and the fees may be left out but not sent as null.
    """

    name: str = Field(None, min_length=1, max_length=100)
    admission_fee: Money = None
    monthly_fee: Money = None
    remark: str | None = None


class ClassRecord(BaseModel):
    """Class as returned to the UI."""

    id: int
    name: str
    admission_fee: Money
    monthly_fee: Money
    remark: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
